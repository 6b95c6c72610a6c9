# bootstrap/config.py
"""
Static constants and default values for the DSMR reader container bootstrap.

Paths in this module match the layout of the DSMR reader Docker image. Most of
them can be overridden through the settings models in
bootstrap.config_models, which use these values as their defaults.
"""

from pathlib import Path

# --- Default Global Variable Values ---
LOG_PREFIX_DEFAULT: str = "[DSMR]"
RETRY_BUDGET_DEFAULT: int = 60
RETRY_INTERVAL_SECONDS: float = 1.0

APP_DIR_DEFAULT: str = "/dsmr"
PYTHON_EXECUTABLE_DEFAULT: str = "python3"

# --- Database ---
DB_PORT_DEFAULT: int = 5432
DB_PROBE_PG_ISREADY: str = "pg_isready"
DB_PROBE_PSYCOPG: str = "psycopg"
DB_PROBE_TIMEOUT_SECONDS: int = 1

# --- Devices and runtime files ---
SERIAL_DEVICE_MARKER: str = "/dev/ttyUSB0"
SERIAL_DEVICE_GLOB: str = "/dev/ttyUSB*"
SERIAL_DEVICE_MODE: int = 0o666
PID_FILE_GLOB: str = "/var/tmp/*.pid"

# --- Remote datalogger ---
DATALOGGER_ENV_FILE_DEFAULT: str = "/dsmr/.env"
RUN_MODE_STANDALONE: str = "standalone"
RUN_MODE_REMOTE_DATALOGGER: str = "remote_datalogger"

# --- Nginx ---
NGINX_MAIN_CONF_DEFAULT: str = "/etc/nginx/nginx.conf"
NGINX_SITE_CONF_DEFAULT: str = "/etc/nginx/conf.d/dsmr-webinterface.conf"
NGINX_HTPASSWD_DEFAULT: str = "/etc/nginx/htpasswd"
SSL_CERTIFICATE_DEFAULT: str = "/etc/ssl/private/fullchain.pem"
SSL_CERTIFICATE_KEY_DEFAULT: str = "/etc/ssl/private/privkey.pem"

# --- Supervisor ---
SUPERVISOR_COMMAND_DEFAULT: list[str] = ["supervisord", "-n"]

# Root of this project, used to locate an optional bundled config file.
BOOTSTRAP_PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_FILE_DEFAULT: str = "bootstrap.yaml"
