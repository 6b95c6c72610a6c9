# tests/conftest.py
import os

import pytest

from bootstrap.config_models import (
    AdminSettings,
    BootstrapSettings,
    DatabaseSettings,
    DataloggerSettings,
    Flavor,
    NginxSettings,
)

# Variables read by the settings models; removed so the host environment
# cannot leak into the tests.
ENV_NAMES = {
    "DSMRREADER_ADMIN_USER",
    "DSMRREADER_ADMIN_EMAIL",
    "DSMRREADER_ADMIN_PASSWORD",
    "DSMR_USER",
    "DSMR_EMAIL",
    "DSMR_PASSWORD",
    "DB_HOST",
    "DB_PORT",
    "DB_USER",
    "DB_NAME",
    "DB_PASS",
    "DB_PROBE",
    "DEBUG",
    "COMMAND",
    "TIMER",
    "CONTAINER_RUN_MODE",
    "DSMR_APP_DIR",
    "ENABLE_NGINX_SSL",
    "ENABLE_HTTP_AUTH",
    "HTTP_AUTH_USERNAME",
    "HTTP_AUTH_PASSWORD",
    "LOG_LEVEL",
}
ENV_PREFIXES = (
    "DATALOGGER_",
    "BOOTSTRAP_",
    "NGINX_",
    "DSMR_ADMIN_",
    "DSMR_DB_",
    "DJANGO_DATABASE_",
)

SITE_CONF = """\
server {
    listen 80;
    server_name _;

##    auth_basic "Restricted application";
##    auth_basic_user_file /etc/nginx/htpasswd;

    location /static {
        alias /var/www/dsmrreader/static;
    }

    location / {
        proxy_read_timeout 500;
        proxy_pass http://127.0.0.1:8000;
        proxy_set_header Host $http_host;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
    }
}
"""


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove every bootstrap related variable from the environment."""
    for name in list(os.environ):
        if name in ENV_NAMES or name.startswith(ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def site_conf(tmp_path):
    """An nginx site configuration like the one shipped in the image."""
    path = tmp_path / "dsmr-webinterface.conf"
    path.write_text(SITE_CONF, encoding="utf-8")
    return path


@pytest.fixture
def make_settings(tmp_path):
    """Factory building frozen BootstrapSettings with test friendly paths."""

    def _make(
        flavor=Flavor.INIT,
        admin=None,
        database=None,
        datalogger=None,
        nginx=None,
        **overrides,
    ):
        values = {
            "flavor": flavor,
            "admin": AdminSettings(**(admin or {})),
            "database": DatabaseSettings(**(database or {})),
            "datalogger": DataloggerSettings(
                **{
                    "env_file_path": str(tmp_path / ".env"),
                    **(datalogger or {}),
                }
            ),
            "nginx": NginxSettings(
                **{
                    "main_conf_path": str(tmp_path / "nginx.conf"),
                    "site_conf_path": str(tmp_path / "dsmr-webinterface.conf"),
                    "htpasswd_path": str(tmp_path / "htpasswd"),
                    "ssl_certificate": str(tmp_path / "fullchain.pem"),
                    "ssl_certificate_key": str(tmp_path / "privkey.pem"),
                    **(nginx or {}),
                }
            ),
            "app_dir": str(tmp_path),
            "serial_device_marker": str(tmp_path / "ttyUSB0"),
            "serial_device_glob": str(tmp_path / "ttyUSB*"),
            "pid_file_glob": str(tmp_path / "*.pid"),
        }
        values.update(overrides)
        return BootstrapSettings(**values)

    return _make
