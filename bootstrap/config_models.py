# bootstrap/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for the bootstrap configuration.

Every setting is resolved once at startup (model defaults, optional YAML
file, environment variables, command line) into a frozen BootstrapSettings
instance which is then passed explicitly to each bootstrap step.

Environment variable names follow the DSMR reader Docker images. Where the
two image flavors used different names for the same value, both are
accepted through AliasChoices.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bootstrap import config as static_config

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
}


class Flavor(str, Enum):
    """Deployment flavor of the container image."""

    # s6-overlay cont-init script; s6 supervises the services afterwards.
    INIT = "init"
    # Docker ENTRYPOINT; hands over to supervisord at the end.
    ENTRYPOINT = "entrypoint"


def is_enabled(value: Optional[str]) -> bool:
    """Return True only for the literal string "true" (any case)."""
    return bool(value) and value.strip().lower() == "true"


class AdminSettings(BaseSettings):
    """Credentials of the DSMR reader web admin account."""

    model_config = SettingsConfigDict(
        env_prefix="DSMR_ADMIN_",
        extra="ignore",
        env_ignore_empty=True,
        frozen=True,
        populate_by_name=True,
    )

    username: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DSMRREADER_ADMIN_USER", "DSMR_USER"),
        description="Admin username.",
    )
    email: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DSMRREADER_ADMIN_EMAIL", "DSMR_EMAIL"),
        description="Admin e-mail address.",
    )
    password: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "DSMRREADER_ADMIN_PASSWORD", "DSMR_PASSWORD"
        ),
        description="Admin password.",
        repr=False,
    )


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection settings used by the readiness gate."""

    model_config = SettingsConfigDict(
        env_prefix="DSMR_DB_",
        extra="ignore",
        env_ignore_empty=True,
        frozen=True,
        populate_by_name=True,
    )

    host: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DB_HOST", "DJANGO_DATABASE_HOST"),
        description="PostgreSQL host.",
    )
    port: int = Field(
        default=static_config.DB_PORT_DEFAULT,
        validation_alias=AliasChoices("DB_PORT", "DJANGO_DATABASE_PORT"),
        description="PostgreSQL port.",
    )
    user: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DB_USER", "DJANGO_DATABASE_USER"),
        description="PostgreSQL username.",
    )
    name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DB_NAME", "DJANGO_DATABASE_NAME"),
        description="PostgreSQL database name.",
    )
    password: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DB_PASS", "DJANGO_DATABASE_PASSWORD"),
        description="PostgreSQL password (only used by the psycopg probe).",
        repr=False,
    )
    probe: str = Field(
        default=static_config.DB_PROBE_PG_ISREADY,
        validation_alias=AliasChoices("DB_PROBE"),
        description="Readiness probe: 'pg_isready' or 'psycopg'.",
    )


class DataloggerSettings(BaseSettings):
    """Settings for the DSMR reader remote datalogger client."""

    model_config = SettingsConfigDict(
        env_prefix="DATALOGGER_",
        extra="ignore",
        env_ignore_empty=True,
        frozen=True,
        populate_by_name=True,
    )

    api_hosts: Optional[str] = None
    api_keys: Optional[str] = None
    input_method: Optional[str] = None
    network_host: Optional[str] = None
    network_port: Optional[str] = None
    serial_port: Optional[str] = None
    serial_baudrate: Optional[str] = None
    timeout: Optional[str] = None
    sleep: Optional[str] = None
    debug_logging: Optional[str] = None
    env_file_path: str = Field(
        default=static_config.DATALOGGER_ENV_FILE_DEFAULT,
        description="Target of the generated key=value configuration.",
    )


class NginxSettings(BaseSettings):
    """TLS and HTTP basic-auth settings for the nginx reverse proxy."""

    model_config = SettingsConfigDict(
        env_prefix="NGINX_",
        extra="ignore",
        env_ignore_empty=True,
        frozen=True,
        populate_by_name=True,
    )

    enable_ssl: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ENABLE_NGINX_SSL")
    )
    enable_http_auth: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ENABLE_HTTP_AUTH")
    )
    http_auth_username: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("HTTP_AUTH_USERNAME")
    )
    http_auth_password: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("HTTP_AUTH_PASSWORD"),
        repr=False,
    )

    main_conf_path: str = static_config.NGINX_MAIN_CONF_DEFAULT
    site_conf_path: str = static_config.NGINX_SITE_CONF_DEFAULT
    htpasswd_path: str = static_config.NGINX_HTPASSWD_DEFAULT
    ssl_certificate: str = static_config.SSL_CERTIFICATE_DEFAULT
    ssl_certificate_key: str = static_config.SSL_CERTIFICATE_KEY_DEFAULT

    @property
    def ssl_enabled(self) -> bool:
        return is_enabled(self.enable_ssl)

    @property
    def http_auth_enabled(self) -> bool:
        return is_enabled(self.enable_http_auth)


class BootstrapSettings(BaseSettings):
    """Main bootstrap settings."""

    model_config = SettingsConfigDict(
        env_prefix="BOOTSTRAP_",
        extra="ignore",
        env_ignore_empty=True,
        frozen=True,
        populate_by_name=True,
    )

    flavor: Flavor = Field(
        default=Flavor.ENTRYPOINT, description="Image flavor to bootstrap."
    )
    debug: str = Field(
        default="false",
        validation_alias=AliasChoices("DEBUG"),
        description="Verbose logging when 'true'.",
    )
    command: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("COMMAND"),
        description="Override command executed instead of the supervisor.",
    )
    retry_budget: int = Field(
        default=static_config.RETRY_BUDGET_DEFAULT,
        ge=1,
        validation_alias=AliasChoices("TIMER"),
        description="Database readiness attempts, one per second.",
    )
    run_mode: str = Field(
        default=static_config.RUN_MODE_STANDALONE,
        validation_alias=AliasChoices("CONTAINER_RUN_MODE"),
        description="'standalone' or 'remote_datalogger'.",
    )
    app_dir: str = Field(
        default=static_config.APP_DIR_DEFAULT,
        validation_alias=AliasChoices("DSMR_APP_DIR"),
        description="Directory containing the DSMR reader manage.py.",
    )
    python_executable: str = static_config.PYTHON_EXECUTABLE_DEFAULT
    log_prefix: str = static_config.LOG_PREFIX_DEFAULT

    serial_device_marker: str = static_config.SERIAL_DEVICE_MARKER
    serial_device_glob: str = static_config.SERIAL_DEVICE_GLOB
    pid_file_glob: str = static_config.PID_FILE_GLOB
    supervisor_command: List[str] = Field(
        default_factory=lambda: list(static_config.SUPERVISOR_COMMAND_DEFAULT)
    )

    admin: AdminSettings = Field(default_factory=AdminSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    datalogger: DataloggerSettings = Field(default_factory=DataloggerSettings)
    nginx: NginxSettings = Field(default_factory=NginxSettings)

    symbols: Dict[str, str] = Field(
        default_factory=lambda: dict(SYMBOLS_DEFAULT)
    )

    @property
    def debug_enabled(self) -> bool:
        return is_enabled(self.debug)
