# common/db_utils.py
# -*- coding: utf-8 -*-
"""
PostgreSQL readiness probes.

Each probe makes exactly one attempt and reports success as a boolean; the
retry policy lives in bootstrap.database.
"""

import logging
from typing import Optional

import psycopg
from psycopg.conninfo import make_conninfo

from bootstrap import config as static_config
from bootstrap.config_models import BootstrapSettings, DatabaseSettings
from common.command_utils import run_command

module_logger = logging.getLogger(__name__)


def build_conninfo(db_settings: DatabaseSettings) -> str:
    """
    Build a libpq connection string from the database settings.

    Values are quoted by libpq rules. Parameters that are unset or empty are
    left out so libpq falls back to its own defaults (PGPASSWORD, .pgpass, ...).
    """
    conn_kwargs = {
        "dbname": db_settings.name,
        "user": db_settings.user,
        "password": db_settings.password,
        "host": db_settings.host,
        "port": db_settings.port,
        "connect_timeout": static_config.DB_PROBE_TIMEOUT_SECONDS,
    }
    return make_conninfo(
        **{
            key: value
            for key, value in conn_kwargs.items()
            if value is not None and value != ""
        }
    )


def probe_with_psycopg(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """Open and immediately close a psycopg connection."""
    logger_to_use = current_logger if current_logger else module_logger
    try:
        with psycopg.connect(build_conninfo(app_settings.database)):
            pass
    except psycopg.OperationalError as e:
        logger_to_use.debug(f"Database not reachable yet: {e}")
        return False
    return True


def probe_with_pg_isready(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Run pg_isready once against the configured server.

    Raises:
        FileNotFoundError: If pg_isready is not installed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    db = app_settings.database
    result = run_command(
        [
            "pg_isready",
            "-h",
            str(db.host),
            "-p",
            str(db.port),
            "-U",
            str(db.user),
            "-d",
            str(db.name),
            "-t",
            str(static_config.DB_PROBE_TIMEOUT_SECONDS),
        ],
        app_settings,
        check=False,
        capture_output=True,
        current_logger=logger_to_use,
        log_level="debug",
    )
    if result.returncode != 0:
        logger_to_use.debug(
            f"pg_isready returned {result.returncode}: {(result.stdout or '').strip()}"
        )
    return result.returncode == 0


def get_probe(probe_name: str):
    """Return the probe function registered under the given name."""
    probes = {
        static_config.DB_PROBE_PG_ISREADY: probe_with_pg_isready,
        static_config.DB_PROBE_PSYCOPG: probe_with_psycopg,
    }
    try:
        return probes[probe_name]
    except KeyError:
        raise ValueError(
            f"Unknown database probe '{probe_name}'. Use one of: {', '.join(sorted(probes))}"
        ) from None
