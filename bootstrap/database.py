# bootstrap/database.py
# -*- coding: utf-8 -*-
"""
Database readiness gate.

Blocks until PostgreSQL answers the configured probe or the retry budget
(TIMER, one attempt per second) runs out.
"""

import logging
import time
from typing import Callable, Optional

from bootstrap import config as static_config
from bootstrap.config_models import BootstrapSettings
from bootstrap.errors import (
    DependencyUnavailableError,
    MissingConfigurationError,
)
from common.command_utils import get_symbols, log_bootstrap
from common.db_utils import get_probe

module_logger = logging.getLogger(__name__)

Probe = Callable[[BootstrapSettings, Optional[logging.Logger]], bool]


def _check_connection_settings(app_settings: BootstrapSettings) -> None:
    db = app_settings.database
    missing = [
        env_name
        for env_name, value in (
            ("DB_HOST", db.host),
            ("DB_USER", db.user),
            ("DB_NAME", db.name),
        )
        if not value
    ]
    if missing:
        raise MissingConfigurationError(
            f"Database connection variables not set ({', '.join(missing)}). Exiting..."
        )


def wait_for_database(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
    probe: Optional[Probe] = None,
) -> int:
    """
    Poll the database until it is reachable.

    Each failed attempt is followed by a fixed one second pause and consumes
    one unit of the retry budget. There is no backoff.

    Args:
        app_settings: Bootstrap settings with the database parameters and
            the retry budget.
        current_logger: Optional logger.
        probe: Override for the probe selected by ``database.probe``.

    Returns:
        int: The number of attempts that were needed.

    Raises:
        MissingConfigurationError: Connection settings are incomplete or the
            probe name is unknown.
        DependencyUnavailableError: The budget ran out.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    _check_connection_settings(app_settings)
    if probe is None:
        try:
            probe = get_probe(app_settings.database.probe)
        except ValueError as e:
            raise MissingConfigurationError(str(e)) from e

    db = app_settings.database
    log_bootstrap(
        f"{symbols.get('info', 'ℹ️')} Verifying database connectivity to {db.host}:{db.port}/{db.name}...",
        "info",
        logger_to_use,
        app_settings,
    )

    remaining = app_settings.retry_budget
    attempts = 0
    while True:
        attempts += 1
        if probe(app_settings, logger_to_use):
            log_bootstrap(
                f"{symbols.get('success', '✅')} Database is reachable (attempt {attempts}).",
                "info",
                logger_to_use,
                app_settings,
            )
            return attempts

        time.sleep(static_config.RETRY_INTERVAL_SECONDS)
        remaining -= 1
        if remaining <= 0:
            raise DependencyUnavailableError(
                f"Could not connect to database server after {attempts} attempts. Aborting..."
            )
        log_bootstrap(
            f"Database not ready, {remaining} attempt(s) left.",
            "debug",
            logger_to_use,
            app_settings,
        )
