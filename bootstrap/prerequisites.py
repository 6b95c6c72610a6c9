# bootstrap/prerequisites.py
# -*- coding: utf-8 -*-
"""
First bootstrap steps: credential validation, serial device permissions and
removal of stale PID files.
"""

import logging
import os
from typing import Dict, Optional

from bootstrap import config as static_config
from bootstrap.config_models import BootstrapSettings, Flavor
from bootstrap.errors import MissingConfigurationError
from common.command_utils import get_symbols, log_bootstrap
from common.file_utils import chmod_matching_paths, remove_matching_files

module_logger = logging.getLogger(__name__)

# Admin fields each flavor requires, mapped to the variable operators set.
REQUIRED_ADMIN_FIELDS: Dict[Flavor, Dict[str, str]] = {
    Flavor.INIT: {
        "username": "DSMRREADER_ADMIN_USER",
        "password": "DSMRREADER_ADMIN_PASSWORD",
    },
    Flavor.ENTRYPOINT: {
        "username": "DSMR_USER",
        "email": "DSMR_EMAIL",
        "password": "DSMR_PASSWORD",
    },
}


def validate_credentials(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Verify that the DSMR reader web credentials are set.

    Raises:
        MissingConfigurationError: If any required credential is empty.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    log_bootstrap(
        f"{symbols.get('info', 'ℹ️')} Verifying if the DSMR web credential variables have been set...",
        "info",
        logger_to_use,
        app_settings,
    )
    required = REQUIRED_ADMIN_FIELDS[app_settings.flavor]
    missing = [
        env_name
        for field_name, env_name in required.items()
        if not getattr(app_settings.admin, field_name)
    ]
    if missing:
        raise MissingConfigurationError(
            f"DSMR web credentials not set ({', '.join(missing)}). Exiting..."
        )


def fix_device_permissions(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Make the USB serial devices readable and writable for the application.

    Nothing happens when no serial device is attached.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    log_bootstrap(
        f"{symbols.get('info', 'ℹ️')} Fixing {app_settings.serial_device_glob} security...",
        "info",
        logger_to_use,
        app_settings,
    )
    if not os.path.exists(app_settings.serial_device_marker):
        log_bootstrap(
            f"No serial device found at {app_settings.serial_device_marker}. Skipping.",
            "info",
            logger_to_use,
            app_settings,
        )
        return

    chmod_matching_paths(
        app_settings.serial_device_glob,
        static_config.SERIAL_DEVICE_MODE,
        app_settings,
        logger_to_use,
    )


def remove_stale_pid_files(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """Remove PID files a previous container run may have left behind."""
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    log_bootstrap(
        f"{symbols.get('info', 'ℹ️')} Removing existing PID files...",
        "info",
        logger_to_use,
        app_settings,
    )
    removed = remove_matching_files(
        app_settings.pid_file_glob, app_settings, logger_to_use
    )
    if removed:
        log_bootstrap(
            f"Removed {len(removed)} stale PID file(s).",
            "info",
            logger_to_use,
            app_settings,
        )
