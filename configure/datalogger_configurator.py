# configure/datalogger_configurator.py
# -*- coding: utf-8 -*-
"""
Generates the configuration of the DSMR reader remote datalogger client.

The client reads a key=value file (``/dsmr/.env`` by default). The file is
only written after every required value has been validated and is replaced
as a whole, so it never contains a partial configuration.
"""

import logging
from typing import List, Optional, Tuple

from bootstrap import config as static_config
from bootstrap.config_models import BootstrapSettings, DataloggerSettings
from bootstrap.errors import MissingConfigurationError
from common.command_utils import get_symbols, log_bootstrap
from common.file_utils import write_file_atomic

module_logger = logging.getLogger(__name__)

INPUT_METHOD_NETWORK = "network socket"
INPUT_METHOD_SERIAL = "serial"
# "ipv4" is what earlier images accepted for a network socket.
NETWORK_METHOD_ALIASES = (INPUT_METHOD_NETWORK, "ipv4")

OPTIONAL_FIELDS = ("timeout", "sleep", "debug_logging")


def _env_name(field_name: str) -> str:
    return f"DATALOGGER_{field_name.upper()}"


def _require(
    datalogger: DataloggerSettings, field_names: Tuple[str, ...]
) -> List[Tuple[str, str]]:
    missing = [
        _env_name(name)
        for name in field_names
        if not getattr(datalogger, name)
    ]
    if missing:
        raise MissingConfigurationError(
            f"{' and/or '.join(missing)} required values are not set. Exiting..."
        )
    return [(_env_name(name), getattr(datalogger, name)) for name in field_names]


def build_datalogger_entries(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> List[Tuple[str, str]]:
    """
    Validate the datalogger settings and return the ordered (key, value) pairs.

    Order: method specific keys, then API hosts, API keys and input method,
    then the optional timeout, sleep and debug logging keys.

    Raises:
        MissingConfigurationError: A required value is empty or the input
            method is not recognised.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    datalogger = app_settings.datalogger

    common_entries = _require(
        datalogger, ("api_hosts", "api_keys", "input_method")
    )

    method = datalogger.input_method.strip().lower()
    if method in NETWORK_METHOD_ALIASES:
        log_bootstrap(
            f"{symbols.get('info', 'ℹ️')} Using a network socket for the DSMR remote datalogger...",
            "info",
            logger_to_use,
            app_settings,
        )
        entries = _require(datalogger, ("network_host", "network_port"))
    elif method == INPUT_METHOD_SERIAL:
        log_bootstrap(
            f"{symbols.get('info', 'ℹ️')} Using a serial connection for the DSMR remote datalogger...",
            "info",
            logger_to_use,
            app_settings,
        )
        entries = _require(datalogger, ("serial_port", "serial_baudrate"))
    else:
        raise MissingConfigurationError(
            f"Incorrect configuration of the DATALOGGER_INPUT_METHOD value "
            f"'{datalogger.input_method}'. Exiting..."
        )

    entries.extend(common_entries)

    for name in OPTIONAL_FIELDS:
        value = getattr(datalogger, name)
        if value:
            log_bootstrap(
                f"Adding {_env_name(name)} to the DSMR remote datalogger configuration...",
                "debug",
                logger_to_use,
                app_settings,
            )
            entries.append((_env_name(name), value))
    return entries


def render_env_file(entries: List[Tuple[str, str]]) -> str:
    return "".join(f"{key}={value}\n" for key, value in entries)


def configure_datalogger(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Write the remote datalogger configuration when running as a datalogger.

    Returns:
        bool: True if the file was written, False if the step was skipped
        because the container does not run in remote datalogger mode.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    if app_settings.run_mode != static_config.RUN_MODE_REMOTE_DATALOGGER:
        log_bootstrap(
            f"{symbols.get('info', 'ℹ️')} CONTAINER_RUN_MODE is '{app_settings.run_mode}', remote datalogger not used. Continuing...",
            "info",
            logger_to_use,
            app_settings,
        )
        return False

    log_bootstrap(
        f"{symbols.get('info', 'ℹ️')} Installing the DSMR remote datalogger client...",
        "info",
        logger_to_use,
        app_settings,
    )
    entries = build_datalogger_entries(app_settings, logger_to_use)
    target = app_settings.datalogger.env_file_path
    write_file_atomic(
        target,
        render_env_file(entries),
        app_settings,
        mode=0o644,
        current_logger=logger_to_use,
    )
    log_bootstrap(
        f"{symbols.get('success', '✅')} Wrote {len(entries)} settings to {target}.",
        "info",
        logger_to_use,
        app_settings,
    )
    return True
