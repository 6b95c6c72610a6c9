# common/command_utils.py
# -*- coding: utf-8 -*-
"""
Utilities for executing external commands and logging their output.

Every external program the bootstrap relies on (manage.py, pg_isready,
nginx, openssl) is started through run_command, so failures are reported
the same way no matter which step ran them.
"""

import logging
import subprocess
from typing import Dict, Optional, Sequence

from bootstrap.config_models import SYMBOLS_DEFAULT, BootstrapSettings

module_logger = logging.getLogger(__name__)

_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def log_bootstrap(
    message: str,
    level: str = "info",
    current_logger: Optional[logging.Logger] = None,
    app_settings: Optional[BootstrapSettings] = None,
    exc_info: bool = False,
) -> None:
    """
    Log a bootstrap message.

    Args:
        message (str): The log message.
        level (str): "debug", "info", "warning", "error" or "critical".
            Anything else is logged at info.
        current_logger (Optional[logging.Logger]): Logger to use instead of
            the module logger.
        app_settings (Optional[BootstrapSettings]): Settings of the calling
            step. The message is logged as given; symbols and the log prefix
            are applied by the handler installed by setup_logging.
        exc_info (bool): Attach the current exception to the record.
    """
    effective_logger = current_logger if current_logger else module_logger
    method_name = level if level in _LOG_LEVELS else "info"
    getattr(effective_logger, method_name)(message, exc_info=exc_info)


def get_symbols(app_settings: Optional[BootstrapSettings]) -> Dict[str, str]:
    """Return the logging symbols of the settings, or the defaults."""
    return (
        app_settings.symbols
        if app_settings and app_settings.symbols
        else SYMBOLS_DEFAULT
    )


def run_command(
    command: Sequence[str],
    app_settings: Optional[BootstrapSettings],
    check: bool = True,
    capture_output: bool = False,
    text: bool = True,
    cmd_input: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    log_level: str = "info",
) -> subprocess.CompletedProcess:
    """
    Run an external program (never through a shell) and log what happened.

    Args:
        command: Program and arguments.
        app_settings: Settings providing logging symbols.
        check: Raise CalledProcessError on a non-zero exit status.
        capture_output: Capture stdout and stderr instead of inheriting them.
        text: Decode the output streams as text.
        cmd_input: Data written to the program's stdin.
        current_logger: Logger to use instead of the module logger.
        cwd: Working directory of the program.
        env: Full environment of the program; inherited when None.
        log_level: Level of the "Executing" line. Polling callers pass
            "debug" so repeated attempts stay out of the info log.

    Returns:
        subprocess.CompletedProcess: The finished process.

    Raises:
        subprocess.CalledProcessError: Non-zero exit status with check=True.
            stderr, when captured, is logged before the exception propagates.
        FileNotFoundError: The program is not installed.
    """
    effective_logger = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    description = subprocess.list2cmdline(list(command))
    location = f" (in {cwd})" if cwd else ""

    log_bootstrap(
        f"{symbols.get('gear', '⚙️')} Executing: {description}{location}",
        log_level,
        effective_logger,
        app_settings,
    )
    try:
        result = subprocess.run(
            list(command),
            check=check,
            capture_output=capture_output,
            text=text,
            input=cmd_input,
            cwd=cwd,
            env=env,
        )
    except subprocess.CalledProcessError as e:
        log_bootstrap(
            f"{symbols.get('error', '❌')} Command `{description}` failed (rc {e.returncode}).",
            "error",
            effective_logger,
            app_settings,
        )
        if e.stderr and hasattr(e.stderr, "strip") and e.stderr.strip():
            log_bootstrap(
                f"   stderr: {e.stderr.strip()}",
                "error",
                effective_logger,
                app_settings,
            )
        raise
    except FileNotFoundError as e:
        log_bootstrap(
            f"{symbols.get('error', '❌')} Command not found: {e.filename or command[0]}. Ensure it's installed and in PATH.",
            "error",
            effective_logger,
            app_settings,
        )
        raise

    if capture_output and result.stderr and result.stderr.strip():
        log_bootstrap(
            f"   stderr: {result.stderr.strip()}",
            "debug",
            effective_logger,
            app_settings,
        )
    return result
