# bootstrap/supervisor.py
# -*- coding: utf-8 -*-
"""
Terminal step of the entrypoint flavor.

decide_launch only decides what replaces the bootstrap process;
exec_launch performs the replacement and never returns.
"""

import logging
import os
import shlex
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from bootstrap.config_models import BootstrapSettings
from common.command_utils import get_symbols, log_bootstrap

module_logger = logging.getLogger(__name__)


class LaunchKind(str, Enum):
    OVERRIDE = "override"
    SUPERVISOR = "supervisor"


@dataclass(frozen=True)
class LaunchDecision:
    """The program that replaces the bootstrap process."""

    kind: LaunchKind
    argv: List[str]


def decide_launch(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
    extra_args: Optional[Sequence[str]] = None,
) -> LaunchDecision:
    """
    Choose between the operator override command and supervisord.

    The override comes from trailing command line arguments or, failing
    that, the COMMAND variable (split shell-style).
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    override: List[str] = list(extra_args or [])
    if not override and app_settings.command and app_settings.command.strip():
        override = shlex.split(app_settings.command)

    if override:
        log_bootstrap(
            f"{symbols.get('info', 'ℹ️')} ENTRYPOINT: Executing override command...",
            "info",
            logger_to_use,
            app_settings,
        )
        return LaunchDecision(LaunchKind.OVERRIDE, override)

    log_bootstrap(
        f"{symbols.get('rocket', '🚀')} Starting supervisord...",
        "info",
        logger_to_use,
        app_settings,
    )
    return LaunchDecision(
        LaunchKind.SUPERVISOR, list(app_settings.supervisor_command)
    )


def exec_launch(decision: LaunchDecision) -> None:
    """Replace the current process with the decided program."""
    for handler in logging.getLogger().handlers:
        handler.flush()
    os.execvp(decision.argv[0], decision.argv)
