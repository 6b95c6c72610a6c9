# bootstrap/pipeline.py
# -*- coding: utf-8 -*-
"""
Assembles the bootstrap steps of each image flavor into an Orchestrator.
"""

import logging
from typing import Optional, Sequence

from bootstrap.config_models import BootstrapSettings, Flavor
from bootstrap.database import wait_for_database
from bootstrap.post_config import run_post_config
from bootstrap.prerequisites import (
    fix_device_permissions,
    remove_stale_pid_files,
    validate_credentials,
)
from bootstrap.supervisor import LaunchDecision, decide_launch
from common.orchestrator import Orchestrator
from configure.datalogger_configurator import configure_datalogger
from configure.nginx_configurator import configure_http_auth, configure_tls

module_logger = logging.getLogger(__name__)

LAUNCH_STEP = "Supervisor launcher"


def build_orchestrator(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
    extra_args: Optional[Sequence[str]] = None,
) -> Orchestrator:
    """Queue the steps of the configured flavor in execution order."""
    logger_to_use = current_logger if current_logger else module_logger
    orchestrator = Orchestrator(app_settings, logger_to_use)

    orchestrator.add_step("Credential validation", validate_credentials)
    orchestrator.add_step("Device permissions", fix_device_permissions)

    if app_settings.flavor == Flavor.ENTRYPOINT:
        orchestrator.add_step("Stale PID cleanup", remove_stale_pid_files)
    else:
        orchestrator.add_step("Remote datalogger", configure_datalogger)

    orchestrator.add_step("Database readiness", wait_for_database)
    orchestrator.add_step("Post configuration", run_post_config)

    if app_settings.flavor == Flavor.INIT:
        orchestrator.add_step("NGINX SSL", configure_tls)
        orchestrator.add_step("NGINX HTTP authentication", configure_http_auth)
    else:
        orchestrator.add_step(
            LAUNCH_STEP,
            decide_launch,
            kwargs={"extra_args": list(extra_args or [])},
        )
    return orchestrator


def run_bootstrap(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
    extra_args: Optional[Sequence[str]] = None,
) -> Optional[LaunchDecision]:
    """
    Run every step of the flavor.

    Returns:
        The launch decision for the entrypoint flavor, None for init.
        Any failing step terminates the process with exit status 1.
    """
    orchestrator = build_orchestrator(app_settings, current_logger, extra_args)
    orchestrator.run()
    return orchestrator.context.get(f"{LAUNCH_STEP}_result")
