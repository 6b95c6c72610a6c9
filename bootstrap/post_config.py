# bootstrap/post_config.py
# -*- coding: utf-8 -*-
"""
Runs the DSMR reader Django post configuration: schema migration, static
file collection and provisioning of the admin account.
"""

import logging
import os
from typing import Dict, List, Optional

from bootstrap.config_models import BootstrapSettings, Flavor
from common.command_utils import get_symbols, log_bootstrap, run_command

module_logger = logging.getLogger(__name__)

# Executed with "manage.py shell -c". Credentials come from the environment
# so they never end up in the source passed on the command line.
CREATE_SUPERUSER_SCRIPT = """\
import os
from django.contrib.auth.models import User

username = os.environ["DSMR_USER"]
if not User.objects.filter(username=username).exists():
    User.objects.create_superuser(
        username, os.environ["DSMR_EMAIL"], os.environ["DSMR_PASSWORD"]
    )
    print(username + " created")
else:
    print(username + " already exists")
"""


def _manage_py(app_settings: BootstrapSettings, *arguments: str) -> List[str]:
    return [app_settings.python_executable, "manage.py", *arguments]


def _admin_environment(app_settings: BootstrapSettings) -> Dict[str, str]:
    """Child environment carrying the admin credentials under both naming schemes."""
    admin = app_settings.admin
    env = dict(os.environ)
    values = {
        "DSMRREADER_ADMIN_USER": admin.username,
        "DSMRREADER_ADMIN_EMAIL": admin.email,
        "DSMRREADER_ADMIN_PASSWORD": admin.password,
        "DSMR_USER": admin.username,
        "DSMR_EMAIL": admin.email,
        "DSMR_PASSWORD": admin.password,
    }
    env.update({key: value for key, value in values.items() if value})
    return env


def provision_admin_command(app_settings: BootstrapSettings) -> List[str]:
    """
    Build the idempotent admin provisioning command for the flavor.

    The init flavor uses the application's own dsmr_superuser command. The
    entrypoint flavor also sets an e-mail address and uses a shell script
    that skips creation when the username already exists.
    """
    if app_settings.flavor == Flavor.INIT:
        return _manage_py(app_settings, "dsmr_superuser")
    return _manage_py(app_settings, "shell", "-c", CREATE_SUPERUSER_SCRIPT)


def run_post_config(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Run migrate, collectstatic and admin provisioning, in that order.

    Raises:
        subprocess.CalledProcessError: If any management command fails.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    log_bootstrap(
        f"{symbols.get('info', 'ℹ️')} Running post configuration...",
        "info",
        logger_to_use,
        app_settings,
    )
    cwd = app_settings.app_dir

    run_command(
        _manage_py(app_settings, "migrate", "--noinput"),
        app_settings,
        current_logger=logger_to_use,
        cwd=cwd,
    )
    run_command(
        _manage_py(app_settings, "collectstatic", "--noinput"),
        app_settings,
        current_logger=logger_to_use,
        cwd=cwd,
    )
    run_command(
        provision_admin_command(app_settings),
        app_settings,
        current_logger=logger_to_use,
        cwd=cwd,
        env=_admin_environment(app_settings),
    )
