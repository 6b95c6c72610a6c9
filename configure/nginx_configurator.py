# configure/nginx_configurator.py
# -*- coding: utf-8 -*-
"""
Handles the optional TLS listener and HTTP basic authentication of the nginx
reverse proxy in front of the DSMR reader web interface.

Both steps edit the site configuration through configure.nginx_config, so
running them repeatedly leaves the configuration unchanged after the first
run.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional

from bootstrap.config_models import BootstrapSettings
from bootstrap.errors import (
    DependencyUnavailableError,
    MissingArtifactError,
    MissingConfigurationError,
)
from common.command_utils import get_symbols, log_bootstrap, run_command
from common.file_utils import write_file_atomic
from configure.nginx_config import NginxConfig

module_logger = logging.getLogger(__name__)

AUTH_DIRECTIVES = ("auth_basic", "auth_basic_user_file")


def load_site_config(app_settings: BootstrapSettings) -> NginxConfig:
    site_conf = Path(app_settings.nginx.site_conf_path)
    return NginxConfig.loads(site_conf.read_text(encoding="utf-8"))


def save_site_config(
    config: NginxConfig,
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    write_file_atomic(
        app_settings.nginx.site_conf_path,
        config.dumps(),
        app_settings,
        current_logger=current_logger,
    )


def validate_nginx_configuration(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Validate the complete nginx configuration with ``nginx -t``.

    Raises:
        DependencyUnavailableError: If nginx rejects the configuration.
    """
    logger_to_use = current_logger if current_logger else module_logger
    try:
        run_command(
            ["nginx", "-c", app_settings.nginx.main_conf_path, "-t"],
            app_settings,
            capture_output=True,
            current_logger=logger_to_use,
        )
    except subprocess.CalledProcessError as e:
        raise DependencyUnavailableError("NGINX configuration error") from e


def configure_tls(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Add a TLS listener to the site configuration when ENABLE_NGINX_SSL=true.

    Returns:
        bool: True if the configuration was changed.

    Raises:
        MissingArtifactError: Certificate or key file is missing.
        MissingConfigurationError: The site has no plaintext listener to
            attach the TLS listener to.
        DependencyUnavailableError: nginx rejects the resulting configuration.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    nginx = app_settings.nginx

    log_bootstrap(
        f"{symbols.get('info', 'ℹ️')} Checking for NGINX SSL configuration...",
        "info",
        logger_to_use,
        app_settings,
    )
    if not nginx.ssl_enabled:
        log_bootstrap(
            f"{symbols.get('info', 'ℹ️')} ENABLE_NGINX_SSL is disabled, nothing to see here. Continuing...",
            "info",
            logger_to_use,
            app_settings,
        )
        return False

    missing = [
        path
        for path in (nginx.ssl_certificate, nginx.ssl_certificate_key)
        if not os.path.isfile(path)
    ]
    if missing:
        raise MissingArtifactError(
            f"Make sure {' and '.join(missing)} are mounted in the Docker container and exist!"
        )
    log_bootstrap(
        f"Required files {nginx.ssl_certificate} and {nginx.ssl_certificate_key} exist.",
        "info",
        logger_to_use,
        app_settings,
    )

    config = load_site_config(app_settings)
    changed = False
    if config.has_tls_listener():
        log_bootstrap(
            f"{symbols.get('info', 'ℹ️')} SSL has already been enabled...",
            "info",
            logger_to_use,
            app_settings,
        )
    else:
        if not config.add_tls_listener(
            nginx.ssl_certificate, nginx.ssl_certificate_key
        ):
            raise MissingConfigurationError(
                f"No plaintext listen directive found in {nginx.site_conf_path}."
            )
        save_site_config(config, app_settings, logger_to_use)
        changed = True

    validate_nginx_configuration(app_settings, logger_to_use)
    log_bootstrap(
        f"{symbols.get('success', '✅')} NGINX SSL configured and enabled",
        "info",
        logger_to_use,
        app_settings,
    )
    return changed


def generate_password_hash(
    password: str,
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> str:
    """Hash a password with ``openssl passwd -apr1`` (salted APR1-MD5)."""
    result = run_command(
        ["openssl", "passwd", "-apr1", "-stdin"],
        app_settings,
        capture_output=True,
        cmd_input=f"{password}\n",
        current_logger=current_logger,
    )
    return result.stdout.strip()


def configure_http_auth(
    app_settings: BootstrapSettings,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Enable HTTP basic authentication when ENABLE_HTTP_AUTH=true.

    Writes ``username:hash`` to the htpasswd file (replacing it) and switches
    on the commented-out auth_basic directives of the site configuration.

    Returns:
        bool: True if authentication was configured.

    Raises:
        MissingConfigurationError: Username and/or password not set.
        DependencyUnavailableError: nginx rejects the resulting configuration.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    nginx = app_settings.nginx

    log_bootstrap(
        f"{symbols.get('info', 'ℹ️')} Checking for HTTP AUTHENTICATION configuration...",
        "info",
        logger_to_use,
        app_settings,
    )
    if not nginx.http_auth_enabled:
        log_bootstrap(
            f"{symbols.get('info', 'ℹ️')} ENABLE_HTTP_AUTH is disabled, nothing to see here. Continuing...",
            "info",
            logger_to_use,
            app_settings,
        )
        return False

    log_bootstrap(
        f"{symbols.get('info', 'ℹ️')} ENABLE_HTTP_AUTH is enabled, let's secure this!",
        "info",
        logger_to_use,
        app_settings,
    )
    problems: List[str] = []
    if not nginx.http_auth_username:
        problems.append("HTTP_AUTH_USERNAME")
    if not nginx.http_auth_password:
        problems.append("HTTP_AUTH_PASSWORD")
    for env_name in problems:
        log_bootstrap(
            f"{symbols.get('warning', '⚠️')} Please provide a {env_name}",
            "warning",
            logger_to_use,
            app_settings,
        )
    if problems:
        raise MissingConfigurationError(
            "Cannot generate a valid .htpasswd file, please check above warnings."
        )

    log_bootstrap(
        "Generating htpasswd...", "info", logger_to_use, app_settings
    )
    password_hash = generate_password_hash(
        nginx.http_auth_password, app_settings, logger_to_use
    )
    write_file_atomic(
        nginx.htpasswd_path,
        f"{nginx.http_auth_username}:{password_hash}\n",
        app_settings,
        mode=0o644,
        current_logger=logger_to_use,
    )

    log_bootstrap(
        "Done! Enabling the configuration in NGINX...",
        "info",
        logger_to_use,
        app_settings,
    )
    config = load_site_config(app_settings)
    if config.set_enabled(AUTH_DIRECTIVES, enabled=True):
        save_site_config(config, app_settings, logger_to_use)
    elif not config.count_enabled("auth_basic"):
        log_bootstrap(
            f"{symbols.get('warning', '⚠️')} No auth_basic directive found in {nginx.site_conf_path}.",
            "warning",
            logger_to_use,
            app_settings,
        )

    validate_nginx_configuration(app_settings, logger_to_use)
    log_bootstrap(
        f"{symbols.get('success', '✅')} HTTP AUTHENTICATION configured and enabled",
        "info",
        logger_to_use,
        app_settings,
    )
    return True
