# bootstrap/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for the bootstrap.

Settings are resolved once, in this order of precedence:
1. Pydantic model defaults
2. Environment variables (read by pydantic-settings)
3. Optional YAML configuration file
4. Command-line arguments
"""

import argparse
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from bootstrap import config as static_config
from bootstrap.config_models import BootstrapSettings

module_logger = logging.getLogger(__name__)

CONFIG_FILE_ENV = "BOOTSTRAP_CONFIG_FILE"


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively updates a dictionary `source` with values from another dictionary
    `overrides`. Nested dictionaries are merged; None values in `overrides` never
    replace an existing value.

    Returns:
        Dict[str, Any]: The updated `source` dictionary.
    """
    for key, value in overrides.items():
        if (
            isinstance(value, dict)
            and key in source
            and isinstance(source[key], dict)
        ):
            source[key] = _deep_update(source[key], value)
        elif value is not None:
            source[key] = value
        elif key not in source:
            source[key] = value
    return source


def _resolve_config_path(config_file_path: Optional[str]) -> Optional[Path]:
    if config_file_path:
        return Path(config_file_path)
    from_env = os.environ.get(CONFIG_FILE_ENV)
    if from_env:
        return Path(from_env)
    bundled = static_config.BOOTSTRAP_PROJECT_ROOT / static_config.CONFIG_FILE_DEFAULT
    return bundled if bundled.is_file() else None


def load_yaml_config(
    yaml_config_path: Path,
    current_logger: Optional[logging.Logger] = None,
) -> Dict[str, Any]:
    """
    Read a YAML mapping from disk.

    A missing file, unreadable file or a document that is not a mapping is
    logged as a warning and treated as empty.
    """
    logger_to_use = current_logger if current_logger else module_logger
    if not yaml_config_path.is_file():
        logger_to_use.warning(
            f"Configuration file '{yaml_config_path}' not found. Using defaults and environment variables."
        )
        return {}
    try:
        with open(yaml_config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger_to_use.warning(
            f"Could not parse YAML config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}
    except IOError as e:
        logger_to_use.warning(
            f"Could not read config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}

    if yaml_data is None:
        return {}
    if not isinstance(yaml_data, dict):
        logger_to_use.warning(
            f"Config file '{yaml_config_path}' does not contain a valid YAML dictionary. Ignoring."
        )
        return {}
    logger_to_use.info(f"Loaded configuration from {yaml_config_path}")
    return yaml_data


def load_bootstrap_settings(
    cli_args: Optional[argparse.Namespace] = None,
    config_file_path: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
) -> BootstrapSettings:
    """
    Resolve the bootstrap settings.

    Args:
        cli_args: Parsed command-line arguments (from argparse).
        config_file_path: Explicit YAML file. Falls back to
            $BOOTSTRAP_CONFIG_FILE, then to a bundled bootstrap.yaml.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        A frozen BootstrapSettings instance.

    Raises:
        SystemExit: If the resulting configuration does not validate.
    """
    logger_to_use = current_logger if current_logger else module_logger

    try:
        current_values_dict = BootstrapSettings().model_dump()
    except ValidationError as e:
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise SystemExit(1) from e

    yaml_config_path = _resolve_config_path(config_file_path)
    if yaml_config_path is not None:
        current_values_dict = _deep_update(
            current_values_dict,
            load_yaml_config(yaml_config_path, logger_to_use),
        )

    if cli_args:
        mapped_cli_values: Dict[str, Any] = {}
        if getattr(cli_args, "flavor", None):
            mapped_cli_values["flavor"] = cli_args.flavor
        if getattr(cli_args, "debug", False):
            mapped_cli_values["debug"] = "true"
        if getattr(cli_args, "timer", None) is not None:
            mapped_cli_values["retry_budget"] = cli_args.timer
        current_values_dict = _deep_update(
            current_values_dict, mapped_cli_values
        )

    try:
        # Environment values are already part of the dict; model_validate
        # does not read the environment a second time.
        final_settings = BootstrapSettings.model_validate(current_values_dict)
    except ValidationError as e:
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise SystemExit(1) from e

    logger_to_use.debug(
        "Successfully loaded and validated bootstrap settings"
    )
    return final_settings
