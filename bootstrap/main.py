# bootstrap/main.py
# -*- coding: utf-8 -*-
"""
Command line entry point of the DSMR reader container bootstrap.
"""

import argparse
import logging
import sys
from typing import List, Optional

from bootstrap.config_loader import load_bootstrap_settings
from bootstrap.config_models import Flavor
from bootstrap.pipeline import run_bootstrap
from bootstrap.supervisor import exec_launch
from common.core_utils import resolve_log_level, setup_logging

logger = logging.getLogger("dsmr-bootstrap")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dsmr-bootstrap",
        description="First-run bootstrap of the DSMR reader container.",
    )
    parser.add_argument(
        "--flavor",
        choices=[flavor.value for flavor in Flavor],
        default=None,
        help="Image flavor (default: $BOOTSTRAP_FLAVOR or 'entrypoint').",
    )
    parser.add_argument(
        "--config",
        dest="config_file",
        default=None,
        help="Optional YAML configuration file.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (same as DEBUG=true).",
    )
    parser.add_argument(
        "--timer",
        type=int,
        default=None,
        help="Database readiness retry budget in seconds (same as TIMER).",
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Override command executed instead of supervisord.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(log_level=resolve_log_level(args.debug))

    app_settings = load_bootstrap_settings(
        cli_args=args, config_file_path=args.config_file, current_logger=logger
    )
    setup_logging(
        log_level=resolve_log_level(app_settings.debug_enabled),
        log_prefix=app_settings.log_prefix,
        symbols=app_settings.symbols,
    )
    logger.debug(f"Bootstrap settings: {app_settings!r}")

    extra_args = [arg for arg in args.command if arg != "--"]
    decision = run_bootstrap(app_settings, logger, extra_args)
    if decision is None:
        logger.info("✨ Bootstrap finished.")
        return 0

    try:
        exec_launch(decision)
    except OSError as e:
        logger.critical(f"🔥 Could not execute {decision.argv[0]}: {e}")
        return 1
    return 0  # pragma: no cover


if __name__ == "__main__":
    sys.exit(main())
