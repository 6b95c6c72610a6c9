#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging setup shared by every bootstrap step.

The container log is what operators read when a start fails, so each record
carries a level symbol and the optional ``[DSMR]`` prefix.
"""

import logging
import os
import sys
from typing import Dict, Optional

from bootstrap.config_models import SYMBOLS_DEFAULT

module_logger = logging.getLogger(__name__)

LOG_FORMAT = "{log_prefix}%(asctime)s - %(levelname)s - %(symbol)s %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVEL_SYMBOL_KEYS = {
    logging.DEBUG: ("debug", "🐛"),
    logging.INFO: ("info", "ℹ️"),
    logging.WARNING: ("warning", "⚠️"),
    logging.ERROR: ("error", "❌"),
    logging.CRITICAL: ("critical", "🔥"),
}


class SymbolFormatter(logging.Formatter):
    """
    A formatter that exposes a per-level symbol as ``%(symbol)s``.
    """

    def __init__(
        self, fmt=None, datefmt=None, style="%", validate=True, symbols=None
    ):
        super().__init__(fmt, datefmt, style, validate)
        self.symbols = symbols or SYMBOLS_DEFAULT

    def format(self, record):
        key, fallback = _LEVEL_SYMBOL_KEYS.get(record.levelno, (None, ""))
        record.symbol = self.symbols.get(key, fallback) if key else fallback
        return super().format(record)


def resolve_log_level(debug: bool = False) -> int:
    """
    Determine the numeric log level for the bootstrap run.

    LOG_LEVEL from the environment wins when it names a valid level;
    otherwise DEBUG is used when the debug flag is set, INFO if not.
    """
    env_level = os.environ.get("LOG_LEVEL", "").strip().upper()
    if env_level:
        numeric_level = getattr(logging, env_level, None)
        if isinstance(numeric_level, int):
            return numeric_level
    return logging.DEBUG if debug else logging.INFO


def build_log_format(log_prefix: Optional[str] = None) -> str:
    """Fill ``{log_prefix}`` of LOG_FORMAT; a blank prefix leaves nothing behind."""
    prefix = f"{log_prefix.strip()} " if log_prefix and log_prefix.strip() else ""
    return LOG_FORMAT.format(log_prefix=prefix)


def setup_logging(
    log_level: int = logging.INFO,
    log_prefix: Optional[str] = None,
    symbols: Optional[Dict[str, str]] = None,
) -> None:
    """
    (Re)configure the root logger.

    Existing root handlers are replaced, so calling this again after the
    settings are known simply switches level and prefix.

    Parameters:
    log_level: int
        Root log level.
    log_prefix: Optional[str]
        Prepended to every line, e.g. "[DSMR]".
    symbols: Optional[Dict[str, str]]
        Level symbols; SYMBOLS_DEFAULT when omitted.

    Records go to stdout, which is the container log.
    """
    handler = logging.StreamHandler(sys.stdout)
    final_format_str = build_log_format(log_prefix)
    formatter = SymbolFormatter(
        fmt=final_format_str, datefmt=LOG_DATE_FORMAT, symbols=symbols
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    module_logger.debug(
        f"Logging configured. Level: {logging.getLevelName(log_level)}. Format: '{final_format_str}'"
    )
