# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system utility functions: atomic writes, glob-based removal and
permission changes.
"""

import glob
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from bootstrap.config_models import BootstrapSettings

from .command_utils import get_symbols, log_bootstrap

module_logger = logging.getLogger(__name__)


def write_file_atomic(
    file_path: Union[str, Path],
    content: str,
    app_settings: Optional[BootstrapSettings],
    mode: Optional[int] = None,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Replace the contents of a file in a single step.

    The content is written to a temporary file in the target directory and
    moved over the target with os.replace, so readers either see the old
    file or the complete new one. The target directory must exist.

    Parameters:
        file_path: The file to (over)write.
        content (str): The full new content.
        app_settings (Optional[BootstrapSettings]): Settings providing logging symbols.
        mode (Optional[int]): Permission bits for the new file. When omitted the
            mode of an existing target is kept, 0o644 otherwise.
        current_logger (Optional[logging.Logger]): Logger to use.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    target = Path(file_path)

    if mode is None:
        mode = target.stat().st_mode & 0o777 if target.exists() else 0o644

    fd, tmp_name = tempfile.mkstemp(
        dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except OSError:
        log_bootstrap(
            f"{symbols.get('error', '❌')} Failed to write {target}.",
            "error",
            logger_to_use,
            app_settings,
        )
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    log_bootstrap(
        f"Wrote {len(content)} bytes to {target}",
        "debug",
        logger_to_use,
        app_settings,
    )


def remove_matching_files(
    pattern: str,
    app_settings: Optional[BootstrapSettings],
    current_logger: Optional[logging.Logger] = None,
) -> List[str]:
    """
    Remove every regular file matching a glob pattern.

    Files that disappear between matching and removal are ignored.

    Returns:
        List[str]: The paths that were removed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    removed: List[str] = []
    for path in sorted(glob.glob(pattern)):
        if not os.path.isfile(path):
            continue
        try:
            os.unlink(path)
        except FileNotFoundError:
            continue
        removed.append(path)
        log_bootstrap(f"Removed {path}", "debug", logger_to_use, app_settings)
    return removed


def chmod_matching_paths(
    pattern: str,
    mode: int,
    app_settings: Optional[BootstrapSettings],
    current_logger: Optional[logging.Logger] = None,
) -> List[str]:
    """
    Apply permission bits to every path matching a glob pattern.

    OSError from chmod propagates to the caller.

    Returns:
        List[str]: The paths whose mode was changed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    changed: List[str] = []
    for path in sorted(glob.glob(pattern)):
        os.chmod(path, mode)
        changed.append(path)
        log_bootstrap(
            f"Set mode {oct(mode)} on {path}",
            "debug",
            logger_to_use,
            app_settings,
        )
    return changed
