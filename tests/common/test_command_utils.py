# tests/common/test_command_utils.py
# -*- coding: utf-8 -*-
"""
Tests for the command execution helpers.
"""

import subprocess
from unittest.mock import MagicMock

import pytest

from common.command_utils import (
    get_symbols,
    log_bootstrap,
    run_command,
)
from bootstrap.config_models import SYMBOLS_DEFAULT


@pytest.fixture
def mock_logger():
    return MagicMock()


@pytest.fixture
def app_settings():
    settings = MagicMock()
    settings.symbols = {"gear": "G", "error": "E", "warning": "W"}
    return settings


@pytest.mark.parametrize(
    "level", ["debug", "info", "warning", "error", "critical"]
)
def test_log_bootstrap_dispatches_to_level(mock_logger, level):
    log_bootstrap("hello", level, mock_logger)
    getattr(mock_logger, level).assert_called_once_with("hello", exc_info=False)


def test_log_bootstrap_unknown_level_logs_info(mock_logger):
    log_bootstrap("hello", "verbose", mock_logger)
    mock_logger.info.assert_called_once_with("hello", exc_info=False)


def test_get_symbols_falls_back_to_defaults():
    assert get_symbols(None) == SYMBOLS_DEFAULT


def test_run_command_success(mocker, app_settings, mock_logger):
    completed = subprocess.CompletedProcess(["echo", "hi"], 0, "hi\n", "")
    mock_run = mocker.patch("subprocess.run", return_value=completed)

    result = run_command(
        ["echo", "hi"],
        app_settings,
        capture_output=True,
        current_logger=mock_logger,
        cwd="/tmp",
    )

    assert result is completed
    mock_run.assert_called_once_with(
        ["echo", "hi"],
        check=True,
        capture_output=True,
        text=True,
        input=None,
        cwd="/tmp",
        env=None,
    )
    logged = mock_logger.info.call_args[0][0]
    assert logged.startswith("G Executing: echo hi")
    assert "(in /tmp)" in logged


def test_run_command_passes_input_and_env(mocker, app_settings, mock_logger):
    mock_run = mocker.patch(
        "subprocess.run",
        return_value=subprocess.CompletedProcess(["cat"], 0, "", ""),
    )

    run_command(
        ["cat"],
        app_settings,
        cmd_input="data\n",
        env={"A": "1"},
        current_logger=mock_logger,
    )

    kwargs = mock_run.call_args.kwargs
    assert kwargs["input"] == "data\n"
    assert kwargs["env"] == {"A": "1"}


def test_run_command_logs_at_requested_level(mocker, app_settings, mock_logger):
    mocker.patch(
        "subprocess.run",
        return_value=subprocess.CompletedProcess(["pg_isready"], 0, "", ""),
    )

    run_command(
        ["pg_isready", "-h", "db"],
        app_settings,
        current_logger=mock_logger,
        log_level="debug",
    )

    mock_logger.info.assert_not_called()
    mock_logger.debug.assert_called_once_with(
        "G Executing: pg_isready -h db", exc_info=False
    )


def test_run_command_called_process_error(mocker, app_settings, mock_logger):
    mocker.patch(
        "subprocess.run",
        side_effect=subprocess.CalledProcessError(
            2, ["false"], output="", stderr="boom\n"
        ),
    )

    with pytest.raises(subprocess.CalledProcessError):
        run_command(["false"], app_settings, current_logger=mock_logger)

    messages = [c[0][0] for c in mock_logger.error.call_args_list]
    assert messages[0] == "E Command `false` failed (rc 2)."
    assert messages[1] == "   stderr: boom"


def test_run_command_not_found(mocker, app_settings, mock_logger):
    error = FileNotFoundError(2, "No such file", "missing-tool")
    mocker.patch("subprocess.run", side_effect=error)

    with pytest.raises(FileNotFoundError):
        run_command(["missing-tool"], app_settings, current_logger=mock_logger)

    assert "missing-tool" in mock_logger.error.call_args[0][0]

