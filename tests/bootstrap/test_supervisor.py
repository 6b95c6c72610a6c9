# tests/bootstrap/test_supervisor.py
# -*- coding: utf-8 -*-
"""
Tests for the supervisor launcher.
"""

from bootstrap.config_models import Flavor
from bootstrap.supervisor import (
    LaunchDecision,
    LaunchKind,
    decide_launch,
    exec_launch,
)


def test_decide_launch_defaults_to_supervisord(make_settings):
    decision = decide_launch(make_settings(flavor=Flavor.ENTRYPOINT))
    assert decision == LaunchDecision(
        LaunchKind.SUPERVISOR, ["supervisord", "-n"]
    )


def test_decide_launch_command_variable(make_settings):
    settings = make_settings(
        flavor=Flavor.ENTRYPOINT, command="python3 manage.py shell -c 'print(1)'"
    )

    decision = decide_launch(settings)

    assert decision.kind == LaunchKind.OVERRIDE
    assert decision.argv == ["python3", "manage.py", "shell", "-c", "print(1)"]


def test_decide_launch_extra_args_win(make_settings):
    settings = make_settings(flavor=Flavor.ENTRYPOINT, command="ignored")

    decision = decide_launch(settings, extra_args=["bash", "-l"])

    assert decision == LaunchDecision(LaunchKind.OVERRIDE, ["bash", "-l"])


def test_decide_launch_blank_command_is_ignored(make_settings):
    decision = decide_launch(make_settings(command="   "))
    assert decision.kind == LaunchKind.SUPERVISOR


def test_exec_launch_replaces_process(mocker):
    mock_execvp = mocker.patch("bootstrap.supervisor.os.execvp")

    exec_launch(LaunchDecision(LaunchKind.SUPERVISOR, ["supervisord", "-n"]))

    mock_execvp.assert_called_once_with(
        "supervisord", ["supervisord", "-n"]
    )
