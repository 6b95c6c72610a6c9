# tests/bootstrap/test_main.py
# -*- coding: utf-8 -*-
"""
Tests for the command line entry point.
"""

import pytest

from bootstrap import main as main_module
from bootstrap.config_models import Flavor
from bootstrap.supervisor import LaunchDecision, LaunchKind


@pytest.fixture
def patched(mocker, make_settings):
    settings = make_settings(flavor=Flavor.ENTRYPOINT)
    return {
        "settings": settings,
        "setup_logging": mocker.patch.object(main_module, "setup_logging"),
        "load": mocker.patch.object(
            main_module, "load_bootstrap_settings", return_value=settings
        ),
        "run": mocker.patch.object(main_module, "run_bootstrap"),
        "exec": mocker.patch.object(main_module, "exec_launch"),
    }


def test_build_parser_options():
    args = main_module.build_parser().parse_args(
        ["--flavor", "init", "--config", "b.yaml", "--debug", "--timer", "5"]
    )
    assert args.flavor == "init"
    assert args.config_file == "b.yaml"
    assert args.debug is True
    assert args.timer == 5
    assert args.command == []


def test_build_parser_rejects_unknown_flavor():
    with pytest.raises(SystemExit):
        main_module.build_parser().parse_args(["--flavor", "compose"])


def test_main_init_flavor_returns_zero(patched):
    patched["run"].return_value = None

    assert main_module.main(["--flavor", "init"]) == 0

    patched["exec"].assert_not_called()
    cli_args = patched["load"].call_args.kwargs["cli_args"]
    assert cli_args.flavor == "init"


def test_main_entrypoint_execs_decision(patched):
    decision = LaunchDecision(LaunchKind.SUPERVISOR, ["supervisord", "-n"])
    patched["run"].return_value = decision

    main_module.main([])

    patched["exec"].assert_called_once_with(decision)


def test_main_passes_trailing_command(patched):
    patched["run"].return_value = None

    main_module.main(["--", "python3", "manage.py", "shell"])

    assert patched["run"].call_args[0][2] == ["python3", "manage.py", "shell"]


def test_main_exec_failure_returns_one(patched):
    patched["run"].return_value = LaunchDecision(
        LaunchKind.OVERRIDE, ["does-not-exist"]
    )
    patched["exec"].side_effect = FileNotFoundError("does-not-exist")

    assert main_module.main([]) == 1


def test_main_configures_log_prefix(patched):
    patched["run"].return_value = None

    main_module.main([])

    assert patched["setup_logging"].call_args.kwargs["log_prefix"] == "[DSMR]"
