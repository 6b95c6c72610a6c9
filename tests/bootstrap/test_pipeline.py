# tests/bootstrap/test_pipeline.py
# -*- coding: utf-8 -*-
"""
Tests for the flavor pipelines.
"""

import pytest

from bootstrap.config_models import Flavor
from bootstrap.errors import DependencyUnavailableError
from bootstrap.pipeline import build_orchestrator, run_bootstrap
from bootstrap.supervisor import LaunchDecision, LaunchKind

STEP_NAMES = (
    "validate_credentials",
    "fix_device_permissions",
    "remove_stale_pid_files",
    "configure_datalogger",
    "wait_for_database",
    "run_post_config",
    "configure_tls",
    "configure_http_auth",
    "decide_launch",
)


@pytest.fixture
def steps(mocker):
    """Replace every step with a mock, keyed by function name."""
    return {
        name: mocker.patch(f"bootstrap.pipeline.{name}", return_value=None)
        for name in STEP_NAMES
    }


def test_init_flavor_step_order(make_settings, steps):
    orchestrator = build_orchestrator(make_settings(flavor=Flavor.INIT))

    assert [step["name"] for step in orchestrator.steps] == [
        "Credential validation",
        "Device permissions",
        "Remote datalogger",
        "Database readiness",
        "Post configuration",
        "NGINX SSL",
        "NGINX HTTP authentication",
    ]


def test_entrypoint_flavor_step_order(make_settings, steps):
    orchestrator = build_orchestrator(
        make_settings(flavor=Flavor.ENTRYPOINT), extra_args=["bash"]
    )

    assert [step["name"] for step in orchestrator.steps] == [
        "Credential validation",
        "Device permissions",
        "Stale PID cleanup",
        "Database readiness",
        "Post configuration",
        "Supervisor launcher",
    ]
    assert orchestrator.steps[-1]["kwargs"] == {"extra_args": ["bash"]}


def test_init_flavor_runs_every_step(make_settings, steps):
    settings = make_settings(flavor=Flavor.INIT)

    assert run_bootstrap(settings) is None

    for name in (
        "validate_credentials",
        "fix_device_permissions",
        "configure_datalogger",
        "wait_for_database",
        "run_post_config",
        "configure_tls",
        "configure_http_auth",
    ):
        steps[name].assert_called_once_with(app_settings=settings)
    steps["decide_launch"].assert_not_called()
    steps["remove_stale_pid_files"].assert_not_called()


def test_entrypoint_flavor_returns_launch_decision(make_settings, steps):
    decision = LaunchDecision(LaunchKind.SUPERVISOR, ["supervisord", "-n"])
    steps["decide_launch"].return_value = decision

    assert run_bootstrap(make_settings(flavor=Flavor.ENTRYPOINT)) == decision
    steps["configure_tls"].assert_not_called()
    steps["configure_datalogger"].assert_not_called()


def test_missing_credentials_abort_before_post_config(make_settings, mocker):
    """Real credential validation; later steps must never run."""
    mocks = {
        name: mocker.patch(f"bootstrap.pipeline.{name}")
        for name in STEP_NAMES
        if name != "validate_credentials"
    }

    with pytest.raises(SystemExit) as exc_info:
        run_bootstrap(make_settings(flavor=Flavor.INIT))

    assert exc_info.value.code == 1
    for mock in mocks.values():
        mock.assert_not_called()


def test_database_failure_stops_pipeline(make_settings, steps):
    steps["wait_for_database"].side_effect = DependencyUnavailableError(
        "Could not connect to database server"
    )

    with pytest.raises(SystemExit) as exc_info:
        run_bootstrap(make_settings(flavor=Flavor.ENTRYPOINT))

    assert exc_info.value.code == 1
    steps["run_post_config"].assert_not_called()
    steps["decide_launch"].assert_not_called()
