# tests/bootstrap/test_prerequisites.py
# -*- coding: utf-8 -*-
"""
Tests for credential validation, device permissions and PID cleanup.
"""

import os
import stat
from unittest.mock import MagicMock

import pytest

from bootstrap.config_models import AdminSettings, Flavor
from bootstrap.errors import MissingConfigurationError
from bootstrap.prerequisites import (
    fix_device_permissions,
    remove_stale_pid_files,
    validate_credentials,
)


@pytest.fixture
def mock_logger():
    return MagicMock()


def test_validate_credentials_init_ok(make_settings, mock_logger):
    settings = make_settings(
        flavor=Flavor.INIT, admin={"username": "admin", "password": "secret"}
    )
    validate_credentials(settings, mock_logger)


def test_validate_credentials_init_missing_password(make_settings):
    settings = make_settings(flavor=Flavor.INIT, admin={"username": "admin"})

    with pytest.raises(MissingConfigurationError) as exc_info:
        validate_credentials(settings)

    assert "DSMRREADER_ADMIN_PASSWORD" in str(exc_info.value)
    assert "DSMRREADER_ADMIN_USER" not in str(exc_info.value)


def test_validate_credentials_entrypoint_requires_email(make_settings):
    settings = make_settings(
        flavor=Flavor.ENTRYPOINT,
        admin={"username": "admin", "password": "secret"},
    )

    with pytest.raises(MissingConfigurationError, match="DSMR_EMAIL"):
        validate_credentials(settings)


def test_validate_credentials_empty_string_is_missing(make_settings):
    settings = make_settings(
        flavor=Flavor.INIT, admin={"username": "", "password": ""}
    )

    with pytest.raises(MissingConfigurationError) as exc_info:
        validate_credentials(settings)

    assert "DSMRREADER_ADMIN_USER, DSMRREADER_ADMIN_PASSWORD" in str(
        exc_info.value
    )


def test_validate_credentials_from_environment(monkeypatch, make_settings):
    monkeypatch.setenv("DSMR_USER", "admin")
    monkeypatch.setenv("DSMR_EMAIL", "admin@example.com")
    monkeypatch.setenv("DSMR_PASSWORD", "secret")
    settings = make_settings(flavor=Flavor.ENTRYPOINT)
    assert settings.admin == AdminSettings()

    validate_credentials(settings)


def test_fix_device_permissions_without_device(make_settings, mocker):
    mock_chmod = mocker.patch("bootstrap.prerequisites.chmod_matching_paths")

    fix_device_permissions(make_settings())

    mock_chmod.assert_not_called()


def test_fix_device_permissions_with_devices(make_settings, tmp_path):
    settings = make_settings()
    devices = [tmp_path / "ttyUSB0", tmp_path / "ttyUSB1"]
    for device in devices:
        device.write_text("")
        os.chmod(device, 0o600)

    fix_device_permissions(settings)

    for device in devices:
        assert stat.S_IMODE(os.stat(device).st_mode) == 0o666


def test_fix_device_permissions_propagates_oserror(make_settings, tmp_path, mocker):
    (tmp_path / "ttyUSB0").write_text("")
    mocker.patch(
        "bootstrap.prerequisites.chmod_matching_paths",
        side_effect=PermissionError("denied"),
    )

    with pytest.raises(PermissionError):
        fix_device_permissions(make_settings())


def test_remove_stale_pid_files(make_settings, tmp_path, mock_logger):
    (tmp_path / "supervisord.pid").write_text("42")
    (tmp_path / "nginx.pid").write_text("43")

    remove_stale_pid_files(make_settings(flavor=Flavor.ENTRYPOINT), mock_logger)

    assert not list(tmp_path.glob("*.pid"))
    mock_logger.info.assert_any_call(
        "Removed 2 stale PID file(s).", exc_info=False
    )


def test_remove_stale_pid_files_none_present(make_settings, mock_logger):
    remove_stale_pid_files(make_settings(), mock_logger)
    assert mock_logger.info.call_count == 1
