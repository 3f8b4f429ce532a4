"""
Tests for the subscription check.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from setup_action.config import Settings
from setup_action.subscription import validate_subscription


@pytest.fixture
def settings(tmp_path):
    return Settings(repository="octo/repo", tool_cache_dir=tmp_path, temp_dir=tmp_path)


def _response(status_code):
    response = MagicMock()
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    return response


@patch("setup_action.subscription.requests.get")
def test_valid_subscription(mock_get, settings):
    mock_get.return_value = _response(200)

    validate_subscription(settings)

    mock_get.assert_called_once_with(
        "https://agent.api.stepsecurity.io/v1/github/octo/repo/actions/subscription",
        timeout=3,
    )


@patch("setup_action.subscription.requests.get")
def test_rejected_subscription_exits(mock_get, settings, caplog):
    mock_get.return_value = _response(403)

    with pytest.raises(SystemExit) as exc_info:
        validate_subscription(settings)

    assert exc_info.value.code == 1
    assert "Subscription is not valid" in caplog.text


@pytest.mark.parametrize("error", [
    requests.Timeout("read timed out"),
    requests.ConnectionError("name resolution failed"),
])
@patch("setup_action.subscription.requests.get")
def test_unreachable_api_continues(mock_get, error, settings, caplog):
    mock_get.side_effect = error

    with caplog.at_level("INFO", logger="setup_action.subscription"):
        validate_subscription(settings)

    assert "Timeout or API not reachable" in caplog.text


def test_settings_from_env(tmp_path):
    env = {
        "GITHUB_REPOSITORY": "octo/repo",
        "RUNNER_TOOL_CACHE": str(tmp_path / "cache"),
        "RUNNER_TEMP": str(tmp_path / "temp"),
        "SETUP_ACTION_CONFIG": str(tmp_path / "tool.yaml"),
    }

    settings = Settings.from_env(env)

    assert settings.repository == "octo/repo"
    assert settings.tool_cache_dir == tmp_path / "cache"
    assert settings.temp_dir == tmp_path / "temp"
    assert settings.config_path == tmp_path / "tool.yaml"
    assert settings.subscription_url.endswith("/octo/repo/actions/subscription")


def test_settings_defaults_outside_runner():
    settings = Settings.from_env({})

    assert settings.repository == ""
    assert settings.config_path is None
    assert settings.tool_cache_dir == Path.home() / ".cache" / "setup-action" / "tool-cache"
