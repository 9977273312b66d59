from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.config import ClientSettings, get_user_config_dir


def test_defaults() -> None:
    settings = ClientSettings(_env_file=None)

    assert str(settings.base_url) == "http://localhost:8080/"
    assert settings.disable_certificate_validation is False
    assert settings.with_logging is False
    assert not settings.has_credentials


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REST_RESOURCE_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("REST_RESOURCE_API_KEY", "key")
    monkeypatch.setenv("REST_RESOURCE_API_PASSWORD", "secret")
    monkeypatch.setenv("REST_RESOURCE_DISABLE_CERTIFICATE_VALIDATION", "true")

    settings = ClientSettings(_env_file=None)

    assert settings.base_url.host == "api.example.com"
    assert settings.has_credentials
    assert settings.disable_certificate_validation is True


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValidationError):
        ClientSettings(base_url="not a url", _env_file=None)
    with pytest.raises(ValidationError):
        ClientSettings(http_timeout_seconds=0, _env_file=None)


def test_user_config_dir_honours_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setattr("sys.platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    assert get_user_config_dir() == tmp_path / "rest-resource"
