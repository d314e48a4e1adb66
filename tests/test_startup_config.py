"""
Tests for startup configuration validation.
"""
import pytest

from credential_fusion.web_api.settings import SETTING_SOURCES, ServiceSettings, read_settings
from credential_fusion.web_api.startup_config import validate_startup_configuration


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
  for env_name in SETTING_SOURCES:
    monkeypatch.delenv(env_name, raising=False)


def test_defaults_when_unset():
  settings, errors = read_settings({})
  assert settings == ServiceSettings()
  assert settings.white_tolerance == 250
  assert errors == []


def test_read_settings_parses_values():
  settings, errors = read_settings({
    "FUSION_WHITE_TOLERANCE": "240",
    "FUSION_FETCH_TIMEOUT_SECONDS": "2.5",
    "FUSION_MAX_REMOTE_BYTES": "1024",
    "FUSION_MAX_BODY_BYTES": "2048",
    "FUSION_CORS_ORIGINS": "https://a.example, https://b.example",
  })
  assert errors == []
  assert settings.white_tolerance == 240
  assert settings.fetch_timeout_seconds == 2.5
  assert settings.max_remote_bytes == 1024
  assert settings.max_body_bytes == 2048
  assert settings.cors_origins == ("https://a.example", "https://b.example")


def test_invalid_values_fall_back_to_defaults():
  settings, errors = read_settings({
    "FUSION_WHITE_TOLERANCE": "300",
    "FUSION_FETCH_TIMEOUT_SECONDS": "soon",
  })
  assert settings.white_tolerance == 250
  assert settings.fetch_timeout_seconds == ServiceSettings().fetch_timeout_seconds
  assert len(errors) == 2


def test_startup_config_strict_raises_on_invalid_setting(monkeypatch):
  monkeypatch.setenv("FUSION_STRICT_STARTUP_CONFIG", "true")
  monkeypatch.setenv("FUSION_WHITE_TOLERANCE", "-5")

  with pytest.raises(RuntimeError):
    validate_startup_configuration()


def test_startup_config_non_strict_returns_warnings(monkeypatch):
  monkeypatch.setenv("FUSION_STRICT_STARTUP_CONFIG", "false")
  monkeypatch.setenv("FUSION_MAX_BODY_BYTES", "0")

  warnings = validate_startup_configuration()
  assert any("FUSION_MAX_BODY_BYTES" in msg for msg in warnings)
  assert any("allows any origin" in msg for msg in warnings)


def test_startup_config_restricted_cors_has_no_warnings(monkeypatch):
  monkeypatch.setenv("FUSION_STRICT_STARTUP_CONFIG", "true")
  monkeypatch.setenv("FUSION_CORS_ORIGINS", "https://app.example")

  assert validate_startup_configuration() == []
