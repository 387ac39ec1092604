"""Tests for settings loading and validation."""

import pytest
from pydantic import ValidationError

from fabric_capacity.config import Settings


@pytest.fixture
def base_env(monkeypatch):
    monkeypatch.setenv("TEMPORAL_ADDRESS", "ns.acct.tmprl.cloud:7233")
    monkeypatch.setenv("TEMPORAL_NAMESPACE", "ns.acct")
    for name in ("TEMPORAL_API_KEY", "TEMPORAL_CERT_PATH", "TEMPORAL_KEY_PATH", "SCHEDULE_TARGET_SKU"):
        monkeypatch.delenv(name, raising=False)


def load_settings() -> Settings:
    return Settings(_env_file=None)


def test_defaults(base_env):
    """Test default orchestration settings."""
    settings = load_settings()

    assert settings.fabric_api_version == "2023-11-01"
    assert settings.default_timeout_minutes == 10
    assert settings.poll_interval_seconds == 30
    assert settings.paused_poll_interval_seconds == 60
    assert settings.management_scope == "https://management.azure.com/.default"


def test_auth_config_required(base_env):
    """Test that a missing Temporal credential is reported."""
    with pytest.raises(ValueError, match="TEMPORAL_API_KEY"):
        load_settings().validate_auth_config()


def test_api_key_auth(base_env, monkeypatch):
    """Test API key selection."""
    monkeypatch.setenv("TEMPORAL_API_KEY", "secret")
    settings = load_settings()

    settings.validate_auth_config()
    assert settings.use_api_key_auth() is True


def test_schedule_sku_is_normalized(base_env, monkeypatch):
    """Test that the scheduled SKU is parsed and normalized."""
    monkeypatch.setenv("SCHEDULE_TARGET_SKU", "f32")
    assert load_settings().schedule_target_sku == "F32"


def test_schedule_sku_rejects_unknown(base_env, monkeypatch):
    """Test that an unknown scheduled SKU fails validation."""
    monkeypatch.setenv("SCHEDULE_TARGET_SKU", "P1")
    with pytest.raises(ValidationError):
        load_settings()


def test_schedule_config_required(base_env):
    """Test that creating a schedule needs a capacity and SKU."""
    with pytest.raises(ValueError, match="SCHEDULE_RESOURCE_ID"):
        load_settings().validate_schedule_config()
