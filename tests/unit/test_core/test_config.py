"""Tests for AppConfig loading."""

import pytest

from sitepass.config import AppConfig, get_config, reset_config


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.mark.unit
def test_defaults(monkeypatch):
    monkeypatch.delenv("SIGNED_OUT_WINDOW_DAYS", raising=False)
    config = AppConfig(_env_file=None)

    assert config.CONTRACTORS_TABLE == "contractors"
    assert config.SIGNOUT_RPC == "request_signout"
    assert config.REALTIME_CHANNEL == "screen-contractors-db-changes"
    assert config.SIGNED_OUT_WINDOW_DAYS == 7
    assert config.LOGIN_MAX_ATTEMPTS == 3
    assert config.LOGIN_LOCKOUT_SECONDS == 30


@pytest.mark.unit
def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ROW_LIMIT", "250")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")

    config = AppConfig(_env_file=None)

    assert config.ROW_LIMIT == 250
    assert config.SUPABASE_ANON_KEY.get_secret_value() == "anon-key"
    assert "anon-key" not in repr(config)


@pytest.mark.unit
def test_get_config_is_cached():
    assert get_config() is get_config()


@pytest.mark.unit
def test_reset_config_rereads(monkeypatch):
    first = get_config()
    monkeypatch.setenv("ROW_LIMIT", "10")
    reset_config()

    second = get_config()

    assert second is not first
    assert second.ROW_LIMIT == 10
