"""Tests for device preferences stored in local SQLite."""

import pytest

from sitepass.services.app_settings_service import AppSettingsService


@pytest.fixture
def settings(db, logger):
    return AppSettingsService(db=db, logger=logger)


@pytest.mark.unit
def test_missing_keys_use_defaults(settings):
    assert settings.get("nope") is None
    assert settings.get_dark_mode() is False
    assert settings.get_dark_mode(default=True) is True
    assert settings.get_auto_scroll() is True
    assert settings.get_last_export_dir() is None


@pytest.mark.unit
def test_screen_preferences_persist(settings):
    assert settings.set_dark_mode(True)
    assert settings.set_auto_scroll(False)

    assert settings.get_dark_mode() is True
    assert settings.get_auto_scroll() is False


@pytest.mark.unit
def test_set_overwrites_value(settings):
    settings.set_last_export_dir("/tmp/a")
    settings.set_last_export_dir("/tmp/b")
    assert settings.get_last_export_dir() == "/tmp/b"


@pytest.mark.unit
@pytest.mark.parametrize("raw, expected", [("1", True), ("YES", True), ("on", True), ("false", False), ("0", False)])
def test_get_bool_parsing(settings, raw, expected):
    settings.set("flag", raw)
    assert settings.get_bool("flag", default=not expected) is expected


@pytest.mark.unit
def test_write_failure_returns_false(settings, db):
    db.close()
    assert settings.set_dark_mode(True) is False
    assert settings.get("screen_display_dark_mode") is None
