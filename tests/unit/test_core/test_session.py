"""Tests for SessionManager."""

import pytest
from freezegun import freeze_time

from sitepass.auth import SessionManager
from sitepass.models.enums import UserRole
from sitepass.models.user import User


@pytest.mark.unit
def test_new_session_is_anonymous():
    session = SessionManager()

    assert not session.is_authenticated
    assert session.current_user is None
    assert session.role is None
    assert session.is_token_expired
    with pytest.raises(RuntimeError):
        session.get_current_user()


@pytest.mark.unit
def test_set_and_clear_user():
    session = SessionManager()
    session.set_current_user(User(id="u1", email="a@example.com", role=UserRole.ADMIN))
    session.set_tokens("access", "refresh", expires_at=None)

    assert session.role == UserRole.ADMIN
    assert session.get_current_user().is_admin

    session.clear()

    assert not session.is_authenticated
    assert session.access_token is None
    assert session.refresh_token is None


@pytest.mark.unit
@freeze_time("2024-12-09 12:00:00")
def test_token_expiry_has_thirty_second_margin():
    session = SessionManager()
    now = 1733745600  # 2024-12-09 12:00:00 UTC

    session.set_tokens("a", "r", expires_at=now + 60)
    assert not session.is_token_expired

    session.set_tokens("a", "r", expires_at=now + 20)
    assert session.is_token_expired


@pytest.mark.unit
def test_listeners_are_notified_once_each():
    session = SessionManager()
    calls = []

    def listener():
        calls.append("x")

    session.add_listener(listener)
    session.add_listener(listener)
    session.notify()
    session.remove_listener(listener)
    session.notify()

    assert calls == ["x"]
