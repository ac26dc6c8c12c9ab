"""Tests for the team leader authentication service."""

from unittest.mock import MagicMock

import jwt
import pytest
from freezegun import freeze_time

from sitepass.auth import SessionManager
from sitepass.models.auth_models import AuthErrorCode
from sitepass.models.enums import UserRole
from sitepass.services.auth_service import (
    PASSWORD_UPDATED_MESSAGE,
    RESET_REQUESTED_MESSAGE,
    SIGNUP_CONFIRM_MESSAGE,
    AuthService,
)


class FakeAuthApiError(Exception):
    """Stand-in for gotrue's AuthApiError: message plus ``code``."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


def make_token(role=None) -> str:
    claims = {"sub": "user-1", "email": "lead@example.com"}
    if role is not None:
        claims["app_metadata"] = {"app_role": role}
    return jwt.encode(claims, "sitepass-unit-test-signing-key-0123456789", algorithm="HS256")


def auth_response(role=None, user_id="user-1", email="lead@example.com"):
    user = MagicMock(id=user_id, email=email, user_metadata={}, app_metadata={})
    session = MagicMock(access_token=make_token(role), refresh_token="refresh-1", expires_at=4_102_444_800)
    return MagicMock(user=user, session=session)


@pytest.fixture
def session():
    return SessionManager()


@pytest.fixture
def profile_repo():
    repo = MagicMock()
    repo.get_role.return_value = None
    return repo


@pytest.fixture
def service(db, session, logger, profile_repo):
    return AuthService(db=db, session=session, logger=logger, profile_repo=profile_repo)


@pytest.fixture
def auth_api(mock_supabase_client):
    return mock_supabase_client.auth


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.unit
def test_login_establishes_session_with_token_role(service, session, auth_api):
    auth_api.sign_in_with_password.return_value = auth_response(role="teamleader")
    notified = []
    session.add_listener(lambda: notified.append(session.role))

    result = service.login(" Lead@Example.com ", "secret-pw")

    assert result.success
    assert result.role == UserRole.TEAMLEADER
    assert session.is_authenticated
    assert session.refresh_token == "refresh-1"
    assert notified == [UserRole.TEAMLEADER]
    auth_api.sign_in_with_password.assert_called_once_with(
        {"email": "lead@example.com", "password": "secret-pw"},
    )


@pytest.mark.unit
def test_login_falls_back_to_profile_role(service, session, auth_api, profile_repo):
    auth_api.sign_in_with_password.return_value = auth_response(role=None)
    profile_repo.get_role.return_value = "Admin"

    result = service.login("lead@example.com", "secret-pw")

    assert result.role == UserRole.ADMIN
    profile_repo.get_role.assert_called_once_with("user-1")


@pytest.mark.unit
def test_login_unknown_role_is_none(service, session, auth_api):
    auth_api.sign_in_with_password.return_value = auth_response(role="supervisor")

    result = service.login("lead@example.com", "secret-pw")

    assert result.success
    assert session.role is None


@pytest.mark.unit
@pytest.mark.parametrize("email, password", [("", "pw"), ("not-an-email", "pw"), ("lead@example.com", "")])
def test_login_validation(service, auth_api, email, password):
    result = service.login(email, password)

    assert result.error_code == AuthErrorCode.VALIDATION_ERROR
    auth_api.sign_in_with_password.assert_not_called()


@pytest.mark.unit
def test_login_bad_credentials(service, session, auth_api):
    auth_api.sign_in_with_password.side_effect = FakeAuthApiError("Invalid login credentials", "invalid_credentials")

    result = service.login("lead@example.com", "wrong")

    assert result.error_code == AuthErrorCode.INVALID_CREDENTIALS
    assert result.error_message == "Incorrect email or password."
    assert not session.is_authenticated


@pytest.mark.unit
def test_login_network_error(service, auth_api):
    auth_api.sign_in_with_password.side_effect = ConnectionError("dns failure")

    result = service.login("lead@example.com", "pw-12345")

    assert result.error_code == AuthErrorCode.NETWORK_ERROR


@pytest.mark.unit
def test_login_offline(offline_db, session, logger):
    service = AuthService(db=offline_db, session=session, logger=logger)

    result = service.login("lead@example.com", "pw-12345")

    assert result.error_code == AuthErrorCode.NETWORK_ERROR


@pytest.mark.unit
def test_rate_limit_locks_after_three_failures(service, auth_api):
    auth_api.sign_in_with_password.side_effect = FakeAuthApiError("Invalid login credentials", "invalid_credentials")

    with freeze_time("2024-12-09 12:00:00") as frozen:
        for _ in range(3):
            service.login("lead@example.com", "wrong")

        locked, remaining = service.check_rate_limit("lead@example.com")
        assert locked
        assert 0 < remaining <= 31

        result = service.login("lead@example.com", "wrong")
        assert result.error_code == AuthErrorCode.RATE_LIMITED
        assert auth_api.sign_in_with_password.call_count == 3

        frozen.tick(31)
        assert service.check_rate_limit("lead@example.com") == (False, 0)


# ---------------------------------------------------------------------------
# Sign-up
# ---------------------------------------------------------------------------

@pytest.mark.unit
def test_register_awaiting_email_confirmation(service, session, auth_api):
    auth_api.sign_up.return_value = MagicMock(user=MagicMock(id="user-2"), session=None)

    result = service.register("new@example.com", "long-enough")

    assert result.success
    assert result.user_id is None
    assert result.message == SIGNUP_CONFIRM_MESSAGE
    assert not session.is_authenticated


@pytest.mark.unit
def test_register_with_immediate_session(service, session, auth_api):
    auth_api.sign_up.return_value = auth_response(role="new_teamleader", user_id="user-2", email="new@example.com")

    result = service.register("new@example.com", "long-enough")

    assert result.user_id == "user-2"
    assert session.role == UserRole.NEW_TEAMLEADER


@pytest.mark.unit
def test_register_rejects_short_password(service, auth_api):
    result = service.register("new@example.com", "short")

    assert result.error_code == AuthErrorCode.VALIDATION_ERROR
    auth_api.sign_up.assert_not_called()


@pytest.mark.unit
def test_register_existing_email(service, auth_api):
    auth_api.sign_up.side_effect = FakeAuthApiError("User already registered", "user_already_exists")

    result = service.register("lead@example.com", "long-enough")

    assert result.error_code == AuthErrorCode.EMAIL_ALREADY_EXISTS


# ---------------------------------------------------------------------------
# Logout + refresh
# ---------------------------------------------------------------------------

@pytest.mark.unit
def test_logout_clears_session(service, session, auth_api):
    auth_api.sign_in_with_password.return_value = auth_response(role="admin")
    service.login("lead@example.com", "pw-12345")
    notified = []
    session.add_listener(lambda: notified.append(session.is_authenticated))

    service.logout()

    assert not session.is_authenticated
    assert session.access_token is None
    assert notified == [False]
    auth_api.sign_out.assert_called_once()


@pytest.mark.unit
def test_logout_survives_server_failure(service, session, auth_api):
    auth_api.sign_out.side_effect = RuntimeError("500")
    service.logout()
    assert not session.is_authenticated


@pytest.mark.unit
def test_refresh_skipped_when_token_fresh(service, session, auth_api):
    auth_api.sign_in_with_password.return_value = auth_response(role="admin")
    service.login("lead@example.com", "pw-12345")

    assert service.refresh_session_token().success
    auth_api.refresh_session.assert_not_called()


@pytest.mark.unit
def test_refresh_failure_means_session_expired(service, session, teamleader_session, auth_api):
    session.set_current_user(teamleader_session.current_user)
    session.set_tokens("old", "refresh-1", expires_at=None)
    auth_api.refresh_session.side_effect = FakeAuthApiError("Invalid Refresh Token", "refresh_token_not_found")

    result = service.refresh_session_token()

    assert not result.success
    assert result.error_code == AuthErrorCode.SESSION_EXPIRED


@pytest.mark.unit
def test_refresh_network_error_is_retried_later(service, session, teamleader_session, auth_api):
    session.set_current_user(teamleader_session.current_user)
    session.set_tokens("old", "refresh-1", expires_at=None)
    auth_api.refresh_session.side_effect = TimeoutError()

    assert service.refresh_session_token().success


@pytest.mark.unit
def test_refresh_applies_role_change(service, session, teamleader_session, auth_api):
    session.set_current_user(teamleader_session.current_user)
    session.set_tokens("old", "refresh-1", expires_at=None)
    auth_api.refresh_session.return_value = auth_response(role="admin")
    notified = []
    session.add_listener(lambda: notified.append(session.role))

    result = service.refresh_session_token()

    assert result.role == UserRole.ADMIN
    assert notified == [UserRole.ADMIN]
    assert session.refresh_token == "refresh-1"


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------

@pytest.mark.unit
def test_reset_request_always_reports_success(service, auth_api):
    auth_api.reset_password_for_email.side_effect = RuntimeError("user not found")

    result = service.request_password_reset("nobody@example.com")

    assert result.success
    assert result.message == RESET_REQUESTED_MESSAGE


@pytest.mark.unit
def test_recovery_code_signs_user_in(service, session, auth_api):
    auth_api.verify_otp.return_value = auth_response(role="teamleader")

    result = service.verify_recovery_code("lead@example.com", " 123456 ")

    assert result.success
    assert session.is_authenticated
    auth_api.verify_otp.assert_called_once_with(
        {"email": "lead@example.com", "token": "123456", "type": "recovery"},
    )


@pytest.mark.unit
def test_recovery_code_required(service, auth_api):
    result = service.verify_recovery_code("lead@example.com", "  ")
    assert result.error_code == AuthErrorCode.VALIDATION_ERROR
    auth_api.verify_otp.assert_not_called()


@pytest.mark.unit
def test_update_password_checks(service, session, teamleader_session, auth_api):
    assert service.update_password("long-enough", "different!").error_message == "Passwords do not match."
    assert service.update_password("long-enough", "long-enough").error_code == AuthErrorCode.SESSION_EXPIRED

    session.set_current_user(teamleader_session.current_user)
    result = service.update_password("long-enough", "long-enough")

    assert result.success
    assert result.message == PASSWORD_UPDATED_MESSAGE
    auth_api.update_user.assert_called_once_with({"password": "long-enough"})
