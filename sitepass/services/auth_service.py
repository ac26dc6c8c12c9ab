"""
Authentication Service.

Single orchestrator for every team leader authentication concern: login,
sign-up, logout, token refresh, password reset (email link request and
recovery code), password change, rate limiting and error classification.

Sits between the views and Supabase so that ``TeamLoginView`` and
``ResetPasswordView`` stay thin form handlers.  All methods return typed
``AuthResult`` or ``ValidationResult`` models; views never inspect raw
exceptions.
"""

from __future__ import annotations

import re
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sitepass.auth import SessionManager
from sitepass.database import DatabaseManager
from sitepass.errors import BackendUnavailableError, SitePassError
from sitepass.jwt_auth import normalize_role, resolve_role
from sitepass.logger import StructuredLogger
from sitepass.models.auth_models import (
    SUPABASE_ERROR_MAP,
    AuthErrorCode,
    AuthResult,
    RateLimitState,
    ValidationResult,
)
from sitepass.models.enums import UserRole
from sitepass.models.user import User
from sitepass.repositories.profile_repository import ProfileRepository


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_EMAIL_RE: re.Pattern[str] = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

_NETWORK_MESSAGE: str = "Cannot reach the server. Check your internet connection."

RESET_REQUESTED_MESSAGE: str = (
    "If this email is registered, you will receive a password reset email "
    "containing a recovery code."
)
PASSWORD_UPDATED_MESSAGE: str = "Password updated successfully. You can now log in."
SIGNUP_CONFIRM_MESSAGE: str = (
    "Account created. Check your email to confirm it, then sign in. "
    "An administrator must approve your account before the dashboard is available."
)


class AuthService:
    """Centralised authentication service.

    Parameters
    ----------
    db:
        Initialised database manager.
    session:
        Shared session holder.  Listeners are notified after every change.
    logger:
        Structured JSON logger.
    profile_repo:
        Optional profile lookup, consulted when the access token carries
        no role claim.
    password_min_length, max_failed_attempts, lockout_seconds:
        Policy knobs, normally taken from ``AppConfig``.
    """

    def __init__(
        self,
        db: DatabaseManager,
        session: SessionManager,
        logger: StructuredLogger,
        profile_repo: Optional[ProfileRepository] = None,
        password_min_length: int = 8,
        max_failed_attempts: int = 3,
        lockout_seconds: int = 30,
    ) -> None:
        self._db: DatabaseManager = db
        self._session: SessionManager = session
        self._logger: StructuredLogger = logger
        self._profile_repo: Optional[ProfileRepository] = profile_repo
        self._password_min_length: int = password_min_length
        self._max_failed_attempts: int = max_failed_attempts
        self._lockout_seconds: int = lockout_seconds

        # In-memory only: a kiosk restart clears lockouts.
        self._rate_limits: dict[str, RateLimitState] = {}
        self._rate_lock: threading.Lock = threading.Lock()

    # ==================================================================
    # Validation helpers
    # ==================================================================

    @staticmethod
    def validate_email(email: str) -> ValidationResult:
        """Validate an email address against a simplified RFC 5322 regex."""
        if not email or not email.strip():
            return ValidationResult(
                is_valid=False,
                error_message="Email address is required.",
            )
        if not _EMAIL_RE.match(email.strip()):
            return ValidationResult(
                is_valid=False,
                error_message="Please enter a valid email address.",
            )
        return ValidationResult(is_valid=True)

    def validate_password(self, password: str) -> ValidationResult:
        """Length-only policy; complexity is left to the backend."""
        if len(password or "") < self._password_min_length:
            return ValidationResult(
                is_valid=False,
                error_message=(
                    f"Password must be at least {self._password_min_length} characters."
                ),
            )
        return ValidationResult(is_valid=True)

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    # ==================================================================
    # Rate limiting
    # ==================================================================

    def check_rate_limit(self, email: str) -> tuple[bool, int]:
        """Return ``(is_locked, remaining_seconds)`` for *email*."""
        with self._rate_lock:
            state = self._rate_limits.get(email)
            if state is None or state.lockout_until is None:
                return False, 0

            now = datetime.now(tz=timezone.utc)
            if now >= state.lockout_until:
                self._rate_limits.pop(email, None)
                return False, 0

            remaining = int((state.lockout_until - now).total_seconds()) + 1
            return True, remaining

    def _record_failed_attempt(self, email: str) -> None:
        with self._rate_lock:
            state = self._rate_limits.get(email, RateLimitState())
            state.failed_attempts += 1
            if state.failed_attempts >= self._max_failed_attempts:
                state.lockout_until = (
                    datetime.now(tz=timezone.utc)
                    + timedelta(seconds=self._lockout_seconds)
                )
                self._logger.warning(
                    "Rate limit engaged for %s: %d failed attempts. Locked for %ds.",
                    email,
                    state.failed_attempts,
                    self._lockout_seconds,
                )
            self._rate_limits[email] = state

    def _reset_rate_limit(self, email: str) -> None:
        with self._rate_lock:
            self._rate_limits.pop(email, None)

    # ==================================================================
    # Login
    # ==================================================================

    def login(self, email: str, password: str) -> AuthResult:
        """Password sign-in for team leaders, admins and display accounts.

        On success the session holds the user, its tokens and the role
        resolved from the access token claim (profile table as fallback),
        and session listeners have been notified.
        """
        email_check = self.validate_email(email)
        if not email_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=email_check.error_message,
            )
        if not password:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message="Password is required.",
            )

        email = self.normalize_email(email)

        is_locked, remaining = self.check_rate_limit(email)
        if is_locked:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.RATE_LIMITED,
                error_message=(
                    f"Too many failed attempts. Please wait {remaining} seconds."
                ),
            )

        try:
            response = self._db.supabase.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except BackendUnavailableError as exc:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=str(exc),
            )
        except Exception as exc:
            return self._classify_error(exc, event="LOGIN_FAILED", email=email)

        user = self._establish_session(response.user, response.session, email)
        self._reset_rate_limit(email)
        self._logger.info(
            "User authenticated: %s (role: %s)",
            user.email,
            user.role or "none",
            extra={"event": "LOGIN", "email": user.email, "user_id": user.id},
        )
        return AuthResult(
            success=True,
            user_id=user.id,
            email=user.email,
            role=user.role,
        )

    def _establish_session(
        self,
        user_data: Any,
        session_data: Any,
        email: str,
    ) -> User:
        """Populate the session from a Supabase auth response and notify."""
        access_token: Optional[str] = getattr(session_data, "access_token", None)
        role = self._resolve_role(user_data, access_token)

        user_metadata = getattr(user_data, "user_metadata", None) or {}
        current_user = User(
            id=str(user_data.id),
            email=getattr(user_data, "email", None) or email,
            full_name=user_metadata.get("full_name", "") or email.split("@")[0],
            role=role,
        )

        self._session.set_current_user(current_user)
        if session_data is not None:
            self._session.set_tokens(
                access_token=session_data.access_token,
                refresh_token=session_data.refresh_token,
                expires_at=getattr(session_data, "expires_at", None),
            )
        self._session.notify()
        return current_user

    def _resolve_role(
        self,
        user_data: Any,
        access_token: Optional[str],
    ) -> Optional[UserRole]:
        """Token claim, then ``app_metadata`` on the user, then profile row."""
        role = resolve_role(access_token)
        if role is not None:
            return role

        app_metadata = getattr(user_data, "app_metadata", None) or {}
        role = normalize_role(app_metadata.get("app_role"))
        if role is not None:
            return role

        if self._profile_repo is None or user_data is None:
            return None
        try:
            return normalize_role(self._profile_repo.get_role(str(user_data.id)))
        except SitePassError as exc:
            self._logger.warning("Profile role lookup failed: %s", exc)
            return None

    def _classify_error(
        self,
        exc: Exception,
        event: str,
        email: Optional[str] = None,
        fallback_message: str = "An unexpected error occurred. Please try again later.",
    ) -> AuthResult:
        """Map a Supabase or network exception to an ``AuthResult``.

        Failed attempts count toward the rate limit when *email* is given,
        except for banned accounts.
        """
        if isinstance(exc, (ConnectionError, TimeoutError, OSError)):
            self._logger.warning(
                "Network error (%s): %s", event, exc, extra={"event": event},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=_NETWORK_MESSAGE,
            )

        code = str(getattr(exc, "code", "") or "").lower()
        error_str = f"{code} {exc}".lower()
        for code_key, (error_code, human_message) in SUPABASE_ERROR_MAP.items():
            if code_key in error_str:
                self._logger.warning(
                    "Auth error (%s): %s", code_key, exc,
                    extra={"event": event, "error_code": code_key},
                )
                if email and error_code != AuthErrorCode.USER_BANNED:
                    self._record_failed_attempt(email)
                return AuthResult(
                    success=False,
                    error_code=error_code,
                    error_message=human_message,
                )

        if email:
            self._record_failed_attempt(email)
        self._logger.warning(
            "Unknown auth error (%s): %s", event, exc,
            extra={"event": event, "error_code": "unknown"},
        )
        return AuthResult(
            success=False,
            error_code=AuthErrorCode.UNKNOWN_ERROR,
            error_message=fallback_message,
        )

    # ==================================================================
    # Sign-up
    # ==================================================================

    def register(self, email: str, password: str) -> AuthResult:
        """Create a team leader account.

        The backend assigns ``new_teamleader`` to new accounts.  When the
        project auto-confirms emails a session comes back and is applied
        immediately; otherwise the user is told to confirm by email.
        """
        email_check = self.validate_email(email)
        if not email_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=email_check.error_message,
            )
        pw_check = self.validate_password(password)
        if not pw_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=pw_check.error_message,
            )

        email = self.normalize_email(email)
        try:
            response = self._db.supabase.auth.sign_up({
                "email": email,
                "password": password,
            })
        except BackendUnavailableError as exc:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=str(exc),
            )
        except Exception as exc:
            return self._classify_error(
                exc,
                event="REGISTER_FAILED",
                fallback_message="Registration could not be completed. Please try again later.",
            )

        self._logger.info(
            "Team leader registered: %s", email,
            extra={"event": "REGISTER", "email": email},
        )

        if getattr(response, "session", None) is not None and response.user is not None:
            user = self._establish_session(response.user, response.session, email)
            return AuthResult(
                success=True,
                user_id=user.id,
                email=user.email,
                role=user.role,
            )
        return AuthResult(success=True, email=email, message=SIGNUP_CONFIRM_MESSAGE)

    # ==================================================================
    # Logout
    # ==================================================================

    def logout(self) -> None:
        """Revoke the server session when possible, then clear local state."""
        user = self._session.current_user
        user_email = user.email if user else "unknown"
        user_id = user.id if user else "unknown"

        try:
            self._db.supabase.auth.sign_out()
        except BackendUnavailableError:
            self._logger.debug(
                "Backend unavailable; skipping server-side sign_out for %s.", user_email,
            )
        except Exception as exc:
            self._logger.warning(
                "Server-side sign_out failed for %s: %s", user_email, exc,
            )

        self._session.clear()
        self._session.notify()
        self._logger.info(
            "User logged out: %s",
            user_email,
            extra={"event": "LOGOUT", "email": user_email, "user_id": user_id},
        )

    # ==================================================================
    # Token refresh
    # ==================================================================

    def refresh_session_token(self) -> AuthResult:
        """Refresh the access token when it is about to expire.

        Transient network errors are skipped (retried next cycle).  An
        auth error means the refresh token is dead and the caller should
        force a logout.  A role change carried by the new token is applied
        and announced to session listeners.
        """
        if not self._session.is_authenticated:
            return AuthResult(success=True)
        if not self._session.is_token_expired:
            return AuthResult(success=True)
        if not self._db.is_online:
            return AuthResult(success=True)

        refresh_token: Optional[str] = self._session.refresh_token
        if not refresh_token:
            return AuthResult(success=True)

        try:
            response = self._db.supabase.auth.refresh_session(refresh_token)
        except (ConnectionError, TimeoutError):
            self._logger.debug("Network error during token refresh; will retry.")
            return AuthResult(success=True)
        except Exception as exc:
            self._logger.warning(
                "Token refresh failed (auth error): %s. Forcing logout.", exc,
                extra={"event": "SESSION_EXPIRED"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.SESSION_EXPIRED,
                error_message="Your session has expired. Please sign in again.",
            )

        new_session = response.session
        if new_session is None:
            return AuthResult(success=True)

        self._session.set_tokens(
            access_token=new_session.access_token,
            refresh_token=new_session.refresh_token,
            expires_at=getattr(new_session, "expires_at", None),
        )
        self._logger.info("Session token refreshed.")

        current = self._session.current_user
        new_role = resolve_role(new_session.access_token)
        if current is not None and new_role is not None and new_role != current.role:
            self._session.set_current_user(current.model_copy(update={"role": new_role}))
            self._logger.info(
                "Role changed for %s: %s -> %s",
                current.email, current.role or "none", new_role,
                extra={"event": "ROLE_CHANGED", "user_id": current.id},
            )
            self._session.notify()
        return AuthResult(success=True, role=self._session.role)

    # ==================================================================
    # Password reset
    # ==================================================================

    def request_password_reset(self, email: str) -> AuthResult:
        """Ask the backend to email a recovery code.

        Always reports the same success text, registered or not.
        """
        email_check = self.validate_email(email)
        if not email_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=email_check.error_message,
            )

        email = self.normalize_email(email)
        try:
            self._db.supabase.auth.reset_password_for_email(email)
            self._logger.info(
                "Password reset requested for %s.", email,
                extra={"event": "PASSWORD_RESET_REQUESTED", "email": email},
            )
        except BackendUnavailableError as exc:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=str(exc),
            )
        except (ConnectionError, TimeoutError):
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=_NETWORK_MESSAGE,
            )
        except Exception as exc:
            self._logger.warning("Password reset error for %s: %s", email, exc)

        return AuthResult(success=True, message=RESET_REQUESTED_MESSAGE)

    def verify_recovery_code(self, email: str, code: str) -> AuthResult:
        """Exchange an emailed recovery code for a session.

        The session lets :meth:`update_password` run for an account whose
        owner forgot the old password.
        """
        email_check = self.validate_email(email)
        if not email_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=email_check.error_message,
            )
        code = (code or "").strip()
        if not code:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message="Recovery code is required.",
            )

        email = self.normalize_email(email)
        try:
            response = self._db.supabase.auth.verify_otp({
                "email": email,
                "token": code,
                "type": "recovery",
            })
        except BackendUnavailableError as exc:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=str(exc),
            )
        except Exception as exc:
            return self._classify_error(
                exc,
                event="RECOVERY_FAILED",
                email=email,
                fallback_message="The recovery code is invalid or has expired.",
            )

        if response.user is None or response.session is None:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.INVALID_RECOVERY_CODE,
                error_message="The recovery code is invalid or has expired.",
            )

        user = self._establish_session(response.user, response.session, email)
        self._reset_rate_limit(email)
        self._logger.info(
            "Recovery code accepted for %s.", email,
            extra={"event": "RECOVERY_VERIFIED", "user_id": user.id},
        )
        return AuthResult(success=True, user_id=user.id, email=user.email, role=user.role)

    def update_password(self, password: str, confirm: str) -> AuthResult:
        """Set a new password for the signed-in (or recovering) account."""
        pw_check = self.validate_password(password)
        if not pw_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=pw_check.error_message,
            )
        if password != confirm:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message="Passwords do not match.",
            )
        if not self._session.is_authenticated:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.SESSION_EXPIRED,
                error_message=(
                    "Open the link from your reset email or enter the recovery "
                    "code first."
                ),
            )

        try:
            self._db.supabase.auth.update_user({"password": password})
        except BackendUnavailableError as exc:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=str(exc),
            )
        except Exception as exc:
            return self._classify_error(
                exc,
                event="PASSWORD_UPDATE_FAILED",
                fallback_message="Password could not be updated. Please try again.",
            )

        user = self._session.current_user
        self._logger.info(
            "Password updated for %s.", user.email if user else "unknown",
            extra={"event": "PASSWORD_UPDATED"},
        )
        return AuthResult(success=True, message=PASSWORD_UPDATED_MESSAGE)
