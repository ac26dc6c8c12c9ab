"""
Authentication Pipeline Models.

Pydantic models and enumerations for the auth request/response
contracts between ``AuthService`` and the UI layer.  Every auth operation
returns a structured result rather than raising into the view.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel

from sitepass.models.enums import UserRole


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

class AuthErrorCode(StrEnum):
    """Authentication error categories, used by views to pick feedback."""

    INVALID_CREDENTIALS = "invalid_credentials"
    USER_BANNED = "user_banned"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    INVALID_RECOVERY_CODE = "invalid_recovery_code"
    NETWORK_ERROR = "network_error"
    RATE_LIMITED = "rate_limited"
    VALIDATION_ERROR = "validation_error"
    SESSION_EXPIRED = "session_expired"
    UNKNOWN_ERROR = "unknown_error"


# ---------------------------------------------------------------------------
# Supabase error-code mapping
# ---------------------------------------------------------------------------

SUPABASE_ERROR_MAP: dict[str, tuple[AuthErrorCode, str]] = {
    "invalid_credentials": (
        AuthErrorCode.INVALID_CREDENTIALS,
        "Incorrect email or password.",
    ),
    "invalid_grant": (
        AuthErrorCode.INVALID_CREDENTIALS,
        "Incorrect email or password.",
    ),
    "user_not_found": (
        AuthErrorCode.INVALID_CREDENTIALS,
        "Incorrect email or password.",
    ),
    "user_banned": (
        AuthErrorCode.USER_BANNED,
        "Your account has been deactivated. Contact your administrator.",
    ),
    "user_already_exists": (
        AuthErrorCode.EMAIL_ALREADY_EXISTS,
        "An account with this email already exists. Try signing in.",
    ),
    "email_exists": (
        AuthErrorCode.EMAIL_ALREADY_EXISTS,
        "An account with this email already exists. Try signing in.",
    ),
    "email_not_confirmed": (
        AuthErrorCode.EMAIL_NOT_CONFIRMED,
        "Please confirm your email address before signing in.",
    ),
    "otp_expired": (
        AuthErrorCode.INVALID_RECOVERY_CODE,
        "The recovery code is invalid or has expired.",
    ),
    "weak_password": (
        AuthErrorCode.VALIDATION_ERROR,
        "Password is too weak. Choose a longer password.",
    ),
    "same_password": (
        AuthErrorCode.VALIDATION_ERROR,
        "New password must be different from the current one.",
    ),
}


class ValidationResult(BaseModel):
    """Result of a single client-side field validation check."""

    is_valid: bool
    error_message: Optional[str] = None


class AuthResult(BaseModel):
    """Unified response for login, registration and password operations.

    Attributes
    ----------
    success:
        ``True`` when the operation completed without error.
    error_code:
        Structured error category (``None`` on success).
    error_message:
        Human-readable error description (``None`` on success).
    message:
        Human-readable success text, e.g. "check your email".
    user_id, email, role:
        Populated after a successful sign-in.
    """

    success: bool
    error_code: Optional[AuthErrorCode] = None
    error_message: Optional[str] = None
    message: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None


class RateLimitState(BaseModel):
    """Per-email failed login counter."""

    failed_attempts: int = 0
    lockout_until: Optional[datetime] = None
