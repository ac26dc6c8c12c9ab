"""
Role Claims & Authorization Guard.

The backend issues access tokens carrying the account role in
``app_metadata.app_role``.  The kiosk reads that claim to decide which
views to offer.  The signature is **not** verified here: Supabase verifies
every request server-side and row-level security enforces the same roles,
so a forged token only changes which buttons are drawn.

Usage::

    role = resolve_role(session.access_token, fallback=profile_role)

    guard = require_role(session, UserRole.ADMIN)

    @guard
    def delete_record(...) -> None:
        ...
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional, ParamSpec, TypeVar

import jwt

from sitepass.auth import SessionManager
from sitepass.errors import AuthorizationError
from sitepass.models.enums import UserRole

P = ParamSpec("P")
R = TypeVar("R")

_ROLE_CLAIM_FALLBACKS: tuple[str, ...] = ("app_role", "user_role")


def decode_access_token(token: Optional[str]) -> dict[str, Any]:
    """Return the claims of *token*, or ``{}`` when it cannot be decoded."""
    if not token:
        return {}
    try:
        claims = jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
        )
    except jwt.PyJWTError:
        return {}
    return claims if isinstance(claims, dict) else {}


def extract_role_claim(claims: dict[str, Any]) -> Optional[str]:
    """Pull the raw role string out of decoded *claims*."""
    app_metadata = claims.get("app_metadata")
    if isinstance(app_metadata, dict):
        value = app_metadata.get("app_role")
        if isinstance(value, str) and value.strip():
            return value
    for key in _ROLE_CLAIM_FALLBACKS:
        value = claims.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def normalize_role(value: Optional[str]) -> Optional[UserRole]:
    """Map a raw role string to :class:`UserRole`.

    Case-insensitive and whitespace-trimmed.  Unknown values map to
    ``None`` so callers fail closed.
    """
    if not value:
        return None
    try:
        return UserRole(value.strip().lower())
    except ValueError:
        return None


def resolve_role(
    access_token: Optional[str],
    fallback: Optional[str] = None,
) -> Optional[UserRole]:
    """Resolve the role from the token claim, then from *fallback*."""
    role = normalize_role(extract_role_claim(decode_access_token(access_token)))
    if role is not None:
        return role
    return normalize_role(fallback)


def require_role(
    session: SessionManager,
    *roles: UserRole,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Return a decorator that only lets *roles* through.

    With no *roles*, any authenticated session passes.

    Raises:
        AuthorizationError: from the wrapped call when the check fails.
    """
    allowed: frozenset[UserRole] = frozenset(roles)

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            if not session.is_authenticated:
                raise AuthorizationError(
                    "Authentication required. Please log in before "
                    "performing this action."
                )
            if allowed and session.role not in allowed:
                raise AuthorizationError(
                    "Your account is not allowed to perform this action."
                )
            return func(*args, **kwargs)

        return wrapper

    return decorator
