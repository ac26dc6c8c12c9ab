"""
Authentication & Session State.

Provides an injectable ``SessionManager`` that holds the signed-in account
for the lifetime of a kiosk session, plus change listeners so the navigation
bar and the realtime subscription follow login and logout.

Usage::

    session = SessionManager()
    session.add_listener(lambda: print("session changed"))
    session.set_current_user(User(id="abc-123", email="lead@example.com",
                                  role=UserRole.TEAMLEADER))
    session.notify()
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sitepass.models.enums import UserRole
from sitepass.models.user import User

SessionListener = Callable[[], None]


class SessionManager:
    """Injectable holder for the current authenticated user.

    Pass a single instance through the composition root so every
    component shares the same session.
    """

    def __init__(self) -> None:
        self._lock: threading.RLock = threading.RLock()
        self._current_user: Optional[User] = None
        self._access_token: Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._token_expiry: Optional[datetime] = None
        self._listeners: list[SessionListener] = []

    def set_current_user(self, user: User) -> None:
        with self._lock:
            self._current_user = user

    def get_current_user(self) -> User:
        """Return the authenticated user.

        Raises:
            RuntimeError: If no user is currently authenticated.
        """
        with self._lock:
            if self._current_user is None:
                raise RuntimeError(
                    "No user is currently authenticated. Login required."
                )
            return self._current_user

    @property
    def current_user(self) -> Optional[User]:
        with self._lock:
            return self._current_user

    @property
    def role(self) -> Optional[UserRole]:
        """Role of the signed-in account, ``None`` when anonymous or unknown."""
        with self._lock:
            return self._current_user.role if self._current_user else None

    def set_tokens(
        self,
        access_token: str,
        refresh_token: str,
        expires_at: Optional[int],
    ) -> None:
        """Store Supabase auth tokens.

        Parameters
        ----------
        access_token:
            The short-lived JWT access token.
        refresh_token:
            The refresh token used to obtain new access tokens.
        expires_at:
            Unix timestamp (seconds) when the access token expires.
            ``None`` marks the token as already expired.
        """
        with self._lock:
            self._access_token = access_token
            self._refresh_token = refresh_token
            self._token_expiry = (
                datetime.fromtimestamp(expires_at, tz=timezone.utc)
                if expires_at is not None
                else None
            )

    @property
    def access_token(self) -> Optional[str]:
        with self._lock:
            return self._access_token

    @property
    def refresh_token(self) -> Optional[str]:
        with self._lock:
            return self._refresh_token

    @property
    def is_token_expired(self) -> bool:
        """``True`` when the access token expires within 30 s or was never set."""
        with self._lock:
            if self._token_expiry is None:
                return True
            return datetime.now(timezone.utc) >= (self._token_expiry - timedelta(seconds=30))

    def clear(self) -> None:
        """Remove the current user and tokens, ending the session."""
        with self._lock:
            self._current_user = None
            self._access_token = None
            self._refresh_token = None
            self._token_expiry = None

    @property
    def is_authenticated(self) -> bool:
        with self._lock:
            return self._current_user is not None

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def add_listener(self, callback: SessionListener) -> None:
        with self._lock:
            if callback not in self._listeners:
                self._listeners.append(callback)

    def remove_listener(self, callback: SessionListener) -> None:
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def notify(self) -> None:
        """Call every listener.  Listeners run on the caller's thread."""
        with self._lock:
            listeners = list(self._listeners)
        for callback in listeners:
            callback()
