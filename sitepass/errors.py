"""Exception hierarchy shared by repositories, services and the UI."""

from __future__ import annotations


class SitePassError(Exception):
    """Base class for every error raised by the application."""


class BackendUnavailableError(SitePassError):
    """The Supabase client was never created (missing or bad credentials)."""

    def __init__(self, message: str = "Cannot reach the server. Please try again later.") -> None:
        super().__init__(message)


class RepositoryError(SitePassError):
    """A backend call failed.  ``str(exc)`` is safe to show to the user."""

    def __init__(self, message: str, operation: str = "") -> None:
        super().__init__(message)
        self.operation = operation


class AuthorizationError(SitePassError):
    """The current session lacks the role an operation requires."""
