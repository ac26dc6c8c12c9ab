"""
Base Service Class.

Minimal base class standardizing the logger pattern for all services.
Services extend this and add their own repository dependencies via __init__.
"""

from __future__ import annotations

from sitepass.errors import BackendUnavailableError, RepositoryError
from sitepass.logger import StructuredLogger


class BaseService:
    """Base class for all service classes. Provides a logger."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger

    @staticmethod
    def _describe_failure(exc: Exception) -> str:
        """User-facing text for a repository failure."""
        if isinstance(exc, (BackendUnavailableError, RepositoryError)):
            return str(exc)
        return "Something went wrong. Please try again."
