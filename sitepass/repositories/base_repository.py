"""
Base Repository.

Shared infrastructure for every repository:
- DatabaseManager reference (Supabase + local SQLite)
- Logger reference
- ``_run`` wrapper turning backend failures into ``RepositoryError``
"""

from __future__ import annotations

import sqlite3
from typing import Callable, Optional, TypeVar

from supabase import Client as SupabaseClient

from sitepass.database import DatabaseManager
from sitepass.errors import BackendUnavailableError, RepositoryError
from sitepass.logger import StructuredLogger

T = TypeVar("T")


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(
        self,
        db: DatabaseManager,
        logger: StructuredLogger,
        table: Optional[str] = None,
    ) -> None:
        self._db = db
        self._logger = logger
        if table:
            self.TABLE = table

    @property
    def supabase(self) -> SupabaseClient:
        """Returns the Supabase client.  Raises ``BackendUnavailableError``."""
        return self._db.supabase

    @property
    def sqlite(self) -> sqlite3.Connection:
        return self._db.sqlite

    def _run(self, op: Callable[[], T], *, operation_name: str) -> T:
        """Execute a Supabase call, normalising failures.

        ``BackendUnavailableError`` propagates unchanged.  Any other
        exception is logged and re-raised as :class:`RepositoryError`
        carrying the backend's own message, which is what the kiosk shows.
        """
        try:
            return op()
        except BackendUnavailableError:
            self._logger.warning("Backend unavailable for %s", operation_name)
            raise
        except Exception as exc:
            message = _backend_message(exc)
            self._logger.error(
                "Backend call failed for %s: %s",
                operation_name,
                message,
                extra={"table": self.TABLE, "operation": operation_name},
            )
            raise RepositoryError(message, operation=operation_name) from exc


def _backend_message(exc: Exception) -> str:
    """Best human-readable text for a postgrest / httpx exception."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    text = str(exc).strip()
    return text or exc.__class__.__name__
