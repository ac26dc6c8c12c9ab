"""
Database Connection Layer.

Owns the two connections the kiosk uses:

- **Supabase**: the authoritative store for contractor records, team leader
  profiles, authentication and realtime notifications.
- **SQLite (local)**: device preferences and a queryable audit trail.  It
  never holds contractor data.

Query logic lives in the repositories; this module only manages the raw
connections.

Usage (dependency injection at app startup)::

    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        sqlite_path=Path(config.LOCAL_DB_PATH),
        logger=StructuredLogger(name="database"),
    )
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Optional

from supabase import Client as SupabaseClient, create_client

from sitepass.errors import BackendUnavailableError
from sitepass.logger import StructuredLogger


class DatabaseManager:
    """Manages the Supabase client and the local SQLite connection.

    When ``supabase_url`` or ``supabase_key`` is empty the Supabase client
    is not created.  The window still opens, and every backend call raises
    :class:`BackendUnavailableError`, which services turn into a
    "cannot reach the server" message.

    Parameters
    ----------
    supabase_url:
        The Supabase project URL (e.g. ``https://xyz.supabase.co``).
    supabase_key:
        The Supabase anonymous key.  Row-level security on the backend
        decides what an anonymous kiosk may do.
    sqlite_path:
        Filesystem path for the local SQLite database file.
    logger:
        A ``StructuredLogger`` instance.
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        sqlite_path: Path,
        logger: StructuredLogger,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._write_lock: threading.RLock = threading.RLock()
        self._closed: bool = False
        self._supabase_url: str = supabase_url
        self._supabase_key: str = supabase_key

        self._supabase: Optional[SupabaseClient] = None
        if supabase_url and supabase_key:
            try:
                self._supabase = create_client(supabase_url, supabase_key)
                self._logger.info("Supabase client initialized.")
            except (ValueError, TypeError) as exc:
                self._logger.warning(
                    "Supabase credential format error: %s. Backend disabled.",
                    exc,
                )
            except Exception as exc:
                self._logger.error(
                    "Unexpected Supabase initialization failure: %s. Backend disabled.",
                    exc,
                    exc_info=True,
                )
        else:
            self._logger.warning(
                "Supabase credentials not configured. Backend disabled."
            )

        self._sqlite_conn: sqlite3.Connection = self._connect_sqlite(sqlite_path)

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def supabase(self) -> SupabaseClient:
        """Return the initialised Supabase client.

        Raises
        ------
        BackendUnavailableError
            If the client was not initialised.
        """
        if self._supabase is None:
            raise BackendUnavailableError()
        return self._supabase

    @property
    def is_online(self) -> bool:
        """``True`` when the Supabase client is available."""
        return self._supabase is not None

    @property
    def supabase_url(self) -> str:
        return self._supabase_url

    @property
    def supabase_key(self) -> str:
        return self._supabase_key

    @property
    def sqlite(self) -> sqlite3.Connection:
        return self._sqlite_conn

    @property
    def write_lock(self) -> threading.RLock:
        """Lock to hold around every SQLite write + commit::

            with db.write_lock:
                db.sqlite.execute("INSERT ...")
                db.sqlite.commit()
        """
        return self._write_lock

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the local SQLite connection.  Safe to call more than once."""
        with self._write_lock:
            if self._closed:
                return
            try:
                self._sqlite_conn.close()
                self._logger.info("SQLite connection closed.")
            except sqlite3.ProgrammingError:
                pass
            self._closed = True

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _connect_sqlite(self, path: Path) -> sqlite3.Connection:
        """Open (or create) the local database.

        Raises
        ------
        PermissionError
            If the OS denies access to the file or its directory.  The
            message is written for the operator.
        """
        try:
            conn = sqlite3.connect(str(path), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            if str(path) != ":memory:":
                conn.execute("PRAGMA journal_mode=WAL;")
            self._logger.info("SQLite database opened at %s", path)
            return conn
        except PermissionError as exc:
            msg = (
                f"Cannot open the local database at '{path}'. "
                "The file or its directory may be read-only or locked by "
                "another process.  Please check file permissions and try again."
            )
            self._logger.error(msg)
            raise PermissionError(msg) from exc
