"""
Local SQLite Schema Initialization.

The kiosk keeps a small local database next to the executable for data
that belongs to the device rather than to the site: display preferences
(dark mode, auto-scroll) and a queryable copy of the audit trail.
Contractor records themselves live only in Supabase.

:func:`initialize_schema` creates every table idempotently.  A single-row
``schema_version`` table tracks applied migrations.

- **Fresh databases** (version 0): all tables are created from
  :data:`_TABLE_DEFINITIONS`.
- **Existing databases** (version N > 0): only the migrations registered in
  :data:`_MIGRATIONS` for versions above N are executed.

The whole upgrade runs in one transaction; on failure the version stays at
N and the next startup retries.

Usage::

    conn = sqlite3.connect("sitepass_local.db")
    initialize_schema(conn, StructuredLogger(name="schema"))
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable

from sitepass.logger import StructuredLogger

__all__ = ["CURRENT_SCHEMA_VERSION", "initialize_schema"]

CURRENT_SCHEMA_VERSION: int = 2

_TABLE_DEFINITIONS: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS schema_version (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        version INTEGER NOT NULL,
        applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # -- structured audit trail (mirrors the AUDIT: log lines) ---------------
    """
    CREATE TABLE IF NOT EXISTS audit_log (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL,
        action TEXT NOT NULL,
        entity_type TEXT NOT NULL,
        entity_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        actor_email TEXT NOT NULL DEFAULT '',
        details TEXT DEFAULT '{}',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # -- key-value device preferences -----------------------------------------
    """
    CREATE TABLE IF NOT EXISTS app_settings (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_audit_log_entity ON audit_log(entity_type, entity_id)",
]

_ALLOWED_TABLES: frozenset[str] = frozenset({
    "schema_version",
    "audit_log",
    "app_settings",
})


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _ensure_version_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_version (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            version INTEGER NOT NULL,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    conn.commit()


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Return the current schema version, or ``0`` if unset."""
    cursor: sqlite3.Cursor = conn.execute(
        "SELECT version FROM schema_version WHERE id = 1"
    )
    row: tuple[int] | None = cursor.fetchone()
    return row[0] if row is not None else 0


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Upsert the version tracker.  Does **not** commit."""
    conn.execute(
        """
        INSERT INTO schema_version (id, version) VALUES (1, ?)
        ON CONFLICT(id) DO UPDATE SET version = excluded.version,
                                      applied_at = CURRENT_TIMESTAMP
        """,
        (version,),
    )


def _create_all_tables(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    for ddl in _TABLE_DEFINITIONS:
        conn.execute(ddl)
    logger.info(
        f"All {len(_TABLE_DEFINITIONS)} schema statements applied successfully."
    )


def _column_exists(
    conn: sqlite3.Connection, table: str, column: str,
) -> bool:
    """Check whether *column* already exists in *table*.

    Raises:
        ValueError: If *table* is not in :data:`_ALLOWED_TABLES`.
    """
    if table not in _ALLOWED_TABLES:
        raise ValueError(
            f"Invalid table name: {table!r}. "
            f"Allowed tables: {sorted(_ALLOWED_TABLES)}"
        )
    cursor = conn.execute(f"PRAGMA table_info({table})")
    return any(row[1] == column for row in cursor.fetchall())


def _migrate_v1_to_v2(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """Add ``actor_email`` to ``audit_log`` and index entity lookups.

    Version 1 audit rows only carried the acting user id; the dashboard
    records the team leader's email alongside it.
    """
    if not _column_exists(conn, "audit_log", "actor_email"):
        conn.execute(
            "ALTER TABLE audit_log ADD COLUMN actor_email TEXT NOT NULL DEFAULT ''"
        )
        logger.info("Added column audit_log.actor_email.")
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_audit_log_entity "
        "ON audit_log(entity_type, entity_id)"
    )


_MIGRATIONS: dict[int, Callable[[sqlite3.Connection, StructuredLogger], None]] = {
    2: _migrate_v1_to_v2,
}


def _run_incremental_migrations(
    conn: sqlite3.Connection,
    logger: StructuredLogger,
    from_version: int,
    to_version: int,
) -> None:
    """Apply migrations for versions in ``(from_version, to_version]``.

    Does **not** commit.
    """
    for version in range(from_version + 1, to_version + 1):
        migration = _MIGRATIONS.get(version)
        if migration is None:
            continue
        logger.info(f"Applying schema migration to version {version}.")
        migration(conn, logger)


def initialize_schema(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """Bring the local database up to :data:`CURRENT_SCHEMA_VERSION`.

    Called on every startup; idempotent.
    """
    _ensure_version_table(conn)
    current: int = _get_schema_version(conn)

    if current >= CURRENT_SCHEMA_VERSION:
        logger.info(f"Schema is up to date (version {current}).")
        return

    logger.info(
        f"Upgrading schema from version {current} to {CURRENT_SCHEMA_VERSION}."
    )

    try:
        if current == 0:
            _create_all_tables(conn, logger)
        else:
            _run_incremental_migrations(
                conn, logger, current, CURRENT_SCHEMA_VERSION,
            )

        _set_schema_version(conn, CURRENT_SCHEMA_VERSION)
        conn.commit()
    except Exception:
        conn.rollback()
        logger.error(
            f"Schema migration failed. Rolled back to version {current}."
        )
        raise

    logger.info(f"Schema initialised at version {CURRENT_SCHEMA_VERSION}.")
