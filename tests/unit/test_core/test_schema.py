"""Tests for local SQLite schema initialisation."""

import sqlite3

import pytest

from sitepass.schema import CURRENT_SCHEMA_VERSION, initialize_schema


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    connection.row_factory = sqlite3.Row
    yield connection
    connection.close()


def table_names(conn):
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {row["name"] for row in rows}


@pytest.mark.unit
def test_fresh_database_gets_all_tables(conn, logger):
    initialize_schema(conn, logger)

    assert {"schema_version", "audit_log", "app_settings"} <= table_names(conn)
    version = conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()["version"]
    assert version == CURRENT_SCHEMA_VERSION


@pytest.mark.unit
def test_initialize_is_idempotent(conn, logger):
    initialize_schema(conn, logger)
    conn.execute("INSERT INTO app_settings (key, value) VALUES ('k', 'v')")
    conn.commit()

    initialize_schema(conn, logger)

    assert conn.execute("SELECT value FROM app_settings WHERE key = 'k'").fetchone()["value"] == "v"


@pytest.mark.unit
def test_audit_log_has_actor_email(conn, logger):
    initialize_schema(conn, logger)
    columns = {row["name"] for row in conn.execute("PRAGMA table_info(audit_log)")}
    assert "actor_email" in columns


@pytest.mark.unit
def test_version_one_database_is_migrated(conn, logger):
    conn.execute(
        "CREATE TABLE schema_version (id INTEGER PRIMARY KEY CHECK (id = 1), "
        "version INTEGER NOT NULL, applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP)"
    )
    conn.execute(
        "CREATE TABLE audit_log (id INTEGER PRIMARY KEY AUTOINCREMENT, timestamp TEXT NOT NULL, "
        "action TEXT NOT NULL, entity_type TEXT NOT NULL, entity_id TEXT NOT NULL, "
        "user_id TEXT NOT NULL, details TEXT DEFAULT '{}')"
    )
    conn.execute("INSERT INTO schema_version (id, version) VALUES (1, 1)")
    conn.execute(
        "INSERT INTO audit_log (timestamp, action, entity_type, entity_id, user_id) "
        "VALUES ('2024-01-01', 'DELETE', 'Contractor', '1', 'u1')"
    )
    conn.commit()

    initialize_schema(conn, logger)

    row = conn.execute("SELECT actor_email FROM audit_log").fetchone()
    assert row["actor_email"] == ""
    assert conn.execute("SELECT version FROM schema_version").fetchone()["version"] == CURRENT_SCHEMA_VERSION
