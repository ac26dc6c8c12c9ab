"""
Structured Audit Logging Utility.

Every state change made from the dashboard (confirming a sign-in, marking
a fob returned, confirming a sign-out, deleting a record) is logged as a
structured JSON object and, when a connection is supplied, persisted to
the local ``audit_log`` table.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import nullcontext
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, Field

from sitepass.logger import StructuredLogger

__all__ = ["AuditEvent", "log_audit_event", "persist_audit_event"]

# Flat scalars only; nested structures do not belong in the audit log.
DetailValue = Union[str, int, float, bool, None]


class AuditEvent(BaseModel):
    """Schema-validated representation of a single audit trail entry."""

    timestamp: str
    action: str
    entity_type: str
    entity_id: str
    user_id: str
    actor_email: str = ""
    details: dict[str, DetailValue] = Field(default_factory=dict)


def log_audit_event(
    logger: StructuredLogger,
    action: str,
    entity_type: str,
    entity_id: str,
    user_id: str,
    details: Optional[dict[str, DetailValue]] = None,
    conn: Optional[sqlite3.Connection] = None,
    actor_email: str = "",
    lock: Optional[threading.RLock] = None,
) -> AuditEvent:
    """Log an audit event, and persist it when *conn* is given.

    Args:
        logger: The logger instance to write to.
        action: What happened (``"CONFIRM_SIGN_IN"``, ``"DELETE"``, ...).
        entity_type: Type of entity affected (``"Contractor"``).
        entity_id: Primary key of the affected entity.
        user_id: ID of the acting account.
        details: Optional flat context (fob number, old/new values).
        conn: Optional SQLite connection for the ``audit_log`` table.
        actor_email: Email of the acting account.
        lock: Write lock to hold around the insert.

    Persistence failures are logged and never propagate: an audit write
    must not undo a change the backend already accepted.
    """
    event = AuditEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        actor_email=actor_email,
        details=details or {},
    )
    logger.info("AUDIT: %s", json.dumps(event.model_dump(), default=str))

    if conn is not None:
        try:
            with lock if lock is not None else nullcontext():
                persist_audit_event(conn, event)
        except (sqlite3.Error, ValueError) as db_err:
            logger.warning("Failed to persist audit event to SQLite: %s", db_err)
    return event


def persist_audit_event(conn: sqlite3.Connection, event: AuditEvent) -> None:
    """Write a validated *event* to the ``audit_log`` table and commit."""
    conn.execute(
        """
        INSERT INTO audit_log
            (timestamp, action, entity_type, entity_id, user_id, actor_email, details)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            event.timestamp,
            event.action,
            event.entity_type,
            event.entity_id,
            event.user_id,
            event.actor_email,
            json.dumps(event.details, default=str),
        ),
    )
    conn.commit()
