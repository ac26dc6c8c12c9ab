"""Shared utility functions and models for the SitePass application.

Convenience re-exports so consumers can write
``from sitepass.utils import format_timestamp`` while the full module
paths (``sitepass.utils.formatting``) remain supported.
"""

from sitepass.utils.audit import AuditEvent, log_audit_event, persist_audit_event
from sitepass.utils.formatting import (
    as_utc,
    format_day_month_time,
    format_time,
    format_timestamp,
    or_dash,
)

__all__ = [
    "AuditEvent",
    "as_utc",
    "format_day_month_time",
    "format_time",
    "format_timestamp",
    "log_audit_event",
    "or_dash",
    "persist_audit_event",
]
