"""Display formatting for timestamps and optional fields.

Backend timestamps are ``timestamptz`` and arrive with an offset.  A naive
value is taken to be UTC everywhere in the app, both here and in the
board's date-window comparisons, then shown in the kiosk's local time.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

__all__ = ["as_utc", "format_day_month_time", "format_time", "format_timestamp", "or_dash"]


def as_utc(ts: datetime) -> datetime:
    """Attach UTC to a naive timestamp; aware values pass through."""
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def _local(ts: datetime) -> datetime:
    return as_utc(ts).astimezone()


def format_day_month_time(ts: Optional[datetime]) -> str:
    """``"07 Mar 14:05"``: day and month, no year, minutes precision."""
    if ts is None:
        return ""
    return _local(ts).strftime("%d %b %H:%M")


def format_time(ts: Optional[datetime]) -> str:
    if ts is None:
        return ""
    return _local(ts).strftime("%H:%M:%S")


def format_timestamp(ts: Optional[datetime]) -> str:
    """Full local timestamp for the dashboard and CSV export."""
    if ts is None:
        return ""
    return _local(ts).strftime("%Y-%m-%d %H:%M")


def or_dash(value: Optional[str]) -> str:
    text = (value or "").strip()
    return text or "-"
