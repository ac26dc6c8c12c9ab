"""Tests for formatting helpers and the audit trail."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from sitepass.utils import (
    as_utc,
    format_day_month_time,
    format_time,
    format_timestamp,
    log_audit_event,
    or_dash,
)


@pytest.mark.unit
def test_formatters_on_naive_values():
    ts = datetime(2024, 3, 7, 14, 5, 9)

    assert format_day_month_time(ts) == "07 Mar 14:05"
    assert format_time(ts) == "14:05:09"
    assert format_timestamp(ts) == "2024-03-07 14:05"


@pytest.mark.unit
def test_naive_values_are_read_as_utc():
    naive = datetime(2024, 3, 7, 14, 5, 9)
    aware = naive.replace(tzinfo=timezone.utc)

    assert as_utc(naive) == aware
    assert format_timestamp(naive) == format_timestamp(aware)


@pytest.mark.unit
def test_offset_values_are_shown_in_local_time():
    plus_one = datetime(2024, 3, 7, 14, 5, tzinfo=timezone(timedelta(hours=1)))

    assert format_timestamp(plus_one) == "2024-03-07 13:05"
    assert as_utc(plus_one) is plus_one


@pytest.mark.unit
def test_formatters_on_none():
    assert format_day_month_time(None) == ""
    assert format_time(None) == ""
    assert format_timestamp(None) == ""


@pytest.mark.unit
def test_or_dash():
    assert or_dash(None) == "-"
    assert or_dash("  ") == "-"
    assert or_dash(" 12 ") == "12"


@pytest.mark.unit
def test_audit_event_is_persisted(db, logger):
    event = log_audit_event(
        logger,
        action="CONFIRM_SIGN_OUT",
        entity_type="Contractor",
        entity_id="42",
        user_id="user-1",
        details={"fob_number": "7"},
        conn=db.sqlite,
        actor_email="lead@example.com",
        lock=db.write_lock,
    )

    row = db.sqlite.execute("SELECT * FROM audit_log").fetchone()
    assert row["action"] == "CONFIRM_SIGN_OUT"
    assert row["actor_email"] == "lead@example.com"
    assert json.loads(row["details"]) == {"fob_number": "7"}
    assert event.entity_id == "42"


@pytest.mark.unit
def test_audit_persistence_failure_is_not_raised(offline_db, logger):
    offline_db.close()

    event = log_audit_event(
        logger, action="DELETE", entity_type="Contractor", entity_id="1",
        user_id="user-1", conn=offline_db.sqlite,
    )

    assert event.action == "DELETE"
