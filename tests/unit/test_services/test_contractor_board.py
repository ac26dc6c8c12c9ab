"""Tests for the contractor board service."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from freezegun import freeze_time

from sitepass.errors import RepositoryError
from sitepass.models.enums import ContractorStatus
from sitepass.repositories.contractor_repository import ContractorRepository
from sitepass.services.contractor_board import (
    FOB_NOT_ISSUED_MESSAGE,
    FOB_NOT_RETURNED_MESSAGE,
    FOB_REQUIRED_MESSAGE,
    NOT_AWAITING_MESSAGE,
    SIGNOUT_NOT_REQUESTED_MESSAGE,
    ContractorBoardService,
)

NOW = datetime(2024, 12, 9, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo():
    mock = MagicMock()
    mock.update.return_value = None
    return mock


@pytest.fixture
def board_for(repo, logger):
    def _make(session, db=None):
        return ContractorBoardService(contractor_repo=repo, session=session, logger=logger, db=db)
    return _make


# ---------------------------------------------------------------------------
# Partitioning
# ---------------------------------------------------------------------------

@pytest.mark.unit
def test_partition_buckets(make_contractor):
    awaiting = make_contractor(status="pending")
    on_site = make_contractor(status="confirmed", fob_number="5", areas=["Maint-1", "Other: Yard"])
    recent = make_contractor(status="signed_out", signed_out_at="2024-12-08T16:00:00+00:00")
    newer = make_contractor(status="signed_out", signed_out_at="2024-12-09T10:00:00+00:00")
    stale = make_contractor(status="signed_out", signed_out_at="2024-11-20T16:00:00+00:00")

    snapshot = ContractorBoardService.partition(
        [awaiting, on_site, recent, newer, stale], now=NOW, window_days=7,
    )

    assert snapshot.awaiting == [awaiting]
    assert snapshot.on_site == [on_site]
    assert snapshot.signed_out_recent == [newer, recent]
    assert snapshot.loaded_at == NOW


@pytest.mark.unit
def test_partition_counts_on_site_only(make_contractor):
    rows = [
        make_contractor(status="confirmed", areas=["Maint-1", "M1"]),
        make_contractor(status="confirmed", areas=["Maint-1", "Rep-Shed"], signout_requested=True),
        make_contractor(status="confirmed", areas=["Other: Bay"]),
        make_contractor(status="pending", areas=["Maint-1"]),
    ]

    snapshot = ContractorBoardService.partition(rows, now=NOW)
    counts = {item.label: item.count for item in snapshot.area_counts}

    assert counts["M1"] == 2
    assert counts["RShed"] == 1
    assert snapshot.other_count == 1
    assert snapshot.on_site_total == 3
    assert snapshot.awaiting_total == 1
    assert snapshot.signout_requested_total == 1


@pytest.mark.unit
def test_partition_treats_naive_timestamps_as_utc(make_contractor):
    row = make_contractor(status="signed_out", signed_out_at="2024-12-08T16:00:00")
    snapshot = ContractorBoardService.partition([row], now=NOW)
    assert snapshot.signed_out_recent == [row]


@pytest.mark.unit
@freeze_time("2024-12-09 12:00:00")
def test_load_fetches_and_stores_snapshot(board_for, repo, teamleader_session, make_contractor):
    repo.list_recent.return_value = [make_contractor(status="pending")]
    board = board_for(teamleader_session)

    result = board.load()

    assert result.success
    assert board.snapshot.awaiting_total == 1
    assert board.snapshot.loaded_at == NOW
    repo.list_recent.assert_called_once_with(500)


@pytest.mark.unit
def test_load_failure_keeps_previous_snapshot(board_for, repo, teamleader_session):
    repo.list_recent.side_effect = RepositoryError("JWT expired")
    board = board_for(teamleader_session)

    result = board.load()

    assert not result.success
    assert result.error == "JWT expired"
    assert board.snapshot.awaiting == []


# ---------------------------------------------------------------------------
# Confirm sign-in
# ---------------------------------------------------------------------------

@pytest.mark.unit
@freeze_time("2024-12-09 12:00:00")
def test_confirm_sign_in_records_fob_and_actor(board_for, repo, teamleader_session, make_contractor):
    row = make_contractor(status="pending")
    board = board_for(teamleader_session)

    result = board.confirm_sign_in(row, " 17 ")

    assert result.success
    changes = repo.update.call_args.args[1]
    assert changes["fob_number"] == "17"
    assert changes["status"] == "confirmed"
    assert changes["sign_in_confirmed_by"] == "user-teamleader"
    assert changes["sign_in_confirmed_by_email"] == "lead@example.com"
    assert changes["sign_in_confirmed_at"] == NOW.isoformat()
    assert row.status == ContractorStatus.CONFIRMED
    assert row.fob_number == "17"


@pytest.mark.unit
def test_confirm_sign_in_requires_fob(board_for, repo, teamleader_session, make_contractor):
    result = board_for(teamleader_session).confirm_sign_in(make_contractor(), "  ")

    assert not result.success
    assert result.error == FOB_REQUIRED_MESSAGE
    repo.update.assert_not_called()


@pytest.mark.unit
def test_confirm_sign_in_rejects_confirmed_row(board_for, teamleader_session, make_contractor):
    row = make_contractor(status="confirmed", fob_number="3")
    result = board_for(teamleader_session).confirm_sign_in(row, "4")
    assert result.error == NOT_AWAITING_MESSAGE


@pytest.mark.unit
def test_actions_need_a_board_role(board_for, repo, display_session, make_contractor):
    result = board_for(display_session).confirm_sign_in(make_contractor(), "17")

    assert not result.success
    assert "not allowed" in result.error
    repo.update.assert_not_called()


@pytest.mark.unit
def test_actions_need_a_session(board_for, repo, anonymous_session, make_contractor):
    result = board_for(anonymous_session).confirm_sign_in(make_contractor(), "17")

    assert not result.success
    assert "Authentication required" in result.error


# ---------------------------------------------------------------------------
# Fob returned toggle
# ---------------------------------------------------------------------------

@pytest.mark.unit
def test_fob_returned_toggle_applies(board_for, repo, teamleader_session, make_contractor):
    row = make_contractor(status="confirmed", fob_number="9")

    result = board_for(teamleader_session).set_fob_returned(row, True)

    assert result.success
    assert row.fob_returned is True
    repo.update.assert_called_once_with(row.id, {"fob_returned": True})


@pytest.mark.unit
def test_fob_returned_toggle_reverts_on_failure(board_for, repo, teamleader_session, make_contractor):
    row = make_contractor(status="confirmed", fob_number="9", fob_returned=False)
    seen_during_call = []

    def failing_update(*_args):
        seen_during_call.append(row.fob_returned)
        raise RepositoryError("network down")

    repo.update.side_effect = failing_update

    result = board_for(teamleader_session).set_fob_returned(row, True)

    assert seen_during_call == [True]
    assert not result.success
    assert result.error == "network down"
    assert result.data is row
    assert row.fob_returned is False


@pytest.mark.unit
def test_fob_returned_needs_issued_fob(board_for, repo, teamleader_session, make_contractor):
    row = make_contractor(status="confirmed", fob_number=None)

    result = board_for(teamleader_session).set_fob_returned(row, True)

    assert result.error == FOB_NOT_ISSUED_MESSAGE
    repo.update.assert_not_called()


# ---------------------------------------------------------------------------
# Confirm sign-out
# ---------------------------------------------------------------------------

@pytest.mark.unit
def test_sign_out_blocked_until_fob_returned(board_for, teamleader_session, make_contractor):
    row = make_contractor(status="confirmed", fob_number="9", signout_requested=True)
    board = board_for(teamleader_session)

    assert board.can_confirm_sign_out(row) == (False, FOB_NOT_RETURNED_MESSAGE)
    row.fob_returned = True
    assert board.can_confirm_sign_out(row) == (True, None)


@pytest.mark.unit
def test_sign_out_needs_request_unless_admin(board_for, teamleader_session, admin_session, make_contractor):
    row = make_contractor(status="confirmed", fob_number="9", fob_returned=True)

    assert board_for(teamleader_session).can_confirm_sign_out(row) == (False, SIGNOUT_NOT_REQUESTED_MESSAGE)
    assert board_for(admin_session).can_confirm_sign_out(row) == (True, None)


@pytest.mark.unit
@freeze_time("2024-12-09 12:00:00")
def test_confirm_sign_out_records_actor(board_for, repo, teamleader_session, make_contractor):
    row = make_contractor(status="confirmed", fob_number="9", fob_returned=True, signout_requested=True)

    result = board_for(teamleader_session).confirm_sign_out(row)

    assert result.success
    changes = repo.update.call_args.args[1]
    assert changes["status"] == "signed_out"
    assert changes["signed_out_by_email"] == "lead@example.com"
    assert row.is_signed_out


@pytest.mark.unit
def test_confirm_sign_out_refused_without_fob_return(board_for, repo, admin_session, make_contractor):
    row = make_contractor(status="confirmed", fob_number="9", fob_returned=False)

    result = board_for(admin_session).confirm_sign_out(row)

    assert result.error == FOB_NOT_RETURNED_MESSAGE
    repo.update.assert_not_called()


# ---------------------------------------------------------------------------
# Delete + audit
# ---------------------------------------------------------------------------

@pytest.mark.unit
def test_delete_is_admin_only(board_for, repo, teamleader_session, make_contractor):
    result = board_for(teamleader_session).delete(make_contractor())

    assert not result.success
    repo.delete.assert_not_called()


@pytest.mark.unit
def test_admin_delete_removes_row_from_snapshot(board_for, repo, admin_session, make_contractor):
    keep = make_contractor(status="pending")
    gone = make_contractor(status="pending")
    repo.list_recent.return_value = [keep, gone]
    board = board_for(admin_session)
    board.load()

    result = board.delete(gone)

    assert result.success
    repo.delete.assert_called_once_with(gone.id)
    assert board.snapshot.awaiting == [keep]


@pytest.mark.unit
def test_actions_are_persisted_to_audit_log(board_for, db, admin_session, make_contractor):
    row = make_contractor(status="pending")
    board = board_for(admin_session, db=db)

    board.confirm_sign_in(row, "21")

    audit = db.sqlite.execute("SELECT action, entity_id, actor_email FROM audit_log").fetchall()
    assert [tuple(r) for r in audit] == [("CONFIRM_SIGN_IN", str(row.id), "admin@example.com")]


@pytest.mark.unit
@freeze_time("2024-12-09 12:00:00")
def test_load_keeps_valid_rows_beside_malformed_ones(teamleader_session, db, logger, mock_supabase_client):
    query = mock_supabase_client.table.return_value.select.return_value
    query.order.return_value.limit.return_value.execute.return_value = MagicMock(data=[
        {"id": 1, "first_name": "Ann", "status": "confirmed", "areas": ["Maint-1"]},
        {"id": 2, "first_name": "Bob", "status": None},
        {"id": 3, "first_name": "Cy", "status": "cancelled"},
    ])
    board = ContractorBoardService(
        contractor_repo=ContractorRepository(db=db, logger=logger),
        session=teamleader_session,
        logger=logger,
    )

    result = board.load()

    assert result.success
    assert [row.id for row in board.snapshot.on_site] == [1]
    assert board.snapshot.awaiting == []
    assert board.snapshot.signed_out_recent == []
