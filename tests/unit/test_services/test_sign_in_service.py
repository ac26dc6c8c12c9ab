"""Tests for the kiosk sign-in service."""

from unittest.mock import MagicMock

import pytest

from sitepass.errors import BackendUnavailableError, RepositoryError
from sitepass.services.sign_in_service import (
    INCOMPLETE_FORM_MESSAGE,
    SIGN_IN_RECORDED_MESSAGE,
    SignInService,
)


@pytest.fixture
def repo():
    mock = MagicMock()
    mock.insert.return_value = None
    return mock


@pytest.fixture
def service(repo, logger):
    return SignInService(contractor_repo=repo, logger=logger)


@pytest.mark.unit
def test_submit_records_pending_sign_in(service, repo):
    result = service.submit(" Jane ", "Doe", "Acme", "0123", ["Maint-1", "Insp-shed"], "Yard")

    assert result.success
    assert result.message == SIGN_IN_RECORDED_MESSAGE
    repo.insert.assert_called_once_with({
        "first_name": "Jane",
        "surname": "Doe",
        "company": "Acme",
        "phone": "0123",
        "areas": ["Maint-1", "Insp-shed", "Other: Yard"],
        "status": "pending",
    })


@pytest.mark.unit
def test_submit_accepts_other_area_alone(service, repo):
    result = service.submit("Jane", "Doe", "Acme", "0123", [], "Car park")

    assert result.success
    assert repo.insert.call_args.args[0]["areas"] == ["Other: Car park"]


@pytest.mark.unit
@pytest.mark.parametrize(
    "fields",
    [
        ("", "Doe", "Acme", "0123", ["Maint-1"], ""),
        ("Jane", "   ", "Acme", "0123", ["Maint-1"], ""),
        ("Jane", "Doe", "", "0123", ["Maint-1"], ""),
        ("Jane", "Doe", "Acme", "", ["Maint-1"], ""),
        ("Jane", "Doe", "Acme", "0123", [], ""),
        ("Jane", "Doe", "Acme", "0123", [], "Other"),
    ],
)
def test_incomplete_form_is_not_sent(service, repo, fields):
    result = service.submit(*fields)

    assert not result.success
    assert result.error == INCOMPLETE_FORM_MESSAGE
    repo.insert.assert_not_called()


@pytest.mark.unit
def test_backend_error_message_is_shown(service, repo):
    repo.insert.side_effect = RepositoryError("duplicate key value violates unique constraint")

    result = service.submit("Jane", "Doe", "Acme", "0123", ["Maint-1"])

    assert not result.success
    assert result.error == "duplicate key value violates unique constraint"


@pytest.mark.unit
def test_offline_backend_reported(service, repo):
    repo.insert.side_effect = BackendUnavailableError()

    result = service.submit("Jane", "Doe", "Acme", "0123", ["Maint-1"])

    assert not result.success
    assert "Cannot reach the server" in result.error


@pytest.mark.unit
def test_repository_insert_goes_through_supabase(contractor_repo, mock_supabase_client):
    """The repository sends the payload to the contractors table."""
    mock_supabase_client.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])

    assert contractor_repo.insert({"first_name": "Jane"}) is None
    mock_supabase_client.table.assert_called_with("contractors")
    mock_supabase_client.table.return_value.insert.assert_called_once_with({"first_name": "Jane"})


@pytest.mark.unit
def test_repository_wraps_backend_exceptions(contractor_repo, mock_supabase_client):
    mock_supabase_client.table.return_value.insert.return_value.execute.side_effect = RuntimeError("permission denied for table contractors")

    with pytest.raises(RepositoryError, match="permission denied"):
        contractor_repo.insert({"first_name": "Jane"})
