"""Tests for the kiosk sign-out request service."""

from unittest.mock import MagicMock

import pytest

from sitepass.errors import RepositoryError
from sitepass.services.sign_out_service import (
    MISSING_DETAILS_MESSAGE,
    NOT_FOUND_MESSAGE,
    REQUESTED_MESSAGE,
    SignOutService,
)


@pytest.fixture
def repo():
    return MagicMock()


@pytest.fixture
def service(repo, logger):
    return SignOutService(contractor_repo=repo, logger=logger)


@pytest.mark.unit
def test_request_flags_active_sign_in(service, repo):
    repo.request_signout.return_value = True

    result = service.request(" Jane ", " 0123 ")

    assert result.success
    assert result.data is True
    assert result.message == REQUESTED_MESSAGE
    repo.request_signout.assert_called_once_with("Jane", "0123")


@pytest.mark.unit
def test_request_without_match(service, repo):
    repo.request_signout.return_value = False

    result = service.request("Jane", "0123")

    assert result.success
    assert result.data is False
    assert result.message == NOT_FOUND_MESSAGE


@pytest.mark.unit
@pytest.mark.parametrize("first_name, phone", [("", "0123"), ("Jane", "  "), (None, None)])
def test_missing_details_not_sent(service, repo, first_name, phone):
    result = service.request(first_name, phone)

    assert not result.success
    assert result.error == MISSING_DETAILS_MESSAGE
    repo.request_signout.assert_not_called()


@pytest.mark.unit
def test_backend_error_is_reported(service, repo):
    repo.request_signout.side_effect = RepositoryError("function request_signout does not exist")

    result = service.request("Jane", "0123")

    assert not result.success
    assert result.error == "function request_signout does not exist"


@pytest.mark.unit
def test_repository_calls_rpc(contractor_repo, mock_supabase_client):
    mock_supabase_client.rpc.return_value.execute.return_value = MagicMock(data=1)

    assert contractor_repo.request_signout("Jane", "0123") is True
    mock_supabase_client.rpc.assert_called_once_with(
        "request_signout", {"p_first": "Jane", "p_phone": "0123"},
    )


@pytest.mark.unit
def test_repository_rpc_no_match(contractor_repo, mock_supabase_client):
    mock_supabase_client.rpc.return_value.execute.return_value = MagicMock(data=None)

    assert contractor_repo.request_signout("Jane", "0123") is False
