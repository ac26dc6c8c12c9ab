"""Tests for Contractor and SignInForm models."""

import pytest

from sitepass.models.contractor import Contractor, SignInForm
from sitepass.models.enums import ContractorStatus


@pytest.mark.unit
def test_contractor_coerces_backend_nulls():
    """Nullable backend columns become empty values."""
    row = Contractor.model_validate({
        "id": 7,
        "first_name": None,
        "surname": "Smith",
        "company": None,
        "phone": 7700900123,
        "areas": None,
        "status": "confirmed",
        "fob_number": 42,
        "fob_returned": None,
        "signout_requested": None,
        "unexpected_column": "ignored",
    })

    assert row.first_name == ""
    assert row.company == ""
    assert row.phone == "7700900123"
    assert row.areas == []
    assert row.fob_number == "42"
    assert row.fob_returned is False
    assert row.signout_requested is False
    assert row.status == ContractorStatus.CONFIRMED


@pytest.mark.unit
def test_contractor_single_area_string_becomes_list():
    row = Contractor.model_validate({"id": 1, "areas": "Maint-2"})
    assert row.areas == ["Maint-2"]


@pytest.mark.unit
def test_contractor_blank_fob_is_none():
    row = Contractor.model_validate({"id": 1, "fob_number": "   "})
    assert row.fob_number is None
    assert row.has_fob is False


@pytest.mark.unit
def test_contractor_lifecycle_properties(make_contractor):
    pending = make_contractor(status="pending")
    on_site = make_contractor(status="confirmed", fob_number="12")
    signed_out = make_contractor(status="signed_out", signed_out_at="2024-12-09T17:00:00+00:00")

    assert pending.is_awaiting and not pending.is_on_site
    assert on_site.is_on_site and not on_site.is_awaiting
    assert signed_out.is_signed_out
    assert not signed_out.is_on_site


@pytest.mark.unit
def test_contractor_signed_out_at_wins_over_status(make_contractor):
    """A confirmed row with a sign-out time is no longer on site."""
    row = make_contractor(status="confirmed", signed_out_at="2024-12-09T17:00:00+00:00")
    assert not row.is_on_site
    assert row.is_signed_out


@pytest.mark.unit
def test_contractor_full_name(make_contractor):
    assert make_contractor(first_name="Ann", surname="Lee").full_name == "Ann Lee"
    assert make_contractor(first_name="Ann", surname="").full_name == "Ann"


@pytest.mark.unit
def test_sign_in_form_strips_whitespace():
    form = SignInForm(first_name="  Jane ", surname=" Doe", company="Acme ", phone=" 0123 ", areas=["Maint-1"])

    assert form.first_name == "Jane"
    assert form.phone == "0123"
    assert form.is_complete


@pytest.mark.unit
def test_sign_in_form_missing_fields():
    form = SignInForm(first_name="Jane", surname="", company="  ", phone="0123", areas=["Maint-1"])

    assert form.missing_fields == ["surname", "company"]
    assert not form.is_complete


@pytest.mark.unit
def test_sign_in_form_requires_an_area():
    form = SignInForm(first_name="Jane", surname="Doe", company="Acme", phone="0123", areas=[])
    assert form.missing_fields == []
    assert not form.is_complete


@pytest.mark.unit
def test_insert_payload_starts_pending():
    form = SignInForm(first_name="Jane", surname="Doe", company="Acme", phone="0123", areas=["Maint-1", "Other: Yard"])

    payload = form.to_insert_payload()

    assert payload == {
        "first_name": "Jane",
        "surname": "Doe",
        "company": "Acme",
        "phone": "0123",
        "areas": ["Maint-1", "Other: Yard"],
        "status": "pending",
    }
