"""Tests for the dashboard CSV export."""

import csv
from datetime import datetime

import pytest

from sitepass.services.csv_export import (
    CSV_HEADERS,
    contractor_to_csv_row,
    default_export_filename,
    export_csv,
    rows_to_csv,
)


@pytest.mark.unit
def test_csv_row_columns(make_contractor):
    row = make_contractor(
        first_name="Jane",
        surname="Doe",
        company="Acme, Ltd",
        areas=["Maint-1", "Other: Yard"],
        status="confirmed",
        fob_number="12",
        fob_returned=True,
        signed_in_at=datetime(2024, 12, 9, 8, 30),
        sign_in_confirmed_by_email="lead@example.com",
    )

    values = contractor_to_csv_row(row)

    assert len(values) == len(CSV_HEADERS)
    assert values[:9] == [
        "Jane", "Doe", "Acme, Ltd", "07700900123", "Maint-1; Other: Yard",
        "confirmed", "12", "Yes", "No",
    ]
    assert values[9] == "2024-12-09 08:30"
    assert values[11] == "lead@example.com"
    assert values[12] == ""


@pytest.mark.unit
def test_rows_to_csv_quotes_commas(make_contractor):
    text = rows_to_csv([make_contractor(company="Acme, Ltd")])

    parsed = list(csv.reader(text.splitlines()))
    assert parsed[0] == list(CSV_HEADERS)
    assert parsed[1][2] == "Acme, Ltd"


@pytest.mark.unit
def test_export_writes_file(tmp_path, make_contractor):
    target = tmp_path / "out" / "board.csv"

    count = export_csv([make_contractor(), make_contractor()], target)

    assert count == 2
    lines = target.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 3


@pytest.mark.unit
def test_export_with_no_rows_writes_header(tmp_path):
    target = tmp_path / "empty.csv"
    assert export_csv([], target) == 0
    assert target.read_text(encoding="utf-8").strip() == ",".join(CSV_HEADERS)


@pytest.mark.unit
def test_default_export_filename():
    assert default_export_filename(datetime(2024, 12, 9, 14, 5)) == "contractors_2024-12-09_1405.csv"
