"""
CSV Export.

Dashboard export of the loaded contractor records, one row per record.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Optional

from sitepass.models.contractor import Contractor
from sitepass.utils.formatting import format_timestamp

CSV_HEADERS: tuple[str, ...] = (
    "First name",
    "Surname",
    "Company",
    "Phone",
    "Areas",
    "Status",
    "Fob #",
    "Fob returned",
    "Sign-out requested",
    "Signed in",
    "Sign-in confirmed",
    "Confirmed by",
    "Signed out",
    "Signed out by",
)

AREA_SEPARATOR: str = "; "


def contractor_to_csv_row(row: Contractor) -> list[str]:
    return [
        row.first_name,
        row.surname,
        row.company,
        row.phone,
        AREA_SEPARATOR.join(row.areas),
        row.status.value,
        row.fob_number or "",
        "Yes" if row.fob_returned else "No",
        "Yes" if row.signout_requested else "No",
        format_timestamp(row.signed_in_at),
        format_timestamp(row.sign_in_confirmed_at),
        row.sign_in_confirmed_by_email or "",
        format_timestamp(row.signed_out_at),
        row.signed_out_by_email or "",
    ]


def rows_to_csv(rows: Iterable[Contractor]) -> str:
    """Render *rows* as CSV text with a header line."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in rows:
        writer.writerow(contractor_to_csv_row(row))
    return buffer.getvalue()


def default_export_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"contractors_{now:%Y-%m-%d_%H%M}.csv"


def export_csv(rows: Iterable[Contractor], path: Path) -> int:
    """Write *rows* to *path*; returns the number of records written."""
    rows = list(rows)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(rows_to_csv(rows))
    return len(rows)
