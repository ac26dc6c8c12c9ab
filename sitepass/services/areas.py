"""
Area Catalog.

Work-zone tags a contractor picks at sign-in.  Standard areas are stored
under their long site names (``Maint-1``) and shown under short labels
(``M1``).  Anything else is an "Other" area; the sign-in form stores those
as ``Other: <text>``.

Rows written by older kiosk builds carry the short label itself
(``M1``), so both spellings count as standard.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final, Optional

STANDARD_AREAS: Final[tuple[tuple[str, str], ...]] = (
    ("Maint-1", "M1"),
    ("Maint-2", "M2"),
    ("Insp-shed", "Insp"),
    ("Rep-Shed", "RShed"),
    ("1-Clean", "1CL"),
    ("2-Clean", "2CL"),
    ("3-Clean", "3CL"),
    ("4-Clean", "4CL"),
)

AREA_SHORT_MAP: Final[dict[str, str]] = dict(STANDARD_AREAS)
STANDARD_DB_AREAS: Final[tuple[str, ...]] = tuple(name for name, _ in STANDARD_AREAS)
SHORT_ORDER: Final[tuple[str, ...]] = tuple(short for _, short in STANDARD_AREAS)

OTHER_PREFIX: Final[str] = "Other:"
OTHER_PLACEHOLDER: Final[str] = "Other"

_SHORT_LOOKUP: Final[dict[str, str]] = {
    **{short.lower(): short for short in SHORT_ORDER},
    **{name.lower(): short for name, short in STANDARD_AREAS},
}


def short_label(area: Optional[str]) -> str:
    """Short label of a standard area, ``""`` for anything else."""
    if not area:
        return ""
    return _SHORT_LOOKUP.get(str(area).strip().lower(), "")


def is_other_area(area: Optional[str]) -> bool:
    text = str(area or "").strip()
    if not text:
        return False
    if text.lower().startswith("other:"):
        return True
    return not short_label(text)


def extract_other_text(area: Optional[str]) -> str:
    """``"Other: Yard"`` -> ``"Yard"``; a bare non-standard tag is returned as is."""
    text = str(area or "").strip()
    if not text:
        return ""
    if text.lower().startswith("other:"):
        return text[text.index(":") + 1:].strip()
    if is_other_area(text):
        return text
    return ""


def has_any_other(areas: Iterable[str]) -> bool:
    return any(extract_other_text(area) for area in areas or ())


def areas_display_text(areas: Iterable[str]) -> str:
    """Table text: standard short labels in site order, then other texts sorted."""
    standards: set[str] = set()
    others: set[str] = set()
    for area in areas or ():
        short = short_label(area)
        if short:
            standards.add(short)
            continue
        other = extract_other_text(area)
        if other:
            others.add(other)

    ordered = sorted(standards, key=SHORT_ORDER.index)
    return ", ".join([*ordered, *sorted(others, key=str.casefold)])


def build_area_list(selected: Iterable[str], other_text: str = "") -> list[str]:
    """Areas to store for a sign-in.

    *selected* keeps its order without duplicates.  *other_text* is appended
    as ``Other: <text>`` unless it is blank or the literal placeholder.
    """
    result: list[str] = []
    for area in selected:
        area = area.strip()
        if area and area not in result:
            result.append(area)

    other = (other_text or "").strip()
    if other and other.lower() != OTHER_PLACEHOLDER.lower():
        tagged = f"{OTHER_PREFIX} {other}"
        if tagged not in result:
            result.append(tagged)
    return result


def count_by_area(areas_per_row: Iterable[Iterable[str]]) -> tuple[dict[str, int], int]:
    """Head count per standard short label plus the "Other" head count.

    A row counts once per distinct standard area, and once toward
    "Other" when it has any non-standard area.
    """
    counts: dict[str, int] = {short: 0 for short in SHORT_ORDER}
    other_count = 0
    for areas in areas_per_row:
        areas = list(areas or ())
        for short in {short_label(area) for area in areas} - {""}:
            counts[short] += 1
        if has_any_other(areas):
            other_count += 1
    return counts, other_count
