"""
Service Layer Data Transfer Objects.

Pydantic models for validated output at service boundaries.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from sitepass.models.contractor import Contractor

T = TypeVar("T")

__all__ = [
    "AreaCount",
    "BoardSnapshot",
    "ServiceResult",
]


class ServiceResult(BaseModel, Generic[T]):
    """Standard service return envelope.

    ``error`` is written for the person at the kiosk; ``message`` carries
    the confirmation text on success.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None


class AreaCount(BaseModel):
    """Number of on-site contractors working in one area."""

    label: str
    count: int = 0


class BoardSnapshot(BaseModel):
    """Partitioned view of the most recent contractor records.

    Attributes
    ----------
    awaiting:
        Pending sign-ins not yet confirmed by a team leader.
    on_site:
        Confirmed contractors who have not signed out.
    signed_out_recent:
        Signed-out records inside the retention window, newest first.
    area_counts:
        On-site head count per standard area, in display order.
    other_count:
        On-site contractors with at least one non-standard area.
    """

    awaiting: list[Contractor] = Field(default_factory=list)
    on_site: list[Contractor] = Field(default_factory=list)
    signed_out_recent: list[Contractor] = Field(default_factory=list)
    area_counts: list[AreaCount] = Field(default_factory=list)
    other_count: int = 0
    loaded_at: Optional[datetime] = None

    @property
    def on_site_total(self) -> int:
        return len(self.on_site)

    @property
    def awaiting_total(self) -> int:
        return len(self.awaiting)

    @property
    def signout_requested_total(self) -> int:
        return sum(1 for row in self.on_site if row.signout_requested)
