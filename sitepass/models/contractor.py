"""
Contractor Model.

One row of the backend ``contractors`` table, plus the sign-in form input
that creates it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sitepass.models.enums import ContractorStatus


class Contractor(BaseModel):
    """A contractor or visitor sign-in record.

    Unknown columns returned by ``select("*")`` are ignored so backend
    schema additions do not break the kiosk.
    """

    model_config = ConfigDict(from_attributes=True, extra="ignore", validate_assignment=True)

    id: Union[int, str]
    first_name: str = ""
    surname: str = ""
    company: str = ""
    phone: str = ""
    areas: list[str] = Field(default_factory=list)
    status: ContractorStatus = ContractorStatus.PENDING
    fob_number: Optional[str] = None
    fob_returned: bool = False
    signout_requested: bool = False
    signed_in_at: Optional[datetime] = None
    sign_in_confirmed_at: Optional[datetime] = None
    sign_in_confirmed_by: Optional[str] = None
    sign_in_confirmed_by_email: Optional[str] = None
    signed_out_at: Optional[datetime] = None
    signed_out_by: Optional[str] = None
    signed_out_by_email: Optional[str] = None

    @field_validator("areas", mode="before")
    @classmethod
    def _coerce_areas(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(item) for item in value if item is not None]

    @field_validator("first_name", "surname", "company", "phone", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("fob_number", mode="before")
    @classmethod
    def _fob_to_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("fob_returned", "signout_requested", mode="before")
    @classmethod
    def _none_to_false(cls, value: Any) -> bool:
        return bool(value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}".strip()

    @property
    def has_fob(self) -> bool:
        return bool(self.fob_number)

    @property
    def is_signed_out(self) -> bool:
        return self.status == ContractorStatus.SIGNED_OUT or self.signed_out_at is not None

    @property
    def is_awaiting(self) -> bool:
        return self.status == ContractorStatus.PENDING and self.signed_out_at is None

    @property
    def is_on_site(self) -> bool:
        return self.status == ContractorStatus.CONFIRMED and self.signed_out_at is None


class SignInForm(BaseModel):
    """Sign-in input as typed at the kiosk.  Text fields are stripped."""

    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = ""
    surname: str = ""
    company: str = ""
    phone: str = ""
    areas: list[str] = Field(default_factory=list)

    @property
    def missing_fields(self) -> list[str]:
        return [
            name
            for name in ("first_name", "surname", "company", "phone")
            if not getattr(self, name)
        ]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields and bool(self.areas)

    def to_insert_payload(self) -> dict[str, Any]:
        """Row sent to the backend.  New sign-ins always start ``pending``."""
        return {
            "first_name": self.first_name,
            "surname": self.surname,
            "company": self.company,
            "phone": self.phone,
            "areas": list(self.areas),
            "status": ContractorStatus.PENDING.value,
        }
