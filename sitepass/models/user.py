"""
User Model.

The authenticated team leader, admin or display account.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from sitepass.models.enums import UserRole


class User(BaseModel):
    """Represents the signed-in account.

    ``role`` is ``None`` when neither the token claim nor the profile row
    yields a recognised role; such a user can reach public views only.
    """

    id: str  # Supabase UUID
    email: str
    full_name: str = ""
    role: Optional[UserRole] = None

    model_config = {"from_attributes": True}

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
