"""
Shared Enumerations for SitePass Models.

StrEnum values compare equal to their string equivalents, so a raw
``status == "pending"`` check against a backend row keeps working.
"""

from __future__ import annotations
from enum import StrEnum


class UserRole(StrEnum):
    """Roles carried in the ``app_metadata.app_role`` token claim.

    ``NEW_TEAMLEADER`` is assigned to freshly registered accounts and grants
    nothing until an administrator promotes the account.
    """

    ADMIN = "admin"
    TEAMLEADER = "teamleader"
    NEW_TEAMLEADER = "new_teamleader"
    DISPLAY = "display"


class ContractorStatus(StrEnum):
    """Lifecycle of a contractor record."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    SIGNED_OUT = "signed_out"


# Role groups used for view gating.
BOARD_ROLES: frozenset[UserRole] = frozenset({UserRole.ADMIN, UserRole.TEAMLEADER})
SCREEN_ROLES: frozenset[UserRole] = frozenset(
    {UserRole.ADMIN, UserRole.TEAMLEADER, UserRole.DISPLAY}
)
