from __future__ import annotations

"""
Data Models Package.

Re-exports the Pydantic models:
    from sitepass.models import Contractor, SignInForm, User
    from sitepass.models import UserRole, ContractorStatus
"""

from sitepass.models.enums import ContractorStatus, UserRole
from sitepass.models.user import User
from sitepass.models.contractor import Contractor, SignInForm

__all__ = [
    "ContractorStatus",
    "UserRole",
    "User",
    "Contractor",
    "SignInForm",
]
