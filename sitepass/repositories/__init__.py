"""
Repository Layer Package.

Data-access abstractions over the Supabase backend.  Services never touch
``db.supabase`` directly.

Usage:
    from sitepass.repositories import ContractorRepository, ProfileRepository
"""

from sitepass.repositories.base_repository import BaseRepository
from sitepass.repositories.contractor_repository import ContractorRepository
from sitepass.repositories.profile_repository import ProfileRepository

__all__ = [
    "BaseRepository",
    "ContractorRepository",
    "ProfileRepository",
]
