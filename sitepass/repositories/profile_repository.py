"""
Profile Repository.

Reads the ``profiles`` side table, the fallback source of an account's
role when the access token carries no role claim.
"""

from __future__ import annotations

from typing import Optional

from sitepass.repositories.base_repository import BaseRepository


class ProfileRepository(BaseRepository):
    """Read-only access to team leader profiles."""

    TABLE = "profiles"

    def get_role(self, user_id: str) -> Optional[str]:
        """Raw role string for *user_id*, or ``None`` when no profile exists."""
        def _select() -> Optional[str]:
            response = (
                self.supabase.table(self.TABLE)
                .select("role")
                .eq("id", user_id)
                .maybe_single()
                .execute()
            )
            data = response.data if response is not None else None
            if not data:
                return None
            role = data.get("role")
            return str(role) if role is not None else None

        return self._run(_select, operation_name="get_role (profiles)")
