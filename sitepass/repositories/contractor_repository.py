"""
Contractor Repository.

All reads and writes of the backend ``contractors`` table, plus the
``request_signout`` remote procedure.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import ValidationError

from sitepass.database import DatabaseManager
from sitepass.logger import StructuredLogger
from sitepass.models.contractor import Contractor
from sitepass.repositories.base_repository import BaseRepository

ContractorId = Union[int, str]


class ContractorRepository(BaseRepository):
    """Data access for contractor sign-in records."""

    TABLE = "contractors"
    SIGNOUT_RPC = "request_signout"

    def __init__(
        self,
        db: DatabaseManager,
        logger: StructuredLogger,
        table: Optional[str] = None,
        signout_rpc: Optional[str] = None,
    ) -> None:
        super().__init__(db, logger, table)
        if signout_rpc:
            self.SIGNOUT_RPC = signout_rpc

    def list_recent(self, limit: int = 500) -> list[Contractor]:
        """Newest records first, by ``signed_in_at``.

        A row that fails validation (null or unknown ``status``, missing
        ``id``) is logged and left out; the remaining rows are returned.
        """
        def _select() -> list[Contractor]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .order("signed_in_at", desc=True)
                .limit(limit)
                .execute()
            )
            rows: list[Contractor] = []
            for row in response.data or []:
                try:
                    rows.append(Contractor.model_validate(row))
                except ValidationError as exc:
                    self._logger.warning(
                        "Skipping malformed contractor row",
                        extra={
                            "row_id": row.get("id") if isinstance(row, dict) else None,
                            "errors": exc.error_count(),
                        },
                    )
            return rows

        return self._run(_select, operation_name="list_recent (contractors)")

    def insert(self, payload: dict[str, Any]) -> Optional[Contractor]:
        """Insert one row.

        Returns the stored row when the backend echoes it.  Anonymous
        kiosks often may insert but not select, so ``None`` is a success.
        """
        def _insert() -> Optional[Contractor]:
            response = self.supabase.table(self.TABLE).insert(payload).execute()
            rows = response.data or []
            return Contractor.model_validate(rows[0]) if rows else None

        return self._run(_insert, operation_name="insert (contractors)")

    def update(
        self,
        contractor_id: ContractorId,
        changes: dict[str, Any],
    ) -> Optional[Contractor]:
        def _update() -> Optional[Contractor]:
            response = (
                self.supabase.table(self.TABLE)
                .update(changes)
                .eq("id", contractor_id)
                .execute()
            )
            rows = response.data or []
            return Contractor.model_validate(rows[0]) if rows else None

        return self._run(_update, operation_name="update (contractors)")

    def delete(self, contractor_id: ContractorId) -> None:
        def _delete() -> None:
            self.supabase.table(self.TABLE).delete().eq("id", contractor_id).execute()

        self._run(_delete, operation_name="delete (contractors)")

    def request_signout(self, first_name: str, phone: str) -> bool:
        """Flag the caller's active sign-in for sign-out.

        The procedure matches on first name and phone server-side and
        returns a falsy value when no active sign-in matched.
        """
        def _rpc() -> bool:
            response = self.supabase.rpc(
                self.SIGNOUT_RPC, {"p_first": first_name, "p_phone": phone}
            ).execute()
            return bool(response.data)

        return self._run(_rpc, operation_name="request_signout (rpc)")
