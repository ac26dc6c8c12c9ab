"""
Contractor Board Service.

Loads the most recent contractor records, partitions them into the
buckets the dashboard and the screen display show, and performs the team
leader actions on individual records:

- confirm a pending sign-in and issue a fob
- re-issue the fob of an on-site contractor
- mark a fob returned (applied optimistically, reverted on failure)
- confirm a sign-out
- delete a record (admins only)

Every successful action is written to the audit trail.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, TypeVar

from sitepass.auth import SessionManager
from sitepass.database import DatabaseManager
from sitepass.errors import AuthorizationError, SitePassError
from sitepass.jwt_auth import require_role
from sitepass.logger import StructuredLogger
from sitepass.models.contractor import Contractor
from sitepass.models.enums import BOARD_ROLES, ContractorStatus, UserRole
from sitepass.models.service_models import AreaCount, BoardSnapshot, ServiceResult
from sitepass.repositories.contractor_repository import ContractorRepository
from sitepass.services.areas import count_by_area
from sitepass.services.base_service import BaseService
from sitepass.utils.audit import DetailValue, log_audit_event
from sitepass.utils.formatting import as_utc

T = TypeVar("T")

ENTITY_TYPE: str = "Contractor"

FOB_REQUIRED_MESSAGE: str = "Fob number is required"
FOB_NOT_ISSUED_MESSAGE: str = "No fob has been issued to this contractor."
FOB_NOT_RETURNED_MESSAGE: str = "The fob must be returned before sign-out can be confirmed."
SIGNOUT_NOT_REQUESTED_MESSAGE: str = (
    "This contractor has not requested sign-out. Only an admin can sign them out directly."
)
NOT_AWAITING_MESSAGE: str = "This sign-in is no longer awaiting confirmation."
NOT_ON_SITE_MESSAGE: str = "This contractor is not on site."
DELETE_CONFIRM_PROMPT: str = "Delete this record? This cannot be undone."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ContractorBoardService(BaseService):
    """Board state and team leader actions.

    Parameters
    ----------
    contractor_repo:
        Backend access for contractor rows.
    session:
        Shared session; supplies the acting user and role.
    logger:
        Structured JSON logger.
    db:
        Optional database manager; when given, audit events are also
        persisted to the local ``audit_log`` table.
    row_limit:
        Maximum rows fetched per load.
    signed_out_window_days:
        How far back signed-out records stay on the dashboard.
    """

    def __init__(
        self,
        contractor_repo: ContractorRepository,
        session: SessionManager,
        logger: StructuredLogger,
        db: Optional[DatabaseManager] = None,
        row_limit: int = 500,
        signed_out_window_days: int = 7,
    ) -> None:
        super().__init__(logger)
        self._contractor_repo = contractor_repo
        self._session = session
        self._db = db
        self._row_limit = row_limit
        self._window_days = signed_out_window_days
        self._lock: threading.RLock = threading.RLock()
        self._snapshot: BoardSnapshot = BoardSnapshot()

    @property
    def snapshot(self) -> BoardSnapshot:
        with self._lock:
            return self._snapshot

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> ServiceResult[BoardSnapshot]:
        """Fetch the most recent rows and rebuild the snapshot."""
        try:
            rows = self._contractor_repo.list_recent(self._row_limit)
        except SitePassError as exc:
            return ServiceResult(success=False, error=self._describe_failure(exc))

        snapshot = self.partition(rows, now=_utc_now(), window_days=self._window_days)
        with self._lock:
            self._snapshot = snapshot
        self._logger.debug(
            "Board loaded: %d awaiting, %d on site, %d recently signed out",
            snapshot.awaiting_total,
            snapshot.on_site_total,
            len(snapshot.signed_out_recent),
        )
        return ServiceResult(success=True, data=snapshot)

    @staticmethod
    def partition(
        rows: Iterable[Contractor],
        now: Optional[datetime] = None,
        window_days: int = 7,
    ) -> BoardSnapshot:
        """Split *rows* into board buckets.

        Row order within awaiting and on-site is preserved (newest sign-in
        first, as fetched).  Signed-out rows are kept only when
        ``signed_out_at`` falls within *window_days* of *now*.
        """
        now = now or _utc_now()
        cutoff = now - timedelta(days=window_days)

        awaiting: list[Contractor] = []
        on_site: list[Contractor] = []
        signed_out: list[Contractor] = []
        for row in rows:
            if row.is_awaiting:
                awaiting.append(row)
            elif row.is_on_site:
                on_site.append(row)
            elif row.signed_out_at is not None and _as_aware(row.signed_out_at) >= cutoff:
                signed_out.append(row)

        signed_out.sort(key=lambda r: _as_aware(r.signed_out_at), reverse=True)

        counts, other_count = count_by_area(row.areas for row in on_site)
        return BoardSnapshot(
            awaiting=awaiting,
            on_site=on_site,
            signed_out_recent=signed_out,
            area_counts=[AreaCount(label=label, count=n) for label, n in counts.items()],
            other_count=other_count,
            loaded_at=now,
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def confirm_sign_in(self, row: Contractor, fob_number: str) -> ServiceResult[Contractor]:
        """Confirm a pending sign-in and record the issued fob."""
        fob = (fob_number or "").strip()
        if not fob:
            return ServiceResult(success=False, error=FOB_REQUIRED_MESSAGE)
        if not row.is_awaiting:
            return ServiceResult(success=False, error=NOT_AWAITING_MESSAGE)

        user_id, email = self._actor()
        changes: dict[str, Any] = {
            "fob_number": fob,
            "status": ContractorStatus.CONFIRMED.value,
            "sign_in_confirmed_at": _utc_now().isoformat(),
            "sign_in_confirmed_by": user_id,
            "sign_in_confirmed_by_email": email,
        }
        return self._apply(row, changes, action="CONFIRM_SIGN_IN", details={"fob_number": fob})

    def update_fob_number(self, row: Contractor, fob_number: str) -> ServiceResult[Contractor]:
        """Re-issue the fob of an on-site contractor."""
        fob = (fob_number or "").strip()
        if not fob:
            return ServiceResult(success=False, error=FOB_REQUIRED_MESSAGE)
        if not row.is_on_site:
            return ServiceResult(success=False, error=NOT_ON_SITE_MESSAGE)

        previous = row.fob_number or ""
        changes: dict[str, Any] = {"fob_number": fob, "fob_returned": False}
        return self._apply(
            row, changes, action="UPDATE_FOB", details={"old": previous, "new": fob},
        )

    def set_fob_returned(self, row: Contractor, value: bool) -> ServiceResult[Contractor]:
        """Toggle ``fob_returned`` optimistically.

        The row changes before the backend call; on failure the previous
        value is restored and the failure returned with the reverted row.
        """
        if not row.has_fob:
            return ServiceResult(success=False, error=FOB_NOT_ISSUED_MESSAGE, data=row)
        previous = row.fob_returned
        with self._lock:
            row.fob_returned = value

        try:
            self._guard(*BOARD_ROLES)(self._contractor_repo.update)(
                row.id, {"fob_returned": value},
            )
        except SitePassError as exc:
            with self._lock:
                row.fob_returned = previous
            self._logger.warning(
                "Fob returned toggle reverted for %s: %s", row.id, exc,
                extra={"contractor_id": str(row.id)},
            )
            return ServiceResult(success=False, error=self._describe_failure(exc), data=row)

        self._audit("SET_FOB_RETURNED", row, {"fob_returned": value})
        return ServiceResult(success=True, data=row)

    def can_confirm_sign_out(self, row: Contractor) -> tuple[bool, Optional[str]]:
        """Whether the current user may confirm *row*'s sign-out, and why not."""
        if not row.is_on_site:
            return False, NOT_ON_SITE_MESSAGE
        if row.has_fob and not row.fob_returned:
            return False, FOB_NOT_RETURNED_MESSAGE
        if not row.signout_requested and self._session.role != UserRole.ADMIN:
            return False, SIGNOUT_NOT_REQUESTED_MESSAGE
        return True, None

    def confirm_sign_out(self, row: Contractor) -> ServiceResult[Contractor]:
        allowed, reason = self.can_confirm_sign_out(row)
        if not allowed:
            return ServiceResult(success=False, error=reason)

        user_id, email = self._actor()
        changes: dict[str, Any] = {
            "status": ContractorStatus.SIGNED_OUT.value,
            "signed_out_at": _utc_now().isoformat(),
            "signed_out_by": user_id,
            "signed_out_by_email": email,
        }
        return self._apply(
            row, changes, action="CONFIRM_SIGN_OUT",
            details={"fob_number": row.fob_number, "signout_requested": row.signout_requested},
        )

    def delete(self, row: Contractor) -> ServiceResult[None]:
        """Permanently delete *row*.  Admins only."""
        try:
            self._guard(UserRole.ADMIN)(self._contractor_repo.delete)(row.id)
        except AuthorizationError as exc:
            return ServiceResult(success=False, error=str(exc))
        except SitePassError as exc:
            return ServiceResult(success=False, error=self._describe_failure(exc))

        with self._lock:
            for bucket in (
                self._snapshot.awaiting,
                self._snapshot.on_site,
                self._snapshot.signed_out_recent,
            ):
                bucket[:] = [item for item in bucket if item is not row]
        self._audit("DELETE", row, {"name": row.full_name, "company": row.company})
        return ServiceResult(success=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _guard(self, *roles: UserRole) -> Callable[[Callable[..., T]], Callable[..., T]]:
        return require_role(self._session, *roles)

    def _actor(self) -> tuple[Optional[str], Optional[str]]:
        user = self._session.current_user
        if user is None:
            return None, None
        return user.id, user.email

    def _apply(
        self,
        row: Contractor,
        changes: dict[str, Any],
        action: str,
        details: Optional[dict[str, DetailValue]] = None,
    ) -> ServiceResult[Contractor]:
        """Send *changes* for a team leader action, then mirror them locally."""
        try:
            self._guard(*BOARD_ROLES)(self._contractor_repo.update)(row.id, changes)
        except AuthorizationError as exc:
            return ServiceResult(success=False, error=str(exc))
        except SitePassError as exc:
            return ServiceResult(success=False, error=self._describe_failure(exc))

        with self._lock:
            for key, value in changes.items():
                setattr(row, key, value)
        self._audit(action, row, details)
        return ServiceResult(success=True, data=row)

    def _audit(
        self,
        action: str,
        row: Contractor,
        details: Optional[dict[str, DetailValue]] = None,
    ) -> None:
        user_id, email = self._actor()
        log_audit_event(
            self._logger,
            action=action,
            entity_type=ENTITY_TYPE,
            entity_id=str(row.id),
            user_id=user_id or "anonymous",
            details=details,
            conn=self._db.sqlite if self._db is not None else None,
            actor_email=email or "",
            lock=self._db.write_lock if self._db is not None else None,
        )


def _as_aware(ts: Optional[datetime]) -> datetime:
    """Missing timestamps sort last; naive ones are UTC."""
    if ts is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    return as_utc(ts)
