"""
Sign-out Service.

A contractor asks to leave by giving their first name and phone number.
The backend procedure flags the matching active sign-in; a team leader
then collects the fob and confirms the sign-out.
"""

from __future__ import annotations

from sitepass.errors import SitePassError
from sitepass.logger import StructuredLogger
from sitepass.models.service_models import ServiceResult
from sitepass.repositories.contractor_repository import ContractorRepository
from sitepass.services.base_service import BaseService

MISSING_DETAILS_MESSAGE: str = "Please enter your first name and phone number."
NOT_FOUND_MESSAGE: str = "No active sign-in found for those details."
REQUESTED_MESSAGE: str = "Sign-out request submitted. A Team Leader will confirm shortly."


class SignOutService(BaseService):
    """Submits sign-out requests."""

    def __init__(self, contractor_repo: ContractorRepository, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._contractor_repo = contractor_repo

    def request(self, first_name: str, phone: str) -> ServiceResult[bool]:
        """Ask for sign-out.

        ``data`` is ``True`` when an active sign-in was flagged and
        ``False`` when none matched; both are successful calls.
        """
        first_name = (first_name or "").strip()
        phone = (phone or "").strip()
        if not first_name or not phone:
            return ServiceResult(success=False, error=MISSING_DETAILS_MESSAGE)

        try:
            matched = self._contractor_repo.request_signout(first_name, phone)
        except SitePassError as exc:
            return ServiceResult(success=False, error=self._describe_failure(exc))

        if not matched:
            self._logger.info(
                "Sign-out request matched no active sign-in",
                extra={"event": "SIGN_OUT_NOT_FOUND"},
            )
            return ServiceResult(success=True, data=False, message=NOT_FOUND_MESSAGE)

        self._logger.info(
            "Sign-out requested by %s", first_name,
            extra={"event": "SIGN_OUT_REQUESTED"},
        )
        return ServiceResult(success=True, data=True, message=REQUESTED_MESSAGE)
