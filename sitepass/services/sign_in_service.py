"""
Sign-in Service.

Validates the kiosk sign-in form and records a pending sign-in.  A team
leader confirms it later from the dashboard and issues a fob.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from sitepass.errors import SitePassError
from sitepass.logger import StructuredLogger
from sitepass.models.contractor import Contractor, SignInForm
from sitepass.models.service_models import ServiceResult
from sitepass.repositories.contractor_repository import ContractorRepository
from sitepass.services.areas import build_area_list
from sitepass.services.base_service import BaseService

INCOMPLETE_FORM_MESSAGE: str = (
    "All fields are mandatory and at least one Area of work must be selected "
    "(or enter an Other area)."
)
SIGN_IN_RECORDED_MESSAGE: str = (
    "Signed-in request recorded. Please see a Team Leader to receive a visitor fob."
)


class SignInService(BaseService):
    """Records contractor and visitor sign-in requests."""

    def __init__(self, contractor_repo: ContractorRepository, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._contractor_repo = contractor_repo

    @staticmethod
    def build_form(
        first_name: str,
        surname: str,
        company: str,
        phone: str,
        selected_areas: Iterable[str],
        other_text: str = "",
    ) -> SignInForm:
        return SignInForm(
            first_name=first_name,
            surname=surname,
            company=company,
            phone=phone,
            areas=build_area_list(selected_areas, other_text),
        )

    def submit(
        self,
        first_name: str,
        surname: str,
        company: str,
        phone: str,
        selected_areas: Iterable[str],
        other_text: str = "",
    ) -> ServiceResult[Optional[Contractor]]:
        """Validate and insert.  Nothing is sent when the form is incomplete."""
        form = self.build_form(first_name, surname, company, phone, selected_areas, other_text)
        if not form.is_complete:
            return ServiceResult(success=False, error=INCOMPLETE_FORM_MESSAGE)

        try:
            row = self._contractor_repo.insert(form.to_insert_payload())
        except SitePassError as exc:
            return ServiceResult(success=False, error=self._describe_failure(exc))

        self._logger.info(
            "Sign-in recorded for %s (%s)",
            f"{form.first_name} {form.surname}",
            form.company,
            extra={"event": "SIGN_IN_REQUESTED", "areas": ", ".join(form.areas)},
        )
        return ServiceResult(success=True, data=row, message=SIGN_IN_RECORDED_MESSAGE)
