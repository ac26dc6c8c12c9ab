"""
Business Logic Services Package.

Services depend on the Repository layer for data access and on the
``SessionManager`` for user context.

The ``create_services()`` factory wires every repository and service
together, returning a typed dict that the views consume without knowing
the internal dependency graph.
"""

from __future__ import annotations

from typing import TypedDict

from sitepass.auth import SessionManager
from sitepass.config import AppConfig
from sitepass.database import DatabaseManager
from sitepass.logger import get_logger
from sitepass.repositories.contractor_repository import ContractorRepository
from sitepass.repositories.profile_repository import ProfileRepository
from sitepass.services.app_settings_service import AppSettingsService
from sitepass.services.auth_service import AuthService
from sitepass.services.contractor_board import ContractorBoardService
from sitepass.services.realtime_service import RealtimeService
from sitepass.services.sign_in_service import SignInService
from sitepass.services.sign_out_service import SignOutService


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    # --- Public kiosk ---
    sign_in_service: SignInService
    sign_out_service: SignOutService

    # --- Team leaders ---
    auth_service: AuthService
    board_service: ContractorBoardService

    # --- Infrastructure ---
    app_settings_service: AppSettingsService
    realtime_service: RealtimeService


def create_services(
    db: DatabaseManager,
    config: AppConfig,
    session: SessionManager,
) -> ServiceContainer:
    """Wire all repositories and services together.

    The single composition root for the service layer; ``main.py`` calls
    it once at startup.
    """
    logger = get_logger("services")

    # ------------------------------------------------------------------
    # 1. Repositories
    # ------------------------------------------------------------------
    contractor_repo = ContractorRepository(
        db=db,
        logger=logger,
        table=config.CONTRACTORS_TABLE,
        signout_rpc=config.SIGNOUT_RPC,
    )
    profile_repo = ProfileRepository(db=db, logger=logger, table=config.PROFILES_TABLE)

    # ------------------------------------------------------------------
    # 2. Kiosk and team leader services
    # ------------------------------------------------------------------
    sign_in_service = SignInService(contractor_repo=contractor_repo, logger=logger)
    sign_out_service = SignOutService(contractor_repo=contractor_repo, logger=logger)

    auth_service = AuthService(
        db=db,
        session=session,
        logger=logger,
        profile_repo=profile_repo,
        password_min_length=config.PASSWORD_MIN_LENGTH,
        max_failed_attempts=config.LOGIN_MAX_ATTEMPTS,
        lockout_seconds=config.LOGIN_LOCKOUT_SECONDS,
    )
    board_service = ContractorBoardService(
        contractor_repo=contractor_repo,
        session=session,
        logger=logger,
        db=db,
        row_limit=config.ROW_LIMIT,
        signed_out_window_days=config.SIGNED_OUT_WINDOW_DAYS,
    )

    # ------------------------------------------------------------------
    # 3. Infrastructure
    # ------------------------------------------------------------------
    app_settings_service = AppSettingsService(db=db, logger=logger)
    realtime_service = RealtimeService(
        db=db,
        session=session,
        logger=get_logger("realtime"),
        table=config.CONTRACTORS_TABLE,
        channel_name=config.REALTIME_CHANNEL,
    )

    return ServiceContainer(
        sign_in_service=sign_in_service,
        sign_out_service=sign_out_service,
        auth_service=auth_service,
        board_service=board_service,
        app_settings_service=app_settings_service,
        realtime_service=realtime_service,
    )
