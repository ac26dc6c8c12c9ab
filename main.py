"""
SitePass Kiosk Application Entry Point.

Bootstraps the dependency graph via constructor injection, initialises
the local SQLite schema, registers the routes and launches the
CustomTkinter window.  Every subsystem is wired here; there are no
module-level globals.

Usage::

    python main.py
"""

from __future__ import annotations

import atexit
import sys
import traceback
from pathlib import Path

from sitepass.auth import SessionManager
from sitepass.config import get_config
from sitepass.database import DatabaseManager
from sitepass.logger import StructuredLogger, get_logger
from sitepass.models.enums import BOARD_ROLES, SCREEN_ROLES
from sitepass.schema import initialize_schema
from sitepass.services import create_services
from sitepass.ui.app_shell import AppShell
from sitepass.ui.route_registry import (
    ROUTE_DASHBOARD,
    ROUTE_LANDING,
    ROUTE_LOGIN,
    ROUTE_RESET_PASSWORD,
    ROUTE_SCREEN,
    ROUTE_SIGN_IN,
    ROUTE_SIGN_OUT,
    RouteRegistry,
)
from sitepass.ui.views.dashboard_view import DashboardView
from sitepass.ui.views.landing_view import LandingView
from sitepass.ui.views.reset_password_view import ResetPasswordView
from sitepass.ui.views.screen_display_view import ScreenDisplayView
from sitepass.ui.views.sign_in_view import SignInView
from sitepass.ui.views.sign_out_view import SignOutView
from sitepass.ui.views.team_login_view import TeamLoginView


def main() -> None:
    """Application entry point: wire dependencies and launch the GUI."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting SitePass...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Database Manager (Supabase backend + local SQLite preferences)
    # ------------------------------------------------------------------
    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        sqlite_path=Path(config.LOCAL_DB_PATH),
        logger=StructuredLogger(name="database"),
    )

    # Second safety net for unclean exits; close() is idempotent.
    atexit.register(db.close)

    # ------------------------------------------------------------------
    # 3. SQLite Schema Initialization (idempotent)
    # ------------------------------------------------------------------
    initialize_schema(db.sqlite, StructuredLogger(name="schema"))

    # ------------------------------------------------------------------
    # 4. Session Manager
    # ------------------------------------------------------------------
    session = SessionManager()

    # ------------------------------------------------------------------
    # 5. Service Container (repositories + services, single composition root)
    # ------------------------------------------------------------------
    services = create_services(db=db, config=config, session=session)

    # ------------------------------------------------------------------
    # 6. Host shell and route registry
    # ------------------------------------------------------------------
    registry = RouteRegistry(logger=get_logger("routes"))
    app = AppShell(
        config=config,
        db=db,
        session=session,
        services=services,
        registry=registry,
        logger=get_logger("ui"),
    )

    # ------------------------------------------------------------------
    # 7. Routes
    # ------------------------------------------------------------------
    # Public kiosk pages
    registry.register(
        route_id=ROUTE_LANDING,
        label="Home",
        factory=lambda parent: LandingView(parent=parent, on_navigate=app.navigate),
    )
    registry.register(
        route_id=ROUTE_SIGN_IN,
        label="Sign In",
        factory=lambda parent: SignInView(
            parent=parent,
            sign_in_service=services["sign_in_service"],
            logger=get_logger("sign_in"),
        ),
    )
    registry.register(
        route_id=ROUTE_SIGN_OUT,
        label="Sign Out",
        factory=lambda parent: SignOutView(
            parent=parent,
            sign_out_service=services["sign_out_service"],
            logger=get_logger("sign_out"),
        ),
    )

    # Authentication pages (reached from the navbar link, not listed)
    registry.register(
        route_id=ROUTE_LOGIN,
        label="Team leader login",
        factory=lambda parent: TeamLoginView(
            parent=parent,
            auth_service=services["auth_service"],
            on_login_success=app.handle_login_success,
            on_navigate=app.navigate,
            logger=get_logger("login"),
        ),
        show_in_nav=False,
    )
    registry.register(
        route_id=ROUTE_RESET_PASSWORD,
        label="Reset password",
        factory=lambda parent: ResetPasswordView(
            parent=parent,
            auth_service=services["auth_service"],
            session=session,
            logger=get_logger("reset_password"),
        ),
        show_in_nav=False,
    )

    # Role-gated boards
    registry.register(
        route_id=ROUTE_DASHBOARD,
        label="Team Leader Dashboard",
        factory=lambda parent: DashboardView(
            parent=parent,
            board_service=services["board_service"],
            realtime=services["realtime_service"],
            app_settings=services["app_settings_service"],
            session=session,
            logger=get_logger("dashboard"),
            debounce_ms=config.REALTIME_DEBOUNCE_MS,
            poll_interval_ms=config.BOARD_POLL_INTERVAL_MS,
            on_loaded=app.record_refresh,
        ),
        required_roles=BOARD_ROLES,
    )
    registry.register(
        route_id=ROUTE_SCREEN,
        label="Screen",
        factory=lambda parent: ScreenDisplayView(
            parent=parent,
            board_service=services["board_service"],
            realtime=services["realtime_service"],
            app_settings=services["app_settings_service"],
            logger=get_logger("screen"),
            on_toggle_fullscreen=app.toggle_fullscreen,
            scroll_interval_ms=config.AUTO_SCROLL_INTERVAL_MS,
            scroll_step=config.AUTO_SCROLL_STEP,
            scroll_pause_ticks=config.AUTO_SCROLL_PAUSE_TICKS,
            debounce_ms=config.REALTIME_DEBOUNCE_MS,
            poll_interval_ms=config.BOARD_POLL_INTERVAL_MS,
            on_loaded=app.record_refresh,
        ),
        required_roles=SCREEN_ROLES,
    )

    # ------------------------------------------------------------------
    # 8. Launch the GUI (blocks until window closes)
    # ------------------------------------------------------------------
    logger.info("Launching GUI...")
    app.start()
    try:
        app.mainloop()
    finally:
        # Primary shutdown path; the atexit hook covers harder crashes.
        db.close()
        logger.info("SitePass shut down.")


def _show_fatal_error(exc: BaseException) -> None:
    """Display a fatal-error dialog so kiosk operators get feedback.

    Uses ``tkinter.messagebox`` (stdlib) rather than CustomTkinter so
    the dialog works even when CTk initialisation itself failed.
    """
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    try:
        import tkinter
        from tkinter import messagebox

        # messagebox needs a (hidden) root window.
        root = tkinter.Tk()
        root.withdraw()
        messagebox.showerror(
            title="ContractorECR: Fatal Error",
            message=(
                "The application encountered an unexpected error and "
                "cannot continue.\n\n"
                f"{type(exc).__name__}: {exc}"
            ),
            detail=detail,
        )
        root.destroy()
    except Exception:
        # Headless or missing Tcl/Tk: fall back to stderr.
        sys.stderr.write(
            f"FATAL: {type(exc).__name__}: {exc}\n{detail}"
        )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        _show_fatal_error(exc)
        sys.exit(1)
