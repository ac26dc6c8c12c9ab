"""Application Host Shell.

The top-level ``CTk`` window: navigation bar on top, the active view in
the middle and the status bar at the bottom.

All dependencies are injected via the constructor.  The shell contains
no business logic: access decisions come from the ``RouteRegistry``,
authentication from ``AuthService`` and change notification from
``RealtimeService``.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Optional

import customtkinter as ctk

from sitepass.auth import SessionManager
from sitepass.config import AppConfig
from sitepass.database import DatabaseManager
from sitepass.logger import StructuredLogger
from sitepass.models.auth_models import AuthErrorCode, AuthResult
from sitepass.services import ServiceContainer
from sitepass.ui.components.status_bar import StatusBar
from sitepass.ui.navbar import NavBar
from sitepass.ui.route_registry import ROUTE_LANDING, ROUTE_LOGIN, RouteRegistry
from sitepass.ui.theme import (
    APP_NAME,
    CONTENT_BG,
    MAIN_WINDOW_HEIGHT,
    MAIN_WINDOW_WIDTH,
    MIN_WINDOW_HEIGHT,
    MIN_WINDOW_WIDTH,
)

SESSION_EXPIRED_NOTICE: str = "Your session has expired. Please sign in again."


class AppShell(ctk.CTk):
    """Host Shell: the main application window.

    Lifecycle
    ---------
    1. :meth:`start` shows the landing view.
    2. Every navigation goes through ``RouteRegistry.resolve``; protected
       routes redirect to the login or landing view.  The previous view
       is destroyed so its timers and realtime listener go with it.
    3. On login the navbar is rebuilt, the realtime feed (re)started and
       the periodic token refresh scheduled; the user lands on the
       default route for their role.
    4. Logout clears the session, stops the feed and returns to landing.

    Parameters
    ----------
    config:
        Application configuration.
    db:
        Supabase + SQLite manager (status bar).
    session:
        Shared session holder.
    services:
        Fully-wired service container.
    registry:
        Route registry populated before :meth:`start`.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        config: AppConfig,
        db: DatabaseManager,
        session: SessionManager,
        services: ServiceContainer,
        registry: RouteRegistry,
        logger: StructuredLogger,
    ) -> None:
        super().__init__()

        self._config = config
        self._db = db
        self._session = session
        self._services = services
        self._registry = registry
        self._logger = logger

        self._active_view: Optional[ctk.CTkFrame] = None
        self._active_route_id: Optional[str] = None
        self._session_check_job: Optional[str] = None
        self._fullscreen: bool = False

        # Window defaults
        self.title(APP_NAME)
        ctk.set_appearance_mode("light")
        ctk.set_default_color_theme("blue")
        self.geometry(f"{MAIN_WINDOW_WIDTH}x{MAIN_WINDOW_HEIGHT}")
        self.minsize(MIN_WINDOW_WIDTH, MIN_WINDOW_HEIGHT)
        self.configure(fg_color=CONTENT_BG)

        # --- Layout ---
        self._navbar = NavBar(
            parent=self,
            registry=registry,
            session=session,
            on_navigate=self.navigate,
            on_logout=self._handle_logout,
            logger=logger,
        )
        self._navbar.pack(side="top", fill="x")

        self._status_bar = StatusBar(
            parent=self,
            db=db,
            logger=logger,
            realtime=services["realtime_service"],
        )
        self._status_bar.pack(side="bottom", fill="x")

        self._content_container = ctk.CTkFrame(self, fg_color=CONTENT_BG, corner_radius=0)
        self._content_container.pack(side="top", fill="both", expand=True)

        # --- Keyboard + window events ---
        self.bind("<F11>", lambda _event: self.toggle_fullscreen())
        self.bind("<Escape>", lambda _event: self.exit_fullscreen())
        self.protocol("WM_DELETE_WINDOW", self._on_close)

        self._session.add_listener(self._on_session_changed)

    def start(self) -> None:
        """Show the landing view.  Call after all routes are registered."""
        self.navigate(ROUTE_LANDING)

    # ==================================================================
    # Navigation
    # ==================================================================

    def navigate(self, route_id: str, notice: Optional[str] = None) -> None:
        """Show *route_id*, or wherever the registry redirects it."""
        try:
            decision = self._registry.resolve(route_id, self._session)
        except KeyError:
            self._logger.error("Cannot navigate to unregistered route: %s", route_id)
            return

        target = decision.route_id
        notice = notice or decision.notice

        if self._active_view is not None:
            self._active_view.destroy()
            self._active_view = None

        entry = self._registry.get_route(target)
        view = entry.factory(self._content_container)
        view.pack(fill="both", expand=True)
        self._active_view = view
        self._active_route_id = target

        set_notice = getattr(view, "set_notice", None)
        if notice and callable(set_notice):
            set_notice(notice)

        self._navbar.set_active(target)
        self._logger.info("Switched to route: %s", target)

    def handle_login_success(self) -> None:
        """Called by the login view once a session is established."""
        user = self._session.get_current_user()
        self._logger.info("Login successful: %s", user.email)
        route_id, notice = self._registry.default_route_for(user.role)
        self.navigate(route_id, notice)

    def record_refresh(self, when: datetime) -> None:
        """Board views report their last successful load here."""
        self._status_bar.set_last_refresh(when)

    # ==================================================================
    # Fullscreen
    # ==================================================================

    def toggle_fullscreen(self) -> None:
        self._fullscreen = not self._fullscreen
        self.attributes("-fullscreen", self._fullscreen)

    def exit_fullscreen(self) -> None:
        if self._fullscreen:
            self._fullscreen = False
            self.attributes("-fullscreen", False)

    # ==================================================================
    # Auth lifecycle
    # ==================================================================

    def _on_session_changed(self) -> None:
        """Session listener; may run on a worker thread."""
        self.after(0, self._apply_session_state)

    def _apply_session_state(self) -> None:
        """Bring navbar, realtime feed and token refresh in line with the session."""
        self._navbar.refresh()

        authenticated = self._session.is_authenticated
        realtime = self._services["realtime_service"]
        if authenticated:
            # Restart so the socket uses the current token.
            threading.Thread(target=realtime.restart, name="realtime-restart", daemon=True).start()
            if self._session_check_job is None:
                self._session_check_job = self.after(
                    self._config.SESSION_CHECK_INTERVAL_MS, self._check_session,
                )
        else:
            threading.Thread(target=realtime.stop, name="realtime-stop", daemon=True).start()
            self._cancel_session_check()

        # A role change may have removed access to the current view.
        if self._active_route_id is not None:
            decision = self._registry.resolve(self._active_route_id, self._session)
            if not decision.allowed:
                self.navigate(decision.route_id, decision.notice)

    def _handle_logout(self) -> None:
        """Delegate logout to AuthService and return to the landing view."""
        self._cancel_session_check()
        self._services["auth_service"].logout()
        self.navigate(ROUTE_LANDING)

    # ==================================================================
    # Session refresh
    # ==================================================================

    def _check_session(self) -> None:
        """Periodic check: refresh the access token on a background thread."""
        self._session_check_job = None
        if not self._session.is_authenticated:
            return

        auth_service = self._services["auth_service"]

        def _refresh_in_background() -> None:
            result = auth_service.refresh_session_token()
            self.after(0, self._handle_session_refresh_result, result)

        threading.Thread(
            target=_refresh_in_background,
            name="session-refresh",
            daemon=True,
        ).start()

    def _handle_session_refresh_result(self, result: AuthResult) -> None:
        """Auth errors force a logout; transient errors retry next cycle."""
        if not result.success and result.error_code == AuthErrorCode.SESSION_EXPIRED:
            self._logger.warning("Session expired. Forcing logout.")
            self._services["auth_service"].logout()
            self.navigate(ROUTE_LOGIN, SESSION_EXPIRED_NOTICE)
            return

        if self._session.is_authenticated and self._session_check_job is None:
            self._session_check_job = self.after(
                self._config.SESSION_CHECK_INTERVAL_MS, self._check_session,
            )

    def _cancel_session_check(self) -> None:
        if self._session_check_job is not None:
            self.after_cancel(self._session_check_job)
            self._session_check_job = None

    # ==================================================================
    # Window close
    # ==================================================================

    def _on_close(self) -> None:
        """Stop background work before destroying the window."""
        self._session.remove_listener(self._on_session_changed)
        self._cancel_session_check()
        if self._active_view is not None:
            self._active_view.destroy()
            self._active_view = None
        self._services["realtime_service"].stop()
        self.destroy()
