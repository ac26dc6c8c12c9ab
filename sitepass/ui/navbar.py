"""Navigation Bar Component.

Top bar with the brand, one link per route the current session may see
and a Logout / Team leader login action on the right.  Follows the
**Thin UI** rule: every action is dispatched through injected callbacks.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from sitepass.auth import SessionManager
from sitepass.logger import StructuredLogger
from sitepass.ui.route_registry import ROUTE_LOGIN, RouteRegistry
from sitepass.ui.theme import (
    APP_NAME,
    FONT_BRAND,
    FONT_NAV,
    FONT_NAV_ACTIVE,
    FONT_SMALL,
    NAV_ACTIVE,
    NAV_BG,
    NAV_HEIGHT,
    NAV_HOVER,
    NAV_TEXT,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
)

_LOGOUT_RED: str = "#f87171"


class _NavLink(ctk.CTkButton):
    """Clickable navigation entry for a single route."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        route_id: str,
        label: str,
        on_click: Callable[[str], None],
    ) -> None:
        self._route_id = route_id
        super().__init__(
            parent,
            text=label,
            font=FONT_NAV,
            text_color=NAV_TEXT,
            fg_color="transparent",
            hover_color=NAV_HOVER,
            height=34,
            width=40,
            corner_radius=6,
            command=lambda: on_click(self._route_id),
        )

    @property
    def route_id(self) -> str:
        return self._route_id

    def set_active(self, active: bool) -> None:
        if active:
            self.configure(fg_color=NAV_ACTIVE, font=FONT_NAV_ACTIVE)
        else:
            self.configure(fg_color="transparent", font=FONT_NAV)


class NavBar(ctk.CTkFrame):
    """Top navigation bar of the shell.

    Parameters
    ----------
    parent:
        The AppShell root.
    registry:
        Supplies the routes visible to the current session.
    session:
        Read for the signed-in user's email.
    on_navigate:
        Called with a ``route_id`` when a link is clicked.
    on_logout:
        Called when the Logout button is clicked.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTk,
        registry: RouteRegistry,
        session: SessionManager,
        on_navigate: Callable[[str], None],
        on_logout: Callable[[], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, height=NAV_HEIGHT, fg_color=NAV_BG, corner_radius=0)
        self.pack_propagate(False)

        self._registry = registry
        self._session = session
        self._on_navigate = on_navigate
        self._on_logout = on_logout
        self._logger = logger

        self._links: dict[str, _NavLink] = {}
        self._active_route_id: Optional[str] = None

        self._build_ui()
        self.refresh()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        """Rebuild the links for the current session (login, logout, role change)."""
        for widget in self._links_frame.winfo_children():
            widget.destroy()
        for widget in self._account_frame.winfo_children():
            widget.destroy()
        self._links.clear()

        for entry in self._registry.visible_routes(self._session):
            link = _NavLink(self._links_frame, entry.route_id, entry.label, self._on_navigate)
            link.pack(side="left", padx=2)
            self._links[entry.route_id] = link

        user = self._session.current_user
        if user is not None:
            ctk.CTkLabel(
                self._account_frame,
                text=user.email,
                font=FONT_SMALL,
                text_color=NAV_TEXT,
            ).pack(side="left", padx=(0, PADDING_SM))
            ctk.CTkButton(
                self._account_frame,
                text="Logout",
                font=FONT_NAV,
                fg_color="transparent",
                hover_color=NAV_HOVER,
                text_color=_LOGOUT_RED,
                height=34,
                width=80,
                corner_radius=6,
                command=self._on_logout,
            ).pack(side="left")
        else:
            login = _NavLink(self._account_frame, ROUTE_LOGIN, "Team leader login", self._on_navigate)
            login.pack(side="left")
            self._links[ROUTE_LOGIN] = login

        if self._active_route_id is not None:
            self.set_active(self._active_route_id)

    def set_active(self, route_id: str) -> None:
        """Highlight *route_id* and un-highlight every other link."""
        for link_id, link in self._links.items():
            link.set_active(link_id == route_id)
        self._active_route_id = route_id

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        ctk.CTkLabel(
            self,
            text=APP_NAME,
            font=FONT_BRAND,
            text_color=TEXT_LIGHT,
        ).pack(side="left", padx=(PADDING_MD, PADDING_MD))

        self._links_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._links_frame.pack(side="left", fill="y", pady=PADDING_SM)

        self._account_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._account_frame.pack(side="right", fill="y", padx=PADDING_MD, pady=PADDING_SM)
