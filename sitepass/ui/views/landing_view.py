"""Landing View: kiosk home screen with the contractor and team leader actions."""

from __future__ import annotations

from typing import Callable, NamedTuple, Optional

import customtkinter as ctk

from sitepass.ui.route_registry import ROUTE_LOGIN, ROUTE_SIGN_IN, ROUTE_SIGN_OUT
from sitepass.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    APP_TAGLINE,
    CONFIRM_GREEN,
    CONFIRM_GREEN_HOVER,
    CONTENT_BG,
    FONT_BODY,
    FONT_HERO,
    FONT_KIOSK_BUTTON,
    LOGIN_BLUE,
    LOGIN_BLUE_HOVER,
    PADDING_LG,
    PADDING_MD,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
    WARNING_TEXT,
)

_BUTTON_WIDTH: int = 280
_BUTTON_HEIGHT: int = 96


class LandingAction(NamedTuple):
    label: str
    route_id: str
    fg_color: str
    hover_color: str


LANDING_ACTIONS: tuple[LandingAction, ...] = (
    LandingAction("Sign In", ROUTE_SIGN_IN, CONFIRM_GREEN, CONFIRM_GREEN_HOVER),
    LandingAction("Sign Out", ROUTE_SIGN_OUT, ACCENT_PRIMARY, ACCENT_HOVER),
    LandingAction("Team Leader Login", ROUTE_LOGIN, LOGIN_BLUE, LOGIN_BLUE_HOVER),
)


class LandingView(ctk.CTkFrame):
    """Welcome screen with one large button per :data:`LANDING_ACTIONS` entry.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    on_navigate:
        Called with the target ``route_id``.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        on_navigate: Callable[[str], None],
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._on_navigate = on_navigate
        self._notice_label: Optional[ctk.CTkLabel] = None
        self._build_ui()

    def _build_ui(self) -> None:
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)
        self.grid_columnconfigure(0, weight=1)

        inner = ctk.CTkFrame(self, fg_color="transparent")
        inner.grid(row=1, column=0)

        ctk.CTkLabel(
            inner,
            text=APP_TAGLINE,
            font=FONT_HERO,
            text_color=TEXT_PRIMARY,
        ).pack(pady=(0, PADDING_MD))

        ctk.CTkLabel(
            inner,
            text="Contractors and visitors: sign in when you arrive and sign out when you leave.",
            font=FONT_BODY,
            text_color=TEXT_SECONDARY,
        ).pack(pady=(0, PADDING_LG))

        buttons = ctk.CTkFrame(inner, fg_color="transparent")
        buttons.pack()

        for action in LANDING_ACTIONS:
            ctk.CTkButton(
                buttons,
                text=action.label,
                font=FONT_KIOSK_BUTTON,
                width=_BUTTON_WIDTH,
                height=_BUTTON_HEIGHT,
                fg_color=action.fg_color,
                hover_color=action.hover_color,
                text_color=TEXT_LIGHT,
                command=lambda route_id=action.route_id: self._on_navigate(route_id),
            ).pack(side="left", padx=PADDING_MD)

        self._notice_label = ctk.CTkLabel(
            inner,
            text="",
            font=FONT_BODY,
            text_color=WARNING_TEXT,
        )

    def set_notice(self, message: Optional[str]) -> None:
        """Show or hide the notice line (e.g. account awaiting approval)."""
        if self._notice_label is None:
            return
        if message:
            self._notice_label.configure(text=message)
            self._notice_label.pack(pady=(PADDING_LG, 0))
        else:
            self._notice_label.configure(text="")
            self._notice_label.pack_forget()
