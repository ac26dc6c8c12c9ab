"""Team Login View: team leader authentication screen.

Sign In / Sign Up tabs plus an inline "forgot password" form.  All
authentication goes through ``AuthService`` on a background thread.

**Thin UI Rule**: This module contains ZERO business logic.  It
gathers inputs, delegates to ``AuthService``, and displays results.
"""

from __future__ import annotations

import threading
import tkinter as tk
from typing import Callable, Optional

import customtkinter as ctk

from sitepass.logger import StructuredLogger
from sitepass.models.auth_models import AuthErrorCode, AuthResult
from sitepass.services.auth_service import AuthService
from sitepass.ui.route_registry import ROUTE_RESET_PASSWORD
from sitepass.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CARD_BG,
    CARD_BORDER,
    CONTENT_BG,
    DISABLED_BG,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_LABEL,
    FONT_SMALL,
    INPUT_BORDER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_CARD_WIDTH: int = 400
_INPUT_HEIGHT: int = 42
_BUTTON_HEIGHT: int = 46

_MODE_SIGN_IN: str = "signin"
_MODE_SIGN_UP: str = "signup"


class TeamLoginView(ctk.CTkFrame):
    """Centred login card with Sign in / Sign up tabs.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    auth_service:
        Centralised authentication service.
    on_login_success:
        Called on the main thread once a session is established.
    on_navigate:
        Used by the "I have a recovery code" link.
    logger:
        Structured JSON logger.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        auth_service: AuthService,
        on_login_success: Callable[[], None],
        on_navigate: Callable[[str], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)

        self._auth_service = auth_service
        self._on_login_success = on_login_success
        self._on_navigate = on_navigate
        self._logger = logger

        self._mode: str = _MODE_SIGN_IN

        self._title_label: Optional[ctk.CTkLabel] = None
        self._email_entry: Optional[ctk.CTkEntry] = None
        self._password_entry: Optional[ctk.CTkEntry] = None
        self._submit_button: Optional[ctk.CTkButton] = None
        self._error_label: Optional[ctk.CTkLabel] = None
        self._notice_label: Optional[ctk.CTkLabel] = None

        # Rate-limit countdown
        self._countdown_job: Optional[str] = None

        # Forgot password widgets
        self._forgot_frame: Optional[ctk.CTkFrame] = None
        self._forgot_email_entry: Optional[ctk.CTkEntry] = None
        self._forgot_button: Optional[ctk.CTkButton] = None
        self._forgot_message_label: Optional[ctk.CTkLabel] = None

        self._tab_buttons: dict[str, ctk.CTkButton] = {}

        self._build_ui()

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=2)
        self.grid_columnconfigure(0, weight=1)

        card = ctk.CTkFrame(
            self,
            width=_CARD_WIDTH,
            fg_color=CARD_BG,
            corner_radius=16,
            border_width=1,
            border_color=CARD_BORDER,
        )
        card.grid(row=1, column=0)

        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=36, pady=28)

        self._title_label = ctk.CTkLabel(
            inner,
            text="Team leader login",
            font=FONT_HEADING,
            text_color=TEXT_PRIMARY,
        )
        self._title_label.pack(pady=(0, PADDING_MD))

        self._notice_label = ctk.CTkLabel(
            inner, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY, wraplength=_CARD_WIDTH,
        )

        # -- Tab bar --
        tab_bar = ctk.CTkFrame(inner, fg_color="transparent")
        tab_bar.pack(fill="x", pady=(0, PADDING_MD))
        tab_bar.grid_columnconfigure((0, 1), weight=1, uniform="tabs")
        for col, (mode, label) in enumerate(((_MODE_SIGN_IN, "Sign in"), (_MODE_SIGN_UP, "Sign up"))):
            button = ctk.CTkButton(
                tab_bar,
                text=label,
                font=FONT_BUTTON,
                height=34,
                corner_radius=6,
                command=lambda m=mode: self._switch_mode(m),
            )
            button.grid(row=0, column=col, sticky="ew", padx=(0 if col == 0 else 4, 0))
            self._tab_buttons[mode] = button

        # -- Fields --
        ctk.CTkLabel(inner, text="Email", font=FONT_LABEL, text_color=TEXT_SECONDARY, anchor="w").pack(fill="x")
        self._email_entry = ctk.CTkEntry(
            inner, width=_CARD_WIDTH - 72, height=_INPUT_HEIGHT, font=FONT_BODY, border_color=INPUT_BORDER,
        )
        self._email_entry.pack(fill="x", pady=(2, PADDING_SM))

        ctk.CTkLabel(inner, text="Password", font=FONT_LABEL, text_color=TEXT_SECONDARY, anchor="w").pack(fill="x")
        self._password_entry = ctk.CTkEntry(
            inner, height=_INPUT_HEIGHT, font=FONT_BODY, show="•", border_color=INPUT_BORDER,
        )
        self._password_entry.pack(fill="x", pady=(2, PADDING_SM))
        self._password_entry.bind("<Return>", self._on_enter_key)
        self._email_entry.bind("<Return>", self._on_enter_key)

        self._error_label = ctk.CTkLabel(
            inner, text="", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=_CARD_WIDTH - 72, justify="left",
        )

        self._submit_button = ctk.CTkButton(
            inner,
            text="Sign in",
            font=FONT_BUTTON,
            height=_BUTTON_HEIGHT,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._handle_submit,
        )
        self._submit_button.pack(fill="x", pady=(PADDING_SM, 0))

        # -- Forgot password --
        links = ctk.CTkFrame(inner, fg_color="transparent")
        links.pack(fill="x", pady=(PADDING_SM, 0))
        ctk.CTkButton(
            links,
            text="Forgot password?",
            font=FONT_SMALL,
            fg_color="transparent",
            hover=False,
            text_color=TEXT_SECONDARY,
            width=10,
            command=self._toggle_forgot_password,
        ).pack(side="left")
        ctk.CTkButton(
            links,
            text="I have a recovery code",
            font=FONT_SMALL,
            fg_color="transparent",
            hover=False,
            text_color=TEXT_SECONDARY,
            width=10,
            command=lambda: self._on_navigate(ROUTE_RESET_PASSWORD),
        ).pack(side="right")

        self._forgot_frame = ctk.CTkFrame(inner, fg_color="transparent")
        self._forgot_email_entry = ctk.CTkEntry(
            self._forgot_frame,
            height=36,
            font=FONT_BODY,
            placeholder_text="Email for the recovery code",
            border_color=INPUT_BORDER,
        )
        self._forgot_email_entry.pack(fill="x", pady=(0, 4))
        self._forgot_button = ctk.CTkButton(
            self._forgot_frame,
            text="Send recovery email",
            font=FONT_BUTTON,
            height=34,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            command=self._handle_forgot_password,
        )
        self._forgot_button.pack(fill="x")
        self._forgot_message_label = ctk.CTkLabel(
            self._forgot_frame, text="", font=FONT_SMALL, wraplength=_CARD_WIDTH - 72, justify="left",
        )
        self._forgot_message_label.pack(fill="x")

        self._switch_mode(_MODE_SIGN_IN)

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------

    def _switch_mode(self, mode: str) -> None:
        self._mode = mode
        for tab_mode, button in self._tab_buttons.items():
            if tab_mode == mode:
                button.configure(fg_color=ACCENT_PRIMARY, text_color=TEXT_LIGHT, hover_color=ACCENT_HOVER)
            else:
                button.configure(fg_color=DISABLED_BG, text_color=TEXT_PRIMARY, hover_color=DISABLED_BG)
        if self._title_label is not None:
            self._title_label.configure(
                text="Team leader login" if mode == _MODE_SIGN_IN else "Team leader sign up",
            )
        self._clear_error()
        self._set_loading(False)

    def set_notice(self, message: Optional[str]) -> None:
        """Explain why the user was sent here (e.g. protected page)."""
        if self._notice_label is None:
            return
        if message:
            self._notice_label.configure(text=message)
            self._notice_label.pack(pady=(0, PADDING_SM), after=self._title_label)
        else:
            self._notice_label.pack_forget()

    # ------------------------------------------------------------------
    # Event Handlers: Sign in / Sign up
    # ------------------------------------------------------------------

    def _on_enter_key(self, event: tk.Event) -> None:
        self._handle_submit()

    def _handle_submit(self) -> None:
        """Gather inputs, check rate limit, start background auth."""
        email = self._email_entry.get().strip()
        password = self._password_entry.get()

        if not email or not password:
            self._show_error("Please enter email and password.")
            return

        if self._mode == _MODE_SIGN_IN:
            is_locked, remaining = self._auth_service.check_rate_limit(
                self._auth_service.normalize_email(email),
            )
            if is_locked:
                self._show_error(f"Too many failed attempts. Please wait {remaining} seconds.")
                self._start_countdown(remaining)
                return

        self._set_loading(True)
        self._clear_error()
        threading.Thread(
            target=self._authenticate,
            args=(self._mode, email, password),
            daemon=True,
        ).start()

    def _authenticate(self, mode: str, email: str, password: str) -> None:
        """Background thread: delegate to AuthService.login() / register().

        All UI mutations are dispatched back via ``self.after(0, ...)``.
        """
        try:
            if mode == _MODE_SIGN_IN:
                result = self._auth_service.login(email, password)
            else:
                result = self._auth_service.register(email, password)
            self.after(0, lambda: self._show_auth_result(result))
        except Exception as exc:
            self._logger.error("Authentication flow raised", exc_info=True)
            error_msg = str(exc)
            self.after(0, lambda msg=error_msg: self._show_error(f"Login failed: {msg}"))
        finally:
            self.after(0, lambda: self._set_loading(False))

    def _show_auth_result(self, result: AuthResult) -> None:
        if not result.success:
            self._show_error(result.error_message or "Login failed.")
            if result.error_code == AuthErrorCode.RATE_LIMITED:
                _, remaining = self._auth_service.check_rate_limit(
                    self._auth_service.normalize_email(self._email_entry.get()),
                )
                self._start_countdown(remaining)
            return

        self._password_entry.delete(0, "end")
        if result.user_id is None:
            # Sign-up awaiting email confirmation.
            self._switch_mode(_MODE_SIGN_IN)
            self._show_error(result.message or "", colour=SUCCESS_TEXT)
            return
        self._on_login_success()

    # ------------------------------------------------------------------
    # Event Handlers: Forgot password
    # ------------------------------------------------------------------

    def _toggle_forgot_password(self) -> None:
        if self._forgot_frame.winfo_manager():
            self._forgot_frame.pack_forget()
        else:
            self._forgot_frame.pack(fill="x", pady=(PADDING_SM, 0))
            self._forgot_message_label.configure(text="")
            if not self._forgot_email_entry.get():
                self._forgot_email_entry.insert(0, self._email_entry.get().strip())

    def _handle_forgot_password(self) -> None:
        email = self._forgot_email_entry.get().strip()
        if not email:
            self._forgot_message_label.configure(
                text="Please enter your email address.",
                text_color=ERROR_TEXT,
            )
            return

        self._forgot_button.configure(text="Sending...", state="disabled")

        def do_reset() -> None:
            result = self._auth_service.request_password_reset(email)

            def show_reset_result() -> None:
                colour = SUCCESS_TEXT if result.success else ERROR_TEXT
                self._forgot_message_label.configure(
                    text=result.message if result.success else (result.error_message or ""),
                    text_color=colour,
                )
                self._forgot_button.configure(text="Send recovery email", state="normal")

            self.after(0, show_reset_result)

        threading.Thread(target=do_reset, daemon=True).start()

    # ------------------------------------------------------------------
    # Rate-limit countdown
    # ------------------------------------------------------------------

    def _start_countdown(self, seconds: int) -> None:
        """Disable the submit button until the lockout expires."""
        if self._countdown_job:
            self.after_cancel(self._countdown_job)

        def tick(remaining: int) -> None:
            if remaining <= 0:
                self._countdown_job = None
                self._clear_error()
                self._set_loading(False)
                return
            self._submit_button.configure(text=f"Sign in ({remaining}s)", state="disabled")
            self._countdown_job = self.after(1000, lambda: tick(remaining - 1))

        tick(seconds)

    def destroy(self) -> None:
        if self._countdown_job is not None:
            self.after_cancel(self._countdown_job)
            self._countdown_job = None
        super().destroy()

    # ------------------------------------------------------------------
    # UI Helper Methods
    # ------------------------------------------------------------------

    def _show_error(self, message: str, colour: str = ERROR_TEXT) -> None:
        if self._error_label is not None and message:
            self._error_label.configure(text=message, text_color=colour)
            self._error_label.pack(fill="x", pady=(4, 0), before=self._submit_button)

    def _clear_error(self) -> None:
        if self._error_label is not None:
            self._error_label.configure(text="")
            self._error_label.pack_forget()

    def _set_loading(self, loading: bool) -> None:
        """Toggle the submit button; a running countdown keeps it disabled."""
        if self._submit_button is None:
            return
        if loading:
            self._submit_button.configure(text="Please wait...", state="disabled")
            return
        if self._countdown_job is not None:
            return
        self._submit_button.configure(
            text="Sign in" if self._mode == _MODE_SIGN_IN else "Create account",
            state="normal",
        )
