"""Reset Password View.

A signed-in user sets a new password directly.  Without a session the
view first asks for the email address and the recovery code from the
reset email; a valid code signs the user in for the update.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

import customtkinter as ctk

from sitepass.auth import SessionManager
from sitepass.logger import StructuredLogger
from sitepass.models.auth_models import AuthResult
from sitepass.services.auth_service import AuthService
from sitepass.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CARD_BG,
    CARD_BORDER,
    CONTENT_BG,
    CORNER_RADIUS,
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

_CARD_WIDTH: int = 440


class ResetPasswordView(ctk.CTkFrame):
    """Recovery code step (when signed out) followed by the new password form.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    auth_service:
        Verifies recovery codes and updates the password.
    session:
        Decides whether the recovery step is needed.
    logger:
        Structured JSON logger.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        auth_service: AuthService,
        session: SessionManager,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._auth_service = auth_service
        self._session = session
        self._logger = logger

        self._recovery_frame: Optional[ctk.CTkFrame] = None
        self._email_entry: Optional[ctk.CTkEntry] = None
        self._code_entry: Optional[ctk.CTkEntry] = None
        self._verify_button: Optional[ctk.CTkButton] = None

        self._password_frame: Optional[ctk.CTkFrame] = None
        self._password_entry: Optional[ctk.CTkEntry] = None
        self._confirm_entry: Optional[ctk.CTkEntry] = None
        self._update_button: Optional[ctk.CTkButton] = None

        self._message_label: Optional[ctk.CTkLabel] = None

        self._build_ui()
        self._show_step()

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
            corner_radius=CORNER_RADIUS,
            border_width=1,
            border_color=CARD_BORDER,
        )
        card.grid(row=1, column=0)

        self._inner = ctk.CTkFrame(card, fg_color="transparent")
        self._inner.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_LG)

        ctk.CTkLabel(
            self._inner,
            text="Reset password",
            font=FONT_HEADING,
            text_color=TEXT_PRIMARY,
            anchor="w",
        ).pack(fill="x", pady=(0, PADDING_MD))

        # -- Step 1: recovery code --
        self._recovery_frame = ctk.CTkFrame(self._inner, fg_color="transparent")
        ctk.CTkLabel(
            self._recovery_frame,
            text="Enter your email and the recovery code from the reset email.",
            font=FONT_SMALL,
            text_color=TEXT_SECONDARY,
            anchor="w",
            wraplength=_CARD_WIDTH,
            justify="left",
        ).pack(fill="x", pady=(0, PADDING_SM))
        self._email_entry = self._labelled_entry(self._recovery_frame, "Email")
        self._code_entry = self._labelled_entry(self._recovery_frame, "Recovery code")
        self._verify_button = self._action_button(self._recovery_frame, "Verify code", self._handle_verify)

        # -- Step 2: new password --
        self._password_frame = ctk.CTkFrame(self._inner, fg_color="transparent")
        self._password_entry = self._labelled_entry(self._password_frame, "New password", secret=True)
        self._confirm_entry = self._labelled_entry(self._password_frame, "Confirm new password", secret=True)
        self._update_button = self._action_button(self._password_frame, "Update password", self._handle_update)

        self._message_label = ctk.CTkLabel(
            self._inner, text="", font=FONT_BODY, anchor="w", wraplength=_CARD_WIDTH, justify="left",
        )

    @staticmethod
    def _labelled_entry(parent: ctk.CTkFrame, label: str, secret: bool = False) -> ctk.CTkEntry:
        ctk.CTkLabel(parent, text=label, font=FONT_LABEL, text_color=TEXT_SECONDARY, anchor="w").pack(fill="x")
        entry = ctk.CTkEntry(
            parent,
            width=_CARD_WIDTH,
            height=40,
            font=FONT_BODY,
            show="•" if secret else "",
            border_color=INPUT_BORDER,
        )
        entry.pack(fill="x", pady=(2, PADDING_SM))
        return entry

    @staticmethod
    def _action_button(parent: ctk.CTkFrame, text: str, command: Callable[[], None]) -> ctk.CTkButton:
        button = ctk.CTkButton(
            parent,
            text=text,
            font=FONT_BUTTON,
            height=44,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=command,
        )
        button.pack(fill="x", pady=(PADDING_SM, 0))
        return button

    def _show_step(self) -> None:
        """Recovery step when anonymous, password step when authenticated."""
        if self._session.is_authenticated:
            self._recovery_frame.pack_forget()
            self._password_frame.pack(fill="x")
        else:
            self._password_frame.pack_forget()
            self._recovery_frame.pack(fill="x")

    # ------------------------------------------------------------------
    # Event Handlers
    # ------------------------------------------------------------------

    def _handle_verify(self) -> None:
        email = self._email_entry.get()
        code = self._code_entry.get()
        self._show_message("")
        self._verify_button.configure(text="Verifying...", state="disabled")

        def do_verify() -> None:
            try:
                result = self._auth_service.verify_recovery_code(email, code)
                self.after(0, lambda: self._on_verified(result))
            except Exception as exc:
                self._logger.error("Recovery code check raised", exc_info=True)
                error_msg = str(exc)
                self.after(0, lambda msg=error_msg: self._show_message(msg, ERROR_TEXT))
            finally:
                self.after(0, lambda: self._verify_button.configure(text="Verify code", state="normal"))

        threading.Thread(target=do_verify, daemon=True).start()

    def _on_verified(self, result: AuthResult) -> None:
        if not result.success:
            self._show_message(result.error_message or "Verification failed.", ERROR_TEXT)
            return
        self._code_entry.delete(0, "end")
        self._show_step()
        self._show_message("Code accepted. Choose a new password.", SUCCESS_TEXT)

    def _handle_update(self) -> None:
        password = self._password_entry.get()
        confirm = self._confirm_entry.get()
        self._show_message("")
        self._update_button.configure(text="Updating...", state="disabled")

        def do_update() -> None:
            try:
                result = self._auth_service.update_password(password, confirm)

                def show_result() -> None:
                    if result.success:
                        self._password_entry.delete(0, "end")
                        self._confirm_entry.delete(0, "end")
                        self._show_message(result.message or "", SUCCESS_TEXT)
                    else:
                        self._show_message(result.error_message or "Update failed.", ERROR_TEXT)

                self.after(0, show_result)
            except Exception as exc:
                self._logger.error("Password update raised", exc_info=True)
                error_msg = str(exc)
                self.after(0, lambda msg=error_msg: self._show_message(msg, ERROR_TEXT))
            finally:
                self.after(0, lambda: self._update_button.configure(text="Update password", state="normal"))

        threading.Thread(target=do_update, daemon=True).start()

    def _show_message(self, message: str, colour: str = ERROR_TEXT) -> None:
        if self._message_label is None:
            return
        if message:
            self._message_label.configure(text=message, text_color=colour)
            self._message_label.pack(fill="x", pady=(PADDING_SM, 0))
        else:
            self._message_label.pack_forget()
