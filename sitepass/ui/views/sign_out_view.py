"""Sign Out View: contractor/visitor sign-out request."""

from __future__ import annotations

import threading
import tkinter as tk
from typing import Optional

import customtkinter as ctk

from sitepass.logger import StructuredLogger
from sitepass.services.sign_out_service import SignOutService
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
    INPUT_BORDER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
    WARNING_TEXT,
)

_CARD_WIDTH: int = 440
_SUBMIT_TEXT: str = "Submit sign-out request"


class SignOutView(ctk.CTkFrame):
    """First name + phone form that asks a team leader to sign the person out.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    sign_out_service:
        Calls the sign-out request procedure.
    logger:
        Structured JSON logger.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        sign_out_service: SignOutService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._sign_out_service = sign_out_service
        self._logger = logger

        self._first_name_entry: Optional[ctk.CTkEntry] = None
        self._phone_entry: Optional[ctk.CTkEntry] = None
        self._submit_button: Optional[ctk.CTkButton] = None
        self._message_label: Optional[ctk.CTkLabel] = None

        self._build_ui()

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

        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_LG)

        ctk.CTkLabel(
            inner,
            text="Contractor/Visitor sign-out",
            font=FONT_HEADING,
            text_color=TEXT_PRIMARY,
            anchor="w",
        ).pack(fill="x", pady=(0, PADDING_MD))

        self._first_name_entry = self._labelled_entry(inner, "First name")
        self._phone_entry = self._labelled_entry(inner, "Phone number")
        self._phone_entry.bind("<Return>", self._on_enter_key)

        self._message_label = ctk.CTkLabel(
            inner, text="", font=FONT_BODY, anchor="w", justify="left", wraplength=_CARD_WIDTH,
        )

        self._submit_button = ctk.CTkButton(
            inner,
            text=_SUBMIT_TEXT,
            font=FONT_BUTTON,
            width=_CARD_WIDTH,
            height=44,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._handle_submit,
        )
        self._submit_button.pack(fill="x", pady=(PADDING_SM, 0))

    @staticmethod
    def _labelled_entry(parent: ctk.CTkFrame, label: str) -> ctk.CTkEntry:
        ctk.CTkLabel(
            parent, text=label, font=FONT_LABEL, text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x")
        entry = ctk.CTkEntry(parent, height=40, font=FONT_BODY, border_color=INPUT_BORDER)
        entry.pack(fill="x", pady=(2, PADDING_SM))
        return entry

    # ------------------------------------------------------------------
    # Event Handlers
    # ------------------------------------------------------------------

    def _on_enter_key(self, event: tk.Event) -> None:
        self._handle_submit()

    def _handle_submit(self) -> None:
        first_name = self._first_name_entry.get()
        phone = self._phone_entry.get()
        self._show_message("", ERROR_TEXT)
        self._set_loading(True)
        threading.Thread(
            target=self._submit,
            args=(first_name, phone),
            daemon=True,
        ).start()

    def _submit(self, first_name: str, phone: str) -> None:
        """Background thread: delegate to SignOutService.request()."""
        try:
            result = self._sign_out_service.request(first_name, phone)

            def show_result() -> None:
                if not result.success:
                    self._show_message(result.error or "Sign-out request failed.", ERROR_TEXT)
                    return
                colour = SUCCESS_TEXT if result.data else WARNING_TEXT
                self._show_message(result.message or "", colour)
                self._first_name_entry.delete(0, "end")
                self._phone_entry.delete(0, "end")

            self.after(0, show_result)
        except Exception as exc:
            self._logger.error("Sign-out request failed", exc_info=True)
            error_msg = str(exc)
            self.after(0, lambda msg=error_msg: self._show_message(msg, ERROR_TEXT))
        finally:
            self.after(0, lambda: self._set_loading(False))

    # ------------------------------------------------------------------
    # UI Helper Methods
    # ------------------------------------------------------------------

    def _show_message(self, message: str, colour: str) -> None:
        if self._message_label is None or self._submit_button is None:
            return
        if message:
            self._message_label.configure(text=message, text_color=colour)
            self._message_label.pack(fill="x", pady=(0, PADDING_SM), before=self._submit_button)
        else:
            self._message_label.pack_forget()

    def _set_loading(self, loading: bool) -> None:
        if self._submit_button is None:
            return
        if loading:
            self._submit_button.configure(text="Submitting...", state="disabled")
        else:
            self._submit_button.configure(text=_SUBMIT_TEXT, state="normal")
