"""Sign In View: contractor/visitor sign-in form.

**Thin UI Rule**: the view gathers inputs and hands them to
``SignInService``; validation and the area list live in the service.
"""

from __future__ import annotations

import threading
import tkinter as tk
from typing import Optional

import customtkinter as ctk

from sitepass.logger import StructuredLogger
from sitepass.services.areas import OTHER_PLACEHOLDER, STANDARD_AREAS
from sitepass.services.sign_in_service import SignInService
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
    FORM_WIDTH,
    INPUT_BORDER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_INPUT_HEIGHT: int = 40
_AREA_COLUMNS: int = 4
_SUBMIT_TEXT: str = "Sign-in"


class SignInView(ctk.CTkFrame):
    """Form card with contact fields, area checkboxes and a free-text area.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    sign_in_service:
        Validates and records the sign-in.
    logger:
        Structured JSON logger.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        sign_in_service: SignInService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._sign_in_service = sign_in_service
        self._logger = logger

        self._entries: dict[str, ctk.CTkEntry] = {}
        self._area_vars: dict[str, tk.BooleanVar] = {}
        self._other_entry: Optional[ctk.CTkEntry] = None
        self._submit_button: Optional[ctk.CTkButton] = None
        self._message_label: Optional[ctk.CTkLabel] = None

        self._build_ui()

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        scroll = ctk.CTkScrollableFrame(self, fg_color="transparent")
        scroll.pack(fill="both", expand=True)

        card = ctk.CTkFrame(
            scroll,
            width=FORM_WIDTH,
            fg_color=CARD_BG,
            corner_radius=CORNER_RADIUS,
            border_width=1,
            border_color=CARD_BORDER,
        )
        card.pack(pady=PADDING_LG)

        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_LG)

        ctk.CTkLabel(
            inner,
            text="Contractor/Visitor sign-in",
            font=FONT_HEADING,
            text_color=TEXT_PRIMARY,
            anchor="w",
        ).pack(fill="x", pady=(0, PADDING_MD))

        # -- Contact fields: 2 x 2 grid --
        fields = ctk.CTkFrame(inner, fg_color="transparent")
        fields.pack(fill="x")
        fields.grid_columnconfigure((0, 1), weight=1, uniform="fields")

        layout = (
            ("first_name", "First name (unique identifier)", 0, 0),
            ("surname", "Surname", 0, 1),
            ("company", "Company", 1, 0),
            ("phone", "Phone number (unique identifier)", 1, 1),
        )
        for key, label, row, col in layout:
            cell = ctk.CTkFrame(fields, fg_color="transparent")
            cell.grid(row=row, column=col, sticky="ew", padx=(0 if col == 0 else PADDING_SM, 0), pady=(0, PADDING_SM))
            ctk.CTkLabel(
                cell, text=label, font=FONT_LABEL, text_color=TEXT_SECONDARY, anchor="w",
            ).pack(fill="x")
            entry = ctk.CTkEntry(
                cell, height=_INPUT_HEIGHT, font=FONT_BODY, border_color=INPUT_BORDER,
            )
            entry.pack(fill="x", pady=(2, 0))
            self._entries[key] = entry

        # -- Areas --
        ctk.CTkLabel(
            inner,
            text="Area of work (select one or more)",
            font=FONT_LABEL,
            text_color=TEXT_SECONDARY,
            anchor="w",
        ).pack(fill="x", pady=(PADDING_SM, 2))

        areas = ctk.CTkFrame(inner, fg_color="transparent")
        areas.pack(fill="x")
        for index, (db_name, short) in enumerate(STANDARD_AREAS):
            var = tk.BooleanVar(value=False)
            ctk.CTkCheckBox(
                areas, text=short, variable=var, font=FONT_BODY,
            ).grid(row=index // _AREA_COLUMNS, column=index % _AREA_COLUMNS, sticky="w", padx=(0, PADDING_MD), pady=4)
            self._area_vars[db_name] = var

        ctk.CTkLabel(
            inner,
            text="Other (if not listed)",
            font=FONT_LABEL,
            text_color=TEXT_SECONDARY,
            anchor="w",
        ).pack(fill="x", pady=(PADDING_SM, 2))
        self._other_entry = ctk.CTkEntry(
            inner,
            height=_INPUT_HEIGHT,
            font=FONT_BODY,
            placeholder_text=OTHER_PLACEHOLDER,
            border_color=INPUT_BORDER,
        )
        self._other_entry.pack(fill="x")
        ctk.CTkLabel(
            inner,
            text="If you type an area here, it will be saved as \"Other: your text\".",
            font=FONT_SMALL,
            text_color=TEXT_SECONDARY,
            anchor="w",
        ).pack(fill="x", pady=(2, PADDING_SM))

        self._message_label = ctk.CTkLabel(
            inner, text="", font=FONT_BODY, anchor="w", justify="left", wraplength=FORM_WIDTH - 2 * PADDING_LG,
        )

        self._submit_button = ctk.CTkButton(
            inner,
            text=_SUBMIT_TEXT,
            font=FONT_BUTTON,
            height=44,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._handle_submit,
        )
        self._submit_button.pack(fill="x", pady=(PADDING_SM, 0))

    # ------------------------------------------------------------------
    # Event Handlers
    # ------------------------------------------------------------------

    def _handle_submit(self) -> None:
        values = {key: entry.get() for key, entry in self._entries.items()}
        selected = [name for name, var in self._area_vars.items() if var.get()]
        other_text = self._other_entry.get() if self._other_entry is not None else ""

        self._show_message("", ERROR_TEXT)
        self._set_loading(True)
        threading.Thread(
            target=self._submit,
            args=(values, selected, other_text),
            daemon=True,
        ).start()

    def _submit(self, values: dict[str, str], selected: list[str], other_text: str) -> None:
        """Background thread: delegate to SignInService.submit()."""
        try:
            result = self._sign_in_service.submit(
                first_name=values["first_name"],
                surname=values["surname"],
                company=values["company"],
                phone=values["phone"],
                selected_areas=selected,
                other_text=other_text,
            )

            def show_result() -> None:
                if result.success:
                    self._reset_form()
                    self._show_message(result.message or "", SUCCESS_TEXT)
                else:
                    self._show_message(result.error or "Sign-in failed.", ERROR_TEXT)

            self.after(0, show_result)
        except Exception as exc:
            self._logger.error("Sign-in submit failed", exc_info=True)
            error_msg = str(exc)
            self.after(0, lambda msg=error_msg: self._show_message(msg, ERROR_TEXT))
        finally:
            self.after(0, lambda: self._set_loading(False))

    # ------------------------------------------------------------------
    # UI Helper Methods
    # ------------------------------------------------------------------

    def _reset_form(self) -> None:
        for entry in self._entries.values():
            entry.delete(0, "end")
        for var in self._area_vars.values():
            var.set(False)
        if self._other_entry is not None:
            self._other_entry.delete(0, "end")
        self.focus_set()

    def _show_message(self, message: str, colour: str) -> None:
        if self._message_label is None or self._submit_button is None:
            return
        if message:
            self._message_label.configure(text=message, text_color=colour)
            self._message_label.pack(fill="x", pady=(PADDING_SM, 0), before=self._submit_button)
        else:
            self._message_label.configure(text="")
            self._message_label.pack_forget()

    def _set_loading(self, loading: bool) -> None:
        if self._submit_button is None:
            return
        if loading:
            self._submit_button.configure(text="Submitting...", state="disabled")
        else:
            self._submit_button.configure(text=_SUBMIT_TEXT, state="normal")
