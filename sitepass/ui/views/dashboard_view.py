"""Dashboard View: team leader board.

Summary tiles, the awaiting-confirmation table with fob entry, the on-site
table with fob-returned and sign-out controls, and the recently signed-out
table.  Admins additionally get a Delete action.  The board reloads on
realtime changes (debounced) and can be exported to CSV.

**Thin UI Rule**: every rule (fob required, sign-out preconditions,
admin-only delete) is enforced by ``ContractorBoardService``; the view
only mirrors it for button state.
"""

from __future__ import annotations

import tkinter as tk
from datetime import datetime
from pathlib import Path
from tkinter import filedialog, messagebox
from typing import Callable, Optional

import customtkinter as ctk

from sitepass.auth import SessionManager
from sitepass.logger import StructuredLogger
from sitepass.models.contractor import Contractor
from sitepass.models.enums import UserRole
from sitepass.models.service_models import BoardSnapshot, ServiceResult
from sitepass.services.app_settings_service import AppSettingsService
from sitepass.services.areas import areas_display_text
from sitepass.services.contractor_board import DELETE_CONFIRM_PROMPT, ContractorBoardService
from sitepass.services.csv_export import default_export_filename, export_csv
from sitepass.services.realtime_service import RealtimeService
from sitepass.ui.board_frame import LiveBoardFrame
from sitepass.ui.components.data_table import Column, DataTable
from sitepass.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CARD_BG,
    CARD_BORDER,
    CONFIRM_GREEN,
    CONFIRM_GREEN_HOVER,
    CORNER_RADIUS,
    DELETE_RED,
    DELETE_RED_HOVER,
    DISABLED_BG,
    DISABLED_TEXT,
    ERROR_TEXT,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_SECTION,
    FONT_SMALL,
    FONT_TILE_LABEL,
    FONT_TILE_VALUE,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SIGNOUT_REQUESTED_BG,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from sitepass.utils.formatting import format_timestamp, or_dash

_TILE_WIDTH: int = 110


class DashboardView(LiveBoardFrame):
    """Team leader dashboard.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    board_service:
        Board state and team leader actions.
    realtime:
        Change feed used for live refresh.
    app_settings:
        Remembers the last CSV export folder.
    session:
        Read for the current role (Delete column).
    logger:
        Structured logger instance.
    debounce_ms, poll_interval_ms, on_loaded:
        See :class:`LiveBoardFrame`.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        board_service: ContractorBoardService,
        realtime: Optional[RealtimeService],
        app_settings: AppSettingsService,
        session: SessionManager,
        logger: StructuredLogger,
        debounce_ms: int = 400,
        poll_interval_ms: int = 60_000,
        on_loaded: Optional[Callable[[datetime], None]] = None,
    ) -> None:
        super().__init__(
            parent,
            board_service=board_service,
            realtime=realtime,
            logger=logger,
            debounce_ms=debounce_ms,
            poll_interval_ms=poll_interval_ms,
            on_loaded=on_loaded,
        )
        self._app_settings = app_settings
        self._session = session
        self._is_admin = session.role == UserRole.ADMIN

        # Fob entries survive re-renders so typing is not lost on refresh.
        self._fob_vars: dict[str, tk.StringVar] = {}

        self._error_label: Optional[ctk.CTkLabel] = None
        self._tiles_frame: Optional[ctk.CTkFrame] = None
        self._awaiting_table: Optional[DataTable] = None
        self._on_site_table: Optional[DataTable] = None
        self._signed_out_table: Optional[DataTable] = None
        self._loading_label: Optional[ctk.CTkLabel] = None

        self._build_ui()
        self.start()

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        scroll = ctk.CTkScrollableFrame(self, fg_color="transparent")
        scroll.pack(fill="both", expand=True)

        # --- Header: title + actions ---
        header = ctk.CTkFrame(scroll, fg_color="transparent")
        header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))

        ctk.CTkLabel(
            header,
            text="Contractor/Visitor details",
            font=FONT_HEADING,
            text_color=TEXT_PRIMARY,
        ).pack(side="left")

        ctk.CTkButton(
            header,
            text="Export CSV",
            font=FONT_BUTTON,
            width=110,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._handle_export,
        ).pack(side="right")
        ctk.CTkButton(
            header,
            text="Refresh",
            font=FONT_BUTTON,
            width=90,
            fg_color="transparent",
            border_width=1,
            border_color=CARD_BORDER,
            text_color=TEXT_PRIMARY,
            hover_color=DISABLED_BG,
            command=self.reload,
        ).pack(side="right", padx=PADDING_SM)

        self._loading_label = ctk.CTkLabel(
            scroll, text="Loading…", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w",
        )
        self._loading_label.pack(fill="x", padx=PADDING_LG)

        self._error_label = ctk.CTkLabel(
            scroll, text="", font=FONT_SMALL, text_color=ERROR_TEXT, anchor="w",
        )

        # --- Summary tiles ---
        self._tiles_frame = ctk.CTkFrame(scroll, fg_color="transparent")
        self._tiles_frame.pack(fill="x", padx=PADDING_LG, pady=PADDING_SM)

        # --- Awaiting confirmation ---
        self._section_title(scroll, "Awaiting confirmation")
        self._awaiting_table = DataTable(
            scroll,
            columns=(
                Column("Name", 170),
                Column("Company", 150),
                Column("Phone", 120),
                Column("Areas", 150),
                Column("Signed in", 130),
                Column("Fob #", 140),
                Column("", 150),
            ),
            render_row=self._awaiting_cells,
        )
        self._awaiting_table.pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_MD))

        # --- On site ---
        self._section_title(scroll, "On site")
        on_site_columns = [
            Column("Name", 170),
            Column("Company", 150),
            Column("Phone", 120),
            Column("Areas", 150),
            Column("Fob #", 80),
            Column("Fob returned", 100),
            Column("Sign-out requested", 130),
            Column("", 150),
        ]
        if self._is_admin:
            on_site_columns.append(Column("", 90))
        self._on_site_table = DataTable(
            scroll,
            columns=on_site_columns,
            render_row=self._on_site_cells,
            row_colour=lambda row: SIGNOUT_REQUESTED_BG if row.signout_requested else None,
        )
        self._on_site_table.pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_MD))

        # --- Recently signed out ---
        self._section_title(scroll, "Recently signed out")
        signed_out_columns = [
            Column("Name", 170),
            Column("Company", 150),
            Column("Fob #", 80),
            Column("Signed in", 130),
            Column("Signed out", 130),
            Column("Signed out by", 200),
        ]
        if self._is_admin:
            signed_out_columns.append(Column("", 90))
        self._signed_out_table = DataTable(
            scroll,
            columns=signed_out_columns,
            render_row=self._signed_out_cells,
        )
        self._signed_out_table.pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_LG))

    @staticmethod
    def _section_title(parent: ctk.CTkBaseClass, text: str) -> None:
        ctk.CTkLabel(
            parent, text=text, font=FONT_SECTION, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_LG, pady=(PADDING_SM, 4))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, snapshot: BoardSnapshot) -> None:
        if self._loading_label is not None:
            self._loading_label.pack_forget()
        self._clear_error()

        live_ids = {str(row.id) for row in snapshot.awaiting}
        for stale in set(self._fob_vars) - live_ids:
            del self._fob_vars[stale]

        self._render_tiles(snapshot)
        self._awaiting_table.set_rows(snapshot.awaiting)
        self._on_site_table.set_rows(snapshot.on_site)
        self._signed_out_table.set_rows(snapshot.signed_out_recent)

    def _render_tiles(self, snapshot: BoardSnapshot) -> None:
        for widget in self._tiles_frame.winfo_children():
            widget.destroy()

        tiles: list[tuple[str, int]] = [
            ("Total on site", snapshot.on_site_total),
            ("Awaiting", snapshot.awaiting_total),
            ("Sign-out requested", snapshot.signout_requested_total),
        ]
        tiles.extend((area.label, area.count) for area in snapshot.area_counts)
        tiles.append(("Other", snapshot.other_count))

        for label, value in tiles:
            tile = ctk.CTkFrame(
                self._tiles_frame,
                width=_TILE_WIDTH,
                fg_color=CARD_BG,
                corner_radius=CORNER_RADIUS,
                border_width=1,
                border_color=CARD_BORDER,
            )
            tile.pack(side="left", padx=(0, PADDING_SM), pady=4)
            ctk.CTkLabel(
                tile, text=label, font=FONT_TILE_LABEL, text_color=TEXT_SECONDARY,
            ).pack(padx=PADDING_MD, pady=(PADDING_SM, 0))
            ctk.CTkLabel(
                tile, text=str(value), font=FONT_TILE_VALUE, text_color=TEXT_PRIMARY,
            ).pack(padx=PADDING_MD, pady=(0, PADDING_SM))

    def _awaiting_cells(self, row: Contractor) -> list:
        key = str(row.id)
        fob_var = self._fob_vars.setdefault(key, tk.StringVar(value=""))
        return [
            row.full_name,
            row.company,
            row.phone,
            or_dash(areas_display_text(row.areas)),
            format_timestamp(row.signed_in_at),
            lambda parent: ctk.CTkEntry(
                parent, textvariable=fob_var, width=120,
            ),
            lambda parent: self._button(
                parent,
                "Confirm sign-in",
                lambda: self._handle_confirm_sign_in(row, fob_var.get()),
                ACCENT_PRIMARY,
                ACCENT_HOVER,
            ),
        ]

    def _on_site_cells(self, row: Contractor) -> list:
        can_sign_out, reason = self._board_service.can_confirm_sign_out(row)
        cells: list = [
            row.full_name,
            row.company,
            row.phone,
            or_dash(areas_display_text(row.areas)),
            or_dash(row.fob_number),
            lambda parent: self._fob_checkbox(parent, row),
            "Yes" if row.signout_requested else "No",
            lambda parent: self._button(
                parent,
                "Confirm sign-out",
                lambda: self._handle_confirm_sign_out(row),
                CONFIRM_GREEN,
                CONFIRM_GREEN_HOVER,
                enabled=can_sign_out,
            ),
        ]
        if self._is_admin:
            cells.append(self._delete_cell(row))
        return cells

    def _signed_out_cells(self, row: Contractor) -> list:
        cells: list = [
            row.full_name,
            row.company,
            or_dash(row.fob_number),
            format_timestamp(row.signed_in_at),
            format_timestamp(row.signed_out_at),
            or_dash(row.signed_out_by_email),
        ]
        if self._is_admin:
            cells.append(self._delete_cell(row))
        return cells

    def _delete_cell(self, row: Contractor) -> Callable[[ctk.CTkFrame], ctk.CTkButton]:
        return lambda parent: self._button(
            parent, "Delete", lambda: self._handle_delete(row), DELETE_RED, DELETE_RED_HOVER, width=70,
        )

    def _fob_checkbox(self, parent: ctk.CTkFrame, row: Contractor) -> ctk.CTkCheckBox:
        var = tk.BooleanVar(value=row.fob_returned)
        checkbox = ctk.CTkCheckBox(
            parent,
            text="",
            width=24,
            variable=var,
            command=lambda: self._handle_fob_toggle(row, var),
        )
        if not row.has_fob:
            checkbox.configure(state="disabled")
        return checkbox

    @staticmethod
    def _button(
        parent: ctk.CTkFrame,
        text: str,
        command: Callable[[], None],
        colour: str,
        hover: str,
        enabled: bool = True,
        width: int = 130,
    ) -> ctk.CTkButton:
        return ctk.CTkButton(
            parent,
            text=text,
            font=FONT_SMALL,
            width=width,
            height=30,
            fg_color=colour if enabled else DISABLED_BG,
            hover_color=hover,
            text_color=TEXT_LIGHT if enabled else DISABLED_TEXT,
            state="normal" if enabled else "disabled",
            command=command,
        )

    # ------------------------------------------------------------------
    # Event Handlers
    # ------------------------------------------------------------------

    def _handle_confirm_sign_in(self, row: Contractor, fob: str) -> None:
        if not fob.strip():
            messagebox.showwarning("Fob required", "Fob number is required", parent=self)
            return
        self.run_action(
            lambda: self._board_service.confirm_sign_in(row, fob),
            self._after_mutation,
        )

    def _handle_fob_toggle(self, row: Contractor, var: tk.BooleanVar) -> None:
        value = bool(var.get())

        def done(result: ServiceResult) -> None:
            if not result.success:
                var.set(row.fob_returned)
                messagebox.showerror("Fob returned", result.error or "Update failed.", parent=self)
            # The confirm sign-out button depends on the fob state.
            self._on_site_table.set_rows(self._board_service.snapshot.on_site)

        self.run_action(lambda: self._board_service.set_fob_returned(row, value), done)

    def _handle_confirm_sign_out(self, row: Contractor) -> None:
        self.run_action(
            lambda: self._board_service.confirm_sign_out(row),
            self._after_mutation,
        )

    def _handle_delete(self, row: Contractor) -> None:
        if not messagebox.askyesno("Delete record", DELETE_CONFIRM_PROMPT, parent=self):
            return
        self.run_action(lambda: self._board_service.delete(row), self._after_mutation)

    def _after_mutation(self, result: ServiceResult) -> None:
        if not result.success:
            messagebox.showerror("Action failed", result.error or "The change was not saved.", parent=self)
        self.reload()

    def _handle_export(self) -> None:
        snapshot = self._board_service.snapshot
        rows = [*snapshot.awaiting, *snapshot.on_site, *snapshot.signed_out_recent]
        if not rows:
            messagebox.showinfo("Export CSV", "There are no records to export.", parent=self)
            return

        initial_dir = self._app_settings.get_last_export_dir() or str(Path.home())
        target = filedialog.asksaveasfilename(
            parent=self,
            title="Export contractors",
            initialdir=initial_dir,
            initialfile=default_export_filename(),
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv")],
        )
        if not target:
            return

        path = Path(target)
        try:
            count = export_csv(rows, path)
        except OSError as exc:
            self._logger.error("CSV export failed: %s", exc)
            messagebox.showerror("Export CSV", f"Could not write the file:\n{exc}", parent=self)
            return

        self._app_settings.set_last_export_dir(str(path.parent))
        self._logger.info("Exported %d contractor records to %s", count, path)
        messagebox.showinfo("Export CSV", f"Exported {count} records.", parent=self)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def on_load_error(self, message: str) -> None:
        super().on_load_error(message)
        if self._loading_label is not None:
            self._loading_label.pack_forget()
        if self._error_label is not None:
            self._error_label.configure(text=message)
            self._error_label.pack(fill="x", padx=PADDING_LG, before=self._tiles_frame)

    def _clear_error(self) -> None:
        if self._error_label is not None:
            self._error_label.configure(text="")
            self._error_label.pack_forget()
