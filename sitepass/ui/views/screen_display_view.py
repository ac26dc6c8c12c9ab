"""Screen Display View: read-only wall screen.

Counter tiles (areas with nobody on site are hidden), the awaiting and
on-site tables, a last-updated stamp and the presentation controls: dark
mode (persisted), auto-scroll (persisted) and fullscreen.
"""

from __future__ import annotations

import tkinter as tk
from datetime import datetime
from typing import Callable, Optional

import customtkinter as ctk

from sitepass.logger import StructuredLogger
from sitepass.models.contractor import Contractor
from sitepass.models.service_models import BoardSnapshot
from sitepass.services.app_settings_service import AppSettingsService
from sitepass.services.areas import areas_display_text
from sitepass.services.contractor_board import ContractorBoardService
from sitepass.services.realtime_service import RealtimeService
from sitepass.ui.autoscroll import PingPongScroller
from sitepass.ui.board_frame import LiveBoardFrame
from sitepass.ui.components.data_table import Column, DataTable
from sitepass.ui.theme import (
    CARD_BORDER,
    CORNER_RADIUS,
    DISABLED_BG,
    ERROR_TEXT,
    FONT_BODY,
    FONT_HERO,
    FONT_SCREEN_ROW,
    FONT_SECTION,
    FONT_SMALL,
    FONT_TILE_LABEL,
    FONT_TILE_VALUE,
    HEADER_BLUE,
    HEADER_GREEN,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SCREEN_AWAITING_BG,
    SCREEN_SIGNOUT_BG,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from sitepass.utils.formatting import format_day_month_time, or_dash

_TILE_COLUMNS: int = 10


class ScreenDisplayView(LiveBoardFrame):
    """Kiosk wall screen.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    board_service:
        Loads the board snapshot.
    realtime:
        Change feed used for live refresh.
    app_settings:
        Persists the dark mode and auto-scroll preferences.
    logger:
        Structured logger instance.
    on_toggle_fullscreen:
        Shell callback for the fullscreen button.
    scroll_interval_ms, scroll_step, scroll_pause_ticks:
        Auto-scroll timing.
    debounce_ms, poll_interval_ms, on_loaded:
        See :class:`LiveBoardFrame`.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        board_service: ContractorBoardService,
        realtime: Optional[RealtimeService],
        app_settings: AppSettingsService,
        logger: StructuredLogger,
        on_toggle_fullscreen: Optional[Callable[[], None]] = None,
        scroll_interval_ms: int = 60,
        scroll_step: float = 0.004,
        scroll_pause_ticks: int = 40,
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
        self._on_toggle_fullscreen = on_toggle_fullscreen

        self._scroller = PingPongScroller(step=scroll_step, pause_ticks=scroll_pause_ticks)
        self._scroll_interval_ms = scroll_interval_ms
        self._scroll_job: Optional[str] = None

        self._dark_mode_var = tk.BooleanVar(value=app_settings.get_dark_mode())
        self._auto_scroll_var = tk.BooleanVar(value=app_settings.get_auto_scroll())

        self._scroll: Optional[ctk.CTkScrollableFrame] = None
        self._subtitle_label: Optional[ctk.CTkLabel] = None
        self._error_label: Optional[ctk.CTkLabel] = None
        self._tiles_frame: Optional[ctk.CTkFrame] = None
        self._awaiting_header: Optional[ctk.CTkLabel] = None
        self._on_site_header: Optional[ctk.CTkLabel] = None
        self._awaiting_table: Optional[DataTable] = None
        self._on_site_table: Optional[DataTable] = None

        self._apply_appearance()
        self._build_ui()
        self.start()
        self._schedule_scroll()

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self._scroll = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._scroll.pack(fill="both", expand=True)
        body = self._scroll

        # --- Title row + controls ---
        top = ctk.CTkFrame(body, fg_color="transparent")
        top.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))

        titles = ctk.CTkFrame(top, fg_color="transparent")
        titles.pack(side="left", fill="x", expand=True)
        ctk.CTkLabel(
            titles, text="Screen display", font=FONT_HERO, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x")
        self._subtitle_label = ctk.CTkLabel(
            titles,
            text="Live view: updates automatically",
            font=FONT_BODY,
            text_color=TEXT_SECONDARY,
            anchor="w",
        )
        self._subtitle_label.pack(fill="x")
        self._error_label = ctk.CTkLabel(titles, text="", font=FONT_SMALL, text_color=ERROR_TEXT, anchor="w")

        controls = ctk.CTkFrame(top, fg_color="transparent")
        controls.pack(side="right")
        ctk.CTkSwitch(
            controls,
            text="Dark mode",
            variable=self._dark_mode_var,
            font=FONT_SMALL,
            command=self._handle_dark_mode,
        ).pack(side="left", padx=PADDING_SM)
        ctk.CTkCheckBox(
            controls,
            text="Auto-scroll",
            variable=self._auto_scroll_var,
            font=FONT_SMALL,
            command=self._handle_auto_scroll,
        ).pack(side="left", padx=PADDING_SM)
        if self._on_toggle_fullscreen is not None:
            ctk.CTkButton(
                controls,
                text="⛶ Fullscreen",
                font=FONT_SMALL,
                width=100,
                fg_color="transparent",
                border_width=1,
                border_color=CARD_BORDER,
                text_color=TEXT_PRIMARY,
                hover_color=DISABLED_BG,
                command=self._on_toggle_fullscreen,
            ).pack(side="left", padx=(PADDING_SM, 0))

        # --- Counters ---
        self._tiles_frame = ctk.CTkFrame(body, fg_color="transparent")
        self._tiles_frame.pack(fill="x", padx=PADDING_LG, pady=PADDING_SM)
        ctk.CTkLabel(
            body,
            text="“Other” counts contractors who selected any non-standard area "
                 "(including entries like “Other: …”).",
            font=FONT_SMALL,
            text_color=TEXT_SECONDARY,
            anchor="w",
        ).pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_MD))

        # --- Awaiting ---
        self._awaiting_header = self._section_header(body, HEADER_GREEN)
        self._awaiting_table = DataTable(
            body,
            columns=(Column("Name", 260), Column("Company", 240), Column("Areas", 300)),
            render_row=lambda row: [row.full_name, row.company, or_dash(areas_display_text(row.areas))],
            row_colour=lambda row: SCREEN_AWAITING_BG,
            font=FONT_SCREEN_ROW,
        )
        self._awaiting_table.pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_MD))

        # --- On site ---
        self._on_site_header = self._section_header(body, HEADER_BLUE)
        self._on_site_table = DataTable(
            body,
            columns=(
                Column("Name", 260),
                Column("Company", 240),
                Column("Areas", 300),
                Column("Fob #", 100),
            ),
            render_row=self._on_site_cells,
            row_colour=lambda row: SCREEN_SIGNOUT_BG if row.signout_requested else None,
            font=FONT_SCREEN_ROW,
        )
        self._on_site_table.pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_MD))

        ctk.CTkLabel(
            body,
            text="This screen view is read-only. Use the Dashboard for confirmations and updates.",
            font=FONT_SMALL,
            text_color=TEXT_SECONDARY,
            anchor="w",
        ).pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_LG))

        self._update_headers(awaiting=0, on_site=0)

    @staticmethod
    def _section_header(parent: ctk.CTkBaseClass, colour: str) -> ctk.CTkLabel:
        label = ctk.CTkLabel(
            parent,
            text="",
            font=FONT_SECTION,
            text_color=TEXT_LIGHT,
            fg_color=colour,
            corner_radius=CORNER_RADIUS,
            anchor="w",
            height=34,
        )
        label.pack(fill="x", padx=PADDING_LG, pady=(0, 2))
        return label

    @staticmethod
    def _on_site_cells(row: Contractor) -> list[str]:
        return [row.full_name, row.company, or_dash(areas_display_text(row.areas)), or_dash(row.fob_number)]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, snapshot: BoardSnapshot) -> None:
        if self._error_label is not None:
            self._error_label.pack_forget()
        if self._subtitle_label is not None and snapshot.loaded_at is not None:
            self._subtitle_label.configure(
                text=f"Live view: updates automatically • Last updated: "
                     f"{format_day_month_time(snapshot.loaded_at)}",
            )

        self._render_tiles(snapshot)
        self._update_headers(awaiting=snapshot.awaiting_total, on_site=snapshot.on_site_total)
        self._awaiting_table.set_rows(snapshot.awaiting)
        self._on_site_table.set_rows(snapshot.on_site)

    def _render_tiles(self, snapshot: BoardSnapshot) -> None:
        for widget in self._tiles_frame.winfo_children():
            widget.destroy()

        tiles: list[tuple[str, int]] = [
            ("On site", snapshot.on_site_total),
            ("Awaiting", snapshot.awaiting_total),
        ]
        tiles.extend((area.label, area.count) for area in snapshot.area_counts if area.count > 0)
        if snapshot.other_count > 0:
            tiles.append(("Other", snapshot.other_count))

        for index, (label, value) in enumerate(tiles):
            tile = ctk.CTkFrame(self._tiles_frame, fg_color=HEADER_BLUE, corner_radius=CORNER_RADIUS)
            tile.grid(row=index // _TILE_COLUMNS, column=index % _TILE_COLUMNS, padx=(0, PADDING_SM), pady=4, sticky="ew")
            ctk.CTkLabel(tile, text=label, font=FONT_TILE_LABEL, text_color=TEXT_LIGHT).pack(
                side="left", padx=(PADDING_MD, PADDING_SM), pady=PADDING_SM,
            )
            ctk.CTkLabel(tile, text=str(value), font=FONT_TILE_VALUE, text_color=TEXT_LIGHT).pack(
                side="right", padx=(PADDING_SM, PADDING_MD), pady=PADDING_SM,
            )

    def _update_headers(self, awaiting: int, on_site: int) -> None:
        self._awaiting_header.configure(text=f"  Awaiting sign-in confirmation ({awaiting})")
        self._on_site_header.configure(text=f"  Signed in contractors ({on_site})")

    def on_load_error(self, message: str) -> None:
        super().on_load_error(message)
        if self._error_label is not None:
            self._error_label.configure(text=message)
            self._error_label.pack(fill="x")

    # ------------------------------------------------------------------
    # Presentation controls
    # ------------------------------------------------------------------

    def _apply_appearance(self) -> None:
        ctk.set_appearance_mode("dark" if self._dark_mode_var.get() else "light")

    def _handle_dark_mode(self) -> None:
        self._apply_appearance()
        self._app_settings.set_dark_mode(bool(self._dark_mode_var.get()))

    def _handle_auto_scroll(self) -> None:
        enabled = bool(self._auto_scroll_var.get())
        self._app_settings.set_auto_scroll(enabled)
        if not enabled:
            self._scroller.reset()
            self._move_to(0.0)

    def _schedule_scroll(self) -> None:
        self._scroll_job = self.after(self._scroll_interval_ms, self._scroll_tick)

    def _scroll_tick(self) -> None:
        self._scroll_job = None
        if self._auto_scroll_var.get() and self._scroll is not None:
            first, last = self._scroll._parent_canvas.yview()
            position = self._scroller.tick(scrollable=(last - first) < 0.999)
            self._move_to(position)
        self._schedule_scroll()

    def _move_to(self, fraction: float) -> None:
        if self._scroll is not None:
            self._scroll._parent_canvas.yview_moveto(fraction)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def destroy(self) -> None:
        """Stop auto-scroll and restore the light appearance for other views."""
        if self._scroll_job is not None:
            self.after_cancel(self._scroll_job)
            self._scroll_job = None
        ctk.set_appearance_mode("light")
        super().destroy()
