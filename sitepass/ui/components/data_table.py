"""Data Table Component.

A header row plus grid-aligned body rows inside a card.  Cells are either
plain text or widgets built by a caller-supplied factory, so the same
table serves the read-only screen display and the dashboard's editable
rows (fob entry, checkbox, action buttons).
"""

from __future__ import annotations

from typing import Any, Callable, NamedTuple, Optional, Sequence, Union

import customtkinter as ctk

from sitepass.ui.theme import (
    CARD_BG,
    CARD_BORDER,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_LABEL,
    PADDING_SM,
    TABLE_HEADER_BG,
    TABLE_ROW_ALT_BG,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

CellFactory = Callable[[ctk.CTkFrame], ctk.CTkBaseClass]
Cell = Union[str, CellFactory]
RowColour = Callable[[Any], Optional[Union[str, tuple[str, str]]]]


class Column(NamedTuple):
    """Column title and minimum pixel width."""

    title: str
    width: int = 120
    weight: int = 1


class DataTable(ctk.CTkFrame):
    """Simple grid table with an empty-state row.

    Parameters
    ----------
    parent:
        Container widget.
    columns:
        Column definitions in display order.
    render_row:
        Maps a record to one cell per column.
    row_colour:
        Optional per-record background override (e.g. highlight rows
        with a pending sign-out request).
    empty_text:
        Shown in a single spanning row when there are no records.
    font:
        Body font; the screen display uses a larger one.
    """

    def __init__(
        self,
        parent: ctk.CTkBaseClass,
        columns: Sequence[Column],
        render_row: Callable[[Any], Sequence[Cell]],
        row_colour: Optional[RowColour] = None,
        empty_text: str = "None",
        font: tuple = FONT_BODY,
    ) -> None:
        super().__init__(
            parent,
            fg_color=CARD_BG,
            corner_radius=CORNER_RADIUS,
            border_width=1,
            border_color=CARD_BORDER,
        )
        self._columns = list(columns)
        self._render_row = render_row
        self._row_colour = row_colour
        self._empty_text = empty_text
        self._font = font
        self._row_frames: list[ctk.CTkFrame] = []

        self._build_header()
        self._body = ctk.CTkFrame(self, fg_color="transparent")
        self._body.pack(fill="x", padx=1, pady=(0, 4))
        self.set_rows([])

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def set_rows(self, records: Sequence[Any]) -> None:
        """Replace the table body with *records*."""
        for frame in self._row_frames:
            frame.destroy()
        self._row_frames = []

        if not records:
            frame = self._new_row_frame(0, None)
            ctk.CTkLabel(
                frame,
                text=self._empty_text,
                font=self._font,
                text_color=TEXT_SECONDARY,
                anchor="w",
            ).grid(row=0, column=0, columnspan=len(self._columns), sticky="w", padx=PADDING_SM, pady=6)
            return

        for index, record in enumerate(records):
            colour = self._row_colour(record) if self._row_colour else None
            frame = self._new_row_frame(index, colour)
            for col, cell in enumerate(self._render_row(record)):
                if callable(cell):
                    widget = cell(frame)
                else:
                    widget = ctk.CTkLabel(
                        frame,
                        text=cell,
                        font=self._font,
                        text_color=TEXT_PRIMARY,
                        anchor="w",
                        wraplength=max(self._columns[col].width - PADDING_SM, 60),
                        justify="left",
                    )
                widget.grid(row=0, column=col, sticky="w", padx=PADDING_SM, pady=4)

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _configure_columns(self, frame: ctk.CTkFrame) -> None:
        for col, column in enumerate(self._columns):
            frame.grid_columnconfigure(col, minsize=column.width, weight=column.weight)

    def _build_header(self) -> None:
        header = ctk.CTkFrame(self, fg_color=TABLE_HEADER_BG, corner_radius=CORNER_RADIUS)
        header.pack(fill="x", padx=1, pady=(1, 0))
        self._configure_columns(header)
        for col, column in enumerate(self._columns):
            ctk.CTkLabel(
                header,
                text=column.title.upper(),
                font=FONT_LABEL,
                text_color=TEXT_SECONDARY,
                anchor="w",
            ).grid(row=0, column=col, sticky="w", padx=PADDING_SM, pady=6)

    def _new_row_frame(self, index: int, colour: Optional[Union[str, tuple[str, str]]]) -> ctk.CTkFrame:
        if colour is None:
            colour = TABLE_ROW_ALT_BG if index % 2 else "transparent"
        frame = ctk.CTkFrame(self._body, fg_color=colour, corner_radius=0)
        frame.pack(fill="x")
        self._configure_columns(frame)
        self._row_frames.append(frame)
        return frame
