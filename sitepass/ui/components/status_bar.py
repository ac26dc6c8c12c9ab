"""Status Bar Component.

Footer strip showing the copyright line, backend connectivity, the
realtime feed state and the application version.  Refreshes every
30 seconds.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import customtkinter as ctk

import sitepass as _sitepass_pkg
from sitepass.database import DatabaseManager
from sitepass.logger import StructuredLogger
from sitepass.services.realtime_service import RealtimeService
from sitepass.ui.theme import (
    APP_NAME,
    FONT_SMALL,
    NAV_BG,
    NAV_TEXT,
    PADDING_SM,
    STATUS_BAR_HEIGHT,
    STATUS_CONNECTING,
    STATUS_OFFLINE,
    STATUS_ONLINE,
)
from sitepass.utils.formatting import format_time

_REFRESH_INTERVAL_MS: int = 30_000


class StatusBar(ctk.CTkFrame):
    """Application-wide footer at the bottom of the shell.

    The dot is green when the backend is reachable and the realtime feed
    is live, amber while the feed is (re)connecting and red when the
    backend is unreachable.

    Parameters
    ----------
    parent:
        Parent widget (the AppShell root).
    db:
        Used to check ``is_online``.
    realtime:
        Optional realtime service whose connection state is shown.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTk,
        db: DatabaseManager,
        logger: StructuredLogger,
        realtime: Optional[RealtimeService] = None,
    ) -> None:
        super().__init__(parent, height=STATUS_BAR_HEIGHT, fg_color=NAV_BG, corner_radius=0)
        self.pack_propagate(False)

        self._db = db
        self._realtime = realtime
        self._logger = logger
        self._refresh_job: Optional[str] = None

        ctk.CTkLabel(
            self,
            text=f"© {datetime.now().year} {APP_NAME}",
            font=FONT_SMALL,
            text_color=NAV_TEXT,
            anchor="w",
        ).pack(side="left", padx=PADDING_SM)

        self._version_label = ctk.CTkLabel(
            self,
            text=f"v{_sitepass_pkg.__version__}",
            font=FONT_SMALL,
            text_color=NAV_TEXT,
            anchor="e",
        )
        self._version_label.pack(side="right", padx=PADDING_SM)

        self._status_label = ctk.CTkLabel(
            self, text="", font=FONT_SMALL, text_color=NAV_TEXT, anchor="e",
        )
        self._status_label.pack(side="right", padx=(0, PADDING_SM))

        self._refresh_label = ctk.CTkLabel(
            self, text="", font=FONT_SMALL, text_color=NAV_TEXT, anchor="e",
        )
        self._refresh_label.pack(side="left", padx=PADDING_SM)

        self._status_dot = ctk.CTkLabel(
            self, text="●", font=FONT_SMALL, text_color=STATUS_ONLINE, width=20,
        )
        self._status_dot.pack(side="right", padx=(0, 2))

        self.update_status()

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def update_status(self) -> None:
        """Refresh the connectivity indicator and reschedule."""
        if self._refresh_job is not None:
            self.after_cancel(self._refresh_job)
            self._refresh_job = None

        if not self._db.is_online:
            colour, text = STATUS_OFFLINE, "Offline"
        elif self._realtime is not None and self._realtime.is_running and not self._realtime.is_connected:
            colour, text = STATUS_CONNECTING, "Connecting live feed..."
        elif self._realtime is not None and self._realtime.is_connected:
            colour, text = STATUS_ONLINE, "Online • Live"
        else:
            colour, text = STATUS_ONLINE, "Online"

        self._status_dot.configure(text_color=colour)
        self._status_label.configure(text=text)
        self._refresh_job = self.after(_REFRESH_INTERVAL_MS, self.update_status)

    def set_last_refresh(self, when: datetime) -> None:
        """Show when the visible board data was last loaded."""
        self._refresh_label.configure(text=f"Last refresh {format_time(when)}")

    def destroy(self) -> None:
        if self._refresh_job is not None:
            self.after_cancel(self._refresh_job)
            self._refresh_job = None
        super().destroy()
