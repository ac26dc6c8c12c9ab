"""Live Board Base Frame.

Shared lifecycle for the views that show the contractor board:

- load the board on a background thread and render on the Tk thread;
- reload (debounced) whenever the realtime feed reports a change;
- reload on a fallback timer in case the feed is down;
- cancel every timer and unregister the realtime listener on destroy.

Subclasses implement :meth:`render` and may override :meth:`on_load_error`.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Callable, Optional

import customtkinter as ctk

from sitepass.logger import StructuredLogger
from sitepass.models.service_models import BoardSnapshot, ServiceResult
from sitepass.services.contractor_board import ContractorBoardService
from sitepass.services.realtime_service import RealtimeService
from sitepass.ui.debounce import Debouncer
from sitepass.ui.theme import CONTENT_BG


class LiveBoardFrame(ctk.CTkFrame):
    """Base frame for views driven by :class:`ContractorBoardService`.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    board_service:
        Loads and holds the board snapshot.
    realtime:
        Change feed; ``None`` disables realtime refresh.
    logger:
        Structured logger instance.
    debounce_ms:
        Quiet period before a burst of change notifications reloads.
    poll_interval_ms:
        Fallback reload interval.
    on_loaded:
        Called with the load time after every successful load (status bar).
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        board_service: ContractorBoardService,
        realtime: Optional[RealtimeService],
        logger: StructuredLogger,
        debounce_ms: int = 400,
        poll_interval_ms: int = 60_000,
        on_loaded: Optional[Callable[[datetime], None]] = None,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._board_service = board_service
        self._realtime = realtime
        self._logger = logger
        self._poll_interval_ms = poll_interval_ms
        self._on_loaded = on_loaded

        self._poll_job: Optional[str] = None
        self._loading: bool = False
        self._reload_queued: bool = False
        self._destroyed: bool = False
        self._debouncer = Debouncer(self.after, self.after_cancel, debounce_ms, self.reload)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Subscribe to changes and perform the first load."""
        if self._realtime is not None:
            self._realtime.add_listener(self._on_realtime_change)
        self.reload()

    def destroy(self) -> None:
        self._destroyed = True
        if self._realtime is not None:
            self._realtime.remove_listener(self._on_realtime_change)
        self._debouncer.cancel()
        if self._poll_job is not None:
            self.after_cancel(self._poll_job)
            self._poll_job = None
        super().destroy()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def reload(self) -> None:
        """Fetch the board off the Tk thread.  Overlapping reloads coalesce."""
        if self._destroyed:
            return
        if self._loading:
            self._reload_queued = True
            return
        self._loading = True
        threading.Thread(target=self._load_worker, daemon=True).start()

    def _load_worker(self) -> None:
        try:
            result = self._board_service.load()
        except Exception as exc:
            self._logger.error("Board load raised", exc_info=True)
            result = ServiceResult(success=False, error=str(exc))
        self._post(lambda: self._finish_load(result))

    def _finish_load(self, result: ServiceResult[BoardSnapshot]) -> None:
        self._loading = False
        if result.success and result.data is not None:
            self.render(result.data)
            if self._on_loaded is not None and result.data.loaded_at is not None:
                self._on_loaded(result.data.loaded_at)
        else:
            self.on_load_error(result.error or "Could not load contractor records.")

        self._schedule_poll()
        if self._reload_queued:
            self._reload_queued = False
            self.reload()

    def _schedule_poll(self) -> None:
        if self._poll_job is not None:
            self.after_cancel(self._poll_job)
        self._poll_job = self.after(self._poll_interval_ms, self._on_poll)

    def _on_poll(self) -> None:
        self._poll_job = None
        self.reload()

    def _on_realtime_change(self, payload: dict[str, Any]) -> None:
        """Realtime thread: hop to Tk and restart the debounce window."""
        self._post(self._debouncer.trigger)

    def _post(self, callback: Callable[[], None]) -> None:
        if self._destroyed:
            return
        try:
            self.after(0, callback)
        except RuntimeError:
            # Tk main loop already gone (application shutting down).
            self._logger.debug("Dropped UI callback after shutdown.")

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    def render(self, snapshot: BoardSnapshot) -> None:
        raise NotImplementedError

    def on_load_error(self, message: str) -> None:
        self._logger.warning("Board load failed: %s", message)

    def run_action(
        self,
        action: Callable[[], ServiceResult[Any]],
        on_done: Callable[[ServiceResult[Any]], None],
    ) -> None:
        """Run a board action on a worker thread, then *on_done* on Tk."""

        def worker() -> None:
            try:
                result = action()
            except Exception as exc:
                self._logger.error("Board action raised", exc_info=True)
                result = ServiceResult(success=False, error=str(exc))
            self._post(lambda: on_done(result))

        threading.Thread(target=worker, daemon=True).start()
