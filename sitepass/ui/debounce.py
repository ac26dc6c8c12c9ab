"""Trailing-edge debouncer for bursts of realtime notifications.

The scheduler functions are injected so the class works with any Tk
widget (``widget.after`` / ``widget.after_cancel``) and can be driven by a
fake clock in tests.
"""

from __future__ import annotations

from typing import Callable, Optional

Schedule = Callable[[int, Callable[[], None]], str]
Cancel = Callable[[str], None]


class Debouncer:
    """Collapse repeated triggers into one call after *delay_ms* of quiet."""

    def __init__(
        self,
        schedule: Schedule,
        cancel: Cancel,
        delay_ms: int,
        callback: Callable[[], None],
    ) -> None:
        self._schedule = schedule
        self._cancel = cancel
        self._delay_ms = delay_ms
        self._callback = callback
        self._job: Optional[str] = None

    @property
    def pending(self) -> bool:
        return self._job is not None

    def trigger(self) -> None:
        """Restart the quiet period."""
        if self._job is not None:
            self._cancel(self._job)
        self._job = self._schedule(self._delay_ms, self._fire)

    def cancel(self) -> None:
        if self._job is not None:
            self._cancel(self._job)
            self._job = None

    def _fire(self) -> None:
        self._job = None
        self._callback()
