"""Ping-pong auto-scroll state for the wall screen.

Pure state machine: the screen display calls :meth:`PingPongScroller.tick`
from a Tk ``after`` loop and moves its scrollable frame to the returned
fraction.  Scrolling runs to the bottom, holds for a few ticks, runs back
to the top, holds again, and repeats.
"""

from __future__ import annotations


class PingPongScroller:
    """Scroll position in ``[0.0, 1.0]`` that bounces between the ends.

    Parameters
    ----------
    step:
        Fraction of the scroll range moved per tick.
    pause_ticks:
        Ticks to hold at either end before reversing.
    """

    def __init__(self, step: float = 0.004, pause_ticks: int = 40) -> None:
        if step <= 0:
            raise ValueError("step must be positive")
        self._step = step
        self._pause_ticks = max(0, pause_ticks)
        self.reset()

    def reset(self) -> None:
        self.position: float = 0.0
        self.direction: int = 1
        self._hold: int = self._pause_ticks

    @property
    def paused(self) -> bool:
        return self._hold > 0

    def tick(self, scrollable: bool = True) -> float:
        """Advance one step and return the new position.

        When the content fits without scrolling the position is pinned
        to the top.
        """
        if not scrollable:
            self.reset()
            return self.position

        if self._hold > 0:
            self._hold -= 1
            return self.position

        self.position += self._step * self.direction
        if self.position >= 1.0:
            self.position = 1.0
            self.direction = -1
            self._hold = self._pause_ticks
        elif self.position <= 0.0:
            self.position = 0.0
            self.direction = 1
            self._hold = self._pause_ticks
        return self.position
