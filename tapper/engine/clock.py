"""Session clock — elapsed-time accounting with pause/resume.

The clock never drives state transitions.  Readers (the UI refresh timer)
poll :meth:`SessionClock.display_elapsed` on a fixed interval; only the
session machine calls the mutating methods.
"""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], float]


class SessionClock:
    """Wall-clock stopwatch that excludes paused time."""

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self.started_at: float | None = None
        self.paused_at: float | None = None
        self.total_paused: float = 0.0

    def now(self) -> float:
        return self._clock()

    @property
    def running(self) -> bool:
        return self.started_at is not None

    @property
    def paused(self) -> bool:
        return self.paused_at is not None

    def start(self) -> float:
        """Reset and start timing.  Returns the start timestamp."""
        self.started_at = self._clock()
        self.paused_at = None
        self.total_paused = 0.0
        return self.started_at

    def stop(self) -> None:
        self.started_at = None
        self.paused_at = None
        self.total_paused = 0.0

    def pause(self) -> float:
        """Freeze elapsed accounting.  Returns the pause timestamp."""
        self.paused_at = self._clock()
        return self.paused_at

    def resume(self) -> float:
        """Close the current pause.  Returns how long it lasted."""
        if self.paused_at is None:
            return 0.0
        paused_for = max(0.0, self._clock() - self.paused_at)
        self.total_paused += paused_for
        self.paused_at = None
        return paused_for

    def elapsed(self) -> float:
        """Seconds since start, minus all paused time (including an open pause)."""
        if self.started_at is None:
            return 0.0
        end = self.paused_at if self.paused_at is not None else self._clock()
        return max(0.0, end - self.started_at - self.total_paused)

    # The readout freezes while paused, which elapsed() already gives us
    display_elapsed = elapsed


def format_duration(seconds: float) -> str:
    """Format seconds as H:MM:SS or M:SS."""
    total = int(max(0.0, seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
