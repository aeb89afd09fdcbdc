"""Bet window countdown."""

from __future__ import annotations

from stocked.core.logging import get_logger

log = get_logger(__name__)


def format_time(seconds: int) -> str:
    """Seconds as zero padded ``mm:ss``."""
    seconds = max(int(seconds), 0)
    mins, secs = divmod(seconds, 60)
    return f"{mins:02d}:{secs:02d}"


class Countdown:
    """Seconds left in the selected window, restarting when it runs out.

    Starts at ``initial`` (300s by default). Selecting a duration resets
    the time left to it. A tick at zero restarts from the selected duration
    instead of decrementing.
    """

    def __init__(self, selected: int = 120, initial: int = 300) -> None:
        if selected <= 0:
            msg = f"selected duration must be > 0, got {selected}"
            raise ValueError(msg)
        self._selected = selected
        self._time_left = initial

    @property
    def selected(self) -> int:
        return self._selected

    @property
    def time_left(self) -> int:
        return self._time_left

    def select(self, duration: int) -> None:
        if duration <= 0:
            msg = f"duration must be > 0, got {duration}"
            raise ValueError(msg)
        self._selected = duration
        self._time_left = duration

    def tick(self) -> int:
        """Advance one second and return the new time left."""
        if self._time_left <= 0:
            self._time_left = self._selected
            log.debug("countdown.restarted", selected=self._selected)
        else:
            self._time_left -= 1
        return self._time_left

    def advance(self, seconds: int) -> int:
        for _ in range(max(seconds, 0)):
            self.tick()
        return self._time_left

    def formatted(self) -> str:
        return format_time(self._time_left)
