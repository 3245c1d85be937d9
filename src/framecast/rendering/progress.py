"""Progress tracking from ffmpeg's stderr status lines."""

import re
from collections.abc import Callable

_TIME_RE = re.compile(r"time=(\d+):(\d+):(\d+(?:\.\d+)?)")


def parse_timestamp(line: str) -> float | None:
    """Seconds encoded in a ``time=HH:MM:SS.ss`` status field, if any."""
    match = _TIME_RE.search(line)
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


class ProgressTracker:
    """Turns status lines into a completion fraction and milestone messages.

    A milestone message is produced each time progress crosses another ``step``
    (10% by default), which keeps the log readable for long transcodes.
    """

    def __init__(
        self,
        expected_duration: float,
        callback: Callable[[float], None] | None = None,
        step: float = 0.1,
    ):
        self.expected_duration = expected_duration
        self.callback = callback
        self.step = step
        self.encoded_seconds = 0.0
        self.messages: list[str] = []
        self._next_milestone = step

    @property
    def fraction(self) -> float:
        if self.expected_duration <= 0:
            return 0.0
        return min(1.0, self.encoded_seconds / self.expected_duration)

    def feed(self, line: str) -> float | None:
        """Consume one stderr line; returns the new fraction when it carried progress."""
        seconds = parse_timestamp(line)
        if seconds is None:
            return None
        self.encoded_seconds = seconds
        fraction = self.fraction
        if self.callback:
            self.callback(fraction)
        while self.expected_duration > 0 and fraction >= self._next_milestone - 1e-9:
            self.messages.append(f"Processing: {self._next_milestone * 100:.0f}% done")
            self._next_milestone += self.step
        return fraction

    def pop_messages(self) -> list[str]:
        messages, self.messages = self.messages, []
        return messages
