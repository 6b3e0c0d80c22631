from __future__ import annotations

from keystride.core.session import TypingSession


class Clock:
    """Counts whole seconds from the one-second tick, only while typing is running."""

    def __init__(self) -> None:
        self._elapsed = 0

    @property
    def elapsed(self) -> int:
        return self._elapsed

    def on_tick(self, session: TypingSession) -> bool:
        """Advance by one second if *session* is running. Returns True when counted."""
        if not session.is_running():
            return False
        self._elapsed += 1
        return True

    def remaining(self, total_duration: int) -> int:
        return max(0, total_duration - self._elapsed)

    def reset(self) -> None:
        self._elapsed = 0
