"""Records shared by the session engine and the stats store."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence


class TypingDuration(Enum):
    """Selectable target durations, cycled with Ctrl+d."""

    FIFTEEN_SEC = 15
    THIRTY_SEC = 30
    MINUTE = 60
    THREE_MINUTES = 180

    @property
    def seconds(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        if self.value < 60:
            return f"{self.value}s"
        return f"{self.value // 60}min"

    def next(self) -> "TypingDuration":
        """Return the following duration, wrapping around after the last one."""
        members = list(TypingDuration)
        return members[(members.index(self) + 1) % len(members)]


class ActivityKind(Enum):
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class Stat:
    """Finalized result of one typing session."""

    typing_duration: TypingDuration
    average_wpm: float
    errors_count: int
    time_secs: int
    accuracy: float

    @property
    def accuracy_percent(self) -> float:
        return self.accuracy * 100.0


@dataclass(frozen=True)
class Activity:
    """Timestamped marker written whenever a session ends."""

    timestamp: float
    kind: ActivityKind


@dataclass(frozen=True)
class StatsSummary:
    count: int
    average_wpm: float
    average_accuracy: float
    best_wpm: float


def summarize(stats: Sequence[Stat]) -> StatsSummary:
    """Averages over every recorded session; zeros when there are none."""
    if not stats:
        return StatsSummary(count=0, average_wpm=0.0, average_accuracy=0.0, best_wpm=0.0)
    return StatsSummary(
        count=len(stats),
        average_wpm=sum(s.average_wpm for s in stats) / len(stats),
        average_accuracy=sum(s.accuracy for s in stats) / len(stats),
        best_wpm=max(s.average_wpm for s in stats),
    )
