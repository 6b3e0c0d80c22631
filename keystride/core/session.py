from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List, Set

from keystride.core.errors import SessionAlreadyFinalizedError, SessionNotFinishedError
from keystride.core.models import Stat, TypingDuration

TextSource = Callable[[TypingDuration], str]


class SessionState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"


class Classification(Enum):
    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class TypingSession:
    """Scores one typing attempt against generated text.

    Each typed position is classified once, when the cursor passes it, and the
    result is cached so that repeated rendering never counts a mistake twice.
    Errors are counted per position: fixing a mistake with backspace does not
    refund it, and mistyping the same position again does not add another.

    Speed uses the usual five-characters-per-word convention:
      * **WPM** – (correct characters / 5) / elapsed minutes.
      * **Accuracy** – correct / (correct + errors).
    """

    def __init__(self, text_source: TextSource, duration: TypingDuration = TypingDuration.MINUTE) -> None:
        self._text_source = text_source
        self._duration = duration
        self._text = ""
        self._input: List[str] = []
        self._classified: Dict[int, Classification] = {}
        self._error_positions: Set[int] = set()
        self._state = SessionState.IDLE
        self._elapsed_secs = 0
        self._finalized = False
        self.start(duration)

    def start(self, duration: TypingDuration) -> None:
        """Begin a fresh attempt with newly generated text."""
        self._duration = duration
        self._text = self._text_source(duration)
        self._input = []
        self._classified = {}
        self._error_positions = set()
        self._state = SessionState.IDLE
        self._elapsed_secs = 0
        self._finalized = False

    def reset(self) -> None:
        self.start(self._duration)

    @property
    def text(self) -> str:
        return self._text

    @property
    def typed(self) -> str:
        return "".join(self._input)

    @property
    def cursor(self) -> int:
        return len(self._input)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def duration(self) -> TypingDuration:
        return self._duration

    @property
    def elapsed_secs(self) -> int:
        return self._elapsed_secs

    @property
    def errors_count(self) -> int:
        return len(self._error_positions)

    @property
    def correct_count(self) -> int:
        return sum(1 for c in self._classified.values() if c is Classification.CORRECT)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def is_running(self) -> bool:
        return self._state is SessionState.RUNNING

    def is_finished(self) -> bool:
        return self._state in (SessionState.COMPLETED, SessionState.TIMED_OUT)

    def run(self) -> None:
        if self._state is SessionState.IDLE:
            self._state = SessionState.RUNNING

    def push_char(self, c: str) -> None:
        if self.is_finished() or self.cursor >= len(self._text):
            return
        self.run()
        self._input.append(c)
        self.classify(self.cursor - 1)
        if self.cursor == len(self._text):
            self._state = SessionState.COMPLETED

    def pop_char(self) -> None:
        if self.cursor == 0 or self.is_finished():
            return
        self._input.pop()
        self._classified.pop(self.cursor, None)

    def tick(self, elapsed_secs: int, total_duration: int) -> None:
        self._elapsed_secs = elapsed_secs
        if self._state is SessionState.RUNNING and total_duration - elapsed_secs <= 0:
            self._state = SessionState.TIMED_OUT

    def classify(self, index: int) -> Classification:
        """Return the tag for *index*, computing and caching it on first use."""
        if index < 0 or index >= self.cursor:
            return Classification.PENDING
        cached = self._classified.get(index)
        if cached is not None:
            return cached
        if self._input[index] == self._text[index]:
            result = Classification.CORRECT
        else:
            result = Classification.INCORRECT
            self._error_positions.add(index)
        self._classified[index] = result
        return result

    def classifications(self) -> List[Classification]:
        """Tags for every position of the text, in order."""
        return [self.classify(i) for i in range(len(self._text))]

    def finalize(self) -> Stat:
        """Build the result record. Allowed once, after the attempt has ended."""
        if self._finalized:
            raise SessionAlreadyFinalizedError("session result was already recorded")
        if not self.is_finished():
            raise SessionNotFinishedError(f"session is {self._state.value}")
        self._finalized = True

        correct = self.correct_count
        errors = self.errors_count
        elapsed_minutes = self._elapsed_secs / 60.0
        wpm = (correct / 5.0) / elapsed_minutes if elapsed_minutes > 0 else 0.0
        attempted = correct + errors
        accuracy = correct / attempted if attempted else 0.0

        return Stat(
            typing_duration=self._duration,
            average_wpm=wpm,
            errors_count=errors,
            time_secs=self._elapsed_secs,
            accuracy=accuracy,
        )
