"""Exception hierarchy for keystride."""

from __future__ import annotations

from pathlib import Path


class KeystrideError(Exception):
    """Base class for all keystride errors."""


class StoreError(KeystrideError):
    """Raised when the stats file cannot be read or written."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class StoreNotFoundError(StoreError):
    pass


class StoreDecodeError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass


class CodecError(KeystrideError):
    """Raised by the binary codec on malformed input."""


class SessionError(KeystrideError):
    pass


class SessionAlreadyFinalizedError(SessionError):
    pass


class SessionNotFinishedError(SessionError):
    pass
