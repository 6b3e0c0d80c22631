"""Inbound events: key presses and one-second ticks share one ordered queue."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Optional, Union


class KeyCode(Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    ENTER = "enter"
    ESC = "esc"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    OTHER = "other"


@dataclass(frozen=True)
class KeyEvent:
    code: KeyCode
    char: str = ""
    ctrl: bool = False

    @classmethod
    def of_char(cls, char: str, ctrl: bool = False) -> "KeyEvent":
        return cls(KeyCode.CHAR, char=char, ctrl=ctrl)


@dataclass(frozen=True)
class Tick:
    pass


Event = Union[KeyEvent, Tick]


class EventQueue:
    """FIFO of key and tick events, consumed one at a time by the main loop."""

    def __init__(self) -> None:
        self._events: Deque[Event] = deque()

    def push(self, event: Event) -> None:
        self._events.append(event)

    def pop(self) -> Optional[Event]:
        if not self._events:
            return None
        return self._events.popleft()

    def __len__(self) -> int:
        return len(self._events)
