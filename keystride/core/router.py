from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Protocol

from keystride.core.events import KeyCode, KeyEvent


class ScreenId(Enum):
    TYPING = "typing"
    STATS = "stats"


class Command(Enum):
    RESET = "reset"
    SHOW_STATS = "show_stats"
    SHOW_TYPING = "show_typing"
    EXIT = "exit"
    CYCLE_DURATION = "cycle_duration"
    TOGGLE_TRANSPARENT = "toggle_transparent"
    CYCLE_LAYOUT = "cycle_layout"
    CYCLE_LANGUAGE = "cycle_language"


# Ctrl + key; these never reach a screen.
RESERVED_KEYS: Dict[str, Command] = {
    "r": Command.RESET,
    "l": Command.SHOW_STATS,
    "h": Command.SHOW_TYPING,
    "c": Command.EXIT,
    "d": Command.CYCLE_DURATION,
    "t": Command.TOGGLE_TRANSPARENT,
    "s": Command.CYCLE_LAYOUT,
    "p": Command.CYCLE_LANGUAGE,
}

NAVIGATION_KEYS: Dict[KeyCode, Command] = {
    KeyCode.ESC: Command.EXIT,
    KeyCode.LEFT: Command.SHOW_TYPING,
    KeyCode.RIGHT: Command.SHOW_STATS,
}


class Screen(Protocol):
    visible: bool
    active: bool

    def render(self, painter: Any, area: Any) -> None: ...

    def handle_events(self, key: KeyEvent) -> bool: ...

    def is_popup_visible(self) -> bool: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...


class ScreenRouter:
    """Selects between the typing and stats screens and routes keys to them."""

    def __init__(self, typing_screen: Screen, stats_screen: Screen) -> None:
        self._screens: Dict[ScreenId, Screen] = {
            ScreenId.TYPING: typing_screen,
            ScreenId.STATS: stats_screen,
        }
        self._active_id = ScreenId.TYPING
        stats_screen.hide()
        typing_screen.show()

    @property
    def active_id(self) -> ScreenId:
        return self._active_id

    @property
    def active_screen(self) -> Screen:
        return self._screens[self._active_id]

    def screen(self, screen_id: ScreenId) -> Screen:
        return self._screens[screen_id]

    def switch_to(self, target: ScreenId) -> None:
        if target is not self._active_id:
            self.active_screen.hide()
        self._active_id = target
        self.active_screen.show()

    def sync_flags(self) -> None:
        """Run once per render pass: a screen showing a popup is not active."""
        screen = self.active_screen
        screen.active = not screen.is_popup_visible()

    def dispatch(self, key: KeyEvent) -> Optional[Command]:
        """Route *key*; returns the global command it maps to, if any."""
        if key.ctrl:
            if key.code is KeyCode.CHAR:
                return RESERVED_KEYS.get(key.char.lower())
            return None

        if self.active_screen.handle_events(key):
            return None

        return NAVIGATION_KEYS.get(key.code)
