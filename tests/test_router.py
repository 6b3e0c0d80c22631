"""Tests for keystride.core.router – screen switching and key dispatch."""

from __future__ import annotations

from typing import List

import pytest

from keystride.core.events import KeyCode, KeyEvent
from keystride.core.router import Command, ScreenId, ScreenRouter


class FakeScreen:
    def __init__(self, consumes: bool = False) -> None:
        self.visible = False
        self.active = False
        self.popup = False
        self.consumes = consumes
        self.received: List[KeyEvent] = []
        self.hidden = 0

    def render(self, painter, area) -> None:
        pass

    def handle_events(self, key: KeyEvent) -> bool:
        self.received.append(key)
        return self.consumes

    def is_popup_visible(self) -> bool:
        return self.popup

    def show(self) -> None:
        self.visible = True
        self.active = True

    def hide(self) -> None:
        self.visible = False
        self.active = False
        self.popup = False
        self.hidden += 1


@pytest.fixture()
def screens():
    return FakeScreen(consumes=True), FakeScreen()


@pytest.fixture()
def router(screens) -> ScreenRouter:
    return ScreenRouter(*screens)


# ---------------------------------------------------------------------------
# switching
# ---------------------------------------------------------------------------

class TestSwitch:
    def test_starts_on_typing(self, router: ScreenRouter, screens):
        typing, stats = screens
        assert router.active_id is ScreenId.TYPING
        assert typing.visible and not stats.visible

    def test_switch_hides_previous(self, router: ScreenRouter, screens):
        typing, stats = screens
        typing.popup = True
        router.switch_to(ScreenId.STATS)
        assert not typing.visible
        assert not typing.popup
        assert stats.visible and stats.active
        assert router.active_screen is stats

    def test_switch_to_same_screen_keeps_it(self, router: ScreenRouter, screens):
        typing, _ = screens
        hidden = typing.hidden
        router.switch_to(ScreenId.TYPING)
        assert typing.visible
        assert typing.hidden == hidden


# ---------------------------------------------------------------------------
# sync_flags
# ---------------------------------------------------------------------------

class TestSyncFlags:
    def test_popup_makes_inactive(self, router: ScreenRouter, screens):
        typing, _ = screens
        typing.popup = True
        router.sync_flags()
        assert not typing.active

    def test_recomputed_every_pass(self, router: ScreenRouter, screens):
        typing, _ = screens
        typing.popup = True
        router.sync_flags()
        typing.popup = False
        router.sync_flags()
        assert typing.active

    def test_visibility_is_independent(self, router: ScreenRouter, screens):
        typing, _ = screens
        typing.popup = True
        router.sync_flags()
        assert typing.visible


# ---------------------------------------------------------------------------
# dispatch
# ---------------------------------------------------------------------------

class TestDispatch:
    @pytest.mark.parametrize(
        "char, command",
        [
            ("r", Command.RESET),
            ("l", Command.SHOW_STATS),
            ("h", Command.SHOW_TYPING),
            ("c", Command.EXIT),
            ("d", Command.CYCLE_DURATION),
            ("t", Command.TOGGLE_TRANSPARENT),
            ("s", Command.CYCLE_LAYOUT),
            ("p", Command.CYCLE_LANGUAGE),
        ],
    )
    def test_reserved_keys(self, router: ScreenRouter, screens, char, command):
        assert router.dispatch(KeyEvent.of_char(char, ctrl=True)) is command
        assert screens[0].received == []

    def test_unknown_ctrl_key_never_reaches_screen(self, router: ScreenRouter, screens):
        assert router.dispatch(KeyEvent.of_char("x", ctrl=True)) is None
        assert router.dispatch(KeyEvent(KeyCode.LEFT, ctrl=True)) is None
        assert screens[0].received == []

    def test_screen_gets_first_refusal(self, router: ScreenRouter, screens):
        key = KeyEvent(KeyCode.ESC)
        assert router.dispatch(key) is None
        assert screens[0].received == [key]

    @pytest.mark.parametrize(
        "code, command",
        [
            (KeyCode.ESC, Command.EXIT),
            (KeyCode.LEFT, Command.SHOW_TYPING),
            (KeyCode.RIGHT, Command.SHOW_STATS),
        ],
    )
    def test_navigation_when_unconsumed(self, router: ScreenRouter, code, command):
        router.switch_to(ScreenId.STATS)
        assert router.dispatch(KeyEvent(code)) is command

    def test_unconsumed_plain_key(self, router: ScreenRouter):
        router.switch_to(ScreenId.STATS)
        assert router.dispatch(KeyEvent.of_char("a")) is None
