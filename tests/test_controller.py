"""Tests for keystride.core.controller – event handling and result recording."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import pytest
import yaml

from keystride.core.config import AppConfig
from keystride.core.controller import SAVE_FAILED_MESSAGE, Controller
from keystride.core.errors import StoreWriteError
from keystride.core.events import KeyCode, KeyEvent, Tick
from keystride.core.generator import LanguageRepository, TextGenerator
from keystride.core.models import ActivityKind, Stat, TypingDuration
from keystride.core.router import ScreenId
from keystride.core.session import SessionState, TypingSession
from keystride.core.settings import SettingsStore
from keystride.core.storage import StatsStore


class FakeScreen:
    def __init__(self, session: Optional[TypingSession] = None) -> None:
        self.visible = False
        self.active = False
        self.status = ""
        self.results: List[Stat] = []
        self.popup = False
        self.config: Optional[AppConfig] = None
        self._session = session

    def render(self, painter, area) -> None:
        pass

    def handle_events(self, key: KeyEvent) -> bool:
        if self._session is None or not self.active:
            return False
        if key.code is KeyCode.CHAR:
            self._session.push_char(key.char)
            return True
        if key.code is KeyCode.BACKSPACE:
            self._session.pop_char()
            return True
        return False

    def is_popup_visible(self) -> bool:
        return self.popup

    def show(self) -> None:
        self.visible = True
        self.active = True

    def hide(self) -> None:
        self.visible = False
        self.active = False
        self.popup = False

    def apply_config(self, config: AppConfig) -> None:
        self.config = config

    def show_result(self, stat: Stat) -> None:
        self.results.append(stat)
        self.popup = True

    def clear_result(self) -> None:
        self.popup = False


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def languages(tmp_path: Path) -> LanguageRepository:
    d = tmp_path / "languages"
    d.mkdir()
    (d / "alpha.yaml").write_text(yaml.safe_dump({"title": "Alpha", "words": ["ab"]}), encoding="utf-8")
    (d / "beta.yaml").write_text(yaml.safe_dump({"title": "Beta", "words": ["cd"]}), encoding="utf-8")
    return LanguageRepository(d)


@pytest.fixture()
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        typing_duration=TypingDuration.FIFTEEN_SEC,
        layout_name="one",
        language="alpha",
        data_dir=tmp_path / "home",
    )


@pytest.fixture()
def app(config: AppConfig, languages: LanguageRepository):
    store = StatsStore(config.stats_path).init()
    generator = TextGenerator(languages, config.language)
    session = TypingSession(generator, config.typing_duration)
    typing_screen = FakeScreen(session=session)
    stats_screen = FakeScreen()
    controller = Controller(
        config=config,
        store=store,
        languages=languages,
        session=session,
        text_generator=generator,
        typing_screen=typing_screen,
        stats_screen=stats_screen,
        layouts=["one", "two"],
        settings=SettingsStore(config.settings_path),
    )
    return controller, typing_screen, stats_screen


def type_all(controller: Controller) -> None:
    for c in controller.session.text:
        controller.handle(KeyEvent.of_char(c))


def ctrl(c: str) -> KeyEvent:
    return KeyEvent.of_char(c, ctrl=True)


# ---------------------------------------------------------------------------
# Ticks
# ---------------------------------------------------------------------------

class TestTicks:
    def test_idle_ticks_do_not_count(self, app):
        controller, _, _ = app
        controller.handle(Tick())
        assert controller.clock.elapsed == 0
        assert controller.remaining_secs() == 15

    def test_running_ticks_count(self, app):
        controller, _, _ = app
        controller.handle(KeyEvent.of_char("a"))
        controller.handle(Tick())
        controller.handle(Tick())
        assert controller.clock.elapsed == 2
        assert controller.session.elapsed_secs == 2

    def test_timeout_records_once(self, app):
        controller, typing_screen, _ = app
        controller.handle(KeyEvent.of_char("a"))
        for _ in range(20):
            controller.handle(Tick())
        assert controller.session.state is SessionState.TIMED_OUT
        assert controller.remaining_secs() == 0
        assert len(controller.store.stats) == 1
        assert controller.store.activities[0].kind is ActivityKind.TIMED_OUT
        assert len(typing_screen.results) == 1


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------

class TestCompletion:
    def test_completion_inserts_and_flushes(self, app, config: AppConfig):
        controller, typing_screen, _ = app
        controller.handle(KeyEvent.of_char("a"))
        for _ in range(3):
            controller.handle(Tick())
        for c in controller.session.text[1:]:
            controller.handle(KeyEvent.of_char(c))
        assert controller.session.state is SessionState.COMPLETED
        reloaded = StatsStore(config.stats_path).init()
        assert len(reloaded.stats) == 1
        assert reloaded.stats[0].time_secs == 3
        assert reloaded.stats[0].typing_duration is TypingDuration.FIFTEEN_SEC
        assert reloaded.activities[0].kind is ActivityKind.COMPLETED
        assert typing_screen.popup

    def test_further_events_do_not_insert_again(self, app):
        controller, _, _ = app
        type_all(controller)
        controller.handle(KeyEvent.of_char("x"))
        controller.handle(Tick())
        controller.handle(KeyEvent(KeyCode.BACKSPACE))
        assert len(controller.store.stats) == 1

    def test_popup_deactivates_screen_on_render(self, app):
        controller, typing_screen, _ = app
        type_all(controller)
        controller.before_render()
        assert not typing_screen.active
        assert typing_screen.visible

    def test_flush_failure_is_reported(self, app, monkeypatch: pytest.MonkeyPatch):
        controller, typing_screen, _ = app

        def broken_replace(src, dst):
            raise PermissionError("read-only")

        monkeypatch.setattr(os, "replace", broken_replace)
        type_all(controller)
        assert typing_screen.status == SAVE_FAILED_MESSAGE
        assert len(controller.store.stats) == 1
        assert not controller.is_exit

    def test_reset_after_failure_keeps_session_usable(self, app, monkeypatch: pytest.MonkeyPatch):
        controller, typing_screen, _ = app
        def broken_replace(src, dst):
            raise OSError("full")

        monkeypatch.setattr(os, "replace", broken_replace)
        type_all(controller)
        controller.handle(ctrl("r"))
        assert typing_screen.status == ""
        controller.handle(KeyEvent.of_char("a"))
        assert controller.session.is_running()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class TestCommands:
    def test_reset(self, app):
        controller, typing_screen, _ = app
        controller.handle(KeyEvent.of_char("a"))
        controller.handle(Tick())
        controller.handle(ctrl("r"))
        assert controller.clock.elapsed == 0
        assert controller.session.cursor == 0
        assert controller.session.state is SessionState.IDLE

    def test_switch_screens(self, app):
        controller, typing_screen, stats_screen = app
        controller.handle(ctrl("l"))
        assert controller.router.active_id is ScreenId.STATS
        assert stats_screen.visible and not typing_screen.visible
        controller.handle(ctrl("h"))
        assert controller.router.active_id is ScreenId.TYPING

    def test_arrow_navigation(self, app):
        controller, _, _ = app
        controller.handle(KeyEvent(KeyCode.RIGHT))
        assert controller.router.active_id is ScreenId.STATS
        controller.handle(KeyEvent(KeyCode.LEFT))
        assert controller.router.active_id is ScreenId.TYPING

    def test_cycle_duration_resets_and_saves(self, app, config: AppConfig):
        controller, typing_screen, _ = app
        controller.handle(KeyEvent.of_char("a"))
        controller.handle(ctrl("d"))
        assert controller.config.typing_duration is TypingDuration.THIRTY_SEC
        assert controller.session.duration is TypingDuration.THIRTY_SEC
        assert controller.session.cursor == 0
        assert typing_screen.config.typing_duration is TypingDuration.THIRTY_SEC
        saved = SettingsStore(config.settings_path).load(AppConfig())
        assert saved.typing_duration is TypingDuration.THIRTY_SEC

    def test_toggle_transparent(self, app):
        controller, _, stats_screen = app
        controller.handle(ctrl("t"))
        assert controller.config.has_transparent_bg
        assert stats_screen.config.has_transparent_bg
        controller.handle(ctrl("t"))
        assert not controller.config.has_transparent_bg

    def test_cycle_layout_wraps(self, app):
        controller, _, _ = app
        controller.handle(ctrl("s"))
        assert controller.config.layout_name == "two"
        controller.handle(ctrl("s"))
        assert controller.config.layout_name == "one"

    def test_cycle_language_regenerates_text(self, app):
        controller, _, _ = app
        assert set(controller.session.text.split()) == {"ab"}
        controller.handle(ctrl("p"))
        assert controller.config.language == "beta"
        assert set(controller.session.text.split()) == {"cd"}

    def test_config_snapshots_are_immutable(self, app):
        controller, typing_screen, _ = app
        before = typing_screen.config
        controller.handle(ctrl("s"))
        assert before.layout_name == "one"
        assert typing_screen.config is controller.config


# ---------------------------------------------------------------------------
# Exit
# ---------------------------------------------------------------------------

class TestExit:
    @pytest.mark.parametrize("key", [KeyEvent(KeyCode.ESC), KeyEvent.of_char("c", ctrl=True)])
    def test_exit_flushes(self, app, config: AppConfig, key: KeyEvent):
        controller, _, _ = app
        controller.store.stats.append(Stat(TypingDuration.MINUTE, 1.0, 0, 60, 1.0))
        controller.handle(key)
        assert controller.is_exit
        assert len(StatsStore(config.stats_path).init().stats) == 1

    def test_exit_flush_failure_is_raised(self, app, monkeypatch: pytest.MonkeyPatch):
        controller, _, _ = app

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(StoreWriteError):
            controller.handle(KeyEvent(KeyCode.ESC))
        assert controller.is_exit

    def test_unknown_event_type(self, app):
        controller, _, _ = app
        with pytest.raises(TypeError):
            controller.handle("tick")
