from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any, List, Optional, Protocol, Sequence

from keystride.core.clock import Clock
from keystride.core.config import AppConfig
from keystride.core.events import Event, KeyEvent, Tick
from keystride.core.generator import LanguageRepository, TextGenerator
from keystride.core.models import Activity, ActivityKind, Stat
from keystride.core.router import Command, Screen, ScreenId, ScreenRouter
from keystride.core.session import SessionState, TypingSession
from keystride.core.settings import SettingsStore
from keystride.core.storage import StatsStore

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Could not save the result, it will be retried on exit"


class ConfigurableScreen(Screen, Protocol):
    def apply_config(self, config: AppConfig) -> None: ...


class TypingView(ConfigurableScreen, Protocol):
    status: str

    def show_result(self, stat: Stat) -> None: ...

    def clear_result(self) -> None: ...


class Controller:
    """Single owner of the session, clock, store and configuration.

    Every inbound event goes through :meth:`handle`; the window renders once
    after each call.
    """

    def __init__(
        self,
        config: AppConfig,
        store: StatsStore,
        languages: LanguageRepository,
        session: TypingSession,
        text_generator: TextGenerator,
        typing_screen: TypingView,
        stats_screen: ConfigurableScreen,
        layouts: Sequence[str],
        settings: Optional[SettingsStore] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = config
        self._store = store
        self._languages = languages
        self._session = session
        self._text_generator = text_generator
        self._typing_screen = typing_screen
        self._stats_screen = stats_screen
        self._layouts: List[str] = list(layouts)
        self._settings = settings
        self._clock = clock or Clock()
        self._router = ScreenRouter(typing_screen, stats_screen)
        self.is_exit = False
        self._broadcast_config()

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def session(self) -> TypingSession:
        return self._session

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def router(self) -> ScreenRouter:
        return self._router

    @property
    def store(self) -> StatsStore:
        return self._store

    def remaining_secs(self) -> int:
        return self._clock.remaining(self._session.duration.seconds)

    def handle(self, event: Event) -> None:
        """Apply one key or tick event.

        Raises StoreWriteError when the final flush on exit fails.
        """
        if isinstance(event, Tick):
            if self._clock.on_tick(self._session):
                self._session.tick(self._clock.elapsed, self._session.duration.seconds)
        elif isinstance(event, KeyEvent):
            command = self._router.dispatch(event)
            if command is not None:
                self.execute(command)
        else:
            raise TypeError(f"unexpected event {event!r}")

        if not self.is_exit:
            self._record_if_finished()

    def before_render(self) -> None:
        self._router.sync_flags()

    def execute(self, command: Command) -> None:
        if command is Command.RESET:
            self.reset()
        elif command is Command.SHOW_STATS:
            self._router.switch_to(ScreenId.STATS)
        elif command is Command.SHOW_TYPING:
            self._router.switch_to(ScreenId.TYPING)
        elif command is Command.EXIT:
            self.exit()
        elif command is Command.CYCLE_DURATION:
            self._update_config(typing_duration=self._config.typing_duration.next())
            self.reset()
        elif command is Command.TOGGLE_TRANSPARENT:
            self._update_config(has_transparent_bg=not self._config.has_transparent_bg)
        elif command is Command.CYCLE_LAYOUT:
            self._update_config(layout_name=self._next_layout())
        elif command is Command.CYCLE_LANGUAGE:
            self._update_config(language=self._languages.next_language(self._config.language))
            self.reset()

    def reset(self) -> None:
        self._clock.reset()
        self._text_generator.language = self._config.language
        self._session.start(self._config.typing_duration)
        self._typing_screen.clear_result()
        self._typing_screen.status = ""

    def exit(self) -> None:
        """Stop the loop after one last flush; a failing flush propagates."""
        self.is_exit = True
        self._store.flush()
        logger.info("Saved %d results to %s", len(self._store.stats), self._store.file_path)

    def _record_if_finished(self) -> None:
        session = self._session
        if not session.is_finished() or session.finalized:
            return
        stat = session.finalize()
        kind = ActivityKind.COMPLETED if session.state is SessionState.COMPLETED else ActivityKind.TIMED_OUT
        self._store.add_activity(Activity(timestamp=time.time(), kind=kind))
        logger.info(
            "Session %s: %.1f wpm, %d errors, %.0f%% accuracy",
            kind.value,
            stat.average_wpm,
            stat.errors_count,
            stat.accuracy_percent,
        )
        if not self._store.insert(stat):
            self._typing_screen.status = SAVE_FAILED_MESSAGE
        self._typing_screen.show_result(stat)

    def _next_layout(self) -> str:
        if self._config.layout_name not in self._layouts:
            return self._layouts[0]
        index = self._layouts.index(self._config.layout_name)
        return self._layouts[(index + 1) % len(self._layouts)]

    def _update_config(self, **changes: Any) -> None:
        self._config = replace(self._config, **changes)
        if self._settings is not None:
            self._settings.save(self._config)
        self._broadcast_config()

    def _broadcast_config(self) -> None:
        self._typing_screen.apply_config(self._config)
        self._stats_screen.apply_config(self._config)
