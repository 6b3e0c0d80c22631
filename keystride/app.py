"""Application entry point and setup for keystride."""

import logging
import os
import sys
from dataclasses import replace

from PySide6.QtWidgets import QApplication

from keystride.core.clock import Clock
from keystride.core.config import AppConfig, default_data_dir
from keystride.core.controller import Controller
from keystride.core.errors import StoreError
from keystride.core.generator import LanguageRepository, TextGenerator
from keystride.core.session import TypingSession
from keystride.core.settings import SettingsStore
from keystride.core.storage import StatsStore
from keystride.ui.colors import layout_names
from keystride.ui.main_window import MainWindow
from keystride.ui.stats_screen import StatsScreen
from keystride.ui.typing_screen import TypingScreen


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    level = logging.DEBUG if os.environ.get("KEYSTRIDE_DEBUG") == "1" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def load_config() -> AppConfig:
    """Defaults, the data directory, then whatever settings.yaml overrides."""
    base = AppConfig(data_dir=default_data_dir())
    return SettingsStore(base.settings_path).load(base)


def build_controller(config: AppConfig) -> Controller:
    """Wire the store, session and screens around a single controller."""
    store = StatsStore(config.stats_path).init()
    languages = LanguageRepository()
    if config.language not in languages.keys():
        fallback = languages.keys()[0]
        logging.warning("Unknown language %r, using %r", config.language, fallback)
        config = replace(config, language=fallback)
    text_generator = TextGenerator(languages, config.language)
    session = TypingSession(text_generator, config.typing_duration)

    clock = Clock()
    typing_screen = TypingScreen(session, clock)
    controller = Controller(
        config=config,
        store=store,
        languages=languages,
        session=session,
        text_generator=text_generator,
        typing_screen=typing_screen,
        stats_screen=StatsScreen(store),
        layouts=layout_names(),
        settings=SettingsStore(config.settings_path),
        clock=clock,
    )
    return controller


def run() -> None:
    """Initialize the application, load the stats file, and start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("keystride")
    app.setApplicationDisplayName("keystride")

    config = load_config()
    try:
        controller = build_controller(config)
    except StoreError as e:
        logging.error("Could not open the stats file: %s", e)
        sys.exit(1)

    window = MainWindow(controller)
    window.resize(1100, 640)
    window.show()

    code = app.exec()
    sys.exit(code or window.exit_code)


if __name__ == "__main__":
    run()
