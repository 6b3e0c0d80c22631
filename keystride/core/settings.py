from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

import yaml

from keystride.core.config import AppConfig
from keystride.core.models import TypingDuration

logger = logging.getLogger(__name__)


class SettingsStore:
    """Persists the user's duration, layout, language and background choice.

    File: ``<data dir>/settings.yaml``. Missing or malformed entries fall back to
    the defaults of :class:`AppConfig`.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self, base: AppConfig) -> AppConfig:
        """Return *base* updated with whatever valid values the file holds."""
        if not self._file_path.exists():
            return base
        try:
            raw = yaml.safe_load(self._file_path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as e:
            logger.warning("Could not load settings from %s: %s", self._file_path, e)
            return base
        if not isinstance(raw, dict):
            logger.warning("Ignoring settings in %s: expected a mapping", self._file_path)
            return base

        config = base
        seconds = raw.get("typing_duration")
        try:
            config = replace(config, typing_duration=TypingDuration(seconds))
        except ValueError:
            if seconds is not None:
                logger.warning("Unknown typing duration %r in %s", seconds, self._file_path)
        transparent = raw.get("transparent_background")
        if isinstance(transparent, bool):
            config = replace(config, has_transparent_bg=transparent)
        layout = raw.get("layout")
        if isinstance(layout, str) and layout:
            config = replace(config, layout_name=layout)
        language = raw.get("language")
        if isinstance(language, str) and language:
            config = replace(config, language=language)
        return config

    def save(self, config: AppConfig) -> None:
        payload = {
            "typing_duration": config.typing_duration.seconds,
            "transparent_background": config.has_transparent_bg,
            "layout": config.layout_name,
            "language": config.language,
        }
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self._file_path, e)
