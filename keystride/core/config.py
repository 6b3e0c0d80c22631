from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from keystride.core.models import TypingDuration

DEFAULT_LAYOUT = "iced"
DEFAULT_LANGUAGE = "english"


def default_data_dir() -> Path:
    """``$KEYSTRIDE_HOME`` when set, otherwise ``~/.keystride``."""
    override = os.environ.get("KEYSTRIDE_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".keystride"


@dataclass(frozen=True)
class AppConfig:
    """Snapshot of the user-facing configuration.

    Only the controller creates new snapshots; screens receive them read-only.
    """

    typing_duration: TypingDuration = TypingDuration.MINUTE
    has_transparent_bg: bool = False
    layout_name: str = DEFAULT_LAYOUT
    language: str = DEFAULT_LANGUAGE
    data_dir: Path = Path(".keystride")

    @property
    def stats_path(self) -> Path:
        return self.data_dir / "stats.bin"

    @property
    def settings_path(self) -> Path:
        return self.data_dir / "settings.yaml"
