"""Shared state and painting helpers for the two screens."""

from __future__ import annotations

from typing import List, Tuple

from PySide6.QtCore import QRect, Qt
from PySide6.QtGui import QColor, QFont, QFontDatabase, QPainter

from keystride.core.config import AppConfig
from keystride.core.events import KeyEvent
from keystride.ui.colors import Palette, palette_for

MARGIN = 32
INSTRUCTIONS_HEIGHT = 36

# (key, label); the first entry is drawn in the accent colour.
Instruction = Tuple[str, str]


class BaseScreen:
    """Visibility/activity flags plus the config snapshot every screen needs."""

    instructions: List[Instruction] = []

    def __init__(self) -> None:
        self.visible = False
        self.active = False
        self._config = AppConfig()
        self._palette: Palette = palette_for(self._config.layout_name)

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def palette(self) -> Palette:
        return self._palette

    def apply_config(self, config: AppConfig) -> None:
        self._config = config
        self._palette = palette_for(config.layout_name)

    def show(self) -> None:
        self.visible = True
        self.active = True

    def hide(self) -> None:
        self.visible = False
        self.active = False

    def is_popup_visible(self) -> bool:
        return False

    def handle_events(self, key: KeyEvent) -> bool:
        return False

    def render(self, painter: QPainter, area: QRect) -> None:
        raise NotImplementedError

    def fill_background(self, painter: QPainter, area: QRect) -> None:
        painter.fillRect(area, QColor(self._palette.background))

    def render_instructions(self, painter: QPainter, area: QRect) -> None:
        painter.save()
        painter.setFont(ui_font(10))
        parts = [f"<{key}>{label}" for key, label in self.instructions]
        painter.setPen(QColor(self._palette.muted))
        painter.drawText(area, Qt.AlignCenter, "   ".join(parts))
        painter.restore()


def mono_font(point_size: int = 16) -> QFont:
    font = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont)
    font.setPointSize(point_size)
    return font


def ui_font(point_size: int = 11, bold: bool = False) -> QFont:
    font = QFontDatabase.systemFont(QFontDatabase.SystemFont.GeneralFont)
    font.setPointSize(point_size)
    font.setBold(bold)
    return font


def split_instructions_area(area: QRect) -> Tuple[QRect, QRect]:
    """Split *area* into the content rect and the bottom instructions strip."""
    content = QRect(area.left(), area.top(), area.width(), max(0, area.height() - INSTRUCTIONS_HEIGHT))
    strip = QRect(area.left(), content.bottom() + 1, area.width(), INSTRUCTIONS_HEIGHT)
    return content, strip
