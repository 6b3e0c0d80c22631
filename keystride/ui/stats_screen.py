"""Stats screen: history table (most recent first) and averages."""

from __future__ import annotations

from PySide6.QtCore import QRect, Qt
from PySide6.QtGui import QColor, QFontMetrics, QPainter

from keystride.core.events import KeyCode, KeyEvent
from keystride.core.models import summarize
from keystride.core.storage import StatsStore
from keystride.ui.base_screen import MARGIN, BaseScreen, mono_font, split_instructions_area, ui_font

COLUMNS = (("#", 6), ("Duration", 12), ("WPM", 10), ("Accuracy", 12), ("Errors", 10), ("Time", 8))


class StatsScreen(BaseScreen):
    instructions = [
        ("Esc", "Exit"),
        ("Up/Down", "Scroll"),
        ("Left", "Typing"),
    ]

    def __init__(self, store: StatsStore) -> None:
        super().__init__()
        self._store = store
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    def hide(self) -> None:
        super().hide()
        self._offset = 0

    def handle_events(self, key: KeyEvent) -> bool:
        if not self.active:
            return False
        if key.code is KeyCode.DOWN:
            self._offset = min(self._offset + 1, max(0, len(self._store.stats) - 1))
            return True
        if key.code is KeyCode.UP:
            self._offset = max(0, self._offset - 1)
            return True
        return False

    def render(self, painter: QPainter, area: QRect) -> None:
        palette = self.palette
        self.fill_background(painter, area)
        content, strip = split_instructions_area(area)
        inner = content.adjusted(MARGIN, MARGIN, -MARGIN, -MARGIN)
        stats = self._store.get_reversed()
        summary = summarize(stats)

        painter.save()
        title_font = ui_font(13, bold=True)
        title_height = QFontMetrics(title_font).height()
        painter.setFont(title_font)
        painter.setPen(QColor(palette.text))
        painter.drawText(
            QRect(inner.left(), inner.top(), inner.width(), title_height),
            Qt.AlignLeft | Qt.AlignVCenter,
            f"{summary.count} sessions   average {summary.average_wpm:.1f} wpm   "
            f"{summary.average_accuracy * 100:.1f}% accuracy   best {summary.best_wpm:.1f} wpm",
        )

        font = mono_font(12)
        metrics = QFontMetrics(font)
        row_height = int(metrics.height() * 1.4)
        painter.setFont(font)
        top = inner.top() + title_height + 16

        painter.setPen(QColor(palette.accent))
        painter.drawText(QRect(inner.left(), top, inner.width(), row_height), Qt.AlignLeft, _row([c for c, _ in COLUMNS]))
        top += row_height

        if not stats:
            painter.setPen(QColor(palette.muted))
            painter.drawText(QRect(inner.left(), top, inner.width(), row_height), Qt.AlignLeft, "No results yet")

        total = len(stats)
        for position, stat in enumerate(stats[self._offset:], start=self._offset):
            if top + row_height > inner.bottom():
                break
            cells = [
                str(total - position),
                stat.typing_duration.label,
                f"{stat.average_wpm:.1f}",
                f"{stat.accuracy_percent:.1f}%",
                str(stat.errors_count),
                f"{stat.time_secs}s",
            ]
            painter.setPen(QColor(palette.text if position % 2 == 0 else palette.muted))
            painter.drawText(QRect(inner.left(), top, inner.width(), row_height), Qt.AlignLeft, _row(cells))
            top += row_height
        painter.restore()

        self.render_instructions(painter, strip)


def _row(cells) -> str:
    return "".join(cell.ljust(width) for cell, (_, width) in zip(cells, COLUMNS))
