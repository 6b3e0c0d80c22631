"""Typing practice screen: generated text, live colouring, timer and result popup."""

from __future__ import annotations

from typing import List, Optional, Tuple

from PySide6.QtCore import QRect, Qt
from PySide6.QtGui import QColor, QFontMetrics, QPainter, QPen

from keystride.core.clock import Clock
from keystride.core.events import KeyCode, KeyEvent
from keystride.core.models import Stat
from keystride.core.session import Classification, TypingSession
from keystride.ui.base_screen import (
    MARGIN,
    BaseScreen,
    mono_font,
    split_instructions_area,
    ui_font,
)


def wrap_indices(text: str, columns: int) -> List[Tuple[int, int]]:
    """Greedy word wrap returning ``(start, end)`` slices of *text*.

    Spaces stay attached to the word before them so every index of *text*
    belongs to exactly one line. Words longer than *columns* are split.
    """
    columns = max(1, columns)
    lines: List[Tuple[int, int]] = []
    start = 0
    i = 0
    n = len(text)
    while i < n:
        j = i
        while j < n and text[j] != " ":
            j += 1
        while j < n and text[j] == " ":
            j += 1
        if j - start > columns and i > start:
            lines.append((start, i))
            start = i
            continue
        while j - start > columns:
            lines.append((start, start + columns))
            start += columns
        i = j
    if start < n or not lines:
        lines.append((start, n))
    return lines


class TypingScreen(BaseScreen):
    instructions = [
        ("Esc", "Exit"),
        ("Ctrl-r", "Reset"),
        ("Ctrl-d", "Duration"),
        ("Ctrl-p", "Language"),
        ("Ctrl-s", "Layout"),
        ("Ctrl-t", "Transparent"),
        ("Right", "Stats"),
    ]

    def __init__(self, session: TypingSession, clock: Clock) -> None:
        super().__init__()
        self._session = session
        self._clock = clock
        self._result: Optional[Stat] = None
        self._popup_visible = False
        self.status = ""

    @property
    def result(self) -> Optional[Stat]:
        return self._result

    def show_result(self, stat: Stat) -> None:
        self._result = stat
        self._popup_visible = True

    def clear_result(self) -> None:
        self._result = None
        self._popup_visible = False

    def is_popup_visible(self) -> bool:
        return self._popup_visible

    def hide(self) -> None:
        super().hide()
        self._popup_visible = False

    def handle_events(self, key: KeyEvent) -> bool:
        if not self.active:
            return False
        if key.code is KeyCode.CHAR:
            self._session.push_char(key.char)
            return True
        if key.code is KeyCode.BACKSPACE:
            self._session.pop_char()
            return True
        return False

    def render(self, painter: QPainter, area: QRect) -> None:
        self.fill_background(painter, area)
        content, strip = split_instructions_area(area)
        inner = content.adjusted(MARGIN, MARGIN, -MARGIN, -MARGIN)

        header_height = self._render_header(painter, inner)
        text_area = inner.adjusted(0, header_height + 16, 0, -24)
        self._render_text(painter, text_area)
        self._render_status(painter, QRect(inner.left(), inner.bottom() - 20, inner.width(), 20))
        self.render_instructions(painter, strip)

        if self._popup_visible and self._result is not None:
            self._render_popup(painter, area, self._result)

    def _render_header(self, painter: QPainter, area: QRect) -> int:
        palette = self.palette
        font = ui_font(12, bold=True)
        height = QFontMetrics(font).height()
        row = QRect(area.left(), area.top(), area.width(), height)

        painter.save()
        painter.setFont(font)
        painter.setPen(QColor(palette.muted))
        language = self.config.language.capitalize()
        painter.drawText(row, Qt.AlignLeft | Qt.AlignVCenter, f"{language}  ·  {self._session.duration.label}")
        remaining = self._clock.remaining(self._session.duration.seconds)
        painter.setPen(QColor(palette.accent if self._session.is_running() else palette.muted))
        painter.drawText(row, Qt.AlignRight | Qt.AlignVCenter, f"{remaining}s")
        painter.restore()
        return height

    def _render_text(self, painter: QPainter, area: QRect) -> None:
        palette = self.palette
        session = self._session
        font = mono_font(18)
        metrics = QFontMetrics(font)
        char_width = max(1, metrics.horizontalAdvance("M"))
        line_height = int(metrics.height() * 1.5)
        columns = max(1, area.width() // char_width)
        cursor = session.cursor
        text = session.text
        tags = session.classifications()

        painter.save()
        painter.setFont(font)
        for row, (start, end) in enumerate(wrap_indices(text, columns)):
            top = area.top() + row * line_height
            if top + line_height > area.bottom():
                break
            for i in range(start, end):
                cell = QRect(area.left() + (i - start) * char_width, top, char_width, metrics.height())
                tag = tags[i]
                if i == cursor and not session.is_finished():
                    painter.fillRect(cell, QColor(palette.cursor))
                    painter.setPen(QColor(palette.background))
                elif tag is Classification.CORRECT:
                    painter.setPen(QColor(palette.correct))
                elif tag is Classification.INCORRECT:
                    painter.setPen(QPen(QColor(palette.incorrect)))
                    painter.drawLine(cell.left(), cell.bottom(), cell.right(), cell.bottom())
                else:
                    painter.setPen(QColor(palette.muted))
                painter.drawText(cell, Qt.AlignCenter, text[i])
        painter.restore()

    def _render_status(self, painter: QPainter, area: QRect) -> None:
        if not self.status:
            return
        painter.save()
        painter.setFont(ui_font(10))
        painter.setPen(QColor(self.palette.incorrect))
        painter.drawText(area, Qt.AlignLeft | Qt.AlignVCenter, self.status)
        painter.restore()

    def _render_popup(self, painter: QPainter, area: QRect, stat: Stat) -> None:
        palette = self.palette
        width = max(260, area.width() // 3)
        height = 200
        popup = QRect(
            area.left() + (area.width() - width) // 2,
            area.top() + (area.height() - height) // 2,
            width,
            height,
        )
        painter.save()
        painter.fillRect(popup, QColor(palette.panel))
        painter.setPen(QPen(QColor(palette.accent), 2))
        painter.drawRect(popup)

        title = "Nice, you made it :)" if stat.errors_count == 0 else "Time to look at the results"
        lines = [
            title,
            "",
            f"Average WPM  {stat.average_wpm:.1f}",
            f"Accuracy  {stat.accuracy_percent:.1f}%",
            f"Errors  {stat.errors_count}",
            f"Time  {stat.time_secs}s",
            "",
            "<Ctrl-r> try again",
        ]
        painter.setFont(ui_font(12, bold=True))
        painter.setPen(QColor(palette.text))
        painter.drawText(popup, Qt.AlignCenter, "\n".join(lines))
        painter.restore()
