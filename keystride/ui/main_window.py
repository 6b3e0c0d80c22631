from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent, QKeyEvent, QPainter
from PySide6.QtWidgets import QMainWindow, QMessageBox, QWidget

from keystride.core.controller import Controller
from keystride.core.errors import StoreWriteError
from keystride.core.events import EventQueue, KeyCode, KeyEvent, Tick

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000

_QT_KEYS = {
    int(Qt.Key.Key_Backspace): KeyCode.BACKSPACE,
    int(Qt.Key.Key_Escape): KeyCode.ESC,
    int(Qt.Key.Key_Left): KeyCode.LEFT,
    int(Qt.Key.Key_Right): KeyCode.RIGHT,
    int(Qt.Key.Key_Up): KeyCode.UP,
    int(Qt.Key.Key_Down): KeyCode.DOWN,
    int(Qt.Key.Key_Return): KeyCode.ENTER,
    int(Qt.Key.Key_Enter): KeyCode.ENTER,
}


def key_from_qt(event: QKeyEvent) -> KeyEvent:
    """Translate a Qt key press into the toolkit-independent KeyEvent."""
    key = event.key()
    ctrl = bool(event.modifiers() & Qt.KeyboardModifier.ControlModifier)
    code = _QT_KEYS.get(key)
    if code is not None:
        return KeyEvent(code, ctrl=ctrl)
    if ctrl:
        # With Ctrl held, text() is a control character; use the key itself.
        if int(Qt.Key.Key_A) <= key <= int(Qt.Key.Key_Z):
            return KeyEvent.of_char(chr(key).lower(), ctrl=True)
        return KeyEvent(KeyCode.OTHER, ctrl=True)
    text = event.text()
    if len(text) == 1 and text.isprintable():
        return KeyEvent.of_char(text)
    return KeyEvent(KeyCode.OTHER)


class ScreenCanvas(QWidget):
    """Paints the router's active screen over the whole widget."""

    def __init__(self, controller: Controller, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self.setFocusPolicy(Qt.NoFocus)
        self.setAutoFillBackground(False)

    def paintEvent(self, event) -> None:
        self._controller.before_render()
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        try:
            self._controller.router.active_screen.render(painter, self.rect())
        finally:
            painter.end()


class MainWindow(QMainWindow):
    """Feeds key presses and the one-second timer into one event queue.

    Each queued event is applied to the controller and followed by exactly one
    repaint.
    """

    def __init__(self, controller: Controller) -> None:
        super().__init__()
        self._controller = controller
        self._queue = EventQueue()
        self.exit_code = 0

        self.setWindowTitle("keystride")
        self.setMinimumSize(720, 420)
        self.setFocusPolicy(Qt.StrongFocus)
        self._canvas = ScreenCanvas(controller, self)
        self.setCentralWidget(self._canvas)
        self._apply_transparency()

        self._tick_timer = QTimer(self)
        self._tick_timer.setInterval(TICK_INTERVAL_MS)
        self._tick_timer.timeout.connect(self._on_tick)
        self._tick_timer.start()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        self._queue.push(key_from_qt(event))
        self._drain()

    def _on_tick(self) -> None:
        self._queue.push(Tick())
        self._drain()

    def _drain(self) -> None:
        while not self._controller.is_exit:
            event = self._queue.pop()
            if event is None:
                return
            try:
                self._controller.handle(event)
            except StoreWriteError as e:
                self._report_fatal(e)
            self._apply_transparency()
            self._canvas.repaint()
        self._tick_timer.stop()
        self.close()

    def _apply_transparency(self) -> None:
        self.setWindowOpacity(0.85 if self._controller.config.has_transparent_bg else 1.0)

    def _report_fatal(self, error: StoreWriteError) -> None:
        logger.error("Results could not be saved on exit: %s", error)
        self.exit_code = 1
        self._tick_timer.stop()
        QMessageBox.critical(self, "keystride", f"Results could not be saved:\n{error}")

    def closeEvent(self, event: QCloseEvent) -> None:
        """Flush the store when the window is closed without Esc/Ctrl-c."""
        if not self._controller.is_exit:
            self._tick_timer.stop()
            try:
                self._controller.exit()
            except StoreWriteError as e:
                self._report_fatal(e)
        super().closeEvent(event)
