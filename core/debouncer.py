"""
Debouncer — Quiescence Timer for Filter Input

Collapses bursts of text edits into one settled value after a quiet period.
"""

from PySide6.QtCore import QObject, QTimer, Signal, Slot


class Debouncer(QObject):
    settled = Signal(str)

    DEFAULT_INTERVAL_MS = 200

    def __init__(self, interval_ms: int = DEFAULT_INTERVAL_MS, parent=None):
        super().__init__(parent)
        self._text = ""
        self._settled_text = ""

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._emit_settled)

    @property
    def text(self) -> str:
        return self._text

    @property
    def settled_text(self) -> str:
        return self._settled_text

    def isPending(self) -> bool:
        return self._timer.isActive()

    @Slot(str)
    def setText(self, text: str) -> None:
        """Record the latest text and restart the quiet period."""
        self._text = text
        self._timer.start()

    def flush(self) -> None:
        """Emit the latest text now."""
        self._timer.stop()
        self._emit_settled()

    def _emit_settled(self) -> None:
        self._settled_text = self._text
        self.settled.emit(self._text)
