"""
StatusBar - Shows file counts and session notifications.

- Idle: "X files" (plus "Y loading" while metadata requests are in flight)
- Notification: the last notification title, red for errors
"""

from PySide6.QtCore import QTimer, Slot
from PySide6.QtWidgets import QLabel, QStatusBar

from core.session import Severity

NOTIFICATION_TIMEOUT_MS = 5000


class StatusBar(QStatusBar):
    """
    Status bar showing the session's file count and its notifications.
    """

    def __init__(self, session, parent=None):
        super().__init__(parent)
        self.session = session

        # Main status label (left side)
        self._status_label = QLabel("0 files")
        self.addWidget(self._status_label, 1)

        # Notification label (right side)
        self._notification_label = QLabel()
        self.addPermanentWidget(self._notification_label)
        self._notification_timer = QTimer(self)
        self._notification_timer.setSingleShot(True)
        self._notification_timer.timeout.connect(self._notification_label.clear)

        # Loading state is set synchronously after filesChanged, so defer the read
        session.filesChanged.connect(self._schedule_update)
        session.cache.streamCountsChanged.connect(self._schedule_update)
        session.cache.commonPropertiesChanged.connect(self._schedule_update)
        session.cache.errorOccurred.connect(self._schedule_update)
        session.notificationRaised.connect(self.showNotification)

    def _schedule_update(self, *_):
        QTimer.singleShot(0, self._show_idle_status)

    @Slot(str, int)
    def showNotification(self, title: str, severity: int):
        color = "#c62828" if severity == Severity.ERROR else ""
        self._notification_label.setStyleSheet(f"color: {color};" if color else "")
        self._notification_label.setText(title)
        self._notification_label.setToolTip(title)
        self._notification_timer.start(NOTIFICATION_TIMEOUT_MS)

    def _show_idle_status(self):
        """Shows the default idle status with file counts."""
        files = self.session.files
        total = len(files)
        loading = sum(1 for f in files if self.session.cache.is_loading(f))

        text = f"{total} file{'s' if total != 1 else ''}"
        if loading:
            text += f", {loading} loading"
        self._status_label.setText(text)
