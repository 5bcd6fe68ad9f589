"""
FileManager — File pickers and the JSON dialog

Consolidates:
- Add Files / Add Folder pickers (filters built from the configuration)
- Drag & Drop of local URLs
- JSON dialog for a file's property maps
"""

from typing import List

from PySide6.QtCore import QObject, QUrl, Slot
from PySide6.QtWidgets import QFileDialog

from core.config import dialog_filters
from ui.dialogs.json_dialog import JsonDialog


class FileManager(QObject):
    def __init__(self, main_window, session):
        super().__init__(main_window)
        self.mw = main_window
        self.session = session
        self._last_dir = ""

    # --- Actions (Slots) ---

    @Slot()
    def add_files(self):
        filters = ";;".join(dialog_filters(self.session.config))
        paths, _ = QFileDialog.getOpenFileNames(self.mw, "Add Files", self._last_dir, filters)
        if paths:
            self._remember(paths[0])
            self.session.add_paths(paths, append=True)

    @Slot()
    def add_folder(self):
        path = QFileDialog.getExistingDirectory(self.mw, "Add Folder", self._last_dir)
        if path:
            self._last_dir = path
            self.session.add_paths([path], append=True)

    def handle_drop(self, urls: List[QUrl]) -> bool:
        """Adds dropped local files. Returns False when nothing was usable."""
        paths = [u.toLocalFile() for u in urls if u.isLocalFile()]
        if not paths:
            return False
        self.session.add_dropped_paths(paths)
        return True

    def show_json(self, title: str, maps):
        if not maps:
            return
        dialog = JsonDialog(self.mw, self.session, title, maps)
        dialog.exec()

    def _remember(self, path: str):
        self._last_dir = QUrl.fromLocalFile(path).adjusted(QUrl.RemoveFilename).toLocalFile()
