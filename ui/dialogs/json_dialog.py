"""
JsonDialog — Read-only JSON view of property maps

Shows the pretty-printed JSON of a file's property maps with Copy (to the
system clipboard) and Save (through the backend, so the write goes where
every other file operation goes).

Usage:
    dialog = JsonDialog(parent, session, "movie.mkv (All Properties)", maps)
    dialog.exec()
"""

from PySide6.QtGui import QFontDatabase, QGuiApplication, QIcon
from PySide6.QtWidgets import (
    QDialog, QFileDialog, QHBoxLayout, QPlainTextEdit, QPushButton, QVBoxLayout,
)

from core.session import Session


class JsonDialog(QDialog):
    def __init__(self, parent, session: Session, title: str, maps):
        super().__init__(parent)
        self.session = session
        self.text = Session.export_json(maps)

        self.setWindowTitle(title)
        self.setModal(True)
        self.resize(720, 560)

        layout = QVBoxLayout(self)

        self.editor = QPlainTextEdit()
        self.editor.setReadOnly(True)
        self.editor.setFont(QFontDatabase.systemFont(QFontDatabase.FixedFont))
        self.editor.setPlainText(self.text)
        layout.addWidget(self.editor, 1)

        buttons = QHBoxLayout()
        btn_copy = QPushButton(QIcon.fromTheme("edit-copy"), "Copy")
        btn_copy.clicked.connect(self.copy_to_clipboard)
        btn_save = QPushButton(QIcon.fromTheme("document-save"), "Save")
        btn_save.clicked.connect(self.save_to_file)
        btn_close = QPushButton("Close")
        btn_close.clicked.connect(self.reject)
        btn_close.setDefault(True)

        buttons.addWidget(btn_copy)
        buttons.addWidget(btn_save)
        buttons.addStretch()
        buttons.addWidget(btn_close)
        layout.addLayout(buttons)

    def copy_to_clipboard(self):
        QGuiApplication.clipboard().setText(self.text)
        self.session.notify("Json code is copied to clipboard.")

    def save_to_file(self):
        path, _ = QFileDialog.getSaveFileName(self, "Save Json", "", "JSON (*.json)")
        if not path:
            return
        if not path.lower().endswith(".json"):
            path += ".json"
        self.session.write_json(path, self.text)
