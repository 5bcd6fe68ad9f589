"""
SettingsView — Edit the application configuration

Every edit updates the session's in-memory config immediately (so drops and
dialogs use it at once); Save persists it through the backend. The Save
button is enabled only while the config differs from the saved one.
"""

from PySide6.QtCore import Slot
from PySide6.QtWidgets import (
    QButtonGroup, QComboBox, QFormLayout, QGroupBox, QHBoxLayout, QLineEdit,
    QPushButton, QRadioButton, QVBoxLayout, QWidget,
)

from core.config import AppConfig, DirectoryMode, DisplayMode, FileExtensions, parse_extensions
from core.debouncer import Debouncer


class SettingsView(QWidget):
    def __init__(self, session, parent=None):
        super().__init__(parent)
        self.session = session
        self._loading = False

        # Extension text is committed after typing settles
        self._debouncer = Debouncer(parent=self)
        self._debouncer.settled.connect(self._commit)

        self._setup_ui()
        session.configChanged.connect(self._on_config_changed)
        self._on_config_changed(session.config)

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)

        # Appearance
        appearance = QGroupBox("Appearance")
        row = QHBoxLayout(appearance)
        self.display_group = QButtonGroup(self)
        for mode, text in ((DisplayMode.AUTO, "Auto Mode"),
                           (DisplayMode.LIGHT, "Light Mode"),
                           (DisplayMode.DARK, "Dark Mode")):
            button = QRadioButton(text)
            self.display_group.addButton(button, int(mode))
            row.addWidget(button)
        row.addStretch(1)
        self.display_group.idClicked.connect(self._commit)
        layout.addWidget(appearance)

        # Drop behavior
        drop = QGroupBox("Append on File Drop")
        row = QHBoxLayout(drop)
        self.append_group = QButtonGroup(self)
        self.rb_append = QRadioButton("Append")
        self.rb_replace = QRadioButton("Do not append")
        self.append_group.addButton(self.rb_append, 1)
        self.append_group.addButton(self.rb_replace, 0)
        row.addWidget(self.rb_append)
        row.addWidget(self.rb_replace)
        row.addStretch(1)
        self.append_group.idClicked.connect(self._commit)
        layout.addWidget(drop)

        # Directory expansion
        files = QGroupBox("Files")
        form = QFormLayout(files)
        self.directory_combo = QComboBox()
        for mode in DirectoryMode:
            self.directory_combo.addItem(mode.name.capitalize(), int(mode))
        self.directory_combo.currentIndexChanged.connect(self._commit)
        form.addRow("Directory Mode", self.directory_combo)

        self.audio_edit = QLineEdit()
        self.image_edit = QLineEdit()
        self.video_edit = QLineEdit()
        for label, edit in (("Audio", self.audio_edit), ("Image", self.image_edit), ("Video", self.video_edit)):
            edit.textEdited.connect(self._debouncer.setText)
            form.addRow(label, edit)
        layout.addWidget(files)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        self.btn_save = QPushButton("Save")
        self.btn_save.clicked.connect(self._on_save)
        buttons.addWidget(self.btn_save)
        layout.addLayout(buttons)
        layout.addStretch(1)

    # -------------------------------------------------------------------------
    # CONFIG <-> WIDGETS
    # -------------------------------------------------------------------------

    def build_config(self) -> AppConfig:
        return AppConfig(
            append_on_file_drop=self.rb_append.isChecked(),
            display_mode=DisplayMode(max(self.display_group.checkedId(), 0)),
            directory_mode=DirectoryMode(self.directory_combo.currentData() or 0),
            file_extensions=FileExtensions(
                audio=parse_extensions(self.audio_edit.text()),
                image=parse_extensions(self.image_edit.text()),
                video=parse_extensions(self.video_edit.text()),
            ),
        )

    @Slot(object)
    def _on_config_changed(self, config: AppConfig):
        self._loading = True
        self.display_group.button(int(config.display_mode)).setChecked(True)
        (self.rb_append if config.append_on_file_drop else self.rb_replace).setChecked(True)
        self.directory_combo.setCurrentIndex(self.directory_combo.findData(int(config.directory_mode)))
        for edit, values in ((self.audio_edit, config.file_extensions.audio),
                             (self.image_edit, config.file_extensions.image),
                             (self.video_edit, config.file_extensions.video)):
            # Keep the cursor where it is while the user is typing
            if parse_extensions(edit.text()) != values:
                edit.setText(", ".join(values))
        self._loading = False
        self.btn_save.setEnabled(self.session.config_dirty)

    def _commit(self, *_):
        if self._loading:
            return
        self.session.update_config(self.build_config())

    def _on_save(self):
        self._debouncer.flush()
        self.session.save_config(self.build_config())
