from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QMainWindow, QToolBar

# Core Logic
from core.backend import APP_NAME
from core.config import DisplayMode
from core.diagnostics import MemoryProfiler

# UI Managers
from ui.managers.action_manager import ActionManager
from ui.managers.file_manager import FileManager
from ui.models.shortcuts import Shortcuts, ShortcutAction

# UI Components
from ui.widgets.status_bar import StatusBar
from ui.widgets.tab_manager import TabManager

_COLOR_SCHEMES = {
    DisplayMode.AUTO: Qt.ColorScheme.Unknown,
    DisplayMode.LIGHT: Qt.ColorScheme.Light,
    DisplayMode.DARK: Qt.ColorScheme.Dark,
}

_TOOLBAR_ACTIONS = (
    ShortcutAction.ADD_FILES,
    ShortcutAction.ADD_FOLDER,
    ShortcutAction.CLEAR_FILES,
    None,
    ShortcutAction.SHOW_SETTINGS,
    ShortcutAction.SHOW_ABOUT,
)


class MainWindow(QMainWindow):
    """
    Main application window: toolbar, workspace tabs and status bar.
    """
    def __init__(self, session):
        super().__init__()
        self.session = session
        self.setWindowTitle(APP_NAME)
        self.resize(1200, 800)
        self.setAcceptDrops(True)

        # 1. Init Managers
        self.shortcuts = Shortcuts(parent=self)
        self.file_manager = FileManager(self, session)
        self.action_manager = ActionManager(self)

        # 2. Setup UI Layout
        self._setup_ui()

        # 3. Setup Actions
        self.action_manager.setup_actions(
            window=self,
            shortcuts=self.shortcuts,
            session=session,
            file_manager=self.file_manager,
        )
        self._setup_toolbar()

        # 4. Connect Session
        session.configChanged.connect(self._apply_display_mode)
        self._apply_display_mode(session.config)

    def _setup_ui(self):
        # Status Bar (Bottom)
        self.status_bar = StatusBar(self.session)
        self.setStatusBar(self.status_bar)

        # Workspace tabs (Center)
        self.tab_manager = TabManager(self.session, self.file_manager)
        self.setCentralWidget(self.tab_manager)

    def _setup_toolbar(self):
        toolbar = QToolBar(self)
        toolbar.setMovable(False)
        toolbar.setToolButtonStyle(Qt.ToolButtonTextBesideIcon)
        for action_enum in _TOOLBAR_ACTIONS:
            if action_enum is None:
                toolbar.addSeparator()
            else:
                toolbar.addAction(self.action_manager.get_action(action_enum))
        self.addToolBar(toolbar)

    # --- ACTIONS ---

    def focus_filter(self):
        self.tab_manager.focus_filter()

    def print_diagnostics(self):
        """Trigger internal memory profiling."""
        MemoryProfiler.print_report(self.session)

    @Slot(object)
    def _apply_display_mode(self, config):
        hints = QGuiApplication.styleHints()
        # setColorScheme is Qt 6.8+
        if hasattr(hints, "setColorScheme"):
            hints.setColorScheme(_COLOR_SCHEMES[config.display_mode])

    # --- DRAG & DROP ---

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            super().dragEnterEvent(event)

    def dropEvent(self, event):
        if self.file_manager.handle_drop(event.mimeData().urls()):
            event.acceptProposedAction()
        else:
            super().dropEvent(event)
