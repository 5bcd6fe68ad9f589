"""
Shortcuts Model — Centralized Keyboard Configuration

Features:
- Pure data model (No QAction/QWidget logic)
- QSettings persistence
- Enum-based type safety
- Conflict detection
"""

from PySide6.QtCore import QObject, Signal, QSettings
from enum import Enum, auto
from typing import Dict, Optional


class ShortcutAction(Enum):
    """All available shortcut actions."""
    # Tabs
    SELECT_TAB_1 = auto()
    SELECT_TAB_2 = auto()
    SELECT_TAB_3 = auto()
    SELECT_TAB_4 = auto()
    SELECT_TAB_5 = auto()
    SELECT_TAB_6 = auto()
    SELECT_TAB_7 = auto()
    SELECT_TAB_8 = auto()
    SELECT_TAB_9 = auto()
    CLOSE_TAB = auto()
    NEXT_TAB = auto()
    PREV_TAB = auto()

    # Pages
    SHOW_SETTINGS = auto()
    SHOW_ABOUT = auto()

    # Files
    ADD_FILES = auto()
    ADD_FOLDER = auto()
    CLEAR_FILES = auto()

    # Filter
    FOCUS_FILTER = auto()

    # Application
    QUIT = auto()
    DIAGNOSTICS = auto()


SELECT_TAB_ACTIONS = [
    ShortcutAction.SELECT_TAB_1, ShortcutAction.SELECT_TAB_2, ShortcutAction.SELECT_TAB_3,
    ShortcutAction.SELECT_TAB_4, ShortcutAction.SELECT_TAB_5, ShortcutAction.SELECT_TAB_6,
    ShortcutAction.SELECT_TAB_7, ShortcutAction.SELECT_TAB_8, ShortcutAction.SELECT_TAB_9,
]


# Default shortcut mappings
DEFAULT_SHORTCUTS: Dict[ShortcutAction, str] = {
    **{action: f"Ctrl+{n}" for n, action in enumerate(SELECT_TAB_ACTIONS, start=1)},
    ShortcutAction.CLOSE_TAB: "Ctrl+W",
    ShortcutAction.NEXT_TAB: "Ctrl+Tab",
    ShortcutAction.PREV_TAB: "Ctrl+Shift+Tab",

    ShortcutAction.SHOW_SETTINGS: "F10",
    ShortcutAction.SHOW_ABOUT: "F1",

    ShortcutAction.ADD_FILES: "Ctrl+O",
    ShortcutAction.ADD_FOLDER: "Ctrl+Shift+O",
    ShortcutAction.CLEAR_FILES: "Ctrl+Q",

    ShortcutAction.FOCUS_FILTER: "Ctrl+F",

    ShortcutAction.QUIT: "Alt+X",
    ShortcutAction.DIAGNOSTICS: "F12",
}


class Shortcuts(QObject):
    """
    Manages persistence and lookup for keyboard shortcuts.
    Pure Data model: Does NOT create QActions or UI elements.
    """

    # Emitted when configuration changes
    configChanged = Signal()

    def __init__(self, settings: Optional[QSettings] = None, parent=None):
        super().__init__(parent)
        self._shortcuts: Dict[ShortcutAction, str] = DEFAULT_SHORTCUTS.copy()
        self._settings = settings or QSettings("MediaLens", "Shortcuts")
        self.load()

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def get(self, action: ShortcutAction) -> str:
        """Get the current key sequence for an action."""
        return self._shortcuts.get(action, "")

    def set(self, action: ShortcutAction, key_sequence: str):
        """Change a shortcut's key binding."""
        self._shortcuts[action] = key_sequence
        self.save()
        self.configChanged.emit()

    def reset(self, action: Optional[ShortcutAction] = None):
        """Reset one action, or all of them, to defaults."""
        if action:
            self.set(action, DEFAULT_SHORTCUTS.get(action, ""))
        else:
            self._shortcuts = DEFAULT_SHORTCUTS.copy()
            self.save()
            self.configChanged.emit()

    def save(self):
        """Persist current shortcuts to QSettings."""
        self._settings.beginGroup("KeyBindings")
        for action, key in self._shortcuts.items():
            self._settings.setValue(action.name, key)
        self._settings.endGroup()
        self._settings.sync()

    def load(self):
        """Load shortcuts from QSettings."""
        self._settings.beginGroup("KeyBindings")
        for key_name in self._settings.childKeys():
            try:
                action = ShortcutAction[key_name]
            except KeyError:
                continue  # Stale key in settings
            sequence = self._settings.value(key_name)
            # Empty strings mean unbound
            if sequence is not None:
                self._shortcuts[action] = str(sequence)
        self._settings.endGroup()

    def get_conflicts(self) -> Dict[str, list]:
        """Find key sequences assigned to multiple actions."""
        reverse_map: Dict[str, list] = {}
        for action, key in self._shortcuts.items():
            if key:
                reverse_map.setdefault(key, []).append(action)
        return {key: actions for key, actions in reverse_map.items() if len(actions) > 1}
