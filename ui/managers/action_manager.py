"""
ActionManager — Central Hub for UI Actions and Shortcuts

Defines all QActions dynamically based on the Shortcuts model. Keyboard
actions call the same Workspace/Session methods as pointer interaction.
"""

from PySide6.QtCore import QObject, Qt
from PySide6.QtGui import QAction, QKeySequence, QIcon
from PySide6.QtWidgets import QWidget
from typing import Dict, Callable, Optional, Tuple

from ui.models.shortcuts import Shortcuts, ShortcutAction, SELECT_TAB_ACTIONS


class ActionManager(QObject):
    def __init__(self, parent=None):
        super().__init__(parent)
        self._actions: Dict[ShortcutAction, QAction] = {}
        self._shortcuts: Optional[Shortcuts] = None

    def setup_actions(self, window: QWidget, shortcuts: Shortcuts, session, file_manager):
        """
        Creates all actions based on the Shortcuts model and registers them.
        """
        workspace = session.workspace

        # Mapping: Enum -> (Icon Name, Display Text, Slot Function)
        bindings: Dict[ShortcutAction, Tuple[str, str, Callable]] = {
            # --- Tabs ---
            ShortcutAction.CLOSE_TAB:       ("tab-close", "Close Tab", workspace.close_current_tab),
            ShortcutAction.NEXT_TAB:        ("", "Next Tab", workspace.next_tab),
            ShortcutAction.PREV_TAB:        ("", "Previous Tab", workspace.prev_tab),

            # --- Pages ---
            ShortcutAction.SHOW_SETTINGS:   ("preferences-system", "Settings", workspace.request_settings),
            ShortcutAction.SHOW_ABOUT:      ("help-about", "About", workspace.request_about),

            # --- Files ---
            ShortcutAction.ADD_FILES:       ("document-open", "Add Files", file_manager.add_files),
            ShortcutAction.ADD_FOLDER:      ("folder-open", "Add Folder", file_manager.add_folder),
            ShortcutAction.CLEAR_FILES:     ("edit-clear-all", "Clear Files", session.clear_files),

            # --- Filter ---
            ShortcutAction.FOCUS_FILTER:    ("edit-find", "Filter", window.focus_filter),

            # --- Application ---
            ShortcutAction.QUIT:            ("application-exit", "Quit", window.close),
            ShortcutAction.DIAGNOSTICS:     ("", "Memory Diagnostics", window.print_diagnostics),
        }
        for position, action_enum in enumerate(SELECT_TAB_ACTIONS, start=1):
            bindings[action_enum] = ("", f"Select Tab {position}",
                                     lambda _=False, p=position: workspace.select_position(p))

        # Factory Loop
        for action_enum, (icon_name, text, slot) in bindings.items():
            self._create_action(window, shortcuts, action_enum, text, icon_name, slot)

        # Register global shortcuts to window
        window.addActions(list(self._actions.values()))

        self._shortcuts = shortcuts
        shortcuts.configChanged.connect(self.reload_shortcuts)

    def reload_shortcuts(self):
        """Re-read key sequences after the Shortcuts model changed."""
        if self._shortcuts is None:
            return
        for action_enum, action in self._actions.items():
            action.setShortcut(QKeySequence(self._shortcuts.get(action_enum)))

    def _create_action(self, window, shortcuts, enum_id, text, icon_name, slot):
        """Helper to create and register an action."""
        action = QAction(text, window)

        if icon_name:
            action.setIcon(QIcon.fromTheme(icon_name))

        # Get key from Model
        key_seq = shortcuts.get(enum_id)
        if key_seq:
            action.setShortcut(QKeySequence(key_seq))

        action.setShortcutContext(Qt.WindowShortcut)

        if slot:
            action.triggered.connect(slot)

        self._actions[enum_id] = action
        return action

    def get_action(self, enum_id: ShortcutAction) -> Optional[QAction]:
        return self._actions.get(enum_id)
