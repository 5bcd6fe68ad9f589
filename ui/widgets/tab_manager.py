"""
TabManager - Tab Widget mirroring the Workspace

The Workspace owns the tab list, its order and the active index; this
widget only renders it. One view widget is kept per Tab identity, so a
tab that stays open keeps its widget (filter text, scroll position)
across every tabsChanged.

- LIST      -> ListView (not closable)
- ABOUT     -> AboutView
- CONFIG    -> SettingsView
- DETAILS   -> DetailsView(file)
"""

from typing import Dict

from PySide6.QtCore import Slot
from PySide6.QtWidgets import QTabBar, QTabWidget, QWidget

from core.workspace import Tab, TabType, tab_label, tab_tooltip
from ui.widgets.about_view import AboutView
from ui.widgets.details_view import DetailsView
from ui.widgets.list_view import ListView
from ui.widgets.settings_view import SettingsView


class TabManager(QTabWidget):
    """
    Renders session.workspace as a QTabWidget.
    """

    def __init__(self, session, file_manager, parent=None):
        super().__init__(parent)
        self.session = session
        self.workspace = session.workspace
        self.file_manager = file_manager
        self._widgets: Dict[Tab, QWidget] = {}
        self._syncing = False

        # Tab bar styling
        self.setTabsClosable(True)
        self.setMovable(False)  # Positions belong to the Workspace
        self.setDocumentMode(True)  # Cleaner look

        # Signals
        self.tabCloseRequested.connect(self.workspace.close_tab)
        self.currentChanged.connect(self._on_tab_changed)
        self.workspace.tabsChanged.connect(self.sync_tabs)
        self.workspace.currentIndexChanged.connect(self._on_workspace_index_changed)

        self.sync_tabs()

    @property
    def current_view(self) -> QWidget:
        """Get the currently active view."""
        return self.currentWidget()

    def focus_filter(self):
        view = self.current_view
        if view is not None and hasattr(view, "focus_filter"):
            view.focus_filter()

    # -------------------------------------------------------------------------
    # SYNC
    # -------------------------------------------------------------------------

    @Slot()
    def sync_tabs(self):
        tabs = self.workspace.tabs
        self._syncing = True
        try:
            # Drop widgets of closed tabs
            for tab in [t for t in self._widgets if t not in tabs]:
                widget = self._widgets.pop(tab)
                index = self.indexOf(widget)
                if index >= 0:
                    self.removeTab(index)
                widget.deleteLater()

            # Insert or move the remaining ones into position
            for position, tab in enumerate(tabs):
                widget = self._widgets.get(tab)
                if widget is None:
                    widget = self._create_view(tab)
                    self._widgets[tab] = widget
                if self.widget(position) is not widget:
                    current = self.indexOf(widget)
                    if current >= 0:
                        self.removeTab(current)
                    self.insertTab(position, widget, tab_label(tab))
                    self.setTabToolTip(position, tab_tooltip(tab))
                    if not tab.closable:
                        self._hide_close_button(position)

            self.setCurrentIndex(self.workspace.current_index)
        finally:
            self._syncing = False

    def _create_view(self, tab: Tab) -> QWidget:
        if tab.type == TabType.LIST:
            return ListView(self.session, self.file_manager)
        if tab.type == TabType.ABOUT:
            return AboutView(self.session)
        if tab.type == TabType.CONFIG:
            return SettingsView(self.session)
        return DetailsView(self.session, self.file_manager, tab.file)

    def _hide_close_button(self, index: int):
        for side in (QTabBar.LeftSide, QTabBar.RightSide):
            button = self.tabBar().tabButton(index, side)
            if button is not None:
                button.resize(0, 0)
                button.hide()

    # -------------------------------------------------------------------------
    # SLOTS
    # -------------------------------------------------------------------------

    @Slot(int)
    def _on_tab_changed(self, index: int):
        """Called when the user activates a tab."""
        if not self._syncing and index >= 0:
            self.workspace.set_current_index(index)

    @Slot(int)
    def _on_workspace_index_changed(self, index: int):
        if self.currentIndex() != index:
            self._syncing = True
            try:
                self.setCurrentIndex(index)
            finally:
                self._syncing = False
