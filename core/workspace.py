"""
Workspace — Tab State Machine

Tracks which views are open (List, About, Settings, one Details tab per
inspected file) and which one is active.

The List tab is always first and cannot be closed. About and Settings
carry a ControlStatus:

    HIDDEN --request--> SELECTED --resolve--> VISIBLE --close--> HIDDEN

SELECTED is resolved inside the same call that sets it: the tab is
appended (if absent), activated and marked VISIBLE before the method
returns.

The tab list is an immutable tuple replaced on every change, and the
active index is clamped to the last tab after every removal.

Usage:
    workspace = Workspace()
    workspace.open_details("/media/clip.mkv")   # True, new tab
    workspace.open_details("/media/clip.mkv")   # False, selects it
    workspace.close_current_tab()
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

from PySide6.QtCore import QObject, Signal, Slot

from core.formatting import shrink_file_name

TAB_LABEL_MAX_LENGTH = 30


class TabType(Enum):
    LIST = "list"
    ABOUT = "about"
    CONFIG = "config"
    DETAILS = "details"


class ControlStatus(IntEnum):
    HIDDEN = 0
    SELECTED = 1
    VISIBLE = 2


@dataclass(frozen=True)
class Tab:
    """Stable identity of a tab: its type, plus the file for Details."""
    type: TabType
    file: Optional[str] = None

    @property
    def closable(self) -> bool:
        return self.type is not TabType.LIST


LIST_TAB = Tab(TabType.LIST)
ABOUT_TAB = Tab(TabType.ABOUT)
CONFIG_TAB = Tab(TabType.CONFIG)


def tab_label(tab: Tab) -> str:
    if tab.type is TabType.LIST:
        return "List"
    if tab.type is TabType.ABOUT:
        return "About"
    if tab.type is TabType.CONFIG:
        return "Settings"
    return shrink_file_name(tab.file or "", TAB_LABEL_MAX_LENGTH)


def tab_tooltip(tab: Tab) -> str:
    if tab.type is TabType.LIST:
        return "File List"
    if tab.type is TabType.DETAILS:
        return tab.file or ""
    return tab_label(tab)


class Workspace(QObject):
    """
    Signals:
        tabsChanged(): the tab tuple was replaced
        currentIndexChanged(int): the active tab moved
    """

    tabsChanged = Signal()
    currentIndexChanged = Signal(int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._tabs: Tuple[Tab, ...] = (LIST_TAB,)
        self._current_index = 0
        self._status = {
            TabType.ABOUT: ControlStatus.HIDDEN,
            TabType.CONFIG: ControlStatus.HIDDEN,
        }

    # -------------------------------------------------------------------------
    # STATE
    # -------------------------------------------------------------------------

    @property
    def tabs(self) -> Tuple[Tab, ...]:
        return self._tabs

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_tab(self) -> Tab:
        return self._tabs[self._current_index]

    @property
    def about_status(self) -> ControlStatus:
        return self._status[TabType.ABOUT]

    @property
    def config_status(self) -> ControlStatus:
        return self._status[TabType.CONFIG]

    @property
    def detailed_files(self) -> List[str]:
        """Files open for inspection, in tab order."""
        return [t.file for t in self._tabs if t.type is TabType.DETAILS]

    def index_of(self, tab: Tab) -> int:
        try:
            return self._tabs.index(tab)
        except ValueError:
            return -1

    # -------------------------------------------------------------------------
    # ABOUT / SETTINGS
    # -------------------------------------------------------------------------

    @Slot()
    def request_about(self) -> None:
        self._request(ABOUT_TAB)

    @Slot()
    def request_settings(self) -> None:
        self._request(CONFIG_TAB)

    def _request(self, tab: Tab) -> None:
        if self._status[tab.type] is ControlStatus.HIDDEN:
            self._status[tab.type] = ControlStatus.SELECTED
        self._resolve(tab)

    def _resolve(self, tab: Tab) -> None:
        """SELECTED -> VISIBLE: insert if missing, then activate."""
        if self.index_of(tab) < 0:
            self._set_tabs(self._tabs + (tab,))
        self._status[tab.type] = ControlStatus.VISIBLE
        self.set_current_index(self.index_of(tab))

    # -------------------------------------------------------------------------
    # DETAILS
    # -------------------------------------------------------------------------

    def open_details(self, file: str) -> bool:
        """Open (or select) the Details tab of file. Returns True if it is new."""
        tab = Tab(TabType.DETAILS, file)
        created = self.index_of(tab) < 0
        if created:
            self._set_tabs(self._tabs + (tab,))
        self.set_current_index(self.index_of(tab))
        return created

    def remove_file(self, file: str) -> None:
        """Drop the Details tab of a deleted file, if any."""
        index = self.index_of(Tab(TabType.DETAILS, file))
        if index >= 0:
            self._remove_at(index)

    def clear_details(self) -> None:
        remaining = tuple(t for t in self._tabs if t.type is not TabType.DETAILS)
        if remaining != self._tabs:
            self._set_tabs(remaining)

    # -------------------------------------------------------------------------
    # CLOSING & NAVIGATION
    # -------------------------------------------------------------------------

    @Slot(int)
    def close_tab(self, index: int) -> None:
        if not 0 <= index < len(self._tabs):
            return
        tab = self._tabs[index]
        if not tab.closable:
            return
        if tab.type in self._status:
            self._status[tab.type] = ControlStatus.HIDDEN
        self._remove_at(index)

    @Slot()
    def close_current_tab(self) -> None:
        self.close_tab(self._current_index)

    @Slot(int)
    def set_current_index(self, index: int) -> None:
        if not 0 <= index < len(self._tabs):
            return
        if index != self._current_index:
            self._current_index = index
            self.currentIndexChanged.emit(index)

    @Slot(int)
    def select_position(self, position: int) -> None:
        """1-based position, as typed on the keyboard."""
        self.set_current_index(position - 1)

    @Slot()
    def next_tab(self) -> None:
        self.set_current_index((self._current_index + 1) % len(self._tabs))

    @Slot()
    def prev_tab(self) -> None:
        self.set_current_index((self._current_index - 1) % len(self._tabs))

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    def _remove_at(self, index: int) -> None:
        self._set_tabs(self._tabs[:index] + self._tabs[index + 1:])

    def _set_tabs(self, tabs: Tuple[Tab, ...]) -> None:
        # Clamp before notifying so listeners never see an index past the end
        self._tabs = tabs
        last = len(tabs) - 1
        moved = self._current_index > last
        if moved:
            self._current_index = last
        self.tabsChanged.emit()
        if moved:
            self.currentIndexChanged.emit(last)
