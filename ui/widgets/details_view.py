"""
DetailsView — Raw property inspector for one file

One tab per inspected file. Shows every property of every stream instance,
grouped by instance, with a stream kind toggle (checkbox per kind present
in the file, Select All / Select None) and a debounced text filter. Both
predicates apply together.
"""

from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QBrush, QColor, QIcon
from PySide6.QtWidgets import (
    QCheckBox, QHBoxLayout, QLabel, QLineEdit, QProgressBar, QStackedWidget,
    QToolButton, QTreeWidget, QTreeWidgetItem, QVBoxLayout, QWidget,
)

from core.debouncer import Debouncer
from core.property_cache import Slot as CacheSlot, SlotState
from core.streams import STREAM_KIND_COLORS
from core.view_composer import LastResultMemo, StreamGroupSelection, sorted_entries, visible_instances


class DetailsView(QWidget):
    PAGE_LOADING = 0
    PAGE_CONTENT = 1
    PAGE_EMPTY = 2

    def __init__(self, session, file_manager, file: str, parent=None):
        super().__init__(parent)
        self.session = session
        self.file_manager = file_manager
        self.file = file
        self._query = ""
        self._selection = StreamGroupSelection()
        self._counts_seen = None
        self._checkboxes = {}
        self._visible_memo = LastResultMemo(visible_instances)
        self._rendered = None

        self._debouncer = Debouncer(parent=self)
        self._debouncer.settled.connect(self._on_query_settled)

        self._setup_ui()

        session.cache.streamCountsChanged.connect(self._on_cache_changed)
        session.cache.allPropertiesChanged.connect(self._on_cache_changed)
        session.cache.errorOccurred.connect(self._on_cache_error)
        self.refresh_view()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)

        # Header
        header = QHBoxLayout()
        title = QLabel(self.file)
        title.setWordWrap(True)
        title.setTextInteractionFlags(Qt.TextSelectableByMouse)
        header.addWidget(title, 1)
        self.btn_json = QToolButton()
        self.btn_json.setIcon(QIcon.fromTheme("text-x-script"))
        self.btn_json.setToolTip("Json")
        self.btn_json.setAutoRaise(True)
        self.btn_json.clicked.connect(self._on_json_clicked)
        header.addWidget(self.btn_json)
        layout.addLayout(header)

        # Stream group toggle
        self.group_row = QHBoxLayout()
        self.btn_all = QToolButton()
        self.btn_all.setIcon(QIcon.fromTheme("edit-select-all"))
        self.btn_all.setToolTip("Select All")
        self.btn_all.clicked.connect(self._on_select_all)
        self.btn_none = QToolButton()
        self.btn_none.setIcon(QIcon.fromTheme("edit-select-none"))
        self.btn_none.setToolTip("Select None")
        self.btn_none.clicked.connect(self._on_select_none)
        self.group_row.addWidget(self.btn_all)
        self.group_row.addWidget(self.btn_none)
        self.kind_row = QHBoxLayout()
        self.group_row.addLayout(self.kind_row)
        self.group_row.addStretch(1)
        layout.addLayout(self.group_row)

        # Filter
        self.filter_edit = QLineEdit()
        self.filter_edit.setPlaceholderText("Filter")
        self.filter_edit.setClearButtonEnabled(True)
        self.filter_edit.textChanged.connect(self._debouncer.setText)
        layout.addWidget(self.filter_edit)

        # Content
        self.pages = QStackedWidget()
        loading = QWidget()
        loading_layout = QVBoxLayout(loading)
        progress = QProgressBar()
        progress.setRange(0, 0)
        progress.setTextVisible(False)
        loading_layout.addStretch(1)
        loading_layout.addWidget(progress)
        self.btn_retry = QToolButton()
        self.btn_retry.setText("Retry")
        self.btn_retry.clicked.connect(lambda: self.session.retry(self.file))
        loading_layout.addWidget(self.btn_retry, 0, Qt.AlignCenter)
        loading_layout.addStretch(2)
        self.pages.addWidget(loading)

        self.tree = QTreeWidget()
        self.tree.setColumnCount(2)
        self.tree.setHeaderLabels(["Property", "Value"])
        self.tree.setAlternatingRowColors(True)
        self.tree.setUniformRowHeights(True)
        self.pages.addWidget(self.tree)

        empty = QLabel("Not Found")
        empty.setAlignment(Qt.AlignCenter)
        self.pages.addWidget(empty)
        layout.addWidget(self.pages, 1)

    # -------------------------------------------------------------------------
    # RENDERING
    # -------------------------------------------------------------------------

    def focus_filter(self):
        self.filter_edit.setFocus()
        self.filter_edit.selectAll()

    def refresh_view(self):
        cache = self.session.cache
        counts = cache.stream_counts(self.file)
        maps = cache.all_properties(self.file)

        if counts is not self._counts_seen:
            self._counts_seen = counts
            self._selection = StreamGroupSelection.from_counts(counts)
            self._rebuild_kind_checkboxes(counts or {})
        self._sync_group_buttons()

        self.btn_json.setEnabled(bool(maps))
        if maps is None:
            loading = cache.state(CacheSlot.ALL_PROPERTIES, self.file) is SlotState.LOADING
            self.btn_retry.setVisible(not loading)
            self.pages.setCurrentIndex(self.PAGE_LOADING)
            return

        instances = self._visible_memo(maps, self._query, self._selection.selected)
        if instances is not self._rendered:
            self._rendered = instances
            self._fill_tree(instances)
        self.pages.setCurrentIndex(self.PAGE_CONTENT if instances else self.PAGE_EMPTY)

    def _fill_tree(self, instances):
        self.tree.clear()
        for item in instances:
            color = QColor(STREAM_KIND_COLORS[item.stream])
            color.setAlpha(0x30)
            parent = QTreeWidgetItem([f"{item.stream.label} ({item.num + 1})", ""])
            font = parent.font(0)
            font.setBold(True)
            parent.setFont(0, font)
            parent.setBackground(0, QBrush(color))
            parent.setBackground(1, QBrush(color))
            for key, value in sorted_entries(item.property_map):
                child = QTreeWidgetItem([key, value])
                child.setToolTip(1, value)
                parent.addChild(child)
            self.tree.addTopLevelItem(parent)
            parent.setExpanded(True)
        self.tree.resizeColumnToContents(0)

    def _rebuild_kind_checkboxes(self, counts):
        for checkbox in self._checkboxes.values():
            self.kind_row.removeWidget(checkbox)
            checkbox.deleteLater()
        self._checkboxes = {}
        for kind in self._selection.available:
            checkbox = QCheckBox(f"{kind.label} ({counts.get(kind, 0)})")
            checkbox.setChecked(True)
            checkbox.toggled.connect(lambda _checked, k=kind: self._on_kind_toggled(k))
            self.kind_row.addWidget(checkbox)
            self._checkboxes[kind] = checkbox

    def _sync_group_buttons(self):
        self.btn_all.setEnabled(self._selection.can_select_all)
        self.btn_none.setEnabled(self._selection.can_select_none)
        for kind, checkbox in self._checkboxes.items():
            checkbox.blockSignals(True)
            checkbox.setChecked(self._selection.is_selected(kind))
            checkbox.blockSignals(False)

    # -------------------------------------------------------------------------
    # SLOTS
    # -------------------------------------------------------------------------

    @Slot(str)
    def _on_cache_changed(self, file: str):
        if file == self.file:
            self.refresh_view()

    @Slot(str)
    def _on_cache_error(self, _message: str):
        # Failures carry no file; a failed slot shows Retry again
        self.refresh_view()

    @Slot(str)
    def _on_query_settled(self, query: str):
        self._query = query
        self.refresh_view()

    def _on_kind_toggled(self, kind):
        self._selection.toggle(kind)
        self.refresh_view()

    def _on_select_all(self):
        self._selection.select_all()
        self.refresh_view()

    def _on_select_none(self):
        self._selection.select_none()
        self.refresh_view()

    def _on_json_clicked(self):
        self.file_manager.show_json(f"{self.file} (All Properties)",
                                    self.session.cache.all_properties(self.file))
