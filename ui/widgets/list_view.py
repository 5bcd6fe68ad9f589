"""
ListView — Card and grid presentation of the session's media files

Features:
- Card view: one card per file (stream counts, per-kind tables)
- List view: sortable grid over the flattened common properties
- Debounced filter shared by both views
- Loading placeholders rendered in place for files still being read
- Empty state with Add Files / Add Folder buttons

All derived data comes from ViewComposer functions wrapped in
LastResultMemo, so unchanged cache snapshots are never recomputed.
"""

from typing import Dict, Tuple

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtGui import QColor, QIcon
from PySide6.QtWidgets import (
    QAbstractItemView, QButtonGroup, QFrame, QHBoxLayout, QHeaderView, QLabel,
    QLineEdit, QProgressBar, QScrollArea, QStackedWidget, QTableView,
    QTableWidget, QTableWidgetItem, QToolButton, QVBoxLayout, QWidget,
)

from core.debouncer import Debouncer
from core.formatting import format_stream_counts
from core.streams import Align
from core.view_composer import (
    LastResultMemo, SortState, build_list_rows, card_sections,
    filter_file_properties, filter_rows, pending_files, sort_rows,
)
from ui.models.list_table_model import ListTableModel

_CELL_ALIGNMENT = {
    Align.LEFT: Qt.AlignLeft | Qt.AlignVCenter,
    Align.RIGHT: Qt.AlignRight | Qt.AlignVCenter,
    Align.CENTER: Qt.AlignCenter,
}


def _tool_button(icon_name: str, tooltip: str, slot=None) -> QToolButton:
    button = QToolButton()
    button.setIcon(QIcon.fromTheme(icon_name))
    button.setToolTip(tooltip)
    button.setAutoRaise(True)
    if slot is not None:
        button.clicked.connect(slot)
    return button


class FileCard(QFrame):
    """Summary card of one file."""

    jsonRequested = Signal(str)
    detailsRequested = Signal(str)
    deleteRequested = Signal(str)

    def __init__(self, file: str, counts, maps, parent=None):
        super().__init__(parent)
        self.file = file
        self.key = (id(counts), id(maps))
        self.setFrameShape(QFrame.StyledPanel)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(4)

        header = QHBoxLayout()
        titles = QVBoxLayout()
        title = QLabel(file)
        title.setWordWrap(True)
        title.setTextInteractionFlags(Qt.TextSelectableByMouse)
        subtitle = QLabel(format_stream_counts(counts))
        subtitle.setEnabled(False)
        titles.addWidget(title)
        titles.addWidget(subtitle)
        header.addLayout(titles, 1)
        header.addWidget(_tool_button("text-x-script", "Json", lambda: self.jsonRequested.emit(file)))
        header.addWidget(_tool_button("document-properties", "Details", lambda: self.detailsRequested.emit(file)))
        header.addWidget(_tool_button("edit-delete", "Delete", lambda: self.deleteRequested.emit(file)))
        layout.addLayout(header)

        for section in card_sections(maps):
            layout.addWidget(self._build_table(section))

    def _build_table(self, section) -> QTableWidget:
        table = QTableWidget(len(section.rows), len(section.definitions))
        table.setHorizontalHeaderLabels(section.headers)
        table.verticalHeader().setVisible(False)
        table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        table.setSelectionMode(QAbstractItemView.NoSelection)
        table.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        table.setHorizontalScrollBarPolicy(Qt.ScrollBarAsNeeded)
        table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        table.horizontalHeader().setStretchLastSection(True)

        background = QColor(section.color)
        background.setAlpha(0x20)
        for column, definition in enumerate(section.definitions):
            header_item = table.horizontalHeaderItem(column)
            header_item.setBackground(background)
            header_item.setTextAlignment(_CELL_ALIGNMENT[definition.align])
            for row, values in enumerate(section.rows):
                item = QTableWidgetItem(values[column])
                item.setTextAlignment(_CELL_ALIGNMENT[definition.align])
                table.setItem(row, column, item)

        table.resizeRowsToContents()
        height = table.horizontalHeader().height() + 2 * table.frameWidth()
        height += sum(table.rowHeight(r) for r in range(table.rowCount()))
        table.setFixedHeight(height + table.horizontalScrollBar().sizeHint().height())
        return table


class PlaceholderCard(QFrame):
    """Card shown in place while a file's counts/common properties load."""

    retryRequested = Signal(str)

    def __init__(self, file: str, parent=None):
        super().__init__(parent)
        self.file = file
        self.setFrameShape(QFrame.StyledPanel)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        label = QLabel(file)
        label.setEnabled(False)
        progress = QProgressBar()
        progress.setRange(0, 0)
        progress.setMaximumWidth(120)
        progress.setTextVisible(False)
        layout.addWidget(label, 1)
        layout.addWidget(progress)
        layout.addWidget(_tool_button("view-refresh", "Retry", lambda: self.retryRequested.emit(file)))


class ListView(QWidget):
    """The always-present List tab."""

    CARD_VIEW = 0
    LIST_VIEW = 1

    def __init__(self, session, file_manager, parent=None):
        super().__init__(parent)
        self.session = session
        self.file_manager = file_manager
        self._query = ""
        self._sort = SortState()
        self._cards: Dict[str, QWidget] = {}

        self._rows_memo = LastResultMemo(build_list_rows)
        self._filter_memo = LastResultMemo(filter_rows)
        self._sort_memo = LastResultMemo(sort_rows)
        self._card_filter_memo = LastResultMemo(filter_file_properties)
        self._card_input_memo = LastResultMemo(self._card_input)

        self._debouncer = Debouncer(parent=self)
        self._debouncer.settled.connect(self._on_query_settled)

        self._setup_ui()

        session.filesChanged.connect(self.refresh_view)
        session.cache.streamCountsChanged.connect(self.refresh_view)
        session.cache.commonPropertiesChanged.connect(self.refresh_view)
        self.refresh_view()

    # -------------------------------------------------------------------------
    # UI
    # -------------------------------------------------------------------------

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(6)

        self.pages = QStackedWidget()
        self.pages.addWidget(self._build_empty_page())
        self.pages.addWidget(self._build_content_page())
        layout.addWidget(self.pages)

    def _build_empty_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.addStretch(1)
        hint = QLabel("Please select some files or a directory,\n"
                      "or drag and drop some files or directories here.")
        hint.setAlignment(Qt.AlignCenter)
        layout.addWidget(hint)
        buttons = QHBoxLayout()
        buttons.addStretch(1)
        buttons.addWidget(_tool_button("document-open", "Add Files", self.file_manager.add_files))
        buttons.addWidget(_tool_button("folder-open", "Add Folder", self.file_manager.add_folder))
        buttons.addStretch(1)
        layout.addLayout(buttons)
        layout.addStretch(2)
        return page

    def _build_content_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(0, 0, 0, 0)

        # View switch
        switch = QHBoxLayout()
        self.btn_card = _tool_button("view-list-details", "Card View")
        self.btn_list = _tool_button("view-list-text", "List View")
        self._view_group = QButtonGroup(self)
        for view_id, button in ((self.CARD_VIEW, self.btn_card), (self.LIST_VIEW, self.btn_list)):
            button.setCheckable(True)
            self._view_group.addButton(button, view_id)
        self.btn_card.setChecked(True)
        self._view_group.idClicked.connect(self._on_view_changed)
        switch.addWidget(self.btn_card)
        switch.addWidget(self.btn_list)
        switch.addStretch(1)
        layout.addLayout(switch)

        # Filter
        self.filter_edit = QLineEdit()
        self.filter_edit.setPlaceholderText("Filter")
        self.filter_edit.setClearButtonEnabled(True)
        self.filter_edit.textChanged.connect(self._debouncer.setText)
        layout.addWidget(self.filter_edit)

        self.views = QStackedWidget()

        # Card view
        self.card_scroll = QScrollArea()
        self.card_scroll.setWidgetResizable(True)
        self.card_container = QWidget()
        self.card_layout = QVBoxLayout(self.card_container)
        self.card_layout.setContentsMargins(0, 0, 0, 0)
        self.card_layout.addStretch(1)
        self.card_scroll.setWidget(self.card_container)
        self.views.addWidget(self.card_scroll)

        # List view
        self.table_model = ListTableModel(self)
        self.table = QTableView()
        self.table.setModel(self.table_model)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setSectionsClickable(True)
        self.table.horizontalHeader().sectionClicked.connect(self._on_header_clicked)
        self.table.doubleClicked.connect(self._on_row_activated)
        self.views.addWidget(self.table)

        # Nothing matches the filter
        self.not_found = QLabel("Not Found")
        self.not_found.setAlignment(Qt.AlignCenter)
        self.views.addWidget(self.not_found)

        layout.addWidget(self.views, 1)
        return page

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def focus_filter(self):
        self.filter_edit.setFocus()
        self.filter_edit.selectAll()

    def refresh_view(self, *_):
        session = self.session
        files = session.files
        self.pages.setCurrentIndex(1 if files else 0)
        if not files:
            self._clear_cards()
            self.table_model.setRows([])
            return

        counts = session.cache.stream_counts_map
        common = session.cache.common_properties_map

        if self._view_group.checkedId() == self.LIST_VIEW:
            rows = self._rows_memo(files, counts, common)
            rows = self._filter_memo(rows, self._query)
            rows = self._sort_memo(rows, self._sort.column, self._sort.ascending,
                                   self._sort_class(self._sort.column))
            self.table_model.setRows(rows)
            visible = bool(rows) or bool(pending_files(files, counts, common))
            self.views.setCurrentIndex(self.LIST_VIEW if visible else 2)
        else:
            file_to_maps = self._card_input_memo(files, counts, common)
            matched = self._card_filter_memo(file_to_maps, self._query)
            pending = pending_files(files, counts, common)
            self._rebuild_cards(files, matched, pending, counts)
            visible = bool(matched) or bool(pending)
            self.views.setCurrentIndex(self.CARD_VIEW if visible else 2)

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    @staticmethod
    def _card_input(files, counts, common):
        return {f: common[f] for f in files if f in counts and f in common}

    def _sort_class(self, column_id):
        for index in range(self.table_model.columnCount()):
            column = self.table_model.column(index)
            if column.column_id == column_id:
                return column.definition.sort_class
        return None

    def _clear_cards(self):
        for widget in self._cards.values():
            widget.deleteLater()
        self._cards = {}

    def _rebuild_cards(self, files, matched, pending, counts):
        pending_set = set(pending)
        cards: Dict[str, QWidget] = {}
        ordered = []
        for file in files:
            widget = None
            if file in matched:
                maps = matched[file]
                key: Tuple[int, int] = (id(counts.get(file)), id(maps))
                existing = self._cards.get(file)
                if isinstance(existing, FileCard) and existing.key == key:
                    widget = existing
                else:
                    widget = FileCard(file, counts.get(file), maps)
                    widget.jsonRequested.connect(self._on_json_requested)
                    widget.detailsRequested.connect(self.session.open_details)
                    widget.deleteRequested.connect(self.session.delete_file)
            elif file in pending_set:
                existing = self._cards.get(file)
                if isinstance(existing, PlaceholderCard):
                    widget = existing
                else:
                    widget = PlaceholderCard(file)
                    widget.retryRequested.connect(self.session.retry)
            if widget is not None:
                cards[file] = widget
                ordered.append(widget)

        for file, widget in self._cards.items():
            if cards.get(file) is not widget:
                widget.deleteLater()
        self._cards = cards

        # Re-insert in session order, stretch stays last
        for position, widget in enumerate(ordered):
            if self.card_layout.indexOf(widget) != position:
                self.card_layout.removeWidget(widget)
                self.card_layout.insertWidget(position, widget)

    @Slot(str)
    def _on_query_settled(self, query: str):
        self._query = query
        self.refresh_view()

    @Slot(int)
    def _on_view_changed(self, view_id: int):
        self.refresh_view()

    @Slot(int)
    def _on_header_clicked(self, section: int):
        column = self.table_model.column(section)
        if column is None:
            return
        new_state = self._sort.toggle(column.column_id, column.definition.sort_class)
        if new_state == self._sort:
            return
        self._sort = new_state
        order = Qt.AscendingOrder if new_state.ascending else Qt.DescendingOrder
        header = self.table.horizontalHeader()
        header.setSortIndicatorShown(True)
        header.setSortIndicator(section, order)
        self.refresh_view()

    def _on_row_activated(self, index):
        file = self.table_model.file_at(index.row())
        if file:
            self.session.open_details(file)

    @Slot(str)
    def _on_json_requested(self, file: str):
        self.file_manager.show_json(f"{file} (Common Properties)",
                                    self.session.cache.common_properties(file))
