"""
AboutView — Versions and the backend's parameter catalog

The catalog can be narrowed by stream and by a debounced property name
filter, and is paginated (10 / 15 / 20 rows per page). The page resets to
the first one whenever a filter or the page size changes.
"""

import re

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QAbstractItemView, QComboBox, QFormLayout, QHBoxLayout, QHeaderView, QLabel,
    QLineEdit, QTableWidget, QTableWidgetItem, QToolButton, QVBoxLayout, QWidget,
)

from core.backend import APP_NAME
from core.debouncer import Debouncer
from core.view_composer import LastResultMemo, Paginator, filter_parameters, parameter_streams

_VERSION_RE = re.compile(r"[^0-9.]+")


class AboutView(QWidget):
    def __init__(self, session, parent=None):
        super().__init__(parent)
        self.session = session
        self._stream = None
        self._query = ""
        self._paginator = Paginator()
        self._streams_memo = LastResultMemo(parameter_streams)
        self._filter_memo = LastResultMemo(filter_parameters)

        self._debouncer = Debouncer(parent=self)
        self._debouncer.settled.connect(self._on_query_settled)

        self._setup_ui()

        session.aboutChanged.connect(self._on_about_changed)
        session.parametersChanged.connect(self._on_parameters_changed)
        session.load_about()
        session.load_parameters()
        self._on_about_changed(session.about)
        self._on_parameters_changed()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)

        form = QFormLayout()
        self.app_version = QLabel()
        self.backend_version = QLabel()
        form.addRow(APP_NAME, self.app_version)
        form.addRow("MediaInfo", self.backend_version)
        layout.addLayout(form)

        filters = QHBoxLayout()
        self.stream_combo = QComboBox()
        self.stream_combo.addItem("All Streams", None)
        self.stream_combo.currentIndexChanged.connect(self._on_stream_changed)
        filters.addWidget(self.stream_combo)
        self.filter_edit = QLineEdit()
        self.filter_edit.setPlaceholderText("Property")
        self.filter_edit.setClearButtonEnabled(True)
        self.filter_edit.textChanged.connect(self._debouncer.setText)
        filters.addWidget(self.filter_edit, 1)
        layout.addLayout(filters)

        self.table = QTableWidget(0, 3)
        self.table.setHorizontalHeaderLabels(["ID", "Stream", "Property"])
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setStretchLastSection(True)
        layout.addWidget(self.table, 1)

        pager = QHBoxLayout()
        pager.addStretch(1)
        pager.addWidget(QLabel("Rows per page:"))
        self.rows_combo = QComboBox()
        for option in self._paginator.options:
            self.rows_combo.addItem(str(option), option)
        self.rows_combo.currentIndexChanged.connect(self._on_rows_per_page_changed)
        pager.addWidget(self.rows_combo)
        self.range_label = QLabel()
        pager.addWidget(self.range_label)
        self.btn_prev = QToolButton()
        self.btn_prev.setArrowType(Qt.LeftArrow)
        self.btn_prev.clicked.connect(lambda: self._go_to(self._paginator.page - 1))
        self.btn_next = QToolButton()
        self.btn_next.setArrowType(Qt.RightArrow)
        self.btn_next.clicked.connect(lambda: self._go_to(self._paginator.page + 1))
        pager.addWidget(self.btn_prev)
        pager.addWidget(self.btn_next)
        layout.addLayout(pager)

    def focus_filter(self):
        self.filter_edit.setFocus()
        self.filter_edit.selectAll()

    # -------------------------------------------------------------------------
    # RENDERING
    # -------------------------------------------------------------------------

    def _apply_filters(self):
        filtered = self._filter_memo(self.session.parameters, self._stream, self._query)
        self._paginator.set_items(filtered)
        self._render_page()

    def _render_page(self):
        items = self._paginator.items()
        self.table.setRowCount(len(items))
        for row, parameter in enumerate(items):
            id_item = QTableWidgetItem(str(parameter.id))
            id_item.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
            self.table.setItem(row, 0, id_item)
            self.table.setItem(row, 1, QTableWidgetItem(parameter.stream))
            self.table.setItem(row, 2, QTableWidgetItem(parameter.property))

        self.range_label.setText(self._paginator.range_label())
        self.btn_prev.setEnabled(self._paginator.page > 0)
        self.btn_next.setEnabled(self._paginator.page < self._paginator.page_count - 1)

    def _go_to(self, page: int):
        self._paginator.set_page(page)
        self._render_page()

    # -------------------------------------------------------------------------
    # SLOTS
    # -------------------------------------------------------------------------

    def _on_about_changed(self, about):
        if about is None:
            return
        self.app_version.setText(f"v{about.app_version}")
        self.backend_version.setText(f"v{_VERSION_RE.sub('', about.backend_version)}")

    def _on_parameters_changed(self):
        streams = self._streams_memo(self.session.parameters)
        self.stream_combo.blockSignals(True)
        self.stream_combo.clear()
        self.stream_combo.addItem("All Streams", None)
        for stream in streams:
            self.stream_combo.addItem(stream, stream)
        index = self.stream_combo.findData(self._stream) if self._stream else 0
        self.stream_combo.setCurrentIndex(max(index, 0))
        self.stream_combo.blockSignals(False)
        self._stream = self.stream_combo.currentData()
        self._apply_filters()

    @Slot(int)
    def _on_stream_changed(self, index: int):
        self._stream = self.stream_combo.itemData(index)
        self._apply_filters()

    @Slot(str)
    def _on_query_settled(self, query: str):
        self._query = query
        self._apply_filters()

    @Slot(int)
    def _on_rows_per_page_changed(self, index: int):
        self._paginator.set_rows_per_page(self.rows_combo.itemData(index))
        self._render_page()
