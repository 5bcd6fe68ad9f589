"""
ListTableModel — Grid projection of the list view rows

Columns come from list_view_columns(); cells are formatted on demand with
the column's PropertyDefinition. Sorting is not done here: the view asks
the composer for sorted rows and hands them over with setRows().
"""

from typing import List, Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QColor

from core.streams import Align, STREAM_KIND_COLORS
from core.view_composer import ListColumn, format_cell, list_view_columns

_ALIGNMENT = {
    Align.LEFT: Qt.AlignLeft | Qt.AlignVCenter,
    Align.RIGHT: Qt.AlignRight | Qt.AlignVCenter,
    Align.CENTER: Qt.AlignCenter,
}


class ListTableModel(QAbstractTableModel):
    FileRole = Qt.ItemDataRole.UserRole + 1

    def __init__(self, parent=None):
        super().__init__(parent)
        self._columns: List[ListColumn] = list_view_columns()
        self._rows: List[dict] = []

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def setRows(self, rows: List[dict]) -> None:
        if rows is self._rows:
            return
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()

    def column(self, index: int) -> Optional[ListColumn]:
        if 0 <= index < len(self._columns):
            return self._columns[index]
        return None

    def file_at(self, row: int) -> Optional[str]:
        if 0 <= row < len(self._rows):
            return self._rows[row]["file"]
        return None

    # -------------------------------------------------------------------------
    # QAbstractTableModel
    # -------------------------------------------------------------------------

    def rowCount(self, parent=QModelIndex()):
        return 0 if parent.isValid() else len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return 0 if parent.isValid() else len(self._columns)

    def data(self, index, role=Qt.ItemDataRole.DisplayRole):
        if not index.isValid() or index.row() >= len(self._rows):
            return None

        row = self._rows[index.row()]
        column = self._columns[index.column()]

        if role == Qt.ItemDataRole.DisplayRole:
            return format_cell(column.definition, row, column.column_id)
        if role == Qt.ItemDataRole.ToolTipRole:
            return row.get(column.column_id) or None
        if role == Qt.ItemDataRole.TextAlignmentRole:
            return _ALIGNMENT[column.definition.align]
        if role == self.FileRole:
            return row["file"]
        return None

    def headerData(self, section, orientation, role=Qt.ItemDataRole.DisplayRole):
        if orientation != Qt.Orientation.Horizontal or not 0 <= section < len(self._columns):
            return super().headerData(section, orientation, role)

        column = self._columns[section]
        if role == Qt.ItemDataRole.DisplayRole:
            return column.definition.title
        if role == Qt.ItemDataRole.ToolTipRole:
            return column.column_id
        if role == Qt.ItemDataRole.BackgroundRole:
            color = QColor(STREAM_KIND_COLORS[column.stream])
            color.setAlpha(0x20)
            return color
        if role == Qt.ItemDataRole.TextAlignmentRole:
            return _ALIGNMENT[column.definition.align]
        return None
