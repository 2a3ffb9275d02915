"""Qt table model for one page of a list screen.

Column 0 is the row checkbox; the rest come from the screen's
:class:`~shopscope.screens.Column` definitions.  The model holds no view
logic of its own: it renders whatever ``ViewState`` the controller last
produced and reports check-box edits through :attr:`row_toggled`.
"""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt, Signal
from PySide6.QtGui import QColor

from shopscope.screens import ScreenConfig
from shopscope.view.controller import RowView, ViewState
from shopscope.view.sorting import TypeHint

SELECT_COLUMN = 0

ROLE_RECORD = Qt.ItemDataRole.UserRole + 1   # raw record dict
ROLE_ROW_ID = Qt.ItemDataRole.UserRole + 2   # record id string

STATUS_COLORS: dict[str, QColor] = {
    "active": QColor("#27ae60"),
    "published": QColor("#27ae60"),
    "delivered": QColor("#27ae60"),
    "pending": QColor("#f39c12"),
    "processing": QColor("#3498db"),
    "shipped": QColor("#8e44ad"),
    "draft": QColor("#95a5a6"),
    "inactive": QColor("#95a5a6"),
    "out_of_stock": QColor("#e74c3c"),
    "cancelled": QColor("#e74c3c"),
    "refunded": QColor("#e67e22"),
    "suspended": QColor("#e74c3c"),
}


class RecordsTableModel(QAbstractTableModel):
    row_toggled = Signal(str)

    def __init__(self, screen: ScreenConfig, currency: str = "KSh", parent=None):
        super().__init__(parent)
        self._screen = screen
        self._currency = currency
        self._rows: tuple[RowView, ...] = ()

    # -- Required overrides --------------------------------------------------

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._screen.columns) + 1

    def headerData(
        self,
        section: int,
        orientation: Qt.Orientation,
        role: int = Qt.ItemDataRole.DisplayRole,
    ) -> Any:
        if orientation != Qt.Orientation.Horizontal or role != Qt.ItemDataRole.DisplayRole:
            return None
        if section == SELECT_COLUMN:
            return ""
        return self._screen.columns[section - 1].title

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid():
            return None

        row = self._rows[index.row()]
        col = index.column()

        if role == ROLE_RECORD:
            return row.record
        if role == ROLE_ROW_ID:
            return row.id

        if col == SELECT_COLUMN:
            if role == Qt.ItemDataRole.CheckStateRole:
                return Qt.CheckState.Checked if row.selected else Qt.CheckState.Unchecked
            return None

        column = self._screen.columns[col - 1]
        if role == Qt.ItemDataRole.DisplayRole:
            return column.display(row.record, self._currency)
        if role == Qt.ItemDataRole.TextAlignmentRole and column.type_hint is TypeHint.NUMERIC:
            return int(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        if role == Qt.ItemDataRole.ForegroundRole and column.key == "status":
            return STATUS_COLORS.get(str(column.field.get(row.record, "")).lower())
        return None

    def setData(self, index: QModelIndex, value: Any, role: int = Qt.ItemDataRole.EditRole) -> bool:
        if (
            index.isValid()
            and index.column() == SELECT_COLUMN
            and role == Qt.ItemDataRole.CheckStateRole
        ):
            self.row_toggled.emit(self._rows[index.row()].id)
            return True
        return False

    def flags(self, index: QModelIndex) -> Qt.ItemFlag:
        flags = Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable
        if index.column() == SELECT_COLUMN:
            flags |= Qt.ItemFlag.ItemIsUserCheckable
        return flags

    # -- Data manipulation ---------------------------------------------------

    def set_state(self, state: ViewState) -> None:
        """Replace the rows with the page in *state* (full reset)."""
        self.beginResetModel()
        self._rows = state.rows
        self.endResetModel()

    def column_key(self, section: int) -> str | None:
        """Screen column key for header *section* (``None`` for the checkbox)."""
        if section == SELECT_COLUMN or section > len(self._screen.columns):
            return None
        return self._screen.columns[section - 1].key

    def section_for(self, field_name: str) -> int:
        for i, column in enumerate(self._screen.columns, start=1):
            if column.field.name == field_name:
                return i
        return -1
