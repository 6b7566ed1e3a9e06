from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from PySide6.QtCore import Qt, QAbstractTableModel, QModelIndex
from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QPushButton,
    QLabel,
    QTableView,
)

# (header, getter, right-aligned)
Column = tuple[str, Callable[[Any], Any], bool]


class RowsTableModel(QAbstractTableModel):
    def __init__(self, columns: Sequence[Column]) -> None:
        super().__init__()
        self.columns = list(columns)
        self._rows: list[Any] = []

    def set_rows(self, rows: list[Any]) -> None:
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()

    def rowCount(self, parent=QModelIndex()) -> int:
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()) -> int:
        return len(self.columns)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):
        if not index.isValid():
            return None

        _, getter, right = self.columns[index.column()]

        if role == Qt.DisplayRole:
            value = getter(self._rows[index.row()])
            return "" if value is None else str(value)

        if role == Qt.TextAlignmentRole and right:
            return Qt.AlignRight | Qt.AlignVCenter

        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole):
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Horizontal:
            return self.columns[section][0]
        return str(section + 1)


class TablePage(QWidget):
    """Read-only listing with a title, a summary line and a refresh button."""

    def __init__(
        self,
        title: str,
        columns: Sequence[Column],
        load_rows: Callable[[], list[Any]],
        summary: Optional[Callable[[], str]] = None,
    ) -> None:
        super().__init__()
        self._load_rows = load_rows
        self._summary = summary

        root = QVBoxLayout(self)

        title_label = QLabel(title)
        title_label.setStyleSheet("font-size: 22px; font-weight: 600;")
        root.addWidget(title_label)

        self.summary_label = QLabel("")
        self.summary_label.setStyleSheet("font-size: 14px; color: #888888;")
        root.addWidget(self.summary_label)

        self.toolbar = QHBoxLayout()
        self.btn_refresh = QPushButton("Refresh")
        self.toolbar.addWidget(self.btn_refresh)
        self.toolbar.addStretch()
        root.addLayout(self.toolbar)

        self.table = QTableView()
        self.model = RowsTableModel(columns)
        self.table.setModel(self.model)
        self.table.setSelectionBehavior(QTableView.SelectRows)
        self.table.horizontalHeader().setStretchLastSection(True)
        root.addWidget(self.table)

        self.btn_refresh.clicked.connect(self.refresh)
        self.refresh()

    def add_action(self, label: str, handler: Callable[[], None]) -> QPushButton:
        button = QPushButton(label)
        button.clicked.connect(handler)
        self.toolbar.insertWidget(self.toolbar.count() - 1, button)
        return button

    def refresh(self) -> None:
        self.model.set_rows(self._load_rows())
        self.table.resizeColumnsToContents()
        if self._summary is not None:
            self.summary_label.setText(self._summary())
