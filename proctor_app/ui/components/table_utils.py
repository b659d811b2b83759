"""Shared helpers for the read-only result tables."""

from __future__ import annotations

from collections.abc import Sequence

from PySide6.QtGui import QColor
from PySide6.QtWidgets import QAbstractItemView, QHeaderView, QTableWidget, QTableWidgetItem, QWidget


def make_table(columns: Sequence[str], parent: QWidget | None = None) -> QTableWidget:
    table = QTableWidget(0, len(columns), parent)
    table.setHorizontalHeaderLabels(list(columns))
    table.setEditTriggers(QAbstractItemView.NoEditTriggers)
    table.setSelectionBehavior(QAbstractItemView.SelectRows)
    table.setSelectionMode(QAbstractItemView.SingleSelection)
    table.setAlternatingRowColors(True)
    table.verticalHeader().setVisible(False)
    table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
    return table


def fill_table(
    table: QTableWidget,
    rows: Sequence[Sequence[object]],
    colors: Sequence[str | None] | None = None,
) -> None:
    """Replace the table contents; ``colors`` optionally tints each row's text."""
    table.setRowCount(len(rows))
    for row_index, row in enumerate(rows):
        color = colors[row_index] if colors is not None else None
        for column_index, value in enumerate(row):
            item = QTableWidgetItem("" if value is None else str(value))
            if color:
                item.setForeground(QColor(color))
            table.setItem(row_index, column_index, item)


def format_duration(seconds: int) -> str:
    minutes, rest = divmod(max(0, seconds), 60)
    return f"{minutes}:{rest:02d}"
