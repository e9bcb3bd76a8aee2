# odom/ui/lap_table.py
from __future__ import annotations

from typing import Any, Dict, List

from PySide6 import QtWidgets, QtCore

from odom.core.formatting import format_distance, format_time


class LapTableWidget(QtWidgets.QWidget):
    """
    Recorded laps, newest first.
    """

    def __init__(self):
        super().__init__()
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        title = QtWidgets.QLabel("Laps")
        title.setStyleSheet("font-weight: 700;")
        layout.addWidget(title)

        self.table = QtWidgets.QTableWidget(0, 4)
        self.table.setHorizontalHeaderLabels(["Lap", "Time", "+Distance", "+Lap Time"])
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.table.setAlternatingRowColors(True)
        layout.addWidget(self.table)

        # skip redraws when nothing changed
        self._shown_count = -1

    def clear(self) -> None:
        self.table.setRowCount(0)
        self._shown_count = 0

    def update_from_laps(self, laps: List[Dict[str, Any]]) -> None:
        if len(laps) == self._shown_count:
            return
        if not laps:
            self.clear()
            return

        self.table.setRowCount(len(laps))

        def qitem(txt: str) -> QtWidgets.QTableWidgetItem:
            it = QtWidgets.QTableWidgetItem(txt)
            it.setTextAlignment(QtCore.Qt.AlignCenter)
            return it

        for r, lap in enumerate(reversed(laps)):
            self.table.setItem(r, 0, qitem(f"Lap {int(lap['lap_number'])}"))
            self.table.setItem(r, 1, qitem(format_time(int(lap["cumulative_time_s"]))))
            self.table.setItem(r, 2, qitem("+" + format_distance(float(lap["lap_distance_m"]))))
            self.table.setItem(r, 3, qitem("+" + format_time(int(lap["lap_time_s"]))))

        self.table.resizeColumnsToContents()
        self._shown_count = len(laps)
