# odom/ui/main_window.py
from __future__ import annotations

from typing import Any, Dict, Optional

from PySide6 import QtCore, QtWidgets, QtGui

from odom.core.formatting import format_clock_ms
from odom.ui.lap_table import LapTableWidget


class MainWindow(QtWidgets.QMainWindow):
    sig_start = QtCore.Signal()
    sig_lap = QtCore.Signal()
    sig_stop = QtCore.Signal()

    def __init__(self):
        super().__init__()
        self.setWindowTitle("Odom")
        self.resize(420, 720)

        central = QtWidgets.QWidget()
        self.setCentralWidget(central)
        self._build_ui(central)

        # Theme + debug preference
        self._settings = QtCore.QSettings("Odom", "OdomApp")
        theme_default = self._settings.value("ui/theme", "light", type=str)

        menubar = self.menuBar()
        view_menu = menubar.addMenu("View")
        theme_menu = view_menu.addMenu("Theme")

        self._theme_group = QtGui.QActionGroup(self)
        self._theme_group.setExclusive(True)

        def add_theme_action(label: str, key: str) -> QtGui.QAction:
            act = QtGui.QAction(label, self)
            act.setCheckable(True)
            act.setData(key)
            self._theme_group.addAction(act)
            theme_menu.addAction(act)
            return act

        self.act_theme_light = add_theme_action("Light", "light")
        self.act_theme_dark = add_theme_action("Dark", "dark")

        if str(theme_default) == "dark":
            self.act_theme_dark.setChecked(True)
        else:
            self.act_theme_light.setChecked(True)
            theme_default = "light"

        self._theme_group.triggered.connect(self._on_theme_selected)
        self._apply_theme(str(theme_default))

        self.act_debug = QtGui.QAction("GPS Debug Info", self)
        self.act_debug.setCheckable(True)
        self.act_debug.toggled.connect(self._on_debug_toggled)
        view_menu.addAction(self.act_debug)
        self.debug_box.setVisible(False)

    def set_controller(self, controller):
        self._controller = controller

    def _build_ui(self, parent: QtWidgets.QWidget) -> None:
        layout = QtWidgets.QVBoxLayout(parent)

        self.lbl_status = QtWidgets.QLabel("● NO FIX")
        self.lbl_status.setStyleSheet("font-weight: 700; color: #c0392b;")
        layout.addWidget(self.lbl_status)

        # debug readout
        self.debug_box = QtWidgets.QGroupBox("GPS Debug Info")
        grid = QtWidgets.QGridLayout(self.debug_box)

        def add_row(r, name):
            grid.addWidget(QtWidgets.QLabel(name), r, 0)
            val = QtWidgets.QLabel("--")
            val.setTextInteractionFlags(QtCore.Qt.TextSelectableByMouse)
            val.setStyleSheet("font-weight: 600;")
            grid.addWidget(val, r, 1)
            return val

        self.val_lat = add_row(0, "Latitude")
        self.val_lon = add_row(1, "Longitude")
        self.val_updated = add_row(2, "Updated At")
        self.val_feed = add_row(3, "Status")
        self.val_lag = add_row(4, "GPS Lag")
        self.val_samples = add_row(5, "Samples (rejected)")
        layout.addWidget(self.debug_box)

        # stats
        def add_stat(title: str) -> QtWidgets.QLabel:
            lbl = QtWidgets.QLabel(title)
            lbl.setAlignment(QtCore.Qt.AlignCenter)
            lbl.setStyleSheet("color: #7f8c8d;")
            layout.addWidget(lbl)
            val = QtWidgets.QLabel("--")
            val.setAlignment(QtCore.Qt.AlignCenter)
            val.setStyleSheet("font-size: 32px; font-weight: 700; font-family: monospace;")
            layout.addWidget(val)
            return val

        self.val_time = add_stat("Time")
        self.val_distance = add_stat("Distance")
        self.val_time.setText("00:00")
        self.val_distance.setText("0 m")

        # controls
        self.btn_start = QtWidgets.QPushButton("Start")
        self.btn_start.setMinimumHeight(56)
        self.btn_start.clicked.connect(self.sig_start.emit)
        layout.addWidget(self.btn_start)

        self.btn_lap = QtWidgets.QPushButton("Lap")
        self.btn_lap.setMinimumHeight(48)
        self.btn_lap.clicked.connect(self.sig_lap.emit)
        layout.addWidget(self.btn_lap)

        self.btn_stop = QtWidgets.QPushButton("Stop")
        self.btn_stop.setMinimumHeight(48)
        self.btn_stop.clicked.connect(self.sig_stop.emit)
        layout.addWidget(self.btn_stop)

        self.lap_table = LapTableWidget()
        layout.addWidget(self.lap_table, stretch=1)

        self.lbl_error = QtWidgets.QLabel("")
        self.lbl_error.setWordWrap(True)
        self.lbl_error.setStyleSheet("font-weight: 600; color: #c0392b;")
        self.lbl_error.setVisible(False)
        layout.addWidget(self.lbl_error)

        self.event_log = QtWidgets.QPlainTextEdit()
        self.event_log.setReadOnly(True)
        self.event_log.setMaximumBlockCount(500)
        self.event_log.setMaximumHeight(120)
        layout.addWidget(self.event_log)

        self._set_running(False)

    def _set_running(self, running: bool) -> None:
        self.btn_start.setVisible(not running)
        self.btn_lap.setVisible(running)
        self.btn_stop.setVisible(running)

    def set_loading(self, loading: bool) -> None:
        self.btn_start.setEnabled(not loading)
        self.btn_start.setText("Requesting Access..." if loading else "Start")

    def set_error(self, message: Optional[str]) -> None:
        self.lbl_error.setText(message or "")
        self.lbl_error.setVisible(bool(message))

    def update_session(self, snap: Dict[str, Any]) -> None:
        self._set_running(bool(snap.get("running")))
        self.val_time.setText(str(snap.get("elapsed_str") or "00:00"))
        self.val_distance.setText(str(snap.get("total_distance_str") or "0 m"))
        self.lap_table.update_from_laps(snap.get("laps") or [])
        self.val_samples.setText(f"{snap.get('samples_seen', 0)} ({snap.get('samples_rejected', 0)})")

    def update_feed(self, feed: Dict[str, Any]) -> None:
        if feed.get("last_fix") is not None and not feed.get("error"):
            self.lbl_status.setText("● GPS OK")
            self.lbl_status.setStyleSheet("font-weight: 700; color: #27ae60;")
        else:
            self.lbl_status.setText("● NO FIX")
            self.lbl_status.setStyleSheet("font-weight: 700; color: #c0392b;")

        if not self.debug_box.isVisible():
            return

        fix = feed.get("last_fix")
        if fix is None:
            self.val_lat.setText("--")
            self.val_lon.setText("--")
            self.val_updated.setText("--")
        else:
            self.val_lat.setText(f"{float(fix['latitude']):.6f}")
            self.val_lon.setText(f"{float(fix['longitude']):.6f}")
            self.val_updated.setText(format_clock_ms(int(fix["timestamp"])))

        self.val_feed.setText(feed.get("error") or ("GPS tracking active" if feed.get("running") else "Idle"))
        lag = feed.get("lag_s")
        self.val_lag.setText("Waiting..." if lag is None else f"{int(round(lag))}s ago")

    def append_event(self, ev) -> None:
        self.event_log.appendPlainText(
            f"[{QtCore.QDateTime.currentDateTime().toString('HH:mm:ss')}] {ev.title}: {ev.message}"
        )

    @QtCore.Slot(bool)
    def _on_debug_toggled(self, on: bool) -> None:
        self.debug_box.setVisible(bool(on))

    @QtCore.Slot(QtGui.QAction)
    def _on_theme_selected(self, action: QtGui.QAction) -> None:
        key = str(action.data())
        self._settings.setValue("ui/theme", key)
        self._apply_theme(key)

    def _apply_theme(self, theme: str) -> None:
        app = QtWidgets.QApplication.instance()
        if app is None:
            return

        app.setStyle("Fusion")
        p = QtGui.QPalette()

        theme = (theme or "light").strip().lower()

        if theme == "dark":
            p.setColor(QtGui.QPalette.Window, QtGui.QColor(18, 18, 18))
            p.setColor(QtGui.QPalette.WindowText, QtGui.QColor(220, 220, 220))
            p.setColor(QtGui.QPalette.Base, QtGui.QColor(25, 25, 25))
            p.setColor(QtGui.QPalette.AlternateBase, QtGui.QColor(35, 35, 35))
            p.setColor(QtGui.QPalette.Text, QtGui.QColor(220, 220, 220))
            p.setColor(QtGui.QPalette.Button, QtGui.QColor(35, 35, 35))
            p.setColor(QtGui.QPalette.ButtonText, QtGui.QColor(220, 220, 220))
            p.setColor(QtGui.QPalette.BrightText, QtGui.QColor(255, 0, 0))
            p.setColor(QtGui.QPalette.Highlight, QtGui.QColor(38, 79, 120))
            p.setColor(QtGui.QPalette.HighlightedText, QtGui.QColor(255, 255, 255))
            app.setPalette(p)
            app.setStyleSheet("QToolTip { color: #ffffff; background-color: #2b2b2b; border: 1px solid #555; }")
        else:
            p.setColor(QtGui.QPalette.Window, QtGui.QColor(245, 245, 245))
            p.setColor(QtGui.QPalette.WindowText, QtGui.QColor(15, 15, 15))
            p.setColor(QtGui.QPalette.Base, QtGui.QColor(255, 255, 255))
            p.setColor(QtGui.QPalette.AlternateBase, QtGui.QColor(240, 240, 240))
            p.setColor(QtGui.QPalette.Text, QtGui.QColor(15, 15, 15))
            p.setColor(QtGui.QPalette.Button, QtGui.QColor(240, 240, 240))
            p.setColor(QtGui.QPalette.ButtonText, QtGui.QColor(15, 15, 15))
            p.setColor(QtGui.QPalette.Highlight, QtGui.QColor(38, 79, 120))
            p.setColor(QtGui.QPalette.HighlightedText, QtGui.QColor(255, 255, 255))
            app.setPalette(p)
            app.setStyleSheet("QToolTip { color: #111; background-color: #fff; border: 1px solid #888; }")
