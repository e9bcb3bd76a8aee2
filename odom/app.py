# odom/app.py
import sys
import time
from typing import Optional

from PySide6 import QtCore, QtWidgets

from odom.core.config import OdomConfig, load_config
from odom.core.events import EventEngine
from odom.core.tracking_session import TrackingSession
from odom.location.position_source import PositionError, PositionErrorCode, PositionSource
from odom.location.replay import ReplayPositionSource
from odom.location.simulated import SimulatedPositionSource
from odom.ui.main_window import MainWindow


def _now_ms() -> int:
    return int(time.time() * 1000)


def make_source(cfg: OdomConfig) -> PositionSource:
    if cfg.source == "replay":
        return ReplayPositionSource(path=cfg.replay_path, speed=cfg.replay_speed)
    return SimulatedPositionSource(
        center=cfg.sim_center,
        radius_m=cfg.sim_radius_m,
        speed_mps=cfg.sim_speed_mps,
        jitter_m=cfg.sim_jitter_m,
        interval_s=cfg.sim_interval_s,
    )


class AppController(QtCore.QObject):
    """
    Single writer for the session: position samples, clock ticks and user
    commands all reach TrackingSession from timers/slots on the Qt thread.
    """

    def __init__(self, cfg: Optional[OdomConfig] = None):
        super().__init__()

        self.cfg = cfg or load_config()
        self.session = TrackingSession(noise_threshold_m=self.cfg.noise_threshold_m)
        self.events = EventEngine(stale_after_s=self.cfg.stale_after_s)

        if self.cfg.debug:
            self.session.on_lap_recorded = self._on_lap_recorded

        self.source = make_source(self.cfg)
        self.source.start()

        # Start pressed before the first fix: deadline for the fix
        self._pending_start_deadline: Optional[float] = None

        self.window = MainWindow()
        self.window.set_controller(self)
        self.window.sig_start.connect(self._on_start)
        self.window.sig_lap.connect(self._on_lap)
        self.window.sig_stop.connect(self._on_stop)

        # feed drain: every sample, in arrival order
        self._poll_timer = QtCore.QTimer(self)
        self._poll_timer.setInterval(self.cfg.poll_interval_ms)
        self._poll_timer.timeout.connect(self._poll)
        self._poll_timer.start()

        # elapsed time clock
        self._clock_timer = QtCore.QTimer(self)
        self._clock_timer.setInterval(self.cfg.tick_interval_ms)
        self._clock_timer.timeout.connect(self._tick)
        self._clock_timer.start()

        self._render()

    def shutdown(self) -> None:
        try:
            self.source.stop()
        except Exception:
            pass

    def _poll(self) -> None:
        for pos in self.source.drain():
            self.session.ingest(pos)

        if self._pending_start_deadline is not None:
            self._check_pending_start()

        try:
            self.window.update_feed(self.source.snapshot())
        except Exception as e:
            print("Feed display error:", repr(e))
        self._render()

    def _tick(self) -> None:
        if not self.session.is_running:
            return
        self.session.tick(_now_ms())
        self._render()

    def _render(self) -> None:
        snap = self.session.snapshot()
        try:
            self.window.update_session(snap)
        except Exception as e:
            print("Session display error:", repr(e))

        for ev in self.events.consume(snap, now_ms=_now_ms()):
            self.window.append_event(ev)

    def _check_pending_start(self) -> None:
        err = self.source.last_error()
        if self.source.has_fix():
            self._pending_start_deadline = None
            self.window.set_loading(False)
            self._begin_session()
        elif err is not None and err.code != PositionErrorCode.TIMEOUT:
            self._fail_start(err)
        elif time.monotonic() >= (self._pending_start_deadline or 0.0):
            self._fail_start(
                PositionError(PositionErrorCode.TIMEOUT, f"no fix within {self.cfg.fix_timeout_s:.1f}s")
            )

    def _fail_start(self, err: PositionError) -> None:
        self._pending_start_deadline = None
        self.window.set_loading(False)
        self.window.set_error(err.user_message)

    def _begin_session(self) -> None:
        # samples queued before Start belong to no session
        self.source.drain()
        self.session.start(_now_ms())
        self.window.set_error(None)

    @QtCore.Slot()
    def _on_start(self) -> None:
        if self.session.is_running or self._pending_start_deadline is not None:
            return
        self.window.set_error(None)

        if self.source.has_fix():
            self._begin_session()
        else:
            self._pending_start_deadline = time.monotonic() + self.cfg.fix_timeout_s
            self.window.set_loading(True)
        self._render()

    @QtCore.Slot()
    def _on_lap(self) -> None:
        self.session.lap()
        self._render()

    @QtCore.Slot()
    def _on_stop(self) -> None:
        self.session.stop()
        self._render()

    def _on_lap_recorded(self, lap, session) -> None:
        print(
            f"[session] lap {lap.lap_number}: {lap.lap_time_str} {lap.lap_distance_str} "
            f"(total {lap.time_str} {lap.distance_str})"
        )


def main():
    app = QtWidgets.QApplication(sys.argv)
    app.setStyle("Fusion")

    ctl = AppController()
    ctl.window.show()

    app.aboutToQuit.connect(ctl.shutdown)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
