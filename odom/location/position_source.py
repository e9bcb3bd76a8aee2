# odom/location/position_source.py
from __future__ import annotations

import queue
import threading
import time
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple

from odom.core.geo import Position


class PositionErrorCode(IntEnum):
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


_USER_MESSAGES = {
    PositionErrorCode.PERMISSION_DENIED: "Location access denied. Please enable location permissions.",
    PositionErrorCode.POSITION_UNAVAILABLE: "Location unavailable. Please try again.",
    PositionErrorCode.TIMEOUT: "Location request timed out. Please try again.",
}


class PositionError(Exception):
    def __init__(self, code: int, detail: str = ""):
        self.code = code
        self.detail = (detail or "").strip()
        super().__init__(self.detail or self.user_message)

    @property
    def user_message(self) -> str:
        try:
            return _USER_MESSAGES[PositionErrorCode(self.code)]
        except ValueError:
            return "Unable to access location."


def now_ms() -> int:
    return int(time.time() * 1000)


class PositionSource(threading.Thread):
    """
    Background producer of Position samples.

    Samples go into a FIFO queue; the consumer (the host) drains it from its
    own thread and feeds the engine, so the engine only ever has one writer.
    Subclasses implement _next_position().
    """

    def __init__(self, name: str = "position"):
        super().__init__(daemon=True, name=name)
        self._stop_evt = threading.Event()
        self._fix_evt = threading.Event()
        self._q: "queue.Queue[Position]" = queue.Queue()

        self._last_fix: Optional[Position] = None
        self._last_rx_time = 0.0
        self._fixes = 0
        self._last_error: Optional[PositionError] = None

    def stop(self) -> None:
        self._stop_evt.set()

    def is_stopping(self) -> bool:
        return self._stop_evt.is_set()

    def has_fix(self) -> bool:
        return self._last_fix is not None

    def last_error(self) -> Optional[PositionError]:
        return self._last_error

    def _set_error(self, err: PositionError) -> None:
        prev = self._last_error
        self._last_error = err
        if prev is None or prev.code != err.code or str(prev) != str(err):
            print(f"[position] {err.user_message} ({err})")

    def _clear_error(self) -> None:
        self._last_error = None

    def _emit(self, pos: Position) -> None:
        self._q.put(pos)
        self._last_fix = pos
        self._last_rx_time = time.time()
        self._fixes += 1
        self._clear_error()
        self._fix_evt.set()

    def drain(self) -> List[Position]:
        out: List[Position] = []
        while True:
            try:
                out.append(self._q.get_nowait())
            except queue.Empty:
                return out

    def wait_for_fix(self, timeout_s: float = 10.0) -> Position:
        """
        Block until the first fix arrives. Raises PositionError on timeout, or
        the source's own error if it has one by then.
        """
        if self._fix_evt.wait(timeout_s) and self._last_fix is not None:
            return self._last_fix
        if self._last_error is not None:
            raise self._last_error
        raise PositionError(PositionErrorCode.TIMEOUT, f"no fix within {timeout_s:.1f}s")

    def snapshot(self) -> Dict[str, Any]:
        fix = self._last_fix
        err = self._last_error
        return {
            "running": self.is_alive() and not self._stop_evt.is_set(),
            "fixes": self._fixes,
            "last_fix": fix.to_dict() if fix is not None else None,
            "last_fix_ms": fix.timestamp if fix is not None else None,
            "lag_s": None if self._last_rx_time == 0 else (time.time() - self._last_rx_time),
            "error": err.user_message if err is not None else None,
            "error_code": int(err.code) if err is not None else None,
        }

    def _next_position(self) -> Optional[Tuple[Position, float]]:
        """
        Return (sample, seconds to wait before the next call), or None when the
        source is exhausted.
        """
        raise NotImplementedError

    def run(self) -> None:
        while not self._stop_evt.is_set():
            try:
                nxt = self._next_position()
                if nxt is None:
                    break
                pos, delay_s = nxt
                self._emit(pos)
                if delay_s > 0:
                    self._stop_evt.wait(delay_s)
            except PositionError as e:
                self._set_error(e)
                self._stop_evt.wait(0.5)
            except Exception as e:
                self._set_error(PositionError(PositionErrorCode.POSITION_UNAVAILABLE, f"source loop error: {e}"))
                self._stop_evt.wait(0.5)
