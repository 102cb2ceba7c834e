from __future__ import annotations

import threading
import time
import uuid
from typing import Callable, Optional


class ScanLock:
    """Single-flight guard per scanner station.

    A station holds the lock while its scan is in flight. An acquisition older
    than ``ttl_seconds`` is treated as abandoned and can be taken over, so a
    crashed request never leaves a station stuck. Each acquisition gets its
    own token; only the current holder's token releases the station.
    """

    def __init__(self, ttl_seconds: float, *, clock: Optional[Callable[[], float]] = None):
        self._ttl = float(ttl_seconds)
        self._clock = clock or time.monotonic
        self._held: dict[str, tuple[float, str]] = {}
        self._mutex = threading.Lock()

    def acquire(self, station_key: str, now: Optional[float] = None) -> Optional[str]:
        """Token for the new hold, or None while another scan holds the station."""
        now = self._clock() if now is None else now
        with self._mutex:
            hold = self._held.get(station_key)
            if hold is not None and now - hold[0] < self._ttl:
                return None
            token = uuid.uuid4().hex
            self._held[station_key] = (now, token)
            return token

    def release(self, station_key: str, token: str) -> bool:
        """Drop the hold if ``token`` still owns it; a stale holder changes nothing."""
        with self._mutex:
            hold = self._held.get(station_key)
            if hold is None or hold[1] != token:
                return False
            del self._held[station_key]
            return True

    def is_held(self, station_key: str, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        with self._mutex:
            hold = self._held.get(station_key)
            return hold is not None and now - hold[0] < self._ttl
