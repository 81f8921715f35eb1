"""
Clock collaborators

Ledger timestamps are unix seconds. The clock is injected so every
operation reads time from one place.
"""
import threading
import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Source of ledger time"""

    @abstractmethod
    def now(self) -> int:
        """Current unix timestamp in seconds"""


class SystemClock(Clock):
    """Wall clock of the host"""

    def now(self) -> int:
        return int(time.time())


class FixedClock(Clock):
    """Manually driven clock for tests and replays"""

    def __init__(self, start: int = 1_700_000_000):
        self._now = int(start)
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            return self._now

    def set(self, timestamp: int) -> None:
        with self._lock:
            self._now = int(timestamp)

    def advance(self, seconds: int = 1) -> int:
        with self._lock:
            self._now += int(seconds)
            return self._now
