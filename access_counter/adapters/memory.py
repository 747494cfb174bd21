import threading
from typing import Dict

from .interface import StoreUnavailable


class MemoryStore:
    """A simple in-memory counter store for tests and local runs.

    Usage:
      s = MemoryStore()
      s.incr("access_count")  # -> 1
      s.set_available(False)
      s.incr("access_count")  # raises StoreUnavailable
    """

    def __init__(self) -> None:
        self._counters: Dict[str, int] = {}
        self._available = True
        self._lock = threading.Lock()

    def set_available(self, available: bool) -> None:
        """Simulate the store going down (False) or coming back (True)."""
        with self._lock:
            self._available = available

    def ping(self) -> None:
        with self._lock:
            if not self._available:
                raise StoreUnavailable("memory store marked unavailable")

    def incr(self, name: str) -> int:
        with self._lock:
            if not self._available:
                raise StoreUnavailable("memory store marked unavailable")
            self._counters[name] = self._counters.get(name, 0) + 1
            return self._counters[name]

    def get(self, name: str) -> int:
        """Current value of ``name``; unset counters read as 0."""
        with self._lock:
            return self._counters.get(name, 0)

    def close(self) -> None:
        pass
