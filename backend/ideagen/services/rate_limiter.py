"""Fixed-window request budget, applied before the pipeline runs."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Tuple

logger = logging.getLogger(__name__)


class FixedWindowRateLimiter:
    """At most `max_requests` per client per `window_seconds` window.

    The window starts at a client's first request and resets once it has
    fully elapsed.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, client_key: str) -> bool:
        """Count one request; False when the client is over budget."""
        now = self._clock()
        with self._lock:
            started, count = self._windows.get(client_key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            if count >= self.max_requests:
                self._windows[client_key] = (started, count)
                return False
            self._windows[client_key] = (started, count + 1)
            return True

    def retry_after(self, client_key: str) -> int:
        with self._lock:
            started, _ = self._windows.get(client_key, (self._clock(), 0))
        return max(1, int(self.window_seconds - (self._clock() - started) + 0.999))

    def purge(self) -> int:
        """Forget clients whose window has fully elapsed; return how many."""
        now = self._clock()
        with self._lock:
            stale = [key for key, (started, _) in self._windows.items() if now - started >= self.window_seconds]
            for key in stale:
                del self._windows[key]
        return len(stale)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
