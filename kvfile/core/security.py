"""Throttling of file rewrites requested over HTTP."""

from __future__ import annotations

import threading
import time
from collections import defaultdict, deque


class RateLimiter:
    """Sliding-window limit on how often one client may rewrite the file.

    Every accepted update reads and rewrites the whole file, so the limit
    bounds the I/O a single client can cause.
    """

    def __init__(self, limit: int, window_seconds: int) -> None:
        self.limit = max(1, limit)
        self.window_seconds = max(1, window_seconds)
        self._rewrites: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def _expire(self, rewrites: deque[float], now: float) -> None:
        horizon = now - self.window_seconds
        while rewrites and rewrites[0] < horizon:
            rewrites.popleft()

    def allow(self, client: str) -> bool:
        """Record a rewrite for ``client`` unless its window is full."""
        now = time.monotonic()
        with self._lock:
            rewrites = self._rewrites[client]
            self._expire(rewrites, now)
            if len(rewrites) >= self.limit:
                return False
            rewrites.append(now)
            return True

    def remaining(self, client: str) -> int:
        with self._lock:
            rewrites = self._rewrites.get(client)
            if rewrites is None:
                return self.limit
            self._expire(rewrites, time.monotonic())
            return max(self.limit - len(rewrites), 0)

    def retry_after(self, client: str) -> int:
        """Whole seconds until ``client`` may rewrite again (0 when allowed)."""
        with self._lock:
            rewrites = self._rewrites.get(client)
            if not rewrites or len(rewrites) < self.limit:
                return 0
            wait = rewrites[0] + self.window_seconds - time.monotonic()
        return max(int(wait) + 1, 1)

    def reset(self) -> None:
        with self._lock:
            self._rewrites.clear()
