import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Protocol


class RateLimiter(Protocol):
    """Per-client request budget. Swap in a shared store for multi-process deployments."""

    def check_and_increment(self, client_id: str) -> bool:
        """Count one request for ``client_id``; False once the budget is exhausted."""
        ...


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """
    In-memory fixed-window counter keyed by client identity.

    Expired windows are swept at most once per window length, so memory
    follows the number of recently active clients. Counters are lost on
    restart; this is abuse mitigation, not accounting.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + window_seconds

    @property
    def active_clients(self) -> int:
        """Number of clients currently holding a window."""
        with self._lock:
            return len(self._windows)

    def _sweep(self, now: float) -> None:
        # caller holds the lock; at most one sweep per window
        if now < self._next_sweep:
            return
        expired = [client for client, window in self._windows.items() if now > window.reset_at]
        for client in expired:
            del self._windows[client]
        self._next_sweep = now + self.window_seconds

    def check_and_increment(self, client_id: str) -> bool:
        now = self._clock()
        with self._lock:
            self._sweep(now)
            window = self._windows.get(client_id)
            if window is None or now > window.reset_at:
                window = _Window(count=0, reset_at=now + self.window_seconds)
                self._windows[client_id] = window
            window.count += 1
            return window.count <= self.max_requests

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


class NoRateLimit:
    """Limiter that allows everything."""

    def check_and_increment(self, client_id: str) -> bool:
        return True
