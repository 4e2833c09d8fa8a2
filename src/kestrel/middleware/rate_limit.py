"""Per-client rate limiting.

A fixed window per client address: the window opens at the client's
first request and lasts ``window_seconds``. Once the client has made
``requests`` requests in the window, every further request is refused
until the window expires.
"""

import threading
import time
from collections.abc import Callable

from kestrel.config import RateLimitConfig
from kestrel.errors import RateLimitExceeded
from kestrel.http.request import Request
from kestrel.http.response import Response
from kestrel.middleware.protocol import Next


class RateLimiter:
    """In-memory request counter keyed by client.

    ``allow()`` checks and counts in one step under a lock, so concurrent
    requests from the same client (threads under a multi-worker server)
    can never both take the last slot.

    Expired windows are swept at most once per window, which bounds the
    state to the clients seen in roughly the last two windows.
    """

    __slots__ = ("_clock", "_config", "_last_sweep", "_lock", "_state")

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (count, window_start)
        self._state: dict[str, tuple[int, float]] = {}
        self._config = RateLimitConfig()
        self._last_sweep = 0.0
        self.configure(config or RateLimitConfig())

    def configure(self, config: RateLimitConfig) -> None:
        """Apply *config* and start a fresh window for every client."""
        if config.requests < 1 or config.window_seconds <= 0:
            msg = f"Rate limit needs requests >= 1 and window_seconds > 0, got {config!r}"
            raise ValueError(msg)
        with self._lock:
            self._config = config
            self._state.clear()
            self._last_sweep = self._clock()

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def allow(self, key: str) -> bool:
        """Count one request for *key*; return whether it may proceed."""
        now = self._clock()
        with self._lock:
            window = self._config.window_seconds
            if now - self._last_sweep >= window:
                self._sweep(now)
            count, window_start = self._state.get(key, (0, now))
            if now - window_start >= window:
                count = 0
                window_start = now
            if count >= self._config.requests:
                return False
            self._state[key] = (count + 1, window_start)
            return True

    def __len__(self) -> int:
        return len(self._state)

    def _sweep(self, now: float) -> None:
        """Drop clients whose window has expired. Caller holds the lock."""
        window = self._config.window_seconds
        self._state = {
            key: entry for key, entry in self._state.items() if now - entry[1] < window
        }
        self._last_sweep = now


class RateLimitMiddleware:
    """Refuse requests from clients over their quota with a 429 envelope."""

    __slots__ = ("limiter",)

    def __init__(self, limiter: RateLimiter) -> None:
        self.limiter = limiter

    async def __call__(self, request: Request, next: Next) -> Response:
        if not self.limiter.allow(request.ip or "unknown"):
            raise RateLimitExceeded()
        return await next(request)
