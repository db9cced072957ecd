"""Fixed-window request rate limiter.

Counters live in process memory, so every limiter instance (and every
process) counts on its own, and a restart forgets all clients.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)


@dataclass
class RateLimitDecision:
    """Outcome of counting one request against a client's window"""
    allowed: bool
    limit: int
    remaining: int
    reset_after: float

    @property
    def retry_after(self) -> int:
        """Whole seconds until the window resets, for the Retry-After header"""
        return max(1, math.ceil(self.reset_after))


@dataclass
class _Window:
    started_at: float
    count: int = 0


class FixedWindowRateLimiter:
    """
    Counts requests per key in fixed windows.

    A key's window opens with its first request and lasts `window_seconds`;
    once `max_requests` have been counted, further requests are refused until
    the window expires and a fresh one opens.
    """

    def __init__(
        self,
        max_requests: int = 60,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._last_sweep = clock()

    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for `key` and report whether it may proceed"""
        now = self._clock()
        self._sweep(now)

        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.window_seconds:
            window = _Window(started_at=now)
            self._windows[key] = window

        window.count += 1
        reset_after = window.started_at + self.window_seconds - now
        allowed = window.count <= self.max_requests

        if not allowed:
            logger.debug(f"Rate limit exhausted for {key} ({window.count}/{self.max_requests})")

        return RateLimitDecision(
            allowed=allowed,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - window.count),
            reset_after=reset_after
        )

    def reset(self, key: str = None) -> None:
        """Forget one client's window, or every window when no key is given"""
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)

    @property
    def tracked_keys(self) -> int:
        """Number of clients with a live window"""
        return len(self._windows)

    def _sweep(self, now: float) -> None:
        # Drop expired windows at most once per window length
        if now - self._last_sweep < self.window_seconds:
            return
        expired = [
            key for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now
