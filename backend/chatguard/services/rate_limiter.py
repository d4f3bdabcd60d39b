"""
ChatGuard Backend — Sliding Window Rate Limiter
=================================================

What:  Per-client sliding window rate limiter for POST /chat.
How:   Tracks request timestamps per client key in memory.
Who:   Owned by the application (app.state.rate_limiter) and called by ChatService.
When:  First step of every chat request, before the body is validated.

Algorithm: Sliding Window Log
    1. Each client key maps to a list of admitted request timestamps (ms)
    2. On each decision, drop timestamps with `now - t >= window`
    3. If the remaining count >= limit, reject (nothing is recorded)
    4. Otherwise, append `now` and admit

    With the defaults (5 requests / 15,000 ms), calls at t=0..4 are admitted,
    t=5 is rejected, and t=15,001 is admitted again.

    Time complexity: O(k) per call, k = requests in window (bounded by the limit)
    Space complexity: O(n × k), n = tracked clients (bounded by max_clients)

Memory bounds:
    - Every `sweep_interval` calls, keys whose timestamps have all aged out
      are dropped.
    - When a new key would exceed `max_clients`, the least recently seen key
      is evicted.

Thread Safety:
    The read-prune-evaluate-append sequence runs under one threading.Lock,
    so two concurrent requests from the same client cannot both observe a
    stale count. State is per-process; multiple workers each keep their own.
"""

import logging
import threading
from collections import OrderedDict
from typing import List

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """
    In-memory sliding window rate limiter keyed by client.

    Configuration:
        max_requests:   Requests admitted per window (default: 5)
        window_ms:      Window length in milliseconds (default: 15,000)
        max_clients:    Tracked client keys before LRU eviction (default: 10,000)
        sweep_interval: admit() calls between expired-key sweeps (default: 1000)

    Rejection is a normal outcome: admit() returns False and never raises.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_ms: int = 15_000,
        max_clients: int = 10_000,
        sweep_interval: int = 1000,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_ms < 1:
            raise ValueError("window_ms must be at least 1")
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.max_clients = max(1, max_clients)
        self.sweep_interval = max(1, sweep_interval)

        # client key → admitted timestamps, least recently seen first
        self._requests: "OrderedDict[str, List[int]]" = OrderedDict()
        self._lock = threading.Lock()
        self._calls = 0

    # ── Public API ────────────────────────────────────────────────────────

    def admit(self, client_key: str, now: int) -> bool:
        """
        Decide whether a request from `client_key` at `now` (ms) may proceed.

        Admitted requests are recorded; rejected ones are not, so retrying
        while limited does not extend the penalty.
        """
        with self._lock:
            self._calls += 1
            if self._calls % self.sweep_interval == 0:
                self._sweep_locked(now)

            recent = self._recent(client_key, now)

            if len(recent) >= self.max_requests:
                self._store(client_key, recent)
                logger.warning(
                    "Rate limit exceeded for client %s: %d requests in %dms window",
                    client_key,
                    len(recent),
                    self.window_ms,
                )
                return False

            recent.append(now)
            self._store(client_key, recent)
            return True

    def retry_after_ms(self, client_key: str, now: int) -> int:
        """
        Milliseconds until `client_key` would be admitted again.

        Returns 0 when the client is currently under its limit.
        Read-only: the stored history is not modified.
        """
        with self._lock:
            recent = self._recent(client_key, now)
            if len(recent) < self.max_requests:
                return 0
            # The entry that must leave the window to free one slot
            blocking = recent[len(recent) - self.max_requests]
            return max(0, blocking + self.window_ms - now)

    def sweep(self, now: int) -> int:
        """Drop clients with no requests inside the window. Returns how many were dropped."""
        with self._lock:
            return self._sweep_locked(now)

    def history(self, client_key: str) -> List[int]:
        """Copy of the stored timestamps for `client_key` (empty if untracked)."""
        with self._lock:
            return list(self._requests.get(client_key, ()))

    @property
    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._requests)

    def reset(self) -> None:
        with self._lock:
            self._requests.clear()
            self._calls = 0

    # ── Internals (caller holds the lock) ─────────────────────────────────

    def _recent(self, client_key: str, now: int) -> List[int]:
        return [ts for ts in self._requests.get(client_key, ()) if now - ts < self.window_ms]

    def _store(self, client_key: str, timestamps: List[int]) -> None:
        if client_key in self._requests:
            self._requests.move_to_end(client_key)
        elif len(self._requests) >= self.max_clients:
            evicted, _ = self._requests.popitem(last=False)
            logger.debug("Evicted least recently seen client %s", evicted)
        self._requests[client_key] = timestamps

    def _sweep_locked(self, now: int) -> int:
        expired = [
            key for key, timestamps in self._requests.items()
            if not timestamps or now - timestamps[-1] >= self.window_ms
        ]
        for key in expired:
            del self._requests[key]

        if expired:
            logger.debug("Cleaned up %d inactive client entries", len(expired))
        return len(expired)
