"""
ChatGuard Backend — Clock Source
==================================

What:  Supplies the current time in integer milliseconds since the epoch.
Who:   Consumed by ChatService, which hands `now` to the rate limiter.

Any zero-argument callable returning an int satisfies the Clock contract,
so tests can drive the limiter with a hand-advanced clock.
"""

import time
from typing import Callable

Clock = Callable[[], int]


class SystemClock:
    """Wall-clock milliseconds, clamped so successive readings never go backwards."""

    def __init__(self) -> None:
        self._last = 0

    def __call__(self) -> int:
        now = int(time.time() * 1000)
        # NTP adjustments can step the wall clock back
        if now < self._last:
            return self._last
        self._last = now
        return now
