"""Delay policies applied between GitHub API requests."""

import time
from typing import Callable


class Throttle:
    """Called once before each throttled request. The base class never waits."""

    def wait(self) -> None:
        pass


class NoThrottle(Throttle):
    """Explicit no-op throttle."""


class FixedDelayThrottle(Throttle):
    """
    Sleep a fixed interval on every call.

    This is a courtesy delay, not a quota-aware rate limiter.
    """

    def __init__(self, delay_seconds: float, sleep: Callable[[float], None] = time.sleep):
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must not be negative, got: {delay_seconds}")
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self.calls = 0

    def wait(self) -> None:
        self.calls += 1
        if self.delay_seconds:
            self._sleep(self.delay_seconds)
