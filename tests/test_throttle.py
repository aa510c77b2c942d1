"""Tests for request throttles."""

import pytest

from metrics_sync.throttle import FixedDelayThrottle, NoThrottle


class TestFixedDelayThrottle:
    """Test FixedDelayThrottle."""

    def test_sleeps_fixed_interval(self):
        sleeps = []
        throttle = FixedDelayThrottle(0.25, sleep=sleeps.append)

        throttle.wait()
        throttle.wait()

        assert sleeps == [0.25, 0.25]
        assert throttle.calls == 2

    def test_zero_delay_does_not_sleep(self):
        sleeps = []
        throttle = FixedDelayThrottle(0, sleep=sleeps.append)

        throttle.wait()

        assert sleeps == []
        assert throttle.calls == 1

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            FixedDelayThrottle(-1)


def test_no_throttle_returns_immediately():
    assert NoThrottle().wait() is None
