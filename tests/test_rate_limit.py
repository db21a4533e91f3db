"""
Unit tests for the fixed-window rate limiter.
"""

from shared.utils.rate_limit import FixedWindowRateLimiter, NoRateLimit


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestFixedWindowRateLimiter:
    """Tests for per-client budgets and window resets."""

    def test_allows_up_to_limit(self):
        limiter = FixedWindowRateLimiter(3, 60, clock=FakeClock())
        assert [limiter.check_and_increment("a") for _ in range(4)] == [True, True, True, False]

    def test_clients_are_independent(self):
        limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())
        assert limiter.check_and_increment("a")
        assert not limiter.check_and_increment("a")
        assert limiter.check_and_increment("b")

    def test_window_resets(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        assert limiter.check_and_increment("a")
        assert not limiter.check_and_increment("a")
        clock.now += 61
        assert limiter.check_and_increment("a")

    def test_reset_clears_counters(self):
        limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())
        limiter.check_and_increment("a")
        limiter.reset()
        assert limiter.check_and_increment("a")

    def test_no_rate_limit(self):
        limiter = NoRateLimit()
        assert all(limiter.check_and_increment("a") for _ in range(100))


class TestWindowEviction:
    """Tests for dropping expired client windows."""

    def test_expired_clients_are_removed(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(5, 60, clock=clock)
        for i in range(1000):
            limiter.check_and_increment(f"10.0.{i // 256}.{i % 256}")
        assert limiter.active_clients == 1000

        clock.now += 10000
        assert limiter.check_and_increment("192.168.0.1")
        assert limiter.active_clients == 1

    def test_live_windows_survive_a_sweep(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        limiter.check_and_increment("old")
        clock.now += 50
        limiter.check_and_increment("recent")
        clock.now += 20
        limiter.check_and_increment("new")
        assert limiter.active_clients == 2
        assert not limiter.check_and_increment("recent")
