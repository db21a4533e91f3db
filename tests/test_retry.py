"""
Unit tests for the exponential backoff helper.
"""
import asyncio

import pytest

from shared.errors import UpstreamCallError
from shared.utils.retry import call_with_backoff


def _is_429(exc):
    return isinstance(exc, UpstreamCallError) and exc.status == 429


class Flaky:
    """Fails with the given errors, then returns 'ok'."""

    def __init__(self, *errors):
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


class TestCallWithBackoff:
    """Tests for retry counts and delays."""

    def test_success_needs_no_retry(self, fake_sleep):
        func = Flaky()
        assert asyncio.run(call_with_backoff(func, is_retryable=_is_429, sleep=fake_sleep)) == "ok"
        assert func.calls == 1
        assert fake_sleep.delays == []

    def test_retryable_errors_back_off_exponentially(self, fake_sleep):
        func = Flaky(*(UpstreamCallError("busy", status=429) for _ in range(3)))
        assert asyncio.run(call_with_backoff(func, is_retryable=_is_429, sleep=fake_sleep)) == "ok"
        assert func.calls == 4
        assert fake_sleep.delays == [1.0, 2.0, 4.0]

    def test_gives_up_after_max_retries(self, fake_sleep):
        func = Flaky(*(UpstreamCallError("busy", status=429) for _ in range(5)))
        with pytest.raises(UpstreamCallError):
            asyncio.run(call_with_backoff(func, is_retryable=_is_429, sleep=fake_sleep))
        assert func.calls == 4
        assert fake_sleep.delays == [1.0, 2.0, 4.0]

    def test_other_errors_are_not_retried(self, fake_sleep):
        func = Flaky(UpstreamCallError("bad request", status=400))
        with pytest.raises(UpstreamCallError):
            asyncio.run(call_with_backoff(func, is_retryable=_is_429, sleep=fake_sleep))
        assert func.calls == 1
        assert fake_sleep.delays == []

    def test_base_delay_scales(self, fake_sleep):
        func = Flaky(UpstreamCallError("busy", status=429), UpstreamCallError("busy", status=429))
        asyncio.run(call_with_backoff(func, base_delay=0.5, is_retryable=_is_429, sleep=fake_sleep))
        assert fake_sleep.delays == [0.5, 1.0]

    def test_last_error_is_reraised_unwrapped(self, fake_sleep):
        errors = [UpstreamCallError(f"busy {i}", status=429) for i in range(4)]
        func = Flaky(*errors)
        with pytest.raises(UpstreamCallError) as exc_info:
            asyncio.run(call_with_backoff(func, max_retries=3, is_retryable=_is_429, sleep=fake_sleep))
        assert exc_info.value is errors[-1]
