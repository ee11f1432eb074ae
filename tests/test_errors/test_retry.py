"""Tests for retry logic."""

import httpx
import pytest

from inboxai.errors.exceptions import (
    InvalidRequestError,
    NetworkError,
    RateLimitError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnknownError,
)
from inboxai.errors.retry import (
    build_retrying,
    classify_exception,
    classify_status,
    compute_backoff,
)


class TestClassifyStatus:
    def test_rate_limit(self):
        err = classify_status(429, retry_after="12")
        assert isinstance(err, RateLimitError)
        assert err.retryable
        assert err.retry_after == 12.0
        assert err.message == "Too many requests. Please try again in a moment."

    def test_rate_limit_unparseable_retry_after(self):
        assert classify_status(429, retry_after="soon").retry_after is None

    def test_unauthorized(self):
        err = classify_status(401)
        assert isinstance(err, UnauthorizedError)
        assert not err.retryable

    def test_bad_request(self):
        err = classify_status(400, detail="missing messageText")
        assert isinstance(err, InvalidRequestError)
        assert err.technical_message == "missing messageText"
        assert not err.retryable

    def test_service_unavailable(self):
        err = classify_status(503)
        assert isinstance(err, ServiceUnavailableError)
        assert err.retryable

    def test_other_status(self):
        err = classify_status(500, detail="boom")
        assert isinstance(err, UnknownError)
        assert err.http_status == 500
        assert err.technical_message == "HTTP 500: boom"
        assert err.retryable


class TestClassifyException:
    def test_transport_error(self):
        err = classify_exception(httpx.ConnectTimeout("timed out"))
        assert isinstance(err, NetworkError)
        assert err.technical_message == "timed out"

    def test_passthrough(self):
        original = UnauthorizedError("nope")
        assert classify_exception(original) is original

    def test_unexpected(self):
        err = classify_exception(KeyError("x"))
        assert isinstance(err, UnknownError)
        assert err.message == "An unexpected error occurred"


class TestComputeBackoff:
    def test_exponential_without_jitter(self):
        delays = [compute_backoff(i, 0.5, 5.0, jitter=False) for i in range(5)]
        assert delays == [0.5, 1.0, 2.0, 4.0, 5.0]

    def test_jitter_bounded(self):
        for _ in range(50):
            delay = compute_backoff(1, 0.5, 5.0)
            assert 1.0 <= delay <= 1.3

    def test_capped(self):
        assert compute_backoff(10, 0.5, 5.0) == 5.0


class TestBuildRetrying:
    async def test_retries_retryable_errors(self):
        sleeps = []

        async def sleep(seconds):
            sleeps.append(seconds)

        calls = 0
        retrying = build_retrying(3, 0.5, 5.0, sleep=sleep)
        async for attempt in retrying:
            with attempt:
                calls += 1
                if calls < 3:
                    raise NetworkError("offline")

        assert calls == 3
        assert len(sleeps) == 2
        assert 0.5 <= sleeps[0] <= 0.65
        assert 1.0 <= sleeps[1] <= 1.3

    async def test_stops_on_non_retryable(self):
        calls = 0

        async def sleep(_seconds):
            return None

        with pytest.raises(UnauthorizedError):
            async for attempt in build_retrying(3, 0.5, 5.0, sleep=sleep):
                with attempt:
                    calls += 1
                    raise UnauthorizedError("signed out")
        assert calls == 1

    async def test_reraises_after_last_attempt(self):
        calls = 0

        async def sleep(_seconds):
            return None

        with pytest.raises(ServiceUnavailableError):
            async for attempt in build_retrying(2, 0.5, 5.0, sleep=sleep):
                with attempt:
                    calls += 1
                    raise ServiceUnavailableError("down")
        assert calls == 2
