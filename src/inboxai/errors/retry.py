"""Retry helpers: HTTP status classification and backoff computation."""

from __future__ import annotations

import logging
import random
from typing import Any

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from inboxai.errors.exceptions import (
    AIError,
    InvalidRequestError,
    NetworkError,
    RateLimitError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnknownError,
)

logger = logging.getLogger(__name__)

_JITTER_FRACTION = 0.3


def classify_status(status: int, detail: str | None = None, retry_after: str | None = None) -> AIError:
    """Map a non-2xx HTTP status from the categorization endpoint to an AIError."""
    if status == 429:
        return RateLimitError(
            "Too many requests. Please try again in a moment.",
            technical_message=f"Rate limit exceeded. Retry after: {retry_after}",
            http_status=429,
            retry_after=_parse_retry_after(retry_after),
        )
    if status == 401:
        return UnauthorizedError(
            "Authentication failed. Please sign in again.",
            technical_message="Endpoint returned 401",
            http_status=401,
        )
    if status == 400:
        return InvalidRequestError(
            "Invalid request. Please try again.",
            technical_message=detail or "Bad request",
            http_status=400,
        )
    if status == 503:
        return ServiceUnavailableError(
            "AI service is temporarily unavailable. Please try again.",
            technical_message="Endpoint returned 503",
            http_status=503,
        )
    return UnknownError(
        "Categorization failed. Please try again.",
        technical_message=f"HTTP {status}: {detail or 'Unknown error'}",
        http_status=status,
    )


def classify_exception(exc: Exception) -> AIError:
    """Convert transport-level and unexpected exceptions to the AIError hierarchy."""
    if isinstance(exc, AIError):
        return exc
    if isinstance(exc, httpx.TransportError):
        return NetworkError(
            "Network error. Please check your connection.",
            technical_message=str(exc) or type(exc).__name__,
        )
    return UnknownError(
        "An unexpected error occurred",
        technical_message=str(exc) or type(exc).__name__,
    )


def compute_backoff(
    attempt: int,
    initial_delay: float = 0.5,
    max_delay: float = 5.0,
    jitter: bool = True,
) -> float:
    """Exponential delay for a zero-based attempt, with up to 30% jitter, capped."""
    delay = initial_delay * (2**attempt)
    if jitter:
        delay += random.uniform(0, delay * _JITTER_FRACTION)
    return min(delay, max_delay)


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, AIError) and exc.retryable


def build_retrying(max_attempts: int, initial_delay: float, max_delay: float, **kwargs: Any) -> AsyncRetrying:
    """Tenacity controller that retries only ``retryable`` AIErrors."""

    def _wait(state: RetryCallState) -> float:
        return compute_backoff(state.attempt_number - 1, initial_delay, max_delay)

    def _log(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(
            "Attempt %d/%d failed (%s), retrying in %.2fs",
            state.attempt_number,
            max_attempts,
            getattr(exc, "error_type", "unknown"),
            state.next_action.sleep if state.next_action else 0.0,
        )

    return AsyncRetrying(
        retry=retry_if_exception(_is_retryable),
        stop=stop_after_attempt(max_attempts),
        wait=_wait,
        before_sleep=_log,
        reraise=True,
        **kwargs,
    )


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
