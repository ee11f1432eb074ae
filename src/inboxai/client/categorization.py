"""HTTP client for the message categorization endpoint."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from pydantic import ValidationError

from inboxai.cache.keys import generate_cache_key
from inboxai.cache.service import AICache
from inboxai.cache.ttl import is_caching_enabled
from inboxai.errors.exceptions import (
    AIError,
    AIErrorType,
    InvalidRequestError,
    RateLimitError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnknownError,
)
from inboxai.errors.retry import build_retrying, classify_exception, classify_status
from inboxai.metrics.performance import OperationOutcome, PerformanceTracker
from inboxai.ratelimit.limiter import RateLimiter
from inboxai.types import CategorizationResult, Operation, RetryConfig
from inboxai.utils.clock import Clock, epoch_ms, local_now

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str]]

CATEGORIZE_PATH = "/api/categorize-message"
DEFAULT_MODEL = "gpt-4o-mini"
_DEFAULT_TIMEOUT = 30.0

# Error types as recorded in performance metrics
_METRIC_ERROR_TYPES = {
    AIErrorType.NETWORK: "network",
    AIErrorType.RATE_LIMIT: "rate_limit",
    AIErrorType.SERVICE_UNAVAILABLE: "timeout",
}


class CategorizationClient:
    """Categorizes messages through the edge endpoint.

    Gates on the AI switch, the local rate limit and the endpoint
    configuration, then consults the cache before calling out with bounded
    retries. Only a successful call counts against the rate limit.
    """

    def __init__(
        self,
        base_url: str | None,
        token_provider: TokenProvider,
        cache: AICache | None,
        limiter: RateLimiter,
        tracker: PerformanceTracker,
        http_client: httpx.AsyncClient | None = None,
        retry: RetryConfig | None = None,
        ai_enabled: bool = True,
        clock: Clock = local_now,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._token_provider = token_provider
        self._cache = cache
        self._limiter = limiter
        self._tracker = tracker
        self._http = http_client or httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT)
        self._owns_http = http_client is None
        self._retry = retry or RetryConfig()
        self._ai_enabled = ai_enabled
        self._clock = clock
        self._retry_kwargs: dict[str, Any] = {"sleep": sleep} if sleep is not None else {}
        if not self._base_url:
            logger.warning("Categorization endpoint URL not configured; AI features will not work")

    def is_available(self) -> bool:
        return self._ai_enabled and bool(self._base_url)

    async def categorize_message(
        self,
        message_id: str,
        text: str,
        conversation_id: str,
        sender_id: str,
    ) -> CategorizationResult:
        operation = Operation.CATEGORIZATION

        if not self._ai_enabled:
            raise ServiceUnavailableError(
                "AI features are currently disabled",
                technical_message="ai_enabled is false",
                retryable=False,
            )

        check = await self._limiter.check_limit(sender_id, operation)
        if not check.allowed:
            raise RateLimitError(
                check.status.message or "Rate limit exceeded",
                technical_message=f"Rate limit: {check.reason}",
                retryable=False,
            )

        if not self._base_url:
            raise InvalidRequestError(
                "AI service not configured",
                technical_message="Categorization endpoint URL not set",
            )

        operation_id = self._tracker.track_start(
            f"categorize_{message_id}_{epoch_ms(self._clock())}", operation
        )

        cache_key = None
        if self._cache is not None and is_caching_enabled(operation):
            cache_key = generate_cache_key(text, operation)
            cached = await self._cache.get_cached_result(cache_key, sender_id)
            result = None
            if cached:
                try:
                    result = CategorizationResult.model_validate(cached)
                except ValidationError as e:
                    logger.warning("Ignoring unreadable cache entry %s: %s", cache_key, e)
            if result is not None:
                logger.info("Cache hit for message %s", message_id)
                result.cached = True
                self._tracker.track_end(
                    operation_id,
                    OperationOutcome(
                        user_id=sender_id,
                        operation=operation,
                        success=True,
                        model_used=result.model or DEFAULT_MODEL,
                        cache_hit=True,
                        cache_key=cache_key,
                    ),
                )
                return result

        body = {
            "messageId": message_id,
            "messageText": text,
            "conversationId": conversation_id,
            "senderId": sender_id,
        }
        retrying = build_retrying(
            self._retry.max_attempts,
            self._retry.initial_delay,
            self._retry.max_delay,
            **self._retry_kwargs,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    result = await self._post(body)
        except AIError as e:
            self._tracker.track_end(
                operation_id,
                OperationOutcome(
                    user_id=sender_id,
                    operation=operation,
                    success=False,
                    error_type=_METRIC_ERROR_TYPES.get(e.error_type, "unknown"),
                    model_used=DEFAULT_MODEL,
                ),
            )
            if not e.retryable:
                raise
            attempts = retrying.statistics.get("attempt_number", self._retry.max_attempts)
            logger.error("Categorization of %s failed after %d attempts", message_id, attempts)
            raise type(e)(
                f"Categorization failed after {attempts} attempts. {e.message}".strip(),
                technical_message=e.technical_message,
                retryable=False,
                http_status=e.http_status,
            ) from e

        if cache_key is not None and self._cache is not None:
            await self._cache.set_cached_result(
                cache_key, sender_id, operation, result.to_document()
            )
        self._tracker.track_end(
            operation_id,
            OperationOutcome(
                user_id=sender_id,
                operation=operation,
                success=True,
                model_used=result.model or DEFAULT_MODEL,
                cache_key=cache_key,
            ),
        )
        await self._limiter.increment(sender_id, operation)
        return result

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _post(self, body: dict[str, Any]) -> CategorizationResult:
        token = await self._auth_token()
        try:
            response = await self._http.post(
                f"{self._base_url}{CATEGORIZE_PATH}",
                json=body,
                headers={"Authorization": f"Bearer {token}"},
            )
        except Exception as e:
            raise classify_exception(e) from e

        if not response.is_success:
            raise classify_status(
                response.status_code,
                detail=_error_detail(response),
                retry_after=response.headers.get("Retry-After"),
            )

        try:
            result = CategorizationResult.model_validate(response.json())
        except Exception as e:
            raise UnknownError(
                "Categorization failed. Please try again.",
                technical_message=f"Malformed response: {e}",
            ) from e
        if not result.success:
            raise UnknownError(
                result.error or "Categorization failed",
                technical_message="Endpoint returned success: false",
            )
        return result

    async def _auth_token(self) -> str:
        try:
            token = await self._token_provider()
        except AIError:
            raise
        except Exception as e:
            raise UnauthorizedError(
                "Failed to get authentication token", technical_message=str(e)
            ) from e
        if not token:
            raise UnauthorizedError(
                "You must be signed in to use AI features",
                technical_message="No authenticated user found",
            )
        return token


def _error_detail(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    return data.get("error") if isinstance(data, dict) else None
