"""Custom exception hierarchy for inboxai."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class AIErrorType(StrEnum):
    NETWORK = "network"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMIT = "rate_limit"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INVALID_REQUEST = "invalid_request"
    UNKNOWN = "unknown"


class InboxAIError(Exception):
    """Base exception for all inboxai errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class AIError(InboxAIError):
    """Failure of a user-facing AI operation.

    ``message`` is safe to show to the user; ``technical_message`` carries the
    underlying detail for logs. Only ``retryable`` errors are retried.
    """

    error_type: AIErrorType = AIErrorType.UNKNOWN
    default_retryable: bool = False

    def __init__(
        self,
        message: str = "",
        technical_message: str | None = None,
        retryable: bool | None = None,
        http_status: int | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message)
        self.technical_message = technical_message
        self.retryable = self.default_retryable if retryable is None else retryable
        self.http_status = http_status
        self.retry_after = retry_after


class NetworkError(AIError):
    """Connection failure or timeout before a response arrived."""

    error_type = AIErrorType.NETWORK
    default_retryable = True


class UnauthorizedError(AIError):
    error_type = AIErrorType.UNAUTHORIZED


class RateLimitError(AIError):
    """429 from the endpoint (retryable) or a local limit hit (not retryable)."""

    error_type = AIErrorType.RATE_LIMIT
    default_retryable = True


class ServiceUnavailableError(AIError):
    error_type = AIErrorType.SERVICE_UNAVAILABLE
    default_retryable = True


class InvalidRequestError(AIError):
    error_type = AIErrorType.INVALID_REQUEST


class UnknownError(AIError):
    error_type = AIErrorType.UNKNOWN
    default_retryable = True


class StoreError(InboxAIError):
    """The document store rejected or failed an operation."""


class DocumentNotFoundError(StoreError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Document not found: {path}")
        self.path = path


class SettingsValidationError(InboxAIError, ValueError):
    """Invalid user-supplied settings. Raised before any network call."""

    def __init__(self, message: str = "", field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class MetricsUnavailableError(InboxAIError):
    """Analytics could not be loaded for display."""


class OpportunityParseError(InboxAIError, ValueError):
    """Model output for opportunity scoring did not match the expected shape."""
