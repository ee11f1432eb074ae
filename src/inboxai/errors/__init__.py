"""Error handling: exception taxonomy and retry helpers."""

from inboxai.errors.exceptions import (
    AIError,
    AIErrorType,
    DocumentNotFoundError,
    InboxAIError,
    InvalidRequestError,
    MetricsUnavailableError,
    NetworkError,
    OpportunityParseError,
    RateLimitError,
    ServiceUnavailableError,
    SettingsValidationError,
    StoreError,
    UnauthorizedError,
    UnknownError,
)

__all__ = [
    "InboxAIError",
    "AIError",
    "AIErrorType",
    "NetworkError",
    "UnauthorizedError",
    "RateLimitError",
    "ServiceUnavailableError",
    "InvalidRequestError",
    "UnknownError",
    "StoreError",
    "DocumentNotFoundError",
    "SettingsValidationError",
    "MetricsUnavailableError",
    "OpportunityParseError",
]
