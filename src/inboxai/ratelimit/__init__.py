"""Rate limiting: hourly and daily per-operation counters with usage warnings."""

from inboxai.ratelimit.limiter import RateLimitCheckResult, RateLimiter, RateLimitStatus
from inboxai.ratelimit.limits import RATE_LIMITS, OperationLimits, get_limits
from inboxai.ratelimit.notifications import Notification, Notifier, RecordingNotifier

__all__ = [
    "RATE_LIMITS",
    "Notification",
    "Notifier",
    "OperationLimits",
    "RateLimitCheckResult",
    "RateLimitStatus",
    "RateLimiter",
    "RecordingNotifier",
    "get_limits",
]
