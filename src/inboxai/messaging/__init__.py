"""Messaging workflow: categorization write-back, boundary replies and capacity."""

from inboxai.messaging.analysis import MessageAnalysisService
from inboxai.messaging.boundary import (
    DEFAULT_BOUNDARY_TEMPLATE,
    QuietHours,
    is_quiet_hours,
    render_boundary_template,
    should_not_archive,
)
from inboxai.messaging.capacity import (
    MessageDistribution,
    calculate_time_commitment,
    preview_distribution,
    suggest_capacity,
)

__all__ = [
    "DEFAULT_BOUNDARY_TEMPLATE",
    "MessageAnalysisService",
    "MessageDistribution",
    "QuietHours",
    "calculate_time_commitment",
    "is_quiet_hours",
    "preview_distribution",
    "render_boundary_template",
    "should_not_archive",
    "suggest_capacity",
]
