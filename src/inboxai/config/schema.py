"""Pydantic models for the per-user daily agent settings."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from inboxai.errors.exceptions import SettingsValidationError

_SCHEDULE_TIME = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

INVALID_TIME_MESSAGE = 'Invalid schedule time format. Must be HH:mm (e.g., "09:00", "13:30")'
INVALID_MAX_AUTO_RESPONSES_MESSAGE = "Maximum auto-responses must be between 1 and 100"
INVALID_ESCALATION_MESSAGE = "Escalation threshold must be between 0.0 and 1.0"


def validate_schedule_time(time: str) -> bool:
    """True for a 24-hour ``HH:mm`` string."""
    return bool(_SCHEDULE_TIME.match(time))


class _SettingsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class FeatureToggles(_SettingsModel):
    daily_workflow_enabled: bool = Field(default=False, alias="dailyWorkflowEnabled")
    categorization_enabled: bool = Field(default=True, alias="categorizationEnabled")
    faq_detection_enabled: bool = Field(default=True, alias="faqDetectionEnabled")
    voice_matching_enabled: bool = Field(default=True, alias="voiceMatchingEnabled")
    sentiment_analysis_enabled: bool = Field(default=True, alias="sentimentAnalysisEnabled")


class WorkflowSettings(_SettingsModel):
    daily_workflow_time: str = Field(default="09:00", alias="dailyWorkflowTime")
    timezone: str = "UTC"
    max_auto_responses: int = Field(default=20, ge=1, le=100, alias="maxAutoResponses")
    require_approval: bool = Field(default=True, alias="requireApproval")
    escalation_threshold: float = Field(default=0.3, ge=0.0, le=1.0, alias="escalationThreshold")
    active_threshold_minutes: int | None = Field(default=None, alias="activeThresholdMinutes")

    @field_validator("daily_workflow_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        if not validate_schedule_time(value):
            raise ValueError(INVALID_TIME_MESSAGE)
        return value


class ModelPreferences(_SettingsModel):
    categorization: str = "gpt-4o-mini"
    response_generation: str = Field(default="gpt-4-turbo-preview", alias="responseGeneration")
    sentiment_analysis: str = Field(default="gpt-4o-mini", alias="sentimentAnalysis")


class DailyAgentConfig(_SettingsModel):
    """Daily agent settings stored at ``users/{uid}/ai_workflow_config/{uid}``."""

    id: str = ""
    user_id: str = Field(default="", alias="userId")
    features: FeatureToggles = Field(default_factory=FeatureToggles)
    workflow_settings: WorkflowSettings = Field(
        default_factory=WorkflowSettings, alias="workflowSettings"
    )
    model_preferences: ModelPreferences = Field(
        default_factory=ModelPreferences, alias="modelPreferences"
    )
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def check_settings_update(updates: dict[str, Any]) -> None:
    """Validate a partial settings update in its stored (camelCase) shape.

    Raises SettingsValidationError on the first invalid workflow setting.
    """
    workflow = updates.get("workflowSettings") or {}
    time = workflow.get("dailyWorkflowTime")
    if time and not (isinstance(time, str) and validate_schedule_time(time)):
        raise SettingsValidationError(INVALID_TIME_MESSAGE, field="dailyWorkflowTime")

    max_responses = workflow.get("maxAutoResponses")
    if max_responses is not None and not _in_range(max_responses, 1, 100):
        raise SettingsValidationError(
            INVALID_MAX_AUTO_RESPONSES_MESSAGE, field="maxAutoResponses"
        )

    threshold = workflow.get("escalationThreshold")
    if threshold is not None and not _in_range(threshold, 0, 1):
        raise SettingsValidationError(INVALID_ESCALATION_MESSAGE, field="escalationThreshold")


def _in_range(value: Any, low: float, high: float) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and low <= value <= high


def parse_daily_agent_config(raw: dict[str, Any]) -> DailyAgentConfig:
    """Validate a settings mapping in its stored (camelCase) shape."""
    check_settings_update(raw)
    try:
        return DailyAgentConfig.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"])
        raise SettingsValidationError(f"{field}: {first['msg']}", field=field) from e
