"""Collection and document paths used across the service layer."""

from __future__ import annotations

RATE_LIMITS = "rate_limits"
AB_TESTS = "ai_ab_tests"
CONVERSATIONS = "conversations"
VOICE_PROFILES = "voice_profiles"
ENGAGEMENT_METRICS = "engagement_metrics"
USERS = "users"


def ai_cache(user_id: str) -> str:
    return f"users/{user_id}/ai_cache"


def performance_metrics(user_id: str) -> str:
    return f"users/{user_id}/ai_performance_metrics"


def cost_metrics(user_id: str) -> str:
    return f"users/{user_id}/ai_cost_metrics"


def workflow_config(user_id: str) -> str:
    return f"users/{user_id}/ai_workflow_config/{user_id}"


def user(user_id: str) -> str:
    return f"{USERS}/{user_id}"


def conversation(conversation_id: str) -> str:
    return f"{CONVERSATIONS}/{conversation_id}"


def messages(conversation_id: str) -> str:
    return f"{CONVERSATIONS}/{conversation_id}/messages"


def message(conversation_id: str, message_id: str) -> str:
    return f"{messages(conversation_id)}/{message_id}"


def voice_profile(user_id: str) -> str:
    return f"{VOICE_PROFILES}/{user_id}"
