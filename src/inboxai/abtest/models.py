"""A/B test documents and comparison results."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class VariantConfig(_Document):
    model: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class VariantResults(_Document):
    total_operations: int = Field(default=0, alias="totalOperations")
    average_latency: float = Field(default=0.0, alias="averageLatency")
    average_cost: float = Field(default=0.0, alias="averageCost")
    success_rate: float = Field(default=0.0, alias="successRate")
    user_satisfaction_rating: float | None = Field(default=None, alias="userSatisfactionRating")


class ABTestResults(_Document):
    variant_a: VariantResults = Field(default_factory=VariantResults, alias="variantA")
    variant_b: VariantResults = Field(default_factory=VariantResults, alias="variantB")


class ABTestConfig(_Document):
    """Stored under ``ai_ab_tests/{id}``."""

    id: str
    name: str
    operation: str
    variant_a: VariantConfig = Field(alias="variantA")
    variant_b: VariantConfig = Field(alias="variantB")
    split_ratio: float = Field(default=0.5, ge=0.0, le=1.0, alias="splitRatio")
    active: bool = True
    start_date: datetime = Field(alias="startDate")
    end_date: datetime | None = Field(default=None, alias="endDate")
    results: ABTestResults | None = None


class SampleSize(BaseModel):
    variant_a: int
    variant_b: int


class ComparisonResult(BaseModel):
    winner: Literal["A", "B", "tie"]
    confidence: int
    latency_diff: float
    cost_diff: float
    success_rate_diff: float
    variant_a_score: float
    variant_b_score: float
    recommendation: str
    sample_size: SampleSize
