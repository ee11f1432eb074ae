"""Token cost accounting per user, rolled up by day and by month."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Literal

from pydantic import BaseModel

from inboxai.errors.exceptions import MetricsUnavailableError
from inboxai.store import paths
from inboxai.store.base import DocumentStore
from inboxai.utils.clock import Clock, local_now
from inboxai.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

Period = Literal["daily", "monthly"]

# USD per 1M tokens
MODEL_PRICING: dict[str, tuple[float, float]] = {
    "gpt-4o-mini": (0.15, 0.60),
    "gpt-4-turbo": (10.0, 30.0),
    "gpt-4-turbo-preview": (10.0, 30.0),
}
_FALLBACK_MODEL = "gpt-4o-mini"

DEFAULT_DAILY_BUDGET_CENTS = 500
BUDGET_ALERT_THRESHOLD = 0.8


def calculate_operation_cost(model_used: str, prompt_tokens: int, completion_tokens: int) -> float:
    """Cost in cents, rounded to 2 decimals.

    Combined model labels such as ``gpt-4o-mini+gpt-4-turbo`` are priced by
    their first model. Unknown models fall back to gpt-4o-mini pricing.
    """
    base_model = model_used.split("+")[0].strip()
    input_price, output_price = MODEL_PRICING.get(base_model, MODEL_PRICING[_FALLBACK_MODEL])
    input_cents = prompt_tokens * input_price / 1_000_000 * 100
    output_cents = completion_tokens * output_price / 1_000_000 * 100
    return round_half_up(input_cents + output_cents, 2)


def period_id(period: Period, moment: date) -> str:
    if period == "daily":
        return f"daily-{moment:%Y-%m-%d}"
    return f"monthly-{moment:%Y-%m}"


class BudgetStatus(BaseModel):
    exceeded: bool
    used_percent: float
    total_cost_cents: float
    budget_limit_cents: float


class PeriodCost(BaseModel):
    period_id: str
    total_cost_cents: float = 0.0
    cost_by_operation: dict[str, float] = {}


class CostTracker:
    def __init__(
        self,
        store: DocumentStore,
        clock: Clock = local_now,
        daily_budget_cents: float = DEFAULT_DAILY_BUDGET_CENTS,
    ) -> None:
        self._store = store
        self._clock = clock
        self._budget_cents = daily_budget_cents

    async def track_model_usage(
        self,
        user_id: str,
        operation: str,
        model_used: str,
        prompt_tokens: int,
        completion_tokens: int,
        period: Period,
    ) -> None:
        """Add one operation's cost to the current period rollup. Never raises."""
        try:
            await self._track(
                user_id, operation, model_used, prompt_tokens, completion_tokens, period
            )
        except Exception as e:
            logger.error("Failed to track %s model usage for %s: %s", period, user_id, e)

    async def get_period_cost(self, user_id: str, pid: str) -> dict | None:
        try:
            return await self._store.get(f"{paths.cost_metrics(user_id)}/{pid}")
        except Exception as e:
            logger.error("Failed to load cost metrics %s: %s", pid, e)
            raise MetricsUnavailableError("Unable to load cost metrics. Please try again.") from e

    async def get_daily_cost(self, user_id: str, day: date | None = None) -> dict | None:
        return await self.get_period_cost(user_id, period_id("daily", day or self._clock()))

    async def get_daily_costs(self, user_id: str, days: int = 30) -> list[PeriodCost]:
        """One entry per day, oldest first; days without spend report zero."""
        today = self._clock()
        results = []
        for offset in range(days - 1, -1, -1):
            pid = period_id("daily", today - timedelta(days=offset))
            doc = await self.get_period_cost(user_id, pid)
            results.append(_period_cost(pid, doc))
        return results

    async def get_monthly_cost(
        self, user_id: str, year: int | None = None, month: int | None = None
    ) -> dict | None:
        now = self._clock()
        target = date(year or now.year, month or now.month, 1)
        return await self.get_period_cost(user_id, period_id("monthly", target))

    async def check_budget_threshold(
        self, user_id: str, threshold: float = BUDGET_ALERT_THRESHOLD
    ) -> BudgetStatus:
        """Compare today's spend against the daily budget. Failures report no spend."""
        try:
            costs = await self.get_daily_cost(user_id)
        except MetricsUnavailableError:
            costs = None
        if not costs:
            return BudgetStatus(
                exceeded=False,
                used_percent=0,
                total_cost_cents=0,
                budget_limit_cents=self._budget_cents,
            )
        used_percent = costs.get("budgetUsedPercent", 0.0)
        return BudgetStatus(
            exceeded=used_percent / 100 >= threshold,
            used_percent=used_percent,
            total_cost_cents=costs.get("totalCostCents", 0.0),
            budget_limit_cents=costs.get("budgetLimitCents", self._budget_cents),
        )

    async def _track(
        self,
        user_id: str,
        operation: str,
        model_used: str,
        prompt_tokens: int,
        completion_tokens: int,
        period: Period,
    ) -> None:
        cost = calculate_operation_cost(model_used, prompt_tokens, completion_tokens)
        total_tokens = prompt_tokens + completion_tokens
        now = self._clock()
        path = f"{paths.cost_metrics(user_id)}/{period_id(period, now)}"

        existing = await self._store.get(path)
        if existing is None:
            start, end = _period_bounds(period, now)
            # merge so a concurrent first rollup's counters survive
            await self._store.set(
                path,
                {
                    "userId": user_id,
                    "period": period,
                    "periodStart": start,
                    "periodEnd": end,
                    "budgetLimitCents": self._budget_cents,
                    "createdAt": now,
                },
                merge=True,
            )
            existing = {}

        new_total = await self._store.increment(path, "totalCostCents", cost)
        await self._store.increment(path, f"costByOperation.{operation}", cost)
        await self._store.increment(path, f"costByModel.{model_used}", cost)
        await self._store.increment(path, "totalTokens", total_tokens)
        await self._store.increment(path, f"tokensByOperation.{operation}", total_tokens)

        budget = existing.get("budgetLimitCents") or self._budget_cents
        used_percent = new_total / budget * 100
        updates: dict = {"budgetUsedPercent": used_percent, "updatedAt": now}
        if used_percent >= BUDGET_ALERT_THRESHOLD * 100 and not existing.get("budgetAlertSent"):
            updates["budgetAlertSent"] = True
            logger.warning(
                "User %s has used %.0f%% of the %s AI budget", user_id, used_percent, period
            )
        if used_percent >= 100 and not existing.get("budgetExceeded"):
            updates["budgetExceeded"] = True
            logger.warning("User %s exceeded the %s AI budget", user_id, period)
        await self._store.update(path, updates)


def _period_bounds(period: Period, now: datetime) -> tuple[datetime, datetime]:
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "daily":
        return start, start.replace(hour=23, minute=59, second=59)
    start = start.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, (next_month - timedelta(days=1)).replace(hour=23, minute=59, second=59)


def _period_cost(pid: str, doc: dict | None) -> PeriodCost:
    if not doc:
        return PeriodCost(period_id=pid)
    return PeriodCost(
        period_id=pid,
        total_cost_cents=doc.get("totalCostCents", 0.0),
        cost_by_operation=doc.get("costByOperation", {}),
    )
