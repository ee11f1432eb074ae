"""Top-level wiring: ServiceContext builds every service from one config dict."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from inboxai.abtest.manager import ABTestManager
from inboxai.cache.service import AICache
from inboxai.client.categorization import CategorizationClient, TokenProvider
from inboxai.concurrency.background import BackgroundTasks
from inboxai.config.defaults import get_defaults
from inboxai.config.hierarchy import load_config_hierarchy
from inboxai.config.loader import load_scoring_weights
from inboxai.config.settings_service import DailyAgentConfigService
from inboxai.messaging.analysis import MessageAnalysisService
from inboxai.metrics.cost import CostTracker
from inboxai.metrics.performance import PerformanceTracker
from inboxai.ratelimit.limiter import RateLimiter
from inboxai.ratelimit.notifications import Notifier, RecordingNotifier
from inboxai.scoring.engagement import EngagementMetricsService
from inboxai.scoring.opportunity import OpportunityScorer
from inboxai.scoring.relationship import DEFAULT_WEIGHTS, ScoringWeights
from inboxai.store.base import DocumentStore
from inboxai.store.memory import MemoryDocumentStore
from inboxai.store.sqlite import SqliteDocumentStore
from inboxai.types import RetryConfig
from inboxai.utils.clock import Clock, local_now

logger = logging.getLogger(__name__)


class ServiceContext:
    """Owns the store, the background queue and every service built on them."""

    def __init__(
        self,
        store: DocumentStore,
        config: dict[str, Any] | None = None,
        notifier: Notifier | None = None,
        token_provider: TokenProvider | None = None,
        clock: Clock = local_now,
    ) -> None:
        if config is None:
            config = load_config_hierarchy()
        self.config = {**get_defaults(), **config}
        self.store = store
        self.clock = clock
        self.background = BackgroundTasks()
        self.notifier = notifier or RecordingNotifier()

        self.cache = AICache(store, self.background, clock)
        self.limiter = RateLimiter(store, self.notifier, clock)
        self.cost_tracker = CostTracker(
            store, clock, daily_budget_cents=self.config["daily_budget_cents"]
        )
        self.performance = PerformanceTracker(store, self.background, self.cost_tracker, clock)
        self.ab_tests = ABTestManager(store, clock)
        self.engagement = EngagementMetricsService(store, clock)
        self.settings = DailyAgentConfigService(store, clock)

        self.client = CategorizationClient(
            base_url=self.config.get("edge_url"),
            token_provider=token_provider or self._static_token,
            cache=self.cache,
            limiter=self.limiter,
            tracker=self.performance,
            retry=RetryConfig(
                max_attempts=self.config["max_retries"],
                initial_delay=self.config["retry_initial_delay"],
                max_delay=self.config["retry_max_delay"],
            ),
            ai_enabled=self.config["ai_enabled"],
            clock=clock,
        )
        self.analysis = MessageAnalysisService(store, self.client, clock)
        self._opportunity_scorer: OpportunityScorer | None = None

    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None, **kwargs: Any) -> ServiceContext:
        """Build a context, choosing the store backend from ``config["store"]``."""
        if config is None:
            config = load_config_hierarchy()
        backend = config.get("store", "memory")
        if backend == "sqlite":
            store: DocumentStore = SqliteDocumentStore(Path(config["store_path"]).expanduser())
        elif backend == "memory":
            store = MemoryDocumentStore()
        else:
            raise ValueError(f"Unknown store backend: {backend!r}")
        logger.debug("Using %s document store", backend)
        return cls(store, config=config, **kwargs)

    @property
    def scoring_weights(self) -> ScoringWeights:
        path = self.config.get("scoring_weights_path")
        return load_scoring_weights(path) if path else DEFAULT_WEIGHTS

    @property
    def opportunity_scorer(self) -> OpportunityScorer:
        if self._opportunity_scorer is None:
            self._opportunity_scorer = OpportunityScorer(api_key=self.config.get("api_key"))
        return self._opportunity_scorer

    async def drain(self) -> None:
        """Wait for queued cache, metrics and rollup writes."""
        await self.background.drain()

    async def close(self) -> None:
        await self.drain()
        await self.client.close()
        if self._opportunity_scorer is not None:
            await self._opportunity_scorer.close()
        self.store.close()

    async def _static_token(self) -> str:
        return self.config.get("auth_token") or ""
