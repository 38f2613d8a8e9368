"""
Business Intelligence Service.

Orchestrates one computation per tenant: collect signals from the four
domains concurrently, evaluate insight rules, score business health, and
cache the combined result. Public operations read from that cached result.
"""

import asyncio
from typing import Callable, List, Optional

from modules.intelligence.cache import IntelligenceCache, create_cache
from modules.intelligence.collectors import (
    FinanceCollector,
    MarketingCollector,
    OperationsCollector,
    PipelineCollector,
    TimeWindows,
)
from modules.intelligence.config_loader import IntelligenceConfig, IntelligenceConfigLoader
from modules.intelligence.core.exceptions import ConfigurationException
from modules.intelligence.core.models import (
    Domain,
    HealthScore,
    Insight,
    InsightsResponse,
    IntelligenceResult,
    SignalSnapshot,
    Urgency,
)
from modules.intelligence.formatter import format_business_summary, format_insights_block
from modules.intelligence.health_scorer import HealthScorer
from modules.intelligence.rules import RuleEngine, RuleRegistry
from modules.intelligence.store import SignalStore, SqlSignalStore
from shared.utils.helpers import utcnow
from shared.utils.logger import setup_logger, log_error

logger = setup_logger(__name__)

# Topic keyword -> domains it refers to
TOPIC_DOMAINS = {
    "lead": [Domain.CRM],
    "pipeline": [Domain.CRM],
    "deal": [Domain.CRM],
    "sales": [Domain.CRM],
    "invoice": [Domain.FINANCE],
    "payment": [Domain.FINANCE],
    "revenue": [Domain.FINANCE],
    "money": [Domain.FINANCE],
    "task": [Domain.OPERATIONS],
    "meeting": [Domain.OPERATIONS],
    "calendar": [Domain.OPERATIONS],
    "agent": [Domain.OPERATIONS],
    "campaign": [Domain.MARKETING],
    "email": [Domain.MARKETING],
    "marketing": [Domain.MARKETING],
}

URGENT_PRIORITY = 8
PROMPT_INSIGHT_LIMIT = 5
UNMATCHED_TOPIC_LIMIT = 2


class IntelligenceService:
    """
    Business intelligence and proactive insights for a tenant.

    Features:
    - Concurrent signal collection with per-domain graceful degradation
    - Registry-driven insight rules, ranked by urgency then priority
    - Weighted five-dimension health score
    - Read-through cache per tenant (and optional actor)

    Example:
        >>> service = IntelligenceService(store, cache)
        >>> response = await service.get_insights("ws-123")
        >>> response.insights[0].title
        'Deals ready to close'
    """

    def __init__(
        self,
        store: Optional[SignalStore] = None,
        cache: Optional[IntelligenceCache] = None,
        config: Optional[IntelligenceConfig] = None,
        config_loader: Optional[IntelligenceConfigLoader] = None,
        registry: Optional[RuleRegistry] = None,
        clock: Callable = utcnow,
    ):
        """
        Initialize intelligence service.

        Args:
            store: Signal store (defaults to the SQL store)
            cache: Result cache (None disables caching)
            config: Fixed engine config for every tenant
            config_loader: Per-tenant config source, used when config is None
            registry: Rule registry (defaults to the shipped rules)
            clock: Returns the capture time as naive UTC
        """
        self.store = store if store is not None else SqlSignalStore()
        self.cache = cache
        self.config = config
        self.config_loader = config_loader if config_loader is not None else IntelligenceConfigLoader()
        self.registry = registry
        self.clock = clock

    @classmethod
    def from_settings(cls) -> "IntelligenceService":
        """Build a service wired from application settings."""
        return cls(store=SqlSignalStore(), cache=create_cache(), config_loader=IntelligenceConfigLoader())

    def config_for(self, tenant_id: str) -> IntelligenceConfig:
        """
        Effective config for a tenant.

        Raises:
            ConfigurationException: If the tenant's config is invalid
        """
        if self.config is not None:
            return self.config
        return self.config_loader.get_config(tenant_id)

    # ==========================================================================
    # COMPUTATION
    # ==========================================================================

    async def collect_signals(self, tenant_id: str, config: IntelligenceConfig):
        """
        Run the four collectors concurrently.

        Returns:
            (SignalSnapshot, degraded domains)
        """
        now = self.clock()
        options = dict(thresholds=config.thresholds, timeout_seconds=config.collector_timeout_seconds)

        pipeline, marketing, finance, operations = await asyncio.gather(
            PipelineCollector(self.store, **options).collect(tenant_id, now),
            MarketingCollector(self.store, **options).collect(tenant_id, now),
            FinanceCollector(self.store, **options).collect(tenant_id, now),
            OperationsCollector(self.store, **options).collect(tenant_id, now),
        )

        snapshot = SignalSnapshot(
            tenant_id=tenant_id,
            captured_at=now,
            day_end=TimeWindows.from_now(now, config.thresholds).day_end,
            pipeline=pipeline.signals,
            marketing=marketing.signals,
            finance=finance.signals,
            operations=operations.signals,
        )
        degraded = tuple(r.domain for r in (pipeline, marketing, finance, operations) if not r.ok)
        return snapshot, degraded

    async def compute(self, tenant_id: str, config: IntelligenceConfig) -> IntelligenceResult:
        """Compute intelligence for a tenant, bypassing the cache."""
        logger.info(f"Generating business intelligence for tenant: {tenant_id}")

        snapshot, degraded = await self.collect_signals(tenant_id, config)

        insights = RuleEngine(config, self.registry).detect(snapshot)
        health = HealthScorer(config.weights, config.thresholds).score(snapshot)

        if degraded:
            logger.warning(
                f"Intelligence for tenant {tenant_id} is partial; degraded domains: "
                f"{', '.join(d.value for d in degraded)}"
            )
        logger.info(
            f"Generated {len(insights)} insights for tenant {tenant_id} "
            f"(health {health.overall}, {health.momentum.value})"
        )

        return IntelligenceResult(
            tenant_id=tenant_id,
            signals=snapshot,
            correlations=tuple(insights),
            health_score=health,
            generated_at=self.clock(),
            degraded_domains=degraded,
        )

    def safe_default(self, tenant_id: str) -> IntelligenceResult:
        """Neutral result returned when computation fails outright."""
        now = self.clock()
        return IntelligenceResult(
            tenant_id=tenant_id,
            signals=SignalSnapshot(
                tenant_id=tenant_id,
                captured_at=now,
                day_end=TimeWindows.from_now(now).day_end,
            ),
            correlations=(),
            health_score=HealthScore(),
            generated_at=now,
            degraded_domains=tuple(Domain),
            is_fallback=True,
        )

    # ==========================================================================
    # PUBLIC OPERATIONS
    # ==========================================================================

    async def get_business_intelligence(self, tenant_id: str, actor_id: Optional[str] = None) -> IntelligenceResult:
        """
        Cached intelligence for a tenant.

        Never raises: invalid configuration or a failed computation yields
        the neutral default, which is not cached.
        """
        try:
            config = self.config_for(tenant_id)
        except ConfigurationException as e:
            log_error(logger, e, f"Unusable intelligence config for tenant {tenant_id}; returning neutral result")
            return self.safe_default(tenant_id)

        async def _compute() -> IntelligenceResult:
            return await self.compute(tenant_id, config)

        try:
            if self.cache is None:
                return await _compute()
            return await self.cache.get_or_compute(
                tenant_id, _compute, actor_id=actor_id, ttl_seconds=config.cache_ttl_seconds
            )
        except Exception:
            logger.exception(f"Business intelligence failed for tenant {tenant_id}; returning neutral result")
            return self.safe_default(tenant_id)

    async def get_insights(self, tenant_id: str, actor_id: Optional[str] = None) -> InsightsResponse:
        """Ranked, confidence-filtered, capped insights."""
        result = await self.get_business_intelligence(tenant_id, actor_id)
        return InsightsResponse(insights=list(result.correlations), generated_at=result.generated_at)

    async def get_top_insights_to_mention(
        self,
        tenant_id: str,
        limit: int = 3,
        actor_id: Optional[str] = None
    ) -> List[Insight]:
        """Immediate and soon insights, for proactive mention."""
        response = await self.get_insights(tenant_id, actor_id)
        timely = [i for i in response.insights if i.urgency in (Urgency.IMMEDIATE, Urgency.SOON)]
        return timely[:limit]

    async def has_urgent_insights(self, tenant_id: str, actor_id: Optional[str] = None) -> bool:
        """True if any immediate insight has priority >= 8."""
        response = await self.get_insights(tenant_id, actor_id)
        return any(
            i.urgency == Urgency.IMMEDIATE and i.priority >= URGENT_PRIORITY
            for i in response.insights
        )

    async def get_relevant_insights(
        self,
        tenant_id: str,
        topic: str,
        actor_id: Optional[str] = None
    ) -> List[Insight]:
        """
        Insights related to a conversation topic.

        Keywords in the topic map to domains; cross-domain insights are
        always included. A topic matching no keyword returns the top 2.
        """
        response = await self.get_insights(tenant_id, actor_id)
        topic_lower = topic.lower()

        relevant = set()
        for keyword, domains in TOPIC_DOMAINS.items():
            if keyword in topic_lower:
                relevant.update(domains)

        if not relevant:
            return response.insights[:UNMATCHED_TOPIC_LIMIT]

        return [
            i for i in response.insights
            if i.is_cross_domain or relevant.intersection(i.domains)
        ]

    async def build_insights_prompt(self, tenant_id: str, actor_id: Optional[str] = None) -> str:
        """Prompt section listing the top insights (empty when there are none)."""
        response = await self.get_insights(tenant_id, actor_id)
        return format_insights_block(response.insights, limit=PROMPT_INSIGHT_LIMIT)

    async def get_business_summary(self, tenant_id: str, actor_id: Optional[str] = None) -> str:
        """Health, key metrics, top insights, strengths and risks as text."""
        result = await self.get_business_intelligence(tenant_id, actor_id)
        return format_business_summary(result)

    async def invalidate(self, tenant_id: str, actor_id: Optional[str] = None) -> None:
        """Drop the cached result after a mutating event."""
        if self.cache is not None:
            await self.cache.invalidate(tenant_id, actor_id)
