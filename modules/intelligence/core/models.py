"""
Data models shared by collectors, rules, scorer, and cache.

Everything here is an immutable pydantic model so a snapshot can be handed to
the rule engine and the health scorer without either mutating it, and so
results round-trip through JSON for the Redis cache backend.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class InsightType(str, Enum):
    """Kind of finding an insight represents."""
    OPPORTUNITY = "opportunity"
    RISK = "risk"
    PATTERN = "pattern"
    ANOMALY = "anomaly"
    MILESTONE = "milestone"
    TREND = "trend"
    INSIGHT = "insight"


class Urgency(str, Enum):
    """Coarse scheduling priority for surfacing an insight."""
    IMMEDIATE = "immediate"
    SOON = "soon"
    WHEN_RELEVANT = "when-relevant"

    @property
    def rank(self) -> int:
        """Higher rank surfaces first."""
        return URGENCY_RANK[self]


URGENCY_RANK = {
    Urgency.IMMEDIATE: 3,
    Urgency.SOON: 2,
    Urgency.WHEN_RELEVANT: 1,
}


class Domain(str, Enum):
    """Business domain a signal or insight belongs to."""
    CRM = "crm"
    MARKETING = "marketing"
    FINANCE = "finance"
    OPERATIONS = "operations"


class Trend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class Momentum(str, Enum):
    GAINING = "gaining"
    STEADY = "steady"
    LOSING = "losing"


class FrozenModel(BaseModel):
    """Base for immutable models."""

    model_config = ConfigDict(frozen=True)


class EntityRef(FrozenModel):
    """Reference to a record an insight is about."""
    type: str
    id: str
    name: str


# ==============================================================================
# SIGNALS
# ==============================================================================

class PipelineSignals(FrozenModel):
    """CRM / sales pipeline summary. Rates are percentages (0-100)."""
    total_leads: int = 0
    new_leads_this_week: int = 0
    hot_leads: int = 0
    hot_pipeline_value: float = 0.0
    stale_leads: int = 0
    stale_pipeline_value: float = 0.0
    pipeline_value: float = 0.0
    avg_deal_size: float = 0.0
    conversion_rate: float = 0.0
    total_contacts: int = 0
    contact_engagement: float = 0.0
    hot_prospects: Tuple[EntityRef, ...] = ()
    stale_prospects: Tuple[EntityRef, ...] = ()


class MarketingSignals(FrozenModel):
    """Campaign performance summary."""
    total_campaigns: int = 0
    active_campaigns: int = 0
    avg_open_rate: float = 0.0
    avg_click_rate: float = 0.0
    campaigns_needing_attention: int = 0
    underperforming_campaigns: int = 0
    outperforming_campaigns: int = 0
    lead_source_breakdown: Dict[str, int] = Field(default_factory=dict)
    top_channel: Optional[str] = None


class FinanceSignals(FrozenModel):
    """Revenue, expenses, and invoice exposure."""
    monthly_revenue: float = 0.0
    last_month_revenue: float = 0.0
    monthly_expenses: float = 0.0
    profit: float = 0.0
    profit_margin: float = 0.0
    cash_flow: float = 0.0
    revenue_growth: float = 0.0
    outstanding_amount: float = 0.0
    overdue_amount: float = 0.0
    overdue_count: int = 0
    upcoming_due_count: int = 0
    upcoming_due_amount: float = 0.0
    recent_invoice_count: int = 0
    overdue_invoices: Tuple[EntityRef, ...] = ()


class OperationsSignals(FrozenModel):
    """Task throughput, calendar load, and automation health."""
    pending_tasks: int = 0
    overdue_tasks: int = 0
    task_completion_rate: float = 0.0
    upcoming_events: int = 0
    events_today: int = 0
    active_agents: int = 0
    agent_executions: int = 0
    failed_executions: int = 0
    agent_success_rate: float = 100.0
    automation_coverage: float = 0.0


class SignalSnapshot(FrozenModel):
    """Point-in-time signals for one tenant, merged from the four collectors."""
    tenant_id: str
    captured_at: datetime
    day_end: datetime
    pipeline: PipelineSignals = Field(default_factory=PipelineSignals)
    marketing: MarketingSignals = Field(default_factory=MarketingSignals)
    finance: FinanceSignals = Field(default_factory=FinanceSignals)
    operations: OperationsSignals = Field(default_factory=OperationsSignals)


# ==============================================================================
# INSIGHTS
# ==============================================================================

class Insight(FrozenModel):
    """A detected opportunity, risk, pattern, or trend."""
    id: str
    rule_id: str
    type: InsightType
    urgency: Urgency
    domains: Tuple[Domain, ...] = Field(..., min_length=1)
    title: str
    description: str
    impact: str
    suggested_action: str
    offer_to_help: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    priority: int = Field(..., ge=1, le=10)
    related_entities: Tuple[EntityRef, ...] = ()
    detected_at: datetime
    expires_at: Optional[datetime] = None

    @property
    def is_cross_domain(self) -> bool:
        return len(self.domains) > 1


# ==============================================================================
# HEALTH
# ==============================================================================

class HealthDimensions(FrozenModel):
    """Per-dimension scores, each in [0, 100]."""
    revenue: float = Field(50.0, ge=0.0, le=100.0)
    pipeline: float = Field(50.0, ge=0.0, le=100.0)
    operations: float = Field(50.0, ge=0.0, le=100.0)
    marketing: float = Field(50.0, ge=0.0, le=100.0)
    cash_flow: float = Field(50.0, ge=0.0, le=100.0)


class HealthScore(FrozenModel):
    """Weighted business health for one snapshot."""
    overall: int = Field(50, ge=0, le=100)
    trend: Trend = Trend.STABLE
    dimensions: HealthDimensions = Field(default_factory=HealthDimensions)
    top_strengths: Tuple[str, ...] = ()
    top_risks: Tuple[str, ...] = ()
    momentum: Momentum = Momentum.STEADY


# ==============================================================================
# RESULTS
# ==============================================================================

class IntelligenceResult(FrozenModel):
    """Combined output of one computation; this is what gets cached."""
    tenant_id: str
    signals: SignalSnapshot
    correlations: Tuple[Insight, ...] = ()
    health_score: HealthScore = Field(default_factory=HealthScore)
    generated_at: datetime
    degraded_domains: Tuple[Domain, ...] = ()
    is_fallback: bool = False


class InsightsResponse(FrozenModel):
    """Ranked insight list as handed to presentation / prompt layers."""
    insights: List[Insight]
    generated_at: datetime
