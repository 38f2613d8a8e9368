"""
Business health scoring.

Five dimensions (revenue, pipeline, operations, marketing, cash flow), each
scored 0-100 from the snapshot, combined by configurable weights into one
overall score. Scoring is pure: the same snapshot always yields the same
HealthScore.
"""

import math
from typing import List, Optional

from modules.intelligence.config_loader import HealthWeights, RuleThresholds
from modules.intelligence.core.models import (
    HealthDimensions,
    HealthScore,
    Momentum,
    SignalSnapshot,
    Trend,
)
from shared.utils.helpers import clamp, safe_ratio

MAX_LISTED = 3

STRENGTH_LABELS = {
    "pipeline": "Strong sales pipeline",
    "revenue": "Healthy revenue growth",
    "operations": "Efficient operations",
    "marketing": "Effective marketing",
    "cash_flow": "Solid cash position",
}


class HealthScorer:
    """
    Scores a SignalSnapshot.

    Example:
        scorer = HealthScorer()
        health = scorer.score(snapshot)
        health.overall     # 72
        health.momentum    # Momentum.GAINING
    """

    def __init__(self, weights: Optional[HealthWeights] = None, thresholds: Optional[RuleThresholds] = None):
        self.weights = weights or HealthWeights()
        self.thresholds = thresholds or RuleThresholds()

    # ==========================================================================
    # DIMENSIONS
    # ==========================================================================

    def revenue_score(self, snapshot: SignalSnapshot) -> float:
        f = snapshot.finance
        score = 50.0
        if f.monthly_revenue > 0:
            score = 60.0
            if f.revenue_growth > 0:
                score += 15
            if f.revenue_growth > 10:
                score += 10
            if f.profit_margin > 20:
                score += 15
        return clamp(score)

    def pipeline_score(self, snapshot: SignalSnapshot) -> float:
        p = snapshot.pipeline
        score = 30.0
        if p.total_leads > 0:
            score = 50.0
            if p.hot_leads > 0:
                score += 20
            if p.new_leads_this_week > 3:
                score += 15
            if p.conversion_rate > 20:
                score += 15
            score -= safe_ratio(p.stale_leads, p.total_leads) * 20
        return clamp(score)

    def operations_score(self, snapshot: SignalSnapshot) -> float:
        o = snapshot.operations
        score = 50.0 + o.task_completion_rate * 0.3
        if o.active_agents > 0:
            score += 10
        if o.agent_success_rate > 90:
            score += 10
        score -= o.overdue_tasks * 2
        return clamp(score)

    def marketing_score(self, snapshot: SignalSnapshot) -> float:
        m = snapshot.marketing
        score = 40.0
        if m.active_campaigns > 0:
            score = 50.0
            if m.avg_open_rate > 15:
                score += 15
            if m.avg_open_rate > 25:
                score += 10
            if m.avg_click_rate > 2:
                score += 15
            score -= m.campaigns_needing_attention * 5
        return clamp(score)

    def cash_flow_score(self, snapshot: SignalSnapshot) -> float:
        f = snapshot.finance
        score = 50.0
        if f.monthly_revenue > 0:
            score = 70.0 - safe_ratio(f.overdue_amount, f.monthly_revenue) * 50
            if f.cash_flow > 0:
                score += 20
        return clamp(score)

    # ==========================================================================
    # SCORE
    # ==========================================================================

    def score(self, snapshot: SignalSnapshot) -> HealthScore:
        """Compute the full health score for a snapshot."""
        dimensions = HealthDimensions(
            revenue=self.revenue_score(snapshot),
            pipeline=self.pipeline_score(snapshot),
            operations=self.operations_score(snapshot),
            marketing=self.marketing_score(snapshot),
            cash_flow=self.cash_flow_score(snapshot),
        )

        w = self.weights
        weighted = (
            dimensions.revenue * w.revenue
            + dimensions.pipeline * w.pipeline
            + dimensions.operations * w.operations
            + dimensions.marketing * w.marketing
            + dimensions.cash_flow * w.cash_flow
        )
        # Round half up
        overall = int(clamp(math.floor(weighted + 0.5)))

        trend, momentum = self._trend(snapshot)

        return HealthScore(
            overall=overall,
            trend=trend,
            dimensions=dimensions,
            top_strengths=tuple(self._strengths(dimensions)[:MAX_LISTED]),
            top_risks=tuple(self._risks(snapshot, dimensions)[:MAX_LISTED]),
            momentum=momentum,
        )

    def _trend(self, snapshot: SignalSnapshot):
        growth = snapshot.finance.revenue_growth
        p = snapshot.pipeline
        w = self.weights

        if growth > w.trend_growth_pct and p.new_leads_this_week > w.trend_new_leads:
            return Trend.IMPROVING, Momentum.GAINING
        if growth < -w.trend_growth_pct or p.stale_leads > p.hot_leads * 2:
            return Trend.DECLINING, Momentum.LOSING
        return Trend.STABLE, Momentum.STEADY

    def _strengths(self, dimensions: HealthDimensions) -> List[str]:
        return [
            label for name, label in STRENGTH_LABELS.items()
            if getattr(dimensions, name) >= self.weights.strength_score
        ]

    def _risks(self, snapshot: SignalSnapshot, dimensions: HealthDimensions) -> List[str]:
        t = self.thresholds
        risks = []

        if dimensions.pipeline < self.weights.risk_score:
            risks.append("Pipeline needs attention")
        if snapshot.pipeline.stale_leads > t.stale_risk_count:
            risks.append("Stale prospects accumulating")
        if snapshot.finance.overdue_amount > 0:
            risks.append("Overdue invoices")
        if snapshot.operations.overdue_tasks > t.overdue_tasks_risk:
            risks.append("Task backlog")
        if dimensions.marketing < self.weights.risk_score:
            risks.append("Marketing underperforming")

        return risks
