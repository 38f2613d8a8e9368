"""
Campaign performance rules.
"""

from modules.intelligence.core.models import Domain, InsightType, Urgency
from modules.intelligence.rules.registry import insight_rule, make_insight

MARKETING = [Domain.MARKETING]


@insight_rule("campaign_underperformance", MARKETING)
def campaign_underperformance(snapshot, thresholds):
    m = snapshot.marketing
    if m.underperforming_campaigns <= 0:
        return []

    return [make_insight(
        "campaign_underperformance", snapshot, MARKETING,
        type=InsightType.OPPORTUNITY,
        urgency=Urgency.WHEN_RELEVANT,
        title="Campaigns need optimization",
        description=(
            f"{m.underperforming_campaigns} active campaign(s) have below-average open rates "
            f"(<{thresholds.underperform_open_rate:g}%)."
        ),
        impact="Better subject lines and timing could significantly improve results.",
        suggested_action="Test new subject lines or adjust send times.",
        offer_to_help="Want me to suggest some A/B test variations for these campaigns?",
        confidence=0.8,
        priority=5,
    )]


@insight_rule("campaign_outperformance", MARKETING)
def campaign_outperformance(snapshot, thresholds):
    m = snapshot.marketing
    if m.outperforming_campaigns <= 0:
        return []

    return [make_insight(
        "campaign_outperformance", snapshot, MARKETING,
        type=InsightType.OPPORTUNITY,
        urgency=Urgency.WHEN_RELEVANT,
        title="Winning campaigns to scale",
        description=(
            f"{m.outperforming_campaigns} campaign(s) are performing exceptionally well "
            f"({thresholds.outperform_open_rate:g}%+ open rate)."
        ),
        impact="Scaling successful content can multiply results.",
        suggested_action="Consider expanding audience or creating similar campaigns.",
        offer_to_help="Want me to analyze what's working and suggest ways to scale these?",
        confidence=0.85,
        priority=6,
    )]
