"""
Pipeline rules, including the two that read marketing against lead flow.
"""

from modules.intelligence.core.models import Domain, InsightType, Urgency
from modules.intelligence.rules.registry import insight_rule, make_insight
from shared.utils.helpers import format_currency

CRM = [Domain.CRM]
CRM_MARKETING = [Domain.CRM, Domain.MARKETING]


@insight_rule("stale_pipeline", CRM)
def stale_pipeline(snapshot, thresholds):
    p = snapshot.pipeline
    if p.stale_leads < thresholds.stale_leads_min:
        return []

    at_stake = f" (~{format_currency(p.stale_pipeline_value)} at stake)" if p.stale_pipeline_value > 0 else ""
    return [make_insight(
        "stale_pipeline", snapshot, CRM,
        type=InsightType.OPPORTUNITY,
        urgency=Urgency.SOON,
        title="Leads going cold",
        description=f"{p.stale_leads} prospects haven't been touched in 2+ weeks{at_stake}.",
        impact="Re-engaging these prospects could recover lost pipeline value.",
        suggested_action="Review and re-engage stale prospects with personalized outreach.",
        offer_to_help="Want me to draft re-engagement emails for these prospects?",
        confidence=0.85,
        priority=8 if p.stale_pipeline_value > thresholds.stale_value_high else 6,
        related_entities=p.stale_prospects[:5],
    )]


@insight_rule("deals_ready_to_close", CRM)
def deals_ready_to_close(snapshot, thresholds):
    p = snapshot.pipeline
    if p.hot_leads <= 0:
        return []

    worth = f" worth ~{format_currency(p.hot_pipeline_value)}" if p.hot_pipeline_value > 0 else ""
    return [make_insight(
        "deals_ready_to_close", snapshot, CRM,
        type=InsightType.OPPORTUNITY,
        urgency=Urgency.IMMEDIATE,
        title="Deals ready to close",
        description=f"{p.hot_leads} prospects in proposal/negotiation stage{worth}.",
        impact="These deals are close; focused attention could accelerate close.",
        suggested_action="Prioritize follow-ups and address any blockers.",
        offer_to_help="Want me to prepare follow-up messages or proposal drafts for these?",
        confidence=0.9,
        priority=8,
        related_entities=p.hot_prospects[:5],
    )]


@insight_rule("pipeline_replenishment", CRM)
def pipeline_replenishment(snapshot, thresholds):
    p = snapshot.pipeline
    if not (p.total_leads > thresholds.replenishment_min_leads and p.new_leads_this_week == 0):
        return []

    return [make_insight(
        "pipeline_replenishment", snapshot, CRM,
        type=InsightType.RISK,
        urgency=Urgency.SOON,
        title="Pipeline replenishment needed",
        description="No new prospects in the past week. Pipeline could dry up.",
        impact="Without new prospects, future revenue may be impacted.",
        suggested_action="Consider ramping up outbound or marketing activities.",
        offer_to_help="Want me to help brainstorm lead generation ideas for your business?",
        confidence=0.75,
        priority=7,
    )]


@insight_rule("marketing_driving_leads", CRM_MARKETING)
def marketing_driving_leads(snapshot, thresholds):
    p = snapshot.pipeline
    m = snapshot.marketing
    if p.new_leads_this_week <= 0 or m.active_campaigns <= 0:
        return []

    per_campaign = p.new_leads_this_week / m.active_campaigns
    if per_campaign <= thresholds.leads_per_campaign_min:
        return []

    description = (
        f"Your {m.active_campaigns} active campaigns are generating ~{per_campaign:.1f} "
        f"new prospects each this week."
    )
    if m.top_channel:
        description += f" {m.top_channel} is your top channel."
        action = f"Consider doubling down on {m.top_channel} content."
    else:
        action = "Review which campaigns are performing best."

    return [make_insight(
        "marketing_driving_leads", snapshot, CRM_MARKETING,
        type=InsightType.INSIGHT,
        urgency=Urgency.WHEN_RELEVANT,
        title="Marketing campaigns driving strong lead flow",
        description=description,
        impact="Campaign spend is turning into pipeline.",
        suggested_action=action,
        offer_to_help="Want me to break down which campaigns brought in these leads?",
        confidence=0.8,
        priority=4,
    )]


@insight_rule("engagement_not_converting", CRM_MARKETING)
def engagement_not_converting(snapshot, thresholds):
    p = snapshot.pipeline
    m = snapshot.marketing
    if not (m.avg_open_rate > thresholds.engagement_open_rate
            and p.new_leads_this_week < thresholds.engagement_max_new_leads):
        return []

    return [make_insight(
        "engagement_not_converting", snapshot, CRM_MARKETING,
        type=InsightType.OPPORTUNITY,
        urgency=Urgency.WHEN_RELEVANT,
        title="Marketing engagement not converting to prospects",
        description=(
            f"Your emails are getting opened ({m.avg_open_rate:.0f}% open rate) but only "
            f"{p.new_leads_this_week} new prospects this week. There might be a CTA or "
            f"landing page opportunity."
        ),
        impact="Engaged readers who never become leads are lost pipeline.",
        suggested_action="Review your email CTAs and landing pages for conversion optimization.",
        offer_to_help="Want me to suggest stronger calls to action for your next campaign?",
        confidence=0.7,
        priority=5,
    )]
