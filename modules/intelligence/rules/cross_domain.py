"""
Rules that only make sense by reading two domains together.
"""

from modules.intelligence.core.models import Domain, InsightType, Urgency
from modules.intelligence.rules.registry import insight_rule, make_insight

OPERATIONS_CRM = [Domain.OPERATIONS, Domain.CRM]
CRM_FINANCE = [Domain.CRM, Domain.FINANCE]
CRM_OPERATIONS = [Domain.CRM, Domain.OPERATIONS]


@insight_rule("automation_opportunity", OPERATIONS_CRM)
def automation_opportunity(snapshot, thresholds):
    if not (snapshot.operations.active_agents == 0
            and snapshot.pipeline.total_leads > thresholds.automation_opportunity_leads):
        return []

    return [make_insight(
        "automation_opportunity", snapshot, OPERATIONS_CRM,
        type=InsightType.OPPORTUNITY,
        urgency=Urgency.WHEN_RELEVANT,
        title="Automation opportunity",
        description=(
            "No AI agents are active yet. With your lead volume, automation could save "
            "significant time."
        ),
        impact="Agents can handle follow-ups, reminders, and data entry automatically.",
        suggested_action="Consider setting up a lead follow-up agent to start.",
        offer_to_help="Want me to create a lead follow-up agent for you?",
        confidence=0.75,
        priority=5,
    )]


@insight_rule("pipeline_revenue_gap", CRM_FINANCE)
def pipeline_revenue_gap(snapshot, thresholds):
    hot = snapshot.pipeline.hot_leads
    recent_invoices = snapshot.finance.recent_invoice_count
    if not (hot > thresholds.revenue_gap_hot_leads
            and recent_invoices < hot * thresholds.revenue_gap_invoice_ratio):
        return []

    return [make_insight(
        "pipeline_revenue_gap", snapshot, CRM_FINANCE,
        type=InsightType.PATTERN,
        urgency=Urgency.WHEN_RELEVANT,
        title="Pipeline to invoice gap",
        description=(
            f"You have {hot} hot prospects but only {recent_invoices} invoices in the last "
            f"30 days. Some deals may be stuck."
        ),
        impact="Closing deals faster improves cash flow.",
        suggested_action="Review deal blockers and push stalled proposals.",
        offer_to_help="Want me to identify which hot prospects haven't progressed recently?",
        confidence=0.7,
        priority=6,
        related_entities=snapshot.pipeline.hot_prospects[:5],
    )]


@insight_rule("hot_leads_with_meetings", CRM_OPERATIONS)
def hot_leads_with_meetings(snapshot, thresholds):
    p = snapshot.pipeline
    o = snapshot.operations
    if not (p.hot_leads > 0 and o.upcoming_events > 0):
        return []

    return [make_insight(
        "hot_leads_with_meetings", snapshot, CRM_OPERATIONS,
        type=InsightType.OPPORTUNITY,
        urgency=Urgency.SOON,
        title="Momentum building with hot prospects and meetings",
        description=(
            f"You have {p.hot_leads} hot prospects and {o.upcoming_events} meetings "
            f"scheduled this week. Good momentum building."
        ),
        impact="Well-prepared meetings with late-stage prospects close deals.",
        suggested_action="Prepare briefs for meetings with prospects in proposal or negotiation.",
        offer_to_help="Want me to prepare meeting briefs or proposal drafts for these hot prospects?",
        confidence=0.8,
        priority=6,
    )]
