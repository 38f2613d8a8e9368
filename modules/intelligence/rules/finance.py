"""
Invoice and revenue rules.
"""

from modules.intelligence.core.models import Domain, InsightType, Urgency
from modules.intelligence.rules.registry import insight_rule, make_insight
from shared.utils.helpers import calculate_percentage, format_amount, format_currency

FINANCE = [Domain.FINANCE]
FINANCE_CRM = [Domain.FINANCE, Domain.CRM]


def overdue_impact_pct(overdue_amount: float, monthly_revenue: float) -> float:
    """Overdue money as a percentage of monthly revenue (100 with no revenue)."""
    if monthly_revenue > 0:
        return calculate_percentage(overdue_amount, monthly_revenue)
    return 100.0


@insight_rule("overdue_invoices", FINANCE)
def overdue_invoices(snapshot, thresholds):
    f = snapshot.finance
    if f.overdue_amount <= 0:
        return []

    impact_pct = overdue_impact_pct(f.overdue_amount, f.monthly_revenue)
    if impact_pct > thresholds.cash_flow_impact_pct:
        impact = (
            f"Overdue invoices equal {impact_pct:.0f}% of monthly revenue, "
            f"enough to strain cash flow."
        )
    else:
        impact = f"Overdue invoices equal {impact_pct:.0f}% of monthly revenue."

    count = f.overdue_count or len(f.overdue_invoices)
    noun = "invoice is" if count == 1 else "invoices are"

    return [make_insight(
        "overdue_invoices", snapshot, FINANCE,
        type=InsightType.RISK,
        urgency=Urgency.IMMEDIATE if f.overdue_amount > thresholds.overdue_immediate_amount else Urgency.SOON,
        title="Overdue invoices need attention",
        description=f"{count} {noun} overdue, totaling {format_amount(f.overdue_amount)}.",
        impact=impact,
        suggested_action="Send payment reminders to customers with overdue invoices.",
        offer_to_help="Want me to draft polite payment reminders for these customers?",
        confidence=0.95,
        priority=9 if f.overdue_amount > thresholds.overdue_high_priority_amount else 7,
        related_entities=f.overdue_invoices[:5],
    )]


@insight_rule("invoices_due_soon", FINANCE)
def invoices_due_soon(snapshot, thresholds):
    f = snapshot.finance
    if not (f.upcoming_due_count >= thresholds.due_soon_count
            or f.upcoming_due_amount > thresholds.due_soon_amount):
        return []

    amount = f" ({format_amount(f.upcoming_due_amount)})" if f.upcoming_due_amount > 0 else ""
    return [make_insight(
        "invoices_due_soon", snapshot, FINANCE,
        type=InsightType.PATTERN,
        urgency=Urgency.WHEN_RELEVANT,
        title="Invoices coming due soon",
        description=f"{f.upcoming_due_count} invoices{amount} are due within 7 days.",
        impact="Proactive reminders can improve on-time payment rates.",
        suggested_action="Consider sending friendly payment reminders.",
        offer_to_help="Want me to send a friendly reminder to these customers before due date?",
        confidence=0.8,
        priority=5,
    )]


@insight_rule("growth_with_healthy_pipeline", FINANCE_CRM)
def growth_with_healthy_pipeline(snapshot, thresholds):
    f = snapshot.finance
    p = snapshot.pipeline
    if not (f.revenue_growth > thresholds.growth_pct
            and p.pipeline_value > f.monthly_revenue * thresholds.pipeline_revenue_multiple):
        return []

    return [make_insight(
        "growth_with_healthy_pipeline", snapshot, FINANCE_CRM,
        type=InsightType.TREND,
        urgency=Urgency.WHEN_RELEVANT,
        title="Strong growth trajectory with healthy pipeline",
        description=(
            f"Revenue is up {f.revenue_growth:.0f}% month-over-month and your pipeline "
            f"({format_currency(p.pipeline_value)}) is {thresholds.pipeline_revenue_multiple:g}x+ "
            f"monthly revenue. The business is scaling well."
        ),
        impact="Current momentum supports further growth.",
        suggested_action="Plan capacity for the deals likely to close next month.",
        offer_to_help="Want me to project next month's revenue from the current pipeline?",
        confidence=0.85,
        priority=5,
    )]
