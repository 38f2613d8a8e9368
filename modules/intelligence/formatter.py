"""
Plain-text renderings of insights and business summaries.

Output is meant for injection into an assistant's prompt. Formatters render
insights in the order given; ranking and filtering happen upstream.
"""

from typing import List, Sequence

from modules.intelligence.core.models import Insight, IntelligenceResult, Urgency
from shared.utils.helpers import format_currency

URGENCY_MARKERS = {
    Urgency.IMMEDIATE: "[!]",
    Urgency.SOON: "[~]",
    Urgency.WHEN_RELEVANT: "[i]",
}

USAGE_GUIDANCE = [
    "**How to use these insights:**",
    '- Mention naturally: "By the way, I noticed..."',
    '- Offer to help: Use the "Want me to..." phrasing',
    "- Don't dump all at once - pick the most relevant one",
    "- If user is focused on something else, save for later",
]


def format_insights_block(insights: Sequence[Insight], limit: int = 5) -> str:
    """
    Render up to `limit` insights as a prompt section.

    Returns:
        Formatted block, or an empty string when there are no insights
    """
    if not insights:
        return ""

    parts: List[str] = [
        "## PROACTIVE INSIGHTS (Surface naturally when relevant)",
        "",
        "These patterns were detected and may be worth mentioning:",
        "",
    ]

    for insight in list(insights)[:limit]:
        parts.append(f"{URGENCY_MARKERS[insight.urgency]} **{insight.title}**")
        parts.append(f"   {insight.description}")
        parts.append(f"   -> {insight.offer_to_help}")
        parts.append("")

    parts.extend(USAGE_GUIDANCE)
    return "\n".join(parts)


def format_business_summary(result: IntelligenceResult, insight_limit: int = 3) -> str:
    """
    Render health, key metrics, top insights, strengths and risks.

    Args:
        result: Computed intelligence for one tenant
        insight_limit: Number of insights to list

    Returns:
        Markdown-style summary text
    """
    health = result.health_score
    signals = result.signals
    pipeline = signals.pipeline
    finance = signals.finance
    operations = signals.operations
    marketing = signals.marketing

    growth_sign = "+" if finance.revenue_growth > 0 else ""

    parts: List[str] = [
        f"## Business Health: {health.overall}% ({health.momentum.value})",
        "\n".join([
            "### Key Metrics",
            f"- Pipeline: {format_currency(pipeline.pipeline_value)} ({pipeline.hot_leads} hot prospects)",
            f"- Revenue: {format_currency(finance.monthly_revenue)} "
            f"({growth_sign}{finance.revenue_growth:.0f}% MoM)",
            f"- Tasks: {operations.pending_tasks} pending ({operations.overdue_tasks} overdue)",
            f"- Marketing: {marketing.active_campaigns} active campaigns",
        ]),
    ]

    top = list(result.correlations)[:insight_limit]
    if top:
        lines = ["### Top Insights (mention naturally)"]
        for insight in top:
            line = f"{URGENCY_MARKERS[insight.urgency]} **{insight.title}**: {insight.description}"
            if insight.suggested_action:
                line += f" -> {insight.suggested_action}"
            lines.append(line)
        parts.append("\n".join(lines))

    if health.top_strengths:
        parts.append(f"### Strengths: {', '.join(health.top_strengths)}")
    if health.top_risks:
        parts.append(f"### Areas to Watch: {', '.join(health.top_risks)}")

    if result.degraded_domains:
        degraded = ", ".join(domain.value for domain in result.degraded_domains)
        parts.append(f"_Partial data: {degraded} signals unavailable._")

    return "\n\n".join(parts)
