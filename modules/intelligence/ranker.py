"""
Insight ranking: confidence filter, urgency/priority ordering, cap.
"""

from typing import Iterable, List

from modules.intelligence.core.models import Insight


def sort_key(insight: Insight):
    """Most urgent first, then highest priority."""
    return (-insight.urgency.rank, -insight.priority)


def rank_insights(insights: Iterable[Insight], min_confidence: float, max_insights: int) -> List[Insight]:
    """
    Filter, order, and cap insights.

    Args:
        insights: Insights in rule-evaluation order
        min_confidence: Drop insights below this confidence
        max_insights: Maximum number returned

    Returns:
        Ranked list; equal urgency and priority keep their input order
    """
    kept = [insight for insight in insights if insight.confidence >= min_confidence]
    # sorted() is stable, so ties stay in rule-evaluation order
    ranked = sorted(kept, key=sort_key)
    return ranked[:max(0, max_insights)]
