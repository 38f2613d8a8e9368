"""
Tests for insight ranking.
"""

import random

from modules.intelligence.core.models import Domain, InsightType, Urgency
from modules.intelligence.ranker import rank_insights, sort_key
from modules.intelligence.rules import make_insight

from tests.conftest import build_snapshot

SNAPSHOT = build_snapshot()


def insight(name, urgency, priority, confidence=0.9):
    return make_insight(
        name, SNAPSHOT, [Domain.OPERATIONS],
        type=InsightType.PATTERN,
        urgency=urgency,
        title=name,
        description=name,
        impact="",
        suggested_action="",
        offer_to_help="",
        confidence=confidence,
        priority=priority,
    )


def test_urgency_outranks_priority():
    ranked = rank_insights(
        [
            insight("relevant", Urgency.WHEN_RELEVANT, 10),
            insight("soon", Urgency.SOON, 9),
            insight("now", Urgency.IMMEDIATE, 1),
        ],
        min_confidence=0.6,
        max_insights=10,
    )

    assert [i.rule_id for i in ranked] == ["now", "soon", "relevant"]


def test_ties_keep_input_order():
    ranked = rank_insights(
        [
            insight("first", Urgency.SOON, 6),
            insight("higher", Urgency.SOON, 7),
            insight("second", Urgency.SOON, 6),
            insight("third", Urgency.SOON, 6),
        ],
        min_confidence=0.6,
        max_insights=10,
    )

    assert [i.rule_id for i in ranked] == ["higher", "first", "second", "third"]


def test_low_confidence_dropped_before_cap():
    ranked = rank_insights(
        [
            insight("unsure", Urgency.IMMEDIATE, 10, confidence=0.59),
            insight("edge", Urgency.SOON, 5, confidence=0.6),
            insight("sure", Urgency.SOON, 4),
        ],
        min_confidence=0.6,
        max_insights=2,
    )

    assert [i.rule_id for i in ranked] == ["edge", "sure"]


def test_cap():
    many = [insight(f"i{n}", Urgency.WHEN_RELEVANT, 5) for n in range(15)]

    assert len(rank_insights(many, min_confidence=0.6, max_insights=10)) == 10
    assert rank_insights(many, min_confidence=0.6, max_insights=0) == []
    assert rank_insights([], min_confidence=0.6, max_insights=10) == []


def test_output_is_sorted_for_shuffled_input():
    rng = random.Random(7)
    pool = [
        insight(f"i{n}", rng.choice(list(Urgency)), rng.randint(1, 10))
        for n in range(40)
    ]
    rng.shuffle(pool)

    ranked = rank_insights(pool, min_confidence=0.6, max_insights=40)

    keys = [sort_key(i) for i in ranked]
    assert keys == sorted(keys)
    for earlier, later in zip(ranked, ranked[1:]):
        assert earlier.urgency.rank >= later.urgency.rank
