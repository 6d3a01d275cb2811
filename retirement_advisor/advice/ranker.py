"""
Recommendation ranker: scores, stably sorts and partitions advice.

Score formula
-------------
    overall_score = effectiveness_score * 0.7 + feasibility_score * 0.3

Items are sorted by ``overall_score`` descending with a *stable* sort, so
equal scores keep their generation order. ``rank`` is the 1-based position.

Partition (non-exclusive; an item may appear in both lists)
-----------------------------------------------------------
    quick win : feasibility >= 80  AND  priority == high
    long term : feasibility <  80  OR   effectiveness >= 70
"""

from __future__ import annotations

from typing import Iterable, Optional

from retirement_advisor.models.advice import AdviceItem, RankedAdvice
from retirement_advisor.taxonomy.advice_taxonomy import AdvicePriority

EFFECTIVENESS_WEIGHT = 0.7
FEASIBILITY_WEIGHT = 0.3

QUICK_WIN_MIN_FEASIBILITY = 80.0
LONG_TERM_FEASIBILITY_BELOW = 80.0
LONG_TERM_MIN_EFFECTIVENESS = 70.0

_ITEM_FIELDS = frozenset(AdviceItem.model_fields)


def overall_score(item: AdviceItem) -> float:
    """Weighted blend of effectiveness and feasibility (0–100)."""
    return (
        item.effectiveness_score * EFFECTIVENESS_WEIGHT
        + item.feasibility_score * FEASIBILITY_WEIGHT
    )


def rank_recommendations(items: Iterable[AdviceItem]) -> list[RankedAdvice]:
    """Score and rank ``items``; input items are not modified.

    Args:
        items: Candidate advice, in generation order.

    Returns:
        New ``RankedAdvice`` objects ordered by rank (1 = best).
    """
    ordered = sorted(items, key=overall_score, reverse=True)
    return [
        RankedAdvice(
            **{name: value for name, value in item if name in _ITEM_FIELDS},
            overall_score=overall_score(item),
            rank=position,
        )
        for position, item in enumerate(ordered, start=1)
    ]


def top_recommendations(ranked: list[RankedAdvice], limit: Optional[int]) -> list[RankedAdvice]:
    """Keep the ``limit`` best-ranked items (all of them when ``limit`` is None)."""
    return ranked if limit is None else ranked[:limit]


def is_quick_win(item: AdviceItem) -> bool:
    return (
        item.feasibility_score >= QUICK_WIN_MIN_FEASIBILITY
        and item.priority == AdvicePriority.HIGH
    )


def is_long_term(item: AdviceItem) -> bool:
    return (
        item.feasibility_score < LONG_TERM_FEASIBILITY_BELOW
        or item.effectiveness_score >= LONG_TERM_MIN_EFFECTIVENESS
    )


def select_quick_wins(ranked: list[RankedAdvice]) -> list[RankedAdvice]:
    return [item for item in ranked if is_quick_win(item)]


def select_long_term(ranked: list[RankedAdvice]) -> list[RankedAdvice]:
    return [item for item in ranked if is_long_term(item)]
