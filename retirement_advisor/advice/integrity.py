"""
Post-generation integrity checks on a ``RetirementAdvice``.

Each check returns human-readable problem strings; an empty list means the
advice is internally consistent. The engine reports every problem as an
``invalid_recommendation`` warning and still returns the advice.

Checks
------
  1. ``rank`` is exactly 1..N in list order.
  2. ``overall_score`` matches the ranking formula.
  3. Recommendation ids are unique.
  4. Quick wins and long-term strategies are subsets of the recommendations
     and satisfy their selection predicates.
"""

from __future__ import annotations

import math
from collections import Counter

from retirement_advisor.advice.ranker import is_long_term, is_quick_win, overall_score
from retirement_advisor.models.advice import RankedAdvice, RetirementAdvice

_SCORE_TOLERANCE = 1e-6


def check_advice_integrity(advice: RetirementAdvice) -> list[str]:
    """Run every check and return the concatenated problem list."""
    recs = advice.recommendations
    return [
        *_check_ranks(recs),
        *_check_scores(recs),
        *_check_unique_ids(recs),
        *_check_subset(advice.quick_wins, recs, "quick win", is_quick_win),
        *_check_subset(advice.long_term_strategies, recs, "long-term strategy", is_long_term),
    ]


def _check_ranks(recs: list[RankedAdvice]) -> list[str]:
    ranks = [r.rank for r in recs]
    expected = list(range(1, len(recs) + 1))
    if ranks != expected:
        return [f"Ranks are not a 1..{len(recs)} sequence: {ranks}"]
    return []


def _check_scores(recs: list[RankedAdvice]) -> list[str]:
    return [
        f"Recommendation {r.id} overall_score {r.overall_score:.4f} "
        f"does not match {overall_score(r):.4f}"
        for r in recs
        if not math.isclose(r.overall_score, overall_score(r), abs_tol=_SCORE_TOLERANCE)
    ]


def _check_unique_ids(recs: list[RankedAdvice]) -> list[str]:
    counts = Counter(r.id for r in recs)
    return [f"Recommendation id {rid} appears {n} times" for rid, n in counts.items() if n > 1]


def _check_subset(subset, recs: list[RankedAdvice], label: str, predicate) -> list[str]:
    ids = {r.id for r in recs}
    problems: list[str] = []
    for item in subset:
        if item.id not in ids:
            problems.append(f"{label.capitalize()} {item.id} is not among the recommendations")
        if not predicate(item):
            problems.append(f"{item.id} does not qualify as a {label}")
    return problems
