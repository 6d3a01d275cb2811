"""
Scenario differ: milestone timing shifts and advice changes between A and B.

All differences are A − B, where A is the "with transitions" scenario.

Milestone effect per type
-------------------------
    every difference == 0            → no_change
    positive and negative present    → mixed
    only positive (A later)          → accelerates
    only negative (A earlier)        → delays

Advice change rules (matched pair)
----------------------------------
    priority differs
    |Δ effectiveness| > thresholds.effectiveness_points
    |Δ feasibility|   > thresholds.feasibility_points
    impact: |Δ timeline| > timeline_years, |Δ cost| > cost_savings,
            |Δ assets| > additional_assets; each compared only where both
            items define the field.

Nothing here raises for well-formed models; unmatched entities simply land
in the ``unique_to_*`` lists.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Optional, Sequence

from retirement_advisor.comparison.matcher import (
    AdviceMatcher,
    KeyPhraseMatcher,
    milestones_match,
)
from retirement_advisor.config import ComparisonConfig
from retirement_advisor.models.advice import AdviceItem, RetirementAdvice
from retirement_advisor.models.comparison import (
    AdviceChange,
    AdviceChangeFlags,
    AdviceComparison,
    AdviceDifference,
    ComparisonMetrics,
    MilestoneComparison,
    MilestoneTimingComparison,
    MilestoneTimingSummary,
)
from retirement_advisor.models.milestone import Milestone
from retirement_advisor.taxonomy.advice_taxonomy import (
    ASSESSMENT_ORDER,
    AdviceCategory,
    MilestoneType,
    TimingEffect,
)
from retirement_advisor.utils.currency import format_amount

logger = logging.getLogger(__name__)

COMPARED_CATEGORIES: tuple[AdviceCategory, ...] = (
    AdviceCategory.DEBT,
    AdviceCategory.INVESTMENT,
    AdviceCategory.EXPENSE,
    AdviceCategory.INCOME,
)


@dataclass(frozen=True)
class ComparisonThresholds:
    """Differences above these values count as a change."""

    effectiveness_points: float = 5.0
    feasibility_points:   float = 5.0
    timeline_years:       float = 0.5
    cost_savings:         float = 1_000.0
    additional_assets:    float = 5_000.0

    @classmethod
    def from_config(cls, config: ComparisonConfig) -> "ComparisonThresholds":
        return cls(**config.model_dump())


# ── Milestones ────────────────────────────────────────────────────────────────


def compare_milestones(
    milestones_a: Sequence[Milestone],
    milestones_b: Sequence[Milestone],
) -> MilestoneComparison:
    """Pair milestones across scenarios and summarise timing shifts per type.

    Each A milestone is paired with the first matching B milestone.
    """
    common: list[MilestoneTimingComparison] = []
    unique_a: list[Milestone] = []

    for a in milestones_a:
        b = next((m for m in milestones_b if milestones_match(a, m)), None)
        if b is None:
            unique_a.append(a)
            continue
        impact_diff: Optional[float] = None
        if a.financial_impact is not None and b.financial_impact is not None:
            impact_diff = a.financial_impact - b.financial_impact
        common.append(
            MilestoneTimingComparison(
                milestone_type=a.type,
                scenario_a=a,
                scenario_b=b,
                timing_difference_days=(a.date - b.date).days,
                impact_difference=impact_diff,
            )
        )

    unique_b = [b for b in milestones_b if not any(milestones_match(a, b) for a in milestones_a)]

    return MilestoneComparison(
        common_milestones=common,
        unique_to_a=unique_a,
        unique_to_b=unique_b,
        timing_differences=summarize_timing(common),
    )


def summarize_timing(common: Sequence[MilestoneTimingComparison]) -> list[MilestoneTimingSummary]:
    """Per-type mean shift and effect, in first-seen type order."""
    grouped: dict[MilestoneType, list[int]] = defaultdict(list)
    for pair in common:
        grouped[pair.milestone_type].append(pair.timing_difference_days)

    return [
        MilestoneTimingSummary(
            milestone_type=milestone_type,
            average_timing_difference_days=sum(diffs) / len(diffs),
            count=len(diffs),
            effect=_timing_effect(diffs),
        )
        for milestone_type, diffs in grouped.items()
    ]


def _timing_effect(diffs: Sequence[int]) -> TimingEffect:
    positive = sum(1 for d in diffs if d > 0)
    negative = sum(1 for d in diffs if d < 0)
    if not positive and not negative:
        return TimingEffect.NO_CHANGE
    if positive and negative:
        return TimingEffect.MIXED
    return TimingEffect.ACCELERATES if positive > negative else TimingEffect.DELAYS


# ── Advice ────────────────────────────────────────────────────────────────────


def compare_advice(
    advice_a: RetirementAdvice,
    advice_b: RetirementAdvice,
    *,
    matcher: Optional[AdviceMatcher] = None,
    thresholds: Optional[ComparisonThresholds] = None,
    metrics: Optional[ComparisonMetrics] = None,
    scenario_a_sustainable: bool = True,
) -> AdviceComparison:
    """Diff two advice packages category by category.

    Args:
        advice_a:               Advice for scenario A.
        advice_b:               Advice for scenario B.
        matcher:                Pairing policy; ``KeyPhraseMatcher()`` by default.
        thresholds:             Change thresholds; defaults when omitted.
        metrics:                Headline metrics for the variation explanation.
        scenario_a_sustainable: Whether scenario A's projection is sustainable.

    Returns:
        ``AdviceComparison`` listing only categories that differ.
    """
    matcher = matcher or KeyPhraseMatcher()
    thresholds = thresholds or ComparisonThresholds()

    differences: list[AdviceDifference] = []
    for category in COMPARED_CATEGORIES:
        diff = _diff_category(
            category,
            [r for r in advice_a.recommendations if r.category == category],
            [r for r in advice_b.recommendations if r.category == category],
            matcher,
            thresholds,
        )
        if diff.unique_to_a or diff.unique_to_b or diff.changed_advice:
            differences.append(diff)

    explanation = generate_variation_explanation(
        advice_a, advice_b, metrics, scenario_a_sustainable
    )
    logger.debug(
        "Advice compared | categories_with_differences=%d | sentences=%d",
        len(differences), len(explanation),
    )
    return AdviceComparison(
        advice_a=advice_a,
        advice_b=advice_b,
        advice_differences=differences,
        variation_explanation=explanation,
    )


def _diff_category(
    category: AdviceCategory,
    items_a: Sequence[AdviceItem],
    items_b: Sequence[AdviceItem],
    matcher: AdviceMatcher,
    thresholds: ComparisonThresholds,
) -> AdviceDifference:
    unique_a: list[AdviceItem] = []
    changed: list[AdviceChange] = []

    for a in items_a:
        b = _find_match(a, items_b, matcher)
        if b is None:
            unique_a.append(a)
            continue
        flags = detect_changes(a, b, thresholds)
        if flags.any_changed:
            explanations = explain_change(a, b, flags)
            changed.append(
                AdviceChange(
                    scenario_a=a,
                    scenario_b=b,
                    changes=flags,
                    explanations=explanations,
                    change_explanation="; ".join(explanations),
                )
            )

    unique_b = [b for b in items_b if not any(matcher.matches(a, b) for a in items_a)]

    return AdviceDifference(
        category=category,
        unique_to_a=unique_a,
        unique_to_b=unique_b,
        changed_advice=changed,
    )


def _find_match(
    item: AdviceItem,
    candidates: Sequence[AdviceItem],
    matcher: AdviceMatcher,
) -> Optional[AdviceItem]:
    """First matching candidate, preferring one with the same id."""
    matches = [c for c in candidates if matcher.matches(item, c)]
    if not matches:
        return None
    return next((c for c in matches if c.id == item.id), matches[0])


def detect_changes(
    a: AdviceItem,
    b: AdviceItem,
    thresholds: Optional[ComparisonThresholds] = None,
) -> AdviceChangeFlags:
    thresholds = thresholds or ComparisonThresholds()
    return AdviceChangeFlags(
        priority_changed=a.priority != b.priority,
        effectiveness_changed=(
            abs(a.effectiveness_score - b.effectiveness_score) > thresholds.effectiveness_points
        ),
        feasibility_changed=(
            abs(a.feasibility_score - b.feasibility_score) > thresholds.feasibility_points
        ),
        impact_changed=_impact_changed(a, b, thresholds),
    )


def _impact_changed(a: AdviceItem, b: AdviceItem, thresholds: ComparisonThresholds) -> bool:
    ia, ib = a.projected_impact, b.projected_impact
    pairs = (
        (ia.timeline_savings_years, ib.timeline_savings_years, thresholds.timeline_years),
        (ia.cost_savings, ib.cost_savings, thresholds.cost_savings),
        (ia.additional_assets, ib.additional_assets, thresholds.additional_assets),
    )
    return any(
        va is not None and vb is not None and abs(va - vb) > limit
        for va, vb, limit in pairs
    )


def explain_change(a: AdviceItem, b: AdviceItem, flags: AdviceChangeFlags) -> list[str]:
    """One sentence per changed dimension: priority, effectiveness, feasibility, impact."""
    sentences: list[str] = []
    if flags.priority_changed:
        sentences.append(f"Priority changed from {b.priority} to {a.priority}")
    if flags.effectiveness_changed:
        delta = a.effectiveness_score - b.effectiveness_score
        direction = "increased" if delta > 0 else "decreased"
        sentences.append(f"Effectiveness {direction} by {abs(delta):.0f} points")
    if flags.feasibility_changed:
        delta = a.feasibility_score - b.feasibility_score
        direction = "improved" if delta > 0 else "worsened"
        sentences.append(f"Feasibility {direction} by {abs(delta):.0f} points")
    if flags.impact_changed:
        sentences.append("Projected impact changed due to different scenario outcomes")
    return sentences


# ── Explanation ───────────────────────────────────────────────────────────────


def generate_variation_explanation(
    advice_a: RetirementAdvice,
    advice_b: RetirementAdvice,
    metrics: Optional[ComparisonMetrics] = None,
    scenario_a_sustainable: bool = True,
) -> list[str]:
    """Sentences explaining why advice differs, in a fixed order.

    Order: assessment, target-age feasibility, net worth, retirement date,
    sustainability. Metric-based sentences are skipped when ``metrics`` is
    ``None``.
    """
    sentences: list[str] = []

    assess_a = advice_a.overall_assessment
    assess_b = advice_b.overall_assessment
    if assess_a != assess_b:
        direction = (
            "improved"
            if ASSESSMENT_ORDER.index(assess_a) < ASSESSMENT_ORDER.index(assess_b)
            else "worsened"
        )
        sentences.append(
            f'Overall retirement readiness {direction} from "{assess_b}" to "{assess_a}" '
            f"with transitions"
        )

    feasible_a = advice_a.retirement_feasibility.can_retire_at_target
    feasible_b = advice_b.retirement_feasibility.can_retire_at_target
    if feasible_a != feasible_b:
        if feasible_a:
            sentences.append(
                "Transitions enable retirement at target age, changing advice focus "
                "to optimization rather than catch-up strategies"
            )
        else:
            sentences.append(
                "Transitions delay retirement feasibility, requiring more aggressive strategies"
            )

    if metrics is None:
        return sentences

    net_worth = metrics.final_net_worth_difference
    if net_worth > 0:
        sentences.append(
            f"Improved financial position ({format_amount(net_worth)} higher net worth) "
            f"allows for more conservative advice strategies"
        )
    elif net_worth < 0:
        sentences.append(
            f"Reduced financial position ({format_amount(abs(net_worth))} lower net worth) "
            f"requires more aggressive advice strategies"
        )

    years = metrics.retirement_date_difference_years
    if years is not None and years < 0:
        sentences.append(
            f"Earlier retirement ({abs(years):.1f} years) reduces urgency of some recommendations"
        )
    elif years is not None and years > 0:
        sentences.append(
            f"Later retirement ({years:.1f} years) increases urgency and aggressiveness "
            f"of recommendations"
        )

    if metrics.sustainability_changed:
        if scenario_a_sustainable:
            sentences.append(
                "Improved sustainability with transitions reduces need for emergency "
                "financial measures"
            )
        else:
            sentences.append(
                "Reduced sustainability with transitions requires immediate corrective actions"
            )

    return sentences
