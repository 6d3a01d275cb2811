"""
Scenario comparison models.

A ``ScenarioComparison`` is the caller-owned envelope holding two scenario
outputs (A = "with transitions", B = "without transitions") and the headline
``ComparisonMetrics`` between them. The comparison engine attaches a
``MilestoneComparison`` and an ``AdviceComparison`` to a copy of the
envelope.

Timing differences are always expressed as A − B: a positive value means the
milestone happens *later* in scenario A. Per-type summaries label an all-positive group
``accelerates`` and an all-negative group ``delays``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from retirement_advisor.models.advice import AdviceItem, RetirementAdvice
from retirement_advisor.models.milestone import Milestone
from retirement_advisor.models.snapshot import ProjectionResult
from retirement_advisor.taxonomy.advice_taxonomy import (
    AdviceCategory,
    MilestoneType,
    TimingEffect,
)

_DAYS_PER_YEAR = 365.25


# ── Milestones ────────────────────────────────────────────────────────────────


class MilestoneTimingComparison(BaseModel):
    """A milestone present in both scenarios."""

    model_config = ConfigDict(frozen=True)

    milestone_type: MilestoneType
    scenario_a: Milestone
    scenario_b: Milestone
    timing_difference_days: int
    impact_difference: Optional[float] = None


class MilestoneTimingSummary(BaseModel):
    """Aggregate timing shift for one milestone type."""

    model_config = ConfigDict(frozen=True)

    milestone_type: MilestoneType
    average_timing_difference_days: float
    count: int
    effect: TimingEffect


class MilestoneComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    common_milestones: list[MilestoneTimingComparison] = []
    unique_to_a: list[Milestone] = []
    unique_to_b: list[Milestone] = []
    timing_differences: list[MilestoneTimingSummary] = []


# ── Advice ────────────────────────────────────────────────────────────────────


class AdviceChangeFlags(BaseModel):
    model_config = ConfigDict(frozen=True)

    priority_changed: bool = False
    effectiveness_changed: bool = False
    feasibility_changed: bool = False
    impact_changed: bool = False

    @property
    def any_changed(self) -> bool:
        return (
            self.priority_changed
            or self.effectiveness_changed
            or self.feasibility_changed
            or self.impact_changed
        )


class AdviceChange(BaseModel):
    """A recommendation present in both scenarios whose details differ.

    Attributes:
        scenario_a: The item as generated for scenario A.
        scenario_b: The matching item from scenario B.
        changes: Which dimensions differ.
        explanations: One sentence per differing dimension, in fixed order.
        change_explanation: ``explanations`` joined with ``"; "``.
    """

    model_config = ConfigDict(frozen=True)

    scenario_a: AdviceItem
    scenario_b: AdviceItem
    changes: AdviceChangeFlags
    explanations: list[str] = []
    change_explanation: str = ""


class AdviceDifference(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: AdviceCategory
    unique_to_a: list[AdviceItem] = []
    unique_to_b: list[AdviceItem] = []
    changed_advice: list[AdviceChange] = []


class AdviceComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    advice_a: RetirementAdvice
    advice_b: RetirementAdvice
    advice_differences: list[AdviceDifference] = []
    variation_explanation: list[str] = []

    @property
    def changed_advice_count(self) -> int:
        return sum(len(diff.changed_advice) for diff in self.advice_differences)


# ── Envelope ──────────────────────────────────────────────────────────────────


class ComparisonMetrics(BaseModel):
    """Headline deltas between scenario A and scenario B (A − B).

    Attributes:
        retirement_date_difference_years: ``None`` when either scenario
            never reaches retirement.
        final_net_worth_difference: Final net worth A − B.
        sustainability_changed: Whether the sustainability flags differ.
    """

    model_config = ConfigDict(frozen=True)

    retirement_date_difference_years: Optional[float] = None
    final_net_worth_difference: float = 0.0
    sustainability_changed: bool = False


class ScenarioOutput(BaseModel):
    """Everything produced for one scenario.

    ``advice`` is optional; when absent the comparison engine generates it.
    """

    model_config = ConfigDict(frozen=True)

    projection: ProjectionResult
    milestones: list[Milestone] = []
    advice: Optional[RetirementAdvice] = None


class ScenarioComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    with_transitions: ScenarioOutput
    without_transitions: ScenarioOutput
    metrics: ComparisonMetrics = ComparisonMetrics()
    milestone_comparison: Optional[MilestoneComparison] = None
    advice_comparison: Optional[AdviceComparison] = None


def build_comparison_metrics(
    scenario_a: ProjectionResult,
    scenario_b: ProjectionResult,
) -> ComparisonMetrics:
    """Derive headline metrics (A − B) from two projections."""
    date_diff: Optional[float] = None
    if scenario_a.retirement_date is not None and scenario_b.retirement_date is not None:
        days = (scenario_a.retirement_date - scenario_b.retirement_date).days
        date_diff = days / _DAYS_PER_YEAR

    final_a = scenario_a.final_state
    final_b = scenario_b.final_state
    net_worth_diff = (
        (final_a.net_worth if final_a else 0.0) - (final_b.net_worth if final_b else 0.0)
    )

    return ComparisonMetrics(
        retirement_date_difference_years=date_diff,
        final_net_worth_difference=net_worth_diff,
        sustainability_changed=scenario_a.is_sustainable != scenario_b.is_sustainable,
    )
