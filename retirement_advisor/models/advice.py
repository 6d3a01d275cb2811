"""
Advice output models.

``AdviceItem`` is a single candidate recommendation produced by a category
strategy. ``RankedAdvice`` adds the ranking engine's ``overall_score`` and
1-based ``rank``. ``RetirementAdvice`` is the complete package returned to
callers, and ``AdviceGenerationResult`` wraps it with the error/warning list.

Person-targeted recommendations carry a ``PersonSpecificChanges`` mutation
descriptor. The descriptor is data only; it is checked by
``advice.targeting.validate_person_advice`` and applied (as a new parameter
set) by ``advice.targeting.apply_person_advice``.

All models are frozen. Items are created fresh per generation call and
discarded at call end.
"""

from __future__ import annotations

import math
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from retirement_advisor.models.errors import GenerationError
from retirement_advisor.taxonomy.advice_taxonomy import (
    AdviceCategory,
    AdvicePriority,
    MutationAction,
    RetirementAssessment,
)

MutationValue = Union[str, bool, int, float, None]


# ── Impact ────────────────────────────────────────────────────────────────────


class ProjectedImpact(BaseModel):
    """Projected effect of following a recommendation.

    Attributes:
        timeline_savings_years: Years gained on the retirement timeline.
        cost_savings: Money saved (interest, spending).
        additional_assets: Extra assets accumulated.
    """

    model_config = ConfigDict(frozen=True)

    timeline_savings_years: Optional[float] = None
    cost_savings: Optional[float] = None
    additional_assets: Optional[float] = None


# ── Mutation descriptor ───────────────────────────────────────────────────────


class SubEntityChange(BaseModel):
    """Add, update or remove one income source / super account of a person.

    ``id`` is required for ``update`` and ``remove``; ``data`` holds the
    partial field values for ``add`` and ``update``.
    """

    model_config = ConfigDict(frozen=True)

    action: MutationAction
    id: Optional[str] = None
    data: dict[str, MutationValue] = {}


class PersonUpdates(BaseModel):
    """Scalar fields of a person that a recommendation may change."""

    model_config = ConfigDict(frozen=True)

    current_age: Optional[int] = None
    retirement_age: Optional[int] = None
    name: Optional[str] = None


class PersonChanges(BaseModel):
    model_config = ConfigDict(frozen=True)

    income_sources: list[SubEntityChange] = []
    super_accounts: list[SubEntityChange] = []
    person_updates: Optional[PersonUpdates] = None


class PersonSpecificChanges(BaseModel):
    """Mutation descriptor scoped to a single person of the household."""

    model_config = ConfigDict(frozen=True)

    person_id: str
    changes: PersonChanges


# ── Advice items ──────────────────────────────────────────────────────────────


class AdviceItem(BaseModel):
    """One candidate recommendation.

    Attributes:
        id: Stable identifier, unique within one generation call.
        category: Advice category.
        priority: Implementation urgency.
        title: Short headline.
        description: One or two explanatory sentences.
        specific_actions: Ordered action steps.
        projected_impact: Projected timeline / cost / asset effect.
        feasibility_score: 0–100, how easy the advice is to follow.
        effectiveness_score: 0–100, how much it is expected to help.
        person_id: Targeted household member, if any.
        person_specific_changes: Mutation descriptor, if any.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    category: AdviceCategory
    priority: AdvicePriority
    title: str
    description: str
    specific_actions: list[str] = []
    projected_impact: ProjectedImpact = ProjectedImpact()
    feasibility_score: float
    effectiveness_score: float
    person_id: Optional[str] = None
    person_specific_changes: Optional[PersonSpecificChanges] = None

    @field_validator("feasibility_score", "effectiveness_score")
    @classmethod
    def validate_score_range(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"Scores must be finite, got {v}.")
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"Scores must be in [0, 100], got {v}.")
        return v

    @property
    def is_person_targeted(self) -> bool:
        return self.person_id is not None or self.person_specific_changes is not None


class RankedAdvice(AdviceItem):
    """An ``AdviceItem`` with its ranking applied.

    Attributes:
        overall_score: ``0.7 * effectiveness + 0.3 * feasibility``.
        rank: 1-based position in the ranked list (1 = best).
    """

    overall_score: float
    rank: int

    @field_validator("rank")
    @classmethod
    def validate_rank(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"rank must be >= 1, got {v}.")
        return v


# ── Advice package ────────────────────────────────────────────────────────────


class RetirementFeasibility(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_retire_at_target: bool
    actual_retirement_age: Optional[float] = None
    shortfall_amount: Optional[float] = None
    surplus_amount: Optional[float] = None


class RetirementAdvice(BaseModel):
    """Complete advice package for one projection.

    ``quick_wins`` and ``long_term_strategies`` are subsets of
    ``recommendations`` and may overlap.
    """

    model_config = ConfigDict(frozen=True)

    overall_assessment: RetirementAssessment
    retirement_feasibility: RetirementFeasibility
    recommendations: list[RankedAdvice] = []
    quick_wins: list[RankedAdvice] = []
    long_term_strategies: list[RankedAdvice] = []

    @classmethod
    def minimal(cls) -> "RetirementAdvice":
        """The safe result returned when generation fails critically."""
        return cls(
            overall_assessment=RetirementAssessment.CRITICAL,
            retirement_feasibility=RetirementFeasibility(can_retire_at_target=False),
        )


class AdviceGenerationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    advice: RetirementAdvice
    errors: list[GenerationError] = []
    warnings: list[str] = []

    @property
    def has_critical_error(self) -> bool:
        return any(err.is_critical for err in self.errors)
