"""
Expense strategy: tiered spending reductions whose savings are invested.

Each non-zero category in ``EXPENSE_CATEGORIES`` gets three tiers: 5 %,
10 % and the category maximum. The annual saving is compounded as an
ordinary annuity until retirement.

    tier          : 1      2       3
    priority      : high   medium  low
    feasibility   : 90     70      50
    effectiveness = min(85, FV / 10 000 × 10)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from retirement_advisor.advice.scoring import (
    clamp_score,
    future_value,
    retirement_acceleration_years,
)
from retirement_advisor.models.advice import AdviceItem, ProjectedImpact
from retirement_advisor.models.household import HouseholdParameters
from retirement_advisor.models.snapshot import FinancialSnapshot
from retirement_advisor.taxonomy.advice_taxonomy import AdviceCategory, AdvicePriority
from retirement_advisor.utils.currency import format_currency


@dataclass(frozen=True)
class ExpenseCategory:
    """A household expense line and its realistic maximum reduction."""

    name:          str
    slug:          str
    field:         str
    max_reduction: float


EXPENSE_CATEGORIES: tuple[ExpenseCategory, ...] = (
    ExpenseCategory("Living Expenses", "living-expenses", "monthly_living_expenses", 0.15),
    ExpenseCategory("Housing Costs",   "housing-costs",   "monthly_rent_or_mortgage", 0.10),
)

_TIER_PRIORITY = (AdvicePriority.HIGH, AdvicePriority.MEDIUM, AdvicePriority.LOW)
_TIER_FEASIBILITY = (90.0, 70.0, 50.0)


def analyze_expenses(
    states: Sequence[FinancialSnapshot],
    params: HouseholdParameters,
) -> list[AdviceItem]:
    """Generate expense-reduction candidates for every non-zero category."""
    if not states:
        return []

    years = max(0, params.years_to_retirement)
    rate = params.investment_return_rate / 100.0

    advice: list[AdviceItem] = []
    for category in EXPENSE_CATEGORIES:
        monthly_amount: float = getattr(params, category.field)
        if monthly_amount <= 0:
            continue

        fractions = (0.05, 0.10, category.max_reduction)
        for tier, fraction in enumerate(fractions):
            reduction = monthly_amount * fraction
            annual_saving = reduction * 12
            invested = future_value(annual_saving, rate, years)
            pct = round(fraction * 100)
            advice.append(
                AdviceItem(
                    id=f"expense-reduction-{category.slug}-{(tier + 1) * 5}",
                    category=AdviceCategory.EXPENSE,
                    priority=_TIER_PRIORITY[tier],
                    title=f"Reduce {category.name} by {pct}%",
                    description=(
                        f"Cut {category.name} by {format_currency(reduction)}/month "
                        f"({pct}% reduction). Invest the savings to potentially gain "
                        f"{format_currency(invested)} by retirement."
                    ),
                    specific_actions=[
                        f"Review {category.name.lower()} for optimization opportunities",
                        f"Set a target to reduce by {format_currency(reduction)} monthly",
                        "Automatically invest the savings to maximize compound growth",
                        "Track progress monthly to ensure targets are met",
                    ],
                    projected_impact=ProjectedImpact(
                        cost_savings=annual_saving,
                        additional_assets=invested,
                        timeline_savings_years=retirement_acceleration_years(invested),
                    ),
                    feasibility_score=_TIER_FEASIBILITY[tier],
                    effectiveness_score=clamp_score(invested / 10_000.0 * 10.0, cap=85.0),
                )
            )
    return advice
