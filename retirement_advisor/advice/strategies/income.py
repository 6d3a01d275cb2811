"""
Income strategy: raise tiers, net of income tax, invested until retirement.

    raise         : 5 %    10 %    20 % (promotion)
    priority      : high   medium  low
    feasibility   : 80     65      50
    effectiveness = min(95, raise fraction × 200)

The salary base is ``annual_salary``; multi-person households that leave it
at zero use the sum of every person's before-tax income instead.
"""

from __future__ import annotations

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

RAISE_OPTIONS: tuple[tuple[float, str], ...] = (
    (0.05, "5% raise"),
    (0.10, "10% raise"),
    (0.20, "20% raise (promotion)"),
)
_TIER_PRIORITY = (AdvicePriority.HIGH, AdvicePriority.MEDIUM, AdvicePriority.LOW)
_TIER_FEASIBILITY = (80.0, 65.0, 50.0)


def household_salary(params: HouseholdParameters) -> float:
    """Annual gross salary the raise tiers are computed from."""
    if params.annual_salary > 0:
        return params.annual_salary
    return sum(person.annual_before_tax_income for person in params.people)


def analyze_income(
    states: Sequence[FinancialSnapshot],
    params: HouseholdParameters,
) -> list[AdviceItem]:
    """Generate raise candidates; none when the household has no salary."""
    if not states:
        return []

    salary = household_salary(params)
    if salary <= 0:
        return []

    years = max(0, params.years_to_retirement)
    rate = params.investment_return_rate / 100.0
    after_tax = 1 - params.income_tax_rate / 100.0

    advice: list[AdviceItem] = []
    for tier, (fraction, label) in enumerate(RAISE_OPTIONS):
        gross_increase = salary * fraction
        net_increase = gross_increase * after_tax
        invested = future_value(net_increase, rate, years)
        advice.append(
            AdviceItem(
                id=f"income-increase-{tier}",
                category=AdviceCategory.INCOME,
                priority=_TIER_PRIORITY[tier],
                title=f"Pursue {label}",
                description=(
                    f"Increase annual income by {format_currency(gross_increase)} ({label}). "
                    f"After tax, this provides {format_currency(net_increase)} extra annually. "
                    f"If invested, could grow to {format_currency(invested)} by retirement."
                ),
                specific_actions=[
                    "Discuss career advancement opportunities with manager",
                    "Update skills and qualifications to justify increase",
                    "Research market rates for your role and experience",
                    "Automatically invest the additional income to maximize growth",
                ],
                projected_impact=ProjectedImpact(
                    additional_assets=invested,
                    timeline_savings_years=retirement_acceleration_years(invested),
                ),
                feasibility_score=_TIER_FEASIBILITY[tier],
                effectiveness_score=clamp_score(fraction * 200.0, cap=95.0),
            )
        )
    return advice
