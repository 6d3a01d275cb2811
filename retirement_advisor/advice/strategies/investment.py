"""
Investment strategy: contribution increases and allocation change.

Contribution increases
----------------------
For each monthly increase in ``CONTRIBUTION_INCREASES`` the extra annual
contribution is compounded as an ordinary annuity over
``min(10, years to retirement)`` at the household investment return.

    priority      = high if increase <= 100 else medium
    feasibility   = cash-flow bucket for the increase
    effectiveness = min(95, FV / 10 000 × 10)

Allocation
----------
Only when retirement is more than 10 years away and the expected return is
below 7 %. The suggested return is ``min(8, current + 1.5)``; balance plus
contributions are compounded over the same 10-year-capped horizon at both
rates and the difference is the projected gain.

    feasibility   = 70
    effectiveness = min(90, Δrate / 2 × 100)
"""

from __future__ import annotations

from typing import Sequence

from retirement_advisor.advice.scoring import (
    clamp_score,
    compound,
    feasibility_from_cash_flow,
    future_value,
    retirement_acceleration_years,
)
from retirement_advisor.models.advice import AdviceItem, ProjectedImpact
from retirement_advisor.models.household import HouseholdParameters
from retirement_advisor.models.snapshot import FinancialSnapshot
from retirement_advisor.taxonomy.advice_taxonomy import AdviceCategory, AdvicePriority
from retirement_advisor.utils.currency import format_currency

CONTRIBUTION_INCREASES: tuple[int, ...] = (50, 100, 200, 500)
HIGH_PRIORITY_MAX_INCREASE = 100
PROJECTION_HORIZON_YEARS = 10

ALLOCATION_MIN_YEARS = 10
ALLOCATION_RATE_CEILING = 7.0
ALLOCATION_RATE_STEP = 1.5
ALLOCATION_MAX_RATE = 8.0


def analyze_investments(
    states: Sequence[FinancialSnapshot],
    params: HouseholdParameters,
) -> list[AdviceItem]:
    """Generate contribution-increase and allocation candidates."""
    if not states:
        return []
    return [*contribution_advice(states, params), *allocation_advice(params)]


def _horizon_years(params: HouseholdParameters) -> int:
    return max(0, min(PROJECTION_HORIZON_YEARS, params.years_to_retirement))


def contribution_advice(
    states: Sequence[FinancialSnapshot],
    params: HouseholdParameters,
) -> list[AdviceItem]:
    current = params.monthly_investment_contribution
    rate = params.investment_return_rate / 100.0
    years = _horizon_years(params)

    advice: list[AdviceItem] = []
    for increase in CONTRIBUTION_INCREASES:
        annual_increase = increase * 12
        fv = future_value(annual_increase, rate, years)
        advice.append(
            AdviceItem(
                id=f"investment-increase-{increase}",
                category=AdviceCategory.INVESTMENT,
                priority=(
                    AdvicePriority.HIGH
                    if increase <= HIGH_PRIORITY_MAX_INCREASE
                    else AdvicePriority.MEDIUM
                ),
                title=f"Increase Investment Contributions (+{format_currency(increase)}/month)",
                description=(
                    f"Boost monthly investments from {format_currency(current)} to "
                    f"{format_currency(current + increase)}. This could generate an additional "
                    f"{format_currency(fv)} over {years} years."
                ),
                specific_actions=[
                    f"Increase automatic investment contribution by {format_currency(increase)} per month",
                    f"Review budget to accommodate additional {format_currency(annual_increase)} annually",
                    "Consider dollar-cost averaging to reduce market timing risk",
                ],
                projected_impact=ProjectedImpact(
                    additional_assets=fv,
                    timeline_savings_years=retirement_acceleration_years(fv),
                ),
                feasibility_score=feasibility_from_cash_flow(increase, states),
                effectiveness_score=clamp_score(fv / 10_000.0 * 10.0, cap=95.0),
            )
        )
    return advice


def allocation_advice(params: HouseholdParameters) -> list[AdviceItem]:
    years_to_retirement = params.years_to_retirement
    current_rate = params.investment_return_rate
    if years_to_retirement <= ALLOCATION_MIN_YEARS or current_rate >= ALLOCATION_RATE_CEILING:
        return []

    suggested_rate = min(ALLOCATION_MAX_RATE, current_rate + ALLOCATION_RATE_STEP)
    rate_gain = suggested_rate - current_rate
    horizon = _horizon_years(params)
    annual_contribution = params.monthly_investment_contribution * 12
    balance = params.current_investment_balance

    def _outcome(rate_pct: float) -> float:
        r = rate_pct / 100.0
        return future_value(annual_contribution, r, horizon) + compound(balance, r, horizon)

    additional_value = _outcome(suggested_rate) - _outcome(current_rate)

    return [
        AdviceItem(
            id="allocation-optimization-aggressive",
            category=AdviceCategory.INVESTMENT,
            priority=AdvicePriority.MEDIUM,
            title="Optimize Investment Allocation for Growth",
            description=(
                f"Consider a more growth-oriented portfolio targeting {suggested_rate:g}% "
                f"returns instead of {current_rate:g}%. This could add "
                f"{format_currency(additional_value)} to your retirement savings."
            ),
            specific_actions=[
                "Review current investment allocation with a financial advisor",
                f"Consider increasing equity allocation given your "
                f"{years_to_retirement}-year time horizon",
                "Rebalance portfolio to target higher growth potential",
                "Ensure you're comfortable with increased volatility",
            ],
            projected_impact=ProjectedImpact(
                additional_assets=additional_value,
                timeline_savings_years=retirement_acceleration_years(additional_value),
            ),
            feasibility_score=70.0,
            effectiveness_score=clamp_score(rate_gain / 2.0 * 100.0, cap=90.0),
        )
    ]
