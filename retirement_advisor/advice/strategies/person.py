"""
Person-specific strategy (multi-person households only).

Super contribution
------------------
Per person and super account, contribution-rate increases of +1, +2 and +3
percentage points (capped at 15 %, duplicates dropped). The incremental
annual contribution is compounded for 10 years at the account's own return.
A candidate is emitted when the benefit exceeds 5 000 and the increment is
under 5 % of the person's before-tax income. Persons without before-tax
income are skipped.

Retirement age
--------------
Per person, delaying retirement by 1–3 years (never past 70). The benefit is
the extra years of income plus each super balance compounded at its own
return over the delay. Emitted when above 50 000.

Items are not pre-filtered here; the engine validates their mutation
descriptors and flags any that do not resolve.
"""

from __future__ import annotations

from typing import Sequence

from retirement_advisor.advice.scoring import compound, future_value
from retirement_advisor.advice.targeting import (
    build_retirement_age_advice,
    build_super_contribution_advice,
)
from retirement_advisor.models.advice import AdviceItem
from retirement_advisor.models.household import HouseholdParameters, Person
from retirement_advisor.models.snapshot import FinancialSnapshot
from retirement_advisor.utils.currency import format_currency

SUPER_RATE_STEPS: tuple[int, ...] = (1, 2, 3)
SUPER_MAX_RATE = 15.0
SUPER_BENEFIT_YEARS = 10
SUPER_MIN_BENEFIT = 5_000.0
SUPER_MAX_INCOME_SHARE = 0.05

RETIREMENT_DELAYS: tuple[int, ...] = (1, 2, 3)
RETIREMENT_MAX_AGE = 70
RETIREMENT_MIN_BENEFIT = 50_000.0


def analyze_person_specific(
    states: Sequence[FinancialSnapshot],
    params: HouseholdParameters,
) -> list[AdviceItem]:
    """Generate super-contribution and retirement-age candidates per person."""
    if not states or not params.is_multi_person:
        return []

    advice: list[AdviceItem] = []
    for person in params.people:
        advice.extend(super_contribution_advice(person))
        advice.extend(retirement_age_advice(person))
    return advice


def _suggested_rates(current_rate: float) -> list[float]:
    candidates = {min(SUPER_MAX_RATE, current_rate + step) for step in SUPER_RATE_STEPS}
    return sorted(rate for rate in candidates if current_rate < rate <= SUPER_MAX_RATE)


def super_contribution_advice(person: Person) -> list[AdviceItem]:
    income = person.annual_before_tax_income
    if income <= 0:
        return []

    advice: list[AdviceItem] = []
    for account in person.super_accounts:
        for suggested_rate in _suggested_rates(account.contribution_rate):
            increment = income * (suggested_rate - account.contribution_rate) / 100.0
            benefit = future_value(increment, account.return_rate / 100.0, SUPER_BENEFIT_YEARS)
            if benefit > SUPER_MIN_BENEFIT and increment < income * SUPER_MAX_INCOME_SHARE:
                advice.append(
                    build_super_contribution_advice(person, account, suggested_rate, benefit)
                )
    return advice


def retirement_age_advice(person: Person) -> list[AdviceItem]:
    income = person.annual_before_tax_income

    advice: list[AdviceItem] = []
    for delay in RETIREMENT_DELAYS:
        suggested_age = person.retirement_age + delay
        if suggested_age > RETIREMENT_MAX_AGE:
            continue

        super_growth = sum(
            compound(acc.balance, acc.return_rate / 100.0, delay) - acc.balance
            for acc in person.super_accounts
        )
        benefit = income * delay + super_growth
        if benefit <= RETIREMENT_MIN_BENEFIT:
            continue

        plural = "s" if delay > 1 else ""
        reason = (
            f"Working {delay} additional year{plural} could provide "
            f"{format_currency(benefit)} in additional retirement security."
        )
        advice.append(build_retirement_age_advice(person, suggested_age, benefit, reason))
    return advice
