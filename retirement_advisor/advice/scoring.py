"""
Scoring helpers shared by every category strategy.

Formulas
--------
Amortisation (months to pay off a balance)::

    months = ln(1 + balance · r / payment) / ln(1 + r)      r > 0
    months = balance / payment                               r = 0

Ordinary annuity future value::

    FV = P · ((1 + r)^n − 1) / r                             r > 0
    FV = P · n                                               r = 0

Cash-flow feasibility (monthly cost vs trailing 12-period average cash flow)::

    no states      → 50
    avg <= 0       → 20
    ratio <= 10%   → 95
    ratio <= 20%   → 85
    ratio <= 30%   → 70
    ratio <= 50%   → 50
    otherwise      → 25

Retirement acceleration uses the 4 % rule: 25 000 of extra assets funds
1 000 a year, counted as one year earlier retirement.

Every helper passes its inputs and its result through ``ensure_finite`` so a
NaN or infinity raises ``NonFiniteValueError`` instead of tainting a score.
"""

from __future__ import annotations

import math
from typing import Sequence

from retirement_advisor.advice.errors import NonFiniteValueError
from retirement_advisor.models.snapshot import FinancialSnapshot

TRAILING_WINDOW = 12
ASSETS_PER_RETIREMENT_YEAR = 25_000.0

# (max ratio, score); the first bucket whose bound is >= ratio wins.
_FEASIBILITY_BUCKETS: tuple[tuple[float, float], ...] = (
    (0.10, 95.0),
    (0.20, 85.0),
    (0.30, 70.0),
    (0.50, 50.0),
)
_FEASIBILITY_FALLBACK = 25.0
_FEASIBILITY_NO_DATA = 50.0
_FEASIBILITY_NO_CASH_FLOW = 20.0


def ensure_finite(value: float, name: str) -> float:
    """Return ``value`` unchanged, or raise when it is NaN or infinite.

    Args:
        value: Number to check.
        name:  Label used in the error message and context.

    Raises:
        NonFiniteValueError: If ``value`` is not finite.
    """
    if not math.isfinite(value):
        raise NonFiniteValueError(
            f"Non-finite value for {name}: {value}", field=name, value=str(value)
        )
    return value


def clamp_score(value: float, cap: float = 100.0) -> float:
    """Clamp a score to ``[0, cap]``."""
    ensure_finite(value, "score")
    return max(0.0, min(cap, value))


def months_to_payoff(balance: float, monthly_payment: float, monthly_rate: float) -> float:
    """Months needed to amortise ``balance`` at ``monthly_payment``.

    A non-positive payment would take infinitely long and raises
    ``NonFiniteValueError``; callers skip such loans beforehand.

    Args:
        balance:         Outstanding balance.
        monthly_payment: Payment per month (must be positive).
        monthly_rate:    Interest rate per month as a fraction (0.005 = 0.5 %).

    Returns:
        Fractional number of months.
    """
    ensure_finite(balance, "balance")
    ensure_finite(monthly_payment, "monthly_payment")
    ensure_finite(monthly_rate, "monthly_rate")
    if monthly_payment <= 0:
        raise NonFiniteValueError(
            "Loan payment must be positive to amortise a balance",
            monthly_payment=monthly_payment,
        )

    if monthly_rate == 0:
        return ensure_finite(balance / monthly_payment, "months_to_payoff")

    try:
        months = math.log(1 + balance * monthly_rate / monthly_payment) / math.log(1 + monthly_rate)
    except ValueError as exc:
        raise NonFiniteValueError(
            f"Amortisation undefined for balance={balance}, payment={monthly_payment}",
            balance=balance,
            monthly_payment=monthly_payment,
        ) from exc
    return ensure_finite(months, "months_to_payoff")


def future_value(annual_payment: float, rate: float, years: float) -> float:
    """Future value of an ordinary annuity.

    Args:
        annual_payment: Amount contributed at the end of each year.
        rate:           Annual return as a fraction (0.07 = 7 %).
        years:          Number of years.
    """
    ensure_finite(annual_payment, "annual_payment")
    ensure_finite(rate, "rate")
    ensure_finite(years, "years")

    if rate == 0:
        return ensure_finite(annual_payment * years, "future_value")
    return ensure_finite(
        annual_payment * (math.pow(1 + rate, years) - 1) / rate, "future_value"
    )


def compound(balance: float, rate: float, years: float) -> float:
    """Grow a lump sum at ``rate`` for ``years``."""
    ensure_finite(balance, "balance")
    return ensure_finite(balance * math.pow(1 + rate, years), "compound")


def feasibility_from_cash_flow(
    monthly_cost: float,
    states: Sequence[FinancialSnapshot],
) -> float:
    """Score how easily ``monthly_cost`` fits in recent cash flow.

    Args:
        monthly_cost: Extra monthly outlay the recommendation requires.
        states:       Snapshot series; only the last 12 are considered.

    Returns:
        Feasibility score in ``[0, 100]``.
    """
    ensure_finite(monthly_cost, "monthly_cost")
    if not states:
        return _FEASIBILITY_NO_DATA

    recent = states[-TRAILING_WINDOW:]
    avg_cash_flow = ensure_finite(
        sum(s.cash_flow for s in recent) / len(recent), "average_cash_flow"
    )
    if avg_cash_flow <= 0:
        return _FEASIBILITY_NO_CASH_FLOW

    ratio = monthly_cost / avg_cash_flow
    for bound, score in _FEASIBILITY_BUCKETS:
        if ratio <= bound:
            return score
    return _FEASIBILITY_FALLBACK


def retirement_acceleration_years(additional_assets: float) -> float:
    """Years of earlier retirement bought by ``additional_assets``."""
    return ensure_finite(
        additional_assets / ASSETS_PER_RETIREMENT_YEAR, "retirement_acceleration"
    )
