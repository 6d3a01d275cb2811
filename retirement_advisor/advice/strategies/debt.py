"""
Debt strategy: loan acceleration and offset-account usage.

Loan acceleration
-----------------
For every loan with a positive balance at the *first* snapshot, and for each
extra monthly payment in ``EXTRA_PAYMENT_OPTIONS``, compare the amortisation
time with and without the extra payment. A candidate is emitted only when it
saves more than ``MIN_YEARS_SAVED``.

    interest saved ≈ months saved × payment × monthly rate
    priority       = high if extra <= 250 else medium
    feasibility    = cash-flow bucket for the extra payment
    effectiveness  = min(95, years saved / 5 × 100)

Households without a ``loans`` list fall back to the legacy single-loan
fields (``loan_interest_rate``, ``loan_payment_amount``).

Offset usage
------------
Evaluated at a checkpoint roughly one year in (index ``min(12, len − 1)``).
Idle cash above ``OFFSET_MIN_CASH`` is assumed to earn the highest active
loan rate in interest avoided, for as long as the loans stay active (capped
at ``OFFSET_MAX_YEARS``).
"""

from __future__ import annotations

from typing import Sequence

from retirement_advisor.advice.scoring import (
    clamp_score,
    feasibility_from_cash_flow,
    months_to_payoff,
)
from retirement_advisor.models.advice import AdviceItem, ProjectedImpact
from retirement_advisor.models.household import HouseholdParameters
from retirement_advisor.models.snapshot import FinancialSnapshot
from retirement_advisor.taxonomy.advice_taxonomy import AdviceCategory, AdvicePriority
from retirement_advisor.utils.currency import format_currency

EXTRA_PAYMENT_OPTIONS: tuple[int, ...] = (100, 250, 500, 1000)
MIN_YEARS_SAVED = 0.5
HIGH_PRIORITY_MAX_EXTRA = 250

OFFSET_CHECKPOINT_INDEX = 12
OFFSET_MIN_CASH = 1000.0
OFFSET_MAX_YEARS = 10.0
OFFSET_NEVER_PAID_OFF_YEARS = 20.0

_DAYS_PER_YEAR = 365.25


def analyze_debt(
    states: Sequence[FinancialSnapshot],
    params: HouseholdParameters,
) -> list[AdviceItem]:
    """Generate loan acceleration and offset candidates.

    Args:
        states: Chronological snapshot series.
        params: Household parameters the projection was run with.

    Returns:
        Candidate list (possibly empty).
    """
    if not states:
        return []

    first = states[0]
    if not first.has_active_loans:
        return []

    advice: list[AdviceItem] = []

    if params.loans:
        for loan in params.loans:
            balance = first.balance_for_loan(loan.id)
            if balance > 0:
                advice.extend(
                    _acceleration_advice(
                        key=loan.id,
                        label=loan.label,
                        balance=balance,
                        monthly_payment=loan.monthly_payment,
                        annual_rate_pct=loan.interest_rate,
                        states=states,
                    )
                )
    elif first.loan_balance > 0:
        advice.extend(
            _acceleration_advice(
                key="legacy",
                label=None,
                balance=first.loan_balance,
                monthly_payment=params.legacy_monthly_loan_payment,
                annual_rate_pct=params.loan_interest_rate,
                states=states,
            )
        )

    advice.extend(analyze_offset(states, params))
    return advice


def _acceleration_advice(
    key: str,
    label: str | None,
    balance: float,
    monthly_payment: float,
    annual_rate_pct: float,
    states: Sequence[FinancialSnapshot],
) -> list[AdviceItem]:
    if monthly_payment <= 0:
        return []

    monthly_rate = annual_rate_pct / 100.0 / 12.0
    current_months = months_to_payoff(balance, monthly_payment, monthly_rate)
    loan_name = label or "Loan"
    payment_phrase = f"{label} payment" if label else "loan payment"

    advice: list[AdviceItem] = []
    for extra in EXTRA_PAYMENT_OPTIONS:
        accelerated_months = months_to_payoff(balance, monthly_payment + extra, monthly_rate)
        months_saved = current_months - accelerated_months
        years_saved = months_saved / 12.0
        if years_saved <= MIN_YEARS_SAVED:
            continue

        interest_saved = months_saved * monthly_payment * monthly_rate
        advice.append(
            AdviceItem(
                id=f"debt-acceleration-{key}-{extra}",
                category=AdviceCategory.DEBT,
                priority=(
                    AdvicePriority.HIGH
                    if extra <= HIGH_PRIORITY_MAX_EXTRA
                    else AdvicePriority.MEDIUM
                ),
                title=f"Accelerate {loan_name} Payments (+{format_currency(extra)}/month)",
                description=(
                    f"Add {format_currency(extra)} to your monthly {payment_phrase} to save "
                    f"{years_saved:.1f} years and {format_currency(interest_saved)} in interest."
                ),
                specific_actions=[
                    f"Increase monthly payment from {format_currency(monthly_payment)} "
                    f"to {format_currency(monthly_payment + extra)}",
                    "Set up automatic extra payment to ensure consistency",
                    f"Review budget to identify where extra {format_currency(extra)} can come from",
                ],
                projected_impact=ProjectedImpact(
                    timeline_savings_years=years_saved,
                    cost_savings=interest_saved,
                ),
                feasibility_score=feasibility_from_cash_flow(extra, states),
                effectiveness_score=clamp_score(years_saved / 5.0 * 100.0, cap=95.0),
            )
        )
    return advice


# ── Offset ────────────────────────────────────────────────────────────────────


def analyze_offset(
    states: Sequence[FinancialSnapshot],
    params: HouseholdParameters,
) -> list[AdviceItem]:
    """Suggest moving idle cash into an offset account.

    Returns at most one candidate.
    """
    has_offset = params.use_offset_account or any(loan.has_offset for loan in params.loans)
    if not has_offset or not states:
        return []

    checkpoint_index = min(OFFSET_CHECKPOINT_INDEX, len(states) - 1)
    checkpoint = states[checkpoint_index]
    if not checkpoint.has_active_loans or checkpoint.cash <= OFFSET_MIN_CASH:
        return []

    rate_pct = _max_active_rate(checkpoint, params)
    years_of_saving = min(_years_until_paid_off(states, checkpoint_index), OFFSET_MAX_YEARS)
    if years_of_saving <= MIN_YEARS_SAVED:
        return []

    annual_saving = checkpoint.cash * rate_pct / 100.0
    total_saving = annual_saving * years_of_saving
    before_payoff = years_of_saving < OFFSET_MAX_YEARS
    timeframe = (
        f" over the next {years_of_saving:.1f} years until loan payoff"
        if before_payoff
        else " annually"
    )

    actions = [
        "Transfer excess cash to offset account",
        "Set up automatic sweep from transaction account to offset",
        "Review cash flow needs to maintain appropriate buffer",
    ]
    if before_payoff:
        actions.append(
            f"Note: Loan will be paid off in approximately {years_of_saving:.1f} years"
        )

    return [
        AdviceItem(
            id="offset-optimization-cash",
            category=AdviceCategory.DEBT,
            priority=AdvicePriority.HIGH,
            title="Optimize Offset Account Usage",
            description=(
                f"Move {format_currency(checkpoint.cash)} from cash to offset account to save "
                f"{format_currency(annual_saving)} annually in interest{timeframe}."
            ),
            specific_actions=actions,
            projected_impact=ProjectedImpact(cost_savings=total_saving),
            feasibility_score=95.0,
            effectiveness_score=clamp_score(total_saving / 1000.0 * 15.0, cap=90.0),
        )
    ]


def _max_active_rate(state: FinancialSnapshot, params: HouseholdParameters) -> float:
    """Highest interest rate among loans still active at ``state``."""
    if not params.loans:
        return params.loan_interest_rate
    active = [loan for loan in params.loans if state.balance_for_loan(loan.id) > 0]
    # Aggregate-only snapshots carry no per-loan balances; treat every loan as active.
    candidates = active or params.loans
    return max(loan.interest_rate for loan in candidates)


def _years_until_paid_off(states: Sequence[FinancialSnapshot], start_index: int) -> float:
    """Years from ``states[start_index]`` until no loan is active."""
    start_date = states[start_index].date
    for state in states[start_index:]:
        if not state.has_active_loans:
            return max(0.0, (state.date - start_date).days / _DAYS_PER_YEAR)
    return OFFSET_NEVER_PAID_OFF_YEARS
