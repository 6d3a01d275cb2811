"""
Shared pytest fixtures for the Retirement Advisor test suite.

Provides:
  - ``make_series``: factory for monthly ``FinancialSnapshot`` series.
  - ``loan_params`` / ``loan_projection``: a single-earner household with a
    400k legacy loan at 6 % paying 3 000 a month, 2 000 monthly cash flow.
  - ``couple_params``: a two-person household with incomes and super.
  - ``make_item``: factory for ``AdviceItem`` with sensible defaults.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

import pytest

from retirement_advisor.models.advice import AdviceItem, ProjectedImpact
from retirement_advisor.models.household import (
    HouseholdParameters,
    IncomeSource,
    Person,
    SuperAccount,
)
from retirement_advisor.models.snapshot import FinancialSnapshot, ProjectionResult
from retirement_advisor.taxonomy.advice_taxonomy import (
    AdviceCategory,
    AdvicePriority,
    HouseholdMode,
    PaymentFrequency,
)


def _month(start: date, offset: int) -> date:
    index = start.month - 1 + offset
    return date(start.year + index // 12, index % 12 + 1, 1)


# ── Snapshot series ───────────────────────────────────────────────────────────

@pytest.fixture
def make_series() -> Callable[..., list[FinancialSnapshot]]:
    """Return a factory building ``n`` monthly snapshots with linear trends."""

    def _make(
        n: int = 24,
        *,
        start: date = date(2025, 1, 1),
        cash: float = 5_000.0,
        cash_flow: float = 2_000.0,
        loan_balance: float = 0.0,
        loan_step: float = 1_000.0,
        net_worth: float = 50_000.0,
        net_worth_step: float = 2_000.0,
        investments: float = 20_000.0,
        superannuation: float = 60_000.0,
    ) -> list[FinancialSnapshot]:
        return [
            FinancialSnapshot(
                date=_month(start, i),
                cash=cash,
                cash_flow=cash_flow,
                loan_balance=max(0.0, loan_balance - loan_step * i) if loan_balance else 0.0,
                net_worth=net_worth + net_worth_step * i,
                investments=investments,
                superannuation=superannuation,
            )
            for i in range(n)
        ]

    return _make


# ── Households ────────────────────────────────────────────────────────────────

@pytest.fixture
def loan_params() -> HouseholdParameters:
    """Single earner with a 400k legacy loan at 6 %, 3 000/month payments."""
    return HouseholdParameters(
        loan_principal=400_000.0,
        loan_interest_rate=6.0,
        loan_payment_amount=3_000.0,
        loan_payment_frequency=PaymentFrequency.MONTHLY,
        investment_return_rate=7.0,
        current_age=35,
        retirement_age=65,
        desired_annual_retirement_income=60_000.0,
    )


@pytest.fixture
def loan_projection(make_series) -> ProjectionResult:
    """Two years of snapshots with an active 400k loan and 2 000 cash flow."""
    return ProjectionResult(
        states=make_series(24, loan_balance=400_000.0),
        retirement_date=date(2055, 1, 1),
        retirement_age=66.0,
        is_sustainable=True,
    )


@pytest.fixture
def couple_params() -> HouseholdParameters:
    """Alice (100k) and Bob (80k), each with one super account at 11 %."""
    alice = Person(
        id="alice",
        name="Alice",
        current_age=40,
        retirement_age=65,
        income_sources=[
            IncomeSource(id="salary", label="Salary", amount=100_000.0, person_id="alice"),
        ],
        super_accounts=[
            SuperAccount(id="s1", balance=100_000.0, contribution_rate=11.0,
                         return_rate=7.0, person_id="alice"),
        ],
    )
    bob = Person(
        id="bob",
        name="Bob",
        current_age=42,
        retirement_age=67,
        income_sources=[
            IncomeSource(id="salary", label="Salary", amount=80_000.0, person_id="bob"),
        ],
        super_accounts=[
            SuperAccount(id="s2", balance=80_000.0, contribution_rate=11.0,
                         return_rate=7.0, person_id="bob"),
        ],
    )
    return HouseholdParameters(
        household_mode=HouseholdMode.COUPLE,
        people=[alice, bob],
        current_age=40,
        retirement_age=65,
        investment_return_rate=7.0,
    )


# ── Advice items ──────────────────────────────────────────────────────────────

@pytest.fixture
def make_item() -> Callable[..., AdviceItem]:
    """Return a factory for ``AdviceItem`` with overridable fields."""

    def _make(
        id: str = "item-1",
        *,
        category: AdviceCategory = AdviceCategory.DEBT,
        priority: AdvicePriority = AdvicePriority.MEDIUM,
        title: str = "Accelerate Loan Payments (+$250.00/month)",
        feasibility: float = 70.0,
        effectiveness: float = 50.0,
        impact: ProjectedImpact | None = None,
        **extra,
    ) -> AdviceItem:
        return AdviceItem(
            id=id,
            category=category,
            priority=priority,
            title=title,
            description="Test recommendation.",
            feasibility_score=feasibility,
            effectiveness_score=effectiveness,
            projected_impact=impact or ProjectedImpact(),
            **extra,
        )

    return _make
