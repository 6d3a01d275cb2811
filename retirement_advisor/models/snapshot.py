"""
Projection output models, the data contract with the projection engine.

``FinancialSnapshot`` is one period's complete financial state.
``ProjectionResult`` is the chronological series plus the engine's verdicts
(retirement date/age, sustainability).

Both models are frozen. Values are taken as computed upstream; the advice
engine never re-simulates. Non-finite numbers are allowed to *arrive* here
and are intercepted by ``advice.scoring.ensure_finite`` before they can
taint a score.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class FinancialSnapshot(BaseModel):
    """Financial state at one point in the projection.

    Attributes:
        date: Snapshot date.
        cash: Available cash balance.
        investments: Total investment balance.
        superannuation: Total super balance across accounts.
        loan_balance: Aggregate outstanding loan balance.
        offset_balance: Aggregate offset balance.
        net_worth: Assets minus liabilities.
        cash_flow: Net cash flow for this period (income − expenses).
        loan_balances: Per-loan balances keyed by loan id (optional).
        offset_balances: Per-loan offset balances keyed by loan id (optional).
        super_balances: Per-account super balances (optional).
        investment_balances: Per-holding investment balances (optional).
    """

    model_config = ConfigDict(frozen=True)

    date: date
    cash: float = 0.0
    investments: float = 0.0
    superannuation: float = 0.0
    loan_balance: float = 0.0
    offset_balance: float = 0.0
    net_worth: float = 0.0
    cash_flow: float = 0.0
    loan_balances: Optional[dict[str, float]] = None
    offset_balances: Optional[dict[str, float]] = None
    super_balances: Optional[dict[str, float]] = None
    investment_balances: Optional[dict[str, float]] = None

    @property
    def has_active_loans(self) -> bool:
        if self.loan_balance > 0:
            return True
        if self.loan_balances:
            return any(balance > 0 for balance in self.loan_balances.values())
        return False

    def balance_for_loan(self, loan_id: str) -> float:
        if not self.loan_balances:
            return 0.0
        return self.loan_balances.get(loan_id, 0.0)


class ProjectionResult(BaseModel):
    """Output of one projection run.

    Attributes:
        states: Chronological snapshots.
        retirement_date: Date retirement becomes affordable, or ``None``.
        retirement_age: Age at that date, or ``None``.
        is_sustainable: Whether the trajectory is sustainable overall.
        warnings: Free-text warnings from the projection engine.
    """

    model_config = ConfigDict(frozen=True)

    states: list[FinancialSnapshot] = []
    retirement_date: Optional[date] = None
    retirement_age: Optional[float] = None
    is_sustainable: bool = True
    warnings: list[str] = []

    @property
    def final_state(self) -> Optional[FinancialSnapshot]:
        return self.states[-1] if self.states else None
