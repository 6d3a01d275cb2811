"""
Category strategies: pure candidate generators.

Every strategy has the signature::

    (states: Sequence[FinancialSnapshot], params: HouseholdParameters)
        -> list[AdviceItem]

and is deterministic: identical inputs always produce an identical list,
which is what makes the per-strategy cache in ``advice.cache`` sound.
An empty snapshot series always yields ``[]``.

Modules
-------
debt       : loan acceleration + offset-account usage.
investment : contribution increases + allocation change.
expense    : spending reduction tiers.
income     : raise tiers.
person     : per-person super contribution and retirement-age changes
             (multi-person households only).
"""

from __future__ import annotations

from typing import Callable, Sequence

from retirement_advisor.models.advice import AdviceItem
from retirement_advisor.models.household import HouseholdParameters
from retirement_advisor.models.snapshot import FinancialSnapshot

Strategy = Callable[[Sequence[FinancialSnapshot], HouseholdParameters], list[AdviceItem]]

STRATEGY_NAMES: tuple[str, ...] = ("debt", "investment", "expense", "income", "person")


def default_strategies() -> dict[str, Strategy]:
    """Return the built-in strategies keyed by name, in generation order."""
    from retirement_advisor.advice.strategies.debt import analyze_debt
    from retirement_advisor.advice.strategies.expense import analyze_expenses
    from retirement_advisor.advice.strategies.income import analyze_income
    from retirement_advisor.advice.strategies.investment import analyze_investments
    from retirement_advisor.advice.strategies.person import analyze_person_specific

    return {
        "debt":       analyze_debt,
        "investment": analyze_investments,
        "expense":    analyze_expenses,
        "income":     analyze_income,
        "person":     analyze_person_specific,
    }
