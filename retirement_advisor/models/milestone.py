"""
Milestone model: a detected life event in a projection.

Milestones are produced by the external milestone detector and consumed here
as context only (they are not re-validated). The natural-key fields
(``loan_id``, ``transition_id``, ``expense_id``, ``person_id``) identify
"the same real-world event" across two independently computed scenarios;
see ``comparison.matcher.milestones_match``.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict

from retirement_advisor.taxonomy.advice_taxonomy import MilestoneType


class Milestone(BaseModel):
    """A dated financial milestone.

    Attributes:
        id: Detector-assigned identifier (not stable across scenarios).
        type: Milestone type.
        date: Date the milestone occurs.
        title: Short headline.
        description: Longer description.
        financial_impact: Money gained (positive) or spent (negative), if known.
        category: Detector grouping label (``debt``, ``retirement`` ...).
        loan_id: Loan natural key (loan payoff, offset completion).
        transition_id: Transition natural key (parameter transition).
        expense_id: Expense natural key (expense expiration).
        person_id: Person the milestone concerns, if any.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: MilestoneType
    date: date
    title: str
    description: str = ""
    financial_impact: Optional[float] = None
    category: str = ""
    loan_id: Optional[str] = None
    transition_id: Optional[str] = None
    expense_id: Optional[str] = None
    person_id: Optional[str] = None
