"""
Closed vocabularies for advice generation and scenario comparison.

Four groups of enums describe everything the engine labels:
  - ``AdviceCategory`` / ``AdvicePriority`` — the *what* and *how urgent*
    of a single recommendation.
  - ``RetirementAssessment`` — the household-level verdict.
  - ``MutationAction`` / ``PaymentFrequency`` / ``HouseholdMode`` — shapes
    used by the household parameter set and mutation descriptors.
  - ``MilestoneType`` / ``TimingEffect`` — life-event labels consumed from
    the milestone detector and the comparison summaries built on them.

Usage example::

    from retirement_advisor.taxonomy.advice_taxonomy import AdviceCategory

    if item.category == AdviceCategory.DEBT:
        ...

This module has NO imports from any other ``retirement_advisor`` package.
"""

from enum import StrEnum


class AdviceCategory(StrEnum):
    """Area of household finances a recommendation acts on."""

    DEBT = "debt"
    """Loan acceleration and offset-account usage."""

    INVESTMENT = "investment"
    """Contribution increases, allocation changes, super contributions."""

    EXPENSE = "expense"
    """Spending reductions whose savings are invested."""

    INCOME = "income"
    """Raises, promotions, retirement-age changes."""


class AdvicePriority(StrEnum):
    """Implementation urgency of a recommendation."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RetirementAssessment(StrEnum):
    """Overall verdict on the projected retirement trajectory."""

    ON_TRACK = "on_track"
    """Retirement reachable within two years of the target age."""

    NEEDS_IMPROVEMENT = "needs_improvement"
    """Reachable, but late; or no strong signal either way."""

    CRITICAL = "critical"
    """Unsustainable trajectory or a collapsing net worth."""


# Best-to-worst order used when describing an assessment change.
ASSESSMENT_ORDER: tuple[RetirementAssessment, ...] = (
    RetirementAssessment.ON_TRACK,
    RetirementAssessment.NEEDS_IMPROVEMENT,
    RetirementAssessment.CRITICAL,
)


class MutationAction(StrEnum):
    """Operation applied to a person's income source or super account."""

    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"


class PaymentFrequency(StrEnum):
    """How often an amount is paid or received."""

    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def periods_per_year(self) -> int:
        return _PERIODS_PER_YEAR[self.value]


_PERIODS_PER_YEAR: dict[str, int] = {
    "weekly":      52,
    "fortnightly": 26,
    "monthly":     12,
    "yearly":      1,
}


class HouseholdMode(StrEnum):
    """Single earner or multi-person household."""

    SINGLE = "single"
    COUPLE = "couple"


class MilestoneType(StrEnum):
    """Life-event types produced by the milestone detector."""

    LOAN_PAYOFF = "loan_payoff"
    """A loan balance reaches zero. Natural key: loan id."""

    OFFSET_COMPLETION = "offset_completion"
    """Offset balance covers the loan. Natural key: loan id."""

    RETIREMENT_ELIGIBILITY = "retirement_eligibility"
    """Retirement becomes affordable. At most one per scenario."""

    PARAMETER_TRANSITION = "parameter_transition"
    """A planned parameter change takes effect. Natural key: transition id."""

    EXPENSE_EXPIRATION = "expense_expiration"
    """An expense with an end date stops. Not matched across scenarios."""


class TimingEffect(StrEnum):
    """Qualitative effect of scenario A on a milestone type's timing."""

    ACCELERATES = "accelerates"
    DELAYS = "delays"
    MIXED = "mixed"
    NO_CHANGE = "no_change"
