"""
Cross-scenario entity matching.

Two projections are computed independently, so generated ids cannot be used
to pair "the same" milestone or recommendation. Milestones are paired by
type and natural key; recommendations by category and shared key phrases.

Milestone natural keys
----------------------
    loan_payoff, offset_completion  → loan_id
    parameter_transition            → transition_id
    retirement_eligibility          → always matches (one per scenario)
    expense_expiration              → never matches

Advice key phrases
------------------
A ``PhraseRule`` fires when the lower-cased title contains every ``all_of``
term and at least one ``any_of`` term (when given). Two items match when they
share a category and at least one fired phrase. The matcher is a Protocol so
callers can swap in a different policy (e.g. id-based).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from retirement_advisor.models.advice import AdviceItem
from retirement_advisor.models.milestone import Milestone
from retirement_advisor.taxonomy.advice_taxonomy import MilestoneType

# ── Milestones ────────────────────────────────────────────────────────────────


def milestones_match(a: Milestone, b: Milestone) -> bool:
    """Whether ``a`` and ``b`` describe the same real-world event. Symmetric."""
    if a.type != b.type:
        return False
    if a.type in (MilestoneType.LOAN_PAYOFF, MilestoneType.OFFSET_COMPLETION):
        return a.loan_id is not None and a.loan_id == b.loan_id
    if a.type == MilestoneType.PARAMETER_TRANSITION:
        return a.transition_id is not None and a.transition_id == b.transition_id
    if a.type == MilestoneType.RETIREMENT_ELIGIBILITY:
        return True
    return False


# ── Advice ────────────────────────────────────────────────────────────────────


class AdviceMatcher(Protocol):
    def matches(self, a: AdviceItem, b: AdviceItem) -> bool: ...


@dataclass(frozen=True)
class PhraseRule:
    """One key phrase and the title terms that trigger it.

    Attributes:
        phrase:  Key phrase emitted when the rule fires.
        all_of:  Terms that must all appear in the title.
        any_of:  Terms of which at least one must appear (ignored if empty).
    """

    phrase: str
    all_of: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.all_of and not self.any_of:
            raise ValueError(f"PhraseRule '{self.phrase}' needs at least one term.")

    def applies_to(self, title: str) -> bool:
        text = title.lower()
        if not all(term in text for term in self.all_of):
            return False
        return not self.any_of or any(term in text for term in self.any_of)


DEFAULT_PHRASE_RULES: tuple[PhraseRule, ...] = (
    PhraseRule("increase_payment",        all_of=("increase", "payment")),
    PhraseRule("accelerate_payment",      all_of=("accelerate", "payment")),
    PhraseRule("reduce_expense",          all_of=("reduce",), any_of=("expense", "cost")),
    PhraseRule("investment_contribution", all_of=("investment", "contribution")),
    PhraseRule("super_contribution",      all_of=("super", "contribution")),
    PhraseRule("offset_optimization",     all_of=("offset",)),
    PhraseRule("allocation_optimization", all_of=("allocation",)),
    PhraseRule("income_increase",         any_of=("raise", "income")),
    PhraseRule("retirement_age",          all_of=("retirement",), any_of=("delay", "advance")),
)


class KeyPhraseMatcher:
    """Matches recommendations by category plus a shared key phrase.

    Args:
        rules: Phrase vocabulary; ``DEFAULT_PHRASE_RULES`` when omitted.
    """

    def __init__(self, rules: Optional[Sequence[PhraseRule]] = None) -> None:
        self.rules: tuple[PhraseRule, ...] = tuple(rules or DEFAULT_PHRASE_RULES)

    def key_phrases(self, item: AdviceItem) -> frozenset[str]:
        return frozenset(rule.phrase for rule in self.rules if rule.applies_to(item.title))

    def matches(self, a: AdviceItem, b: AdviceItem) -> bool:
        if a.category != b.category:
            return False
        return bool(self.key_phrases(a) & self.key_phrases(b))
