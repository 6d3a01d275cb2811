"""
Tests for retirement_advisor/comparison/matcher.py.

What we test
------------
milestones_match():
  - Loan milestones match on loan_id, transitions on transition_id.
  - Retirement eligibility always matches; expense expiration never does.
  - Different types never match; the relation is symmetric.
PhraseRule:
  - Requires at least one term; all_of / any_of semantics.
KeyPhraseMatcher:
  - Same category + shared phrase matches; different category never does.
  - Generated title families match across tiers.
  - Symmetric over a grid of titles.
"""

from __future__ import annotations

from datetime import date
from itertools import product

import pytest

from retirement_advisor.comparison.matcher import (
    KeyPhraseMatcher,
    PhraseRule,
    milestones_match,
)
from retirement_advisor.models.milestone import Milestone
from retirement_advisor.taxonomy.advice_taxonomy import AdviceCategory, MilestoneType


def _milestone(type_: MilestoneType, **keys) -> Milestone:
    return Milestone(id=f"m-{type_}", type=type_, date=date(2030, 1, 1), title="m", **keys)


class TestMilestonesMatch:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            (dict(loan_id="home"), dict(loan_id="home"), True),
            (dict(loan_id="home"), dict(loan_id="car"), False),
            (dict(), dict(), False),
        ],
    )
    def test_loan_payoff(self, a, b, expected):
        ma = _milestone(MilestoneType.LOAN_PAYOFF, **a)
        mb = _milestone(MilestoneType.LOAN_PAYOFF, **b)
        assert milestones_match(ma, mb) is expected

    def test_offset_completion_uses_loan_id(self):
        a = _milestone(MilestoneType.OFFSET_COMPLETION, loan_id="home")
        b = _milestone(MilestoneType.OFFSET_COMPLETION, loan_id="home")
        assert milestones_match(a, b)

    def test_transition(self):
        a = _milestone(MilestoneType.PARAMETER_TRANSITION, transition_id="t1")
        b = _milestone(MilestoneType.PARAMETER_TRANSITION, transition_id="t1")
        c = _milestone(MilestoneType.PARAMETER_TRANSITION, transition_id="t2")
        assert milestones_match(a, b)
        assert not milestones_match(a, c)

    def test_retirement_always_matches(self):
        a = _milestone(MilestoneType.RETIREMENT_ELIGIBILITY)
        b = _milestone(MilestoneType.RETIREMENT_ELIGIBILITY, person_id="x")
        assert milestones_match(a, b)

    def test_expense_expiration_never_matches(self):
        a = _milestone(MilestoneType.EXPENSE_EXPIRATION, expense_id="e1")
        assert not milestones_match(a, a)

    def test_symmetric_across_types(self):
        samples = [
            _milestone(MilestoneType.LOAN_PAYOFF, loan_id="home"),
            _milestone(MilestoneType.OFFSET_COMPLETION, loan_id="home"),
            _milestone(MilestoneType.PARAMETER_TRANSITION, transition_id="t1"),
            _milestone(MilestoneType.RETIREMENT_ELIGIBILITY),
            _milestone(MilestoneType.EXPENSE_EXPIRATION, expense_id="e1"),
        ]
        for a, b in product(samples, repeat=2):
            assert milestones_match(a, b) == milestones_match(b, a)


class TestPhraseRule:
    def test_requires_a_term(self):
        with pytest.raises(ValueError, match="needs at least one term"):
            PhraseRule("empty")

    def test_all_of_and_any_of(self):
        rule = PhraseRule("reduce_expense", all_of=("reduce",), any_of=("expense", "cost"))
        assert rule.applies_to("Reduce Housing Costs by 5%")
        assert rule.applies_to("REDUCE living EXPENSES")
        assert not rule.applies_to("Reduce risk")
        assert not rule.applies_to("Housing costs")


class TestKeyPhraseMatcher:
    TITLES = [
        ("Accelerate Loan Payments (+$250.00/month)", AdviceCategory.DEBT),
        ("Accelerate Home Loan Payments (+$1,000.00/month)", AdviceCategory.DEBT),
        ("Optimize Offset Account Usage", AdviceCategory.DEBT),
        ("Increase Investment Contributions (+$50.00/month)", AdviceCategory.INVESTMENT),
        ("Increase Alice's Super Contribution to 12%", AdviceCategory.INVESTMENT),
        ("Optimize Investment Allocation for Growth", AdviceCategory.INVESTMENT),
        ("Reduce Living Expenses by 5%", AdviceCategory.EXPENSE),
        ("Reduce Housing Costs by 10%", AdviceCategory.EXPENSE),
        ("Pursue 5% raise", AdviceCategory.INCOME),
        ("Delay Bob's Retirement by 2 Years", AdviceCategory.INCOME),
    ]

    def _items(self, make_item):
        return [
            make_item(f"i{n}", title=title, category=category)
            for n, (title, category) in enumerate(self.TITLES)
        ]

    @pytest.mark.parametrize(
        "title_a, title_b, category",
        [
            ("Accelerate Loan Payments (+$250.00/month)",
             "Accelerate Loan Payments (+$500.00/month)", AdviceCategory.DEBT),
            ("Reduce Housing Costs by 5%", "Reduce Housing Costs by 10%", AdviceCategory.EXPENSE),
            ("Pursue 5% raise", "Pursue 20% raise (promotion)", AdviceCategory.INCOME),
            ("Delay Bob's Retirement by 1 Year", "Delay Bob's Retirement by 3 Years",
             AdviceCategory.INCOME),
        ],
    )
    def test_tier_families_match(self, make_item, title_a, title_b, category):
        matcher = KeyPhraseMatcher()
        a = make_item("a", title=title_a, category=category)
        b = make_item("b", title=title_b, category=category)
        assert matcher.matches(a, b)

    def test_different_category_never_matches(self, make_item):
        matcher = KeyPhraseMatcher()
        a = make_item("a", title="Pursue 5% raise", category=AdviceCategory.INCOME)
        b = make_item("b", title="Pursue 5% raise", category=AdviceCategory.EXPENSE)
        assert not matcher.matches(a, b)

    def test_unrelated_titles_in_same_category(self, make_item):
        matcher = KeyPhraseMatcher()
        a = make_item("a", title="Optimize Offset Account Usage")
        b = make_item("b", title="Accelerate Loan Payments (+$250.00/month)")
        assert not matcher.matches(a, b)

    def test_symmetric(self, make_item):
        matcher = KeyPhraseMatcher()
        items = self._items(make_item)
        for a, b in product(items, repeat=2):
            assert matcher.matches(a, b) == matcher.matches(b, a)

    def test_custom_rules(self, make_item):
        matcher = KeyPhraseMatcher(rules=[PhraseRule("offset", all_of=("offset",))])
        assert matcher.key_phrases(make_item(title="Optimize Offset Account Usage")) == {"offset"}
        assert matcher.key_phrases(make_item(title="Pursue 5% raise")) == frozenset()
