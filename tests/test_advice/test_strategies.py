"""
Tests for retirement_advisor/advice/strategies/.

What we test
------------
debt:
  - 400k loan at 6 %, 3 000/month, 2 000 cash flow: the +250 option saves a
    positive number of years and interest with feasibility 85.
  - Options saving <= 0.5 years are not emitted (+100 here).
  - Per-loan path uses loan ids and labels; zero-payment loans are skipped.
  - No items without an active loan at the first snapshot.
offset:
  - Idle cash with an offset account yields one item; capped at 10 years.
  - A payoff date within the horizon adds a note action.
  - Too little cash yields nothing.
investment:
  - Four contribution tiers, priority high up to +100.
  - Allocation only when > 10 years out and return < 7 %.
expense:
  - Three tiers per non-zero category with fixed priority/feasibility.
income:
  - Three raise tiers; effectiveness = fraction × 200; none without salary.
  - Couples without annual_salary use the people's incomes.
person:
  - Only multi-person households.
  - Super increases honour the 15 % cap and the income-share rule.
  - Retirement delays never pass 70.
All strategies:
  - Empty series → []; identical inputs → identical output.
"""

from __future__ import annotations

from datetime import date

import pytest

from retirement_advisor.advice.strategies import STRATEGY_NAMES, default_strategies
from retirement_advisor.advice.strategies.debt import analyze_debt, analyze_offset
from retirement_advisor.advice.strategies.expense import analyze_expenses
from retirement_advisor.advice.strategies.income import analyze_income, household_salary
from retirement_advisor.advice.strategies.investment import (
    allocation_advice,
    analyze_investments,
)
from retirement_advisor.advice.strategies.person import (
    analyze_person_specific,
    retirement_age_advice,
    super_contribution_advice,
)
from retirement_advisor.models.household import HouseholdParameters, Loan, SuperAccount
from retirement_advisor.taxonomy.advice_taxonomy import AdviceCategory, AdvicePriority


def _by_id(items):
    return {item.id: item for item in items}


# ── Registry ──────────────────────────────────────────────────────────────────

class TestRegistry:
    def test_default_strategies_cover_every_name(self):
        assert tuple(default_strategies()) == STRATEGY_NAMES

    @pytest.mark.parametrize("name", STRATEGY_NAMES)
    def test_empty_series_yields_nothing(self, name, couple_params):
        assert default_strategies()[name]([], couple_params) == []

    @pytest.mark.parametrize("name", STRATEGY_NAMES)
    def test_deterministic(self, name, make_series, couple_params):
        states = make_series(24, loan_balance=300_000.0)
        strategy = default_strategies()[name]
        assert strategy(states, couple_params) == strategy(states, couple_params)


# ── Debt ──────────────────────────────────────────────────────────────────────

class TestDebt:
    def test_reference_loan_plus_250(self, loan_projection, loan_params):
        items = _by_id(analyze_debt(loan_projection.states, loan_params))
        item = items["debt-acceleration-legacy-250"]
        assert item.category == AdviceCategory.DEBT
        assert item.priority == AdvicePriority.HIGH
        assert item.projected_impact.timeline_savings_years > 0.5
        assert item.projected_impact.cost_savings > 0
        assert item.feasibility_score == 85.0
        assert item.title == "Accelerate Loan Payments (+$250.00/month)"

    def test_small_saving_not_emitted(self, loan_projection, loan_params):
        ids = _by_id(analyze_debt(loan_projection.states, loan_params))
        assert "debt-acceleration-legacy-100" not in ids
        assert {"debt-acceleration-legacy-500", "debt-acceleration-legacy-1000"} <= set(ids)

    def test_priority_and_feasibility_by_extra(self, loan_projection, loan_params):
        items = _by_id(analyze_debt(loan_projection.states, loan_params))
        assert items["debt-acceleration-legacy-500"].priority == AdvicePriority.MEDIUM
        assert items["debt-acceleration-legacy-500"].feasibility_score == 70.0
        assert items["debt-acceleration-legacy-1000"].feasibility_score == 50.0

    def test_effectiveness_formula(self, loan_projection, loan_params):
        for item in analyze_debt(loan_projection.states, loan_params):
            years = item.projected_impact.timeline_savings_years
            assert item.effectiveness_score == pytest.approx(min(95.0, years / 5 * 100))

    def test_no_active_loan(self, make_series, loan_params):
        assert analyze_debt(make_series(24), loan_params) == []

    def test_per_loan_path(self, make_series):
        params = HouseholdParameters(
            loans=[
                Loan(id="home", label="Home Loan", principal=400_000.0, interest_rate=6.0,
                     payment_amount=3_000.0),
                Loan(id="car", label="Car Loan", principal=10_000.0, interest_rate=8.0,
                     payment_amount=0.0),
            ],
        )
        states = [
            s.model_copy(update={"loan_balances": {"home": 400_000.0, "car": 10_000.0}})
            for s in make_series(24, loan_balance=410_000.0)
        ]
        items = _by_id(analyze_debt(states, params))
        assert items["debt-acceleration-home-250"].title == (
            "Accelerate Home Loan Payments (+$250.00/month)"
        )
        assert not any(item_id.startswith("debt-acceleration-car") for item_id in items)


# ── Offset ────────────────────────────────────────────────────────────────────

class TestOffset:
    def test_long_lived_loan_caps_at_ten_years(self, make_series, loan_params):
        params = loan_params.model_copy(update={"use_offset_account": True})
        states = make_series(24, cash=20_000.0, loan_balance=400_000.0)
        [item] = analyze_offset(states, params)
        assert item.id == "offset-optimization-cash"
        assert item.feasibility_score == 95.0
        assert item.projected_impact.cost_savings == pytest.approx(20_000 * 0.06 * 10)
        assert item.effectiveness_score == 90.0
        assert not any(a.startswith("Note:") for a in item.specific_actions)

    def test_payoff_within_horizon_adds_note(self, make_series, loan_params):
        params = loan_params.model_copy(update={"use_offset_account": True})
        states = make_series(48, cash=20_000.0, loan_balance=15_000.0, loan_step=500.0)
        [item] = analyze_offset(states, params)
        years = (date(2027, 7, 1) - date(2026, 1, 1)).days / 365.25
        assert item.projected_impact.cost_savings == pytest.approx(20_000 * 0.06 * years)
        assert item.specific_actions[-1].startswith("Note: Loan will be paid off")

    def test_little_cash_no_item(self, make_series, loan_params):
        params = loan_params.model_copy(update={"use_offset_account": True})
        assert analyze_offset(make_series(24, cash=500.0, loan_balance=400_000.0), params) == []

    def test_requires_offset_account(self, make_series, loan_params):
        assert analyze_offset(make_series(24, cash=20_000.0, loan_balance=400_000.0), loan_params) == []


# ── Investment ────────────────────────────────────────────────────────────────

class TestInvestment:
    def test_contribution_tiers(self, make_series, loan_params):
        items = _by_id(analyze_investments(make_series(24), loan_params))
        assert set(items) == {
            "investment-increase-50",
            "investment-increase-100",
            "investment-increase-200",
            "investment-increase-500",
        }
        assert items["investment-increase-100"].priority == AdvicePriority.HIGH
        assert items["investment-increase-200"].priority == AdvicePriority.MEDIUM

    def test_contribution_value_uses_ten_year_horizon(self, make_series, loan_params):
        items = _by_id(analyze_investments(make_series(24), loan_params))
        expected = 6_000 * (1.07 ** 10 - 1) / 0.07
        item = items["investment-increase-500"]
        assert item.projected_impact.additional_assets == pytest.approx(expected)
        assert item.effectiveness_score == pytest.approx(min(95.0, expected / 10_000 * 10))

    def test_allocation_when_far_from_retirement_and_low_return(self):
        params = HouseholdParameters(
            current_age=30, retirement_age=65, investment_return_rate=5.0,
            monthly_investment_contribution=500.0, current_investment_balance=50_000.0,
        )
        [item] = allocation_advice(params)
        assert item.id == "allocation-optimization-aggressive"
        assert item.effectiveness_score == pytest.approx(75.0)
        assert item.projected_impact.additional_assets > 0

    @pytest.mark.parametrize(
        "current_age, rate", [(55, 5.0), (30, 7.0), (30, 9.0)],
    )
    def test_no_allocation_otherwise(self, current_age, rate):
        params = HouseholdParameters(
            current_age=current_age, retirement_age=65, investment_return_rate=rate
        )
        assert allocation_advice(params) == []


# ── Expense ───────────────────────────────────────────────────────────────────

class TestExpense:
    def test_tiers_per_category(self, make_series):
        params = HouseholdParameters(monthly_living_expenses=4_000.0, monthly_rent_or_mortgage=2_000.0)
        items = _by_id(analyze_expenses(make_series(12), params))
        assert len(items) == 6
        living = [items[f"expense-reduction-living-expenses-{n}"] for n in (5, 10, 15)]
        assert [i.title for i in living] == [
            "Reduce Living Expenses by 5%",
            "Reduce Living Expenses by 10%",
            "Reduce Living Expenses by 15%",
        ]
        assert [i.priority for i in living] == [
            AdvicePriority.HIGH, AdvicePriority.MEDIUM, AdvicePriority.LOW,
        ]
        assert [i.feasibility_score for i in living] == [90.0, 70.0, 50.0]
        assert items["expense-reduction-housing-costs-15"].title == "Reduce Housing Costs by 10%"

    def test_annual_saving(self, make_series):
        params = HouseholdParameters(monthly_living_expenses=4_000.0)
        items = _by_id(analyze_expenses(make_series(12), params))
        assert items["expense-reduction-living-expenses-5"].projected_impact.cost_savings == (
            pytest.approx(2_400.0)
        )

    def test_zero_expenses_no_items(self, make_series):
        assert analyze_expenses(make_series(12), HouseholdParameters()) == []


# ── Income ────────────────────────────────────────────────────────────────────

class TestIncome:
    def test_raise_tiers(self, make_series):
        params = HouseholdParameters(annual_salary=100_000.0, income_tax_rate=30.0)
        items = analyze_income(make_series(12), params)
        assert [i.title for i in items] == [
            "Pursue 5% raise", "Pursue 10% raise", "Pursue 20% raise (promotion)",
        ]
        assert [i.effectiveness_score for i in items] == pytest.approx([10.0, 20.0, 40.0])
        assert [i.feasibility_score for i in items] == [80.0, 65.0, 50.0]

    def test_no_salary_no_items(self, make_series):
        assert analyze_income(make_series(12), HouseholdParameters()) == []

    def test_couple_salary_falls_back_to_people(self, couple_params):
        assert household_salary(couple_params) == pytest.approx(180_000.0)


# ── Person ────────────────────────────────────────────────────────────────────

class TestPerson:
    def test_single_household_yields_nothing(self, make_series, loan_params):
        assert analyze_person_specific(make_series(12), loan_params) == []

    def test_couple_items_target_people(self, make_series, couple_params):
        items = analyze_person_specific(make_series(12), couple_params)
        assert items
        assert {i.person_id for i in items} == {"alice", "bob"}
        assert all(i.person_specific_changes.person_id == i.person_id for i in items)

    def test_super_rates(self, couple_params):
        alice = couple_params.find_person("alice")
        ids = [i.id for i in super_contribution_advice(alice)]
        assert ids == [
            "super-increase-alice-s1-12",
            "super-increase-alice-s1-13",
            "super-increase-alice-s1-14",
        ]

    def test_super_rate_capped_at_fifteen(self, couple_params):
        alice = couple_params.find_person("alice")
        capped = alice.model_copy(
            update={"super_accounts": [SuperAccount(id="s1", contribution_rate=14.0)]}
        )
        ids = [i.id for i in super_contribution_advice(capped)]
        assert ids == ["super-increase-alice-s1-15"]

    def test_super_skipped_without_income(self, couple_params):
        alice = couple_params.find_person("alice").model_copy(update={"income_sources": []})
        assert super_contribution_advice(alice) == []

    def test_retirement_delay_never_past_seventy(self, couple_params):
        bob = couple_params.find_person("bob").model_copy(update={"retirement_age": 69})
        items = retirement_age_advice(bob)
        assert [i.id for i in items] == ["retirement-age-bob-70"]
        assert items[0].title == "Delay Bob's Retirement by 1 Year"
        assert items[0].person_specific_changes.changes.person_updates.retirement_age == 70
