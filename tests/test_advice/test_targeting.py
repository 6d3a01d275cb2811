"""
Tests for retirement_advisor/advice/targeting.py.

What we test
------------
validate_person_advice():
  - Generated super / retirement-age items are valid.
  - Unknown item person, mismatched descriptor person, unknown sub-entity
    ids (income and super), missing ids and conflicting add person_id each produce an error.
apply_person_advice():
  - Updates only the targeted person; other Person objects are reused.
  - Input parameters are not modified.
  - Add assigns a deterministic id; remove drops the entity.
  - Person-level updates are re-validated; an out-of-range age raises.
  - Items without a descriptor, or targeting an unknown person, return the
    same parameters.
advice_target_name():
  - Person name, "Household", or a placeholder for unknown ids.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from retirement_advisor.advice.targeting import (
    advice_target_name,
    apply_person_advice,
    build_income_source_advice,
    build_retirement_age_advice,
    build_super_contribution_advice,
    validate_person_advice,
)
from retirement_advisor.models.advice import (
    PersonChanges,
    PersonSpecificChanges,
    SubEntityChange,
)
from retirement_advisor.taxonomy.advice_taxonomy import MutationAction


def _super_item(params, rate=12.0):
    alice = params.find_person("alice")
    return build_super_contribution_advice(alice, alice.super_accounts[0], rate, 20_000.0)


def _income_item(params, change):
    alice = params.find_person("alice")
    return build_income_source_advice(alice, change, "Add Consulting Income", "Take on consulting.", 10_000.0)


class TestValidation:
    def test_built_items_are_valid(self, couple_params):
        alice = couple_params.find_person("alice")
        for item in (
            _super_item(couple_params),
            build_retirement_age_advice(alice, 66, 100_000.0, "Because."),
        ):
            result = validate_person_advice(item, couple_params)
            assert result.is_valid, result.errors

    def test_unknown_person(self, couple_params, make_item):
        result = validate_person_advice(make_item(person_id="ghost"), couple_params)
        assert not result.is_valid
        assert result.errors == ["Person ID ghost not found in household"]

    def test_descriptor_person_mismatch(self, couple_params):
        item = _super_item(couple_params).model_copy(update={"person_id": "bob"})
        result = validate_person_advice(item, couple_params)
        assert any("changes target alice" in e for e in result.errors)

    def test_unknown_sub_entity(self, couple_params):
        change = SubEntityChange(action=MutationAction.UPDATE, id="nope", data={"amount": 1.0})
        result = validate_person_advice(_income_item(couple_params, change), couple_params)
        assert result.errors == ["Income source nope not found for person alice"]

    def test_unknown_super_account_removal(self, couple_params):
        change = SubEntityChange(action=MutationAction.REMOVE, id="s9")
        item = _super_item(couple_params).model_copy(
            update={
                "person_specific_changes": PersonSpecificChanges(
                    person_id="alice", changes=PersonChanges(super_accounts=[change])
                )
            }
        )
        result = validate_person_advice(item, couple_params)
        assert result.errors == ["Super account s9 not found for person alice"]

    def test_missing_id_for_remove(self, couple_params):
        change = SubEntityChange(action=MutationAction.REMOVE)
        result = validate_person_advice(_income_item(couple_params, change), couple_params)
        assert result.errors == ["Income source ID required for remove action"]

    def test_add_with_conflicting_person(self, couple_params):
        change = SubEntityChange(action=MutationAction.ADD, data={"person_id": "bob"})
        result = validate_person_advice(_income_item(couple_params, change), couple_params)
        assert not result.is_valid
        assert "mismatch" in result.errors[0]


class TestApply:
    def test_super_update_only_touches_target(self, couple_params):
        updated = apply_person_advice(couple_params, _super_item(couple_params, rate=13.0))
        assert updated.find_person("alice").super_accounts[0].contribution_rate == 13.0
        assert updated.find_person("bob") is couple_params.find_person("bob")
        assert couple_params.find_person("alice").super_accounts[0].contribution_rate == 11.0

    def test_retirement_age_update(self, couple_params):
        alice = couple_params.find_person("alice")
        item = build_retirement_age_advice(alice, 67, 150_000.0, "Because.")
        updated = apply_person_advice(couple_params, item)
        assert updated.find_person("alice").retirement_age == 67
        assert updated.find_person("alice").name == "Alice"

    def test_add_income_source(self, couple_params):
        change = SubEntityChange(
            action=MutationAction.ADD, data={"label": "Consulting", "amount": 5_000.0}
        )
        updated = apply_person_advice(couple_params, _income_item(couple_params, change))
        sources = updated.find_person("alice").income_sources
        assert [s.id for s in sources] == ["salary", "income-alice-2"]
        assert sources[-1].person_id == "alice"
        assert sources[-1].amount == 5_000.0

    def test_remove_income_source(self, couple_params):
        change = SubEntityChange(action=MutationAction.REMOVE, id="salary")
        updated = apply_person_advice(couple_params, _income_item(couple_params, change))
        assert updated.find_person("alice").income_sources == []

    def test_out_of_range_person_update_rejected(self, couple_params):
        alice = couple_params.find_person("alice")
        item = build_retirement_age_advice(alice, 150, 0.0, "Because.")
        with pytest.raises(ValidationError, match="age must be in"):
            apply_person_advice(couple_params, item)
        assert couple_params.find_person("alice").retirement_age == 65

    def test_no_descriptor_returns_same_params(self, couple_params, make_item):
        assert apply_person_advice(couple_params, make_item()) is couple_params

    def test_unknown_person_returns_same_params(self, couple_params):
        item = _super_item(couple_params).model_copy(
            update={
                "person_specific_changes": PersonSpecificChanges(
                    person_id="ghost", changes=PersonChanges()
                )
            }
        )
        assert apply_person_advice(couple_params, item) is couple_params


class TestTargetName:
    def test_names(self, couple_params, make_item):
        assert advice_target_name(make_item(), couple_params) == "Household"
        assert advice_target_name(make_item(person_id="bob"), couple_params) == "Bob"
        assert advice_target_name(make_item(person_id="zed"), couple_params) == "Person zed"
