"""
Person-targeted recommendations for multi-person households.

A person-targeted ``AdviceItem`` carries a ``PersonSpecificChanges`` mutation
descriptor: scalar updates for one person plus add / update / remove actions
on that person's income sources and super accounts.

Three concerns live here:

  - **Builders** — ``build_super_contribution_advice()``,
    ``build_retirement_age_advice()``, ``build_income_source_advice()``
    create items whose descriptor targets exactly one person.
  - **Validation** — ``validate_person_advice()`` checks that every id in the
    descriptor resolves against the household. It never raises; problems
    come back as a list of messages.
  - **Application** — ``apply_person_advice()`` returns a *new*
    ``HouseholdParameters`` with the descriptor applied. Only the targeted
    person is rebuilt; every other ``Person`` object is carried over as-is.

Applying an item that failed validation is best-effort: unknown sub-entity
ids are skipped. Field values are re-validated by the pydantic models, so an
out-of-range value (e.g. a contribution rate above 100) raises
``pydantic.ValidationError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from pydantic import BaseModel

from retirement_advisor.advice.scoring import clamp_score
from retirement_advisor.models.advice import (
    AdviceItem,
    PersonChanges,
    PersonSpecificChanges,
    PersonUpdates,
    ProjectedImpact,
    SubEntityChange,
)
from retirement_advisor.models.household import (
    HouseholdParameters,
    IncomeSource,
    Person,
    SuperAccount,
)
from retirement_advisor.taxonomy.advice_taxonomy import (
    AdviceCategory,
    AdvicePriority,
    MutationAction,
)
from retirement_advisor.utils.currency import format_amount

logger = logging.getLogger(__name__)

_EntityT = TypeVar("_EntityT", IncomeSource, SuperAccount)


# ── Builders ──────────────────────────────────────────────────────────────────


def build_super_contribution_advice(
    person: Person,
    account: SuperAccount,
    suggested_rate: float,
    projected_benefit: float,
) -> AdviceItem:
    """Recommend raising one super account's contribution rate.

    Args:
        person:            Targeted household member.
        account:           The account whose rate changes.
        suggested_rate:    New contribution rate (percentage).
        projected_benefit: Extra balance after 10 years.
    """
    increase = suggested_rate - account.contribution_rate
    return AdviceItem(
        id=f"super-increase-{person.id}-{account.id}-{suggested_rate:g}",
        category=AdviceCategory.INVESTMENT,
        priority=AdvicePriority.HIGH if increase <= 2 else AdvicePriority.MEDIUM,
        title=f"Increase {person.name}'s Super Contribution to {suggested_rate:g}%",
        description=(
            f"Boost {person.name}'s superannuation contribution from "
            f"{account.contribution_rate:g}% to {suggested_rate:g}% to accelerate retirement "
            f"savings by an estimated {format_amount(projected_benefit)}."
        ),
        specific_actions=[
            f"Contact payroll to increase {person.name}'s super contribution rate",
            "Update salary sacrifice arrangements if needed",
            "Monitor impact on take-home pay and budget accordingly",
            "Review annually and consider further increases",
        ],
        projected_impact=ProjectedImpact(additional_assets=projected_benefit),
        feasibility_score=85.0,
        effectiveness_score=clamp_score(increase / 5.0 * 100.0, cap=90.0),
        person_id=person.id,
        person_specific_changes=PersonSpecificChanges(
            person_id=person.id,
            changes=PersonChanges(
                super_accounts=[
                    SubEntityChange(
                        action=MutationAction.UPDATE,
                        id=account.id,
                        data={"contribution_rate": suggested_rate},
                    )
                ]
            ),
        ),
    )


def build_retirement_age_advice(
    person: Person,
    suggested_age: int,
    projected_benefit: float,
    reason: str,
) -> AdviceItem:
    """Recommend moving a person's retirement age (later or earlier)."""
    age_change = suggested_age - person.retirement_age
    direction = "Delay" if age_change > 0 else "Advance"
    years = abs(age_change)
    plural = "s" if years != 1 else ""
    return AdviceItem(
        id=f"retirement-age-{person.id}-{suggested_age}",
        category=AdviceCategory.INCOME,
        priority=AdvicePriority.MEDIUM if years <= 2 else AdvicePriority.LOW,
        title=f"{direction} {person.name}'s Retirement by {years} Year{plural}",
        description=(
            f"Consider {direction.lower()}ing {person.name}'s retirement from age "
            f"{person.retirement_age} to {suggested_age}. {reason}"
        ),
        specific_actions=[
            f"Review {person.name}'s career goals and health considerations",
            "Calculate impact on superannuation and pension eligibility",
            "Discuss with financial advisor and family members",
            "Update retirement planning timeline accordingly",
        ],
        projected_impact=ProjectedImpact(
            additional_assets=projected_benefit,
            timeline_savings_years=float(age_change),
        ),
        feasibility_score=70.0 if years <= 2 else 50.0,
        effectiveness_score=clamp_score(abs(projected_benefit) / 10_000.0 * 10.0, cap=85.0),
        person_id=person.id,
        person_specific_changes=PersonSpecificChanges(
            person_id=person.id,
            changes=PersonChanges(person_updates=PersonUpdates(retirement_age=suggested_age)),
        ),
    )


def build_income_source_advice(
    person: Person,
    change: SubEntityChange,
    title: str,
    description: str,
    projected_benefit: float,
) -> AdviceItem:
    """Recommend adding, updating or removing one of a person's income sources."""
    return AdviceItem(
        id=f"income-{change.action}-{person.id}-{change.id or 'new'}",
        category=AdviceCategory.INCOME,
        priority=AdvicePriority.MEDIUM,
        title=f"{title} for {person.name}",
        description=(
            f"{description} This could improve {person.name}'s financial position by "
            f"{format_amount(projected_benefit)}."
        ),
        specific_actions=[
            f"Evaluate {change.action} income source opportunity",
            "Consider impact on work-life balance and career goals",
            "Update tax planning and budgeting accordingly",
            "Monitor progress and adjust as needed",
        ],
        projected_impact=ProjectedImpact(additional_assets=projected_benefit),
        feasibility_score=60.0,
        effectiveness_score=clamp_score(projected_benefit / 5_000.0 * 10.0, cap=80.0),
        person_id=person.id,
        person_specific_changes=PersonSpecificChanges(
            person_id=person.id,
            changes=PersonChanges(income_sources=[change]),
        ),
    )


# ── Validation ────────────────────────────────────────────────────────────────


@dataclass
class TargetingValidation:
    """Outcome of ``validate_person_advice()``."""

    is_valid: bool
    errors:   list[str] = field(default_factory=list)


def validate_person_advice(item: AdviceItem, params: HouseholdParameters) -> TargetingValidation:
    """Check that a person-targeted item resolves against ``params``.

    Rules:
      - ``item.person_id`` must name an existing person.
      - The descriptor's ``person_id`` must exist and agree with
        ``item.person_id`` when both are set.
      - ``update`` / ``remove`` actions need an ``id`` that exists under
        that person.
      - ``add`` data must not embed a different ``person_id``.

    Returns:
        ``TargetingValidation``; ``is_valid`` is ``True`` when no rule failed.
    """
    errors: list[str] = []

    if item.person_id is not None and params.find_person(item.person_id) is None:
        errors.append(f"Person ID {item.person_id} not found in household")

    descriptor = item.person_specific_changes
    if descriptor is not None:
        person_id = descriptor.person_id
        if item.person_id is not None and item.person_id != person_id:
            errors.append(
                f"Advice targets person {item.person_id} but its changes target {person_id}"
            )

        person = params.find_person(person_id)
        if person is None:
            errors.append(f"Person ID {person_id} in person_specific_changes not found in household")
        else:
            errors.extend(
                _validate_sub_entity_changes(
                    descriptor.changes.income_sources,
                    lookup=person.find_income_source,
                    person_id=person_id,
                    noun="Income source",
                )
            )
            errors.extend(
                _validate_sub_entity_changes(
                    descriptor.changes.super_accounts,
                    lookup=person.find_super_account,
                    person_id=person_id,
                    noun="Super account",
                )
            )

    return TargetingValidation(is_valid=not errors, errors=errors)


def _validate_sub_entity_changes(
    changes: list[SubEntityChange],
    lookup: Callable[[str], Optional[BaseModel]],
    person_id: str,
    noun: str,
) -> list[str]:
    errors: list[str] = []
    for change in changes:
        if change.action in (MutationAction.UPDATE, MutationAction.REMOVE):
            if not change.id:
                errors.append(f"{noun} ID required for {change.action} action")
            elif lookup(change.id) is None:
                errors.append(f"{noun} {change.id} not found for person {person_id}")
        elif change.action == MutationAction.ADD:
            embedded = change.data.get("person_id")
            if embedded is not None and embedded != person_id:
                errors.append(
                    f"{noun} person_id mismatch: expected {person_id}, got {embedded}"
                )
    return errors


# ── Application ───────────────────────────────────────────────────────────────


def apply_person_advice(params: HouseholdParameters, item: AdviceItem) -> HouseholdParameters:
    """Return a new parameter set with ``item``'s descriptor applied.

    Args:
        params: Current household parameters (not modified).
        item:   Advice item; items without a descriptor return ``params``.

    Returns:
        New ``HouseholdParameters``; people other than the target are the
        same objects as in ``params``.
    """
    descriptor = item.person_specific_changes
    if descriptor is None or not params.people:
        return params

    target_id = descriptor.person_id
    if params.find_person(target_id) is None:
        logger.warning("Cannot apply advice %s: person %s not in household", item.id, target_id)
        return params

    people = [
        _apply_to_person(person, descriptor.changes) if person.id == target_id else person
        for person in params.people
    ]
    return params.model_copy(update={"people": people})


def _apply_to_person(person: Person, changes: PersonChanges) -> Person:
    updates: dict[str, object] = {}

    if changes.person_updates is not None:
        updates.update(changes.person_updates.model_dump(exclude_none=True))

    if changes.income_sources:
        updates["income_sources"] = _apply_sub_entity_changes(
            person.income_sources,
            changes.income_sources,
            model=IncomeSource,
            person_id=person.id,
            id_prefix="income",
            default_label="New Income Source",
        )

    if changes.super_accounts:
        updates["super_accounts"] = _apply_sub_entity_changes(
            person.super_accounts,
            changes.super_accounts,
            model=SuperAccount,
            person_id=person.id,
            id_prefix="super",
            default_label="New Super Account",
        )

    if not updates:
        return person
    return Person.model_validate({**person.model_dump(), **updates})


def _apply_sub_entity_changes(
    entities: list[_EntityT],
    changes: list[SubEntityChange],
    model: type[_EntityT],
    person_id: str,
    id_prefix: str,
    default_label: str,
) -> list[_EntityT]:
    result = list(entities)
    for change in changes:
        if change.action == MutationAction.ADD:
            new_id = change.data.get("id") or _next_entity_id(result, id_prefix, person_id)
            result.append(
                model.model_validate(
                    {"label": default_label, **change.data, "id": str(new_id), "person_id": person_id}
                )
            )
        elif change.action == MutationAction.UPDATE:
            index = _index_of(result, change.id)
            if index is None:
                logger.debug("Skipping update of unknown %s id %s", id_prefix, change.id)
                continue
            existing = result[index]
            result[index] = model.model_validate(
                {**existing.model_dump(), **change.data, "id": existing.id, "person_id": person_id}
            )
        elif change.action == MutationAction.REMOVE:
            result = [entity for entity in result if entity.id != change.id]
    return result


def _index_of(entities: list[BaseModel], entity_id: Optional[str]) -> Optional[int]:
    if entity_id is None:
        return None
    return next((i for i, e in enumerate(entities) if e.id == entity_id), None)


def _next_entity_id(entities: list[BaseModel], prefix: str, person_id: str) -> str:
    """Deterministic id for an added sub-entity: ``<prefix>-<person>-<n>``."""
    taken = {e.id for e in entities}
    n = len(entities) + 1
    while f"{prefix}-{person_id}-{n}" in taken:
        n += 1
    return f"{prefix}-{person_id}-{n}"


# ── Display ───────────────────────────────────────────────────────────────────


def advice_target_name(item: AdviceItem, params: HouseholdParameters) -> str:
    """Display name of the person an item targets, or ``"Household"``."""
    if item.person_id is None:
        return "Household"
    person = params.find_person(item.person_id)
    return person.name if person is not None else f"Person {item.person_id}"
