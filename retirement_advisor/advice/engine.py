"""
Advice orchestrator: one ``generate()`` call from projection to ranked advice.

Pipeline
--------
    1. Reject an empty snapshot series            (critical)
    2. Overall assessment + retirement feasibility
    3. Run every enabled strategy through its cache
    4. Validate person-targeted items             (warning, item kept)
    5. Drop items below min effectiveness
    6. Rank, truncate to max_recommendations
    7. Partition quick wins / long-term strategies (may overlap)
    8. Integrity check of the final advice        (warning)

Assessment rules (evaluated in this order)
------------------------------------------
    a. retirement age <= target + 2   → on_track          (tentative)
    b. retirement age <= target + 10  → needs_improvement (tentative)
    c. projection not sustainable     → critical  (overrides a / b)
    d. a tentative verdict exists     → that verdict
    e. final net worth < 0.9 × mid    → critical
    f. otherwise                      → needs_improvement

Failure semantics
-----------------
``generate()`` never raises. Any exception is caught once at the top and
turned into a critical ``GenerationError``; the caller receives
``RetirementAdvice.minimal()``. ``AdviceGenerationFailure`` subclasses keep
their ``ErrorKind``; anything else becomes ``generation_failed``.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from retirement_advisor.advice.cache import BoundedCache, CacheStats, CachedStrategy
from retirement_advisor.advice.errors import AdviceGenerationFailure, EmptySnapshotSeriesError
from retirement_advisor.advice.integrity import check_advice_integrity
from retirement_advisor.advice.ranker import (
    rank_recommendations,
    select_long_term,
    select_quick_wins,
    top_recommendations,
)
from retirement_advisor.advice.scoring import ensure_finite
from retirement_advisor.advice.strategies import Strategy, default_strategies
from retirement_advisor.advice.targeting import validate_person_advice
from retirement_advisor.advice.telemetry import TelemetrySink
from retirement_advisor.config import AdviceConfig, CacheConfig
from retirement_advisor.models.advice import (
    AdviceGenerationResult,
    AdviceItem,
    RetirementAdvice,
    RetirementFeasibility,
)
from retirement_advisor.models.errors import (
    MAX_CONTEXT_KEYS,
    ContextValue,
    ErrorKind,
    GenerationError,
    Severity,
)
from retirement_advisor.models.household import HouseholdParameters
from retirement_advisor.models.milestone import Milestone
from retirement_advisor.models.snapshot import ProjectionResult
from retirement_advisor.taxonomy.advice_taxonomy import RetirementAssessment

logger = logging.getLogger(__name__)

ON_TRACK_MARGIN_YEARS = 2
NEEDS_IMPROVEMENT_MARGIN_YEARS = 10
CAN_RETIRE_MARGIN_YEARS = 1
NET_WORTH_DECLINE_RATIO = 0.9
SAFE_WITHDRAWAL_RATE = 0.04


# ── Assessment ────────────────────────────────────────────────────────────────


def assess_readiness(
    projection: ProjectionResult,
    params: HouseholdParameters,
) -> RetirementAssessment:
    """Overall verdict on the projected trajectory (see module docstring)."""
    tentative: Optional[RetirementAssessment] = None
    if projection.retirement_date is not None and projection.retirement_age is not None:
        age = ensure_finite(projection.retirement_age, "retirement_age")
        if age <= params.retirement_age + ON_TRACK_MARGIN_YEARS:
            tentative = RetirementAssessment.ON_TRACK
        elif age <= params.retirement_age + NEEDS_IMPROVEMENT_MARGIN_YEARS:
            tentative = RetirementAssessment.NEEDS_IMPROVEMENT

    if not projection.is_sustainable:
        return RetirementAssessment.CRITICAL
    if tentative is not None:
        return tentative

    states = projection.states
    if len(states) >= 2:
        final = ensure_finite(states[-1].net_worth, "net_worth")
        mid = ensure_finite(states[len(states) // 2].net_worth, "net_worth")
        if final < mid * NET_WORTH_DECLINE_RATIO:
            return RetirementAssessment.CRITICAL

    return RetirementAssessment.NEEDS_IMPROVEMENT


def analyze_feasibility(
    projection: ProjectionResult,
    params: HouseholdParameters,
) -> RetirementFeasibility:
    """Whether the target age is reachable, and the asset gap at the end.

    Required assets follow the 4 % rule: desired income / 0.04, compared
    against final investments + super.
    """
    age = projection.retirement_age
    can_retire = (
        projection.retirement_date is not None
        and age is not None
        and age <= params.retirement_age + CAN_RETIRE_MARGIN_YEARS
    )

    shortfall: Optional[float] = None
    surplus: Optional[float] = None
    final = projection.final_state
    if final is not None:
        required = ensure_finite(
            params.desired_annual_retirement_income / SAFE_WITHDRAWAL_RATE, "required_assets"
        )
        actual = ensure_finite(final.investments + final.superannuation, "final_assets")
        if actual < required:
            shortfall = ensure_finite(required - actual, "shortfall_amount")
        else:
            surplus = ensure_finite(actual - required, "surplus_amount")

    return RetirementFeasibility(
        can_retire_at_target=can_retire,
        actual_retirement_age=age,
        shortfall_amount=shortfall,
        surplus_amount=surplus,
    )


# ── Engine ────────────────────────────────────────────────────────────────────


class AdviceEngine:
    """Generates ranked retirement advice for one household at a time.

    Each engine owns one ``CachedStrategy`` per strategy and one
    ``TelemetrySink``. Engines share no state with each other.

    Args:
        config:       Strategy switches and list limits.
        cache_config: Per-strategy cache capacity / TTL.
        telemetry:    Sink for operation timings; a private one is created
                      when omitted.
        strategies:   Replacement or additional strategies keyed by name.
                      Names matching a built-in replace it.
    """

    def __init__(
        self,
        config: Optional[AdviceConfig] = None,
        cache_config: Optional[CacheConfig] = None,
        telemetry: Optional[TelemetrySink] = None,
        strategies: Optional[Mapping[str, Strategy]] = None,
    ) -> None:
        self._config = config or AdviceConfig()
        self._cache_config = cache_config or CacheConfig()
        self.telemetry = telemetry or TelemetrySink()

        selected = default_strategies()
        if strategies:
            selected.update(strategies)

        self._strategies: dict[str, CachedStrategy] = {}
        for name, strategy in selected.items():
            settings = self._cache_config.for_strategy(name)
            self._strategies[name] = CachedStrategy(
                strategy,
                BoundedCache(settings.max_size, settings.ttl_seconds),
                category=name,
            )

    @property
    def config(self) -> AdviceConfig:
        return self._config

    def update_config(self, **changes) -> AdviceConfig:
        """Replace fields of the advice config; returns the new config.

        Raises:
            ValueError: For unknown field names.
            pydantic.ValidationError: For invalid values.
        """
        unknown = set(changes) - set(AdviceConfig.model_fields)
        if unknown:
            raise ValueError(f"Unknown advice config field(s): {sorted(unknown)}")
        self._config = AdviceConfig.model_validate({**self._config.model_dump(), **changes})
        return self._config

    def cache_stats(self) -> dict[str, CacheStats]:
        return {name: cached.cache.stats() for name, cached in self._strategies.items()}

    def clear_caches(self) -> None:
        for cached in self._strategies.values():
            cached.cache.clear()

    def generate(
        self,
        projection: ProjectionResult,
        params: HouseholdParameters,
        milestones: Optional[Sequence[Milestone]] = None,
    ) -> AdviceGenerationResult:
        """Generate advice for one projection. Never raises.

        Args:
            projection: Snapshot series and verdicts from the projection engine.
            params:     Household parameters the projection was run with.
            milestones: Detected milestones; context only.

        Returns:
            ``AdviceGenerationResult``. On a critical failure ``advice`` is
            ``RetirementAdvice.minimal()`` and ``errors`` holds the cause.
        """
        errors: list[GenerationError] = []
        self.telemetry.start_operation(
            "advice_generation",
            states=len(projection.states),
            milestones=len(milestones or ()),
        )

        try:
            advice = self._generate(projection, params, errors)
        except AdviceGenerationFailure as exc:
            logger.error("Advice generation failed (%s): %s", exc.kind, exc)
            errors.append(
                GenerationError(
                    code=exc.kind,
                    message=str(exc),
                    severity=Severity.CRITICAL,
                    context=_bounded_context(exc.context),
                )
            )
            advice = RetirementAdvice.minimal()
        except Exception as exc:
            logger.error("Advice generation failed: %s", exc, exc_info=True)
            errors.append(
                GenerationError(
                    code=ErrorKind.GENERATION_FAILED,
                    message=f"Advice generation failed: {exc}",
                    severity=Severity.CRITICAL,
                    context={"error_type": type(exc).__name__},
                )
            )
            advice = RetirementAdvice.minimal()
        finally:
            self.telemetry.abandon_active(keep=("advice_generation",))

        self.telemetry.end_operation("advice_generation", data_size=len(advice.recommendations))

        warnings = [err.message for err in errors if err.severity == Severity.WARNING]
        logger.info(
            "Advice generated | assessment=%s | recommendations=%d | warnings=%d | critical=%s",
            advice.overall_assessment,
            len(advice.recommendations),
            len(warnings),
            any(err.is_critical for err in errors),
        )
        return AdviceGenerationResult(advice=advice, errors=errors, warnings=warnings)

    def _generate(
        self,
        projection: ProjectionResult,
        params: HouseholdParameters,
        errors: list[GenerationError],
    ) -> RetirementAdvice:
        states = projection.states
        if not states:
            raise EmptySnapshotSeriesError("Projection contains no snapshots")

        self.telemetry.start_operation("retirement_assessment")
        assessment = assess_readiness(projection, params)
        feasibility = analyze_feasibility(projection, params)
        self.telemetry.end_operation("retirement_assessment")

        candidates: list[AdviceItem] = []
        for name, cached in self._strategies.items():
            if not self._config.is_enabled(name):
                continue
            op = f"{name}_advice_generation"
            self.telemetry.start_operation(op)
            items = cached(states, params)
            self.telemetry.end_operation(op, data_size=len(items))
            candidates.extend(items)

        for item in candidates:
            if item.is_person_targeted:
                self._flag_invalid_targeting(item, params, errors)

        threshold = self._config.min_effectiveness_threshold
        kept = [item for item in candidates if item.effectiveness_score >= threshold]

        ranked = top_recommendations(
            rank_recommendations(kept), self._config.max_recommendations
        )
        advice = RetirementAdvice(
            overall_assessment=assessment,
            retirement_feasibility=feasibility,
            recommendations=ranked,
            quick_wins=select_quick_wins(ranked),
            long_term_strategies=select_long_term(ranked),
        )

        for problem in check_advice_integrity(advice):
            logger.warning("Advice integrity: %s", problem)
            errors.append(
                GenerationError(
                    code=ErrorKind.INVALID_RECOMMENDATION,
                    message=problem,
                    severity=Severity.WARNING,
                )
            )

        logger.debug(
            "Candidates=%d kept=%d ranked=%d", len(candidates), len(kept), len(ranked)
        )
        return advice

    def _flag_invalid_targeting(
        self,
        item: AdviceItem,
        params: HouseholdParameters,
        errors: list[GenerationError],
    ) -> None:
        validation = validate_person_advice(item, params)
        if validation.is_valid:
            return
        message = f"Person-specific advice validation failed: {', '.join(validation.errors)}"
        logger.warning("%s (advice_id=%s)", message, item.id)
        errors.append(
            GenerationError(
                code=ErrorKind.PERSON_TARGETING_INVALID,
                message=message,
                severity=Severity.WARNING,
                context={"advice_id": item.id, "person_id": item.person_id},
            )
        )


def _bounded_context(context: Mapping[str, ContextValue]) -> dict[str, ContextValue]:
    return dict(list(context.items())[:MAX_CONTEXT_KEYS])


def generate_retirement_advice(
    projection: ProjectionResult,
    params: HouseholdParameters,
    milestones: Optional[Sequence[Milestone]] = None,
    config: Optional[AdviceConfig] = None,
) -> AdviceGenerationResult:
    """One-shot convenience: build a fresh engine and generate advice."""
    return AdviceEngine(config=config).generate(projection, params, milestones)
