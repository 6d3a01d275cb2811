"""
Comparison orchestrator.

Usage::

    engine = ScenarioComparisonEngine()
    result = engine.compare(envelope, params)
    result.advice_comparison.variation_explanation

The envelope is never modified; ``compare`` returns a copy with
``milestone_comparison`` and ``advice_comparison`` attached. Advice missing
from either side is generated with the injected ``AdviceEngine``; a critical
generation failure yields the minimal advice for that side, so the
comparison still completes.
"""

from __future__ import annotations

import logging
from typing import Optional

from retirement_advisor.advice.engine import AdviceEngine
from retirement_advisor.comparison.differ import (
    ComparisonThresholds,
    compare_advice,
    compare_milestones,
)
from retirement_advisor.comparison.matcher import AdviceMatcher, KeyPhraseMatcher
from retirement_advisor.models.advice import RetirementAdvice
from retirement_advisor.models.comparison import ScenarioComparison, ScenarioOutput
from retirement_advisor.models.household import HouseholdParameters

logger = logging.getLogger(__name__)


class ScenarioComparisonEngine:
    """Compares milestones and advice between two scenario outputs.

    Args:
        advice_engine: Engine used when a side has no precomputed advice.
        matcher:       Advice pairing policy.
        thresholds:    Change thresholds for matched advice.
    """

    def __init__(
        self,
        advice_engine: Optional[AdviceEngine] = None,
        matcher: Optional[AdviceMatcher] = None,
        thresholds: Optional[ComparisonThresholds] = None,
    ) -> None:
        self.advice_engine = advice_engine or AdviceEngine()
        self.matcher = matcher or KeyPhraseMatcher()
        self.thresholds = thresholds or ComparisonThresholds()

    def compare(
        self,
        envelope: ScenarioComparison,
        params: HouseholdParameters,
    ) -> ScenarioComparison:
        scenario_a = envelope.with_transitions
        scenario_b = envelope.without_transitions

        milestone_comparison = compare_milestones(scenario_a.milestones, scenario_b.milestones)
        advice_comparison = compare_advice(
            self._advice_for(scenario_a, params),
            self._advice_for(scenario_b, params),
            matcher=self.matcher,
            thresholds=self.thresholds,
            metrics=envelope.metrics,
            scenario_a_sustainable=scenario_a.projection.is_sustainable,
        )

        logger.info(
            "Scenarios compared | common_milestones=%d | changed_advice=%d | explanations=%d",
            len(milestone_comparison.common_milestones),
            advice_comparison.changed_advice_count,
            len(advice_comparison.variation_explanation),
        )
        return envelope.model_copy(
            update={
                "milestone_comparison": milestone_comparison,
                "advice_comparison": advice_comparison,
            }
        )

    def _advice_for(self, scenario: ScenarioOutput, params: HouseholdParameters) -> RetirementAdvice:
        if scenario.advice is not None:
            return scenario.advice
        result = self.advice_engine.generate(scenario.projection, params, scenario.milestones)
        if result.has_critical_error:
            logger.warning(
                "Advice generation failed for a compared scenario; using minimal advice"
            )
        return result.advice
