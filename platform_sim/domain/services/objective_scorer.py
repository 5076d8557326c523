"""
Objective Scorer

Scores a scenario's objectives against the current global metrics.

    met(o)  = metric <= target   for total_cost / technical_debt
              metric >= target   otherwise
    score   = Σ weight(met) / Σ weight × 100
"""

from __future__ import annotations

from platform_sim.domain.models.metrics import GlobalMetrics
from platform_sim.domain.models.scenario import (
    ObjectiveResult,
    Scenario,
    ScenarioObjective,
    ScenarioProgress,
)
from platform_sim.domain.services.metric_calculator import round_half_up


class ObjectiveScorer:

    def evaluate_objective(
        self, objective: ScenarioObjective, metrics: GlobalMetrics
    ) -> ObjectiveResult:
        actual = getattr(metrics, objective.target_metric)
        if objective.lower_is_better:
            met = actual <= objective.target_value
        else:
            met = actual >= objective.target_value
        return ObjectiveResult(
            objective_id=objective.id,
            metric=objective.target_metric,
            actual=actual,
            target=objective.target_value,
            met=met,
        )

    def score(self, scenario: Scenario, metrics: GlobalMetrics) -> ScenarioProgress:
        results = tuple(self.evaluate_objective(o, metrics) for o in scenario.objectives)

        total_weight = sum(o.weight for o in scenario.objectives)
        met_weight = sum(
            o.weight for o, r in zip(scenario.objectives, results) if r.met
        )
        score = round_half_up(met_weight / total_weight * 100, 1) if total_weight else 0.0

        within_budget = scenario.budget is None or metrics.total_cost <= scenario.budget

        return ScenarioProgress(
            scenario_id=scenario.id,
            results=results,
            score=score,
            within_budget=within_budget,
        )
