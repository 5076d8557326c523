"""
Metric Calculator

Pure scoring functions for the flat component model.

Per component (security / performance / reliability):
    score = min(100, 60 + Σ bonus(flag) for every enabled flag in the group)

    security     encryption +10, authentication +10, authorization +10,
                 input_validation +5, security_review +5
    performance  caching +15, compression +10, optimized_queries +10,
                 load_balancing +5
    reliability  health_checks +10, monitoring +10, backups +15,
                 error_handling +5

    cost and complexity are template-seeded and never recomputed.

Global aggregation (non-empty component list):
    W(m)              = Σ impact[m] × severity_multiplier   over active issues
    user_satisfaction = max(0, avg_performance - W(user_satisfaction))
    developer_velocity= max(0, 80 - avg_complexity - W(developer_velocity))
    security_score    = max(0, avg_security - W(security_score))
    performance_score = max(0, avg_performance - W(performance_score))
    technical_debt    = min(100, avg_complexity + 5 × |issues|)
    adoption_rate     = max(0, 0.8 × user_satisfaction + 0.2 × performance_score)
    time_to_market    = max(1, total_time + 0.5 × |issues|)   (one decimal)
"""

from __future__ import annotations

import dataclasses
import math
from typing import Dict, Iterable, Sequence

from platform_sim.domain.models.entities import Issue, PlatformComponent
from platform_sim.domain.models.metrics import GlobalMetrics, DEFAULT_GLOBAL_METRICS
from platform_sim.domain.models.value_objects import (
    ComponentConfig,
    ComponentMetrics,
    IssueImpact,
)

BASE_SCORE = 60
MAX_SCORE = 100
BASE_DEVELOPER_VELOCITY = 80

SECURITY_BONUSES: Dict[str, int] = {
    "encryption": 10,
    "authentication": 10,
    "authorization": 10,
    "input_validation": 5,
    "security_review": 5,
}
PERFORMANCE_BONUSES: Dict[str, int] = {
    "caching": 15,
    "compression": 10,
    "optimized_queries": 10,
    "load_balancing": 5,
}
RELIABILITY_BONUSES: Dict[str, int] = {
    "health_checks": 10,
    "monitoring": 10,
    "backups": 15,
    "error_handling": 5,
}


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from -inf, unlike Python's banker's rounding."""
    factor = 10 ** ndigits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if ndigits == 0 else rounded


def _group_score(group, bonuses: Dict[str, int]) -> float:
    score = BASE_SCORE + sum(
        bonus for flag, bonus in bonuses.items() if getattr(group, flag, False)
    )
    return min(MAX_SCORE, score)


def derive_component_metrics(
    config: ComponentConfig,
    current: ComponentMetrics,
) -> ComponentMetrics:
    """
    Recompute security/performance/reliability from ``config``.

    Cost and complexity are carried over from ``current`` unchanged.
    Idempotent: the same config always yields the same scores.
    """
    return dataclasses.replace(
        current,
        security=_group_score(config.security, SECURITY_BONUSES),
        performance=_group_score(config.performance, PERFORMANCE_BONUSES),
        reliability=_group_score(config.reliability, RELIABILITY_BONUSES),
    )


def weighted_issue_impact(issues: Iterable[Issue]) -> IssueImpact:
    """Sum severity-weighted impacts across all issues."""
    total = IssueImpact()
    for issue in issues:
        weighted = issue.weighted_impact
        total = IssueImpact(
            user_satisfaction=total.user_satisfaction + weighted.user_satisfaction,
            developer_velocity=total.developer_velocity + weighted.developer_velocity,
            security_score=total.security_score + weighted.security_score,
            performance_score=total.performance_score + weighted.performance_score,
            cost=total.cost + weighted.cost,
        )
    return total


def aggregate_global_metrics(
    components: Sequence[PlatformComponent],
    issues: Sequence[Issue],
    total_time: float,
) -> GlobalMetrics:
    """Aggregate all components and active issues into platform-wide metrics."""
    count = len(components)
    if count == 0:
        return DEFAULT_GLOBAL_METRICS

    avg_performance = sum(c.metrics.performance for c in components) / count
    avg_security = sum(c.metrics.security for c in components) / count
    avg_complexity = sum(c.metrics.complexity for c in components) / count
    total_cost = sum(c.metrics.cost for c in components)

    impact = weighted_issue_impact(issues)

    user_satisfaction = max(0, avg_performance - impact.user_satisfaction)
    developer_velocity = max(
        0, BASE_DEVELOPER_VELOCITY - avg_complexity - impact.developer_velocity
    )
    security_score = max(0, avg_security - impact.security_score)
    performance_score = max(0, avg_performance - impact.performance_score)

    technical_debt = min(100, avg_complexity + len(issues) * 5)
    adoption_rate = max(0, user_satisfaction * 0.8 + performance_score * 0.2)
    time_to_market = max(1, total_time + len(issues) * 0.5)

    return GlobalMetrics(
        user_satisfaction=round_half_up(user_satisfaction),
        developer_velocity=round_half_up(developer_velocity),
        security_score=round_half_up(security_score),
        technical_debt=round_half_up(technical_debt),
        performance_score=round_half_up(performance_score),
        adoption_rate=round_half_up(adoption_rate),
        total_cost=round_half_up(total_cost),
        time_to_market=round_half_up(time_to_market, 1),
    )
