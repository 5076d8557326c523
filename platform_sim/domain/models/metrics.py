"""
Aggregate Metrics

Derived, never-authoritative aggregates produced by the two engines.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Dict, Any

from .value_objects import ResourceCapacity


@dataclass(frozen=True)
class GlobalMetrics:
    """Platform-wide scores recomputed from the component and issue lists."""
    user_satisfaction: float = 80
    developer_velocity: float = 80
    security_score: float = 80
    technical_debt: float = 20
    performance_score: float = 80
    adoption_rate: float = 50
    total_cost: float = 0
    time_to_market: float = 30

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_GLOBAL_METRICS = GlobalMetrics()


@dataclass(frozen=True)
class PlatformGlobalMetrics:
    """Hierarchy-wide rollup: cost, resources, health and maturity."""
    total_cost: float = 0
    total_resources: ResourceCapacity = field(default_factory=ResourceCapacity)
    application_count: int = 0
    service_health: float = 0
    platform_maturity: float = 0
    operational_excellence: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class IssueSummary:
    """Summary of all active issues."""
    total_issues: int
    by_severity: Dict[str, int]
    by_type: Dict[str, int]
    affected_components: int
    total_resolution_hours: float
    total_resolution_cost: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def has_critical(self) -> bool:
        return self.by_severity.get("critical", 0) > 0

    @property
    def requires_attention(self) -> int:
        """Count of critical and high severity issues."""
        return self.by_severity.get("critical", 0) + self.by_severity.get("high", 0)
