from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from .entities import PlatformComponent
from .enums import Difficulty
from .metrics import GlobalMetrics

# Metrics where a lower value is the goal ("keep costs under", "debt below").
LOWER_IS_BETTER = frozenset({"total_cost", "technical_debt"})

_METRIC_NAMES = frozenset(GlobalMetrics.__dataclass_fields__)


@dataclass
class ScenarioObjective:
    id: str
    description: str
    target_metric: str
    target_value: float
    weight: float

    def __post_init__(self) -> None:
        if self.target_metric not in _METRIC_NAMES:
            raise ValueError(
                f"Unknown target metric '{self.target_metric}'. "
                f"Valid: {sorted(_METRIC_NAMES)}"
            )

    @property
    def lower_is_better(self) -> bool:
        return self.target_metric in LOWER_IS_BETTER

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScenarioObjective":
        return cls(
            id=data["id"],
            description=data.get("description", ""),
            target_metric=data["target_metric"],
            target_value=float(data["target_value"]),
            weight=float(data.get("weight", 1.0)),
        )


@dataclass
class Scenario:
    """A pre-built component set with objectives, loaded wholesale into a session."""
    id: str
    title: str
    description: str
    difficulty: Difficulty
    initial_components: List[PlatformComponent] = field(default_factory=list)
    objectives: List[ScenarioObjective] = field(default_factory=list)
    time_limit: Optional[int] = None   # minutes
    budget: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scenario":
        return cls(
            id=data["id"],
            title=data.get("title", data["id"]),
            description=data.get("description", ""),
            difficulty=Difficulty(data.get("difficulty", "beginner")),
            initial_components=[
                PlatformComponent.from_dict(c) for c in data.get("initial_components", [])
            ],
            objectives=[ScenarioObjective.from_dict(o) for o in data.get("objectives", [])],
            time_limit=data.get("time_limit"),
            budget=data.get("budget"),
        )


@dataclass(frozen=True)
class ObjectiveResult:
    objective_id: str
    metric: str
    actual: float
    target: float
    met: bool


@dataclass(frozen=True)
class ScenarioProgress:
    scenario_id: str
    results: tuple
    score: float
    within_budget: bool

    @property
    def completed(self) -> bool:
        return all(r.met for r in self.results) and self.within_budget
