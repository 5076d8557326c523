"""
Engine Snapshots

Immutable views pushed to subscribers after every mutation. Snapshots hold
deep copies, so editing a snapshot never reaches engine state.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple

from .entities import PlatformComponent, Issue, PlatformNode, Deployment
from .enums import PlacementRejection
from .metrics import GlobalMetrics, PlatformGlobalMetrics


@dataclass(frozen=True)
class SimulationState:
    components: Tuple[PlatformComponent, ...]
    metrics: GlobalMetrics
    issues: Tuple[Issue, ...]
    total_time: float

    def get_component(self, component_id: str) -> Optional[PlatformComponent]:
        return next((c for c in self.components if c.id == component_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "components": [c.to_dict() for c in self.components],
            "metrics": self.metrics.to_dict(),
            "issues": [i.to_dict() for i in self.issues],
            "total_time": self.total_time,
        }


@dataclass(frozen=True)
class PlatformState:
    nodes: Dict[str, PlatformNode]
    deployments: Tuple[Deployment, ...]
    selected_node_id: Optional[str]
    global_metrics: PlatformGlobalMetrics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": {node_id: n.to_dict() for node_id, n in self.nodes.items()},
            "deployments": [d.to_dict() for d in self.deployments],
            "selected_node_id": self.selected_node_id,
            "global_metrics": self.global_metrics.to_dict(),
        }


@dataclass(frozen=True)
class PlacementResult:
    """
    Outcome of placing a node in the hierarchy.

    Falsy when rejected, so ``if store.try_add_node(...)`` reads naturally.
    """
    node_id: Optional[str] = None
    rejection: Optional[PlacementRejection] = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None

    def __bool__(self) -> bool:
        return self.accepted

    @classmethod
    def reject(cls, reason: PlacementRejection) -> "PlacementResult":
        return cls(node_id=None, rejection=reason)
