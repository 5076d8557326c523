"""
Domain Entities

Business entities with identity, for both engines:

    Scoring side    : PlatformComponent, Issue, SecRelCheckpoint
    Hierarchy side  : PlatformNode, Deployment

Components form a flat list; nodes form a containment forest linked by
``parent_id`` / ``child_ids``.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, List, Optional

from .enums import (
    ComponentType,
    IssueType,
    IssueSeverity,
    CheckpointType,
    ComponentLayer,
    HealthStatus,
    DeploymentStatus,
    Environment,
)
from .value_objects import (
    ComponentConfig,
    ComponentMetrics,
    IssueImpact,
    Position,
    Size,
    ResourceRequirements,
    ResourceCapacity,
)


# =============================================================================
# Scoring side
# =============================================================================

@dataclass
class Issue:
    """
    A detected policy violation attached to one component.

    ``time_to_resolve`` is in hours; ``cost`` is the price to fix.
    """
    id: str
    type: IssueType
    severity: IssueSeverity
    title: str
    description: str
    component: str
    impact: IssueImpact
    time_to_resolve: float
    cost: float

    @property
    def weighted_impact(self) -> IssueImpact:
        return self.impact.scaled(self.severity.multiplier)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "component": self.component,
            "impact": self.impact.to_dict(),
            "time_to_resolve": self.time_to_resolve,
            "cost": self.cost,
        }


@dataclass
class PlatformComponent:
    """A draggable platform building block (API, database, cache, ...)."""
    id: str
    type: ComponentType
    name: str
    position: Position = field(default_factory=Position)
    config: ComponentConfig = field(default_factory=ComponentConfig)
    connections: List[str] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)
    metrics: ComponentMetrics = field(default_factory=ComponentMetrics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "position": {"x": self.position.x, "y": self.position.y},
            "config": self.config.to_dict(),
            "connections": list(self.connections),
            "metrics": self.metrics.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlatformComponent":
        return cls(
            id=data["id"],
            type=ComponentType(data["type"]),
            name=data.get("name", data["id"]),
            position=Position.from_dict(data.get("position")),
            config=ComponentConfig.from_dict(data.get("config")),
            connections=list(data.get("connections", [])),
            metrics=ComponentMetrics.from_dict(data.get("metrics")),
        )


@dataclass
class SecRelCheckpoint:
    """Result of evaluating one governance gate against a component."""
    id: str
    name: str
    type: CheckpointType
    required: bool
    passed: bool
    impact: IssueImpact
    requirements: List[str] = field(default_factory=list)
    component: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "required": self.required,
            "passed": self.passed,
            "impact": self.impact.to_dict(),
            "requirements": list(self.requirements),
            "component": self.component,
        }


# =============================================================================
# Hierarchy side
# =============================================================================

@dataclass
class NodeConfig:
    replicas: int = 1
    auto_scaling: bool = False
    min_replicas: Optional[int] = None
    max_replicas: Optional[int] = None
    health_check: bool = True
    monitoring: bool = True
    logging: bool = True


@dataclass
class NodeStatus:
    health: HealthStatus = HealthStatus.HEALTHY
    utilization: float = 0
    incidents: int = 0
    latency: float = 0


@dataclass
class NodeMetrics:
    availability: float = 99.9
    performance: float = 85
    cost: float = 0
    efficiency: float = 80


@dataclass
class PlatformNode:
    """
    A typed infrastructure / platform / service / application node.

    Invariant: a non-root node's parent lists this node's id in
    ``child_ids``. ``resources`` is None for nodes whose template declares
    no capacity (e.g. regions).
    """
    id: str
    layer: ComponentLayer
    type: Enum
    name: str
    position: Position = field(default_factory=Position)
    size: Size = field(default_factory=Size)
    parent_id: Optional[str] = None
    child_ids: List[str] = field(default_factory=list)
    resources: Optional[ResourceCapacity] = None
    config: NodeConfig = field(default_factory=NodeConfig)
    status: NodeStatus = field(default_factory=NodeStatus)
    metrics: NodeMetrics = field(default_factory=NodeMetrics)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "layer": self.layer.value,
            "type": self.type.value,
            "name": self.name,
            "parent_id": self.parent_id,
            "child_ids": list(self.child_ids),
            "resources": None if self.resources is None else {
                "cpu": self.resources.cpu,
                "memory": self.resources.memory,
                "storage": self.resources.storage,
                "network": self.resources.network,
            },
            "status": {
                "health": self.status.health.value,
                "utilization": self.status.utilization,
                "incidents": self.status.incidents,
                "latency": self.status.latency,
            },
            "metrics": {
                "availability": self.metrics.availability,
                "performance": self.metrics.performance,
                "cost": self.metrics.cost,
                "efficiency": self.metrics.efficiency,
            },
        }


@dataclass
class Deployment:
    """An application node deployed onto a platform or service node."""
    id: str
    application_id: str
    target_id: str
    environment: Environment
    version: str
    status: DeploymentStatus
    replicas: int
    resources: ResourceRequirements
    created: datetime
    updated: datetime

    @property
    def allocated(self) -> ResourceRequirements:
        """Capacity consumed on the target (requirement x replicas)."""
        return self.resources.times(self.replicas)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "application_id": self.application_id,
            "target_id": self.target_id,
            "environment": self.environment.value,
            "version": self.version,
            "status": self.status.value,
            "replicas": self.replicas,
            "resources": self.resources.to_dict(),
            "created": self.created.isoformat(),
            "updated": self.updated.isoformat(),
        }
