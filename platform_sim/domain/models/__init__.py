"""
Domain Models Package

Pure domain entities with no infrastructure dependencies.
Re-exports all domain models for convenient imports.
"""

from .enums import (
    ComponentType, ComponentCategory, IssueType, IssueSeverity, CheckpointType,
    ComponentLayer, InfrastructureType, PlatformServiceType, RuntimeServiceType,
    ApplicationType, HealthStatus, DeploymentStatus, Environment,
    PlacementRejection, Difficulty, NODE_TYPE_ENUMS, resolve_node_type,
)
from .value_objects import (
    SecurityConfig, PerformanceConfig, ReliabilityConfig, ComponentConfig,
    ComponentMetrics, IssueImpact, Position, Size,
    ResourceRequirements, ResourceCapacity,
)
from .entities import (
    Issue, PlatformComponent, SecRelCheckpoint,
    NodeConfig, NodeStatus, NodeMetrics, PlatformNode, Deployment,
)
from .metrics import GlobalMetrics, DEFAULT_GLOBAL_METRICS, PlatformGlobalMetrics, IssueSummary
from .state import SimulationState, PlatformState, PlacementResult
from .scenario import Scenario, ScenarioObjective, ObjectiveResult, ScenarioProgress

__all__ = [
    # Enums
    "ComponentType", "ComponentCategory", "IssueType", "IssueSeverity", "CheckpointType",
    "ComponentLayer", "InfrastructureType", "PlatformServiceType", "RuntimeServiceType",
    "ApplicationType", "HealthStatus", "DeploymentStatus", "Environment",
    "PlacementRejection", "Difficulty", "NODE_TYPE_ENUMS", "resolve_node_type",
    # Value objects
    "SecurityConfig", "PerformanceConfig", "ReliabilityConfig", "ComponentConfig",
    "ComponentMetrics", "IssueImpact", "Position", "Size",
    "ResourceRequirements", "ResourceCapacity",
    # Entities
    "Issue", "PlatformComponent", "SecRelCheckpoint",
    "NodeConfig", "NodeStatus", "NodeMetrics", "PlatformNode", "Deployment",
    # Metrics
    "GlobalMetrics", "DEFAULT_GLOBAL_METRICS", "PlatformGlobalMetrics", "IssueSummary",
    # Snapshots
    "SimulationState", "PlatformState", "PlacementResult",
    # Scenarios
    "Scenario", "ScenarioObjective", "ObjectiveResult", "ScenarioProgress",
]
