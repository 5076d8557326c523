"""
Node Templates

Static lookup table from node type to the constants that drive the
hierarchy engine: layer, containment rules, required parent layer, static
resource footprint (capacity for containers, requirement for children) and
base monthly cost.

Layers and what they may contain:
    infrastructure  region → infrastructure, platform
                    compute → platform
    platform        kubernetes → service, application
    service         (leaf)
    application     (leaf)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from platform_sim.domain.models.enums import (
    ComponentLayer,
    InfrastructureType,
    PlatformServiceType,
    RuntimeServiceType,
    ApplicationType,
    NODE_TYPE_ENUMS,
    resolve_node_type,
)
from platform_sim.domain.models.value_objects import ResourceRequirements, Size


@dataclass(frozen=True)
class NodeTemplate:
    """
    Attributes:
        layer:           Containment tier of nodes built from this template
        can_contain:     Layers a node of this type may hold as children
        requires_parent: Layer a parent is expected in; None for roots
        resources:       Static footprint, None when the type carries none
        base_cost:       Monthly cost seeded into node metrics
    """
    layer: ComponentLayer
    type: Enum
    name: str
    description: str
    default_size: Size
    can_contain: FrozenSet[ComponentLayer]
    requires_parent: Optional[ComponentLayer]
    resources: Optional[ResourceRequirements]
    base_cost: float


_INFRA = ComponentLayer.INFRASTRUCTURE
_PLATFORM = ComponentLayer.PLATFORM
_SERVICE = ComponentLayer.SERVICE
_APP = ComponentLayer.APPLICATION


def _node(layer, ntype, name, description, size, can_contain, requires_parent,
          base_cost, **resources) -> NodeTemplate:
    return NodeTemplate(
        layer=layer,
        type=ntype,
        name=name,
        description=description,
        default_size=Size(width=size[0], height=size[1]),
        can_contain=frozenset(can_contain),
        requires_parent=requires_parent,
        resources=ResourceRequirements(**resources) if resources else None,
        base_cost=base_cost,
    )


NODE_TEMPLATES: Dict[Enum, NodeTemplate] = {
    t.type: t for t in [
        # --- Infrastructure -------------------------------------------------
        _node(_INFRA, InfrastructureType.REGION, "Cloud Region",
              "Geographic deployment region with data centers",
              (800, 600), {_INFRA, _PLATFORM}, None, 500),
        _node(_INFRA, InfrastructureType.COMPUTE, "Compute Cluster",
              "Pool of compute resources (VMs/bare metal)",
              (350, 250), {_PLATFORM}, _INFRA, 1000,
              cpu=1000, memory=4096, storage=10000, network=10000),
        _node(_INFRA, InfrastructureType.NETWORK, "Network Backbone",
              "Core networking infrastructure",
              (350, 100), set(), _INFRA, 300,
              network=100000),
        _node(_INFRA, InfrastructureType.STORAGE, "Storage Array",
              "Persistent storage infrastructure",
              (200, 150), set(), _INFRA, 200,
              storage=100000),

        # --- Platform -------------------------------------------------------
        _node(_PLATFORM, PlatformServiceType.KUBERNETES, "Kubernetes Cluster",
              "Container orchestration platform",
              (300, 200), {_SERVICE, _APP}, _INFRA, 150,
              cpu=100, memory=512),
        _node(_PLATFORM, PlatformServiceType.API_GATEWAY, "API Gateway",
              "Centralized API management and routing",
              (250, 80), set(), _INFRA, 100,
              cpu=50, memory=256, network=1000),
        _node(_PLATFORM, PlatformServiceType.SERVICE_MESH, "Service Mesh",
              "Service-to-service communication layer",
              (250, 80), set(), _PLATFORM, 75,
              cpu=25, memory=128),
        _node(_PLATFORM, PlatformServiceType.MESSAGE_BUS, "Message Bus",
              "Event streaming and messaging platform",
              (200, 80), set(), _INFRA, 120,
              cpu=50, memory=512, storage=1000),
        _node(_PLATFORM, PlatformServiceType.CONTAINER_REGISTRY, "Container Registry",
              "Docker image storage and distribution",
              (150, 100), set(), _INFRA, 50,
              storage=5000),
        _node(_PLATFORM, PlatformServiceType.SECRETS_MANAGER, "Secrets Manager",
              "Centralized storage for credentials and keys",
              (150, 80), set(), _INFRA, 40,
              cpu=10, memory=128, storage=100),

        # --- Runtime services -----------------------------------------------
        _node(_SERVICE, RuntimeServiceType.DATABASE, "Database",
              "Managed database service",
              (120, 80), set(), _PLATFORM, 200,
              cpu=100, memory=1024, storage=5000),
        _node(_SERVICE, RuntimeServiceType.CACHE, "Cache",
              "In-memory caching service",
              (100, 60), set(), _PLATFORM, 75,
              cpu=25, memory=512),
        _node(_SERVICE, RuntimeServiceType.QUEUE, "Message Queue",
              "Async job processing queue",
              (100, 60), set(), _PLATFORM, 50,
              cpu=25, memory=256),
        _node(_SERVICE, RuntimeServiceType.MONITORING, "Monitoring",
              "Metrics and observability service",
              (120, 60), set(), _PLATFORM, 100,
              cpu=50, memory=512, storage=1000),
        _node(_SERVICE, RuntimeServiceType.LOGGING, "Logging",
              "Centralized log aggregation",
              (120, 60), set(), _PLATFORM, 60,
              cpu=25, memory=256, storage=2000),
        _node(_SERVICE, RuntimeServiceType.AUTHENTICATION, "Auth Service",
              "Identity and access management",
              (100, 60), set(), _PLATFORM, 80,
              cpu=50, memory=256),

        # --- Applications ---------------------------------------------------
        _node(_APP, ApplicationType.WEB_APP, "Web Application",
              "Frontend web application",
              (80, 60), set(), _PLATFORM, 20,
              cpu=10, memory=128),
        _node(_APP, ApplicationType.API_SERVICE, "API Service",
              "Backend API microservice",
              (80, 60), set(), _PLATFORM, 30,
              cpu=25, memory=256),
        _node(_APP, ApplicationType.WORKER, "Worker Service",
              "Background job processor",
              (80, 60), set(), _PLATFORM, 40,
              cpu=50, memory=512),
        _node(_APP, ApplicationType.CRON_JOB, "Scheduled Job",
              "Periodic task runner",
              (60, 40), set(), _PLATFORM, 10,
              cpu=5, memory=64),
        _node(_APP, ApplicationType.FUNCTION, "Serverless Function",
              "Event-driven compute function",
              (60, 40), set(), _PLATFORM, 5,
              cpu=1, memory=128),
    ]
}

_ALL_NODE_TYPES = {member for enum_cls in NODE_TYPE_ENUMS for member in enum_cls}
assert set(NODE_TEMPLATES) == _ALL_NODE_TYPES, "every node type needs a template"


def get_node_template(node_type) -> Optional[NodeTemplate]:
    """Look up a template by node type enum member or string value."""
    resolved = resolve_node_type(node_type)
    if resolved is None:
        return None
    return NODE_TEMPLATES[resolved]


def get_templates_by_layer(layer: ComponentLayer) -> List[NodeTemplate]:
    return [t for t in NODE_TEMPLATES.values() if t.layer == layer]


def can_contain_layer(parent_type, child_layer: ComponentLayer) -> bool:
    template = get_node_template(parent_type)
    return template is not None and child_layer in template.can_contain
