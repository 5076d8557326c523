"""
Component Templates

Static lookup table keyed by ComponentType. Each template supplies the
default configuration seeded on palette-drop, the baseline metrics (only
``cost`` and ``complexity`` survive metric derivation) and a palette
category.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional

from platform_sim.domain.models.enums import ComponentType, ComponentCategory
from platform_sim.domain.models.value_objects import (
    ComponentConfig,
    ComponentMetrics,
    SecurityConfig,
    PerformanceConfig,
    ReliabilityConfig,
)


@dataclass(frozen=True)
class ComponentTemplate:
    type: ComponentType
    name: str
    description: str
    category: ComponentCategory
    enabled_flags: FrozenSet[str]
    base_metrics: ComponentMetrics
    rate_limit: Optional[int] = None

    def default_config(self) -> ComponentConfig:
        """Fresh, caller-owned default configuration."""
        return build_config(self.enabled_flags, self.rate_limit)


def build_config(enabled: Iterable[str], rate_limit: Optional[int]) -> ComponentConfig:
    enabled = set(enabled)

    def group(cls):
        return cls(**{name: name in enabled for name in cls.__dataclass_fields__})

    return ComponentConfig(
        security=group(SecurityConfig),
        performance=group(PerformanceConfig),
        reliability=group(ReliabilityConfig),
        rate_limit=rate_limit,
    )


def _template(
    ctype: ComponentType,
    name: str,
    description: str,
    category: ComponentCategory,
    metrics: tuple,
    flags: Iterable[str] = (),
    rate_limit: Optional[int] = None,
) -> ComponentTemplate:
    performance, security, reliability, cost, complexity = metrics
    return ComponentTemplate(
        type=ctype,
        name=name,
        description=description,
        category=category,
        enabled_flags=frozenset(flags),
        base_metrics=ComponentMetrics(
            performance=performance,
            security=security,
            reliability=reliability,
            cost=cost,
            complexity=complexity,
        ),
        rate_limit=rate_limit,
    )


# metrics tuple order: (performance, security, reliability, cost, complexity)
COMPONENT_TEMPLATES: Dict[ComponentType, ComponentTemplate] = {
    t.type: t for t in [
        _template(
            ComponentType.API, "REST API",
            "HTTP API endpoint for client communication",
            ComponentCategory.APPLICATION, (60, 40, 50, 500, 30),
            rate_limit=1000,
        ),
        _template(
            ComponentType.DATABASE, "Database",
            "Primary data storage system",
            ComponentCategory.INFRASTRUCTURE, (70, 60, 80, 800, 40),
            flags={"authentication"},
        ),
        _template(
            ComponentType.LOAD_BALANCER, "Load Balancer",
            "Distributes traffic across multiple servers",
            ComponentCategory.INFRASTRUCTURE, (85, 50, 90, 300, 25),
            flags={"load_balancing", "health_checks", "error_handling"},
        ),
        _template(
            ComponentType.CACHE, "Cache Layer",
            "In-memory data storage for fast access",
            ComponentCategory.INFRASTRUCTURE, (95, 40, 60, 200, 20),
            flags={"caching"},
        ),
        _template(
            ComponentType.AUTH_SERVICE, "Authentication Service",
            "User authentication and authorization",
            ComponentCategory.SECURITY, (70, 90, 85, 400, 50),
            flags={
                "encryption", "authentication", "authorization", "input_validation",
                "backups", "error_handling",
            },
        ),
        _template(
            ComponentType.MONITORING, "Monitoring System",
            "Application and infrastructure monitoring",
            ComponentCategory.MONITORING, (60, 60, 95, 150, 30),
            flags={
                "authentication", "compression",
                "health_checks", "monitoring", "backups", "error_handling",
            },
        ),
        _template(
            ComponentType.CDN, "Content Delivery Network",
            "Global content distribution and caching",
            ComponentCategory.INFRASTRUCTURE, (90, 70, 85, 250, 20),
            flags={
                "encryption", "caching", "compression", "load_balancing",
                "health_checks", "error_handling",
            },
        ),
        _template(
            ComponentType.QUEUE, "Message Queue",
            "Asynchronous message processing",
            ComponentCategory.INFRASTRUCTURE, (75, 45, 80, 180, 35),
            flags={"backups", "error_handling"},
        ),
        _template(
            ComponentType.MICROSERVICE, "Microservice",
            "Independent service component",
            ComponentCategory.APPLICATION, (65, 50, 60, 350, 45),
        ),
        _template(
            ComponentType.FRONTEND, "Frontend Application",
            "User-facing web application",
            ComponentCategory.APPLICATION, (70, 60, 70, 120, 40),
            flags={"input_validation", "error_handling"},
        ),
    ]
}

assert set(COMPONENT_TEMPLATES) == set(ComponentType), "every ComponentType needs a template"


def get_component_template(ctype) -> Optional[ComponentTemplate]:
    """Look up a template by ComponentType or its string value."""
    try:
        return COMPONENT_TEMPLATES[ComponentType(ctype)]
    except ValueError:
        return None


def get_templates_by_category(category: ComponentCategory) -> List[ComponentTemplate]:
    return [t for t in COMPONENT_TEMPLATES.values() if t.category == category]
