"""
Value Objects

Immutable-by-convention building blocks shared by components and nodes:
configuration flag groups, metric bundles, issue impacts and resource
quantities.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict, fields
from typing import Dict, Any, Optional


def _pick(cls, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Keep only keys that are fields of ``cls``."""
    if not data:
        return {}
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


# =============================================================================
# Component configuration
# =============================================================================

@dataclass
class SecurityConfig:
    encryption: bool = False
    authentication: bool = False
    authorization: bool = False
    input_validation: bool = False
    security_review: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SecurityConfig":
        return cls(**_pick(cls, data))


@dataclass
class PerformanceConfig:
    caching: bool = False
    compression: bool = False
    optimized_queries: bool = False
    load_balancing: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PerformanceConfig":
        return cls(**_pick(cls, data))


@dataclass
class ReliabilityConfig:
    health_checks: bool = False
    monitoring: bool = False
    backups: bool = False
    error_handling: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ReliabilityConfig":
        return cls(**_pick(cls, data))


@dataclass
class ComponentConfig:
    """
    Per-domain boolean toggles plus an optional request rate limit.

    A missing or zero ``rate_limit`` means no limit is configured.
    """
    security: SecurityConfig = field(default_factory=SecurityConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    reliability: ReliabilityConfig = field(default_factory=ReliabilityConfig)
    rate_limit: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ComponentConfig":
        data = data or {}
        return cls(
            security=SecurityConfig.from_dict(data.get("security")),
            performance=PerformanceConfig.from_dict(data.get("performance")),
            reliability=ReliabilityConfig.from_dict(data.get("reliability")),
            rate_limit=data.get("rate_limit"),
        )


@dataclass
class ComponentMetrics:
    """Per-component scores (0-100), monthly cost and complexity (0-100)."""
    performance: float = 60
    security: float = 60
    reliability: float = 60
    cost: float = 0
    complexity: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ComponentMetrics":
        return cls(**_pick(cls, data))


@dataclass
class IssueImpact:
    """Raw metric deltas of an issue, before severity weighting."""
    user_satisfaction: float = 0
    developer_velocity: float = 0
    security_score: float = 0
    performance_score: float = 0
    cost: float = 0

    def scaled(self, multiplier: float) -> "IssueImpact":
        return IssueImpact(
            user_satisfaction=self.user_satisfaction * multiplier,
            developer_velocity=self.developer_velocity * multiplier,
            security_score=self.security_score * multiplier,
            performance_score=self.performance_score * multiplier,
            cost=self.cost * multiplier,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "IssueImpact":
        return cls(**_pick(cls, data))


# =============================================================================
# Geometry
# =============================================================================

@dataclass
class Position:
    x: float = 100
    y: float = 100

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Position":
        return cls(**_pick(cls, data))


@dataclass
class Size:
    width: float = 100
    height: float = 100

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Size":
        return cls(**_pick(cls, data))


# =============================================================================
# Resources
# =============================================================================

@dataclass
class ResourceRequirements:
    """Static resource footprint: cpu (millicores), memory/storage (MB), network (Mbps)."""
    cpu: float = 0
    memory: float = 0
    storage: float = 0
    network: float = 0

    def times(self, factor: float) -> "ResourceRequirements":
        return ResourceRequirements(
            cpu=self.cpu * factor,
            memory=self.memory * factor,
            storage=self.storage * factor,
            network=self.network * factor,
        )

    def __add__(self, other: "ResourceRequirements") -> "ResourceRequirements":
        return ResourceRequirements(
            cpu=self.cpu + other.cpu,
            memory=self.memory + other.memory,
            storage=self.storage + other.storage,
            network=self.network + other.network,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ResourceRequirements":
        return cls(**_pick(cls, data))


@dataclass
class ResourceCapacity(ResourceRequirements):
    """
    Resource totals with allocation counters.

    Totals are fixed by the node template at creation. Allocated values are
    derived on read by the hierarchy store; the copy kept on a node record
    stays zero.
    """
    allocated_cpu: float = 0
    allocated_memory: float = 0
    allocated_storage: float = 0
    allocated_network: float = 0

    @property
    def available_cpu(self) -> float:
        return self.cpu - self.allocated_cpu

    @property
    def available_memory(self) -> float:
        return self.memory - self.allocated_memory

    @property
    def available_storage(self) -> float:
        return self.storage - self.allocated_storage

    @property
    def available_network(self) -> float:
        return self.network - self.allocated_network

    @property
    def utilization(self) -> float:
        """Highest allocated/total ratio across dimensions with capacity, in percent."""
        ratios = [
            allocated / total * 100
            for total, allocated in (
                (self.cpu, self.allocated_cpu),
                (self.memory, self.allocated_memory),
                (self.storage, self.allocated_storage),
                (self.network, self.allocated_network),
            )
            if total > 0
        ]
        return max(ratios) if ratios else 0.0

    def fits(self, requirement: ResourceRequirements) -> bool:
        """True when cpu, memory and storage all fit; network is not checked."""
        return (
            requirement.cpu <= self.available_cpu
            and requirement.memory <= self.available_memory
            and requirement.storage <= self.available_storage
        )

    def with_allocation(self, allocated: ResourceRequirements) -> "ResourceCapacity":
        return ResourceCapacity(
            cpu=self.cpu,
            memory=self.memory,
            storage=self.storage,
            network=self.network,
            allocated_cpu=allocated.cpu,
            allocated_memory=allocated.memory,
            allocated_storage=allocated.storage,
            allocated_network=allocated.network,
        )

    def totals(self) -> ResourceRequirements:
        return ResourceRequirements(
            cpu=self.cpu, memory=self.memory, storage=self.storage, network=self.network
        )

    @classmethod
    def unallocated(cls, totals: ResourceRequirements) -> "ResourceCapacity":
        return cls(
            cpu=totals.cpu,
            memory=totals.memory,
            storage=totals.storage,
            network=totals.network,
        )
