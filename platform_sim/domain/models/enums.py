from enum import Enum
from typing import Dict, Optional


class ComponentType(str, Enum):
    """Flat platform building blocks scored by the ScoringEngine."""
    API = "api"
    DATABASE = "database"
    LOAD_BALANCER = "loadBalancer"
    CACHE = "cache"
    AUTH_SERVICE = "authService"
    MONITORING = "monitoring"
    CDN = "cdn"
    QUEUE = "queue"
    MICROSERVICE = "microservice"
    FRONTEND = "frontend"


class ComponentCategory(str, Enum):
    INFRASTRUCTURE = "infrastructure"
    APPLICATION = "application"
    SECURITY = "security"
    MONITORING = "monitoring"


class IssueType(str, Enum):
    SECURITY = "security"
    PERFORMANCE = "performance"
    RELIABILITY = "reliability"
    COMPLIANCE = "compliance"
    SCALABILITY = "scalability"
    TECHNICAL_DEBT = "technicalDebt"

    @property
    def resolution_strategy(self) -> str:
        """Suggested remediation shown next to an issue of this type."""
        return _RESOLUTION_STRATEGIES[self]


_RESOLUTION_STRATEGIES: Dict[IssueType, str] = {
    IssueType.SECURITY: (
        "Implement security review process, add encryption, enable "
        "authentication, and conduct vulnerability assessment."
    ),
    IssueType.PERFORMANCE: (
        "Enable caching, add compression, implement load balancing, and "
        "optimize queries for better response times."
    ),
    IssueType.RELIABILITY: (
        "Add health checks, implement monitoring, set up backups, and "
        "improve error handling mechanisms."
    ),
    IssueType.COMPLIANCE: (
        "Review compliance requirements, update privacy policies, implement "
        "audit trails, and ensure regulatory adherence."
    ),
    IssueType.SCALABILITY: (
        "Implement horizontal scaling, add load balancing, optimize resource "
        "utilization, and plan capacity growth."
    ),
    IssueType.TECHNICAL_DEBT: (
        "Refactor legacy code, improve documentation, add unit tests, and "
        "modernize deprecated dependencies."
    ),
}


class IssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def multiplier(self) -> float:
        """Factor applied to an issue's raw impact during aggregation."""
        return {"low": 0.5, "medium": 1.0, "high": 2.0, "critical": 4.0}[self.value]

    @property
    def hours_to_resolve(self) -> int:
        return {"low": 4, "medium": 8, "high": 24, "critical": 72}[self.value]

    @property
    def priority(self) -> int:
        """Numeric priority for sorting (higher = more urgent)."""
        return {"low": 1, "medium": 2, "high": 3, "critical": 4}[self.value]


class CheckpointType(str, Enum):
    SECURITY_REVIEW = "securityReview"
    ENGINEERING_REVIEW = "engineeringReview"
    COMPLIANCE_CHECK = "complianceCheck"
    RELIABILITY_TEST = "reliabilityTest"
    ETHICS_REVIEW = "ethicsReview"
    LEGAL_REVIEW = "legalReview"


# ---------------------------------------------------------------------------
# Hierarchy side
# ---------------------------------------------------------------------------

class ComponentLayer(str, Enum):
    """Containment tiers of the platform hierarchy."""
    INFRASTRUCTURE = "infrastructure"
    PLATFORM = "platform"
    SERVICE = "service"
    APPLICATION = "application"


class InfrastructureType(str, Enum):
    COMPUTE = "compute"
    NETWORK = "network"
    STORAGE = "storage"
    REGION = "region"


class PlatformServiceType(str, Enum):
    KUBERNETES = "kubernetes"
    CONTAINER_REGISTRY = "containerRegistry"
    API_GATEWAY = "apiGateway"
    SERVICE_MESH = "serviceMesh"
    MESSAGE_BUS = "messageBus"
    SECRETS_MANAGER = "secretsManager"


class RuntimeServiceType(str, Enum):
    DATABASE = "database"
    CACHE = "cache"
    QUEUE = "queue"
    MONITORING = "monitoring"
    LOGGING = "logging"
    AUTHENTICATION = "authentication"


class ApplicationType(str, Enum):
    WEB_APP = "webApp"
    API_SERVICE = "apiService"
    WORKER = "worker"
    CRON_JOB = "cronJob"
    FUNCTION = "function"


NODE_TYPE_ENUMS = (InfrastructureType, PlatformServiceType, RuntimeServiceType, ApplicationType)


def resolve_node_type(value) -> Optional[Enum]:
    """
    Resolve a node type given as an enum member or its string value.

    Returns None when the value names no known node type.
    """
    if isinstance(value, NODE_TYPE_ENUMS):
        return value
    if not isinstance(value, str):
        return None
    for enum_cls in NODE_TYPE_ENUMS:
        try:
            return enum_cls(value)
        except ValueError:
            continue
    return None


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def score(self) -> int:
        return {"healthy": 100, "degraded": 50, "unhealthy": 0}[self.value]


class DeploymentStatus(str, Enum):
    PENDING = "pending"
    DEPLOYING = "deploying"
    RUNNING = "running"
    FAILED = "failed"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class PlacementRejection(str, Enum):
    """Why a node could not be placed in the hierarchy."""
    MISSING_TEMPLATE = "missing_template"
    MISSING_PARENT = "missing_parent"
    PARENT_REQUIRED = "parent_required"
    CONTAINMENT = "containment"
    CAPACITY = "capacity"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
