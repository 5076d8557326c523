"""
Checkpoint Evaluator

Evaluates one of the six governance gates against a component and returns
a SecRelCheckpoint with pass/fail and the impact of failing.

Predicates:
    securityReview     config.security.security_review
    engineeringReview  metrics.performance > 70 and metrics.reliability > 70
    complianceCheck    config.security.encryption and .authorization
    reliabilityTest    config.reliability.health_checks and .monitoring
    ethicsReview       random draw, passes 70% of the time
    legalReview        random draw, passes 70% of the time

The random source is injected so callers can seed it.
"""

from __future__ import annotations

import random
import uuid
from typing import Callable, Dict, List, Optional

from platform_sim.domain.models.entities import PlatformComponent, SecRelCheckpoint
from platform_sim.domain.models.enums import CheckpointType
from platform_sim.domain.models.value_objects import IssueImpact

RANDOM_PASS_THRESHOLD = 0.3

CHECKPOINT_NAMES: Dict[CheckpointType, str] = {
    CheckpointType.SECURITY_REVIEW: "Security Review",
    CheckpointType.ENGINEERING_REVIEW: "Engineering Review",
    CheckpointType.COMPLIANCE_CHECK: "Compliance Check",
    CheckpointType.RELIABILITY_TEST: "Reliability Test",
    CheckpointType.ETHICS_REVIEW: "Ethics Review",
    CheckpointType.LEGAL_REVIEW: "Legal Review",
}

CHECKPOINT_REQUIREMENTS: Dict[CheckpointType, List[str]] = {
    CheckpointType.SECURITY_REVIEW: [
        "Security architecture review", "Vulnerability assessment", "Access control validation",
    ],
    CheckpointType.ENGINEERING_REVIEW: [
        "Code quality check", "Performance benchmarks", "Scalability assessment",
    ],
    CheckpointType.COMPLIANCE_CHECK: [
        "Data privacy compliance", "Regulatory requirements", "Audit trail setup",
    ],
    CheckpointType.RELIABILITY_TEST: [
        "Load testing", "Failure scenario testing", "Recovery procedures",
    ],
    CheckpointType.ETHICS_REVIEW: [
        "Bias assessment", "Privacy impact analysis", "Fairness evaluation",
    ],
    CheckpointType.LEGAL_REVIEW: [
        "Terms of service", "Privacy policy", "Intellectual property clearance",
    ],
}

# Impact of a failed checkpoint; types not listed use DEFAULT_FAILURE_IMPACT.
FAILURE_IMPACTS: Dict[CheckpointType, IssueImpact] = {
    CheckpointType.SECURITY_REVIEW: IssueImpact(
        user_satisfaction=25, developer_velocity=10, security_score=40,
        performance_score=5, cost=100000,
    ),
    CheckpointType.ENGINEERING_REVIEW: IssueImpact(
        user_satisfaction=15, developer_velocity=30, security_score=5,
        performance_score=25, cost=75000,
    ),
}
DEFAULT_FAILURE_IMPACT = IssueImpact(
    user_satisfaction=10, developer_velocity=5, security_score=10,
    performance_score=5, cost=25000,
)


def new_checkpoint_id() -> str:
    return f"checkpoint-{uuid.uuid4().hex[:9]}"


def checkpoint_impact(checkpoint_type: CheckpointType, passed: bool) -> IssueImpact:
    if passed:
        return IssueImpact()
    return FAILURE_IMPACTS.get(checkpoint_type, DEFAULT_FAILURE_IMPACT)


class CheckpointEvaluator:
    """Pure evaluation of governance gates; never mutates the component."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self._predicates: Dict[CheckpointType, Callable[[PlatformComponent], bool]] = {
            CheckpointType.SECURITY_REVIEW: lambda c: bool(c.config.security.security_review),
            CheckpointType.ENGINEERING_REVIEW: lambda c: (
                c.metrics.performance > 70 and c.metrics.reliability > 70
            ),
            CheckpointType.COMPLIANCE_CHECK: lambda c: bool(
                c.config.security.encryption and c.config.security.authorization
            ),
            CheckpointType.RELIABILITY_TEST: lambda c: bool(
                c.config.reliability.health_checks and c.config.reliability.monitoring
            ),
            CheckpointType.ETHICS_REVIEW: lambda c: self.random_draw(),
            CheckpointType.LEGAL_REVIEW: lambda c: self.random_draw(),
        }

    def random_draw(self) -> bool:
        return self.rng.random() > RANDOM_PASS_THRESHOLD

    def passes(self, checkpoint_type: CheckpointType, component: PlatformComponent) -> bool:
        return self._predicates[CheckpointType(checkpoint_type)](component)

    def evaluate(
        self,
        checkpoint_type: CheckpointType,
        component: PlatformComponent,
    ) -> SecRelCheckpoint:
        checkpoint_type = CheckpointType(checkpoint_type)
        passed = self.passes(checkpoint_type, component)
        return SecRelCheckpoint(
            id=new_checkpoint_id(),
            name=CHECKPOINT_NAMES[checkpoint_type],
            type=checkpoint_type,
            required=True,
            passed=passed,
            impact=checkpoint_impact(checkpoint_type, passed),
            requirements=list(CHECKPOINT_REQUIREMENTS[checkpoint_type]),
            component=component.id,
        )
