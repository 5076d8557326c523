"""
Issue Detector

Evaluates a pluggable list of policy rules against one component and
produces an Issue per violated rule. Rules are not de-duplicated against
issues already raised for the component: re-evaluating a still-violating
component yields fresh issues every time.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from platform_sim.domain.models.entities import Issue, PlatformComponent
from platform_sim.domain.models.enums import ComponentType, IssueSeverity, IssueType
from platform_sim.domain.models.value_objects import IssueImpact


def new_issue_id() -> str:
    return f"issue-{uuid.uuid4().hex[:9]}"


def make_issue(
    issue_type: IssueType,
    severity: IssueSeverity,
    title: str,
    description: str,
    component_id: str,
    impact: IssueImpact,
) -> Issue:
    """Build an Issue; time to resolve follows severity, cost follows impact."""
    return Issue(
        id=new_issue_id(),
        type=issue_type,
        severity=severity,
        title=title,
        description=description,
        component=component_id,
        impact=impact,
        time_to_resolve=severity.hours_to_resolve,
        cost=impact.cost,
    )


@dataclass(frozen=True)
class IssueRule:
    """
    A single policy check.

    Attributes:
        name:      Identifier used in logs
        predicate: True when the component VIOLATES the policy
        factory:   Builds the issue for a violating component
    """
    name: str
    predicate: Callable[[PlatformComponent], bool]
    factory: Callable[[PlatformComponent], Issue]


def _is_api(component: PlatformComponent) -> bool:
    return component.type == ComponentType.API


def _missing_security_review(component: PlatformComponent) -> bool:
    return _is_api(component) and not component.config.security.security_review


def _missing_rate_limit(component: PlatformComponent) -> bool:
    return _is_api(component) and not component.config.rate_limit


def _security_review_issue(component: PlatformComponent) -> Issue:
    return make_issue(
        IssueType.SECURITY,
        IssueSeverity.HIGH,
        "API without Security Review",
        "This API has not gone through security review, creating potential vulnerabilities.",
        component.id,
        IssueImpact(user_satisfaction=20, security_score=30, cost=50000),
    )


def _rate_limit_issue(component: PlatformComponent) -> Issue:
    return make_issue(
        IssueType.PERFORMANCE,
        IssueSeverity.MEDIUM,
        "No Rate Limiting",
        "API lacks rate limiting, potentially causing performance issues under load.",
        component.id,
        IssueImpact(
            user_satisfaction=15,
            developer_velocity=5,
            security_score=5,
            performance_score=25,
            cost=10000,
        ),
    )


DEFAULT_RULES: List[IssueRule] = [
    IssueRule("api-security-review", _missing_security_review, _security_review_issue),
    IssueRule("api-rate-limit", _missing_rate_limit, _rate_limit_issue),
]


class IssueDetector:
    """Runs every configured rule against a component, in rule order."""

    def __init__(self, rules: Optional[Sequence[IssueRule]] = None):
        self.rules: List[IssueRule] = list(DEFAULT_RULES if rules is None else rules)
        self.logger = logging.getLogger(__name__)

    def detect(self, component: PlatformComponent) -> List[Issue]:
        issues = []
        for rule in self.rules:
            if rule.predicate(component):
                self.logger.debug(f"Rule '{rule.name}' violated by {component.id}")
                issues.append(rule.factory(component))
        return issues
