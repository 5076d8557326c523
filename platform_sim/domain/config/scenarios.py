"""
Built-in Scenarios

Pre-built component sets with objectives. A scenario is loaded wholesale
into a fresh ScoringEngine by SimulationSession.load_scenario().
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from platform_sim.domain.config.component_templates import build_config
from platform_sim.domain.models.entities import PlatformComponent
from platform_sim.domain.models.enums import ComponentType, Difficulty
from platform_sim.domain.models.scenario import Scenario, ScenarioObjective
from platform_sim.domain.models.value_objects import ComponentMetrics, Position


def _component(
    cid: str,
    ctype: ComponentType,
    name: str,
    position: tuple,
    metrics: tuple,
    flags: Iterable[str] = (),
    rate_limit: Optional[int] = None,
) -> PlatformComponent:
    performance, security, reliability, cost, complexity = metrics
    return PlatformComponent(
        id=cid,
        type=ctype,
        name=name,
        position=Position(x=position[0], y=position[1]),
        config=build_config(flags, rate_limit),
        metrics=ComponentMetrics(
            performance=performance,
            security=security,
            reliability=reliability,
            cost=cost,
            complexity=complexity,
        ),
    )


def _objective(oid: str, description: str, metric: str, target: float, weight: float):
    return ScenarioObjective(
        id=oid,
        description=description,
        target_metric=metric,
        target_value=target,
        weight=weight,
    )


SCENARIOS: List[Scenario] = [
    Scenario(
        id="getting-started",
        title="Getting Started: Build Your First API",
        description=(
            "Learn the basics of platform development by building a simple API "
            "and understanding how it affects your metrics."
        ),
        difficulty=Difficulty.BEGINNER,
        objectives=[
            _objective("create-api", "Add a REST API component to your platform",
                       "performance_score", 60, 0.3),
            _objective("keep-security", "Maintain security score above 50%",
                       "security_score", 50, 0.3),
            _objective("user-satisfaction", "Achieve user satisfaction of at least 70%",
                       "user_satisfaction", 70, 0.4),
        ],
        time_limit=15,
        budget=2000,
    ),
    Scenario(
        id="security-crisis",
        title="Security Crisis: Secure Your Platform",
        description=(
            "Your platform has security vulnerabilities! Learn how to implement "
            "proper security measures and pass security reviews."
        ),
        difficulty=Difficulty.INTERMEDIATE,
        initial_components=[
            _component("vulnerable-api", ComponentType.API, "Vulnerable API",
                       (200, 150), (60, 20, 40, 500, 30), rate_limit=10000),
        ],
        objectives=[
            _objective("fix-security", "Achieve security score above 80%",
                       "security_score", 80, 0.5),
            _objective("pass-security-review", "Pass security review checkpoint",
                       "user_satisfaction", 75, 0.3),
            _objective("maintain-performance", "Keep performance score above 65%",
                       "performance_score", 65, 0.2),
        ],
        time_limit=25,
        budget=5000,
    ),
    Scenario(
        id="scaling-challenge",
        title="Scaling Challenge: Handle the Traffic Spike",
        description=(
            "Your platform is getting popular! Learn how to scale your "
            "infrastructure to handle increased traffic while maintaining performance."
        ),
        difficulty=Difficulty.INTERMEDIATE,
        initial_components=[
            _component("basic-api", ComponentType.API, "Basic API",
                       (150, 100), (45, 80, 55, 500, 30),
                       flags={"encryption", "authentication", "input_validation",
                              "security_review", "error_handling"},
                       rate_limit=100),
            _component("basic-db", ComponentType.DATABASE, "Database",
                       (150, 250), (50, 60, 70, 800, 40),
                       flags={"authentication", "backups"}),
        ],
        objectives=[
            _objective("improve-performance", "Achieve performance score above 85%",
                       "performance_score", 85, 0.4),
            _objective("high-user-satisfaction", "Reach user satisfaction of 85%",
                       "user_satisfaction", 85, 0.3),
            _objective("control-costs", "Keep monthly costs under $3000",
                       "total_cost", 3000, 0.3),
        ],
        time_limit=30,
        budget=4000,
    ),
    Scenario(
        id="enterprise-platform",
        title="Enterprise Platform: Build for Scale",
        description=(
            "Build a comprehensive enterprise platform with all the bells and "
            "whistles - monitoring, caching, load balancing, and more!"
        ),
        difficulty=Difficulty.ADVANCED,
        objectives=[
            _objective("comprehensive-architecture", "Deploy at least 6 different component types",
                       "performance_score", 90, 0.2),
            _objective("excellent-performance", "Achieve performance score above 90%",
                       "performance_score", 90, 0.25),
            _objective("top-security", "Maintain security score above 95%",
                       "security_score", 95, 0.25),
            _objective("high-reliability", "Achieve user satisfaction above 90%",
                       "user_satisfaction", 90, 0.2),
            _objective("low-tech-debt", "Keep technical debt below 15%",
                       "technical_debt", 15, 0.1),
        ],
        time_limit=45,
        budget=10000,
    ),
    Scenario(
        id="cost-optimization",
        title="Cost Optimization: Do More with Less",
        description=(
            "You have budget constraints! Build an effective platform while "
            "keeping costs under control."
        ),
        difficulty=Difficulty.INTERMEDIATE,
        objectives=[
            _objective("performance-target", "Achieve performance score above 75%",
                       "performance_score", 75, 0.3),
            _objective("security-target", "Maintain security score above 70%",
                       "security_score", 70, 0.3),
            _objective("strict-budget", "Keep monthly costs under $1500",
                       "total_cost", 1500, 0.4),
        ],
        time_limit=20,
        budget=2500,
    ),
    Scenario(
        id="incident-response",
        title="Incident Response: Fix the Outage",
        description=(
            "Your platform is down! Multiple critical issues need immediate "
            "attention. Learn to prioritize and resolve problems quickly."
        ),
        difficulty=Difficulty.ADVANCED,
        initial_components=[
            _component("failing-api", ComponentType.API, "Failing API",
                       (100, 100), (25, 20, 30, 500, 60), rate_limit=50),
            _component("unstable-db", ComponentType.DATABASE, "Unstable Database",
                       (300, 150), (30, 25, 20, 800, 70)),
        ],
        objectives=[
            _objective("restore-service", "Restore user satisfaction above 60%",
                       "user_satisfaction", 60, 0.4),
            _objective("improve-reliability", "Bring performance score above 70%",
                       "performance_score", 70, 0.3),
            _objective("quick-recovery", "Recover developer velocity to 50%",
                       "developer_velocity", 50, 0.3),
        ],
        time_limit=20,
        budget=3000,
    ),
]

SCENARIOS_BY_ID: Dict[str, Scenario] = {s.id: s for s in SCENARIOS}


def get_scenario(scenario_id: str) -> Optional[Scenario]:
    return SCENARIOS_BY_ID.get(scenario_id)


def get_scenarios_by_difficulty(difficulty: Difficulty) -> List[Scenario]:
    return [s for s in SCENARIOS if s.difficulty == Difficulty(difficulty)]
