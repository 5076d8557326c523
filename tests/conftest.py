"""
Test Configuration and Fixtures
================================

Shared pytest fixtures for the platform simulator.

Usage:
    pytest tests/                    # Run all tests
    pytest tests/ -v                 # Verbose output
    pytest tests/ -k "hierarchy"     # Run only hierarchy tests
    pytest tests/ --quick            # Skip slow tests
"""

import random
import sys
from pathlib import Path
from typing import Callable, Dict, List

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from platform_sim.adapters.outbound.schedulers import ManualScheduler
from platform_sim.application.ports.outbound.scheduler import IScheduler, ScheduledTask
from platform_sim.application.services import HierarchyStore, ScoringEngine
from platform_sim.domain.models import (
    ComponentConfig,
    ComponentMetrics,
    ComponentType,
    PlatformComponent,
)
from platform_sim.domain.services import CheckpointEvaluator


# =============================================================================
# Custom Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


def pytest_addoption(parser):
    """Add custom command line options"""
    parser.addoption(
        "--quick",
        action="store_true",
        default=False,
        help="Skip slow tests",
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow tests if --quick is specified"""
    if config.getoption("--quick"):
        skip_slow = pytest.mark.skip(reason="Skipped with --quick")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


# =============================================================================
# Test Doubles
# =============================================================================

class FixedRandom:
    """Random source whose draws are set by the test."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


class _IgnoredTask(ScheduledTask):

    def cancel(self) -> None:
        pass

    @property
    def cancelled(self) -> bool:
        return False


class NonCancellingScheduler(IScheduler):
    """Collects callbacks and ignores cancellation, so completions can race deletes."""

    def __init__(self):
        self.callbacks: List[Callable[[], None]] = []

    def schedule(self, delay, callback):
        self.callbacks.append(callback)
        return _IgnoredTask()

    def fire_all(self) -> None:
        callbacks, self.callbacks = self.callbacks, []
        for callback in callbacks:
            callback()


# =============================================================================
# Infrastructure Fixtures
# =============================================================================

@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def non_cancelling_scheduler() -> NonCancellingScheduler:
    return NonCancellingScheduler()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so checkpoint draws are reproducible."""
    return random.Random(1234)


@pytest.fixture
def fixed_rng() -> Callable[[float], FixedRandom]:
    """Factory: fixed_rng(0.9) always passes random checkpoints, 0.1 always fails."""
    return FixedRandom


# =============================================================================
# Scoring Fixtures
# =============================================================================

@pytest.fixture
def engine(scheduler, rng) -> ScoringEngine:
    return ScoringEngine(scheduler=scheduler, evaluator=CheckpointEvaluator(rng))


@pytest.fixture
def bare_api() -> PlatformComponent:
    """An API with every flag off and no rate limit."""
    return PlatformComponent(
        id="api-1",
        type=ComponentType.API,
        name="Bare API",
        config=ComponentConfig(),
        metrics=ComponentMetrics(),
    )


@pytest.fixture
def hardened_api() -> PlatformComponent:
    """An API that violates no rule."""
    return PlatformComponent(
        id="api-2",
        type=ComponentType.API,
        name="Hardened API",
        config=ComponentConfig.from_dict({
            "security": {"security_review": True, "encryption": True, "authorization": True},
            "reliability": {"health_checks": True, "monitoring": True},
            "rate_limit": 500,
        }),
        metrics=ComponentMetrics(cost=500, complexity=30),
    )


# =============================================================================
# Hierarchy Fixtures
# =============================================================================

@pytest.fixture
def store(scheduler) -> HierarchyStore:
    return HierarchyStore(scheduler=scheduler)


@pytest.fixture
def transitive_store(scheduler) -> HierarchyStore:
    return HierarchyStore(scheduler=scheduler, transitive_rollup=True)


def build_tree(store: HierarchyStore) -> Dict[str, str]:
    """
    region
      └── zone (compute cluster)
            └── k8s (kubernetes)
                  ├── web   (web app)
                  ├── api   (api service)
                  └── cron  (cron job)
    """
    ids = {}
    ids["region"] = store.add_node({"type": "region", "name": "us-east"})
    ids["zone"] = store.add_node({"type": "compute", "name": "us-east-1a"}, ids["region"])
    ids["k8s"] = store.add_node({"type": "kubernetes"}, ids["zone"])
    ids["web"] = store.add_node({"type": "webApp"}, ids["k8s"])
    ids["api"] = store.add_node({"type": "apiService"}, ids["k8s"])
    ids["cron"] = store.add_node({"type": "cronJob"}, ids["k8s"])
    assert all(ids.values()), f"tree construction failed: {ids}"
    return ids


@pytest.fixture
def tree(store) -> Dict[str, str]:
    return build_tree(store)


@pytest.fixture
def transitive_tree(transitive_store) -> Dict[str, str]:
    return build_tree(transitive_store)
