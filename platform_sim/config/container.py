"""
Dependency Injection Container

Wires ports to adapters and hands out one set of engines per container.
"""

import random
from dataclasses import dataclass, field
from typing import Optional

from .settings import Settings

from platform_sim.application.ports.outbound.scheduler import IScheduler
from platform_sim.application.services.checkpoint_pipeline import CheckpointPipeline
from platform_sim.application.services.hierarchy_store import HierarchyStore
from platform_sim.application.services.session import SimulationSession
from platform_sim.adapters.outbound.schedulers import ManualScheduler
from platform_sim.adapters.outbound.console_reporter import ConsoleReporter


@dataclass
class Container:
    """
    Dependency injection container.

    The scheduler defaults to a ManualScheduler so delayed completions only
    happen when the caller advances the clock.
    """
    settings: Settings = field(default_factory=Settings)

    _scheduler: Optional[IScheduler] = field(default=None, repr=False)
    _rng: Optional[random.Random] = field(default=None, repr=False)
    _session: Optional[SimulationSession] = field(default=None, repr=False)
    _hierarchy: Optional[HierarchyStore] = field(default=None, repr=False)

    @classmethod
    def from_settings(cls, settings: Settings, scheduler: Optional[IScheduler] = None) -> "Container":
        return cls(settings=settings, _scheduler=scheduler)

    def scheduler(self) -> IScheduler:
        if self._scheduler is None:
            self._scheduler = ManualScheduler()
        return self._scheduler

    def rng(self) -> random.Random:
        if self._rng is None:
            self._rng = random.Random(self.settings.random_seed)
        return self._rng

    def session(self) -> SimulationSession:
        """Get the simulation session singleton."""
        if self._session is None:
            self._session = SimulationSession(
                scheduler=self.scheduler(),
                rng=self.rng(),
                issue_resolution_seconds=self.settings.issue_resolution_seconds,
                check_seconds=self.settings.check_seconds,
            )
        return self._session

    def checkpoint_pipeline(self) -> CheckpointPipeline:
        return self.session().checkpoints

    def hierarchy_store(self) -> HierarchyStore:
        """Get the hierarchy store singleton."""
        if self._hierarchy is None:
            self._hierarchy = HierarchyStore(
                scheduler=self.scheduler(),
                deployment_settle_seconds=self.settings.deployment_settle_seconds,
                transitive_rollup=self.settings.transitive_rollup,
            )
        return self._hierarchy

    def display_service(self, use_color: bool = True) -> ConsoleReporter:
        return ConsoleReporter(use_color=use_color)

    def close(self) -> None:
        """Cancel anything still pending."""
        if self._session is not None:
            self._session.engine.cancel_pending()
            self._session.checkpoints.reset()
