"""
Scoring Engine

Owns the flat component list, the active issues and simulated time, and
keeps the global metrics in step with them.

Architecture:
    SimulationSession / CLI
      └── ScoringEngine              ← this module
            ├── derive_component_metrics   (domain service)
            ├── IssueDetector              (domain service)
            ├── aggregate_global_metrics   (domain service)
            ├── CheckpointEvaluator        (domain service)
            └── IScheduler                 (outbound port, delayed fixes)

Mutation order:
    add     append → derive own metrics → detect issues → aggregate → notify
    update  merge → derive own metrics → detect issues → aggregate → notify
    remove  drop component, its issues and inbound connections → aggregate → notify
    resolve drop issue, advance time by hours/24 → aggregate → notify
"""

from __future__ import annotations

import copy
import logging
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional

from platform_sim.application.ports.inbound.scoring_port import IScoringUseCase
from platform_sim.application.ports.outbound.scheduler import IScheduler, ScheduledTask
from platform_sim.application.services.subscribers import SubscriberList
from platform_sim.domain.models import (
    CheckpointType,
    ComponentConfig,
    ComponentMetrics,
    ComponentType,
    GlobalMetrics,
    DEFAULT_GLOBAL_METRICS,
    Issue,
    IssueSeverity,
    IssueSummary,
    IssueType,
    PlatformComponent,
    Position,
    SecRelCheckpoint,
    SimulationState,
)
from platform_sim.domain.services import (
    CheckpointEvaluator,
    IssueDetector,
    aggregate_global_metrics,
    derive_component_metrics,
)


def _merge_dict(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_dict(merged[key], value)
        else:
            merged[key] = value
    return merged


class ScoringEngine(IScoringUseCase):
    """
    Stateful scoring engine for one session.

    Operations on unknown ids are silent no-ops. Snapshots handed to
    subscribers and returned by ``get_state`` are deep copies.
    """

    DEFAULT_ISSUE_RESOLUTION_SECONDS = 1.5

    # Fields a partial update may not touch
    _PROTECTED_FIELDS = frozenset({"id", "issues"})

    def __init__(
        self,
        components: Optional[Iterable[PlatformComponent]] = None,
        scheduler: Optional[IScheduler] = None,
        detector: Optional[IssueDetector] = None,
        evaluator: Optional[CheckpointEvaluator] = None,
        issue_resolution_seconds: float = DEFAULT_ISSUE_RESOLUTION_SECONDS,
        total_time: float = 0.0,
    ):
        self.scheduler = scheduler
        self.detector = detector or IssueDetector()
        self.evaluator = evaluator or CheckpointEvaluator()
        self.issue_resolution_seconds = issue_resolution_seconds
        self.logger = logging.getLogger(__name__)

        self._components: List[PlatformComponent] = [
            copy.deepcopy(c) for c in (components or [])
        ]
        self._issues: List[Issue] = []
        self._metrics: GlobalMetrics = DEFAULT_GLOBAL_METRICS
        self._total_time = float(total_time)
        self._subscribers: SubscriberList[SimulationState] = SubscriberList("ScoringEngine")
        self._pending_resolutions: Dict[str, List[ScheduledTask]] = {}

    # =========================================================================
    # Observation
    # =========================================================================

    def subscribe(self, callback: Callable[[SimulationState], None]) -> Callable[[], None]:
        return self._subscribers.add(callback)

    def get_state(self) -> SimulationState:
        return SimulationState(
            components=tuple(copy.deepcopy(self._components)),
            metrics=self._metrics,
            issues=tuple(copy.deepcopy(self._issues)),
            total_time=self._total_time,
        )

    @property
    def metrics(self) -> GlobalMetrics:
        return self._metrics

    @property
    def total_time(self) -> float:
        return self._total_time

    @property
    def resolving_issue_ids(self) -> frozenset:
        return frozenset(self._pending_resolutions)

    def get_component(self, component_id: str) -> Optional[PlatformComponent]:
        component = self._find(component_id)
        return copy.deepcopy(component) if component else None

    # =========================================================================
    # Component Mutations
    # =========================================================================

    def add_component(self, component: PlatformComponent) -> None:
        """Add a component; the engine keeps its own copy."""
        component = copy.deepcopy(component)
        component.issues = []
        self._components.append(component)

        self._derive(component)
        self._detect(component)
        self._aggregate()

        self.logger.info(
            f"Added component {component.id} ({component.type.value}), "
            f"{len(component.issues)} issue(s) raised"
        )
        self._notify()

    def update_component(self, component_id: str, updates: Dict[str, Any]) -> None:
        component = self._find(component_id)
        if component is None:
            self.logger.debug(f"update_component: unknown component {component_id}")
            return

        for key, value in updates.items():
            if key in self._PROTECTED_FIELDS:
                self.logger.debug(f"update_component: ignoring protected field '{key}'")
                continue
            if key == "config":
                component.config = self._merged_config(component.config, value)
            elif key == "metrics" and isinstance(value, dict):
                component.metrics = ComponentMetrics.from_dict(
                    _merge_dict(component.metrics.to_dict(), value)
                )
            elif key == "position" and isinstance(value, dict):
                component.position = Position.from_dict(value)
            elif key == "connections":
                component.connections = list(value)
            elif key == "type":
                try:
                    component.type = ComponentType(value)
                except ValueError:
                    self.logger.debug(f"update_component: ignoring unknown type {value!r}")
            elif hasattr(component, key):
                setattr(component, key, value)
            else:
                self.logger.debug(f"update_component: ignoring unknown field '{key}'")

        self._derive(component)
        self._detect(component)
        self._aggregate()
        self._notify()

    def remove_component(self, component_id: str) -> None:
        if self._find(component_id) is None:
            self.logger.debug(f"remove_component: unknown component {component_id}")
            return

        self._components = [c for c in self._components if c.id != component_id]

        dropped = [i for i in self._issues if i.component == component_id]
        self._issues = [i for i in self._issues if i.component != component_id]
        for issue in dropped:
            self._cancel_resolution(issue.id)

        for other in self._components:
            if component_id in other.connections:
                other.connections = [cid for cid in other.connections if cid != component_id]

        self._aggregate()
        self.logger.info(
            f"Removed component {component_id} and {len(dropped)} issue(s)"
        )
        self._notify()

    def connect_components(self, source_id: str, target_id: str) -> bool:
        """Add a directed connection; False when either end is unknown."""
        source = self._find(source_id)
        if source is None or self._find(target_id) is None or source_id == target_id:
            return False
        if target_id not in source.connections:
            source.connections.append(target_id)
            self._notify()
        return True

    def disconnect_components(self, source_id: str, target_id: str) -> bool:
        source = self._find(source_id)
        if source is None or target_id not in source.connections:
            return False
        source.connections.remove(target_id)
        self._notify()
        return True

    # =========================================================================
    # Issues
    # =========================================================================

    def resolve_issue(self, issue_id: str) -> None:
        issue = self._find_issue(issue_id)
        if issue is None:
            self.logger.debug(f"resolve_issue: unknown issue {issue_id}")
            return

        self._issues = [i for i in self._issues if i.id != issue_id]
        self._cancel_resolution(issue_id)
        self._total_time += issue.time_to_resolve / 24

        component = self._find(issue.component)
        if component is not None:
            self._sync_issues(component)

        self._aggregate()
        self.logger.info(
            f"Resolved issue '{issue.title}' on {issue.component} "
            f"(+{issue.time_to_resolve / 24:.2f} days)"
        )
        self._notify()

    def begin_issue_resolution(self, issue_id: str) -> bool:
        """
        Start a delayed fix of an issue.

        The fix lands after ``issue_resolution_seconds``; by then the issue
        may already be gone, in which case the completion does nothing.
        Without a scheduler the fix is applied at once.

        Returns:
            False when the issue does not exist
        """
        if self._find_issue(issue_id) is None:
            return False

        if self.scheduler is None:
            self.resolve_issue(issue_id)
            return True

        task_holder: List[ScheduledTask] = []

        def complete() -> None:
            tasks = self._pending_resolutions.get(issue_id, [])
            for task in task_holder:
                if task in tasks:
                    tasks.remove(task)
            if not tasks:
                self._pending_resolutions.pop(issue_id, None)
            self.resolve_issue(issue_id)

        task = self.scheduler.schedule(self.issue_resolution_seconds, complete)
        task_holder.append(task)
        self._pending_resolutions.setdefault(issue_id, []).append(task)
        self.logger.debug(f"Scheduled resolution of issue {issue_id}")
        return True

    def cancel_pending(self) -> None:
        """Cancel every in-flight delayed resolution."""
        for issue_id in list(self._pending_resolutions):
            self._cancel_resolution(issue_id)

    def summarize_issues(self) -> IssueSummary:
        by_severity = Counter(i.severity.value for i in self._issues)
        by_type = Counter(i.type.value for i in self._issues)
        return IssueSummary(
            total_issues=len(self._issues),
            by_severity={s.value: by_severity.get(s.value, 0) for s in IssueSeverity},
            by_type={t.value: by_type.get(t.value, 0) for t in IssueType},
            affected_components=len({i.component for i in self._issues}),
            total_resolution_hours=sum(i.time_to_resolve for i in self._issues),
            total_resolution_cost=sum(i.cost for i in self._issues),
        )

    # =========================================================================
    # Checkpoints
    # =========================================================================

    def create_secrel_checkpoint(
        self, checkpoint_type: CheckpointType, component: PlatformComponent
    ) -> SecRelCheckpoint:
        return self.evaluator.evaluate(checkpoint_type, component)

    # =========================================================================
    # Bulk
    # =========================================================================

    def refresh(self) -> None:
        """
        Derive metrics and detect issues for every component, then aggregate.

        Used once after a scenario's components are loaded wholesale.
        """
        for component in self._components:
            self._derive(component)
            self._detect(component)
        self._aggregate()
        self._notify()

    # =========================================================================
    # Internals
    # =========================================================================

    def _find(self, component_id: str) -> Optional[PlatformComponent]:
        return next((c for c in self._components if c.id == component_id), None)

    def _find_issue(self, issue_id: str) -> Optional[Issue]:
        return next((i for i in self._issues if i.id == issue_id), None)

    @staticmethod
    def _merged_config(current: ComponentConfig, value: Any) -> ComponentConfig:
        if isinstance(value, ComponentConfig):
            return copy.deepcopy(value)
        return ComponentConfig.from_dict(_merge_dict(current.to_dict(), dict(value or {})))

    def _derive(self, component: PlatformComponent) -> None:
        component.metrics = derive_component_metrics(component.config, component.metrics)

    def _detect(self, component: PlatformComponent) -> None:
        self._issues.extend(self.detector.detect(component))
        self._sync_issues(component)

    def _sync_issues(self, component: PlatformComponent) -> None:
        component.issues = [i for i in self._issues if i.component == component.id]

    def _aggregate(self) -> None:
        self._metrics = aggregate_global_metrics(
            self._components, self._issues, self._total_time
        )

    def _cancel_resolution(self, issue_id: str) -> None:
        for task in self._pending_resolutions.pop(issue_id, []):
            task.cancel()

    def _notify(self) -> None:
        self._subscribers.notify(self.get_state())
