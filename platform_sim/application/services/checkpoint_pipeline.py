"""
Checkpoint Pipeline

Keeps one governance checkpoint per (component, checkpoint type) and lets a
user re-run a single check. A re-run redraws the outcome at random after a
fixed delay, like a real test suite finishing later.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from platform_sim.application.ports.outbound.scheduler import IScheduler, ScheduledTask
from platform_sim.domain.models import CheckpointType, PlatformComponent, SecRelCheckpoint
from platform_sim.domain.services import CHECKPOINT_NAMES, CheckpointEvaluator, checkpoint_impact


class CheckpointPipeline:
    """Checkpoint board for the components of one scoring engine."""

    DEFAULT_CHECK_SECONDS = 2.0

    # outcomes that come from a random draw rather than the component
    DRAWN_TYPES = frozenset({CheckpointType.ETHICS_REVIEW, CheckpointType.LEGAL_REVIEW})

    def __init__(
        self,
        evaluator: Optional[CheckpointEvaluator] = None,
        scheduler: Optional[IScheduler] = None,
        check_seconds: float = DEFAULT_CHECK_SECONDS,
    ):
        self.evaluator = evaluator or CheckpointEvaluator()
        self.scheduler = scheduler
        self.check_seconds = check_seconds
        self.logger = logging.getLogger(__name__)

        self._checkpoints: Dict[str, SecRelCheckpoint] = {}
        self._index: Dict[Tuple[str, CheckpointType], str] = {}
        self._snapshots: Dict[str, Dict[str, Any]] = {}
        self._running: Dict[str, ScheduledTask] = {}

    def sync(self, components: Sequence[PlatformComponent]) -> None:
        """
        Add checkpoints for new components and drop those of removed ones.

        A component whose state changed since the last sync has its
        deterministic checkpoints evaluated again; Ethics and Legal keep
        their last draw. Unchanged components keep every outcome.
        """
        live_ids = {c.id for c in components}
        for key, checkpoint_id in list(self._index.items()):
            if key[0] not in live_ids:
                del self._index[key]
                self._checkpoints.pop(checkpoint_id, None)
                task = self._running.pop(checkpoint_id, None)
                if task is not None:
                    task.cancel()
        for component_id in list(self._snapshots):
            if component_id not in live_ids:
                del self._snapshots[component_id]

        for component in components:
            snapshot = component.to_dict()
            changed = self._snapshots.get(component.id) != snapshot
            self._snapshots[component.id] = snapshot

            for checkpoint_type in CheckpointType:
                key = (component.id, checkpoint_type)
                existing = self._checkpoints.get(self._index.get(key, ""))
                if existing is None:
                    checkpoint = self.evaluator.evaluate(checkpoint_type, component)
                    checkpoint.name = f"{checkpoint.name} - {component.name}"
                    self._checkpoints[checkpoint.id] = checkpoint
                    self._index[key] = checkpoint.id
                elif changed:
                    self._refresh(existing, component)

    def _refresh(self, checkpoint: SecRelCheckpoint, component: PlatformComponent) -> None:
        checkpoint.name = f"{CHECKPOINT_NAMES[checkpoint.type]} - {component.name}"
        if checkpoint.type in self.DRAWN_TYPES:
            return
        passed = self.evaluator.passes(checkpoint.type, component)
        if passed != checkpoint.passed:
            self.logger.debug(
                f"Checkpoint '{checkpoint.name}' now {'passes' if passed else 'fails'}"
            )
        checkpoint.passed = passed
        checkpoint.impact = checkpoint_impact(checkpoint.type, passed)

    def reset(self) -> None:
        for task in self._running.values():
            task.cancel()
        self._running.clear()
        self._checkpoints.clear()
        self._index.clear()
        self._snapshots.clear()

    @property
    def checkpoints(self) -> List[SecRelCheckpoint]:
        return [copy.deepcopy(cp) for cp in self._checkpoints.values()]

    def get_checkpoint(self, checkpoint_id: str) -> Optional[SecRelCheckpoint]:
        checkpoint = self._checkpoints.get(checkpoint_id)
        return copy.deepcopy(checkpoint) if checkpoint else None

    def by_type(self) -> Dict[CheckpointType, List[SecRelCheckpoint]]:
        grouped: Dict[CheckpointType, List[SecRelCheckpoint]] = {t: [] for t in CheckpointType}
        for checkpoint in self.checkpoints:
            grouped[checkpoint.type].append(checkpoint)
        return grouped

    @property
    def pass_rate(self) -> float:
        """Percentage of passing checkpoints; 100 when there are none."""
        if not self._checkpoints:
            return 100.0
        passed = sum(1 for cp in self._checkpoints.values() if cp.passed)
        return passed / len(self._checkpoints) * 100

    @property
    def running_check_ids(self) -> frozenset:
        return frozenset(self._running)

    def run_check(self, checkpoint_id: str) -> bool:
        """
        Re-run one checkpoint.

        Returns:
            False when the checkpoint does not exist
        """
        if checkpoint_id not in self._checkpoints:
            return False

        if self.scheduler is None:
            self._complete_check(checkpoint_id)
        else:
            previous = self._running.pop(checkpoint_id, None)
            if previous is not None:
                previous.cancel()
            self._running[checkpoint_id] = self.scheduler.schedule(
                self.check_seconds, lambda: self._complete_check(checkpoint_id)
            )
        return True

    def _complete_check(self, checkpoint_id: str) -> None:
        self._running.pop(checkpoint_id, None)
        checkpoint = self._checkpoints.get(checkpoint_id)
        if checkpoint is None:
            return
        checkpoint.passed = self.evaluator.random_draw()
        checkpoint.impact = checkpoint_impact(checkpoint.type, checkpoint.passed)
        self.logger.info(
            f"Checkpoint '{checkpoint.name}' {'passed' if checkpoint.passed else 'failed'}"
        )
