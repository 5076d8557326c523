"""
Simulation Session

Holds the current ScoringEngine together with the session-level controls
(running flag, speed, scenario). Loading or clearing a scenario replaces
the engine wholesale; session listeners stay attached across the swap.
"""

from __future__ import annotations

import copy
import logging
import random
from typing import Callable, Optional, Union

from platform_sim.application.ports.outbound.scheduler import IScheduler
from platform_sim.application.services.checkpoint_pipeline import CheckpointPipeline
from platform_sim.application.services.scoring_engine import ScoringEngine
from platform_sim.application.services.subscribers import SubscriberList
from platform_sim.domain.config.scenarios import get_scenario
from platform_sim.domain.models import Scenario, ScenarioProgress, SimulationState
from platform_sim.domain.services import CheckpointEvaluator, IssueDetector, ObjectiveScorer


class SimulationSession:

    SPEEDS = (1, 2, 4)

    def __init__(
        self,
        scheduler: Optional[IScheduler] = None,
        rng: Optional[random.Random] = None,
        issue_resolution_seconds: float = ScoringEngine.DEFAULT_ISSUE_RESOLUTION_SECONDS,
        check_seconds: float = CheckpointPipeline.DEFAULT_CHECK_SECONDS,
        detector: Optional[IssueDetector] = None,
    ):
        self.scheduler = scheduler
        self.issue_resolution_seconds = issue_resolution_seconds
        self.detector = detector or IssueDetector()
        self.evaluator = CheckpointEvaluator(rng)
        self.checkpoints = CheckpointPipeline(self.evaluator, scheduler, check_seconds)
        self.scorer = ObjectiveScorer()
        self.logger = logging.getLogger(__name__)

        self.is_running = False
        self.simulation_speed = 1
        self.current_scenario: Optional[Scenario] = None

        self._subscribers: SubscriberList[SimulationState] = SubscriberList("SimulationSession")
        self._detach: Optional[Callable[[], None]] = None
        self.engine = self._replace_engine(ScoringEngine(
            scheduler=scheduler,
            detector=self.detector,
            evaluator=self.evaluator,
            issue_resolution_seconds=issue_resolution_seconds,
        ))

    def subscribe(self, callback: Callable[[SimulationState], None]) -> Callable[[], None]:
        """Listen to every engine this session will ever hold."""
        return self._subscribers.add(callback)

    @property
    def state(self) -> SimulationState:
        return self.engine.get_state()

    # =========================================================================
    # Controls
    # =========================================================================

    def start(self) -> None:
        self.is_running = True

    def pause(self) -> None:
        self.is_running = False

    def set_speed(self, speed: int) -> bool:
        if speed not in self.SPEEDS:
            return False
        self.simulation_speed = speed
        return True

    # =========================================================================
    # Scenarios
    # =========================================================================

    def load_scenario(self, scenario: Union[Scenario, str]) -> bool:
        """
        Replace the engine with one seeded from ``scenario``.

        Args:
            scenario: A Scenario or the id of a built-in one

        Returns:
            False when a scenario id is unknown
        """
        if isinstance(scenario, str):
            resolved = get_scenario(scenario)
            if resolved is None:
                self.logger.info(f"Unknown scenario '{scenario}'")
                return False
            scenario = resolved

        self._reset(scenario, copy.deepcopy(scenario.initial_components))
        self.logger.info(
            f"Loaded scenario '{scenario.id}' with {len(scenario.initial_components)} component(s)"
        )
        return True

    def clear_scenario(self) -> None:
        self._reset(None, [])

    def progress(self) -> Optional[ScenarioProgress]:
        if self.current_scenario is None:
            return None
        return self.scorer.score(self.current_scenario, self.engine.metrics)

    # =========================================================================
    # Internals
    # =========================================================================

    def _reset(self, scenario: Optional[Scenario], components) -> None:
        self.engine.cancel_pending()
        self.checkpoints.reset()
        self.is_running = False
        self.simulation_speed = 1
        self.current_scenario = scenario

        engine = ScoringEngine(
            components=components,
            scheduler=self.scheduler,
            detector=self.detector,
            evaluator=self.evaluator,
            issue_resolution_seconds=self.issue_resolution_seconds,
        )
        self.engine = self._replace_engine(engine)
        engine.refresh()

    def _replace_engine(self, engine: ScoringEngine) -> ScoringEngine:
        if self._detach is not None:
            self._detach()
        self._detach = engine.subscribe(self._on_state)
        return engine

    def _on_state(self, state: SimulationState) -> None:
        self.checkpoints.sync(state.components)
        self._subscribers.notify(state)
