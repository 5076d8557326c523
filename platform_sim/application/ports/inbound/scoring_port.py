"""
Scoring Use Case Port

Interface defining the contract for the flat component scoring engine.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from platform_sim.domain.models import (
    CheckpointType,
    IssueSummary,
    PlatformComponent,
    SecRelCheckpoint,
    SimulationState,
)


class IScoringUseCase(ABC):
    """
    Inbound port for component scoring.

    Mutations never raise for unknown ids; they leave state unchanged.
    Every effective mutation pushes a fresh SimulationState to subscribers.
    """

    @abstractmethod
    def subscribe(self, callback: Callable[[SimulationState], None]) -> Callable[[], None]:
        """Register a snapshot listener; returns a function that unregisters it."""
        pass

    @abstractmethod
    def get_state(self) -> SimulationState:
        pass

    @abstractmethod
    def add_component(self, component: PlatformComponent) -> None:
        pass

    @abstractmethod
    def update_component(self, component_id: str, updates: Dict[str, Any]) -> None:
        """
        Merge a partial update into a component.

        Args:
            component_id: Target component
            updates: Field name to new value; ``config`` may be a ComponentConfig
                     or a nested dict of flag groups
        """
        pass

    @abstractmethod
    def remove_component(self, component_id: str) -> None:
        pass

    @abstractmethod
    def resolve_issue(self, issue_id: str) -> None:
        pass

    @abstractmethod
    def create_secrel_checkpoint(
        self, checkpoint_type: CheckpointType, component: PlatformComponent
    ) -> SecRelCheckpoint:
        """Evaluate a governance gate against a component. No state change."""
        pass

    @abstractmethod
    def get_component(self, component_id: str) -> Optional[PlatformComponent]:
        pass

    @abstractmethod
    def summarize_issues(self) -> IssueSummary:
        pass
