"""
Hierarchy Use Case Port

Interface defining the contract for the node containment and resource
allocation engine.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from platform_sim.domain.models import (
    Environment,
    PlacementResult,
    PlatformGlobalMetrics,
    PlatformNode,
    PlatformState,
    ResourceCapacity,
)


class IHierarchyUseCase(ABC):
    """
    Inbound port for the platform hierarchy.

    Invalid requests are reported through return values (None, False or a
    rejected PlacementResult), never through exceptions.
    """

    @abstractmethod
    def subscribe(self, callback: Callable[[PlatformState], None]) -> Callable[[], None]:
        pass

    @abstractmethod
    def get_state(self) -> PlatformState:
        pass

    @abstractmethod
    def try_add_node(
        self, node_data: Dict[str, Any], parent_id: Optional[str] = None
    ) -> PlacementResult:
        """
        Insert a node, reporting why it was rejected when it is.

        Args:
            node_data: Must hold ``type``; may hold name, position, size, config
            parent_id: Containing node, None for a root
        """
        pass

    @abstractmethod
    def add_node(
        self, node_data: Dict[str, Any], parent_id: Optional[str] = None
    ) -> Optional[str]:
        """Insert a node; returns its id or None when rejected."""
        pass

    @abstractmethod
    def update_node(self, node_id: str, updates: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def delete_node(self, node_id: str) -> None:
        """Delete a node and its whole subtree."""
        pass

    @abstractmethod
    def can_accept_node(self, parent_id: str, node_type: Any) -> bool:
        pass

    @abstractmethod
    def get_node(self, node_id: str) -> Optional[PlatformNode]:
        pass

    @abstractmethod
    def get_node_children(self, node_id: str) -> List[PlatformNode]:
        pass

    @abstractmethod
    def get_node_resources(self, node_id: str) -> Optional[ResourceCapacity]:
        pass

    @abstractmethod
    def deploy_application(
        self, app_id: str, target_id: str, environment: Environment
    ) -> Optional[str]:
        """Deploy an application node onto a platform/service node."""
        pass

    @abstractmethod
    def calculate_global_metrics(self) -> PlatformGlobalMetrics:
        pass
