"""
Hierarchy Store

Owns the containment forest of platform nodes and the deployments placed
on them.

Architecture:
    SimulationSession / CLI
      └── HierarchyStore               ← this module
            ├── NODE_TEMPLATES          (static containment + resource table)
            ├── networkx.DiGraph        (containment view for deletes / checks)
            └── IScheduler              (outbound port, deployment settle)

Placement checks, in order:
    1. the node type has a template                  else MISSING_TEMPLATE
    2. a given parent exists                         else MISSING_PARENT
    3. the parent's template can contain the layer   else CONTAINMENT
    4. the parent has room for cpu / memory / storage else CAPACITY
    5. without a parent the template needs none      else PARENT_REQUIRED

Allocation is derived on every read, never stored. Shallow mode counts
direct children plus running deployments on the node itself; transitive
mode counts every descendant plus running deployments anywhere in the
subtree.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import networkx as nx

from platform_sim.application.ports.inbound.hierarchy_port import IHierarchyUseCase
from platform_sim.application.ports.outbound.scheduler import IScheduler, ScheduledTask
from platform_sim.application.services.subscribers import SubscriberList
from platform_sim.domain.config.node_templates import get_node_template
from platform_sim.domain.models import (
    ComponentLayer,
    Deployment,
    DeploymentStatus,
    Environment,
    HealthStatus,
    NodeConfig,
    NodeMetrics,
    NodeStatus,
    PlacementRejection,
    PlacementResult,
    PlatformGlobalMetrics,
    PlatformNode,
    PlatformState,
    Position,
    ResourceCapacity,
    ResourceRequirements,
    Size,
)
from platform_sim.domain.services.metric_calculator import round_half_up

# Health moves one step at a time along this chain.
HEALTH_CHAIN = (HealthStatus.HEALTHY, HealthStatus.DEGRADED, HealthStatus.UNHEALTHY)

DEPLOYABLE_TARGET_LAYERS = frozenset({ComponentLayer.PLATFORM, ComponentLayer.SERVICE})
COSTED_LAYERS = frozenset({
    ComponentLayer.INFRASTRUCTURE, ComponentLayer.PLATFORM, ComponentLayer.SERVICE,
})

DEFAULT_APP_REQUIREMENT = ResourceRequirements(cpu=10, memory=128)


def new_node_id() -> str:
    return f"node-{uuid.uuid4().hex[:9]}"


def new_deployment_id() -> str:
    return f"deploy-{uuid.uuid4().hex[:9]}"


def _replace_from(current, value, cls):
    """Merge a dict (or take a ready instance) into a nested dataclass field."""
    if isinstance(value, cls):
        return copy.deepcopy(value)
    names = {f.name for f in dataclasses.fields(cls)}
    return dataclasses.replace(current, **{k: v for k, v in dict(value).items() if k in names})


class HierarchyStore(IHierarchyUseCase):
    """
    Stateful hierarchy engine for one session.

    Nothing here raises for bad input: rejected placements come back as a
    PlacementResult, other invalid calls are no-ops returning None/False.
    """

    DEFAULT_DEPLOYMENT_SETTLE_SECONDS = 2.0

    # Structural fields are owned by add/delete; update_node leaves them alone.
    _PROTECTED_FIELDS = frozenset({"id", "layer", "type", "parent_id", "child_ids", "resources"})

    def __init__(
        self,
        scheduler: Optional[IScheduler] = None,
        deployment_settle_seconds: float = DEFAULT_DEPLOYMENT_SETTLE_SECONDS,
        transitive_rollup: bool = False,
    ):
        self.scheduler = scheduler
        self.deployment_settle_seconds = deployment_settle_seconds
        self.transitive_rollup = transitive_rollup
        self.logger = logging.getLogger(__name__)

        self._nodes: Dict[str, PlatformNode] = {}
        self._deployments: List[Deployment] = []
        self._selected_node_id: Optional[str] = None
        self._settle_tasks: Dict[str, ScheduledTask] = {}
        self._subscribers: SubscriberList[PlatformState] = SubscriberList("HierarchyStore")

    # =========================================================================
    # Observation
    # =========================================================================

    def subscribe(self, callback: Callable[[PlatformState], None]) -> Callable[[], None]:
        return self._subscribers.add(callback)

    def get_state(self) -> PlatformState:
        nodes = {}
        for node_id, node in self._nodes.items():
            snapshot = copy.deepcopy(node)
            snapshot.resources = self.get_node_resources(node_id)
            nodes[node_id] = snapshot
        return PlatformState(
            nodes=nodes,
            deployments=tuple(copy.deepcopy(self._deployments)),
            selected_node_id=self._selected_node_id,
            global_metrics=self.calculate_global_metrics(),
        )

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def selected_node_id(self) -> Optional[str]:
        return self._selected_node_id

    @property
    def settling_deployment_ids(self) -> frozenset:
        return frozenset(self._settle_tasks)

    def get_node(self, node_id: str) -> Optional[PlatformNode]:
        node = self._nodes.get(node_id)
        return copy.deepcopy(node) if node else None

    def get_node_children(self, node_id: str) -> List[PlatformNode]:
        node = self._nodes.get(node_id)
        if node is None:
            return []
        return [
            copy.deepcopy(self._nodes[child_id])
            for child_id in node.child_ids
            if child_id in self._nodes
        ]

    def get_deployment(self, deployment_id: str) -> Optional[Deployment]:
        deployment = self._find_deployment(deployment_id)
        return copy.deepcopy(deployment) if deployment else None

    def root_ids(self) -> List[str]:
        return [node_id for node_id, node in self._nodes.items() if node.is_root]

    def select_node(self, node_id: Optional[str]) -> None:
        if node_id is not None and node_id not in self._nodes:
            return
        self._selected_node_id = node_id
        self._notify()

    # =========================================================================
    # Placement
    # =========================================================================

    def check_placement(self, node_type: Any, parent_id: Optional[str] = None) -> PlacementResult:
        """Decide whether a node of ``node_type`` may go under ``parent_id``."""
        template = get_node_template(node_type)
        if template is None:
            return PlacementResult.reject(PlacementRejection.MISSING_TEMPLATE)

        if parent_id is None:
            if template.requires_parent is not None:
                return PlacementResult.reject(PlacementRejection.PARENT_REQUIRED)
            return PlacementResult()

        parent = self._nodes.get(parent_id)
        if parent is None:
            return PlacementResult.reject(PlacementRejection.MISSING_PARENT)

        parent_template = get_node_template(parent.type)
        if parent_template is None:
            return PlacementResult.reject(PlacementRejection.MISSING_TEMPLATE)
        if template.layer not in parent_template.can_contain:
            return PlacementResult.reject(PlacementRejection.CONTAINMENT)

        if parent.resources is not None and template.resources is not None:
            available = self.get_node_resources(parent_id)
            if not available.fits(template.resources):
                return PlacementResult.reject(PlacementRejection.CAPACITY)

        return PlacementResult()

    def can_accept_node(self, parent_id: str, node_type: Any) -> bool:
        if parent_id is None:
            return False
        return self.check_placement(node_type, parent_id).accepted

    def try_add_node(
        self, node_data: Dict[str, Any], parent_id: Optional[str] = None
    ) -> PlacementResult:
        node_type = node_data.get("type")
        result = self.check_placement(node_type, parent_id)
        if not result:
            self.logger.info(
                f"Rejected {node_type!s} under {parent_id or '<root>'}: "
                f"{result.rejection.value}"
            )
            return result

        template = get_node_template(node_type)
        node = PlatformNode(
            id=new_node_id(),
            layer=template.layer,
            type=template.type,
            name=node_data.get("name") or template.name,
            position=_replace_from(Position(), node_data.get("position") or {}, Position),
            size=_replace_from(template.default_size, node_data.get("size") or {}, Size),
            parent_id=parent_id,
            resources=(
                ResourceCapacity.unallocated(template.resources)
                if template.resources is not None else None
            ),
            config=_replace_from(NodeConfig(), node_data.get("config") or {}, NodeConfig),
            status=NodeStatus(),
            metrics=NodeMetrics(cost=template.base_cost),
        )

        self._nodes[node.id] = node
        if parent_id is not None:
            self._nodes[parent_id].child_ids.append(node.id)

        self.logger.info(f"Added {node.type.value} node {node.id} under {parent_id or '<root>'}")
        self._notify()
        return PlacementResult(node_id=node.id)

    def add_node(
        self, node_data: Dict[str, Any], parent_id: Optional[str] = None
    ) -> Optional[str]:
        return self.try_add_node(node_data, parent_id).node_id

    # =========================================================================
    # Node Mutations
    # =========================================================================

    def update_node(self, node_id: str, updates: Dict[str, Any]) -> None:
        node = self._nodes.get(node_id)
        if node is None:
            self.logger.debug(f"update_node: unknown node {node_id}")
            return

        for key, value in updates.items():
            if key in self._PROTECTED_FIELDS:
                self.logger.debug(f"update_node: ignoring structural field '{key}'")
            elif key == "position":
                node.position = _replace_from(node.position, value, Position)
            elif key == "size":
                node.size = _replace_from(node.size, value, Size)
            elif key == "config":
                node.config = _replace_from(node.config, value, NodeConfig)
            elif key == "status":
                status = _replace_from(node.status, value, NodeStatus)
                if status.health not in HEALTH_CHAIN:
                    self.logger.debug(f"update_node: ignoring unknown health {status.health!r}")
                    continue
                status.health = HealthStatus(status.health)
                node.status = status
            elif key == "metrics":
                node.metrics = _replace_from(node.metrics, value, NodeMetrics)
            elif key == "name":
                node.name = value
            else:
                self.logger.debug(f"update_node: ignoring unknown field '{key}'")

        self._notify()

    def delete_node(self, node_id: str) -> None:
        node = self._nodes.get(node_id)
        if node is None:
            return

        if node.parent_id is not None and node.parent_id in self._nodes:
            parent = self._nodes[node.parent_id]
            parent.child_ids = [cid for cid in parent.child_ids if cid != node_id]

        # Children before parents
        doomed = list(nx.dfs_postorder_nodes(self.containment_graph(), source=node_id))
        for doomed_id in doomed:
            self._nodes.pop(doomed_id, None)

        doomed_set = set(doomed)
        dropped = [
            d for d in self._deployments
            if d.target_id in doomed_set or d.application_id in doomed_set
        ]
        for deployment in dropped:
            self._cancel_settle(deployment.id)
        self._deployments = [d for d in self._deployments if d not in dropped]

        if self._selected_node_id in doomed_set:
            self._selected_node_id = None

        self.logger.info(
            f"Deleted node {node_id} with {len(doomed) - 1} descendant(s) "
            f"and {len(dropped)} deployment(s)"
        )
        self._notify()

    def set_node_health(self, node_id: str, health: Any) -> bool:
        """
        Move a node one step along healthy ⇄ degraded ⇄ unhealthy.

        Returns:
            True when applied (or already in that state), False for unknown
            nodes, unknown states and jumps over the middle state
        """
        node = self._nodes.get(node_id)
        if node is None:
            return False
        try:
            health = HealthStatus(health)
        except ValueError:
            return False

        current = node.status.health
        if health == current:
            return True
        if abs(HEALTH_CHAIN.index(health) - HEALTH_CHAIN.index(current)) != 1:
            self.logger.info(
                f"Refused health change of {node_id}: {current.value} -> {health.value}"
            )
            return False

        node.status.health = health
        self._notify()
        return True

    # =========================================================================
    # Resources
    # =========================================================================

    def get_node_resources(self, node_id: str) -> Optional[ResourceCapacity]:
        """Static totals of the node merged with freshly derived allocation."""
        node = self._nodes.get(node_id)
        if node is None or node.resources is None:
            return None
        return node.resources.with_allocation(self._allocation(node))

    def _allocation(self, node: PlatformNode) -> ResourceRequirements:
        if self.transitive_rollup:
            members = nx.descendants(self.containment_graph(), node.id)
            host_ids = members | {node.id}
        else:
            members = set(node.child_ids)
            host_ids = {node.id}

        allocated = ResourceRequirements()
        for member_id in members:
            member = self._nodes.get(member_id)
            if member is not None and member.resources is not None:
                allocated = allocated + member.resources.totals()

        for deployment in self._deployments:
            if deployment.target_id in host_ids and deployment.status == DeploymentStatus.RUNNING:
                allocated = allocated + deployment.allocated

        return allocated

    # =========================================================================
    # Deployments
    # =========================================================================

    def deploy_application(
        self,
        app_id: str,
        target_id: str,
        environment: Any = Environment.DEVELOPMENT,
    ) -> Optional[str]:
        """
        Deploy an application node onto a platform or service node.

        The deployment starts in DEPLOYING and settles to RUNNING after
        ``deployment_settle_seconds``. Capacity is not checked here.

        Returns:
            The deployment id, or None when the pair is not deployable
        """
        app = self._nodes.get(app_id)
        target = self._nodes.get(target_id)
        if app is None or target is None:
            return None
        if app.layer != ComponentLayer.APPLICATION:
            return None
        if target.layer not in DEPLOYABLE_TARGET_LAYERS:
            return None
        try:
            environment = Environment(environment)
        except ValueError:
            self.logger.info(f"Rejected deployment of {app_id}: unknown environment {environment!r}")
            return None

        now = datetime.now()
        deployment = Deployment(
            id=new_deployment_id(),
            application_id=app_id,
            target_id=target_id,
            environment=environment,
            version="1.0.0",
            status=DeploymentStatus.DEPLOYING,
            replicas=app.config.replicas or 1,
            resources=(
                app.resources.totals() if app.resources is not None
                else copy.copy(DEFAULT_APP_REQUIREMENT)
            ),
            created=now,
            updated=now,
        )
        self._deployments.append(deployment)
        self.logger.info(
            f"Deploying {app_id} to {target_id} ({environment.value}) as {deployment.id}"
        )

        if self.scheduler is None:
            self._settle(deployment.id)
        else:
            self._settle_tasks[deployment.id] = self.scheduler.schedule(
                self.deployment_settle_seconds, lambda: self._settle(deployment.id)
            )
            self._notify()
        return deployment.id

    def _settle(self, deployment_id: str) -> None:
        self._settle_tasks.pop(deployment_id, None)
        if self._find_deployment(deployment_id) is None:
            self.logger.debug(f"Settle skipped, deployment {deployment_id} is gone")
            return
        self.update_deployment(deployment_id, {"status": DeploymentStatus.RUNNING})
        self.logger.info(f"Deployment {deployment_id} is running")

    def update_deployment(self, deployment_id: str, updates: Dict[str, Any]) -> None:
        deployment = self._find_deployment(deployment_id)
        if deployment is None:
            return
        for key, value in updates.items():
            if key == "status":
                deployment.status = DeploymentStatus(value)
            elif key == "environment":
                deployment.environment = Environment(value)
            elif key in ("replicas", "version"):
                setattr(deployment, key, value)
            elif key == "resources":
                deployment.resources = _replace_from(
                    deployment.resources, value, ResourceRequirements
                )
        deployment.updated = datetime.now()
        self._notify()

    def remove_deployment(self, deployment_id: str) -> None:
        if self._find_deployment(deployment_id) is None:
            return
        self._cancel_settle(deployment_id)
        self._deployments = [d for d in self._deployments if d.id != deployment_id]
        self._notify()

    def _find_deployment(self, deployment_id: str) -> Optional[Deployment]:
        return next((d for d in self._deployments if d.id == deployment_id), None)

    def _cancel_settle(self, deployment_id: str) -> None:
        task = self._settle_tasks.pop(deployment_id, None)
        if task is not None:
            task.cancel()

    # =========================================================================
    # Metrics
    # =========================================================================

    def calculate_global_metrics(self) -> PlatformGlobalMetrics:
        nodes = list(self._nodes.values())

        total_cost = sum(n.metrics.cost for n in nodes if n.layer in COSTED_LAYERS)

        totals = ResourceRequirements()
        for node in nodes:
            if node.layer == ComponentLayer.INFRASTRUCTURE and node.resources is not None:
                totals = totals + node.resources.totals()

        allocated = ResourceRequirements()
        for deployment in self._deployments:
            if deployment.status == DeploymentStatus.RUNNING:
                allocated = allocated + deployment.allocated

        denominator = max(len(nodes), 1)
        avg_health = sum(n.status.health.score for n in nodes) / denominator
        avg_efficiency = sum(n.metrics.efficiency for n in nodes) / denominator

        return PlatformGlobalMetrics(
            total_cost=round_half_up(total_cost),
            total_resources=ResourceCapacity.unallocated(totals).with_allocation(allocated),
            application_count=sum(1 for n in nodes if n.layer == ComponentLayer.APPLICATION),
            service_health=round_half_up(avg_health),
            platform_maturity=min(100, len(nodes) * 5),
            operational_excellence=round_half_up(avg_efficiency),
        )

    # =========================================================================
    # Graph View
    # =========================================================================

    def containment_graph(self) -> nx.DiGraph:
        """Directed parent → child graph of the current nodes."""
        graph = nx.DiGraph()
        for node_id, node in self._nodes.items():
            graph.add_node(node_id, layer=node.layer.value, type=node.type.value, name=node.name)
        for node_id, node in self._nodes.items():
            for child_id in node.child_ids:
                if child_id in self._nodes:
                    graph.add_edge(node_id, child_id)
        return graph

    def verify_integrity(self) -> List[str]:
        """
        Check the bidirectional parent/child links.

        Returns:
            Human-readable violations; empty when the forest is consistent
        """
        problems = []
        for node_id, node in self._nodes.items():
            if node.parent_id is not None:
                parent = self._nodes.get(node.parent_id)
                if parent is None:
                    problems.append(f"{node_id}: parent {node.parent_id} does not exist")
                elif node_id not in parent.child_ids:
                    problems.append(f"{node_id}: parent {node.parent_id} does not list it as a child")
            for child_id in node.child_ids:
                child = self._nodes.get(child_id)
                if child is None:
                    problems.append(f"{node_id}: child {child_id} does not exist")
                elif child.parent_id != node_id:
                    problems.append(f"{node_id}: child {child_id} points to parent {child.parent_id}")

        graph = self.containment_graph()
        if graph.number_of_nodes() and not nx.is_forest(graph):
            try:
                cycle = nx.find_cycle(graph)
                problems.append(f"containment cycle: {' -> '.join(u for u, _ in cycle)}")
            except nx.NetworkXNoCycle:
                problems.append("containment graph is not a forest")
        return problems

    def _notify(self) -> None:
        self._subscribers.notify(self.get_state())
