"""
YAML Loaders

Reads scenario definitions and hierarchy layouts from YAML files.

Scenario file:

    scenarios:
      - id: my-scenario
        title: My Scenario
        difficulty: beginner
        budget: 2000
        initial_components:
          - id: api-1
            type: api
            config: {security: {encryption: true}, rate_limit: 100}
        objectives:
          - id: secure
            target_metric: security_score
            target_value: 70
            weight: 1.0

Layout file (nested nodes, applied top-down):

    nodes:
      - type: region
        name: us-east
        children:
          - type: compute
            children:
              - type: kubernetes
    deployments:
      - application: web
        target: k8s
        environment: production

Deployments refer to nodes by their ``key`` (falling back to ``name``, then
the type); these labels must be unique across the layout.
Malformed files raise ValueError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from platform_sim.application.ports.inbound.hierarchy_port import IHierarchyUseCase
from platform_sim.domain.models import Environment, Scenario, resolve_node_type

logger = logging.getLogger(__name__)


def _read_yaml(path: Union[str, Path]) -> Any:
    with open(path, "r") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e


def load_scenarios(path: Union[str, Path]) -> List[Scenario]:
    """
    Load scenarios from a YAML file.

    Raises:
        ValueError: if the file does not hold a scenario list, or an entry
                    names an unknown component type, difficulty or metric
    """
    data = _read_yaml(path)
    if isinstance(data, dict):
        data = data.get("scenarios")
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of scenarios")

    scenarios = []
    for entry in data:
        if not isinstance(entry, dict) or "id" not in entry:
            raise ValueError(f"{path}: every scenario needs an 'id'")
        try:
            scenarios.append(Scenario.from_dict(entry))
        except (KeyError, TypeError) as e:
            raise ValueError(f"{path}: scenario '{entry['id']}' is malformed: {e}") from e

    logger.info(f"Loaded {len(scenarios)} scenario(s) from {path}")
    return scenarios


@dataclass
class NodeSpec:
    type: str
    name: Optional[str] = None
    key: Optional[str] = None
    config: Dict[str, Any] = field(default_factory=dict)
    children: List["NodeSpec"] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.key or self.name or self.type

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeSpec":
        if not isinstance(data, dict) or "type" not in data:
            raise ValueError(f"Node entry needs a 'type': {data!r}")
        if resolve_node_type(data["type"]) is None:
            raise ValueError(f"Unknown node type '{data['type']}'")
        return cls(
            type=data["type"],
            name=data.get("name"),
            key=data.get("key"),
            config=dict(data.get("config") or {}),
            children=[cls.from_dict(c) for c in data.get("children") or []],
        )


@dataclass
class DeploymentSpec:
    application: str
    target: str
    environment: Environment = Environment.DEVELOPMENT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploymentSpec":
        try:
            return cls(
                application=data["application"],
                target=data["target"],
                environment=Environment(data.get("environment", "development")),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Deployment entry needs 'application' and 'target': {data!r}") from e


@dataclass
class Layout:
    nodes: List[NodeSpec] = field(default_factory=list)
    deployments: List[DeploymentSpec] = field(default_factory=list)

    def check_labels(self) -> None:
        """
        Raises:
            ValueError: if two nodes share a label
        """
        seen = set()
        pending = list(self.nodes)
        while pending:
            spec = pending.pop()
            if spec.label in seen:
                raise ValueError(
                    f"Duplicate node label '{spec.label}'; give one of them a 'key'"
                )
            seen.add(spec.label)
            pending.extend(spec.children)


def load_layout(path: Union[str, Path]) -> Layout:
    """
    Load a hierarchy layout from a YAML file.

    Raises:
        ValueError: on malformed structure or unknown node types/environments
    """
    data = _read_yaml(path)
    if not isinstance(data, dict) or not isinstance(data.get("nodes"), list):
        raise ValueError(f"{path}: expected a mapping with a 'nodes' list")

    layout = Layout(
        nodes=[NodeSpec.from_dict(n) for n in data["nodes"]],
        deployments=[DeploymentSpec.from_dict(d) for d in data.get("deployments") or []],
    )
    try:
        layout.check_labels()
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e
    logger.info(f"Loaded layout from {path}: {len(layout.nodes)} root node(s)")
    return layout


@dataclass
class LayoutResult:
    """Outcome of applying a layout: created ids by key, and what was refused."""
    node_ids: Dict[str, str] = field(default_factory=dict)
    rejected: List[str] = field(default_factory=list)
    deployment_ids: List[str] = field(default_factory=list)


def apply_layout(layout: Layout, store: IHierarchyUseCase) -> LayoutResult:
    """
    Insert a layout into ``store``. A rejected node skips its subtree.

    Raises:
        ValueError: if two nodes share a label; nothing is inserted
    """
    layout.check_labels()
    result = LayoutResult()

    def place(spec: NodeSpec, parent_id: Optional[str]) -> None:
        label = spec.label
        placement = store.try_add_node(
            {"type": spec.type, "name": spec.name, "config": spec.config}, parent_id
        )
        if not placement:
            result.rejected.append(f"{label}: {placement.rejection.value}")
            return
        result.node_ids[label] = placement.node_id
        for child in spec.children:
            place(child, placement.node_id)

    for root in layout.nodes:
        place(root, None)

    for deployment in layout.deployments:
        app_id = result.node_ids.get(deployment.application)
        target_id = result.node_ids.get(deployment.target)
        deployment_id = None
        if app_id is not None and target_id is not None:
            deployment_id = store.deploy_application(app_id, target_id, deployment.environment)
        if deployment_id is None:
            result.rejected.append(
                f"deploy {deployment.application} -> {deployment.target}: not deployable"
            )
        else:
            result.deployment_ids.append(deployment_id)

    return result
