"""
Component Factory

Builds a PlatformComponent the way a palette-drop does: template defaults
for config, template cost/complexity, and scores derived from the config.
"""

from __future__ import annotations

import copy
import uuid
from typing import Optional

from platform_sim.domain.config.component_templates import get_component_template
from platform_sim.domain.models.entities import PlatformComponent
from platform_sim.domain.models.enums import ComponentType
from platform_sim.domain.models.value_objects import Position
from platform_sim.domain.services.metric_calculator import derive_component_metrics


def new_component_id() -> str:
    return f"component-{uuid.uuid4().hex[:9]}"


def create_component(
    component_type: ComponentType,
    name: Optional[str] = None,
    position: Optional[Position] = None,
    component_id: Optional[str] = None,
) -> PlatformComponent:
    """
    Create a component seeded from its template.

    Raises:
        ValueError: if ``component_type`` names no known component type
    """
    template = get_component_template(component_type)
    if template is None:
        raise ValueError(f"Unknown component type '{component_type}'")

    config = template.default_config()
    return PlatformComponent(
        id=component_id or new_component_id(),
        type=template.type,
        name=name or template.name,
        position=position or Position(),
        config=config,
        metrics=derive_component_metrics(config, copy.copy(template.base_metrics)),
    )
