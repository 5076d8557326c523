"""
Static template tables shared read-only by both engines.
"""

from .component_templates import (
    ComponentTemplate,
    COMPONENT_TEMPLATES,
    get_component_template,
    get_templates_by_category,
)
from .node_templates import (
    NodeTemplate,
    NODE_TEMPLATES,
    get_node_template,
    get_templates_by_layer,
    can_contain_layer,
)
from .scenarios import (
    SCENARIOS,
    SCENARIOS_BY_ID,
    get_scenario,
    get_scenarios_by_difficulty,
)

__all__ = [
    "ComponentTemplate",
    "COMPONENT_TEMPLATES",
    "get_component_template",
    "get_templates_by_category",
    "NodeTemplate",
    "NODE_TEMPLATES",
    "get_node_template",
    "get_templates_by_layer",
    "can_contain_layer",
    "SCENARIOS",
    "SCENARIOS_BY_ID",
    "get_scenario",
    "get_scenarios_by_difficulty",
]
