"""
Domain Services

Stateless scoring logic shared by the application services.
"""

from .metric_calculator import (
    derive_component_metrics,
    aggregate_global_metrics,
    weighted_issue_impact,
    round_half_up,
)
from .component_factory import create_component, new_component_id
from .issue_detector import IssueDetector, IssueRule, DEFAULT_RULES, make_issue
from .checkpoint_evaluator import (
    CheckpointEvaluator,
    CHECKPOINT_NAMES,
    CHECKPOINT_REQUIREMENTS,
    checkpoint_impact,
)
from .objective_scorer import ObjectiveScorer

__all__ = [
    "derive_component_metrics",
    "aggregate_global_metrics",
    "weighted_issue_impact",
    "round_half_up",
    "create_component",
    "new_component_id",
    "IssueDetector",
    "IssueRule",
    "DEFAULT_RULES",
    "make_issue",
    "CheckpointEvaluator",
    "CHECKPOINT_NAMES",
    "CHECKPOINT_REQUIREMENTS",
    "checkpoint_impact",
    "ObjectiveScorer",
]
