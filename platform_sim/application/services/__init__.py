"""
Application Services

Stateful engines owning one session's state.
"""

from .subscribers import SubscriberList
from .scoring_engine import ScoringEngine
from .hierarchy_store import HierarchyStore, HEALTH_CHAIN
from .checkpoint_pipeline import CheckpointPipeline
from .session import SimulationSession

__all__ = [
    "SubscriberList",
    "ScoringEngine",
    "HierarchyStore",
    "HEALTH_CHAIN",
    "CheckpointPipeline",
    "SimulationSession",
]
