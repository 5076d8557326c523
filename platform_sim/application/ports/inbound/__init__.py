from .scoring_port import IScoringUseCase
from .hierarchy_port import IHierarchyUseCase

__all__ = ["IScoringUseCase", "IHierarchyUseCase"]
