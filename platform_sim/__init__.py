"""
Platform Builder Simulation Core

Two independent engines over shared static template tables:

    ScoringEngine    flat component list → metrics, issues, checkpoints
    HierarchyStore   containment forest of nodes → placement, capacity, rollups
"""

__version__ = "0.1.0"
