"""
Application Ports

Inbound ports are the use cases the engines offer; outbound ports are what
the engines need from the outside world.
"""

from .inbound import IScoringUseCase, IHierarchyUseCase
from .outbound import IScheduler, ScheduledTask

__all__ = [
    "IScoringUseCase",
    "IHierarchyUseCase",
    "IScheduler",
    "ScheduledTask",
]
