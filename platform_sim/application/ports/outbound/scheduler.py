"""
Scheduler Port

Interface for the fixed-delay completions the engines simulate
(deployment settle, issue resolution, checkpoint re-run).
"""

from abc import ABC, abstractmethod
from typing import Callable


class ScheduledTask(ABC):
    """Handle to a pending callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass


class IScheduler(ABC):
    """
    Outbound port for delayed callbacks.

    Callbacks run on the same logical thread as engine mutations; adapters
    never invoke them concurrently.
    """

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """
        Run ``callback`` once after ``delay`` seconds.

        Args:
            delay: Seconds to wait, >= 0
            callback: Zero-argument callable

        Returns:
            Handle that can cancel the callback before it runs
        """
        pass
