"""
Subscriber fan-out shared by the stateful services.

Listeners are called synchronously, in registration order. A listener that
raises is logged and skipped; the remaining listeners still run and the
engine state is untouched.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")


class SubscriberList(Generic[T]):

    def __init__(self, owner: str):
        self.owner = owner
        self.logger = logging.getLogger(__name__)
        self._callbacks: List[Callable[[T], None]] = []

    def __len__(self) -> int:
        return len(self._callbacks)

    def add(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback``; returns a function that removes it again."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def notify(self, snapshot: T) -> None:
        # Iterate over a copy so a listener may unsubscribe while being notified.
        for callback in list(self._callbacks):
            try:
                callback(snapshot)
            except Exception:
                self.logger.exception(f"{self.owner} subscriber {callback!r} failed")
