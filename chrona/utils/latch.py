"""
One-shot completion latch.

Several signals race to report that an exchange is over; the first one to
fire runs the callback, every later one is a no-op.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Generic, TypeVar

E = TypeVar("E")


class CompletionLatch(Generic[E]):
    """Run ``callback(event, **details)`` for the first fired event only."""

    def __init__(self, callback: Callable[..., Any]) -> None:
        self._callback = callback
        self._lock = threading.Lock()
        self._event: E | None = None
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def event(self) -> E | None:
        """The event that won, or None while still armed."""
        return self._event

    def fire(self, event: E, **details: Any) -> bool:
        """Fire *event*. Returns False when another event already won."""
        with self._lock:
            if self._fired:
                return False
            self._fired = True
            self._event = event
        self._callback(event, **details)
        return True

    def signal(self, event: E) -> Callable[..., bool]:
        """Return a zero-argument observer that fires *event*."""

        def observer(**details: Any) -> bool:
            return self.fire(event, **details)

        return observer
