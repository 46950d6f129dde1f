"""Timer protocol shared by the feed components.

Textual's ``App`` and ``Widget`` already satisfy :class:`Scheduler` through
``set_timer``; tests substitute a manual clock.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class TimerHandle(Protocol):
    """A pending one-shot callback."""

    def stop(self) -> None:
        """Cancel the callback. Stopping twice is a no-op."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Anything that can run a callback once after a delay."""

    def set_timer(self, delay: float, callback: Callable[[], object]) -> TimerHandle:
        """Schedule ``callback`` after ``delay`` seconds."""
        ...


__all__ = [
    "Scheduler",
    "TimerHandle",
]
