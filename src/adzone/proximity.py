"""Proximity Trigger: request the next page when the sentinel nears the viewport."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from adzone.models import DEFAULT_TRIGGER_MARGIN, DEFAULT_TRIGGER_THRESHOLD
from adzone.pagination import PaginationWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Span:
    """A vertical extent in the scroll container's virtual coordinates."""

    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + max(0.0, self.height)


# (sentinel, viewport) or None when geometry cannot be observed
Geometry = Callable[[], tuple[Span, Span] | None]


def intersection_ratio(target: Span, viewport: Span, margin: float = 0.0) -> float:
    """Fraction of ``target`` inside ``viewport`` grown by ``margin`` on both edges.

    A zero-height target counts as fully visible when it lies within the
    grown viewport, edges included.
    """
    view_top = viewport.top - margin
    view_bottom = viewport.bottom + margin
    if target.height <= 0:
        return 1.0 if view_top <= target.top <= view_bottom else 0.0
    overlap = min(target.bottom, view_bottom) - max(target.top, view_top)
    if overlap <= 0:
        return 0.0
    return min(1.0, overlap / target.height)


class ProximityTrigger:
    """Watch one sentinel and advance the window when it becomes visible.

    The geometry callback is attached once per sentinel lifetime and
    released by ``disconnect()``; no advance is requested afterwards. When
    geometry is unavailable the trigger loads eagerly instead of stalling.
    """

    def __init__(
        self,
        window: PaginationWindow,
        *,
        root_margin: float = DEFAULT_TRIGGER_MARGIN,
        threshold: float = DEFAULT_TRIGGER_THRESHOLD,
    ) -> None:
        self._window = window
        self.root_margin = max(0.0, root_margin)
        self.threshold = max(0.0, min(threshold, 1.0))
        self._geometry: Geometry | None = None
        self._observing = False
        self._intersecting = False

    @property
    def observing(self) -> bool:
        return self._observing

    @property
    def intersecting(self) -> bool:
        return self._intersecting

    def observe(self, geometry: Geometry | None) -> bool:
        """Attach to a sentinel. Returns False if already observing one.

        ``geometry=None`` declares that observation is unsupported.
        """
        if self._observing:
            logger.debug("Proximity trigger already attached; ignoring observe()")
            return False
        self._geometry = geometry
        self._observing = True
        self._intersecting = False
        return True

    def disconnect(self) -> None:
        """Release the sentinel. Safe to call repeatedly."""
        self._geometry = None
        self._observing = False
        self._intersecting = False

    def evaluate(self) -> bool | None:
        """Return whether the sentinel intersects, or None if unobservable."""
        geometry = self._geometry
        if geometry is None:
            return None
        measured = geometry()
        if measured is None:
            return None
        sentinel, viewport = measured
        ratio = intersection_ratio(sentinel, viewport, self.root_margin)
        if self.threshold <= 0:
            return ratio > 0
        return ratio >= self.threshold

    def check(self) -> bool:
        """Evaluate visibility and advance when warranted.

        Returns True if an advance was started.
        """
        if not self._observing:
            return False
        intersecting = self.evaluate()
        if intersecting is None:
            # Fail open: without observation, load rather than never load
            self._intersecting = False
            if self._window.has_more and not self._window.is_loading:
                logger.debug("Intersection unavailable; loading next page eagerly")
                return self._window.advance()
            return False
        self._intersecting = intersecting
        if intersecting and self._window.has_more and not self._window.is_loading:
            return self._window.advance()
        return False


__all__ = [
    "Geometry",
    "ProximityTrigger",
    "Span",
    "intersection_ratio",
]
