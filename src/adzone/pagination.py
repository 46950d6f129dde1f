"""Pagination Window: a growing prefix over the filtered view."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from adzone.models import DEFAULT_ADVANCE_DELAY, DEFAULT_PAGE_SIZE, Ad
from adzone.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

WindowChangeCallback = Callable[[tuple[Ad, ...], bool], None]


def same_source(previous: Sequence[Ad] | None, current: Sequence[Ad]) -> bool:
    """True when both sequences hold the same objects in the same order."""
    if previous is None or len(previous) != len(current):
        return False
    return all(a is b for a, b in zip(previous, current, strict=True))


class PaginationWindow:
    """Expose ``source[:k]`` where ``k`` grows one page per ``advance()``.

    At most one advance is in flight. The advance commits after a fixed
    delay and is cancelled by ``dispose()`` or by a source reset.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        advance_delay: float = DEFAULT_ADVANCE_DELAY,
        on_change: WindowChangeCallback | None = None,
    ) -> None:
        self._scheduler = scheduler
        self.page_size = max(1, page_size)
        self.advance_delay = max(0.0, advance_delay)
        self._on_change = on_change
        self._source: tuple[Ad, ...] = ()
        self._seen_source: tuple[Ad, ...] | None = None
        self._count = 0
        self._has_more = False
        self._loading = False
        self._timer: TimerHandle | None = None
        self._disposed = False

    # ── Read-only state ────────────────────────────────────────────────

    @property
    def source(self) -> tuple[Ad, ...]:
        return self._source

    @property
    def visible_items(self) -> tuple[Ad, ...]:
        return self._source[: self._count]

    @property
    def visible_count(self) -> int:
        return self._count

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ── Operations ─────────────────────────────────────────────────────

    def initialize(self, source: Sequence[Ad]) -> None:
        """Show the first page of ``source`` and drop any in-flight advance."""
        if self._disposed:
            return
        self._cancel_pending()
        self._source = tuple(source)
        self._seen_source = self._source
        self._count = min(len(self._source), self.page_size)
        self._has_more = len(self._source) > self._count
        logger.debug(
            "Window initialized: %d/%d items, has_more=%s",
            self._count,
            len(self._source),
            self._has_more,
        )
        self._emit(reset=True)

    def reset_if_source_changed(self, source: Sequence[Ad]) -> bool:
        """Re-initialize on a genuinely different source.

        Returns True when the window was reset. A source holding the same
        objects in the same order keeps the current window and only
        recomputes ``has_more``.
        """
        if self._disposed:
            return False
        if same_source(self._seen_source, source):
            self._has_more = len(self._source) > self._count
            return False
        self.initialize(source)
        return True

    def advance(self) -> bool:
        """Schedule growth by one page. Returns True if an advance was started."""
        if self._disposed or self._loading or not self._has_more:
            return False
        self._loading = True
        self._timer = self._scheduler.set_timer(self.advance_delay, self._commit)
        logger.debug("Page advance scheduled (window=%d)", self._count)
        return True

    def dispose(self) -> None:
        """Cancel any pending advance; no further changes are emitted."""
        self._cancel_pending()
        self._disposed = True
        self._on_change = None

    # ── Internals ──────────────────────────────────────────────────────

    def _commit(self) -> None:
        self._timer = None
        if self._disposed or not self._loading:
            return
        self._count = min(self._count + self.page_size, len(self._source))
        self._has_more = self._count < len(self._source)
        self._loading = False
        logger.debug(
            "Page advance committed: %d/%d items, has_more=%s",
            self._count,
            len(self._source),
            self._has_more,
        )
        self._emit(reset=False)

    def _cancel_pending(self) -> None:
        timer = self._timer
        self._timer = None
        self._loading = False
        if timer is not None:
            timer.stop()

    def _emit(self, *, reset: bool) -> None:
        callback = self._on_change
        if callback is not None:
            callback(self.visible_items, reset)


__all__ = [
    "PaginationWindow",
    "WindowChangeCallback",
    "same_source",
]
