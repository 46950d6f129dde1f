"""Progressive feed renderer.

Composes the Ordering Store, Pagination Window, Proximity Trigger,
Autoscroll Navigator and Interaction Monitor behind one object so a host
(the Textual app, or a test) only forwards events and renders windows::

    store.list_all() -> OrderedSet.from_load() -> filter_view(term)
        -> PaginationWindow -> host renders -> ProximityTrigger grows window
        -> AutoscrollNavigator scrolls -> InteractionMonitor may pause it
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Sequence

from adzone.autoscroll import AutoscrollNavigator, Viewport
from adzone.interaction import InteractionKind, InteractionMonitor
from adzone.models import FRAME_INTERVAL, Ad, AutoscrollState, FeedSettings
from adzone.ordering import EMPTY_ORDERED_SET, OrderedSet, filter_view
from adzone.pagination import PaginationWindow, WindowChangeCallback
from adzone.proximity import Geometry, ProximityTrigger
from adzone.scheduling import Scheduler

logger = logging.getLogger(__name__)


def _run_now(callback: Callable[[], object]) -> None:
    callback()


class FeedController:
    """Own the feed's derived state and its two timelines (frames, page advances)."""

    def __init__(
        self,
        scheduler: Scheduler,
        settings: FeedSettings | None = None,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        frame_interval: float = FRAME_INTERVAL,
        after_render: Callable[[Callable[[], object]], object] = _run_now,
        on_window_change: WindowChangeCallback | None = None,
        on_state_change: Callable[[AutoscrollState], None] | None = None,
    ) -> None:
        self.settings = settings or FeedSettings()
        self._scheduler = scheduler
        self._rng = rng
        self._clock = clock
        self._frame_interval = frame_interval
        self._after_render = after_render
        self._on_window_change = on_window_change
        self._on_state_change = on_state_change

        self._ordered: OrderedSet = EMPTY_ORDERED_SET
        self._filtered: tuple[Ad, ...] = ()
        self._search_term = ""
        self._loaded = False
        self._torn_down = False

        self.window = PaginationWindow(
            scheduler,
            page_size=self.settings.page_size,
            advance_delay=self.settings.advance_delay,
            on_change=self._handle_window_change,
        )
        self.trigger = ProximityTrigger(
            self.window,
            root_margin=self.settings.trigger_margin,
            threshold=self.settings.trigger_threshold,
        )
        self.monitor = InteractionMonitor(
            self._handle_user_interaction,
            noise_threshold=self.settings.noise_threshold,
        )
        self._viewport: Viewport | None = None
        self.navigator: AutoscrollNavigator | None = None

    # ── Read-only state ────────────────────────────────────────────────

    @property
    def ordered(self) -> OrderedSet:
        return self._ordered

    @property
    def filtered_view(self) -> tuple[Ad, ...]:
        return self._filtered

    @property
    def visible_items(self) -> tuple[Ad, ...]:
        return self.window.visible_items

    @property
    def search_term(self) -> str:
        return self._search_term

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    @property
    def autoscroll_state(self) -> AutoscrollState:
        if self.navigator is None:
            return AutoscrollState.IDLE
        return self.navigator.state

    # ── Mounting ───────────────────────────────────────────────────────

    def attach(self, viewport: Viewport, geometry: Geometry | None) -> None:
        """Bind the viewport and the sentinel geometry (once per mount)."""
        if self._torn_down or self.navigator is not None:
            return
        self._viewport = viewport
        self.navigator = AutoscrollNavigator(
            viewport,
            self._scheduler,
            self.monitor,
            velocity=self.settings.velocity,
            bottom_epsilon=self.settings.bottom_epsilon,
            frame_interval=self._frame_interval,
            clock=self._clock,
            content_pending=self._content_pending,
            on_hold=self.check_proximity,
            on_state_change=self._handle_state_change,
        )
        if not self.settings.autoscroll_enabled:
            self.navigator.pause()
        self.monitor.reset(viewport.scroll_offset_y)
        self.trigger.observe(geometry)
        if self.window.visible_items:
            self._after_render(self._content_rendered)

    def teardown(self) -> None:
        """Release the frame, the page-advance timer and the observer."""
        if self._torn_down:
            return
        self._torn_down = True
        self.window.dispose()
        self.trigger.disconnect()
        if self.navigator is not None:
            self.navigator.teardown()
        self.monitor.dispose()
        self._on_window_change = None
        self._on_state_change = None
        logger.debug("Feed torn down")

    # ── Data ───────────────────────────────────────────────────────────

    def load(self, items: Sequence[Ad]) -> OrderedSet:
        """Accept a fresh fetch: shuffle once and show the first page."""
        if self._torn_down:
            return self._ordered
        self._ordered = OrderedSet.from_load(items, self._rng)
        self._loaded = True
        # A new load is always a new source, even when it reuses the same objects
        self._filtered = filter_view(self._ordered, self._search_term)
        self.window.initialize(self._filtered)
        return self._ordered

    def reload(self, items: Sequence[Ad]) -> OrderedSet:
        """Start a new session with a fresh permutation."""
        if self.navigator is not None:
            self.navigator.restart()
            if not self.settings.autoscroll_enabled:
                self.navigator.pause()
        return self.load(items)

    def set_search(self, term: str) -> None:
        """Change the search term; the permutation is left untouched."""
        if self._torn_down or term == self._search_term:
            return
        self._search_term = term
        if self._loaded:
            self._refilter()

    def _refilter(self) -> None:
        self._filtered = filter_view(self._ordered, self._search_term)
        self.window.reset_if_source_changed(self._filtered)

    # ── Events from the host ───────────────────────────────────────────

    def check_proximity(self) -> bool:
        """Re-evaluate the sentinel (scroll, resize, after render)."""
        if self._torn_down:
            return False
        return self.trigger.check()

    def notify_scroll(self, offset: float) -> bool:
        """Forward a viewport offset change. Returns True if user-induced."""
        if self._torn_down:
            return False
        return self.monitor.observe_scroll(offset)

    def notify_input(self, kind: InteractionKind) -> bool:
        if self._torn_down:
            return False
        return self.monitor.observe_event(kind)

    def notify_key(self, key: str) -> bool:
        if self._torn_down:
            return False
        return self.monitor.observe_key(key)

    # ── Autoscroll commands ────────────────────────────────────────────

    def pause_autoscroll(self) -> None:
        if self.navigator is not None:
            self.navigator.pause()

    def resume_autoscroll(self) -> None:
        if self.navigator is not None:
            self.navigator.resume()

    def toggle_autoscroll(self) -> AutoscrollState:
        if self.navigator is None:
            return AutoscrollState.IDLE
        return self.navigator.toggle()

    # ── Internals ──────────────────────────────────────────────────────

    def _content_pending(self) -> bool:
        return self.window.has_more or self.window.is_loading

    def _handle_window_change(self, items: tuple[Ad, ...], reset: bool) -> None:
        if self._torn_down:
            return
        if reset and self._viewport is not None:
            self.monitor.record_programmatic_scroll(0.0)
            self._viewport.scroll_to_offset(0.0)
            if self.navigator is not None:
                self.navigator.sync_position(0.0)
        callback = self._on_window_change
        if callback is not None:
            callback(items, reset)
        if self.navigator is not None:
            self._after_render(self._content_rendered)

    def _content_rendered(self) -> None:
        if self._torn_down or self.navigator is None:
            return
        self.navigator.set_content_available(bool(self.window.visible_items))
        self.trigger.check()

    def _handle_user_interaction(self, kind: InteractionKind) -> None:
        if self.navigator is not None:
            self.navigator.handle_user_interaction(kind)

    def _handle_state_change(self, state: AutoscrollState) -> None:
        callback = self._on_state_change
        if callback is not None:
            callback(state)


__all__ = [
    "FeedController",
]
