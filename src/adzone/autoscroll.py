"""Autoscroll Navigator: time-based continuous scrolling of the feed viewport.

State machine::

    IDLE --content--> RUNNING --bottom--> STOPPED_AT_BOTTOM (terminal)
                        |  ^
         user input     |  |  resume()
                        v  |
                 PAUSED_BY_USER / PAUSED_BY_COMMAND

Each frame advances the offset by ``velocity * elapsed`` where ``elapsed``
is wall-clock time since the previous frame, so speed does not depend on
the frame rate. Exactly one frame is scheduled at a time.

At the bottom with a page still pending the loop holds for up to
``hold_limit`` seconds, then parks until more content is reported.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from adzone.interaction import InteractionKind, InteractionMonitor
from adzone.models import (
    BOTTOM_HOLD_LIMIT,
    DEFAULT_BOTTOM_EPSILON,
    DEFAULT_VELOCITY,
    FRAME_INTERVAL,
    AutoscrollState,
)
from adzone.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


@runtime_checkable
class Viewport(Protocol):
    """The scrollable surface the navigator drives."""

    @property
    def scroll_offset_y(self) -> float:
        """Current vertical offset."""
        ...

    @property
    def max_scroll_offset_y(self) -> float:
        """Largest reachable vertical offset, read fresh on every call."""
        ...

    def scroll_to_offset(self, offset: float) -> None:
        """Jump to ``offset`` without animation."""
        ...


class AutoscrollNavigator:
    """Drive a viewport downward until the user intervenes or content ends."""

    def __init__(
        self,
        viewport: Viewport,
        scheduler: Scheduler,
        monitor: InteractionMonitor,
        *,
        velocity: float = DEFAULT_VELOCITY,
        bottom_epsilon: float = DEFAULT_BOTTOM_EPSILON,
        frame_interval: float = FRAME_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        content_pending: Callable[[], bool] | None = None,
        on_hold: Callable[[], object] | None = None,
        hold_limit: float = BOTTOM_HOLD_LIMIT,
        on_state_change: Callable[[AutoscrollState], None] | None = None,
    ) -> None:
        self._viewport = viewport
        self._scheduler = scheduler
        self._monitor = monitor
        self.velocity = velocity
        self.bottom_epsilon = max(0.0, bottom_epsilon)
        self.frame_interval = frame_interval
        self._clock = clock
        self._content_pending = content_pending
        self._on_hold = on_hold
        self.hold_limit = max(0.0, hold_limit)
        self._on_state_change = on_state_change

        self._state = AutoscrollState.IDLE
        self._frame: TimerHandle | None = None
        self._last_frame_at: float | None = None
        self._hold_started_at: float | None = None
        self._position = 0.0
        self._user_scrolled = False
        self._has_content = False
        self._torn_down = False

    # ── Read-only state ────────────────────────────────────────────────

    @property
    def state(self) -> AutoscrollState:
        return self._state

    @property
    def user_scrolled(self) -> bool:
        return self._user_scrolled

    @property
    def frame_pending(self) -> bool:
        return self._frame is not None

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    # ── Commands ───────────────────────────────────────────────────────

    def set_content_available(self, available: bool) -> None:
        """Report whether the visible window holds any items.

        The first non-empty window starts the loop unless the user has
        already interacted. An empty window suspends frames.
        """
        if self._torn_down:
            return
        self._has_content = available
        if not available:
            if self._state is AutoscrollState.RUNNING:
                self._cancel_frame()
                self._set_state(AutoscrollState.IDLE)
            return
        if self._state is AutoscrollState.RUNNING and self._frame is None:
            # Parked at the bottom: new content restarts the loop
            self._last_frame_at = None
            self._hold_started_at = None
            self._schedule_frame()
            return
        if self._state is AutoscrollState.IDLE:
            if self._user_scrolled:
                self._set_state(AutoscrollState.PAUSED_BY_USER)
            else:
                self._start()

    def pause(self) -> None:
        """Explicit pause command."""
        if self._torn_down or self._state is AutoscrollState.STOPPED_AT_BOTTOM:
            return
        if self._state is AutoscrollState.PAUSED_BY_COMMAND:
            return
        self._cancel_frame()
        self._set_state(AutoscrollState.PAUSED_BY_COMMAND)

    def resume(self) -> None:
        """Explicit resume command: restart from the current offset."""
        if self._torn_down:
            return
        if self._state not in (
            AutoscrollState.PAUSED_BY_USER,
            AutoscrollState.PAUSED_BY_COMMAND,
        ):
            return
        self._user_scrolled = False
        self._monitor.reset(self._viewport.scroll_offset_y)
        if not self._has_content:
            self._set_state(AutoscrollState.IDLE)
            return
        self._start()

    def toggle(self) -> AutoscrollState:
        """Pause when running, resume when paused."""
        if self._state is AutoscrollState.RUNNING:
            self.pause()
        else:
            self.resume()
        return self._state

    def handle_user_interaction(self, kind: InteractionKind) -> None:
        """Yield control to the user."""
        if self._torn_down:
            return
        self._user_scrolled = True
        if self._state is AutoscrollState.RUNNING:
            self._cancel_frame()
            self._set_state(AutoscrollState.PAUSED_BY_USER)
            logger.debug("Autoscroll yielded to user (%s)", kind.value)

    def sync_position(self, offset: float) -> None:
        """Rebase the internal float offset after an external jump."""
        self._position = offset

    def restart(self) -> None:
        """Forget the session (used on reload): back to IDLE, flags cleared."""
        if self._torn_down:
            return
        self._cancel_frame()
        self._user_scrolled = False
        self._has_content = False
        self._monitor.reset(self._viewport.scroll_offset_y)
        self._set_state(AutoscrollState.IDLE)

    def teardown(self) -> None:
        """Cancel any scheduled frame. No callback runs afterwards."""
        self._cancel_frame()
        self._torn_down = True
        self._on_state_change = None
        self._monitor.set_navigator_active(False)

    # ── Frame loop ─────────────────────────────────────────────────────

    def _start(self) -> None:
        self._position = self._viewport.scroll_offset_y
        self._last_frame_at = None
        self._hold_started_at = None
        self._set_state(AutoscrollState.RUNNING)
        self._schedule_frame()

    def _schedule_frame(self) -> None:
        if self._torn_down or self._state is not AutoscrollState.RUNNING:
            return
        if self._frame is not None:
            return
        self._frame = self._scheduler.set_timer(self.frame_interval, self._on_frame)

    def _on_frame(self) -> None:
        self._frame = None
        if self._torn_down or self._state is not AutoscrollState.RUNNING:
            return
        now = self._clock()
        elapsed = 0.0 if self._last_frame_at is None else max(0.0, now - self._last_frame_at)
        self._last_frame_at = now

        max_offset = self._viewport.max_scroll_offset_y
        target = self._position + self.velocity * elapsed
        if target >= max_offset - self.bottom_epsilon:
            target = max_offset
            self._write(target)
            if self._content_pending is not None and self._content_pending():
                self._hold(now)
                return
            self._set_state(AutoscrollState.STOPPED_AT_BOTTOM)
            logger.debug("Autoscroll reached bottom at offset %.2f", target)
            return
        self._hold_started_at = None
        self._write(target)
        self._schedule_frame()

    def _hold(self, now: float) -> None:
        """Wait at the bottom edge for the next page.

        Each held frame asks the host to re-check for more content. After
        ``hold_limit`` seconds the loop parks without a timer and is re-armed
        by the next ``set_content_available(True)``.
        """
        if self._hold_started_at is None:
            self._hold_started_at = now
        if self._on_hold is not None:
            self._on_hold()
        if self._frame is not None or self._state is not AutoscrollState.RUNNING:
            return
        if now - self._hold_started_at >= self.hold_limit:
            logger.debug("Autoscroll parked at bottom waiting for content")
            return
        self._schedule_frame()

    def _write(self, offset: float) -> None:
        self._position = offset
        self._monitor.record_programmatic_scroll(offset)
        self._viewport.scroll_to_offset(offset)

    def _cancel_frame(self) -> None:
        frame = self._frame
        self._frame = None
        if frame is not None:
            frame.stop()

    def _set_state(self, state: AutoscrollState) -> None:
        if state is self._state:
            return
        previous = self._state
        self._state = state
        self._monitor.set_navigator_active(state is AutoscrollState.RUNNING)
        logger.debug("Autoscroll %s -> %s", previous.value, state.value)
        callback = self._on_state_change
        if callback is not None:
            callback(state)


__all__ = [
    "AutoscrollNavigator",
    "Viewport",
]
