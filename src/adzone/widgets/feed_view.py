"""Scrollable feed container and its load-more sentinel."""

from __future__ import annotations

from collections.abc import Callable

from textual import events
from textual.containers import VerticalScroll
from textual.css.query import NoMatches
from textual.message import Message
from textual.widgets import Static

from adzone.interaction import InteractionKind, is_scroll_key
from adzone.proximity import Span


class FeedSentinel(Static):
    """Marker placed after the last visible card; its visibility loads more."""

    def __init__(self) -> None:
        super().__init__("", id="feed-sentinel")


class FeedViewport(VerticalScroll):
    """The feed's scroll container.

    Exposes the offset interface the autoscroll navigator drives, reports
    every offset change synchronously to ``scroll_listener`` and posts a
    :class:`UserInput` message for wheel, pointer and scroll-key input.
    """

    class UserInput(Message):
        """A discrete user input event inside the feed."""

        def __init__(self, kind: InteractionKind) -> None:
            super().__init__()
            self.kind = kind

    class Resized(Message):
        """The viewport size changed; sentinel visibility may have too."""

    def __init__(self, *children, **kwargs) -> None:
        super().__init__(*children, **kwargs)
        self.scroll_listener: Callable[[float], object] | None = None

    # ── Viewport protocol ──────────────────────────────────────────────

    @property
    def scroll_offset_y(self) -> float:
        return float(self.scroll_y)

    @property
    def max_scroll_offset_y(self) -> float:
        return float(self.max_scroll_y)

    def scroll_to_offset(self, offset: float) -> None:
        self.scroll_to(y=offset, animate=False, force=True, immediate=True)

    # ── Geometry ───────────────────────────────────────────────────────

    def sentinel_geometry(self) -> tuple[Span, Span] | None:
        """Return (sentinel, viewport) spans in virtual rows.

        Returns None when there is no mounted sentinel to measure.
        """
        try:
            sentinel = self.query_one(FeedSentinel)
        except NoMatches:
            return None
        if not sentinel.is_mounted:
            return None
        region = sentinel.virtual_region
        target = Span(float(region.y), float(region.height))
        view = Span(float(self.scroll_y), float(self.scrollable_content_region.height))
        return target, view

    # ── Event forwarding ───────────────────────────────────────────────

    def watch_scroll_y(self, old_value: float, new_value: float) -> None:
        super().watch_scroll_y(old_value, new_value)
        listener = self.scroll_listener
        if listener is not None:
            listener(float(new_value))

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self.post_message(self.UserInput(InteractionKind.WHEEL))

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self.post_message(self.UserInput(InteractionKind.WHEEL))

    def on_mouse_down(self, event: events.MouseDown) -> None:
        self.post_message(self.UserInput(InteractionKind.POINTER))

    def on_key(self, event: events.Key) -> None:
        if is_scroll_key(event.key):
            self.post_message(self.UserInput(InteractionKind.KEY))

    def on_resize(self, event: events.Resize) -> None:
        self.post_message(self.Resized())


__all__ = [
    "FeedSentinel",
    "FeedViewport",
]
