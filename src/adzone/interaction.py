"""Interaction Monitor: tell autoscroll-induced scrolling from user input."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from adzone.models import DEFAULT_NOISE_THRESHOLD

logger = logging.getLogger(__name__)


class InteractionKind(str, Enum):
    """Sources of a user interaction signal."""

    WHEEL = "wheel"
    TOUCH = "touch"
    POINTER = "pointer"
    KEY = "key"
    SCROLL = "scroll"


# Textual key names that move the feed viewport
SCROLL_KEYS = frozenset(
    {
        "up",
        "down",
        "pageup",
        "pagedown",
        "home",
        "end",
        "space",
        "shift+space",
        "ctrl+home",
        "ctrl+end",
        "ctrl+pageup",
        "ctrl+pagedown",
    }
)


def is_scroll_key(key: str) -> bool:
    """Return True for keys that scroll the viewport."""
    return key in SCROLL_KEYS


class InteractionMonitor:
    """Fold scroll offsets and input events into one "user interacted" signal.

    While the navigator is writing, an offset is compared with the
    navigator's last written offset; otherwise with the last offset seen.
    Deltas at or below ``noise_threshold`` are ignored. Discrete input
    events always count.
    """

    def __init__(
        self,
        on_user_interaction: Callable[[InteractionKind], None] | None = None,
        *,
        noise_threshold: float = DEFAULT_NOISE_THRESHOLD,
    ) -> None:
        self._on_user_interaction = on_user_interaction
        self.noise_threshold = max(0.0, noise_threshold)
        self._navigator_active = False
        self._last_written: float | None = None
        self._last_seen: float | None = None
        self._user_interacted = False
        self._disposed = False

    @property
    def user_interacted(self) -> bool:
        return self._user_interacted

    @property
    def navigator_active(self) -> bool:
        return self._navigator_active

    def set_navigator_active(self, active: bool) -> None:
        """Mark whether the navigator currently owns the scroll offset."""
        self._navigator_active = active
        if not active:
            self._last_written = None

    def record_programmatic_scroll(self, offset: float) -> None:
        """Note an offset the navigator is about to write."""
        self._last_written = offset
        self._last_seen = offset

    def observe_scroll(self, offset: float) -> bool:
        """Classify a new viewport offset. Returns True if user-induced."""
        if self._disposed:
            return False
        if self._navigator_active and self._last_written is not None:
            reference = self._last_written
        else:
            reference = self._last_seen
        self._last_seen = offset
        if reference is None:
            return False
        if abs(offset - reference) <= self.noise_threshold:
            return False
        return self._signal(InteractionKind.SCROLL)

    def observe_event(self, kind: InteractionKind) -> bool:
        """Record a discrete input event (wheel, touch, pointer, key)."""
        if self._disposed:
            return False
        return self._signal(kind)

    def observe_key(self, key: str) -> bool:
        """Record a key press; only scroll keys count."""
        if not is_scroll_key(key):
            return False
        return self.observe_event(InteractionKind.KEY)

    def reset(self, offset: float | None = None) -> None:
        """Clear the interaction flag and rebase on ``offset``."""
        self._user_interacted = False
        self._last_written = None
        self._last_seen = offset

    def dispose(self) -> None:
        """Stop emitting signals."""
        self._disposed = True
        self._on_user_interaction = None

    def _signal(self, kind: InteractionKind) -> bool:
        self._user_interacted = True
        logger.debug("User interaction detected: %s", kind.value)
        callback = self._on_user_interaction
        if callback is not None:
            callback(kind)
        return True


__all__ = [
    "SCROLL_KEYS",
    "InteractionKind",
    "InteractionMonitor",
    "is_scroll_key",
]
