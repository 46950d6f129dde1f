"""Shared test fixtures for AdZone tests."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from pathlib import Path

import pytest

from adzone.models import Ad, UserConfig
from adzone.store import AdStore

# ── Manual-clock scheduler ───────────────────────────────────────────────────


class FakeTimer:
    """Handle returned by FakeScheduler.set_timer."""

    def __init__(self, due: float, seq: int, callback: Callable[[], object]) -> None:
        self.due = due
        self.seq = seq
        self.callback = callback
        self.active = True
        self.stop_calls = 0

    def stop(self) -> None:
        self.stop_calls += 1
        self.active = False


class FakeScheduler:
    """Deterministic stand-in for Textual's set_timer with a manual clock."""

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: list[FakeTimer] = []
        self._seq = itertools.count()

    def clock(self) -> float:
        return self.now

    def set_timer(self, delay: float, callback: Callable[[], object]) -> FakeTimer:
        timer = FakeTimer(self.now + max(0.0, delay), next(self._seq), callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self._timers if t.active]

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due timers in order. Returns the count fired."""
        target = self.now + seconds
        fired = 0
        while True:
            due = [t for t in self._timers if t.active and t.due <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            timer.active = False
            self._timers.remove(timer)
            self.now = max(self.now, timer.due)
            timer.callback()
            fired += 1
        self.now = target
        return fired


# ── Viewport double ──────────────────────────────────────────────────────────


class FakeViewport:
    """A scrollable surface measured in rows.

    ``content_height`` may be a number or a callable so tests can grow the
    document while autoscroll runs. ``listener`` mirrors a synchronous
    scroll watcher.
    """

    def __init__(
        self,
        content_height: float | Callable[[], float] = 100.0,
        height: float = 20.0,
    ) -> None:
        self._content_height = content_height
        self.height = height
        self.offset = 0.0
        self.writes: list[float] = []
        self.listener: Callable[[float], object] | None = None

    @property
    def content_height(self) -> float:
        value = self._content_height
        return float(value() if callable(value) else value)

    @content_height.setter
    def content_height(self, value: float | Callable[[], float]) -> None:
        self._content_height = value

    @property
    def scroll_offset_y(self) -> float:
        return self.offset

    @property
    def max_scroll_offset_y(self) -> float:
        return max(0.0, self.content_height - self.height)

    def scroll_to_offset(self, offset: float) -> None:
        self.writes.append(offset)
        self._set(offset)

    def user_scroll(self, offset: float) -> None:
        """Simulate the user dragging the scroll position."""
        self._set(offset)

    def _set(self, offset: float) -> None:
        self.offset = max(0.0, min(offset, self.max_scroll_offset_y))
        listener = self.listener
        if listener is not None:
            listener(self.offset)


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def make_ad():
    """Factory fixture for creating Ad instances with unique ids."""
    counter = itertools.count(1)

    def _make(
        title: str | None = None,
        description: str | None = None,
        smart_link: str | None = None,
        ad_id: int | None = None,
        clicks: int = 0,
    ) -> Ad:
        n = ad_id if ad_id is not None else next(counter)
        return Ad(
            id=n,
            title=title if title is not None else f"Ad {n}",
            description=description if description is not None else f"Description {n}",
            smart_link=smart_link or f"https://example.com/offers/{n}",
            clicks=clicks,
        )

    return _make


@pytest.fixture
def make_ads(make_ad):
    def _make(count: int) -> list[Ad]:
        return [make_ad() for _ in range(count)]

    return _make


@pytest.fixture
def store(tmp_path: Path) -> AdStore:
    ad_store = AdStore(tmp_path / "adzone.db")
    ad_store.init_db()
    return ad_store


@pytest.fixture
def sample_config():
    """Factory fixture for creating UserConfig with optional overrides."""

    def _make(**kwargs) -> UserConfig:
        return UserConfig(**kwargs)

    return _make
