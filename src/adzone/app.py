"""AdZone feed TUI.

Key bindings:
    /           - Search ads (title and description)
    Esc         - Clear search
    p           - Pause / resume autoscroll
    v           - Switch between full cards and a compact list
    Ctrl+r      - Reload the feed with a fresh order
    Enter       - Open the focused ad's offer
    Ctrl+Shift+a / F2 - Admin dashboard
    q           - Quit
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
import webbrowser
from collections.abc import Callable
from typing import Any, TypeVar

from textual import on
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.timer import Timer
from textual.widget import Widget
from textual.widgets import Footer, Header, Input, Label, Static

from adzone.action_messages import (
    build_actionable_error,
    build_empty_state,
    build_feed_header,
)
from adzone.auth import AdminGate
from adzone.config import save_config
from adzone.dashboard import AdminDashboardScreen
from adzone.feed import FeedController
from adzone.models import Ad, AutoscrollState, UserConfig
from adzone.modals import AdminLoginModal
from adzone.services import (
    AppServices,
    build_default_app_services,
    load_feed_items,
    register_interaction,
)
from adzone.ui_constants import APP_BINDINGS, APP_CSS, SEARCH_DEBOUNCE_DELAY
from adzone.widgets import AdCard, FeedSentinel, FeedViewport

logger = logging.getLogger(__name__)

WidgetT = TypeVar("WidgetT", bound=Widget)

AUTOSCROLL_LABELS: dict[AutoscrollState, str] = {
    AutoscrollState.IDLE: "waiting for content",
    AutoscrollState.RUNNING: "on",
    AutoscrollState.PAUSED_BY_USER: "paused (you scrolled, p to resume)",
    AutoscrollState.PAUSED_BY_COMMAND: "paused (p to resume)",
    AutoscrollState.STOPPED_AT_BOTTOM: "end of feed",
}


class AdZoneApp(App):
    """Progressive, shuffled, auto-scrolling ad feed."""

    TITLE = "AdZone"
    SUB_TITLE = "Discover Amazing Products"

    CSS = APP_CSS

    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        services: AppServices | None = None,
        config: UserConfig | None = None,
        *,
        persist_config: Callable[[UserConfig], bool] | None = save_config,
        open_url: Callable[[str], object] = webbrowser.open,
        start_admin: bool = False,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self._services: AppServices = services or build_default_app_services()
        self._config = config or UserConfig()
        self._gate = AdminGate(self._config, persist_config)
        self._open_url = open_url
        self._start_admin = start_admin

        self._search_timer: Timer | None = None
        self._pending_query: str = ""
        self._loading: bool = False
        self._card_count: int = 0
        self._compact_view: bool = False

        # Background task tracking (prevent GC of fire-and-forget tasks)
        self._background_tasks: set[asyncio.Task[None]] = set()

        self._feed = FeedController(
            self,
            self._config.feed,
            rng=rng,
            clock=clock,
            after_render=self.call_after_refresh,
            on_window_change=self._render_window,
            on_state_change=self._on_autoscroll_state,
        )

    @property
    def feed(self) -> FeedController:
        return self._feed

    @property
    def gate(self) -> AdminGate:
        return self._gate

    def compose(self) -> ComposeResult:
        yield Header()
        yield Label(build_feed_header(0, searching=False), id="feed-header")
        with Vertical(id="search-container"):
            yield Input(placeholder=" Search products...", id="search-input")
        yield Static("", id="feed-message")
        with FeedViewport(id="feed"):
            yield FeedSentinel()
        yield Label("", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        viewport = self._get_viewport()
        viewport.scroll_listener = self._on_feed_scroll
        self._feed.attach(viewport, viewport.sentinel_geometry)
        viewport.focus()
        self._track_task(self._load_feed())
        if self._start_admin:
            self.action_admin()
        logger.debug("App mounted: settings=%s", self._config.feed)

    async def on_unmount(self) -> None:
        """Stop timers, tear down the feed and cancel background tasks.

        Uses atomic swap pattern to avoid race conditions with timer callbacks.
        """
        timer = self._search_timer
        self._search_timer = None
        if timer is not None:
            timer.stop()

        self._feed.teardown()

        pending = [task for task in self._background_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            _, still_pending = await asyncio.wait(pending, timeout=0.5)
            for task in still_pending:
                logger.debug("Background task did not cancel before shutdown: %r", task)
        self._background_tasks.clear()

    # ── Widgets ────────────────────────────────────────────────────────

    def _query_main(self, selector: str, expect_type: type[WidgetT]) -> WidgetT | None:
        """Query the feed screen even while a modal or the dashboard is on top."""
        stack = self.screen_stack
        if not stack:
            return None
        try:
            return stack[0].query_one(selector, expect_type)
        except NoMatches:
            return None

    def _get_viewport(self) -> FeedViewport:
        return self.query_one("#feed", FeedViewport)

    def _get_search_input_widget(self) -> Input:
        return self.query_one("#search-input", Input)

    def _get_search_container_widget(self) -> Vertical:
        return self.query_one("#search-container", Vertical)

    # ── Background tasks ───────────────────────────────────────────────

    def _track_task(self, coro: Any) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    # ── Feed loading and rendering ─────────────────────────────────────

    async def _load_feed(self, *, reload: bool = False) -> None:
        self._loading = True
        self._update_feed_chrome()
        try:
            items = await load_feed_items(self._services.store)
        except Exception as e:
            logger.error("Unexpected failure loading the feed: %s", e, exc_info=True)
            items = []
        finally:
            self._loading = False
        if self._feed.torn_down:
            return
        if reload:
            self._feed.reload(items)
        else:
            self._feed.load(items)
        self._update_feed_chrome()
        logger.debug("Feed loaded: %d ads (reload=%s)", len(items), reload)

    def _render_window(self, items: tuple[Ad, ...], reset: bool) -> None:
        """Mount cards for the visible window; only new cards on growth."""
        viewport = self._query_main("#feed", FeedViewport)
        sentinel = self._query_main("#feed-sentinel", FeedSentinel)
        if viewport is None or sentinel is None:
            return
        if reset:
            viewport.query(AdCard).remove()
            self._card_count = 0
        new_items = items[self._card_count :]
        if new_items:
            term = self._feed.search_term
            viewport.mount_all(
                [AdCard(ad, highlight=term, compact=self._compact_view) for ad in new_items],
                before=sentinel,
            )
        self._card_count = len(items)
        self._update_feed_chrome()

    def _update_feed_chrome(self) -> None:
        """Refresh header, loading/empty message and status bar."""
        header = self._query_main("#feed-header", Label)
        message = self._query_main("#feed-message", Static)
        if header is None or message is None:
            return
        searching = bool(self._feed.search_term)
        header.update(build_feed_header(len(self._feed.filtered_view), searching=searching))
        if self._loading and not self._feed.loaded:
            message.update("Loading products...")
            message.add_class("visible")
        elif self._feed.loaded and not self._feed.visible_items:
            message.update(build_empty_state(searching=searching))
            message.add_class("visible")
        else:
            message.remove_class("visible")
        self._update_status_bar()

    def _update_status_bar(self) -> None:
        status = self._query_main("#status-bar", Label)
        if status is None:
            return
        window = self._feed.window
        total = len(self._feed.filtered_view)
        parts = [
            f"Autoscroll: {AUTOSCROLL_LABELS[self._feed.autoscroll_state]}",
            f"{window.visible_count}/{total} shown",
            f"View: {'list' if self._compact_view else 'cards'}",
        ]
        if window.is_loading:
            parts.append("Loading more...")
        status.update("  ·  ".join(parts))

    def _on_autoscroll_state(self, state: AutoscrollState) -> None:
        self._update_status_bar()

    # ── Feed events ────────────────────────────────────────────────────

    def _on_feed_scroll(self, offset: float) -> None:
        self._feed.notify_scroll(offset)
        if self._feed.check_proximity():
            self._update_status_bar()

    @on(FeedViewport.UserInput)
    def on_feed_user_input(self, event: FeedViewport.UserInput) -> None:
        self._feed.notify_input(event.kind)

    @on(FeedViewport.Resized)
    def on_feed_resized(self, event: FeedViewport.Resized) -> None:
        if self._feed.check_proximity():
            self._update_status_bar()

    @on(AdCard.Opened)
    def on_ad_opened(self, event: AdCard.Opened) -> None:
        self._open_offer(event.ad)

    def _open_offer(self, ad: Ad) -> None:
        """Register the click in the background and open the link."""
        self._track_task(register_interaction(self._services.store, ad.id))
        try:
            self._open_url(ad.smart_link)
        except (webbrowser.Error, OSError) as e:
            logger.warning("Failed to open %s: %s", ad.smart_link, e, exc_info=True)
            self.notify(
                build_actionable_error(
                    "open the offer",
                    why=str(e) or "the browser could not be launched",
                    next_step=f"open {ad.smart_link} manually",
                ),
                severity="error",
            )

    # ── Search ─────────────────────────────────────────────────────────

    def action_toggle_search(self) -> None:
        container = self._get_search_container_widget()
        if container.has_class("visible"):
            container.remove_class("visible")
            self._get_viewport().focus()
            return
        container.add_class("visible")
        self._get_search_input_widget().focus()

    def action_cancel_search(self) -> None:
        timer = self._search_timer
        self._search_timer = None
        if timer is not None:
            timer.stop()
        search_input = self._get_search_input_widget()
        search_input.value = ""
        self._pending_query = ""
        self._get_search_container_widget().remove_class("visible")
        self._apply_search("")
        self._get_viewport().focus()

    @on(Input.Changed, "#search-input")
    def on_search_changed(self, event: Input.Changed) -> None:
        """Handle search input change with debouncing.

        Uses atomic swap pattern to avoid race conditions with timer callbacks.
        """
        self._pending_query = event.value
        old_timer = self._search_timer
        self._search_timer = None
        if old_timer is not None:
            old_timer.stop()
        self._search_timer = self.set_timer(SEARCH_DEBOUNCE_DELAY, self._debounced_search)

    @on(Input.Submitted, "#search-input")
    def on_search_submitted(self, event: Input.Submitted) -> None:
        timer = self._search_timer
        self._search_timer = None
        if timer is not None:
            timer.stop()
        self._apply_search(event.value)
        self._get_viewport().focus()

    def _debounced_search(self) -> None:
        """Apply search after debounce delay."""
        self._search_timer = None
        self._apply_search(self._pending_query)

    def _apply_search(self, term: str) -> None:
        self._feed.set_search(term.strip())
        self._update_feed_chrome()

    # ── Commands ───────────────────────────────────────────────────────

    def action_toggle_autoscroll(self) -> None:
        state = self._feed.toggle_autoscroll()
        self.notify(f"Autoscroll {AUTOSCROLL_LABELS[state]}", title="Autoscroll", timeout=2)

    def action_toggle_view(self) -> None:
        """Switch the feed between full cards and one-line rows."""
        self._compact_view = not self._compact_view
        viewport = self._get_viewport()
        viewport.set_class(self._compact_view, "compact")
        for card in viewport.query(AdCard):
            card.set_compact(self._compact_view)
        self._update_status_bar()
        # The document height changed; the sentinel may now be in range
        self.call_after_refresh(self._feed.check_proximity)

    def action_reload(self) -> None:
        self._track_task(self._load_feed(reload=True))

    def action_admin(self) -> None:
        if isinstance(self.screen, AdminDashboardScreen):
            return
        if self._gate.is_authenticated():
            self._open_dashboard()
            return

        def on_login(success: bool | None) -> None:
            if success:
                self._open_dashboard()

        self.push_screen(AdminLoginModal(self._gate), on_login)

    def _open_dashboard(self) -> None:
        was_running = self._feed.autoscroll_state is AutoscrollState.RUNNING
        if was_running:
            self._feed.pause_autoscroll()

        def on_close(changed: bool | None) -> None:
            if changed:
                self.action_reload()
            elif was_running:
                self._feed.resume_autoscroll()

        self.push_screen(AdminDashboardScreen(self._services.store, self._gate), on_close)


__all__ = [
    "AUTOSCROLL_LABELS",
    "AdZoneApp",
]
