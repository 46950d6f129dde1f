"""Admin dashboard: aggregate stats and ad management."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Any

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Footer, Label, OptionList, Static
from textual.widgets.option_list import Option

from adzone.action_messages import (
    build_actionable_error,
    build_actionable_success,
    build_delete_confirmation_prompt,
    build_reset_confirmation_prompt,
)
from adzone.auth import AdminGate
from adzone.models import Ad, AdDraft, AdStats, AdUpdate
from adzone.modals import AdFormModal, ConfirmModal
from adzone.services.interfaces import AdAdminRepository
from adzone.store import AdNotFoundError, AdStoreError
from adzone.widgets import render_admin_ad_option
from adzone.widgets.cards import escape_rich_text

logger = logging.getLogger(__name__)

_STORE_ERRORS = (sqlite3.Error, AdStoreError, OSError)


def render_stats(stats: AdStats) -> str:
    """Render the dashboard stats header as Rich markup."""
    parts = [
        f"Total Ads: [bold]{stats.total_ads}[/]",
        f"Total Clicks: [bold]{stats.total_clicks}[/]",
        f"Avg Clicks/Ad: [bold]{stats.average_clicks_per_ad:.1f}[/]",
    ]
    top = stats.top_performing_ad
    if top is not None:
        parts.append(f"Top: [bold]{escape_rich_text(top.title)}[/] ({top.clicks})")
    return "   ".join(parts)


class AdminDashboardScreen(Screen[bool]):
    """Operator screen. Dismisses with True when ads were changed."""

    BINDINGS = [
        Binding("n", "new_ad", "New"),
        Binding("e", "edit_ad", "Edit"),
        Binding("d", "delete_ad", "Delete"),
        Binding("r", "refresh", "Refresh"),
        Binding("R", "reset_database", "Reset DB"),
        Binding("l", "logout", "Logout"),
        Binding("escape", "close", "Back to feed"),
    ]

    CSS = """
    #dash-container {
        height: 1fr;
        padding: 0 1;
    }

    #dash-title {
        text-style: bold;
        color: $accent;
    }

    #dash-stats {
        height: auto;
        margin-bottom: 1;
    }

    #dash-list {
        height: 1fr;
    }

    #dash-empty {
        color: $text-muted;
    }
    """

    def __init__(self, store: AdAdminRepository, gate: AdminGate) -> None:
        super().__init__()
        self._store = store
        self._gate = gate
        self._ads: list[Ad] = []
        self._changed = False
        self._background_tasks: set[asyncio.Task[None]] = set()

    @property
    def ads(self) -> list[Ad]:
        return self._ads

    @property
    def changed(self) -> bool:
        return self._changed

    def compose(self) -> ComposeResult:
        with Vertical(id="dash-container"):
            yield Label("AdZone Admin Dashboard", id="dash-title")
            yield Static("Loading...", id="dash-stats")
            yield Static("", id="dash-empty")
            yield OptionList(id="dash-list")
        yield Footer()

    def on_mount(self) -> None:
        self._track_task(self._refresh())

    async def on_unmount(self) -> None:
        for task in list(self._background_tasks):
            task.cancel()
        self._background_tasks.clear()

    # ── Background work ────────────────────────────────────────────────

    def _track_task(self, coro: Any) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in dashboard task: %s", exc, exc_info=exc)

    async def _refresh(self) -> None:
        try:
            ads = await asyncio.to_thread(self._store.list_all)
            stats = await asyncio.to_thread(self._store.get_stats)
        except _STORE_ERRORS:
            logger.warning("Failed to load dashboard data", exc_info=True)
            self.notify(
                build_actionable_error(
                    "load ads",
                    why="the database could not be read",
                    next_step="run adzone --check-db",
                ),
                severity="error",
            )
            return
        self._ads = ads
        self.query_one("#dash-stats", Static).update(render_stats(stats))
        self.query_one("#dash-empty", Static).update(
            "" if ads else "No ads yet. Press n to create your first ad."
        )
        option_list = self.query_one("#dash-list", OptionList)
        option_list.clear_options()
        option_list.add_options(
            [Option(render_admin_ad_option(ad), id=str(ad.id)) for ad in ads]
        )
        if ads:
            option_list.highlighted = 0
            option_list.focus()

    def _selected_ad(self) -> Ad | None:
        index = self.query_one("#dash-list", OptionList).highlighted
        if index is None or not 0 <= index < len(self._ads):
            return None
        return self._ads[index]

    # ── Actions ────────────────────────────────────────────────────────

    def action_refresh(self) -> None:
        self._track_task(self._refresh())

    def action_new_ad(self) -> None:
        def on_result(draft: AdDraft | None) -> None:
            if draft is not None:
                self._track_task(self._create(draft))

        self.app.push_screen(AdFormModal(), on_result)

    async def _create(self, draft: AdDraft) -> None:
        try:
            ad = await asyncio.to_thread(self._store.create_ad, draft)
        except ValueError as e:
            self.notify(str(e), title="Create ad", severity="error")
            return
        except _STORE_ERRORS:
            logger.warning("Failed to create ad", exc_info=True)
            self.notify(
                build_actionable_error("create the ad", next_step="check the database path"),
                severity="error",
            )
            return
        self._changed = True
        self.notify(build_actionable_success(f"Created '{ad.title}'"), title="Create ad")
        await self._refresh()

    def action_edit_ad(self) -> None:
        ad = self._selected_ad()
        if ad is None:
            self.notify("Select an ad to edit", title="Edit ad")
            return

        def on_result(draft: AdDraft | None) -> None:
            if draft is not None:
                update = AdUpdate(
                    title=draft.title,
                    description=draft.description,
                    image_url=draft.image_url,
                    smart_link=draft.smart_link,
                )
                self._track_task(self._update(ad.id, update))

        self.app.push_screen(AdFormModal(ad), on_result)

    async def _update(self, ad_id: int, update: AdUpdate) -> None:
        try:
            ad = await asyncio.to_thread(self._store.update_ad, ad_id, update)
        except AdNotFoundError:
            self.notify(
                build_actionable_error(
                    "update the ad",
                    why="it no longer exists",
                    next_step="press r to refresh the list",
                ),
                severity="error",
            )
            return
        except ValueError as e:
            self.notify(str(e), title="Edit ad", severity="warning")
            return
        except _STORE_ERRORS:
            logger.warning("Failed to update ad %s", ad_id, exc_info=True)
            self.notify(
                build_actionable_error("update the ad", next_step="try again"),
                severity="error",
            )
            return
        self._changed = True
        self.notify(build_actionable_success(f"Updated '{ad.title}'"), title="Edit ad")
        await self._refresh()

    def action_delete_ad(self) -> None:
        ad = self._selected_ad()
        if ad is None:
            self.notify("Select an ad to delete", title="Delete ad")
            return

        def on_confirm(confirmed: bool | None) -> None:
            if confirmed:
                self._track_task(self._delete(ad))

        self.app.push_screen(
            ConfirmModal("Delete ad", build_delete_confirmation_prompt(ad.title)),
            on_confirm,
        )

    async def _delete(self, ad: Ad) -> None:
        try:
            deleted = await asyncio.to_thread(self._store.delete_ad, ad.id)
        except _STORE_ERRORS:
            logger.warning("Failed to delete ad %s", ad.id, exc_info=True)
            self.notify(
                build_actionable_error("delete the ad", next_step="try again"),
                severity="error",
            )
            return
        if deleted:
            self._changed = True
            self.notify(build_actionable_success(f"Deleted '{ad.title}'"), title="Delete ad")
        await self._refresh()

    def action_reset_database(self) -> None:
        def on_confirm(confirmed: bool | None) -> None:
            if confirmed:
                self._track_task(self._reset())

        self.app.push_screen(
            ConfirmModal(
                "Reset database", build_reset_confirmation_prompt(), confirm_label="Reset"
            ),
            on_confirm,
        )

    async def _reset(self) -> None:
        try:
            await asyncio.to_thread(self._store.reset)
        except _STORE_ERRORS:
            logger.error("Database reset failed", exc_info=True)
            self.notify(
                build_actionable_error(
                    "reset the database",
                    next_step="run adzone --check-db",
                ),
                severity="error",
            )
            return
        self._changed = True
        self.notify(
            build_actionable_success("Database reset", detail="All ads were removed"),
            title="Reset database",
        )
        await self._refresh()

    def action_logout(self) -> None:
        self._gate.logout()
        self.dismiss(self._changed)

    def action_close(self) -> None:
        self.dismiss(self._changed)


__all__ = [
    "AdminDashboardScreen",
    "render_stats",
]
