"""Service interfaces + default adapters for app-level dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from adzone.models import Ad, AdDraft, AdStats, AdUpdate
from adzone.store import AdStore, get_db_path


@runtime_checkable
class AdRepository(Protocol):
    """Read side of the record store used by the feed."""

    def list_all(self) -> list[Ad]:
        """Return every ad, newest first."""
        ...

    def increment_clicks(self, ad_id: int) -> None:
        """Count one click-through."""
        ...


@runtime_checkable
class AdAdminRepository(AdRepository, Protocol):
    """Full record store surface used by the admin dashboard."""

    def get_ad(self, ad_id: int) -> Ad | None: ...

    def create_ad(self, draft: AdDraft) -> Ad: ...

    def update_ad(self, ad_id: int, update: AdUpdate) -> Ad: ...

    def delete_ad(self, ad_id: int) -> bool: ...

    def get_stats(self) -> AdStats: ...

    def seed_defaults(self) -> int: ...

    def reset(self) -> None: ...


@dataclass(slots=True)
class AppServices:
    """Aggregated service interfaces consumed by the app layer."""

    store: AdAdminRepository


def build_default_app_services(db_path: Path | None = None) -> AppServices:
    """Build default app services backed by the SQLite store."""
    return AppServices(store=AdStore(db_path or get_db_path()))


__all__ = [
    "AdAdminRepository",
    "AdRepository",
    "AppServices",
    "build_default_app_services",
]
