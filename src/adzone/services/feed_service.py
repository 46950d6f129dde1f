"""Feed-path store access: fetch for rendering, register clicks."""

from __future__ import annotations

import asyncio
import logging
import sqlite3

from adzone.models import Ad
from adzone.services.interfaces import AdRepository
from adzone.store import AdStoreError

logger = logging.getLogger(__name__)


async def load_feed_items(store: AdRepository) -> list[Ad]:
    """Fetch every ad for the feed. A failed fetch yields an empty list."""
    try:
        return await asyncio.to_thread(store.list_all)
    except (sqlite3.Error, AdStoreError, OSError):
        logger.warning("Failed to load ads for the feed", exc_info=True)
        return []


async def register_interaction(store: AdRepository, ad_id: int) -> bool:
    """Count a click-through. Best-effort: failures are logged, never raised."""
    try:
        await asyncio.to_thread(store.increment_clicks, ad_id)
    except (sqlite3.Error, AdStoreError, OSError):
        logger.warning("Failed to register interaction for ad %s", ad_id, exc_info=True)
        return False
    return True


__all__ = [
    "load_feed_items",
    "register_interaction",
]
