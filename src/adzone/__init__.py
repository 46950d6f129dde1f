"""AdZone: a shuffled, progressively loaded, auto-scrolling ad feed."""

from adzone.feed import FeedController
from adzone.models import (
    Ad,
    AdDraft,
    AdStats,
    AdUpdate,
    AutoscrollState,
    FeedSettings,
    UserConfig,
)
from adzone.store import AdNotFoundError, AdStore, AdStoreError

__all__ = [
    "Ad",
    "AdDraft",
    "AdNotFoundError",
    "AdStats",
    "AdStore",
    "AdStoreError",
    "AdUpdate",
    "AutoscrollState",
    "FeedController",
    "FeedSettings",
    "UserConfig",
]
