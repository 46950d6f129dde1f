"""Widget classes for the feed and the admin dashboard."""

from adzone.widgets.cards import (
    CARD_DESCRIPTION_MAX_LEN,
    AdCard,
    render_ad_card,
    render_admin_ad_option,
)
from adzone.widgets.feed_view import FeedSentinel, FeedViewport

__all__ = [
    "CARD_DESCRIPTION_MAX_LEN",
    "AdCard",
    "FeedSentinel",
    "FeedViewport",
    "render_ad_card",
    "render_admin_ad_option",
]
