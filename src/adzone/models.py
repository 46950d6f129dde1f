"""Data models and constants for the AdZone feed application."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Application identity used for platformdirs paths
CONFIG_APP_NAME = "adzone"

# Record defaults applied when an operator leaves optional fields blank
DEFAULT_TITLE = "Untitled Ad"
DEFAULT_DESCRIPTION = "No description provided"
DEFAULT_IMAGE_URL = "https://via.placeholder.com/300x200/4F46E5/FFFFFF?text=No+Image"

# Feed defaults. Distances are terminal rows (floats), one row ~ 20px.
DEFAULT_PAGE_SIZE = 8
MAX_PAGE_SIZE = 100
DEFAULT_TRIGGER_MARGIN = 8.0
DEFAULT_TRIGGER_THRESHOLD = 0.05
DEFAULT_VELOCITY = 10.0  # rows per second
DEFAULT_BOTTOM_EPSILON = 0.5
DEFAULT_NOISE_THRESHOLD = 0.25
DEFAULT_ADVANCE_DELAY = 0.3  # seconds
FRAME_INTERVAL = 1 / 60  # seconds between autoscroll frames
BOTTOM_HOLD_LIMIT = 2.0  # seconds the loop keeps ticking at the bottom for a pending page

# Hardcoded operator credentials
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


class AutoscrollState(str, Enum):
    """Autoscroll Navigator states.

    ``IDLE`` precedes the first non-empty visible window; the other four are
    the running/paused/terminal states of a feed session.
    """

    IDLE = "idle"
    RUNNING = "running"
    PAUSED_BY_USER = "paused-by-user"
    PAUSED_BY_COMMAND = "paused-by-command"
    STOPPED_AT_BOTTOM = "stopped-at-bottom"


@dataclass(slots=True)
class Ad:
    """An advertisement record as returned by the store."""

    id: int
    title: str
    description: str
    smart_link: str
    image_url: str = DEFAULT_IMAGE_URL
    clicks: int = 0
    created_at: str = ""


@dataclass(slots=True)
class AdDraft:
    """Fields accepted when creating an ad. Blank optional fields get defaults."""

    smart_link: str
    title: str = ""
    description: str = ""
    image_url: str = ""


@dataclass(slots=True)
class AdUpdate:
    """Enumerated update schema for an existing ad.

    ``None`` or a blank string leaves the column unchanged.
    """

    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    smart_link: str | None = None

    def changes(self) -> dict[str, str]:
        """Return the column -> value pairs this update would write."""
        candidates = {
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "smart_link": self.smart_link,
        }
        return {
            column: value.strip()
            for column, value in candidates.items()
            if value is not None and value.strip()
        }


@dataclass(slots=True)
class AdStats:
    """Aggregate statistics over the ads table."""

    total_ads: int = 0
    total_clicks: int = 0
    average_clicks_per_ad: float = 0.0
    top_performing_ad: Ad | None = None


@dataclass(slots=True)
class FeedSettings:
    """Tunables for the progressive feed renderer."""

    page_size: int = DEFAULT_PAGE_SIZE
    trigger_margin: float = DEFAULT_TRIGGER_MARGIN
    trigger_threshold: float = DEFAULT_TRIGGER_THRESHOLD
    velocity: float = DEFAULT_VELOCITY
    bottom_epsilon: float = DEFAULT_BOTTOM_EPSILON
    noise_threshold: float = DEFAULT_NOISE_THRESHOLD
    advance_delay: float = DEFAULT_ADVANCE_DELAY
    autoscroll_enabled: bool = True

    def __post_init__(self) -> None:
        """Clamp values into their valid ranges."""
        self.page_size = max(1, min(int(self.page_size), MAX_PAGE_SIZE))
        self.trigger_margin = max(0.0, float(self.trigger_margin))
        self.trigger_threshold = max(0.0, min(float(self.trigger_threshold), 1.0))
        if self.velocity <= 0:
            self.velocity = DEFAULT_VELOCITY
        self.velocity = float(self.velocity)
        self.bottom_epsilon = max(0.0, float(self.bottom_epsilon))
        self.noise_threshold = max(0.0, float(self.noise_threshold))
        self.advance_delay = max(0.0, float(self.advance_delay))


@dataclass(slots=True)
class UserConfig:
    """Persisted user configuration."""

    feed: FeedSettings = field(default_factory=FeedSettings)
    db_path: str = ""  # Empty = platformdirs data dir
    admin_session: bool = False
    seed_sample_data: bool = True
    version: int = 1


__all__ = [
    "ADMIN_PASSWORD",
    "ADMIN_USERNAME",
    "BOTTOM_HOLD_LIMIT",
    "CONFIG_APP_NAME",
    "DEFAULT_ADVANCE_DELAY",
    "DEFAULT_BOTTOM_EPSILON",
    "DEFAULT_DESCRIPTION",
    "DEFAULT_IMAGE_URL",
    "DEFAULT_NOISE_THRESHOLD",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_TITLE",
    "DEFAULT_TRIGGER_MARGIN",
    "DEFAULT_TRIGGER_THRESHOLD",
    "DEFAULT_VELOCITY",
    "FRAME_INTERVAL",
    "MAX_PAGE_SIZE",
    "Ad",
    "AdDraft",
    "AdStats",
    "AdUpdate",
    "AutoscrollState",
    "FeedSettings",
    "UserConfig",
]
