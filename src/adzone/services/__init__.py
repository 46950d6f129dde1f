"""Service layer between the app and the record store."""

from adzone.services.feed_service import load_feed_items, register_interaction
from adzone.services.interfaces import (
    AdAdminRepository,
    AdRepository,
    AppServices,
    build_default_app_services,
)

__all__ = [
    "AdAdminRepository",
    "AdRepository",
    "AppServices",
    "build_default_app_services",
    "load_feed_items",
    "register_interaction",
]
