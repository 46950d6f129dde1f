"""Modal screens for the AdZone app."""

from adzone.modals.admin import AdFormModal, AdminLoginModal, smart_link_error
from adzone.modals.common import ConfirmModal

__all__ = [
    "AdFormModal",
    "AdminLoginModal",
    "ConfirmModal",
    "smart_link_error",
]
