"""Operator access gate for the admin dashboard."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Callable

from adzone.models import ADMIN_PASSWORD, ADMIN_USERNAME, UserConfig

logger = logging.getLogger(__name__)


class AdminGate:
    """Check operator credentials and keep the session flag in the user config.

    ``persist`` is called with the config after every session change; pass
    ``config.save_config`` in the app and a no-op (or a recorder) in tests.
    """

    def __init__(
        self,
        config: UserConfig,
        persist: Callable[[UserConfig], bool] | None = None,
    ) -> None:
        self._config = config
        self._persist = persist

    def is_authenticated(self) -> bool:
        return self._config.admin_session

    def login(self, username: str, password: str) -> bool:
        """Return True and open a session when the credentials match."""
        user_ok = hmac.compare_digest(username.strip().encode(), ADMIN_USERNAME.encode())
        password_ok = hmac.compare_digest(password.encode(), ADMIN_PASSWORD.encode())
        if not (user_ok and password_ok):
            logger.info("Admin login rejected for %r", username)
            return False
        self._set_session(True)
        logger.info("Admin session opened")
        return True

    def logout(self) -> None:
        if not self._config.admin_session:
            return
        self._set_session(False)
        logger.info("Admin session closed")

    def _set_session(self, active: bool) -> None:
        self._config.admin_session = active
        if self._persist is not None and not self._persist(self._config):
            logger.warning("Admin session change was not persisted")


__all__ = [
    "AdminGate",
]
