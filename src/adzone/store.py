"""SQLite record store for ads.

Every public method opens its own connection and closes it before
returning. Updates go through the enumerated :class:`AdUpdate` schema;
column names are never taken from caller input.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from datetime import UTC, datetime
from pathlib import Path

from platformdirs import user_data_dir

from adzone.models import (
    CONFIG_APP_NAME,
    DEFAULT_DESCRIPTION,
    DEFAULT_IMAGE_URL,
    DEFAULT_TITLE,
    Ad,
    AdDraft,
    AdStats,
    AdUpdate,
)

logger = logging.getLogger(__name__)

DB_FILENAME = "adzone.db"

_AD_COLUMNS = "id, title, description, image_url, smart_link, clicks, created_at"

_CREATE_ADS_TABLE = (
    "CREATE TABLE IF NOT EXISTS ads ("
    "  id INTEGER PRIMARY KEY AUTOINCREMENT,"
    "  title TEXT NOT NULL,"
    "  description TEXT,"
    "  image_url TEXT,"
    "  smart_link TEXT NOT NULL,"
    "  clicks INTEGER NOT NULL DEFAULT 0,"
    "  created_at TEXT NOT NULL"
    ")"
)

# Fixed statements for each updatable column
_UPDATE_STATEMENTS: dict[str, str] = {
    "title": "UPDATE ads SET title = ? WHERE id = ?",
    "description": "UPDATE ads SET description = ? WHERE id = ?",
    "image_url": "UPDATE ads SET image_url = ? WHERE id = ?",
    "smart_link": "UPDATE ads SET smart_link = ? WHERE id = ?",
}

SAMPLE_AD_COUNT = 8


class AdStoreError(Exception):
    """Base error for record store failures."""


class AdNotFoundError(AdStoreError):
    """Raised when an ad id does not exist."""


def get_db_path() -> Path:
    """Default database location in the platform data directory."""
    return Path(user_data_dir(CONFIG_APP_NAME)) / DB_FILENAME


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _row_to_ad(row: tuple) -> Ad:
    ad_id, title, description, image_url, smart_link, clicks, created_at = row
    return Ad(
        id=int(ad_id),
        title=title or "",
        description=description or "",
        image_url=image_url or DEFAULT_IMAGE_URL,
        smart_link=smart_link,
        clicks=int(clicks or 0),
        created_at=created_at or "",
    )


def normalize_draft(draft: AdDraft) -> AdDraft:
    """Trim fields and apply defaults. Raises ValueError without a smart link."""
    smart_link = (draft.smart_link or "").strip()
    if not smart_link:
        raise ValueError("Smart link is required")
    return AdDraft(
        smart_link=smart_link,
        title=(draft.title or "").strip() or DEFAULT_TITLE,
        description=(draft.description or "").strip() or DEFAULT_DESCRIPTION,
        image_url=(draft.image_url or "").strip() or DEFAULT_IMAGE_URL,
    )


class AdStore:
    """CRUD, click counting and aggregate stats over the ``ads`` table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def init_db(self) -> None:
        """Create the ads table if it doesn't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as conn, conn:
            conn.execute(_CREATE_ADS_TABLE)

    def list_all(self) -> list[Ad]:
        """Return every ad, newest first."""
        self.init_db()
        with closing(self._connect()) as conn:
            rows = conn.execute(
                f"SELECT {_AD_COLUMNS} FROM ads ORDER BY created_at DESC, id DESC"
            ).fetchall()
        return [_row_to_ad(row) for row in rows]

    def get_ad(self, ad_id: int) -> Ad | None:
        self.init_db()
        with closing(self._connect()) as conn:
            row = conn.execute(f"SELECT {_AD_COLUMNS} FROM ads WHERE id = ?", (ad_id,)).fetchone()
        return _row_to_ad(row) if row is not None else None

    def create_ad(self, draft: AdDraft) -> Ad:
        """Insert an ad and return the stored record."""
        clean = normalize_draft(draft)
        self.init_db()
        with closing(self._connect()) as conn, conn:
            cursor = conn.execute(
                "INSERT INTO ads (title, description, image_url, smart_link, clicks, created_at) "
                "VALUES (?, ?, ?, ?, 0, ?)",
                (clean.title, clean.description, clean.image_url, clean.smart_link, _now_iso()),
            )
            ad_id = cursor.lastrowid
            row = conn.execute(f"SELECT {_AD_COLUMNS} FROM ads WHERE id = ?", (ad_id,)).fetchone()
        if row is None:
            raise AdStoreError("Failed to insert ad - no row returned")
        logger.debug("Created ad %s", ad_id)
        return _row_to_ad(row)

    def update_ad(self, ad_id: int, update: AdUpdate) -> Ad:
        """Apply the non-blank fields of ``update`` and return the new record."""
        changes = update.changes()
        if not changes:
            raise ValueError("No valid updates provided")
        self.init_db()
        with closing(self._connect()) as conn, conn:
            exists = conn.execute("SELECT 1 FROM ads WHERE id = ?", (ad_id,)).fetchone()
            if exists is None:
                raise AdNotFoundError(f"Ad {ad_id} not found")
            for column, value in changes.items():
                conn.execute(_UPDATE_STATEMENTS[column], (value, ad_id))
            row = conn.execute(f"SELECT {_AD_COLUMNS} FROM ads WHERE id = ?", (ad_id,)).fetchone()
        logger.debug("Updated ad %s: %s", ad_id, sorted(changes))
        return _row_to_ad(row)

    def delete_ad(self, ad_id: int) -> bool:
        """Delete an ad. Returns False when nothing was deleted."""
        self.init_db()
        with closing(self._connect()) as conn, conn:
            cursor = conn.execute("DELETE FROM ads WHERE id = ?", (ad_id,))
        return cursor.rowcount > 0

    def increment_clicks(self, ad_id: int) -> None:
        self.init_db()
        with closing(self._connect()) as conn, conn:
            conn.execute("UPDATE ads SET clicks = clicks + 1 WHERE id = ?", (ad_id,))

    def get_stats(self) -> AdStats:
        """Totals, average clicks per ad and the most clicked ad."""
        self.init_db()
        with closing(self._connect()) as conn:
            total_ads, total_clicks = conn.execute(
                "SELECT COUNT(*), COALESCE(SUM(clicks), 0) FROM ads"
            ).fetchone()
            top_row = conn.execute(
                f"SELECT {_AD_COLUMNS} FROM ads WHERE clicks > 0 "
                "ORDER BY clicks DESC, id ASC LIMIT 1"
            ).fetchone()
        total_ads = int(total_ads)
        total_clicks = int(total_clicks)
        return AdStats(
            total_ads=total_ads,
            total_clicks=total_clicks,
            average_clicks_per_ad=total_clicks / total_ads if total_ads > 0 else 0.0,
            top_performing_ad=_row_to_ad(top_row) if top_row is not None else None,
        )

    def seed_defaults(self) -> int:
        """Insert sample ads when the table is empty. Returns rows inserted."""
        self.init_db()
        with closing(self._connect()) as conn, conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM ads").fetchone()
            if count:
                return 0
            now = _now_iso()
            conn.executemany(
                "INSERT INTO ads (title, description, image_url, smart_link, clicks, created_at) "
                "VALUES (?, ?, ?, ?, 0, ?)",
                [
                    (
                        f"Ad {i}",
                        f"Sample ad description {i}",
                        f"https://via.placeholder.com/300x200/4F46E5/FFFFFF?text=Ad+{i}",
                        f"https://example.com/offers/{i}",
                        now,
                    )
                    for i in range(1, SAMPLE_AD_COUNT + 1)
                ],
            )
        logger.info("Seeded %d sample ads", SAMPLE_AD_COUNT)
        return SAMPLE_AD_COUNT

    def reset(self) -> None:
        """Drop and recreate the ads table."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as conn, conn:
            conn.execute("DROP TABLE IF EXISTS ads")
            conn.execute(_CREATE_ADS_TABLE)
        logger.warning("Ads table reset at %s", self.db_path)

    def check_connection(self) -> list[tuple[str, bool]]:
        """Run a self-test; returns (step, passed) pairs. Never raises sqlite3.Error."""
        results: list[tuple[str, bool]] = []
        try:
            self.init_db()
            with closing(self._connect()) as conn:
                conn.execute("SELECT 1").fetchone()
                results.append(("connect", True))
                exists = conn.execute(
                    "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'ads'"
                ).fetchone()
                results.append(("table exists", exists is not None))
                with conn:
                    cursor = conn.execute(
                        "INSERT INTO ads (title, smart_link, created_at) VALUES (?, ?, ?)",
                        ("Test Record", "https://test.example", _now_iso()),
                    )
                    check_row_id = cursor.lastrowid
                results.append(("insert", check_row_id is not None))
                found = conn.execute(
                    "SELECT title FROM ads WHERE id = ?", (check_row_id,)
                ).fetchone()
                results.append(("select", found is not None and found[0] == "Test Record"))
                with conn:
                    conn.execute("DELETE FROM ads WHERE id = ?", (check_row_id,))
                results.append(("cleanup", True))
        except (sqlite3.Error, OSError):
            logger.error("Database self-test failed for %s", self.db_path, exc_info=True)
            results.append(("error", False))
        return results


__all__ = [
    "DB_FILENAME",
    "SAMPLE_AD_COUNT",
    "AdNotFoundError",
    "AdStore",
    "AdStoreError",
    "get_db_path",
    "normalize_draft",
]
