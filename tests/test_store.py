"""Tests for the SQLite ad store."""

from __future__ import annotations

import pytest

from adzone.models import (
    DEFAULT_DESCRIPTION,
    DEFAULT_IMAGE_URL,
    DEFAULT_TITLE,
    AdDraft,
    AdUpdate,
)
from adzone.store import (
    SAMPLE_AD_COUNT,
    AdNotFoundError,
    AdStore,
    get_db_path,
    normalize_draft,
)


class TestNormalizeDraft:
    def test_applies_defaults(self):
        draft = normalize_draft(AdDraft(smart_link="  https://shop.test/a  "))
        assert draft.smart_link == "https://shop.test/a"
        assert draft.title == DEFAULT_TITLE
        assert draft.description == DEFAULT_DESCRIPTION
        assert draft.image_url == DEFAULT_IMAGE_URL

    def test_keeps_provided_fields(self):
        draft = normalize_draft(
            AdDraft(smart_link="https://s.test", title=" Shoes ", description="Red", image_url="x")
        )
        assert (draft.title, draft.description, draft.image_url) == ("Shoes", "Red", "x")

    @pytest.mark.parametrize("link", ["", "   "])
    def test_smart_link_required(self, link):
        with pytest.raises(ValueError, match="Smart link is required"):
            normalize_draft(AdDraft(smart_link=link))


class TestCrud:
    def test_create_and_get(self, store):
        ad = store.create_ad(AdDraft(smart_link="https://s.test/1", title="Shoes"))
        assert ad.id > 0
        assert ad.title == "Shoes"
        assert ad.clicks == 0
        assert ad.created_at
        assert store.get_ad(ad.id) == ad

    def test_get_missing_returns_none(self, store):
        assert store.get_ad(999) is None

    def test_list_all_newest_first(self, store):
        ids = [store.create_ad(AdDraft(smart_link=f"https://s.test/{i}")).id for i in range(3)]
        assert [ad.id for ad in store.list_all()] == list(reversed(ids))

    def test_list_all_creates_table_on_fresh_db(self, tmp_path):
        fresh = AdStore(tmp_path / "nested" / "adzone.db")
        assert fresh.list_all() == []
        assert fresh.db_path.exists()

    def test_update_only_non_blank_fields(self, store):
        ad = store.create_ad(AdDraft(smart_link="https://s.test", title="Old", description="Keep"))
        updated = store.update_ad(ad.id, AdUpdate(title="New", description="  "))
        assert updated.title == "New"
        assert updated.description == "Keep"
        assert updated.smart_link == "https://s.test"

    def test_update_without_changes_raises(self, store):
        ad = store.create_ad(AdDraft(smart_link="https://s.test"))
        with pytest.raises(ValueError, match="No valid updates provided"):
            store.update_ad(ad.id, AdUpdate())

    def test_update_missing_ad_raises(self, store):
        with pytest.raises(AdNotFoundError):
            store.update_ad(42, AdUpdate(title="x"))

    def test_update_values_are_bound_not_interpolated(self, store):
        ad = store.create_ad(AdDraft(smart_link="https://s.test"))
        hostile = "x'; DROP TABLE ads; --"
        updated = store.update_ad(ad.id, AdUpdate(title=hostile))
        assert updated.title == hostile
        assert len(store.list_all()) == 1

    def test_delete(self, store):
        ad = store.create_ad(AdDraft(smart_link="https://s.test"))
        assert store.delete_ad(ad.id) is True
        assert store.delete_ad(ad.id) is False
        assert store.get_ad(ad.id) is None


class TestClicksAndStats:
    def test_increment_clicks(self, store):
        ad = store.create_ad(AdDraft(smart_link="https://s.test"))
        store.increment_clicks(ad.id)
        store.increment_clicks(ad.id)
        assert store.get_ad(ad.id).clicks == 2

    def test_increment_unknown_id_is_silent(self, store):
        store.increment_clicks(12345)

    def test_stats_empty(self, store):
        stats = store.get_stats()
        assert stats.total_ads == 0
        assert stats.total_clicks == 0
        assert stats.average_clicks_per_ad == 0.0
        assert stats.top_performing_ad is None

    def test_stats_without_clicks_has_no_top_ad(self, store):
        store.create_ad(AdDraft(smart_link="https://s.test"))
        assert store.get_stats().top_performing_ad is None

    def test_stats_aggregate(self, store):
        first = store.create_ad(AdDraft(smart_link="https://s.test/1"))
        second = store.create_ad(AdDraft(smart_link="https://s.test/2"))
        for _ in range(3):
            store.increment_clicks(second.id)
        store.increment_clicks(first.id)
        stats = store.get_stats()
        assert stats.total_ads == 2
        assert stats.total_clicks == 4
        assert stats.average_clicks_per_ad == pytest.approx(2.0)
        assert stats.top_performing_ad is not None
        assert stats.top_performing_ad.id == second.id


class TestMaintenance:
    def test_seed_defaults_only_when_empty(self, store):
        assert store.seed_defaults() == SAMPLE_AD_COUNT
        assert store.seed_defaults() == 0
        ads = store.list_all()
        assert len(ads) == SAMPLE_AD_COUNT
        assert {ad.title for ad in ads} == {f"Ad {i}" for i in range(1, SAMPLE_AD_COUNT + 1)}
        assert all(ad.smart_link.startswith("https://") for ad in ads)

    def test_reset_drops_rows(self, store):
        store.seed_defaults()
        store.reset()
        assert store.list_all() == []

    def test_check_connection_passes(self, store):
        results = store.check_connection()
        assert [step for step, _ in results] == [
            "connect",
            "table exists",
            "insert",
            "select",
            "cleanup",
        ]
        assert all(ok for _, ok in results)
        assert store.list_all() == []

    def test_check_connection_reports_failure(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        results = AdStore(blocker / "adzone.db").check_connection()
        assert results[-1] == ("error", False)


def test_default_db_path_uses_data_dir(monkeypatch, tmp_path):
    monkeypatch.setattr("adzone.store.user_data_dir", lambda app: str(tmp_path / app))
    assert get_db_path() == tmp_path / "adzone" / "adzone.db"
