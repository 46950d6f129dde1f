"""Tests for operator form validation and dashboard rendering helpers."""

from __future__ import annotations

import pytest
from rich.text import Text

from adzone.dashboard import render_stats
from adzone.modals.admin import smart_link_error
from adzone.models import Ad, AdStats


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("", "Smart link is required"),
        ("   ", "Smart link is required"),
        ("example.com", "Please enter a valid URL (http:// or https://)"),
        ("ftp://files.test/x", "Please enter a valid URL (http:// or https://)"),
        ("https://", "Please enter a valid URL (http:// or https://)"),
        ("https://shop.test/offer?id=1", None),
        (" http://shop.test ", None),
    ],
)
def test_smart_link_error(value, expected):
    assert smart_link_error(value) == expected


def test_render_stats_without_top_ad():
    plain = Text.from_markup(render_stats(AdStats())).plain
    assert "Total Ads: 0" in plain
    assert "Avg Clicks/Ad: 0.0" in plain
    assert "Top:" not in plain


def test_render_stats_with_top_ad():
    top = Ad(id=3, title="Best [seller]", description="", smart_link="https://s.test", clicks=7)
    stats = AdStats(total_ads=2, total_clicks=9, average_clicks_per_ad=4.5, top_performing_ad=top)
    plain = Text.from_markup(render_stats(stats)).plain
    assert "Total Clicks: 9" in plain
    assert "Avg Clicks/Ad: 4.5" in plain
    assert "Top: Best [seller] (7)" in plain
