"""Ad card rendering helpers and widgets."""

from __future__ import annotations

import re

from rich.markup import escape as escape_markup
from textual.binding import Binding
from textual.events import Click
from textual.message import Message
from textual.widgets import Static

from adzone.models import Ad

CARD_DESCRIPTION_MAX_LEN = 160  # Max description length shown on a card
COMPACT_DESCRIPTION_MAX_LEN = 60  # Same, for one-line compact rows
HIGHLIGHT_COLOR = "#e6db74"


def escape_rich_text(text: str) -> str:
    """Escape text for safe Rich markup rendering."""
    return escape_markup(text) if text else ""


def highlight_text(text: str, term: str, color: str = HIGHLIGHT_COLOR) -> str:
    """Escape ``text`` and highlight case-insensitive matches of ``term``."""
    if not text:
        return ""
    cleaned = term.strip()
    if not cleaned:
        return escape_rich_text(text)
    pattern = re.compile(re.escape(cleaned), re.IGNORECASE)
    parts: list[str] = []
    last = 0
    for match in pattern.finditer(text):
        parts.append(escape_rich_text(text[last : match.start()]))
        parts.append(f"[bold {color}]{escape_rich_text(match.group(0))}[/]")
        last = match.end()
    parts.append(escape_rich_text(text[last:]))
    return "".join(parts)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rsplit(" ", 1)[0] + "..."


def render_ad_card(ad: Ad, *, highlight: str = "", compact: bool = False) -> str:
    """Render an ad as Rich markup for the feed.

    ``compact`` renders a single list row instead of the full card.
    """
    if compact:
        description = _truncate(ad.description, COMPACT_DESCRIPTION_MAX_LEN)
        parts = [f"[bold]{highlight_text(ad.title, highlight)}[/]"]
        if description:
            parts.append(f"[dim]{highlight_text(description, highlight)}[/]")
        parts.append("[b]Shop Now →[/]")
        return "  ".join(parts)
    description = _truncate(ad.description, CARD_DESCRIPTION_MAX_LEN)
    lines = [
        f"[bold]{highlight_text(ad.title, highlight)}[/]",
        f"[dim]{highlight_text(description, highlight)}[/]" if description else "",
        "[b]Shop Now[/] [dim]→ Enter[/]",
    ]
    return "\n".join(line for line in lines if line)


def render_admin_ad_option(ad: Ad) -> str:
    """Render an ad row for the admin dashboard list."""
    clicks = f"{ad.clicks} click{'s' if ad.clicks != 1 else ''}"
    return (
        f"[bold]{escape_rich_text(ad.title)}[/]  [dim]#{ad.id}[/]  [green]{clicks}[/]\n"
        f"[dim]{escape_rich_text(ad.smart_link)}[/]"
    )


class AdCard(Static, can_focus=True):
    """A focusable card for one ad. Enter or click opens the offer."""

    BINDINGS = [Binding("enter", "open_offer", "Shop Now", show=False)]

    class Opened(Message):
        """Posted when the user asks to open the card's offer."""

        def __init__(self, ad: Ad) -> None:
            super().__init__()
            self.ad = ad

    def __init__(self, ad: Ad, *, highlight: str = "", compact: bool = False) -> None:
        super().__init__(
            render_ad_card(ad, highlight=highlight, compact=compact), classes="ad-card"
        )
        self.ad = ad
        self.highlight_term = highlight
        self.is_compact = compact

    def set_compact(self, compact: bool) -> None:
        if compact == self.is_compact:
            return
        self.is_compact = compact
        self.update(render_ad_card(self.ad, highlight=self.highlight_term, compact=compact))

    def action_open_offer(self) -> None:
        self.post_message(self.Opened(self.ad))

    def on_click(self, event: Click) -> None:
        event.stop()
        self.post_message(self.Opened(self.ad))


__all__ = [
    "CARD_DESCRIPTION_MAX_LEN",
    "COMPACT_DESCRIPTION_MAX_LEN",
    "AdCard",
    "escape_rich_text",
    "highlight_text",
    "render_ad_card",
    "render_admin_ad_option",
]
