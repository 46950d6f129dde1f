"""Internal UI constants for the AdZone app."""

from __future__ import annotations

from textual.binding import Binding, BindingType

SEARCH_DEBOUNCE_DELAY = 0.3  # seconds

APP_CSS = """
Screen {
    background: $background;
}

#feed-header {
    padding: 0 1;
    color: $accent;
    text-style: bold;
}

#search-container {
    height: auto;
    padding: 0 1;
    display: none;
}

#search-container.visible {
    display: block;
}

#search-input {
    width: 100%;
    border: tall $accent;
}

#feed-message {
    height: auto;
    padding: 1 2;
    color: $text-muted;
    text-align: center;
    display: none;
}

#feed-message.visible {
    display: block;
}

#feed {
    height: 1fr;
    padding: 0 1;
    scrollbar-gutter: stable;
}

.ad-card {
    height: auto;
    margin-bottom: 1;
    padding: 0 1;
    border: round $panel-lighten-2;
}

.ad-card:focus {
    border: round $accent;
}

.ad-card:hover {
    background: $boost;
}

#feed.compact .ad-card {
    margin-bottom: 0;
    border: none;
}

#feed.compact .ad-card:focus {
    background: $accent 30%;
}

#feed-sentinel {
    height: 1;
}

#status-bar {
    padding: 0 1;
    color: $text-muted;
}
"""

APP_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit", show=False),
    Binding("slash", "toggle_search", "Search", show=False),
    Binding("escape", "cancel_search", "Cancel", show=False),
    Binding("p", "toggle_autoscroll", "Pause/Resume", show=False),
    Binding("v", "toggle_view", "Cards/List", show=False),
    Binding("ctrl+r", "reload", "Reload", show=False),
    # Secret operator entry; f2 for terminals that cannot send ctrl+shift
    Binding("ctrl+shift+a,f2", "admin", "Admin", show=False),
]

__all__ = [
    "APP_BINDINGS",
    "APP_CSS",
    "SEARCH_DEBOUNCE_DELAY",
]
