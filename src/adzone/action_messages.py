"""UI-facing copy builders for notifications and headers."""

from __future__ import annotations


def _ensure_sentence(text: str) -> str:
    """Return text with terminal sentence punctuation."""
    cleaned = text.strip()
    if not cleaned:
        return ""
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable error message."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_next_step_hint(next_step: str) -> str:
    """Build a canonical next-step guidance line."""
    return f"Next step: {_ensure_sentence(next_step)}"


def build_actionable_success(
    message: str,
    *,
    detail: str | None = None,
    next_step: str | None = None,
) -> str:
    """Build a concise success message with optional detail and next step."""
    lines = [_ensure_sentence(message)]
    if detail:
        lines.append(_ensure_sentence(detail))
    if next_step:
        lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_feed_header(count: int, *, searching: bool) -> str:
    """Result-count header above the feed."""
    if searching:
        return f"{count} Search Result{'s' if count != 1 else ''}"
    if count == 0:
        return "No Products Available"
    return f"{count} Product{'s' if count != 1 else ''} Available"


def build_empty_state(*, searching: bool) -> str:
    """Text shown in place of the feed when nothing is visible."""
    if searching:
        return "No products found\nTry adjusting your search terms."
    return "Welcome to AdZone!\nNo products are available yet. Check back soon."


def build_delete_confirmation_prompt(title: str) -> str:
    return f"Delete '{title}'?\nThis cannot be undone."


def build_reset_confirmation_prompt() -> str:
    return (
        "Reset the database?\n"
        "This drops the ads table and deletes ALL existing ads. This cannot be undone."
    )


__all__ = [
    "build_actionable_error",
    "build_actionable_success",
    "build_delete_confirmation_prompt",
    "build_empty_state",
    "build_feed_header",
    "build_next_step_hint",
    "build_reset_confirmation_prompt",
]
