"""Operator modals: login and the create/edit ad form."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Static

from adzone.auth import AdminGate
from adzone.models import Ad, AdDraft

logger = logging.getLogger(__name__)


def smart_link_error(value: str) -> str | None:
    """Return a validation message for a smart link, or None if it is usable."""
    link = value.strip()
    if not link:
        return "Smart link is required"
    parsed = urlparse(link)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return "Please enter a valid URL (http:// or https://)"
    return None


class AdminLoginModal(ModalScreen[bool]):
    """Operator login. Dismisses with True once the gate accepts credentials."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    CSS = """
    AdminLoginModal {
        align: center middle;
    }

    #login-dialog {
        width: 50;
        height: auto;
        background: $surface;
        border: tall $accent;
        padding: 0 2;
    }

    #login-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #login-error {
        color: $error;
        height: auto;
    }

    #login-buttons {
        height: auto;
        margin-top: 1;
        align: right middle;
    }

    #login-buttons Button {
        margin-left: 1;
    }
    """

    def __init__(self, gate: AdminGate) -> None:
        super().__init__()
        self._gate = gate

    def compose(self) -> ComposeResult:
        with Vertical(id="login-dialog"):
            yield Label("Admin Login", id="login-title")
            yield Input(placeholder="Username", id="login-username")
            yield Input(placeholder="Password", password=True, id="login-password")
            yield Static("", id="login-error")
            with Horizontal(id="login-buttons"):
                yield Button("Cancel", variant="default", id="login-cancel")
                yield Button("Login", variant="primary", id="login-submit")

    def on_mount(self) -> None:
        self.query_one("#login-username", Input).focus()

    def action_submit(self) -> None:
        username = self.query_one("#login-username", Input).value
        password_input = self.query_one("#login-password", Input)
        if self._gate.login(username, password_input.value):
            self.dismiss(True)
            return
        password_input.value = ""
        self.query_one("#login-error", Static).update("Invalid credentials")
        password_input.focus()

    def action_cancel(self) -> None:
        self.dismiss(False)

    @on(Input.Submitted, "#login-username")
    def on_username_submitted(self) -> None:
        self.query_one("#login-password", Input).focus()

    @on(Input.Submitted, "#login-password")
    def on_password_submitted(self) -> None:
        self.action_submit()

    @on(Button.Pressed, "#login-submit")
    def on_submit_pressed(self) -> None:
        self.action_submit()

    @on(Button.Pressed, "#login-cancel")
    def on_cancel_pressed(self) -> None:
        self.action_cancel()


class AdFormModal(ModalScreen[AdDraft | None]):
    """Create or edit an ad. Dismisses with the entered fields or None."""

    BINDINGS = [
        Binding("ctrl+s", "save", "Save"),
        Binding("escape", "cancel", "Cancel"),
    ]

    CSS = """
    AdFormModal {
        align: center middle;
    }

    #ad-form-dialog {
        width: 70%;
        min-width: 50;
        height: auto;
        background: $surface;
        border: tall $accent;
        padding: 0 2;
    }

    #ad-form-title {
        text-style: bold;
        margin-bottom: 1;
    }

    .ad-form-label {
        color: $text-muted;
    }

    #ad-form-error {
        color: $error;
        height: auto;
    }

    #ad-form-buttons {
        height: auto;
        margin-top: 1;
        align: right middle;
    }

    #ad-form-buttons Button {
        margin-left: 1;
    }
    """

    def __init__(self, ad: Ad | None = None) -> None:
        super().__init__()
        self._ad = ad

    @property
    def editing(self) -> bool:
        return self._ad is not None

    def compose(self) -> ComposeResult:
        ad = self._ad
        with Vertical(id="ad-form-dialog"):
            yield Label("Edit Ad" if ad is not None else "Create New Ad", id="ad-form-title")
            yield Label("Title", classes="ad-form-label")
            yield Input(ad.title if ad else "", placeholder="Untitled Ad", id="ad-title")
            yield Label("Description", classes="ad-form-label")
            yield Input(
                ad.description if ad else "",
                placeholder="No description provided",
                id="ad-description",
            )
            yield Label("Image URL", classes="ad-form-label")
            yield Input(ad.image_url if ad else "", placeholder="https://...", id="ad-image-url")
            yield Label("Smart Link *", classes="ad-form-label")
            yield Input(ad.smart_link if ad else "", placeholder="https://...", id="ad-smart-link")
            yield Static("", id="ad-form-error")
            with Horizontal(id="ad-form-buttons"):
                yield Button("Cancel", variant="default", id="ad-form-cancel")
                yield Button(
                    "Update Ad" if ad is not None else "Create Ad",
                    variant="primary",
                    id="ad-form-save",
                )

    def on_mount(self) -> None:
        self.query_one("#ad-title", Input).focus()

    def action_save(self) -> None:
        smart_link = self.query_one("#ad-smart-link", Input).value
        error = smart_link_error(smart_link)
        if error is not None:
            self.query_one("#ad-form-error", Static).update(error)
            self.query_one("#ad-smart-link", Input).focus()
            return
        self.dismiss(
            AdDraft(
                smart_link=smart_link.strip(),
                title=self.query_one("#ad-title", Input).value.strip(),
                description=self.query_one("#ad-description", Input).value.strip(),
                image_url=self.query_one("#ad-image-url", Input).value.strip(),
            )
        )

    def action_cancel(self) -> None:
        self.dismiss(None)

    @on(Input.Submitted)
    def on_input_submitted(self) -> None:
        self.action_save()

    @on(Button.Pressed, "#ad-form-save")
    def on_save_pressed(self) -> None:
        self.action_save()

    @on(Button.Pressed, "#ad-form-cancel")
    def on_cancel_pressed(self) -> None:
        self.action_cancel()


__all__ = [
    "AdFormModal",
    "AdminLoginModal",
    "smart_link_error",
]
