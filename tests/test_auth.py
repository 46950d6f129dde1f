"""Tests for the admin credential gate."""

from __future__ import annotations

import pytest

from adzone.auth import AdminGate
from adzone.models import ADMIN_PASSWORD, ADMIN_USERNAME, UserConfig


@pytest.fixture
def saved() -> list[bool]:
    return []


@pytest.fixture
def gate(saved) -> AdminGate:
    def persist(config: UserConfig) -> bool:
        saved.append(config.admin_session)
        return True

    return AdminGate(UserConfig(), persist)


def test_login_with_valid_credentials(gate, saved):
    assert gate.is_authenticated() is False
    assert gate.login(ADMIN_USERNAME, ADMIN_PASSWORD) is True
    assert gate.is_authenticated() is True
    assert saved == [True]


def test_username_whitespace_is_ignored(gate):
    assert gate.login(f"  {ADMIN_USERNAME} ", ADMIN_PASSWORD) is True


@pytest.mark.parametrize(
    ("username", "password"),
    [
        (ADMIN_USERNAME, "wrong"),
        ("root", ADMIN_PASSWORD),
        ("", ""),
        (ADMIN_USERNAME, f" {ADMIN_PASSWORD}"),
    ],
)
def test_login_rejects_bad_credentials(gate, saved, username, password):
    assert gate.login(username, password) is False
    assert gate.is_authenticated() is False
    assert saved == []


def test_logout_clears_session(gate, saved):
    gate.login(ADMIN_USERNAME, ADMIN_PASSWORD)
    gate.logout()
    assert gate.is_authenticated() is False
    assert saved == [True, False]


def test_logout_when_not_logged_in_is_noop(gate, saved):
    gate.logout()
    assert saved == []


def test_existing_session_is_honoured():
    gate = AdminGate(UserConfig(admin_session=True))
    assert gate.is_authenticated() is True


def test_persist_failure_keeps_in_memory_session(caplog):
    gate = AdminGate(UserConfig(), lambda config: False)
    with caplog.at_level("WARNING", logger="adzone.auth"):
        assert gate.login(ADMIN_USERNAME, ADMIN_PASSWORD) is True
    assert gate.is_authenticated() is True
    assert "not persisted" in caplog.text
