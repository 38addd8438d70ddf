"""Pytest fixtures for shared test state."""

from __future__ import annotations

import pytest

import partialmock.config as config_module
import partialmock.scope as scope_module

pytest_plugins = ["partialmock.pytest_plugin", "pytester"]


def _reset_scope() -> None:
    scope = scope_module.get_scope()
    if scope.active:
        scope.wipe()


@pytest.fixture(autouse=True)
def _reset_partialmock_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset the process-wide scope and configuration between tests."""
    monkeypatch.delenv("PARTIALMOCK_BACKUP_PATTERN", raising=False)
    monkeypatch.delenv("PARTIALMOCK_REENTRANT_CALLS", raising=False)
    _reset_scope()
    config_module.reset_config()
    yield
    _reset_scope()
    config_module.reset_config()


class TeardownStub:
    """Minimal test case stand-in with a teardown returning a known value."""

    __test__ = False

    def __init__(self) -> None:
        self.teardown_calls = 0

    def teardown(self) -> int:
        self.teardown_calls += 1
        return 42


@pytest.fixture
def stub_case() -> TeardownStub:
    return TeardownStub()
