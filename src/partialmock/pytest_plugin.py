"""pytest integration.

Enable with ``pytest_plugins = ["partialmock.pytest_plugin"]`` in a
conftest.py, then request the ``partialmock`` fixture::

    def test_uses_cache(partialmock):
        partialmock.define_mock("miss", "instance", lambda self, key: None)
        partialmock.hook("miss", cache, "lookup")
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from .scope import TestScopeState, get_scope


class FixtureTestCase:
    """Stand-in test case whose teardown the scope wraps."""

    __test__ = False

    def __init__(self, nodeid: str) -> None:
        self.nodeid = nodeid

    def teardown(self) -> None:
        return None


@pytest.fixture
def partialmock(request: pytest.FixtureRequest) -> Iterator[TestScopeState]:
    """Active scope for one test; everything hooked is restored afterwards."""
    case = FixtureTestCase(request.node.nodeid)
    scope = get_scope().setup_for(case, "teardown")
    yield scope
    if scope.active and scope.test_case is case:
        case.teardown()
