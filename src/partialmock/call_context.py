"""Ambient context for caller-scoped mocks.

The context is a single shared cell, not a stack and not per thread: only one
caller-scoped mock can be running at a time. A caller-scoped mock that ends up
invoking another caller-scoped mock before returning is a known limitation;
by default such a nested call is rejected with
:class:`~partialmock.exceptions.ReentrantMockCall`.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from .exceptions import ReentrantMockCall


class CallContext:
    """The (target, method name) pair of the running caller-scoped mock."""

    def __init__(self) -> None:
        self._target: Any = None
        self._method_name: str | None = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def target(self) -> Any:
        return self._target

    @property
    def method_name(self) -> str | None:
        return self._method_name

    @contextmanager
    def entered(
        self, target: Any, method_name: str, reject_reentrant: bool = True
    ) -> Iterator[None]:
        """Expose (target, method_name) for the duration of the block.

        The context is cleared when the block exits, whether it returns or
        raises.
        """
        if self._active and reject_reentrant:
            raise ReentrantMockCall(
                (self._target, self._method_name or ""), (target, method_name)
            )
        self._target = target
        self._method_name = method_name
        self._active = True
        try:
            yield
        finally:
            self.clear()

    def clear(self) -> None:
        self._target = None
        self._method_name = None
        self._active = False
