"""Exceptions raised by partialmock.

Every error is a caller-misuse error: nothing is retried and nothing is
partially applied.
"""

from collections.abc import Hashable
from typing import Any


class PartialMockError(Exception):
    """Base class for partialmock errors."""


class AlreadyRegistered(PartialMockError):
    """Raised when setup_for is called while a test case is registered."""

    def __init__(self, test_case: Any) -> None:
        self.test_case = test_case
        super().__init__(
            f"already set up for a test case object ({type(test_case).__name__})"
        )


class NotRegistered(PartialMockError):
    """Raised when a scope operation is used before setup_for or after wipe."""

    def __init__(self) -> None:
        super().__init__("not set up for a test case object")


class SlotAlreadyDefined(PartialMockError):
    """Raised when a mock slot is defined twice within one scope."""

    def __init__(self, slot: Hashable) -> None:
        self.slot = slot
        super().__init__(f"already have a mock method in slot {slot!r}")


class UnknownSlot(PartialMockError):
    """Raised when hooking a slot that was never defined."""

    def __init__(self, slot: Hashable) -> None:
        self.slot = slot
        super().__init__(f"unknown slot {slot!r}")


class NoSuchMethod(PartialMockError, AttributeError):
    """Raised when the target has no callable attribute of the given name."""

    def __init__(self, target: Any, method_name: str) -> None:
        self.target = target
        self.method_name = method_name
        super().__init__(
            f"unknown method {method_name!r} on {type(target).__name__} object"
        )


class NotHooked(PartialMockError):
    """Raised when restoring or invoking the backup of a method that is not hooked."""

    def __init__(self, target: Any, method_name: str | None = None) -> None:
        self.target = target
        self.method_name = method_name
        if method_name is None:
            message = f"no hooked methods on {type(target).__name__} object"
        else:
            message = (
                f"method {method_name!r} of {type(target).__name__} object "
                "has not been hooked"
            )
        super().__init__(message)


class Unhookable(PartialMockError):
    """Raised when the target refuses an instance-level method override."""

    def __init__(self, target: Any, method_name: str, original_error: Exception) -> None:
        self.target = target
        self.method_name = method_name
        self.original_error = original_error
        super().__init__(
            f"cannot hook {method_name!r} on {type(target).__name__} object: "
            f"{original_error}"
        )


class InterceptorClosed(PartialMockError):
    """Raised when a MethodInterceptor is used after restore_all."""

    def __init__(self, target: Any) -> None:
        self.target = target
        super().__init__(
            f"interceptor for {type(target).__name__} object used after restore_all"
        )


class ReentrantMockCall(PartialMockError):
    """Raised when a caller-scoped mock is entered while another one is running."""

    def __init__(self, outer: tuple[Any, str], inner: tuple[Any, str]) -> None:
        self.outer = outer
        self.inner = inner
        super().__init__(
            f"caller-scoped mock for {inner[1]!r} invoked while the mock for "
            f"{outer[1]!r} is still running"
        )
