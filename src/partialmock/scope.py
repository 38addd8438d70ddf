"""Process-wide test scope and the module-level API.

A test registers itself with :func:`setup_for` before doing anything else.
The registration stays active until :func:`wipe` runs, which normally
happens from the test case's own teardown: ``setup_for`` wraps it so the
original teardown runs first, then every hooked method is restored, the mock
slots and the key/value store are cleared and the scope is unregistered.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable
from typing import Any

from .config import TEST_CASE_BACKUP_PATTERN
from .dispatcher import HookDispatcher
from .exceptions import AlreadyRegistered, NoSuchMethod, NotRegistered
from .interceptor import MethodInterceptor
from .slot_table import MockSlot, ScopeMode

logger = logging.getLogger(__name__)

TEARDOWN_NAMES = ("tearDown", "teardown", "teardown_method")


def _find_teardown(test_case: Any) -> str:
    for name in TEARDOWN_NAMES:
        if callable(getattr(test_case, name, None)):
            return name
    raise NoSuchMethod(test_case, TEARDOWN_NAMES[0])


class TestScopeState:
    """Lifecycle of one registered test case: Unregistered -> Active -> Unregistered.

    While Active the scope owns the mock slot table, the interceptor
    registry, the call context and an auxiliary key/value store.
    """

    __test__ = False

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._clean_state()

    def _clean_state(self) -> None:
        self._test_case: Any = None
        self._case_interceptor: MethodInterceptor | None = None
        self._dispatcher: HookDispatcher | None = None
        self._store: dict[Hashable, Any] = {}

    @property
    def active(self) -> bool:
        return self._dispatcher is not None

    @property
    def test_case(self) -> Any:
        return self._test_case

    def setup_for(self, test_case: Any, teardown_name: str | None = None) -> TestScopeState:
        """Register test_case and wrap its teardown to eventually call wipe.

        Args:
            test_case: The running test case object.
            teardown_name: Name of the teardown method to wrap. Defaults to
                the first of ``tearDown``, ``teardown``, ``teardown_method``
                the test case has.

        A test case with ``addCleanup`` (``unittest.TestCase``) also gets a
        cleanup that wipes the scope, since unittest skips ``tearDown`` when
        ``setUp`` fails.

        Raises:
            AlreadyRegistered: If a test case is already registered.
            NoSuchMethod: If the test case has no teardown method.
        """
        with self._lock:
            if self.active:
                raise AlreadyRegistered(self._test_case)
            if teardown_name is None:
                teardown_name = _find_teardown(test_case)
            case_interceptor = MethodInterceptor(test_case, TEST_CASE_BACKUP_PATTERN)
            case_interceptor.hook(
                teardown_name, self._wrap_teardown(case_interceptor, teardown_name)
            )
            self._test_case = test_case
            self._case_interceptor = case_interceptor
            self._store = {}
            self._dispatcher = HookDispatcher()
            add_cleanup = getattr(test_case, "addCleanup", None)
            if callable(add_cleanup):
                add_cleanup(self._wipe_if_still_registered, case_interceptor)
        logger.debug("Scope set up for %s", type(test_case).__name__)
        return self

    def _wrap_teardown(
        self, case_interceptor: MethodInterceptor, teardown_name: str
    ) -> Callable[..., Any]:
        scope = self

        def teardown(*args: Any, **kwargs: Any) -> Any:
            try:
                return case_interceptor.invoke_original(teardown_name, *args, **kwargs)
            finally:
                if not case_interceptor.closed:
                    case_interceptor.restore_all()
                scope._wipe_if_still_registered(case_interceptor)

        teardown.__name__ = teardown_name
        return teardown

    def _wipe_if_still_registered(self, case_interceptor: MethodInterceptor) -> None:
        if self.active and self._case_interceptor is case_interceptor:
            self.wipe()

    def wipe(self) -> None:
        """Restore every hooked method and unregister the test case.

        Also restores the test case's teardown if it is still wrapped, so
        wipe can be called directly. Use :meth:`setup_for` to use the scope
        again.
        """
        with self._lock:
            dispatcher = self._require_active()
            case_interceptor = self._case_interceptor
            errors: list[Exception] = []
            try:
                dispatcher.restore_everything()
            except Exception as exc:
                errors.append(exc)
            if case_interceptor is not None and not case_interceptor.closed:
                try:
                    case_interceptor.restore_all()
                except Exception as exc:
                    errors.append(exc)
            dispatcher.slots.clear()
            dispatcher.context.clear()
            self._clean_state()
        logger.debug("Scope wiped")
        if errors:
            raise errors[0]

    def define_mock(
        self,
        slot: Hashable,
        mode: ScopeMode | str,
        implementation: Callable[..., Any],
    ) -> MockSlot:
        """Register implementation under slot for later hooking.

        With ``ScopeMode.INSTANCE`` the implementation is called as a method
        of the hooked object. With ``ScopeMode.CALLER`` it is called as is,
        and :meth:`current_object` / :meth:`current_method` tell it what it
        is replacing.
        """
        return self._require_active().define_mock(slot, mode, implementation)

    def hook(self, slot: Hashable, target: Any, method_name: str) -> MethodInterceptor:
        """Hook the mock in slot onto target as method_name.

        The original is saved the first time a given (target, method_name)
        pair is hooked; hooking it again does not change what
        :meth:`invoke_backup` and :meth:`restore` use.
        """
        return self._require_active().hook(slot, target, method_name)

    def current_object(self) -> Any:
        """The object the running caller-scoped mock was invoked on, else None."""
        return self._require_active().current_object()

    def current_method(self) -> str | None:
        """The method name the running caller-scoped mock replaces, else None."""
        return self._require_active().current_method()

    def invoke_backup(self, target: Any, method_name: str, *args: Any, **kwargs: Any) -> Any:
        return self._require_active().invoke_backup(target, method_name, *args, **kwargs)

    def restore(self, target: Any, method_name: str) -> None:
        self._require_active().restore(target, method_name)

    def restore_all(self, target: Any) -> None:
        self._require_active().restore_all(target)

    def get(self, key: Hashable) -> Any:
        self._require_active()
        return self._store.get(key)

    def set(self, key: Hashable, value: Any) -> None:
        self._require_active()
        self._store[key] = value

    __getitem__ = get
    __setitem__ = set

    def _require_active(self) -> HookDispatcher:
        dispatcher = self._dispatcher
        if dispatcher is None:
            raise NotRegistered()
        return dispatcher


_scope = TestScopeState()


def get_scope() -> TestScopeState:
    return _scope


def is_active() -> bool:
    return _scope.active


def setup_for(test_case: Any, teardown_name: str | None = None) -> TestScopeState:
    return _scope.setup_for(test_case, teardown_name)


def wipe() -> None:
    _scope.wipe()


def define_mock(
    slot: Hashable,
    mode: ScopeMode | str,
    implementation: Callable[..., Any],
) -> MockSlot:
    return _scope.define_mock(slot, mode, implementation)


def hook(slot: Hashable, target: Any, method_name: str) -> MethodInterceptor:
    return _scope.hook(slot, target, method_name)


def current_object() -> Any:
    return _scope.current_object()


def current_method() -> str | None:
    return _scope.current_method()


def invoke_backup(target: Any, method_name: str, *args: Any, **kwargs: Any) -> Any:
    return _scope.invoke_backup(target, method_name, *args, **kwargs)


def restore(target: Any, method_name: str) -> None:
    _scope.restore(target, method_name)


def restore_all(target: Any) -> None:
    _scope.restore_all(target)


def get(key: Hashable) -> Any:
    return _scope.get(key)


def set(key: Hashable, value: Any) -> None:  # noqa: A001 - mirrors TestScopeState.set
    _scope.set(key, value)
