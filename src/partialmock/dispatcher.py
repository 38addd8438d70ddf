"""Hook dispatcher: binds mock slots onto object methods."""

from __future__ import annotations

import functools
import logging
import types
from collections.abc import Callable, Hashable
from typing import Any

from .call_context import CallContext
from .config import resolve_backup_pattern, resolve_reject_reentrant
from .exceptions import NotHooked
from .interceptor import InterceptorRegistry, MethodInterceptor
from .slot_table import MockSlot, MockSlotTable, ScopeMode

logger = logging.getLogger(__name__)


class HookDispatcher:
    """Installs slot implementations through per-object interceptors.

    Attributes:
        slots: The mock slot table.
        registry: Interceptors of every object hooked through this dispatcher.
        context: Call context exposed to caller-scoped mocks.
    """

    def __init__(
        self,
        slots: MockSlotTable | None = None,
        registry: InterceptorRegistry | None = None,
        context: CallContext | None = None,
    ) -> None:
        self.slots = slots if slots is not None else MockSlotTable()
        self.registry = registry if registry is not None else InterceptorRegistry()
        self.context = context if context is not None else CallContext()

    def define_mock(
        self,
        slot: Hashable,
        mode: ScopeMode | str,
        implementation: Callable[..., Any],
    ) -> MockSlot:
        return self.slots.define(slot, mode, implementation)

    def hook(self, slot: Hashable, target: Any, method_name: str) -> MethodInterceptor:
        """Install the implementation registered in slot as target.method_name.

        Raises:
            UnknownSlot: If slot has not been defined.
            NoSuchMethod: If target has no such method.
        """
        entry = self.slots.get(slot)
        if entry.mode is ScopeMode.INSTANCE:
            replacement = types.MethodType(entry.implementation, target)
        else:
            replacement = self._caller_scoped(entry.implementation, target, method_name)

        created = target not in self.registry
        interceptor = self.registry.get_or_create(target, resolve_backup_pattern())
        try:
            interceptor.hook(method_name, replacement)
        except Exception:
            if created:
                self.registry.remove(target)
            raise
        logger.debug("Slot %r hooked as %s (%s)", slot, method_name, entry.mode.value)
        return interceptor

    def current_object(self) -> Any:
        return self.context.target

    def current_method(self) -> str | None:
        return self.context.method_name

    def invoke_backup(self, target: Any, method_name: str, *args: Any, **kwargs: Any) -> Any:
        return self._interceptor_for(target, method_name).invoke_original(
            method_name, *args, **kwargs
        )

    def restore(self, target: Any, method_name: str) -> None:
        self._interceptor_for(target, method_name).restore(method_name)

    def restore_all(self, target: Any) -> None:
        interceptor = self.registry.remove(target)
        if interceptor is None:
            raise NotHooked(target)
        interceptor.restore_all()

    def restore_everything(self) -> None:
        """Restore all methods on every object that still has an interceptor.

        Every interceptor is attempted; the first failure is re-raised after
        the others have been restored.
        """
        first_error: Exception | None = None
        for interceptor in self.registry.interceptors():
            try:
                interceptor.restore_all()
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def _interceptor_for(self, target: Any, method_name: str) -> MethodInterceptor:
        interceptor = self.registry.lookup(target)
        if interceptor is None:
            raise NotHooked(target, method_name)
        return interceptor

    def _caller_scoped(
        self,
        implementation: Callable[..., Any],
        target: Any,
        method_name: str,
    ) -> Callable[..., Any]:
        context = self.context

        @functools.wraps(implementation)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with context.entered(target, method_name, resolve_reject_reentrant()):
                return implementation(*args, **kwargs)

        return wrapper
