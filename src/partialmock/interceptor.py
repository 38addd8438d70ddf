"""Per-object method interception.

A :class:`MethodInterceptor` owns the backups of every method it has replaced
on one target object. Replacements are installed as attributes of the target
itself, so other instances of the same class are never affected. Restoring a
method puts the target's own attribute state back exactly as it was: an
instance-level attribute is re-set, an inherited method is un-shadowed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .config import METHOD_PLACEHOLDER, validate_backup_pattern
from .exceptions import InterceptorClosed, NoSuchMethod, NotHooked, Unhookable

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class _Backup:
    key: str
    original: Callable[..., Any]
    own_value: Any


def _own_attribute(target: Any, name: str) -> Any:
    namespace = getattr(target, "__dict__", None)
    if namespace is None:
        return _MISSING
    return namespace.get(name, _MISSING)


def _describe(target: Any) -> str:
    return f"{type(target).__name__}@{id(target):#x}"


class MethodInterceptor:
    """Installs, invokes and restores method implementations on one object.

    Attributes:
        target: The object whose methods are intercepted.
        backup_pattern: Pattern used to derive backup keys from method names.
    """

    def __init__(
        self,
        target: Any,
        backup_pattern: str,
        registry: InterceptorRegistry | None = None,
    ) -> None:
        """Initialize the interceptor.

        Args:
            target: The object to intercept methods on.
            backup_pattern: Backup key pattern, must contain ``<meth>``.
            registry: Optional registry this interceptor registers itself
                with and leaves again on :meth:`restore_all`.
        """
        self.target = target
        self.backup_pattern = validate_backup_pattern(backup_pattern)
        self._registry = registry
        self._originals: dict[str, str] = {}
        self._backups: dict[str, _Backup] = {}
        self._closed = False
        if registry is not None:
            registry.register(self)

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"hooked={sorted(self._originals)}"
        return f"<MethodInterceptor {_describe(self.target)} {state}>"

    @property
    def closed(self) -> bool:
        return self._closed

    def backup_key(self, method_name: str) -> str:
        """Return the key under which the original of method_name is kept."""
        return self.backup_pattern.replace(METHOD_PLACEHOLDER, method_name)

    def is_hooked(self, method_name: str) -> bool:
        self._check_open()
        return method_name in self._originals

    def hooked_methods(self) -> list[str]:
        self._check_open()
        return list(self._originals)

    def hook(self, method_name: str, implementation: Callable[..., Any]) -> None:
        """Install implementation as the target's method_name.

        The original is saved only the first time a method is hooked, so
        hooking repeatedly always keeps the pre-hook original as backup while
        the most recent implementation is the active one.

        Raises:
            NoSuchMethod: If the target has no callable method_name.
            Unhookable: If the target rejects the attribute assignment.
        """
        self._check_open()
        backup = None
        if method_name not in self._originals:
            backup = self._save_original(method_name)

        try:
            setattr(self.target, method_name, implementation)
        except (AttributeError, TypeError) as exc:
            raise Unhookable(self.target, method_name, exc) from exc

        if backup is not None:
            self._originals[method_name] = backup.key
            self._backups[backup.key] = backup
        logger.debug("Hooked %s on %s", method_name, _describe(self.target))

    def invoke_original(self, method_name: str, *args: Any, **kwargs: Any) -> Any:
        """Call the saved original of method_name, bound to the target."""
        self._check_open()
        return self._backup_for(method_name).original(*args, **kwargs)

    def restore(self, method_name: str) -> None:
        """Reinstall the original of method_name and discard its backup."""
        self._check_open()
        backup = self._backup_for(method_name)
        if backup.own_value is _MISSING:
            delattr(self.target, method_name)
        else:
            setattr(self.target, method_name, backup.own_value)
        del self._originals[method_name]
        del self._backups[backup.key]
        logger.debug("Restored %s on %s", method_name, _describe(self.target))

    def restore_all(self) -> None:
        """Restore every hooked method and retire this interceptor.

        The interceptor must not be used afterwards; every public operation
        raises :class:`InterceptorClosed`.

        Every method is attempted even if restoring one of them fails; the
        first failure is re-raised once all have been tried.
        """
        self._check_open()
        first_error: Exception | None = None
        for method_name in list(self._originals):
            try:
                self.restore(method_name)
            except Exception as exc:
                logger.warning(
                    "Failed to restore %s on %s", method_name, _describe(self.target)
                )
                if first_error is None:
                    first_error = exc
        self._originals.clear()
        self._backups.clear()
        if self._registry is not None:
            self._registry.remove(self.target)
        self._closed = True
        if first_error is not None:
            raise first_error

    def _save_original(self, method_name: str) -> _Backup:
        try:
            original = getattr(self.target, method_name)
        except AttributeError as exc:
            raise NoSuchMethod(self.target, method_name) from exc
        if not callable(original):
            raise NoSuchMethod(self.target, method_name)
        return _Backup(
            key=self.backup_key(method_name),
            original=original,
            own_value=_own_attribute(self.target, method_name),
        )

    def _backup_for(self, method_name: str) -> _Backup:
        key = self._originals.get(method_name)
        if key is None:
            raise NotHooked(self.target, method_name)
        return self._backups[key]

    def _check_open(self) -> None:
        if self._closed:
            raise InterceptorClosed(self.target)


class InterceptorRegistry:
    """Maps target objects (by identity) to their MethodInterceptor."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._interceptors: dict[int, MethodInterceptor] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._interceptors)

    def __contains__(self, target: Any) -> bool:
        with self._lock:
            return id(target) in self._interceptors

    def get_or_create(self, target: Any, backup_pattern: str) -> MethodInterceptor:
        existing = self.lookup(target)
        if existing is not None:
            return existing
        return MethodInterceptor(target, backup_pattern, registry=self)

    def lookup(self, target: Any) -> MethodInterceptor | None:
        with self._lock:
            return self._interceptors.get(id(target))

    def register(self, interceptor: MethodInterceptor) -> None:
        with self._lock:
            existing = self._interceptors.get(id(interceptor.target))
            if existing is not None and existing is not interceptor:
                raise ValueError(
                    f"{_describe(interceptor.target)} already has an interceptor"
                )
            self._interceptors[id(interceptor.target)] = interceptor

    def remove(self, target: Any) -> MethodInterceptor | None:
        with self._lock:
            return self._interceptors.pop(id(target), None)

    def interceptors(self) -> list[MethodInterceptor]:
        with self._lock:
            return list(self._interceptors.values())
