"""Mock slot table: named replacement implementations."""

from __future__ import annotations

import enum
import threading
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

from .exceptions import SlotAlreadyDefined, UnknownSlot


class ScopeMode(enum.Enum):
    """How a hooked replacement is invoked.

    INSTANCE: the replacement is bound to the target, ``self`` is the target.
    CALLER: the replacement runs unbound in the scope that defined it, the
    target is exposed through the call context.
    """

    INSTANCE = "instance"
    CALLER = "caller"


@dataclass(frozen=True)
class MockSlot:
    implementation: Callable[..., Any]
    mode: ScopeMode


class MockSlotTable:
    """Slot identifier to replacement implementation, each defined once."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._slots: dict[Hashable, MockSlot] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)

    def __contains__(self, slot: Hashable) -> bool:
        with self._lock:
            return slot in self._slots

    def define(
        self,
        slot: Hashable,
        mode: ScopeMode | str,
        implementation: Callable[..., Any],
    ) -> MockSlot:
        if not callable(implementation):
            raise TypeError(f"mock implementation for slot {slot!r} must be callable")
        entry = MockSlot(implementation=implementation, mode=ScopeMode(mode))
        with self._lock:
            if slot in self._slots:
                raise SlotAlreadyDefined(slot)
            self._slots[slot] = entry
        return entry

    def get(self, slot: Hashable) -> MockSlot:
        with self._lock:
            entry = self._slots.get(slot)
        if entry is None:
            raise UnknownSlot(slot)
        return entry

    def clear(self) -> None:
        with self._lock:
            self._slots.clear()
