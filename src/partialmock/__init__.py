"""partialmock.

Temporarily replace methods of live objects for the duration of one test,
observe how the replacements are called, and have everything restored at
teardown.
"""

__version__ = "0.1.0"
__all__ = [
    "AlreadyRegistered",
    "CallContext",
    "HookDispatcher",
    "InterceptorClosed",
    "InterceptorRegistry",
    "MethodInterceptor",
    "MockSlot",
    "MockSlotTable",
    "NoSuchMethod",
    "NotHooked",
    "NotRegistered",
    "PartialMockError",
    "ReentrantMockCall",
    "ScopeMode",
    "SlotAlreadyDefined",
    "TestScopeState",
    "Unhookable",
    "UnknownSlot",
    "configure",
    "current_method",
    "current_object",
    "define_mock",
    "get",
    "get_scope",
    "hook",
    "invoke_backup",
    "is_active",
    "reset_config",
    "restore",
    "restore_all",
    "set",
    "setup_for",
    "wipe",
]

from .call_context import CallContext
from .config import configure, reset_config
from .dispatcher import HookDispatcher
from .exceptions import (
    AlreadyRegistered,
    InterceptorClosed,
    NoSuchMethod,
    NotHooked,
    NotRegistered,
    PartialMockError,
    ReentrantMockCall,
    SlotAlreadyDefined,
    Unhookable,
    UnknownSlot,
)
from .interceptor import InterceptorRegistry, MethodInterceptor
from .scope import (
    TestScopeState,
    current_method,
    current_object,
    define_mock,
    get,
    get_scope,
    hook,
    invoke_backup,
    is_active,
    restore,
    restore_all,
    set,
    setup_for,
    wipe,
)
from .slot_table import MockSlot, MockSlotTable, ScopeMode
