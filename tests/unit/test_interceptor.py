"""Unit tests for MethodInterceptor and InterceptorRegistry.

This test suite validates saving, installing, invoking and restoring method
implementations on single objects.
"""

import pytest

from partialmock import (
    InterceptorClosed,
    InterceptorRegistry,
    MethodInterceptor,
    NoSuchMethod,
    NotHooked,
    Unhookable,
)


class Calls:
    """Records which implementation handled a call."""

    def __init__(self) -> None:
        self.log: list[tuple[object, str, tuple]] = []

    def record(self, obj: object, handler: str, args: tuple) -> tuple:
        self.log.append((obj, handler, args))
        return (handler,) + args


class Base:
    calls: Calls

    def meth1(self, *args):
        return self.calls.record(self, "meth1", args)

    def meth2(self, *args):
        return self.calls.record(self, "meth2", args)

    def meth3(self, *args):
        return self.calls.record(self, "meth3", args)


class Derived(Base):
    pass


class Naked:
    pass


class Slotted:
    __slots__ = ()

    def meth(self):
        return "slotted"


def _hook_impl(calls: Calls, handler: str):
    def impl(*args):
        return calls.record(None, handler, args)

    return impl


def _run_call_sequence(obj: object, calls: Calls) -> None:
    interceptor = MethodInterceptor(obj, "original <meth>")

    assert obj.meth1(0, 1) == ("meth1", 0, 1)

    interceptor.hook("meth1", _hook_impl(calls, "hook1"))
    assert obj.meth1(2, 3) == ("hook1", 2, 3)

    interceptor.hook("meth1", _hook_impl(calls, "hook2"))
    assert obj.meth1(4, 5) == ("hook2", 4, 5)

    assert interceptor.invoke_original("meth1", 6, 7) == ("meth1", 6, 7)
    assert calls.log[-1][0] is obj

    interceptor.restore("meth1")
    assert obj.meth1(8, 9) == ("meth1", 8, 9)

    interceptor.hook("meth2", _hook_impl(calls, "hook2"))
    interceptor.hook("meth3", _hook_impl(calls, "hook3"))
    assert obj.meth2(10) == ("hook2", 10)
    assert obj.meth3(11) == ("hook3", 11)

    interceptor.restore_all()
    assert obj.meth1(12) == ("meth1", 12)
    assert obj.meth2(13) == ("meth2", 13)
    assert obj.meth3(14) == ("meth3", 14)


def test_call_sequence_on_instance_attributes() -> None:
    """Hooking methods stored on the instance itself."""
    calls = Calls()
    obj = Naked()
    for name in ("meth1", "meth2", "meth3"):
        setattr(obj, name, lambda *args, _name=name: calls.record(obj, _name, args))
    originals = {name: vars(obj)[name] for name in ("meth1", "meth2", "meth3")}

    _run_call_sequence(obj, calls)

    for name, original in originals.items():
        assert vars(obj)[name] is original


def test_call_sequence_on_inherited_methods() -> None:
    """Hooking methods defined up in the class hierarchy."""
    calls = Calls()
    Base.calls = calls
    obj = Derived()

    _run_call_sequence(obj, calls)

    assert vars(obj) == {}


def test_hook_only_affects_target_instance() -> None:
    """Other instances of the same class keep the original method."""
    calls = Calls()
    Base.calls = calls
    hooked, untouched = Derived(), Derived()

    interceptor = MethodInterceptor(hooked, "saved <meth>")
    interceptor.hook("meth1", lambda: "mocked")

    assert hooked.meth1() == "mocked"
    assert untouched.meth1(1) == ("meth1", 1)


def test_rehook_keeps_first_backup() -> None:
    """Only the first hook saves the original."""
    calls = Calls()
    Base.calls = calls
    obj = Derived()
    interceptor = MethodInterceptor(obj, "saved <meth>")

    for index in range(5):
        interceptor.hook("meth1", lambda index=index: index)
        assert obj.meth1() == index
        assert interceptor.invoke_original("meth1", "x") == ("meth1", "x")

    assert interceptor.hooked_methods() == ["meth1"]


def test_method_must_exist() -> None:
    """Hooking an unknown method fails before anything is recorded."""
    obj = Naked()
    interceptor = MethodInterceptor(obj, "original <meth>")

    with pytest.raises(NoSuchMethod):
        interceptor.hook("meth", lambda: None)
    with pytest.raises(NotHooked):
        interceptor.restore("meth")
    with pytest.raises(NotHooked):
        interceptor.invoke_original("meth")
    assert vars(obj) == {}


def test_non_callable_attribute_is_not_a_method() -> None:
    """A plain data attribute cannot be hooked."""
    obj = Naked()
    obj.value = 3
    interceptor = MethodInterceptor(obj, "original <meth>")

    with pytest.raises(NoSuchMethod):
        interceptor.hook("value", lambda: 4)
    assert obj.value == 3


def test_no_such_method_is_an_attribute_error() -> None:
    """NoSuchMethod can be caught as AttributeError."""
    interceptor = MethodInterceptor(Naked(), "original <meth>")
    with pytest.raises(AttributeError):
        interceptor.hook("missing", lambda: None)


def test_method_must_be_hooked() -> None:
    """restore and invoke_original need a prior hook."""
    obj = Derived()
    interceptor = MethodInterceptor(obj, "original <meth>")

    with pytest.raises(NotHooked):
        interceptor.restore("meth1")
    with pytest.raises(NotHooked):
        interceptor.invoke_original("meth1")


def test_restore_twice_fails() -> None:
    """The second restore without an intervening hook fails."""
    obj = Derived()
    interceptor = MethodInterceptor(obj, "original <meth>")
    interceptor.hook("meth1", lambda: None)

    interceptor.restore("meth1")
    with pytest.raises(NotHooked):
        interceptor.restore("meth1")


def test_unhookable_object_leaves_no_backup() -> None:
    """Objects without an instance namespace cannot be hooked."""
    obj = Slotted()
    interceptor = MethodInterceptor(obj, "original <meth>")

    with pytest.raises(Unhookable) as exc_info:
        interceptor.hook("meth", lambda: "mocked")

    assert isinstance(exc_info.value.original_error, AttributeError)
    assert not interceptor.is_hooked("meth")
    assert obj.meth() == "slotted"


def test_hook_class_object() -> None:
    """Classes are objects too: hooking a classmethod and restoring it."""

    class Factory:
        @classmethod
        def create(cls, value):
            return (cls.__name__, value)

    raw = vars(Factory)["create"]
    interceptor = MethodInterceptor(Factory, "original <meth>")
    interceptor.hook("create", lambda value: ("mock", value))

    assert Factory.create(1) == ("mock", 1)
    assert interceptor.invoke_original("create", 2) == ("Factory", 2)

    interceptor.restore("create")
    assert vars(Factory)["create"] is raw
    assert Factory.create(3) == ("Factory", 3)


def test_use_after_restore_all_fails() -> None:
    """A retired interceptor refuses every operation."""
    obj = Derived()
    interceptor = MethodInterceptor(obj, "saved <meth>")
    interceptor.hook("meth1", lambda: None)
    interceptor.restore_all()

    assert interceptor.closed
    with pytest.raises(InterceptorClosed):
        interceptor.hook("meth1", lambda: None)
    with pytest.raises(InterceptorClosed):
        interceptor.invoke_original("meth1")
    with pytest.raises(InterceptorClosed):
        interceptor.restore("meth1")
    with pytest.raises(InterceptorClosed):
        interceptor.restore_all()
    with pytest.raises(InterceptorClosed):
        interceptor.hooked_methods()


def test_backup_key_embeds_method_name() -> None:
    """Backup keys follow the pattern and cannot be valid identifiers."""
    interceptor = MethodInterceptor(Derived(), "saved method <meth>")
    assert interceptor.backup_key("meth1") == "saved method meth1"
    assert not interceptor.backup_key("meth1").isidentifier()


def test_backup_pattern_needs_placeholder() -> None:
    """A pattern without <meth> would make every backup key collide."""
    with pytest.raises(ValueError):
        MethodInterceptor(Derived(), "saved method")


def test_registry() -> None:
    """Interceptors created with a registry register and deregister themselves."""
    registry = InterceptorRegistry()
    o1, o2 = Derived(), Derived()
    ct1 = MethodInterceptor(o1, "saved <meth>", registry=registry)
    ct2 = MethodInterceptor(o2, "saved <meth>", registry=registry)

    assert registry.lookup(o1) is ct1
    assert registry.lookup(o2) is ct2
    assert len(registry) == 2

    ct1.restore_all()
    assert registry.lookup(o1) is None
    assert o1 not in registry
    assert o2 in registry


def test_registry_get_or_create_reuses_interceptor() -> None:
    """At most one interceptor exists per object."""
    registry = InterceptorRegistry()
    obj = Derived()

    first = registry.get_or_create(obj, "saved <meth>")
    assert registry.get_or_create(obj, "other <meth>") is first
    with pytest.raises(ValueError):
        MethodInterceptor(obj, "saved <meth>", registry=registry)


def test_registry_remove_unknown_object() -> None:
    """Removing an object without an interceptor is a no-op."""
    registry = InterceptorRegistry()
    assert registry.remove(Derived()) is None
    assert registry.interceptors() == []


def test_restore_all_continues_past_a_failing_method() -> None:
    """A method that cannot be restored does not keep the others hooked."""
    calls = Calls()
    Base.calls = calls
    obj = Derived()
    interceptor = MethodInterceptor(obj, "saved <meth>")
    interceptor.hook("meth1", lambda: "mocked")
    interceptor.hook("meth2", lambda: "mocked")
    del obj.__dict__["meth1"]

    with pytest.raises(AttributeError):
        interceptor.restore_all()

    assert obj.meth2(1) == ("meth2", 1)
    assert vars(obj) == {}
    assert interceptor.closed
