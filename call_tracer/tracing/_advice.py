"""Live replacement of functions stored in attributes of modules, classes and objects.

A function is identified by the slot that holds it, ``(owner, attribute name)``,
rather than by the function object, so the same slot is found again no matter
which callable currently sits in it.

``SlotAdvisor.install`` puts an ``AdvisedFunction`` proxy into the slot. The
proxy calls its advices in a chain, each advice receiving the next callable
followed by the call's arguments: ``advice(f, *args, **kwargs)``. When the last
advice is removed the original attribute value is put back exactly as it was
(``staticmethod`` and ``classmethod`` objects included).

Only callers that look the function up through its slot see the advices.
References captured before ``install`` (``from module import f``, default
arguments, callbacks already registered elsewhere) keep calling the original.
"""

import functools
import inspect
import sys
import threading
import types
from collections.abc import Callable
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from call_tracer.exceptions import AdviceError, InvalidTargetError

Advice = Callable[..., Any]

_current_advised: ContextVar["FunctionSlot | None"] = ContextVar("_current_advised", default=None)


def get_current_advised() -> "FunctionSlot | None":
    """Slot of the innermost advised function currently executing, or None."""
    return _current_advised.get()


@dataclass(frozen=True, eq=False)
class FunctionSlot:
    """An attribute that holds a function: ``owner.name``.

    Two slots are equal when they name the same attribute of the same owner
    object. The owner is compared by identity, not by value.
    """

    owner: Any
    name: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FunctionSlot):
            return NotImplemented
        return self.owner is other.owner and self.name == other.name

    def __hash__(self) -> int:
        return hash((id(self.owner), self.name))

    def __str__(self) -> str:
        return self.qualified_name

    def __repr__(self) -> str:
        return f"FunctionSlot({self.qualified_name!r})"

    @property
    def namespace(self) -> str:
        """Name of the module the slot belongs to."""
        owner = self.owner
        if isinstance(owner, types.ModuleType):
            return owner.__name__
        if isinstance(owner, type):
            return owner.__module__
        return type(owner).__module__

    @property
    def qualified_name(self) -> str:
        owner = self.owner
        if isinstance(owner, types.ModuleType):
            return f"{owner.__name__}.{self.name}"
        if isinstance(owner, type):
            return f"{owner.__module__}.{owner.__qualname__}.{self.name}"
        return f"{self.namespace}.{type(owner).__qualname__}.{self.name}"

    @classmethod
    def of(cls, target: Any) -> "FunctionSlot":
        """Find the slot for ``target``.

        Args:
            target: A FunctionSlot, an ``(owner, name)`` tuple, or a function,
                method, staticmethod or classmethod reachable from its module
                through ``__qualname__``.

        Raises:
            InvalidTargetError: If the function is defined in a local scope or
                its module or owning class cannot be found.
        """
        if isinstance(target, FunctionSlot):
            return target
        if isinstance(target, tuple) and len(target) == 2 and isinstance(target[1], str):
            return cls(target[0], target[1])

        func = getattr(target, "__func__", target)
        if isinstance(func, AdvisedFunction):
            return func.slot

        module_name = getattr(func, "__module__", None)
        qualname = getattr(func, "__qualname__", None)
        if not module_name or not qualname or "<" in qualname:
            raise InvalidTargetError(f"Cannot locate {target!r}; pass (owner, attribute_name) instead")

        owner: Any = sys.modules.get(module_name)
        *path, name = qualname.split(".")
        for part in path:
            if owner is None:
                break
            owner = getattr(owner, part, None)
        if owner is None:
            raise InvalidTargetError(f"Cannot locate {target!r}: {module_name}.{qualname} is not importable")
        return cls(owner, name)

    def resolve(self) -> Any:
        """Raw attribute value, looked up without invoking descriptors."""
        try:
            return inspect.getattr_static(self.owner, self.name)
        except AttributeError as e:
            raise InvalidTargetError(f"{self.qualified_name} does not exist") from e

    @property
    def is_instance_owner(self) -> bool:
        """True when the owner is an object rather than a module or class."""
        return not isinstance(self.owner, (types.ModuleType, type))

    def is_own_attribute(self) -> bool:
        """False when the attribute is inherited from a class rather than stored on the owner."""
        try:
            return self.name in vars(self.owner)
        except TypeError:
            return True

    def bind(self, value: Any) -> None:
        try:
            setattr(self.owner, self.name, value)
        except (AttributeError, TypeError) as e:
            raise AdviceError(f"Cannot rebind {self.qualified_name}: {e}") from e

    def unbind(self) -> None:
        try:
            delattr(self.owner, self.name)
        except (AttributeError, TypeError) as e:
            raise AdviceError(f"Cannot unbind {self.qualified_name}: {e}") from e


def _unwrap(raw: Any) -> tuple[Any, Callable[[Any], Any]]:
    """Split a raw attribute value into the underlying callable and a function that re-wraps it."""
    if isinstance(raw, staticmethod):
        return raw.__func__, staticmethod
    if isinstance(raw, classmethod):
        return raw.__func__, classmethod
    if isinstance(raw, types.MethodType) and isinstance(raw.__func__, AdvisedFunction):
        return raw.__func__, lambda value: value
    return raw, lambda value: value


def is_coroutine_callable(func: Any) -> bool:
    if isinstance(func, AdvisedFunction):
        return func.is_coroutine
    return inspect.iscoroutinefunction(func)


class AdvisedFunction:
    """Proxy installed in a slot while at least one advice is active."""

    def __init__(self, slot: FunctionSlot, original: Any, *, owned: bool = True):
        func, rewrap = _unwrap(original)
        # update_wrapper copies func.__dict__ onto self; our fields go after it
        functools.update_wrapper(self, func)
        self.slot = slot
        self.original = original
        self.owned = owned
        self.rewrap = rewrap
        self.advices: tuple[Advice, ...] = ()
        self.is_coroutine = is_coroutine_callable(func)

    def __repr__(self) -> str:
        return f"<advised {self.slot.qualified_name}>"

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def _chain(self) -> Callable[..., Any]:
        call = self.__wrapped__
        for advice in self.advices:
            call = functools.partial(advice, call)
        return call

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self.is_coroutine:
            return self._call_async(*args, **kwargs)
        token = _current_advised.set(self.slot)
        try:
            return self._chain()(*args, **kwargs)
        finally:
            _current_advised.reset(token)

    async def _call_async(self, *args: Any, **kwargs: Any) -> Any:
        token = _current_advised.set(self.slot)
        try:
            return await self._chain()(*args, **kwargs)
        finally:
            _current_advised.reset(token)


class SlotAdvisor:
    """Installs and removes advices on function slots.

    Rewrites of slots are serialized by an internal lock. Several advices may be
    stacked on the same slot; the most recently installed one runs outermost.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def resolve(self, slot: FunctionSlot) -> Callable[..., Any]:
        """Callable currently held by ``slot``.

        Raises:
            InvalidTargetError: If the attribute is missing or not callable.
        """
        func, _ = _unwrap(slot.resolve())
        if not callable(func):
            raise InvalidTargetError(f"{slot.qualified_name} is not callable: {func!r}")
        return func

    def install(self, slot: FunctionSlot, advice: Advice) -> Callable[..., Any]:
        """Add ``advice`` to the slot, returning the callable it held before.

        Raises:
            InvalidTargetError: If the slot does not hold a callable.
            AdviceError: If the attribute cannot be rewritten.
        """
        with self._lock:
            previous = self.resolve(slot)
            if isinstance(previous, AdvisedFunction) and previous.slot == slot:
                previous.advices = (*previous.advices, advice)
                return previous
            advised = AdvisedFunction(slot, slot.resolve(), owned=slot.is_own_attribute())
            advised.advices = (advice,)
            value = advised.rewrap(advised)
            if slot.is_instance_owner and not advised.owned:
                # a method found on the object's class; attributes set on the
                # instance are not bound on lookup, so store it already bound
                value = value.__get__(slot.owner, type(slot.owner))
            slot.bind(value)
            return previous

    def is_installed(self, slot: FunctionSlot, advice: Advice) -> bool:
        """True if ``advice`` is currently part of the proxy held by ``slot``."""
        with self._lock:
            try:
                current, _ = _unwrap(slot.resolve())
            except InvalidTargetError:
                return False
            if not isinstance(current, AdvisedFunction) or current.slot != slot:
                return False
            return any(a is advice for a in current.advices)

    def remove(self, slot: FunctionSlot, advice: Advice) -> None:
        """Take ``advice`` off the slot; restores the original once no advice is left.

        Does nothing if the advice is not installed on the slot, for example
        because the attribute was reassigned in the meantime.
        """
        with self._lock:
            try:
                current, _ = _unwrap(slot.resolve())
            except InvalidTargetError:
                return
            if not isinstance(current, AdvisedFunction) or current.slot != slot:
                return
            if not any(a is advice for a in current.advices):
                return
            current.advices = tuple(a for a in current.advices if a is not advice)
            if current.advices:
                return
            if current.owned:
                slot.bind(current.original)
            else:
                slot.unbind()


default_advisor = SlotAdvisor()
