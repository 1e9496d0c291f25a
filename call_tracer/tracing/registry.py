"""Registry of traced functions and the trace/untrace lifecycle.

Each traced slot has exactly one registry entry holding the advice that was
installed for it. Tracing an already traced slot untraces it first and then
installs a fresh advice, so wrappers never stack.

``TraceRegistry`` instances are independent; the module-level functions
(``trace``, ``untrace`` ...) operate on a default process-wide registry.
"""

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from call_tracer.exceptions import InvalidTargetError
from call_tracer.logging import get_tracer_logger

from ._advice import Advice, FunctionSlot, SlotAdvisor, default_advisor, is_coroutine_callable
from ._wrapper import TraceConfig, build_trace_advice

__all__ = [
    "RegistryEntry",
    "TraceRegistry",
    "get_default_registry",
    "is_traced",
    "trace",
    "traced",
    "tracing",
    "untrace",
    "untrace_all",
    "untrace_namespace",
]

logger = get_tracer_logger(__name__)


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    """The advice currently installed for a traced slot."""

    slot: FunctionSlot
    advice: Advice
    config: TraceConfig


def _make_config(
    config: TraceConfig | None,
    when: Callable[..., Any] | None,
    report_before: Callable[..., Any] | None,
    report_after: Callable[[Any], Any] | None,
) -> TraceConfig:
    options = {"when": when, "report_before": report_before, "report_after": report_after}
    given = {key: value for key, value in options.items() if value is not None}
    if config is not None:
        if given:
            raise TypeError(f"Pass either config or {', '.join(given)}, not both")
        return config
    return TraceConfig(**given)


class TraceRegistry:
    """Thread-safe mapping from traced slots to their installed advices.

    Every mutation holds a re-entrant lock for its whole duration, so
    concurrent ``trace``/``untrace`` calls on the same slot cannot leave two
    advices installed.

    Args:
        advisor: Collaborator that rewrites slots. Defaults to the shared
                 SlotAdvisor.
    """

    def __init__(self, advisor: SlotAdvisor | None = None) -> None:
        self._advisor = advisor if advisor is not None else default_advisor
        self._entries: dict[FunctionSlot, RegistryEntry] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, target: Any) -> bool:
        return self.is_traced(target)

    def trace(
        self,
        target: Any,
        config: TraceConfig | None = None,
        *,
        when: Callable[..., Any] | None = None,
        report_before: Callable[..., Any] | None = None,
        report_after: Callable[[Any], Any] | None = None,
    ) -> FunctionSlot:
        """Turn on tracing for the function held by ``target``'s slot.

        Args:
            target: Function, method, FunctionSlot or ``(owner, name)`` tuple.
            config: Complete TraceConfig. Mutually exclusive with the keyword
                    options below.
            when: Only report calls for which ``when(*args, **kwargs)`` is truthy.
            report_before: Called with the call's arguments before each
                           reported call.
            report_after: Called with the return value after each reported
                          call that returns normally.

        Returns:
            The slot now being traced.

        Raises:
            InvalidTargetError: If the target cannot be located or does not
                hold a callable. The registry is left unchanged.
            AdviceError: If the slot cannot be rewritten.
        """
        config = _make_config(config, when, report_before, report_after)
        slot = FunctionSlot.of(target)
        with self._lock:
            self._advisor.resolve(slot)
            if slot in self._entries:
                logger.info("%s already traced, untracing first.", slot)
                self._untrace_slot(slot)
            advice = build_trace_advice(config, is_coroutine=is_coroutine_callable(self._advisor.resolve(slot)))
            self._advisor.install(slot, advice)
            self._entries[slot] = RegistryEntry(slot=slot, advice=advice, config=config)
        logger.info("Tracing %s", slot)
        return slot

    def untrace(self, target: Any = None) -> list[FunctionSlot]:
        """Untrace ``target``, or every traced function when called without arguments.

        Untracing something that is not traced does nothing.

        Returns:
            The slots that were untraced.
        """
        if target is None:
            return self.untrace_all()
        try:
            slot = FunctionSlot.of(target)
        except InvalidTargetError:
            logger.debug("Nothing to untrace for %r", target)
            return []
        with self._lock:
            if slot not in self._entries:
                return []
            self._untrace_slot(slot)
        return [slot]

    def untrace_all(self) -> list[FunctionSlot]:
        """Untrace every traced function."""
        with self._lock:
            slots = list(self._entries)
            for slot in slots:
                self._untrace_slot(slot)
        return slots

    def untrace_namespace(self, namespace: str | ModuleType) -> list[FunctionSlot]:
        """Untrace every traced function belonging to the module ``namespace``.

        Args:
            namespace: Module name or module object.
        """
        name = namespace.__name__ if isinstance(namespace, ModuleType) else namespace
        with self._lock:
            slots = [slot for slot in self._entries if slot.namespace == name]
            for slot in slots:
                self._untrace_slot(slot)
        return slots

    def is_traced(self, target: Any) -> bool:
        """True if ``target``'s slot is traced by this registry and its wrapper is still in place.

        A slot whose attribute was reassigned behind the registry's back reports
        False; its entry stays listed by ``traced()`` until it is untraced.
        """
        try:
            slot = FunctionSlot.of(target)
        except InvalidTargetError:
            return False
        with self._lock:
            entry = self._entries.get(slot)
            return entry is not None and self._advisor.is_installed(slot, entry.advice)

    def traced(self) -> list[FunctionSlot]:
        """Snapshot of the currently traced slots."""
        with self._lock:
            return list(self._entries)

    def entry(self, target: Any) -> RegistryEntry | None:
        try:
            slot = FunctionSlot.of(target)
        except InvalidTargetError:
            return None
        with self._lock:
            return self._entries.get(slot)

    @contextmanager
    def tracing(self, target: Any, config: TraceConfig | None = None, **options: Any) -> Iterator[FunctionSlot]:
        """Trace ``target`` for the duration of the block, untracing it on exit."""
        slot = self.trace(target, config, **options)
        try:
            yield slot
        finally:
            self.untrace(slot)

    def _untrace_slot(self, slot: FunctionSlot) -> None:
        entry = self._entries[slot]
        self._advisor.remove(slot, entry.advice)
        del self._entries[slot]
        logger.info("Untracing %s", slot)


_default_registry = TraceRegistry()


def get_default_registry() -> TraceRegistry:
    """The process-wide registry used by the module-level functions."""
    return _default_registry


def trace(
    target: Any,
    config: TraceConfig | None = None,
    *,
    when: Callable[..., Any] | None = None,
    report_before: Callable[..., Any] | None = None,
    report_after: Callable[[Any], Any] | None = None,
) -> FunctionSlot:
    """Turn on tracing for ``target``. See ``TraceRegistry.trace``.

    @public

    Example:
        >>> import json
        >>> from call_tracer import trace, untrace
        >>> slot = trace(json.dumps)
        >>> json.dumps([1])
        0: (json.dumps [1])
        0: json.dumps returned '[1]'
        >>> untrace(json.dumps)
        [FunctionSlot('json.dumps')]
    """
    return _default_registry.trace(target, config, when=when, report_before=report_before, report_after=report_after)


def untrace(target: Any = None) -> list[FunctionSlot]:
    """Untrace ``target``, or everything when called without arguments.

    @public
    """
    return _default_registry.untrace(target)


def untrace_all() -> list[FunctionSlot]:
    return _default_registry.untrace_all()


def untrace_namespace(namespace: str | ModuleType) -> list[FunctionSlot]:
    """Untrace every traced function of module ``namespace``.

    @public
    """
    return _default_registry.untrace_namespace(namespace)


def is_traced(target: Any) -> bool:
    """True if ``target`` is traced in the default registry.

    @public
    """
    return _default_registry.is_traced(target)


def traced() -> list[FunctionSlot]:
    return _default_registry.traced()


def tracing(target: Any, config: TraceConfig | None = None, **options: Any):
    """Context manager tracing ``target`` in the default registry for a block.

    @public
    """
    return _default_registry.tracing(target, config, **options)
