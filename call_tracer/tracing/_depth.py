"""Nesting depth of traced calls, scoped to the current call chain.

The depth lives in a ContextVar, so every thread and every asyncio task has its
own value. New threads start at 0; tasks inherit a copy of the depth that was
current when they were created.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_trace_level: ContextVar[int] = ContextVar("_trace_level", default=0)


def get_trace_level() -> int:
    """Number of traced functions currently on the stack, excluding the one being reported upon.

    Intended for report callbacks: inside ``report_before`` and ``report_after``
    this is the depth of the traced call itself (0 for a top-level call).
    """
    return _trace_level.get()


@contextmanager
def nested_trace_level() -> Iterator[int]:
    """Increment the trace level for the duration of the block.

    The previous level is restored on exit, including exit by exception.
    """
    token = _trace_level.set(_trace_level.get() + 1)
    try:
        yield _trace_level.get()
    finally:
        _trace_level.reset(token)
