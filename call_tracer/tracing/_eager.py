"""Realization of lazily produced return values."""

import io
from collections.abc import Iterator
from typing import Any

from ._options import is_eager_evaluation_enabled


def is_lazy_sequence(value: Any) -> bool:
    """True for one-shot iterators (generators, map, filter, zip, ...), excluding I/O streams."""
    return isinstance(value, Iterator) and not isinstance(value, io.IOBase)


def maybe_force_eager_evaluation(value: Any) -> Any:
    """Realize ``value`` into a list when eager evaluation is enabled and it is a lazy sequence.

    Realizing runs the producer to completion, so any side effects (including
    nested traced calls) happen before the caller sees the result. An infinite
    iterator never finishes; disable eager evaluation around such calls.
    """
    if is_eager_evaluation_enabled() and is_lazy_sequence(value):
        return list(value)
    return value
