"""Process-wide tracing knobs with scoped overrides.

Two knobs control the default behavior of every trace wrapper:

- ``indent_per_level``: spaces of indentation per nesting level in the
  default reports.
- ``force_eager_evaluation``: whether iterators returned by traced functions
  are realized before they are reported.

``configure`` changes the process-wide values. ``trace_indent`` and
``eager_evaluation`` override a knob for the current call chain only, and
restore it on exit.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from pydantic import BaseModel, ConfigDict, Field

from call_tracer.logging import get_tracer_logger
from call_tracer.settings import settings

logger = get_tracer_logger(__name__)

_EAGER_DISABLED_WARNING = (
    "Eager evaluation of traced return values is disabled: iterators are reported "
    "unrealized and nested trace levels are not guaranteed for work done while consuming them"
)


class TraceOptions(BaseModel):
    """Snapshot of the tracing knobs."""

    model_config = ConfigDict(frozen=True)

    indent_per_level: int = Field(default=2, ge=0)
    force_eager_evaluation: bool = True


_lock = threading.Lock()
_options = TraceOptions(
    indent_per_level=settings.indent_per_level,
    force_eager_evaluation=settings.force_eager_evaluation,
)

_indent_override: ContextVar[int | None] = ContextVar("_trace_indent_override", default=None)
_eager_override: ContextVar[bool | None] = ContextVar("_eager_evaluation_override", default=None)


def get_options() -> TraceOptions:
    """Return the process-wide knobs, ignoring scoped overrides."""
    with _lock:
        return _options


def configure(
    *,
    indent_per_level: int | None = None,
    force_eager_evaluation: bool | None = None,
) -> TraceOptions:
    """Change the process-wide knobs.

    Only the knobs passed are changed. Returns the previous options so callers
    can restore them with ``restore_options``.

    Raises:
        pydantic.ValidationError: If ``indent_per_level`` is negative.
    """
    global _options
    updates: dict[str, int | bool] = {}
    if indent_per_level is not None:
        updates["indent_per_level"] = indent_per_level
    if force_eager_evaluation is not None:
        updates["force_eager_evaluation"] = force_eager_evaluation
    with _lock:
        previous = _options
        _options = TraceOptions.model_validate({**previous.model_dump(), **updates})
    if force_eager_evaluation is False and previous.force_eager_evaluation:
        logger.warning(_EAGER_DISABLED_WARNING)
    return previous


def restore_options(options: TraceOptions) -> None:
    """Reinstate a snapshot returned by ``configure``."""
    global _options
    with _lock:
        _options = options


def get_indent_per_level() -> int:
    override = _indent_override.get()
    if override is not None:
        return override
    return get_options().indent_per_level


def is_eager_evaluation_enabled() -> bool:
    override = _eager_override.get()
    if override is not None:
        return override
    return get_options().force_eager_evaluation


@contextmanager
def trace_indent(indent_per_level: int) -> Iterator[int]:
    """Use a different indentation per level for reports made inside the block."""
    TraceOptions(indent_per_level=indent_per_level)  # raises ValidationError when negative
    token = _indent_override.set(indent_per_level)
    try:
        yield indent_per_level
    finally:
        _indent_override.reset(token)


@contextmanager
def eager_evaluation(enabled: bool) -> Iterator[bool]:
    """Enable or disable eager evaluation for traced calls made inside the block."""
    if not enabled:
        logger.warning(_EAGER_DISABLED_WARNING)
    token = _eager_override.set(enabled)
    try:
        yield enabled
    finally:
        _eager_override.reset(token)
