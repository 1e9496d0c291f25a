"""Default report callbacks.

Output format, indented by ``level * indent_per_level`` spaces::

    0: (pkg.module.f 1 2 key='value')
      1: (pkg.module.g 1)
      1: pkg.module.g returned 2
    0: pkg.module.f returned 3

Values are rendered with ``repr``. Writes go to ``sys.stdout`` unless another
stream was set with ``set_report_stream``; each line is written under a lock
so lines from concurrent call chains are not garbled, though their order is
not defined.
"""

import sys
import threading
from typing import Any, TextIO

from ._advice import get_current_advised
from ._depth import get_trace_level
from ._options import get_indent_per_level

_write_lock = threading.Lock()
_stream: TextIO | None = None


def set_report_stream(stream: TextIO | None) -> TextIO | None:
    """Send default reports to ``stream`` (None means ``sys.stdout``). Returns the previous stream."""
    global _stream
    with _write_lock:
        previous, _stream = _stream, stream
    return previous


def _current_name() -> str:
    slot = get_current_advised()
    return slot.qualified_name if slot is not None else "<unknown>"


def format_call(name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    rendered = [repr(arg) for arg in args]
    rendered.extend(f"{key}={value!r}" for key, value in kwargs.items())
    return f"({' '.join([name, *rendered])})"


def _emit(line: str) -> None:
    level = get_trace_level()
    text = f"{' ' * (level * get_indent_per_level())}{level}: {line}\n"
    with _write_lock:
        stream = _stream if _stream is not None else sys.stdout
        stream.write(text)
        stream.flush()


def report_before(*args: Any, **kwargs: Any) -> None:
    """Print the currently traced function with its arguments, indented by the trace level."""
    _emit(format_call(_current_name(), args, kwargs))


def report_after(retval: Any) -> None:
    """Print the currently traced function with its return value, indented by the trace level."""
    _emit(f"{_current_name()} returned {retval!r}")
