"""call-tracer - report the calls of selected functions without editing their source.

@public

Tracing a function replaces it, in the module or class attribute that holds
it, with a wrapper that prints each call's arguments and return value,
indented by nesting depth among other traced calls. Untracing restores the
original.

Quick Start:
    >>> import call_tracer
    >>> import mypackage.math_utils as mu
    >>>
    >>> call_tracer.trace(mu.fib, when=lambda n: n > 2)
    >>> mu.fib(4)
    >>> call_tracer.untrace_namespace("mypackage.math_utils")

Environment Variables:
    - CALL_TRACER_INDENT_PER_LEVEL: spaces per nesting level (default 2)
    - CALL_TRACER_FORCE_EAGER_EVALUATION: realize returned iterators (default true)
    - CALL_TRACER_LOG_LEVEL: level of the library's own log messages
"""

from .exceptions import AdviceError, CallTracerError, InvalidTargetError
from .logging import LoggingConfig, get_tracer_logger, setup_logging
from .settings import Settings, settings
from .tracing import (
    FunctionSlot,
    TraceConfig,
    TraceRegistry,
    configure,
    eager_evaluation,
    get_default_registry,
    get_trace_level,
    is_traced,
    set_report_stream,
    trace,
    trace_indent,
    traced,
    tracing,
    untrace,
    untrace_all,
    untrace_namespace,
)

__version__ = "0.1.0"

__all__ = [
    "AdviceError",
    "CallTracerError",
    "FunctionSlot",
    "InvalidTargetError",
    "LoggingConfig",
    "Settings",
    "TraceConfig",
    "TraceRegistry",
    "configure",
    "eager_evaluation",
    "get_default_registry",
    "get_trace_level",
    "get_tracer_logger",
    "is_traced",
    "set_report_stream",
    "settings",
    "setup_logging",
    "trace",
    "trace_indent",
    "traced",
    "tracing",
    "untrace",
    "untrace_all",
    "untrace_namespace",
]
