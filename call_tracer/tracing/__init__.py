"""Function call tracing.

@public

Install a wrapper around a function held in a module, class or object
attribute. Each call is reported before it runs, with its arguments, and after
it returns, with its value, indented by how many traced calls are active above
it on the same call chain.

Example:
    >>> from call_tracer.tracing import trace, untrace
    >>> import mypackage.parser as parser
    >>> slot = trace(parser.parse_line)
    >>> parser.parse_line("a=1")
    0: (mypackage.parser.parse_line 'a=1')
      1: (mypackage.parser.parse_value '1')
      1: mypackage.parser.parse_value returned 1
    0: mypackage.parser.parse_line returned ('a', 1)
    >>> untrace()
"""

from ._advice import AdvisedFunction, FunctionSlot, SlotAdvisor, get_current_advised
from ._depth import get_trace_level, nested_trace_level
from ._eager import is_lazy_sequence, maybe_force_eager_evaluation
from ._options import (
    TraceOptions,
    configure,
    eager_evaluation,
    get_indent_per_level,
    get_options,
    is_eager_evaluation_enabled,
    restore_options,
    trace_indent,
)
from ._reporting import report_after, report_before, set_report_stream
from ._wrapper import TraceConfig, build_trace_advice
from .registry import (
    RegistryEntry,
    TraceRegistry,
    get_default_registry,
    is_traced,
    trace,
    traced,
    tracing,
    untrace,
    untrace_all,
    untrace_namespace,
)

__all__ = [
    "AdvisedFunction",
    "FunctionSlot",
    "RegistryEntry",
    "SlotAdvisor",
    "TraceConfig",
    "TraceOptions",
    "TraceRegistry",
    "build_trace_advice",
    "configure",
    "eager_evaluation",
    "get_current_advised",
    "get_default_registry",
    "get_indent_per_level",
    "get_options",
    "get_trace_level",
    "is_eager_evaluation_enabled",
    "is_lazy_sequence",
    "is_traced",
    "maybe_force_eager_evaluation",
    "nested_trace_level",
    "report_after",
    "report_before",
    "restore_options",
    "set_report_stream",
    "trace",
    "trace_indent",
    "traced",
    "tracing",
    "untrace",
    "untrace_all",
    "untrace_namespace",
]
