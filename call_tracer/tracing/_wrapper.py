"""Construction of trace advices.

A trace advice is called as ``advice(f, *args, **kwargs)`` by the advised slot,
where ``f`` is the next callable in the chain. It reports the call, runs ``f``
one trace level deeper, realizes lazy results and reports the return value.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict

from ._depth import nested_trace_level
from ._eager import maybe_force_eager_evaluation
from ._reporting import report_after, report_before


class TraceConfig(BaseModel):
    """Per-trace configuration.

    Attributes:
        when: Predicate called with the traced call's arguments. When it
              returns a falsy value the call runs untraced: nothing is
              reported and the trace level is not changed. None traces every
              call.
        report_before: Called with the traced call's arguments before the
                       call. Defaults to printing the function name, trace
                       level and arguments.
        report_after: Called with the return value after a successful call.
                      Not called when the traced function raises. Defaults to
                      printing the function name, trace level and value.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    when: Callable[..., Any] | None = None
    report_before: Callable[..., Any] | None = None
    report_after: Callable[[Any], Any] | None = None


def build_trace_advice(config: TraceConfig | None = None, *, is_coroutine: bool = False) -> Callable[..., Any]:
    """Build the advice implementing the trace protocol for ``config``.

    Args:
        config: Predicate and report callbacks; unset fields use the defaults.
        is_coroutine: Build an ``async`` advice for coroutine functions.

    Returns:
        A fresh advice object, never shared between slots.
    """
    config = config or TraceConfig()
    when = config.when
    before = config.report_before or report_before
    after = config.report_after or report_after

    if is_coroutine:

        async def traced_acall(f: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
            before(*args, **kwargs)
            with nested_trace_level():
                retval = maybe_force_eager_evaluation(await f(*args, **kwargs))
            after(retval)
            return retval

        if when is None:
            return traced_acall

        async def conditional_acall(f: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
            if when(*args, **kwargs):
                return await traced_acall(f, *args, **kwargs)
            return await f(*args, **kwargs)

        return conditional_acall

    def traced_call(f: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        before(*args, **kwargs)
        with nested_trace_level():
            retval = maybe_force_eager_evaluation(f(*args, **kwargs))
        after(retval)
        return retval

    if when is None:
        return traced_call

    def conditional_call(f: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        if when(*args, **kwargs):
            return traced_call(f, *args, **kwargs)
        return f(*args, **kwargs)

    return conditional_call
