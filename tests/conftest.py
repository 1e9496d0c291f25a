"""Common test fixtures for call-tracer."""

import sys
import textwrap
import types
from collections.abc import Callable, Iterator

import pytest

from call_tracer.tracing import (
    TraceRegistry,
    get_default_registry,
    get_options,
    restore_options,
    set_report_stream,
)

MakeModule = Callable[[str, str], types.ModuleType]


@pytest.fixture(autouse=True)
def isolate_tracing_state() -> Iterator[None]:
    """Untrace the default registry and restore the knobs and report stream after each test."""
    options = get_options()
    stream = set_report_stream(None)
    try:
        yield
    finally:
        get_default_registry().untrace_all()
        restore_options(options)
        set_report_stream(stream)


@pytest.fixture
def registry() -> Iterator[TraceRegistry]:
    """An isolated registry that is emptied after the test."""
    reg = TraceRegistry()
    yield reg
    reg.untrace_all()


@pytest.fixture
def make_module() -> Iterator[MakeModule]:
    """Factory building a throwaway module from source and registering it in sys.modules.

    Functions defined this way have ``__module__`` set to the module name and a
    plain ``__qualname__``, so they can be traced by reference.
    """
    created: list[str] = []

    def factory(name: str, source: str) -> types.ModuleType:
        module = types.ModuleType(name)
        sys.modules[name] = module
        created.append(name)
        exec(compile(textwrap.dedent(source), f"<{name}>", "exec"), module.__dict__)
        return module

    yield factory
    for name in created:
        sys.modules.pop(name, None)
