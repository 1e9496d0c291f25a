#!/usr/bin/env python3
"""Showcase of call_tracer features.

This example demonstrates:
  • trace / untrace of module-level functions, with nested depth in the output
  • Conditional tracing with a ``when`` predicate
  • Eager realization of generators, and what changes when it is disabled
  • Tracing instance methods and async functions
  • Custom report callbacks and untracing by namespace

Usage:
  python examples/showcase.py

Tip: Set CALL_TRACER_INDENT_PER_LEVEL=4 for wider indentation and
CALL_TRACER_LOG_LEVEL=WARNING to hide the trace/untrace notices.
"""

import asyncio

import call_tracer
from call_tracer import LoggingConfig, TraceConfig, eager_evaluation, get_trace_level


def fib(n: int) -> int:
    if n < 2:
        return n
    return fib(n - 1) + fib(n - 2)


def squares(n: int):
    for i in range(n):
        yield fib(i) ** 2


class Account:
    def __init__(self, balance: int = 0):
        self.balance = balance

    def deposit(self, amount: int) -> int:
        self.balance += amount
        return self.balance

    def __repr__(self) -> str:
        return f"Account({self.balance})"


async def lookup(key: str) -> str:
    await asyncio.sleep(0)
    return key.upper()


async def lookup_all(keys: list[str]) -> list[str]:
    return [await lookup(key) for key in keys]


def showcase_basic() -> None:
    print("\n== nested calls ==")
    call_tracer.trace(fib)
    fib(3)
    call_tracer.untrace(fib)


def showcase_when() -> None:
    print("\n== only calls with n >= 2 ==")
    call_tracer.trace(fib, when=lambda n: n >= 2)
    fib(4)
    call_tracer.untrace(fib)


def showcase_eager() -> None:
    print("\n== generators are realized inside the traced call ==")
    call_tracer.trace(squares)
    call_tracer.trace(fib, when=lambda n: n > 1)
    squares(4)

    print("\n== ... unless eager evaluation is disabled ==")
    with eager_evaluation(False):
        result = squares(4)
        print("consuming:", list(result))
    call_tracer.untrace()


def showcase_methods_and_async() -> None:
    print("\n== instance methods ==")
    call_tracer.trace(Account.deposit)
    Account(10).deposit(5)

    print("\n== async functions ==")
    call_tracer.trace(lookup)
    call_tracer.trace(lookup_all)
    asyncio.run(lookup_all(["a", "b"]))
    call_tracer.untrace_namespace(__name__)


def showcase_custom_reports() -> None:
    print("\n== custom report callbacks ==")
    config = TraceConfig(
        report_before=lambda n: print(f"{'.' * get_trace_level()}fib({n})"),
        report_after=lambda value: print(f"{'.' * get_trace_level()}= {value}"),
    )
    with call_tracer.tracing(fib, config):
        fib(3)
    print("traced after block:", call_tracer.is_traced(fib))


def main():
    LoggingConfig().apply()

    showcase_basic()
    showcase_when()
    showcase_eager()
    showcase_methods_and_async()
    showcase_custom_reports()


if __name__ == "__main__":
    main()
