"""Tests for trace advice construction, independent of any slot."""

import pytest
from pydantic import ValidationError

from call_tracer.tracing import TraceConfig, build_trace_advice, eager_evaluation, get_trace_level
from tests.support.helpers import ReportRecorder


def _levelled_add(a, b):
    return (a + b, get_trace_level())


class TestTraceConfig:
    def test_defaults_are_unset(self):
        config = TraceConfig()
        assert config.when is None
        assert config.report_before is None
        assert config.report_after is None

    def test_frozen(self):
        config = TraceConfig()
        with pytest.raises(ValidationError):
            config.when = bool  # type: ignore[misc]

    def test_rejects_non_callable(self):
        with pytest.raises(ValidationError):
            TraceConfig(when=42)  # type: ignore[arg-type]


class TestSyncAdvice:
    def test_reports_around_call_and_returns_result(self):
        recorder = ReportRecorder()
        advice = build_trace_advice(TraceConfig(**recorder.options))

        result = advice(_levelled_add, 1, 2)

        assert result == (3, 1)
        assert recorder.events == [
            ("before", 0, None, (1, 2)),
            ("after", 0, None, (3, 1)),
        ]
        assert get_trace_level() == 0

    def test_keyword_arguments_reach_callbacks_and_function(self):
        recorder = ReportRecorder()
        advice = build_trace_advice(TraceConfig(**recorder.options))

        assert advice(_levelled_add, 1, b=5) == (6, 1)
        assert recorder.events[0] == ("before", 0, None, ((1,), {"b": 5}))

    def test_predicate_false_skips_reporting_and_depth(self):
        recorder = ReportRecorder()
        advice = build_trace_advice(TraceConfig(when=lambda a, b: a > 10, **recorder.options))

        assert advice(_levelled_add, 1, 2) == (3, 0)
        assert recorder.events == []

    def test_predicate_true_reports(self):
        recorder = ReportRecorder()
        advice = build_trace_advice(TraceConfig(when=lambda a, b: a > 10, **recorder.options))

        assert advice(_levelled_add, 11, 2) == (13, 1)
        assert len(recorder.events) == 2

    def test_error_propagates_without_after_report(self):
        recorder = ReportRecorder()
        advice = build_trace_advice(TraceConfig(**recorder.options))
        error = RuntimeError("nope")

        def failing():
            assert get_trace_level() == 1
            raise error

        with pytest.raises(RuntimeError) as exc_info:
            advice(failing)

        assert exc_info.value is error
        assert recorder.kinds == [("before", None)]
        assert get_trace_level() == 0

    def test_lazy_result_is_realized_before_after_report(self):
        produced: list[int] = []
        recorder = ReportRecorder()

        def produce():
            for i in range(3):
                produced.append(get_trace_level())
                yield i

        def after(retval):
            recorder.after(retval)
            assert produced == [1, 1, 1]

        advice = build_trace_advice(TraceConfig(report_before=recorder.before, report_after=after))
        result = advice(produce)

        assert result == [0, 1, 2]
        assert recorder.events[-1] == ("after", 0, None, [0, 1, 2])

    def test_lazy_result_left_alone_when_disabled(self):
        recorder = ReportRecorder()
        advice = build_trace_advice(TraceConfig(**recorder.options))

        with eager_evaluation(False):
            result = advice(lambda: iter([1, 2]))

        assert recorder.events[-1][3] is result
        assert list(result) == [1, 2]

    def test_each_build_returns_a_new_advice(self):
        config = TraceConfig()
        assert build_trace_advice(config) is not build_trace_advice(config)


class TestAsyncAdvice:
    async def test_awaits_function_inside_nested_level(self):
        recorder = ReportRecorder()
        advice = build_trace_advice(TraceConfig(**recorder.options), is_coroutine=True)

        async def double(x):
            return (x * 2, get_trace_level())

        assert await advice(double, 4) == (8, 1)
        assert recorder.levels == [0, 0]
        assert get_trace_level() == 0

    async def test_predicate_false_awaits_directly(self):
        recorder = ReportRecorder()
        advice = build_trace_advice(TraceConfig(when=lambda x: False, **recorder.options), is_coroutine=True)

        async def double(x):
            return (x * 2, get_trace_level())

        assert await advice(double, 4) == (8, 0)
        assert recorder.events == []

    async def test_error_restores_level(self):
        recorder = ReportRecorder()
        advice = build_trace_advice(TraceConfig(**recorder.options), is_coroutine=True)

        async def failing():
            raise ValueError("bad")

        with pytest.raises(ValueError, match="bad"):
            await advice(failing)

        assert recorder.kinds == [("before", None)]
        assert get_trace_level() == 0


class TestDefaultReports:
    def test_default_callbacks_print_outside_advised_slot(self, capsys: pytest.CaptureFixture[str]) -> None:
        advice = build_trace_advice()

        advice(lambda a, b: a + b, 1, 2)

        assert capsys.readouterr().out == "0: (<unknown> 1 2)\n0: <unknown> returned 3\n"
