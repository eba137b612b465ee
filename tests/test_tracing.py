"""Tests for tracing: use_tracing, TraceConfig and the built-in hooks."""

from __future__ import annotations

import io
import logging
from unittest.mock import MagicMock

import pytest

from switchpy import (
    LoggingHook,
    OpenTelemetryHook,
    PrintHook,
    TraceConfig,
    TraceHook,
    eq,
    gt,
    lt,
    then,
    use_tracing,
    when,
)


class RecordingHook:
    """Collects trace events as tuples."""

    def __init__(self):
        self.events: list[tuple] = []

    def on_enter(self, name, subject, depth):
        self.events.append(("enter", name, subject, depth))
        return name

    def on_exit(self, span, name, matched, duration_ms, depth):
        assert span == name
        assert duration_ms >= 0
        self.events.append(("exit", name, matched, depth))

    def on_error(self, span, name, error, duration_ms, depth):
        self.events.append(("error", name, type(error).__name__, depth))


def classify(n):
    return (
        when(n)
        .is_(eq(1), then("one"))
        .is_(eq(2), then("two"))
        .is_(eq(3), then("three"))
        .otherwise(then("other"))
    )


def nested(n):
    return (
        when(n)
        .is_(gt(0), lambda: when(n).is_(lt(10), then("small")).otherwise(then("big")))
        .otherwise(then("non-positive"))
    )


class TestUseTracing:
    def test_records_evaluated_steps_only(self):
        hook = RecordingHook()
        with use_tracing(hook):
            assert classify(2) == "two"

        assert hook.events == [
            ("enter", "is_(eq(1))", 2, 0),
            ("exit", "is_(eq(1))", False, 0),
            ("enter", "is_(eq(2))", 2, 0),
            ("exit", "is_(eq(2))", True, 0),
        ]

    def test_records_fallback(self):
        hook = RecordingHook()
        with use_tracing(hook):
            assert classify(9) == "other"

        assert hook.events[-2:] == [
            ("enter", "otherwise", 9, 0),
            ("exit", "otherwise", True, 0),
        ]
        assert len(hook.events) == 8

    def test_step_names(self):
        hook = RecordingHook()
        with use_tracing(hook):
            (
                when(5)
                .is_value("5", "string")
                .is_type(lambda v: False, lambda v: "never")
                .is_any([eq(1), eq(2)], then("small"))
                .is_all([gt(0), lt(10)], then("digit"))
                .otherwise(then("other"))
            )

        names = [e[1] for e in hook.events if e[0] == "enter"]
        assert names == [
            "is_value('5')",
            "is_type(<lambda>)",
            "is_any([eq(1), eq(2)])",
            "is_all([gt(0), lt(10)])",
        ]

    def test_nested_chains_are_one_level_deeper(self):
        hook = RecordingHook()
        with use_tracing(hook):
            assert nested(5) == "small"

        assert hook.events == [
            ("enter", "is_(gt(0))", 5, 0),
            ("enter", "is_(lt(10))", 5, 1),
            ("exit", "is_(lt(10))", True, 1),
            ("exit", "is_(gt(0))", True, 0),
        ]

    def test_error_reported_then_reraised(self):
        hook = RecordingHook()

        def boom(v):
            raise ValueError("bad predicate")

        with use_tracing(hook), pytest.raises(ValueError, match="bad predicate"):
            when(1).is_(boom, then("x")).otherwise(then("y"))

        assert hook.events == [
            ("enter", "is_(boom)", 1, 0),
            ("error", "is_(boom)", "ValueError", 0),
        ]

    def test_hook_removed_after_scope(self):
        hook = RecordingHook()
        with use_tracing(hook):
            pass
        classify(1)
        assert hook.events == []

    def test_inner_scope_restores_outer_hook(self):
        outer, inner = RecordingHook(), RecordingHook()
        with use_tracing(outer):
            with use_tracing(inner):
                classify(1)
            classify(1)

        assert len(inner.events) == 2
        assert len(outer.events) == 2

    def test_untraced_chain_still_works(self):
        assert classify(3) == "three"


class TestTraceConfig:
    def test_not_nested(self):
        hook = RecordingHook()
        with use_tracing(hook, TraceConfig(nested=False)):
            assert nested(50) == "big"

        assert [e[3] for e in hook.events] == [0, 0]

    def test_max_depth(self):
        hook = RecordingHook()
        with use_tracing(hook, TraceConfig(max_depth=0)):
            nested(5)

        assert all(e[3] == 0 for e in hook.events)
        assert len(hook.events) == 2

    def test_exclude_fallback(self):
        hook = RecordingHook()
        with use_tracing(hook, TraceConfig(include_fallback=False)):
            classify(9)

        assert "otherwise" not in [e[1] for e in hook.events]
        assert len(hook.events) == 6


class TestPrintHook:
    def test_output(self, capsys):
        with use_tracing(PrintHook()):
            when(2).is_value(1, "one").is_value(2, "two").otherwise(then("other"))

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "is_value(1)"
        assert lines[1].startswith("  miss (")
        assert lines[2] == "is_value(2)"
        assert lines[3].startswith("  match (")
        assert len(lines) == 4

    def test_fallback_output(self, capsys):
        with use_tracing(PrintHook()):
            when(2).is_value(1, "one").otherwise(then("other"))

        lines = capsys.readouterr().out.splitlines()
        assert lines[2] == "otherwise"
        assert lines[3].startswith("  fallback (")

    def test_show_subject_and_indent(self, capsys):
        with use_tracing(PrintHook(show_subject=True)):
            nested(5)

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "when(5) is_(gt(0))"
        assert lines[1] == "  when(5) is_(lt(10))"
        assert lines[2].startswith("    match (")
        assert lines[3].startswith("  match (")

    def test_error_output(self, capsys):
        def boom(v):
            raise RuntimeError("kaput")

        with use_tracing(PrintHook()), pytest.raises(RuntimeError):
            when(1).is_(boom, then("x"))

        assert "  raised RuntimeError: kaput" in capsys.readouterr().out.splitlines()

    def test_writes_to_given_stream(self, capsys):
        stream = io.StringIO()
        with use_tracing(PrintHook(file=stream)):
            classify(1)

        assert stream.getvalue().splitlines()[0] == "is_(eq(1))"
        assert capsys.readouterr().out == ""


class TestLoggingHook:
    def test_logs_steps(self, caplog):
        caplog.set_level(logging.DEBUG, logger="switchpy")
        with use_tracing(LoggingHook()):
            when(2).is_value(1, "one").is_value(2, "two").otherwise(then("other"))

        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "[ENTER] is_value(1) (depth=0)"
        assert messages[1].startswith("[EXIT] is_value(1) -> MISS (")
        assert messages[3].startswith("[EXIT] is_value(2) -> MATCH (")
        assert all(r.name == "switchpy" for r in caplog.records)

    def test_logs_errors(self, caplog):
        caplog.set_level(logging.DEBUG, logger="switchpy")

        def boom(v):
            raise KeyError("k")

        with use_tracing(LoggingHook()), pytest.raises(KeyError):
            when(1).is_(boom, then("x"))

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert errors[0].getMessage().startswith("[ERROR] is_(boom) -> ")

    def test_custom_logger_and_level(self):
        logger = MagicMock()
        with use_tracing(LoggingHook(logger, level=logging.INFO)):
            when(1).otherwise(then("x"))

        assert logger.log.call_count == 2
        assert all(c.args[0] == logging.INFO for c in logger.log.call_args_list)


class TestTraceHookProtocol:
    def test_builtin_hooks_satisfy_protocol(self):
        assert isinstance(PrintHook(), TraceHook)
        assert isinstance(LoggingHook(), TraceHook)
        assert isinstance(RecordingHook(), TraceHook)


class TestOpenTelemetryHook:
    @pytest.fixture
    def tracer(self):
        pytest.importorskip("opentelemetry")
        tracer = MagicMock()
        tracer.start_span.side_effect = lambda *args, **kwargs: MagicMock()
        return tracer

    def test_one_span_per_step(self, tracer):
        with use_tracing(OpenTelemetryHook(tracer)):
            when(2).is_value(1, "one").is_value(2, "two").otherwise(then("other"))

        names = [c.args[0] for c in tracer.start_span.call_args_list]
        assert names == ["is_value(1)", "is_value(2)"]

    def test_span_attributes_and_end(self, tracer):
        span = MagicMock()
        tracer.start_span.side_effect = None
        tracer.start_span.return_value = span

        with use_tracing(OpenTelemetryHook(tracer, link_sibling_spans=False)):
            when(3).otherwise(then("fallback"))

        assert tracer.start_span.call_args.kwargs["context"] is None
        assert tracer.start_span.call_args.kwargs["links"] is None
        attributes = {c.args[0]: c.args[1] for c in span.set_attribute.call_args_list}
        assert attributes["switchpy.step"] == "otherwise"
        assert attributes["switchpy.kind"] == "fallback"
        assert attributes["switchpy.depth"] == 0
        assert attributes["switchpy.subject_type"] == "int"
        assert attributes["switchpy.matched"] is True
        span.end.assert_called_once()

    def test_nested_spans_have_parent_context(self, tracer):
        with use_tracing(OpenTelemetryHook(tracer, link_sibling_spans=False)):
            nested(5)

        outer_call, inner_call = tracer.start_span.call_args_list
        assert outer_call.kwargs["context"] is None
        assert inner_call.kwargs["context"] is not None

    def test_sibling_spans_are_linked(self, tracer):
        with use_tracing(OpenTelemetryHook(tracer)):
            classify(2)

        first, second = tracer.start_span.call_args_list
        assert first.kwargs["links"] is None
        assert len(second.kwargs["links"]) == 1

    def test_separate_chains_are_not_linked(self, tracer):
        with use_tracing(OpenTelemetryHook(tracer)):
            classify(2)
            classify(2)

        calls = tracer.start_span.call_args_list
        assert len(calls) == 4
        assert calls[2].kwargs["links"] is None
        assert len(calls[3].kwargs["links"]) == 1

    def test_nested_chains_in_separate_producers_are_not_linked(self, tracer):
        with use_tracing(OpenTelemetryHook(tracer)):
            (
                when(5)
                .is_(lambda v: when(v).is_(eq(0), then(True)).otherwise(then(False)), then("a"))
                .is_(lambda v: when(v).is_(eq(5), then(True)).otherwise(then(False)), then("b"))
                .otherwise(then("c"))
            )

        names = [c.args[0] for c in tracer.start_span.call_args_list]
        links = [c.kwargs["links"] for c in tracer.start_span.call_args_list]
        assert names == [
            "is_(<lambda>)",
            "is_(eq(0))",
            "otherwise",
            "is_(<lambda>)",
            "is_(eq(5))",
        ]
        assert links[3] is not None
        assert links[2] is not None
        assert links[4] is None

    def test_max_span_depth(self, tracer):
        with use_tracing(OpenTelemetryHook(tracer, max_span_depth=0)):
            nested(5)

        assert tracer.start_span.call_count == 1

    def test_error_recorded(self, tracer):
        from opentelemetry.trace import StatusCode

        spans = []

        def start_span(*args, **kwargs):
            span = MagicMock()
            spans.append(span)
            return span

        tracer.start_span.side_effect = start_span

        def boom(v):
            raise ValueError("bad")

        with use_tracing(OpenTelemetryHook(tracer)), pytest.raises(ValueError):
            when(1).is_(boom, then("x"))

        (span,) = spans
        span.record_exception.assert_called_once()
        status = span.set_status.call_args.args[0]
        assert status.status_code == StatusCode.ERROR
        span.end.assert_called_once()
