"""Tests for tracing hooks and explain()."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from kondition import (
    Conditional,
    LoggingHook,
    PrintHook,
    TraceConfig,
    TraceHook,
    explain,
    rule,
    use_tracing,
)


@rule
def is_large(x):
    return x > 10


@rule
def is_small(x):
    return x < 1


def shout(x):
    pass


def whisper(x):
    pass


def fallback(x):
    pass


class RecordingHook:
    def __init__(self):
        self.events = []

    def on_enter(self, name, value, depth):
        self.events.append(("enter", name, depth))
        return name

    def on_exit(self, span, name, ok, duration_ms, depth):
        self.events.append(("exit", name, ok))

    def on_error(self, span, name, error, duration_ms, depth):
        self.events.append(("error", name, type(error).__name__))


def run_chain(value):
    (
        Conditional.of(value)
        .on(is_large)
        .then(shout)
        .or_else_if(is_small)
        .then(whisper)
        .or_else(fallback)
    )


# =============================================================================
# use_tracing
# =============================================================================


class TestUseTracing:
    def test_recording_hook_satisfies_protocol(self):
        assert isinstance(RecordingHook(), TraceHook)

    def test_no_events_outside_scope(self):
        hook = RecordingHook()
        with use_tracing(hook):
            pass
        run_chain(5)
        assert hook.events == []

    def test_chain_events(self):
        hook = RecordingHook()
        with use_tracing(hook):
            run_chain(0)

        assert hook.events == [
            ("enter", "IF is_large", 0),
            ("exit", "IF is_large", False),
            ("enter", "ELIF is_small", 1),
            ("exit", "ELIF is_small", True),
            ("enter", "THEN whisper", 1),
            ("exit", "THEN whisper", True),
        ]

    def test_else_event(self):
        hook = RecordingHook()
        with use_tracing(hook):
            run_chain(5)

        assert hook.events[-2:] == [
            ("enter", "ELSE fallback", 1),
            ("exit", "ELSE fallback", True),
        ]

    def test_predicates_traced_once(self):
        hook = RecordingHook()
        with use_tracing(hook):
            node = Conditional.of(3).on(is_large)
            node.get()
            node.get()
        assert [e for e in hook.events if e[0] == "enter"] == [("enter", "IF is_large", 0)]

    def test_trace_actions_disabled(self):
        hook = RecordingHook()
        with use_tracing(hook, TraceConfig(trace_actions=False)):
            run_chain(0)
        assert all(not name.startswith(("THEN", "ELSE")) for _, name, _ in hook.events)

    def test_max_depth(self):
        hook = RecordingHook()
        with use_tracing(hook, TraceConfig(max_depth=0)):
            run_chain(0)
        assert {e[1] for e in hook.events} == {"IF is_large"}

    def test_error_event_and_propagation(self):
        def broken(x):
            raise KeyError("boom")

        hook = RecordingHook()
        with use_tracing(hook), pytest.raises(KeyError):
            Conditional.of(1).on(broken).get()
        assert hook.events[-1] == ("error", "IF broken", "KeyError")

    def test_return_flow_traced(self):
        hook = RecordingHook()
        with use_tracing(hook):
            Conditional.of(20).on(is_large).then_return(str).or_else("")
        assert hook.events == [
            ("enter", "RETURN IF is_large", 0),
            ("exit", "RETURN IF is_large", True),
        ]

    def test_scopes_restore_previous_hook(self):
        outer, inner = RecordingHook(), RecordingHook()
        with use_tracing(outer):
            with use_tracing(inner):
                Conditional.of(1).on(is_large).get()
            Conditional.of(1).on(is_small).get()
        assert [e[1] for e in inner.events] == ["IF is_large", "IF is_large"]
        assert [e[1] for e in outer.events] == ["IF is_small", "IF is_small"]

    def test_mock_hook(self):
        hook = MagicMock()
        with use_tracing(hook):
            Conditional.of(20).on(is_large).get()
        hook.on_enter.assert_called_once_with("IF is_large", 20, 0)
        hook.on_exit.assert_called_once()
        assert hook.on_exit.call_args.args[2] is True


# =============================================================================
# Built-in hooks
# =============================================================================


class TestPrintHook:
    def test_output(self, capsys):
        with use_tracing(PrintHook()):
            run_chain(0)
        out = capsys.readouterr().out
        assert "-> IF is_large" in out
        assert "<- IF is_large ✗" in out
        assert "  -> ELIF is_small" in out
        assert "<- ELIF is_small ✔" in out

    def test_show_value(self, capsys):
        with use_tracing(PrintHook(show_value=True)):
            Conditional.of(7).on(is_large).get()
        assert "value=7" in capsys.readouterr().out


class TestLoggingHook:
    def test_default_logger(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="kondition"):
            with use_tracing(LoggingHook()):
                run_chain(0)
        messages = [r.getMessage() for r in caplog.records]
        assert "[ENTER] IF is_large (depth=0)" in messages
        assert any(m.startswith("[EXIT] ELIF is_small -> MATCH") for m in messages)
        assert all(r.name == "kondition" for r in caplog.records)

    def test_error_logged(self, caplog):
        def broken(x):
            raise ValueError("bad value")

        logger = logging.getLogger("kondition.test")
        with caplog.at_level(logging.DEBUG, logger="kondition.test"):
            with use_tracing(LoggingHook(logger)), pytest.raises(ValueError):
                Conditional.of(1).on(broken).get()
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "bad value" in errors[0].getMessage()


class TestOpenTelemetryHook:
    def test_spans(self):
        pytest.importorskip("opentelemetry")
        from kondition import OpenTelemetryHook

        tracer = MagicMock()
        hook = OpenTelemetryHook(tracer)
        with use_tracing(hook):
            Conditional.of(20).on(is_large).then(shout)

        names = [call.args[0] for call in tracer.start_span.call_args_list]
        assert names == ["IF is_large", "THEN shout"]
        span = tracer.start_span.return_value
        span.set_attribute.assert_any_call("kondition.step", "IF")
        span.set_attribute.assert_any_call("kondition.target", "is_large")
        span.set_attribute.assert_any_call("kondition.matched", True)
        assert span.end.call_count == 2

    def test_max_span_depth(self):
        pytest.importorskip("opentelemetry")
        from kondition import OpenTelemetryHook

        tracer = MagicMock()
        with use_tracing(OpenTelemetryHook(tracer, max_span_depth=0)):
            run_chain(0)
        names = [call.args[0] for call in tracer.start_span.call_args_list]
        assert names == ["IF is_large"]


# =============================================================================
# explain
# =============================================================================


class TestExplain:
    def test_single_node(self):
        node = Conditional.of(3).on(is_large)
        assert explain(node) == "IF is_large"

    def test_chain(self):
        chain = (
            Conditional.of(0)
            .on(is_large)
            .then(shout)
            .or_else_if(is_small)
            .then(whisper)
        )
        assert explain(chain) == "IF is_large THEN shout\nELSE IF is_small THEN whisper"

    def test_verbose_shows_value_and_results(self):
        chain = (
            Conditional.of(0)
            .on(is_large)
            .then(shout)
            .or_else_if(is_small)
        )
        assert explain(chain, verbose=True) == (
            "VALUE 0\nIF is_large [no match] THEN shout\nELSE IF is_small"
        )

    def test_explain_does_not_evaluate(self):
        calls = 0

        def counting(x):
            nonlocal calls
            calls += 1
            return True

        explain(Conditional.of(1).on(counting).or_else_if(counting), verbose=True)
        assert calls == 0

    def test_return_flow(self):
        returning = Conditional.of(5).on(is_large).then_return(str)
        assert explain(returning) == "IF is_large RETURN str"
        assert explain(returning, verbose=True) == "VALUE 5\nIF is_large RETURN str"

    def test_unset_predicate(self):
        assert explain(Conditional.of(1)) == "IF <unset>"
