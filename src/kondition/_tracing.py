"""Tracing hooks for predicate evaluations and action dispatches."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar, runtime_checkable

# Optional OpenTelemetry imports - only needed if using OpenTelemetryHook
try:
    from opentelemetry.trace import (
        Status as _Status,
    )
    from opentelemetry.trace import (
        StatusCode as _StatusCode,
    )
    from opentelemetry.trace import (
        set_span_in_context as _set_span_in_context,
    )

    _HAS_OPENTELEMETRY = True
except ImportError:
    _HAS_OPENTELEMETRY = False
    _Status = None
    _StatusCode = None
    _set_span_in_context = None

_R = TypeVar("_R")


@runtime_checkable
class TraceHook(Protocol):
    """
    Protocol for trace hooks.

    Implement this to integrate with logging, OpenTelemetry, or other
    tracing systems.

    Example:
        class MyHook:
            def on_enter(self, name, value, depth):
                print(f"{'  ' * depth}-> {name}")
                return None  # span token

            def on_exit(self, span, name, ok, duration_ms, depth):
                status = "✔" if ok else "✗"
                print(f"{'  ' * depth}<- {name} {status} ({duration_ms:.2f}ms)")

            def on_error(self, span, name, error, duration_ms, depth):
                print(f"{'  ' * depth}<- {name} ERROR: {error}")
    """

    def on_enter(self, name: str, value: Any, depth: int) -> Any:
        """
        Called before a predicate is evaluated or an action is run.

        Args:
            name: Description such as "IF is_positive" or "THEN record"
            value: The held value
            depth: Position of the node in its else-if chain (0 = first IF)

        Returns:
            Span token to pass to on_exit (can be None)
        """
        ...

    def on_exit(
        self, span: Any, name: str, ok: bool, duration_ms: float, depth: int
    ) -> None:
        """
        Called after the evaluation completes.

        Args:
            span: Token returned from on_enter
            name: Description of the step
            ok: Predicate outcome (always True for actions)
            duration_ms: Execution time in milliseconds
            depth: Chain position
        """
        ...

    def on_error(
        self, span: Any, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        """
        Called if the user callback raises.

        Args:
            span: Token returned from on_enter
            name: Description of the step
            error: The exception that was raised
            duration_ms: Execution time in milliseconds
            depth: Chain position
        """
        ...


@dataclass
class TraceConfig:
    """
    Configuration for tracing behavior.

    Attributes:
        max_depth: Deepest chain position to trace (None = unlimited)
        trace_actions: If False, only predicate evaluations are traced
    """

    max_depth: int | None = None
    trace_actions: bool = True


# Context variables for global tracing
_trace_hook: ContextVar[TraceHook | None] = ContextVar("trace_hook", default=None)
_trace_config: ContextVar[TraceConfig] = ContextVar(
    "trace_config", default=TraceConfig()
)


@contextmanager
def use_tracing(hook: TraceHook, config: TraceConfig | None = None):
    """
    Context manager to enable tracing for all conditionals evaluated in scope.

    Args:
        hook: TraceHook implementation to receive trace events
        config: Optional TraceConfig to customize tracing behavior

    Example:
        with use_tracing(LoggingHook()):
            Conditional.of(user).on(is_admin).then(grant).or_else(deny)

        # Predicates only, first two branches only
        with use_tracing(PrintHook(), TraceConfig(max_depth=1, trace_actions=False)):
            chain.or_else(fallback)
    """
    old_hook = _trace_hook.get()
    old_config = _trace_config.get()

    _trace_hook.set(hook)
    _trace_config.set(config or TraceConfig())

    try:
        yield
    finally:
        _trace_hook.set(old_hook)
        _trace_config.set(old_config)


def describe(fn: Any) -> str:
    """Get a human-readable name for a user callback."""
    if fn is None:
        return "<unset>"
    name = getattr(fn, "name", None)
    if isinstance(name, str):
        return name
    return getattr(fn, "__name__", None) or repr(fn)


# Step keywords used in trace names, longest first so prefixes match greedily
STEPS = ("RETURN IF", "ELIF", "IF", "THEN", "ELSE")


def step_name(step: str, fn: Any) -> str:
    """Build a trace name such as "ELIF is_small"."""
    return f"{step} {describe(fn)}"


def split_step(name: str) -> tuple[str, str]:
    """Split a trace name back into (step, target)."""
    for step in STEPS:
        if name.startswith(step + " "):
            return step, name[len(step) + 1 :]
    return "", name


def traced(
    name: str, value: Any, depth: int, call: Callable[[], _R], *, action: bool = False
) -> _R:
    """
    Run call() and report it to the active hook, if any.

    Predicate steps report their boolean outcome as ok; action steps always
    report ok=True. Exceptions are reported through on_error and re-raised.
    """
    hook = _trace_hook.get()
    if hook is None:
        return call()

    config = _trace_config.get()
    if config.max_depth is not None and depth > config.max_depth:
        return call()
    if action and not config.trace_actions:
        return call()

    span = hook.on_enter(name, value, depth)
    start = time.perf_counter()
    try:
        result = call()
    except Exception as e:
        duration_ms = (time.perf_counter() - start) * 1000
        hook.on_error(span, name, e, duration_ms, depth)
        raise

    duration_ms = (time.perf_counter() - start) * 1000
    ok = True if action else bool(result)
    hook.on_exit(span, name, ok, duration_ms, depth)
    return result


# =============================================================================
# Built-in Hooks
# =============================================================================


class PrintHook:
    """
    Simple trace hook that prints to stdout.

    Example:
        with use_tracing(PrintHook()):
            chain.or_else(fallback)

        # Output:
        # -> IF is_large
        # <- IF is_large ✗ (0.01ms)
        #   -> ELIF is_small
        #   <- ELIF is_small ✔ (0.01ms)
    """

    def __init__(self, indent: str = "  ", show_value: bool = False):
        self.indent = indent
        self.show_value = show_value

    def on_enter(self, name: str, value: Any, depth: int) -> float:
        prefix = self.indent * depth
        if self.show_value:
            print(f"{prefix}-> {name} | value={value!r}")
        else:
            print(f"{prefix}-> {name}")
        return time.perf_counter()

    def on_exit(
        self, span: float, name: str, ok: bool, duration_ms: float, depth: int
    ) -> None:
        prefix = self.indent * depth
        status = "✔" if ok else "✗"
        print(f"{prefix}<- {name} {status} ({duration_ms:.2f}ms)")

    def on_error(
        self, span: float, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        prefix = self.indent * depth
        print(f"{prefix}<- {name} ERROR: {error} ({duration_ms:.2f}ms)")


class LoggingHook:
    """
    Trace hook that logs to a Python logger.

    Example:
        import logging
        logging.basicConfig(level=logging.DEBUG)

        with use_tracing(LoggingHook()):
            Conditional.of(order).on(is_paid).then(ship).or_else(hold)
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.DEBUG):
        self.logger = logger or logging.getLogger("kondition")
        self.level = level

    def on_enter(self, name: str, value: Any, depth: int) -> dict:
        span = {"name": name, "depth": depth, "start": time.perf_counter()}
        self.logger.log(self.level, "[ENTER] %s (depth=%d)", name, depth)
        return span

    def on_exit(
        self, span: dict, name: str, ok: bool, duration_ms: float, depth: int
    ) -> None:
        status = "MATCH" if ok else "NO MATCH"
        self.logger.log(self.level, "[EXIT] %s -> %s (%.2fms)", name, status, duration_ms)

    def on_error(
        self, span: dict, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        self.logger.error("[ERROR] %s -> %s (%.2fms)", name, error, duration_ms)


class OpenTelemetryHook:
    """
    OpenTelemetry trace hook.

    Each predicate evaluation and action becomes a span; spans opened while
    another is active become its children. Predicate spans record their
    outcome as `kondition.matched`.

    Requires: pip install opentelemetry-api
    """

    def __init__(self, tracer, *, max_span_depth: int | None = None):
        if not _HAS_OPENTELEMETRY:
            raise ImportError(
                "OpenTelemetry is not installed. "
                "Install it with: pip install opentelemetry-api"
            )
        self.tracer = tracer
        self.max_span_depth = max_span_depth
        self._span_stack: list[Any] = []

    def on_enter(self, name: str, value: Any, depth: int) -> Any:
        # Guaranteed non-None because __init__ checks _HAS_OPENTELEMETRY
        assert _set_span_in_context is not None

        if self.max_span_depth is not None and depth > self.max_span_depth:
            return None

        parent = self._span_stack[-1] if self._span_stack else None
        parent_ctx = _set_span_in_context(parent) if parent else None

        span = self.tracer.start_span(name, context=parent_ctx)
        step, target = split_step(name)
        span.set_attribute("kondition.step", step)
        span.set_attribute("kondition.target", target)
        span.set_attribute("kondition.depth", depth)

        self._span_stack.append(span)
        return span

    def on_exit(
        self, span: Any, name: str, ok: bool, duration_ms: float, depth: int
    ) -> None:
        if span is None:
            return

        span.set_attribute("kondition.matched", ok)
        span.set_attribute("kondition.duration_ms", duration_ms)
        span.end()
        self._span_stack.pop()

    def on_error(
        self, span: Any, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        if span is None:
            return

        # Guaranteed non-None because __init__ checks _HAS_OPENTELEMETRY
        assert _Status is not None
        assert _StatusCode is not None

        span.set_attribute("kondition.duration_ms", duration_ms)
        span.record_exception(error)
        span.set_status(_Status(_StatusCode.ERROR, str(error)))
        span.end()
        self._span_stack.pop()
