"""Errors raised by conditionals when they are misused."""

from __future__ import annotations

from typing import Any


class ConditionalError(Exception):
    """Base class for all kondition usage errors."""


class InvalidArgumentError(ConditionalError, ValueError):
    """A required callable (predicate, action, converter, factory) was not supplied."""


class InvalidStateError(ConditionalError, RuntimeError):
    """A once-only slot (predicate or then-action) was set a second time."""


class MissingPredicateError(ConditionalError, LookupError):
    """A terminal operation needs a predicate but none was attached."""


class MissingActionError(ConditionalError, LookupError):
    """A terminal operation needs a then-action but none was attached."""


def require_callable(fn: Any, what: str) -> None:
    """Raise InvalidArgumentError unless fn is a callable."""
    if fn is None:
        raise InvalidArgumentError(f"{what} cannot be None")
    if not callable(fn):
        raise InvalidArgumentError(f"{what} must be callable, got {type(fn).__name__}")
