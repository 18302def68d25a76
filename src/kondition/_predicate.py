"""Named, composable predicates and the decorators that build them."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic

from kondition._types import T


class Predicate(Generic[T]):
    """
    A named predicate over a single value.

    Predicates are plain callables, so they can be passed anywhere a
    conditional expects a predicate, and they double as matchers for the
    exception assertions. They compose with operators:
        &  = both hold (short-circuits on the first failure)
        |  = either holds (short-circuits on the first success)
        ~  = negation

    Example:
        is_positive: Predicate[int] = Predicate(lambda x: x > 0, "is_positive")
        is_positive(5)  # True

        Conditional.of(5).on(is_positive & ~is_even).then(print)
    """

    def __init__(self, fn: Callable[[T], Any], name: str | None = None):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "predicate")

    def __call__(self, value: T) -> bool:
        return bool(self.fn(value))

    def __and__(self, other: Callable[[T], Any]) -> Predicate[T]:
        """a & b = b is only tested if a holds."""
        right = _as_predicate(other)
        return Predicate(lambda v: self(v) and right(v), f"({self.name} & {right.name})")

    def __or__(self, other: Callable[[T], Any]) -> Predicate[T]:
        """a | b = b is only tested if a fails."""
        right = _as_predicate(other)
        return Predicate(lambda v: self(v) or right(v), f"({self.name} | {right.name})")

    def __invert__(self) -> Predicate[T]:
        """~a = inverted result."""
        return Predicate(lambda v: not self(v), f"~{self.name}")

    def __repr__(self) -> str:
        return f"Predicate({self.name})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Predicate):
            return NotImplemented
        return self.fn == other.fn and self.name == other.name

    def __hash__(self) -> int:
        return hash((id(self.fn), self.name))


def _as_predicate(fn: Callable[[T], Any]) -> Predicate[T]:
    if isinstance(fn, Predicate):
        return fn
    return Predicate(fn)


class PredicateFactory(Generic[T]):
    """
    A factory that creates Predicates when called with arguments.

    Used for parameterized predicates like `longer_than(3)`.
    """

    def __init__(self, fn: Callable[..., Any], name: str):
        self._fn = fn
        self._name = name
        self.__name__ = name

    def __call__(self, *args: Any, **kwargs: Any) -> Predicate[T]:
        name = f"{self._name}({', '.join(map(repr, args))})"
        return Predicate(lambda value: self._fn(value, *args, **kwargs), name)

    def __repr__(self) -> str:
        return f"PredicateFactory({self._name})"


def rule(fn: Callable[[T], Any]) -> Predicate[T]:
    """
    Decorator to create a simple named predicate (single value argument).

    Example:
        @rule
        def is_admin(user: User) -> bool:
            return user.is_admin

        Conditional.of(user).on(is_admin).then(grant).or_else(deny)

    For parameterized predicates, use @rule_args instead.
    """
    return Predicate(fn, fn.__name__)


def rule_args(fn: Callable[..., Any]) -> PredicateFactory[Any]:
    """
    Decorator to create a parameterized predicate factory.

    Example:
        @rule_args
        def longer_than(text: str, size: int) -> bool:
            return len(text) > size

        Conditional.of("abcd").on(longer_than(3)).get()  # True

    For simple predicates (single argument), use @rule instead.
    """
    return PredicateFactory(fn, fn.__name__)


# =============================================================================
# Built-in predicates
# =============================================================================

is_present: Predicate[Any] = Predicate(lambda value: value is not None, "is_present")
is_none: Predicate[Any] = Predicate(lambda value: value is None, "is_none")
always: Predicate[Any] = Predicate(lambda value: True, "always")
never: Predicate[Any] = Predicate(lambda value: False, "never")


@rule_args
def equal_to(value: Any, expected: Any) -> bool:
    return value == expected


@rule_args
def same_instance(value: Any, expected: Any) -> bool:
    return value is expected


def instance_of(*types: type) -> Predicate[Any]:
    """Holds when the value is an instance of any of the given types."""
    name = f"instance_of({', '.join(t.__name__ for t in types)})"
    return Predicate(lambda value: isinstance(value, types), name)


def exact_type(expected: type) -> Predicate[Any]:
    """Holds when type(value) is exactly the given type (subclasses excluded)."""
    return Predicate(lambda value: type(value) is expected, f"exact_type({expected.__name__})")


@rule_args
def contains(value: Any, part: Any) -> bool:
    return value is not None and part in value


@rule_args
def starts_with(value: Any, prefix: str) -> bool:
    return isinstance(value, str) and value.startswith(prefix)


@rule_args
def ends_with(value: Any, suffix: str) -> bool:
    return isinstance(value, str) and value.endswith(suffix)
