"""
The Conditional value holder and its converting companion.

A Conditional binds a value to a predicate and a "then" action. Chaining
or_else_if() links a new node to the previous one, so that a chain behaves
like an if / elif / ... / else statement over a single value:

    Conditional.of(score)
        .on(lambda s: s > 90).then(award_gold)
        .or_else_if(lambda s: s > 75).then(award_silver)
        .or_else(award_nothing)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic

from kondition._errors import (
    InvalidStateError,
    MissingActionError,
    MissingPredicateError,
    require_callable,
)
from kondition._predicate import is_present, never
from kondition._tracing import describe, step_name, traced
from kondition._types import (
    ActionFn,
    ConverterFn,
    ExceptionBuilder,
    ExceptionSupplier,
    PredicateFn,
    R,
    T,
)


class Conditional(Generic[T]):
    """
    A container holding a value (possibly None) that may or may not pass a predicate.

    The predicate and the then-action are once-only slots. The predicate result
    is computed on first demand and cached for the lifetime of the node, so
    repeated queries never call the predicate twice.

    Example:
        Conditional.of(order).on(is_paid).then(ship).or_else(hold)

        Conditional.of(name).on(str.isupper).then_return(str.lower).or_else("")

    Equality compares value, predicate and then-action. Functions compare by
    identity, so two identical lambdas are never equal.
    """

    def __init__(
        self,
        value: T | None = None,
        predicate: PredicateFn[T] | None = None,
        parent: Conditional[T] | None = None,
    ):
        if predicate is not None:
            require_callable(predicate, "Predicate")
        self._value = value
        self._predicate = predicate
        self._action: ActionFn[T] | None = None
        self._result: bool | None = None
        self._fired = False
        self._parent: Conditional[T] | None = parent if parent is not None else _ROOT
        self._depth: int = self._parent._depth + 1

    @classmethod
    def _sentinel(cls) -> Conditional[Any]:
        """Build the always-false root every chain falls back to."""
        root = cls.__new__(cls)
        root._value = None
        root._predicate = never
        root._action = None
        root._result = False
        root._fired = False
        root._parent = None
        root._depth = -1
        return root

    # -------------------------------------------------
    # Construction
    # -------------------------------------------------

    @classmethod
    def of(cls, value: T | None) -> Conditional[T]:
        """Hold a value with no predicate attached yet."""
        return cls(value)

    @classmethod
    def of_optional(cls, value: T | None) -> Conditional[T]:
        """Hold a value already bound to the `is_present` (not None) predicate."""
        return cls(value, is_present)

    def on(self, predicate: PredicateFn[T]) -> Conditional[T]:
        """
        Attach the predicate to test the value with.

        Raises:
            InvalidArgumentError: if predicate is None or not callable
            InvalidStateError: if a predicate is already attached
        """
        require_callable(predicate, "Predicate")
        self._set_predicate(predicate)
        return self

    def on_present(self) -> Conditional[T]:
        """Attach the `is_present` (not None) predicate."""
        self._set_predicate(is_present)
        return self

    def then(self, action: ActionFn[T]) -> Conditional[T]:
        """
        Attach the action to run on the value when the predicate holds.

        If no earlier branch of the chain matched and this node's predicate
        holds, the action runs right away, which makes
        `Conditional.of(v).on(p).then(a)` a complete statement.

        Raises:
            InvalidArgumentError: if action is None or not callable
            InvalidStateError: if a then-action is already attached
        """
        require_callable(action, "Then action")
        if self._action is not None:
            raise InvalidStateError("Then action is already set")
        self._action = action

        # Without a predicate the action waits for a terminal call
        if self._predicate is None or self._is_skipped():
            return self

        if self.evaluate():
            self._run_then()
        return self

    def then_return(self, converter: ConverterFn[T, R]) -> ConditionalReturn[T, R]:
        """
        Switch to a value-returning flow that yields converter(value) on a match.

        The returned ConditionalReturn tests the predicate on its own; it does
        not share this node's cached result and cannot be chained further.

        Raises:
            MissingPredicateError: if no predicate is attached
            InvalidArgumentError: if converter is None or not callable
        """
        self._require_predicate()
        require_callable(converter, "Then converter")
        assert self._predicate is not None
        return ConditionalReturn(self._value, self._predicate, converter)

    # -------------------------------------------------
    # Evaluation
    # -------------------------------------------------

    def evaluate(self) -> bool:
        """
        Test the value against the predicate, computing the result at most once.

        Raises:
            MissingPredicateError: if no predicate is attached
        """
        self._require_predicate()
        if self._result is None:
            predicate = self._predicate
            assert predicate is not None
            step = "ELIF" if self._depth > 0 else "IF"
            self._result = bool(
                traced(
                    step_name(step, predicate),
                    self._value,
                    self._depth,
                    lambda: predicate(self._value),
                )
            )
        return self._result

    def get(self) -> bool:
        """
        Return whether the value passes this node's predicate.

        In a chain this reports the last predicate only, regardless of whether
        an earlier branch already matched.
        """
        return self.evaluate()

    def _is_skipped(self) -> bool:
        """True when an earlier branch of the chain already matched."""
        parent = self._parent
        if parent is None:
            return False
        # Oldest branch first, so predicates run in declaration order
        return parent._is_skipped() or parent.evaluate()

    # -------------------------------------------------
    # Terminal operations
    # -------------------------------------------------

    def or_else(self, else_action: ActionFn[T]) -> None:
        """
        Finish the statement: run the then-action on a match, else_action otherwise.

        Does nothing if an earlier branch of the chain matched.

        Raises:
            InvalidArgumentError: if else_action is None or not callable
            MissingPredicateError: if no predicate is attached
            MissingActionError: if no then-action is attached
        """
        require_callable(else_action, "Else action")

        def run_else() -> None:
            traced(
                step_name("ELSE", else_action),
                self._value,
                self._depth,
                lambda: else_action(self._value),
                action=True,
            )

        self._dispatch(run_else)

    def or_else_throw(self, exception_supplier: ExceptionSupplier) -> None:
        """
        Finish the statement: run the then-action on a match, raise otherwise.

        The supplier is called with no arguments; an exception class works too:
            .or_else_throw(PermissionError)

        Raises:
            InvalidArgumentError: if exception_supplier is None or not callable
            Whatever exception_supplier() returns, if the value does not match
        """
        require_callable(exception_supplier, "Exception supplier")

        def raise_supplied() -> None:
            raise exception_supplier()

        self._dispatch(raise_supplied)

    def or_else_throw_with(self, exception_builder: ExceptionBuilder[T]) -> None:
        """
        Finish the statement: run the then-action on a match, raise otherwise.

        The builder is called with the held value:
            .or_else_throw_with(lambda v: KeyError(f"unknown key {v}"))

        Raises:
            InvalidArgumentError: if exception_builder is None or not callable
            Whatever exception_builder(value) returns, if the value does not match
        """
        require_callable(exception_builder, "Exception builder")

        def raise_built() -> None:
            raise exception_builder(self._value)

        self._dispatch(raise_built)

    def or_else_if(self, predicate: PredicateFn[T]) -> Conditional[T]:
        """
        Extend the chain with another branch testing the same value.

        Always returns a new node whose parent is this one; this node is left
        untouched and nothing is evaluated.

        Raises:
            InvalidArgumentError: if predicate is None or not callable
        """
        require_callable(predicate, "Predicate")
        return Conditional(self._value, predicate, self)

    def _dispatch(self, otherwise: Callable[[], None]) -> None:
        if self._is_skipped():
            return

        self._require_predicate()
        if self._action is None:
            raise MissingActionError("Then action is not given")

        if self.evaluate():
            self._run_then()
        else:
            otherwise()

    def _run_then(self) -> None:
        if self._fired:
            return
        self._fired = True
        action = self._action
        assert action is not None
        traced(
            step_name("THEN", action),
            self._value,
            self._depth,
            lambda: action(self._value),
            action=True,
        )

    # -------------------------------------------------
    # Slots
    # -------------------------------------------------

    def _set_predicate(self, predicate: PredicateFn[T]) -> None:
        if self._predicate is not None:
            raise InvalidStateError("Predicate is already set")
        self._predicate = predicate

    def _require_predicate(self) -> None:
        if self._predicate is None:
            raise MissingPredicateError("Predicate is not given")

    # -------------------------------------------------
    # Introspection
    # -------------------------------------------------

    @property
    def value(self) -> T | None:
        return self._value

    @property
    def predicate(self) -> PredicateFn[T] | None:
        return self._predicate

    @property
    def action(self) -> ActionFn[T] | None:
        return self._action

    @property
    def parent(self) -> Conditional[T] | None:
        """The previous branch of the chain, or None for the first one."""
        if self._parent is None or self._parent is _ROOT:
            return None
        return self._parent

    @property
    def is_evaluated(self) -> bool:
        """Whether the predicate result is already cached."""
        return self._result is not None

    def chain(self) -> list[Conditional[T]]:
        """All branches leading to this node, first `if` first."""
        nodes: list[Conditional[T]] = []
        node: Conditional[T] | None = self
        while node is not None:
            nodes.append(node)
            node = node.parent
        nodes.reverse()
        return nodes

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Conditional):
            return NotImplemented
        return (
            self._value == other._value
            and self._predicate == other._predicate
            and self._action == other._action
        )

    def __hash__(self) -> int:
        return hash((self._value, self._predicate, self._action))

    def __repr__(self) -> str:
        return (
            f"Conditional(value={self._value!r}, "
            f"predicate={describe(self._predicate)}, "
            f"action={describe(self._action)})"
        )


_ROOT: Conditional[Any] = Conditional._sentinel()


@dataclass(frozen=True)
class ConditionalReturn(Generic[T, R]):
    """
    A value-returning snapshot of a Conditional.

    Created by Conditional.then_return(). Each terminal call tests the
    predicate again; there is no caching and no chaining.

    Example:
        label = (
            Conditional.of(temperature)
            .on(lambda t: t > 30)
            .then_return(lambda t: f"hot ({t})")
            .or_else("fine")
        )
    """

    value: Any
    predicate: Callable[[Any], Any]
    converter: Callable[[Any], R]

    def _matches(self) -> bool:
        return bool(
            traced(
                step_name("RETURN IF", self.predicate),
                self.value,
                0,
                lambda: self.predicate(self.value),
            )
        )

    def or_else(self, else_value: R) -> R:
        """Return converter(value) on a match, else_value otherwise."""
        if self._matches():
            return self.converter(self.value)
        return else_value

    def or_else_return(self, else_converter: Callable[[Any], R]) -> R:
        """
        Return converter(value) on a match, else_converter(value) otherwise.

        Raises:
            InvalidArgumentError: if else_converter is None or not callable
        """
        require_callable(else_converter, "Else converter")
        if self._matches():
            return self.converter(self.value)
        return else_converter(self.value)

    def or_else_throw(self, exception_supplier: ExceptionSupplier) -> R:
        """
        Return converter(value) on a match, raise exception_supplier() otherwise.

        Raises:
            InvalidArgumentError: if exception_supplier is None or not callable
        """
        require_callable(exception_supplier, "Exception supplier")
        if self._matches():
            return self.converter(self.value)
        raise exception_supplier()

    def or_else_throw_with(self, exception_builder: Callable[[Any], BaseException]) -> R:
        """
        Return converter(value) on a match, raise exception_builder(value) otherwise.

        Raises:
            InvalidArgumentError: if exception_builder is None or not callable
        """
        require_callable(exception_builder, "Exception builder")
        if self._matches():
            return self.converter(self.value)
        raise exception_builder(self.value)

    def __repr__(self) -> str:
        return (
            f"ConditionalReturn(value={self.value!r}, "
            f"predicate={describe(self.predicate)}, "
            f"converter={describe(self.converter)})"
        )
