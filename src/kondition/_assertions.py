"""
Assertions about exceptions raised by a block of code.

Example:
    assert_thrown(lambda: int("x")).expect(ValueError).expect_message("invalid literal")

    assert_that(lambda: {}["k"]).do_throw().expect(instance_of(LookupError)).expect_no_cause()

Expectations accept either a type (matched exactly, subclasses excluded) or
any predicate, such as the built-ins in kondition (`contains`, `starts_with`,
`instance_of`, `same_instance`, ...). Failed expectations raise AssertionError.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from kondition._errors import InvalidArgumentError, require_callable
from kondition._predicate import Predicate, contains, exact_type
from kondition._tracing import describe

_R = TypeVar("_R")

Matcher = Callable[[Any], Any]


class MissingExceptionAssertionError(AssertionError):
    """Raised when the code under test did not raise."""

    default_message = "Expected exception was not thrown."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class UnexpectedExceptionAssertionError(AssertionError):
    """Raised when the code under test raised although it should not have."""

    default_message = "Unexpected exception was thrown: "

    def __init__(self, cause: BaseException, message: str | None = None):
        super().__init__(f"{message or self.default_message}{cause!r}")
        self.cause = cause


def _non_blank(message: str | None) -> str | None:
    if message is not None and message.strip():
        return message
    return None


def cause_of(error: BaseException) -> BaseException | None:
    """The explicit cause, or the implicit context unless it was suppressed."""
    if error.__cause__ is not None:
        return error.__cause__
    if error.__suppress_context__:
        return None
    return error.__context__


def _as_matcher(expected: type | Matcher) -> Predicate[Any]:
    if isinstance(expected, type):
        return exact_type(expected)
    require_callable(expected, "Matcher")
    if isinstance(expected, Predicate):
        return expected
    return Predicate(expected, describe(expected))


class ThrowableAssertion:
    """
    Chainable expectations over one caught exception.

    Every expect method returns the assertion itself, so expectations can be
    chained; the assertion passes only if all of them hold.
    """

    def __init__(self, caught: BaseException):
        if caught is None:
            raise InvalidArgumentError("Caught exception cannot be None")
        self._caught = caught

    @property
    def caught(self) -> BaseException:
        return self._caught

    def extract_from(self, wrapper: type[BaseException]) -> ThrowableAssertion:
        """
        Continue with the cause when the caught exception is exactly `wrapper`.

        Useful when the interesting error is wrapped by a framework. Returns
        this assertion unchanged if the type does not match.

        Raises:
            InvalidArgumentError: if the wrapper matched but carries no cause
        """
        if type(self._caught) is wrapper:
            return ThrowableAssertion(cause_of(self._caught))  # type: ignore[arg-type]
        return self

    def expect(self, expected: type | Matcher) -> ThrowableAssertion:
        """Expect the exception to be exactly of a type, or to satisfy a matcher."""
        matcher = _as_matcher(expected)
        if not matcher(self._caught):
            raise AssertionError(
                f"Expected: exception {matcher.name} but: was {self._caught!r}"
            )
        return self

    def expect_message(self, expected: str | Matcher) -> ThrowableAssertion:
        """Expect the message to contain a substring, or to satisfy a matcher."""
        matcher = contains(expected) if isinstance(expected, str) else _as_matcher(expected)
        message = str(self._caught)
        if not matcher(message):
            raise AssertionError(
                f"Expected: exception with message {matcher.name} but: message was {message!r}"
            )
        return self

    def expect_no_cause(self) -> ThrowableAssertion:
        """Expect the exception to have neither an explicit cause nor a context."""
        cause = cause_of(self._caught)
        if cause is not None:
            raise AssertionError(f"Expected: exception with no cause but: cause was {cause!r}")
        return self

    def expect_cause(self, expected: type | Matcher) -> ThrowableAssertion:
        """Expect a cause that is exactly of a type, or that satisfies a matcher."""
        matcher = _as_matcher(expected)
        cause = cause_of(self._caught)
        if cause is None:
            raise AssertionError(
                f"Expected: exception with cause {matcher.name} but: cause was None"
            )
        if not matcher(cause):
            raise AssertionError(
                f"Expected: exception with cause {matcher.name} but: cause was {cause!r}"
            )
        return self

    def __repr__(self) -> str:
        return f"ThrowableAssertion({self._caught!r})"


def assert_thrown(
    thrower: Callable[[], Any], message: str | None = None
) -> ThrowableAssertion:
    """
    Run thrower and return an assertion over the exception it raised.

    Raises:
        MissingExceptionAssertionError: if thrower returns normally; a blank
            message falls back to the default one
    """
    require_callable(thrower, "Thrower")
    try:
        thrower()
    except Exception as caught:
        return ThrowableAssertion(caught)
    raise MissingExceptionAssertionError(_non_blank(message))


def assert_not_thrown(thrower: Callable[[], _R], message: str | None = None) -> _R:
    """
    Run thrower and return its result.

    Raises:
        UnexpectedExceptionAssertionError: if thrower raised, chained to the
            original exception
    """
    require_callable(thrower, "Thrower")
    try:
        return thrower()
    except Exception as caught:
        raise UnexpectedExceptionAssertionError(caught, _non_blank(message)) from caught


def assert_throwable(caught: BaseException) -> ThrowableAssertion:
    """Start an assertion over an exception that was caught elsewhere."""
    return ThrowableAssertion(caught)


class ThrowerAssertion(Generic[_R]):
    """
    Fluent entry point: assert_that(thrower).do_throw() / .do_not_throw().

    Example:
        assert_that(lambda: 1 / 0).do_throw().expect(ZeroDivisionError)
        assert assert_that(lambda: 2 + 2).do_not_throw() == 4
    """

    def __init__(self, thrower: Callable[[], _R]):
        require_callable(thrower, "Thrower")
        self._thrower = thrower

    def do_throw(self) -> ThrowableAssertion:
        """Expect the thrower to raise; returns an assertion over the exception."""
        return assert_thrown(self._thrower)

    def do_not_throw(self) -> _R:
        """Expect the thrower to return normally; returns its result."""
        return assert_not_thrown(self._thrower)


def assert_that(thrower: Callable[[], _R]) -> ThrowerAssertion[_R]:
    return ThrowerAssertion(thrower)
