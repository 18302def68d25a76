"""
Kondition - Fluent If / Else-If / Else Over a Single Value

A small library for writing conditional logic as one fluent expression.
A Conditional holds a value, tests it against a predicate at most once,
and runs exactly one branch of an if / else-if / else chain.

Flow:
    Conditional.of(value)   hold a value
    .on(predicate)          attach the test (once)
    .then(action)           attach the action (once), fires on a match
    .or_else_if(predicate)  add another branch over the same value
    .or_else(action)        finish: run the winning branch, or the fallback

Example:
    from kondition import Conditional, rule

    @rule
    def is_admin(user):
        return user.is_admin

    Conditional.of(user).on(is_admin).then(grant_all) \\
        .or_else_if(lambda u: u.is_active).then(grant_read) \\
        .or_else_throw(PermissionError)

    label = Conditional.of(user).on(is_admin).then_return(lambda u: "admin").or_else("user")
"""

from __future__ import annotations

__version__ = "0.1.0"
__all__ = [
    # Core
    "Conditional",
    "ConditionalReturn",
    # Errors
    "ConditionalError",
    "InvalidArgumentError",
    "InvalidStateError",
    "MissingPredicateError",
    "MissingActionError",
    # Predicates
    "Predicate",
    "PredicateFactory",
    "rule",
    "rule_args",
    "is_present",
    "is_none",
    "always",
    "never",
    "equal_to",
    "same_instance",
    "instance_of",
    "exact_type",
    "contains",
    "starts_with",
    "ends_with",
    # Tracing
    "TraceHook",
    "TraceConfig",
    "use_tracing",
    "PrintHook",
    "LoggingHook",
    "OpenTelemetryHook",
    # Explanation
    "explain",
    # Exception assertions
    "ThrowableAssertion",
    "ThrowerAssertion",
    "MissingExceptionAssertionError",
    "UnexpectedExceptionAssertionError",
    "assert_thrown",
    "assert_not_thrown",
    "assert_throwable",
    "assert_that",
]

from kondition._assertions import (
    MissingExceptionAssertionError,
    ThrowableAssertion,
    ThrowerAssertion,
    UnexpectedExceptionAssertionError,
    assert_not_thrown,
    assert_that,
    assert_throwable,
    assert_thrown,
)
from kondition._conditional import Conditional, ConditionalReturn
from kondition._errors import (
    ConditionalError,
    InvalidArgumentError,
    InvalidStateError,
    MissingActionError,
    MissingPredicateError,
)
from kondition._explain import explain
from kondition._predicate import (
    Predicate,
    PredicateFactory,
    always,
    contains,
    ends_with,
    equal_to,
    exact_type,
    instance_of,
    is_none,
    is_present,
    never,
    rule,
    rule_args,
    same_instance,
    starts_with,
)
from kondition._tracing import (
    LoggingHook,
    OpenTelemetryHook,
    PrintHook,
    TraceConfig,
    TraceHook,
    use_tracing,
)
