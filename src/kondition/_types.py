"""Shared type variables and callback aliases."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")
R = TypeVar("R")

# Type aliases for user-supplied callbacks
PredicateFn = Callable[[T], bool]
"""Predicate signature: value -> bool"""

ActionFn = Callable[[T], Any]
"""Action signature: value -> None (return value ignored)"""

ConverterFn = Callable[[T], R]
"""Converter signature: value -> converted value"""

ExceptionSupplier = Callable[[], BaseException]
"""Zero-argument exception factory"""

ExceptionBuilder = Callable[[T], BaseException]
"""One-argument exception factory applied to the held value"""
