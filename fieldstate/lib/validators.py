"""Built-in field validators.

A validator is any callable taking the field value and returning ``True``
when the value satisfies the rule. Validators must be pure and total: the
same value always gives the same answer, and no value makes them raise.
Every validator here returns ``False`` for values it does not understand
instead of raising.

Example:
    >>> from fieldstate.lib.validators import required, min_length
    >>> required("  ")
    False
    >>> min_length(3)("alice")
    True
"""

from __future__ import annotations

import re
from collections.abc import Sized
from typing import Any, Callable, Iterable, Protocol, Union

__all__ = [
    "Validator",
    "required",
    "not_empty",
    "min_length",
    "max_length",
    "matches",
    "one_of",
    "predicate",
]


class Validator(Protocol):
    """Pure, total predicate over a field value."""

    def __call__(self, value: Any) -> bool: ...


def required(value: Any) -> bool:
    """Value is present: not None, not blank text, not an empty collection.

    Whitespace-only strings count as empty. ``0`` and ``False`` are real
    values and pass.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (bytes, bytearray)):
        return value.strip() != b""
    if isinstance(value, Sized):
        return len(value) > 0
    return True


def not_empty(value: Any) -> bool:
    """Like :func:`required` but without whitespace normalization."""
    if value is None:
        return False
    if isinstance(value, Sized):
        return len(value) > 0
    return True


def min_length(length: int) -> Validator:
    """Value has at least ``length`` items (characters for strings)."""

    def validator(value: Any) -> bool:
        return isinstance(value, Sized) and len(value) >= length

    validator.__name__ = f"min_length_{length}"
    return validator


def max_length(length: int) -> Validator:
    """Value has at most ``length`` items (characters for strings)."""

    def validator(value: Any) -> bool:
        return isinstance(value, Sized) and len(value) <= length

    validator.__name__ = f"max_length_{length}"
    return validator


def matches(pattern: Union[str, re.Pattern[str]], flags: int = 0) -> Validator:
    """String value fully matches ``pattern``.

    The pattern is compiled when the validator is built; an invalid
    pattern raises re.error there.
    """
    compiled = re.compile(pattern, flags) if isinstance(pattern, str) else pattern

    def validator(value: Any) -> bool:
        return isinstance(value, str) and compiled.fullmatch(value) is not None

    validator.__name__ = "matches"
    return validator


def one_of(choices: Iterable[Any]) -> Validator:
    """Value is one of ``choices``."""
    allowed = tuple(choices)

    def validator(value: Any) -> bool:
        try:
            return value in allowed
        except TypeError:
            return False

    validator.__name__ = "one_of"
    return validator


def predicate(func: Callable[[Any], Any]) -> Validator:
    """Adapt an arbitrary callable, coercing its result to ``bool``.

    The wrapped callable must itself be total; exceptions are not caught.
    """

    def validator(value: Any) -> bool:
        return bool(func(value))

    validator.__name__ = getattr(func, "__name__", "predicate")
    return validator
