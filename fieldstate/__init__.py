"""Reusable per-field form state with composable validators.

Usage:
    from fieldstate import FieldState, required

    username = FieldState("", {"required": required}, name="username")
    username.set("alice")
    username.touch()
    username.valid   # True
    username.error   # False
"""

from __future__ import annotations

from fieldstate.lib.errors import (
    ConfigurationError,
    DuplicateValidatorError,
    FieldStateError,
    InvalidValidatorError,
    SettingsError,
)
from fieldstate.lib.validator_set import DuplicatePolicy, ValidatorSet, compose
from fieldstate.lib.validators import (
    Validator,
    matches,
    max_length,
    min_length,
    not_empty,
    one_of,
    predicate,
    required,
)
from fieldstate.models import FieldSnapshot, FieldState, SynchronizedField

__version__ = "0.1.0"

__all__ = [
    # Field state
    "FieldState",
    "FieldSnapshot",
    "SynchronizedField",
    # Validators
    "Validator",
    "ValidatorSet",
    "DuplicatePolicy",
    "compose",
    "required",
    "not_empty",
    "min_length",
    "max_length",
    "matches",
    "one_of",
    "predicate",
    # Errors
    "FieldStateError",
    "ConfigurationError",
    "DuplicateValidatorError",
    "InvalidValidatorError",
    "SettingsError",
]
