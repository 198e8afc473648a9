"""Named, immutable validator collections.

A ValidatorSet maps validator names to validators in insertion order. It
holds no per-field state, so one set can back any number of fields.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from fieldstate.lib.errors import (
    ConfigurationError,
    DuplicateValidatorError,
    InvalidValidatorError,
)
from fieldstate.lib.validators import Validator

logger = logging.getLogger(__name__)

__all__ = [
    "DuplicatePolicy",
    "ValidatorSet",
    "ValidatorSource",
    "compose",
]

ValidatorSource = Union[Mapping, Iterable[Tuple[str, Validator]]]


class DuplicatePolicy(str, Enum):
    """What to do when a validator name appears twice."""

    REJECT = "reject"  # Raise DuplicateValidatorError
    LAST_WINS = "last_wins"  # Keep the later validator, first position

    @classmethod
    def coerce(cls, value: Union[str, "DuplicatePolicy"]) -> "DuplicatePolicy":
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ConfigurationError(
                f"Invalid duplicate policy '{value}'. Must be one of: {valid}",
                key="on_duplicate",
            ) from None


def _iter_entries(
    source: Optional[ValidatorSource], field: Optional[str] = None
) -> Iterator[Tuple[Any, Any]]:
    if source is None:
        return
    if isinstance(source, Mapping):
        yield from source.items()
        return
    for entry in source:
        try:
            name, validator = entry
        except (TypeError, ValueError):
            raise InvalidValidatorError(
                "Validator entries must be (name, validator) pairs",
                field=field,
                details={"entry": repr(entry)},
            ) from None
        yield name, validator


class ValidatorSet(Mapping):
    """Read-only, ordered mapping of validator name to validator.

    Example:
        >>> rules = ValidatorSet([("required", required)])
        >>> rules.evaluate("")
        {'required': False}

    Args:
        entries: Mapping or (name, validator) pairs
        on_duplicate: DuplicatePolicy or its string value
        field: Name of the field the set is built for; errors raised while
            building carry it so they can be traced to one input
    """

    __slots__ = ("_validators",)

    def __init__(
        self,
        entries: Optional[ValidatorSource] = None,
        *,
        on_duplicate: Union[str, DuplicatePolicy] = DuplicatePolicy.REJECT,
        field: Optional[str] = None,
    ) -> None:
        policy = DuplicatePolicy.coerce(on_duplicate)
        validators: Dict[str, Validator] = {}

        for name, validator in _iter_entries(entries, field):
            if not isinstance(name, str) or not name:
                raise InvalidValidatorError(
                    "Validator names must be non-empty strings", name=name, field=field
                )
            if not callable(validator):
                raise InvalidValidatorError(
                    f"Validator '{name}' is not callable",
                    name=name,
                    field=field,
                    details={"type": type(validator).__name__},
                )
            if name in validators:
                if policy is DuplicatePolicy.REJECT:
                    raise DuplicateValidatorError(name, field=field)
                logger.debug("Validator '%s' replaced by a later entry", name)
            validators[name] = validator

        self._validators = validators

    def __getitem__(self, name: str) -> Validator:
        return self._validators[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._validators)

    def __len__(self) -> int:
        return len(self._validators)

    def __repr__(self) -> str:
        return f"ValidatorSet({list(self._validators)!r})"

    @property
    def names(self) -> List[str]:
        """Validator names in evaluation order."""
        return list(self._validators)

    def evaluate(self, value: Any) -> Dict[str, bool]:
        """Run every validator against ``value``, in order."""
        return {name: bool(validator(value)) for name, validator in self._validators.items()}

    def is_valid(self, value: Any) -> bool:
        """True when every validator accepts ``value`` (vacuously for an empty set)."""
        return all(self.evaluate(value).values())

    def merge(
        self,
        other: ValidatorSource,
        *,
        on_duplicate: Union[str, DuplicatePolicy] = DuplicatePolicy.REJECT,
        field: Optional[str] = None,
    ) -> "ValidatorSet":
        """Return a new set with ``other``'s validators appended."""
        entries = list(self._validators.items())
        entries.extend(_iter_entries(other, field))
        return ValidatorSet(entries, on_duplicate=on_duplicate, field=field)


def compose(
    validators: Optional[ValidatorSource] = None,
    /,
    *,
    on_duplicate: Union[str, DuplicatePolicy] = DuplicatePolicy.REJECT,
    **named: Validator,
) -> ValidatorSet:
    """Build a ValidatorSet from a mapping, pairs and/or keyword arguments.

    Keyword validators are added after the positional source. Duplicate
    names raise DuplicateValidatorError unless ``on_duplicate="last_wins"``,
    in which case the later validator replaces the earlier one in place.

    Example:
        >>> compose({"required": required}, short=max_length(16))
        ValidatorSet(['required', 'short'])
    """
    entries = list(_iter_entries(validators))
    entries.extend(named.items())
    return ValidatorSet(entries, on_duplicate=on_duplicate)
