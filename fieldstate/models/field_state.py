"""Per-field state with validation and touched/dirty tracking.

A FieldState owns one input's value and interaction flags. Validation
results are never stored: ``validation``, ``valid`` and ``error`` are
recomputed from the current value on every read, so they cannot go stale.

Example:
    >>> username = FieldState("", {"required": required}, name="username")
    >>> username.valid, username.error
    (False, False)
    >>> username.touch()
    >>> username.error
    True
    >>> username.set("alice")
    >>> username.valid, username.error
    (True, False)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar, Union

from fieldstate.lib.validator_set import DuplicatePolicy, ValidatorSet, ValidatorSource

logger = logging.getLogger(__name__)

__all__ = [
    "FieldSnapshot",
    "FieldState",
    "Listener",
]

T = TypeVar("T")

Listener = Callable[["FieldState[Any]"], None]


@dataclass(frozen=True)
class FieldSnapshot(Generic[T]):
    """Immutable view of a field at one point in time.

    Attributes:
        value: The field value when the snapshot was taken
        dirty: Whether set() had been called since creation/reset
        touched: Whether touch() had been called since creation/reset
        validation: Result of each validator, by name (read-only)
        valid: All validators passed
        error: Touched and not valid
        version: Mutation counter of the field when the snapshot was taken.
            Not part of equality: a reset field reads equal to a fresh one.
    """

    value: T
    dirty: bool
    touched: bool
    validation: Mapping[str, bool] = field(default_factory=dict, hash=False)
    valid: bool = True
    error: bool = False
    version: int = field(default=0, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "value": self.value,
            "dirty": self.dirty,
            "touched": self.touched,
            "validation": dict(self.validation),
            "valid": self.valid,
            "error": self.error,
        }


class FieldState(Generic[T]):
    """Mutable state of a single form field.

    The only mutators are :meth:`set`, :meth:`touch` and :meth:`reset`.
    Everything else is a read-only projection.

    Args:
        initial_value: Starting value, restored by reset()
        validators: ValidatorSet, mapping of name to validator, (name, validator)
            pairs, or None
        name: Optional field name, used in log records, repr and errors
        on_duplicate: Duplicate-name policy applied when ``validators`` is not
            already a ValidatorSet

    Raises:
        ConfigurationError: If the validators cannot be composed; the error's
            ``field`` is ``name``
    """

    def __init__(
        self,
        initial_value: T,
        validators: Optional[ValidatorSource] = None,
        *,
        name: Optional[str] = None,
        on_duplicate: Union[str, DuplicatePolicy] = DuplicatePolicy.REJECT,
    ) -> None:
        if not isinstance(validators, ValidatorSet):
            validators = ValidatorSet(validators, on_duplicate=on_duplicate, field=name)

        self._initial_value = initial_value
        self._validators = validators
        self._name = name
        self._value = initial_value
        self._dirty = False
        self._touched = False
        self._version = 0
        self._listeners: List[Listener] = []

    @classmethod
    def create(
        cls,
        initial_value: T,
        validators: Optional[ValidatorSource] = None,
        *,
        name: Optional[str] = None,
        on_duplicate: Union[str, DuplicatePolicy] = DuplicatePolicy.REJECT,
    ) -> "FieldState[T]":
        """Create a field in its initial, untouched state."""
        return cls(initial_value, validators, name=name, on_duplicate=on_duplicate)

    # ------------------------------------------------------------------
    # Stored state
    # ------------------------------------------------------------------

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def value(self) -> T:
        return self._value

    @property
    def initial_value(self) -> T:
        return self._initial_value

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def touched(self) -> bool:
        return self._touched

    @property
    def validators(self) -> ValidatorSet:
        return self._validators

    @property
    def version(self) -> int:
        """Incremented by every mutator call that changes state."""
        return self._version

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def validation(self) -> Dict[str, bool]:
        """Result of each validator against the current value."""
        return self._validators.evaluate(self._value)

    @property
    def valid(self) -> bool:
        return all(self.validation.values())

    @property
    def error(self) -> bool:
        """Whether an error should be shown: touched and not valid."""
        return self._touched and not self.valid

    def read(self) -> FieldSnapshot[T]:
        """Take a consistent snapshot of stored and derived state."""
        validation = self.validation
        valid = all(validation.values())
        return FieldSnapshot(
            value=self._value,
            dirty=self._dirty,
            touched=self._touched,
            validation=MappingProxyType(validation),
            valid=valid,
            error=self._touched and not valid,
            version=self._version,
        )

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def set(self, value: T) -> None:
        """Replace the value and mark the field dirty."""
        logger.debug("Field %s set (dirty: %s -> True)", self._label, self._dirty)
        self._value = value
        self._dirty = True
        self._changed()

    def touch(self) -> None:
        """Mark the field as interacted with. Repeated calls are no-ops."""
        if self._touched:
            return
        logger.debug("Field %s touched", self._label)
        self._touched = True
        self._changed()

    def reset(self) -> None:
        """Restore the initial value and clear dirty and touched."""
        logger.debug("Field %s reset", self._label)
        self._value = self._initial_value
        self._dirty = False
        self._touched = False
        self._changed()

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(field)`` after each state change.

        Returns:
            A function that removes the listener; calling it twice is harmless.
        """
        self._listeners.append(listener)
        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if subscribed and listener in self._listeners:
                self._listeners.remove(listener)
            subscribed = False

        return unsubscribe

    def _changed(self) -> None:
        self._version += 1
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            listener(self)

    @property
    def _label(self) -> str:
        return self._name or "<unnamed>"

    def __repr__(self) -> str:
        return (
            f"FieldState(name={self._name!r}, dirty={self._dirty}, "
            f"touched={self._touched}, valid={self.valid})"
        )
