"""Thread-safe wrapper around FieldState.

FieldState itself assumes a single owner. When a field is shared between
threads, wrap it in SynchronizedField: mutators run one at a time and read()
returns a snapshot that stays valid until the next mutator call.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Dict, Generator, Generic, Optional, TypeVar

from fieldstate.lib.validator_set import ValidatorSource
from fieldstate.models.field_state import FieldSnapshot, FieldState, Listener

__all__ = ["SynchronizedField"]

T = TypeVar("T")


class SynchronizedField(Generic[T]):
    """FieldState guarded by a re-entrant lock.

    The lock is re-entrant so listeners, which run while the lock is held,
    can read the field they are notified about.

    Example:
        >>> shared = SynchronizedField(FieldState("", {"required": required}))
        >>> shared.set("alice")
        >>> shared.read().valid
        True
    """

    def __init__(self, field: FieldState[T]) -> None:
        self._field = field
        self._lock = threading.RLock()

    @classmethod
    def create(
        cls,
        initial_value: T,
        validators: Optional[ValidatorSource] = None,
        *,
        name: Optional[str] = None,
    ) -> "SynchronizedField[T]":
        return cls(FieldState(initial_value, validators, name=name))

    @contextmanager
    def locked(self) -> Generator[FieldState[T], None, None]:
        """Hold the lock across several operations on the wrapped field."""
        with self._lock:
            yield self._field

    def set(self, value: T) -> None:
        with self._lock:
            self._field.set(value)

    def touch(self) -> None:
        with self._lock:
            self._field.touch()

    def reset(self) -> None:
        with self._lock:
            self._field.reset()

    def read(self) -> FieldSnapshot[T]:
        with self._lock:
            return self._field.read()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            unsubscribe = self._field.subscribe(listener)

        def locked_unsubscribe() -> None:
            with self._lock:
                unsubscribe()

        return locked_unsubscribe

    @property
    def name(self) -> Optional[str]:
        return self._field.name

    @property
    def value(self) -> T:
        with self._lock:
            return self._field.value

    @property
    def dirty(self) -> bool:
        with self._lock:
            return self._field.dirty

    @property
    def touched(self) -> bool:
        with self._lock:
            return self._field.touched

    @property
    def validation(self) -> Dict[str, bool]:
        with self._lock:
            return self._field.validation

    @property
    def valid(self) -> bool:
        with self._lock:
            return self._field.valid

    @property
    def error(self) -> bool:
        with self._lock:
            return self._field.error

    @property
    def version(self) -> int:
        with self._lock:
            return self._field.version

    def __repr__(self) -> str:
        with self._lock:
            return f"SynchronizedField({self._field!r})"
