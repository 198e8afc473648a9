"""UI-agnostic field state.

These classes hold no UI framework dependencies; any front end binds its
events to set/touch/reset and renders from the derived flags.
"""

from fieldstate.models.field_state import FieldSnapshot, FieldState
from fieldstate.models.synchronized import SynchronizedField

__all__ = [
    "FieldSnapshot",
    "FieldState",
    "SynchronizedField",
]
