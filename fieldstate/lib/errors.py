"""Structured exception hierarchy for fieldstate.

Field operations never raise; these exceptions report programming and
configuration mistakes at construction time, with enough context to fix
them quickly.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "FieldStateError",
    "ConfigurationError",
    "DuplicateValidatorError",
    "InvalidValidatorError",
    "SettingsError",
]


class FieldStateError(Exception):
    """Base exception for all fieldstate errors.

    Provides structured error information for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.field = field
        self.details = details or {}
        self.suggestion = suggestion

        # Build full message
        parts = [message]

        if field:
            parts.insert(0, f"[{field}]")

        if details:
            detail_lines = [f"  {k}: {v}" for k, v in details.items()]
            parts.append("\nDetails:")
            parts.extend(detail_lines)

        if suggestion:
            parts.append(f"\nSuggestion: {suggestion}")

        super().__init__("\n".join(parts) if len(parts) > 1 else message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "field": self.field,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class ConfigurationError(FieldStateError):
    """Invalid configuration.

    Raised when a validator set or a settings file cannot be built.
    """

    def __init__(
        self,
        message: str,
        *,
        config_file: Optional[str] = None,
        key: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        self.config_file = config_file
        self.key = key

        details = kwargs.pop("details", {})
        if config_file:
            details["config_file"] = config_file
        if key:
            details["key"] = key

        super().__init__(message, details=details, **kwargs)


class DuplicateValidatorError(ConfigurationError):
    """The same validator name was supplied twice under the ``reject`` policy."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        self.name = name

        suggestion = kwargs.pop("suggestion", None)
        if not suggestion:
            suggestion = (
                "Give each validator a unique name, or compose with "
                "on_duplicate='last_wins' to keep the later entry."
            )

        super().__init__(
            f"Duplicate validator name '{name}'",
            key=name,
            suggestion=suggestion,
            **kwargs,
        )


class InvalidValidatorError(ConfigurationError):
    """A validator entry has an unusable name or is not callable."""

    def __init__(
        self,
        message: str,
        *,
        name: Any = None,
        **kwargs: Any,
    ) -> None:
        self.name = name

        details = kwargs.pop("details", {})
        if name is not None:
            details["name"] = repr(name)

        super().__init__(message, details=details, **kwargs)


class SettingsError(ConfigurationError):
    """A settings file could not be read or failed validation."""

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[Exception] = None,
        **kwargs: Any,
    ) -> None:
        self.cause = cause

        details = kwargs.pop("details", {})
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__

        super().__init__(message, details=details, **kwargs)
