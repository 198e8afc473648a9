"""Project settings for fieldstate consumers.

Settings come from three places, highest priority first:

1. ``.fieldstate.yaml`` in the project root (``fieldstate:`` section)
2. ``FIELDSTATE_*`` environment variables
3. Built-in defaults

Example .fieldstate.yaml:
    fieldstate:
      log_level: DEBUG
      log_format: json        # 'json' for aggregation, 'console' for humans
      log_file: ./logs/forms.log
      strip_whitespace: true  # treat "   " as empty for required fields
      duplicate_policy: reject
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fieldstate.lib.errors import SettingsError
from fieldstate.lib.validator_set import DuplicatePolicy

logger = logging.getLogger(__name__)

__all__ = [
    "SETTINGS_FILENAME",
    "LoggingConfig",
    "FieldStateSettings",
    "load_settings",
    "get_settings",
]

SETTINGS_FILENAME = ".fieldstate.yaml"

_VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
_VALID_FORMATS = ["json", "console", "text"]


def _check_level(v: str) -> str:
    if v.upper() not in _VALID_LEVELS:
        raise ValueError(f"level must be one of: {_VALID_LEVELS}")
    return v.upper()


def _check_format(v: str) -> str:
    if v.lower() not in _VALID_FORMATS:
        raise ValueError(f"format must be one of: {_VALID_FORMATS}")
    return v.lower()


class LoggingConfig(BaseModel):
    """Pydantic model for logging configuration.

    Example:
        >>> config = LoggingConfig(level="debug", format="json")
        >>> from fieldstate.lib.logging import configure_logging
        >>> configure_logging(config)
    """

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="console", description="Output format: 'json' or 'console'")
    file: Optional[str] = Field(default=None, description="Optional log file path")
    console: bool = Field(default=True, description="Output to console (in addition to file)")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        return _check_level(v)

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        return _check_format(v)


class FieldStateSettings(BaseSettings):
    """Environment-based settings using pydantic-settings.

    Automatically loads from environment variables with FIELDSTATE_ prefix.

    Example:
        >>> # FIELDSTATE_LOG_LEVEL=DEBUG
        >>> # FIELDSTATE_STRIP_WHITESPACE=false
        >>> settings = FieldStateSettings()
        >>> settings.log_level
        'DEBUG'
    """

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format: 'json' or 'console'")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")
    log_console: bool = Field(default=True, description="Log to stdout")
    strip_whitespace: bool = Field(
        default=True, description="Whitespace-only values count as empty for required fields"
    )
    duplicate_policy: DuplicatePolicy = Field(
        default=DuplicatePolicy.REJECT, description="Validator name collision policy"
    )

    model_config = SettingsConfigDict(
        env_prefix="FIELDSTATE_",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return _check_level(v)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        return _check_format(v)

    def logging_config(self) -> LoggingConfig:
        """Logging section as a standalone LoggingConfig."""
        return LoggingConfig(
            level=self.log_level,
            format=self.log_format,
            file=self.log_file,
            console=self.log_console,
        )


def _read_settings_file(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(
            "Could not read settings file",
            config_file=str(config_path),
            cause=e,
        ) from e

    if not isinstance(config, dict):
        raise SettingsError(
            "Settings file must contain a mapping",
            config_file=str(config_path),
        )

    section = config.get("fieldstate", {})
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise SettingsError(
            "'fieldstate' section must be a mapping",
            config_file=str(config_path),
            key="fieldstate",
        )
    return section


def load_settings(project_root: Optional[Path] = None) -> FieldStateSettings:
    """Load settings from .fieldstate.yaml in project root, then environment.

    Args:
        project_root: Project root directory. Defaults to cwd.

    Returns:
        FieldStateSettings with file values taking priority over env vars.

    Raises:
        SettingsError: If the file is unreadable or holds invalid values
    """
    root = project_root or Path.cwd()
    config_path = root / SETTINGS_FILENAME

    file_values: Dict[str, Any] = {}
    if config_path.exists():
        file_values = _read_settings_file(config_path)
        logger.debug("Loaded settings from %s", config_path)

    try:
        return FieldStateSettings(**file_values)
    except ValidationError as e:
        raise SettingsError(
            "Invalid fieldstate settings",
            config_file=str(config_path) if file_values else None,
            cause=e,
        ) from e


# Global settings instance (loaded on first access)
_settings: Optional[FieldStateSettings] = None


def get_settings(reload: bool = False) -> FieldStateSettings:
    """Get the global settings, loading them on first use.

    Args:
        reload: Force reload from file and environment.
    """
    global _settings
    if _settings is None or reload:
        _settings = load_settings()
    return _settings
