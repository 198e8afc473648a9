"""Pytest configuration and fixtures."""

from __future__ import annotations

import logging
import os
from typing import Generator

import pytest

from fieldstate import FieldState, ValidatorSet, compose, required


@pytest.fixture
def required_rules() -> ValidatorSet:
    """A validator set holding only the required rule."""
    return compose({"required": required})


@pytest.fixture
def username(required_rules: ValidatorSet) -> FieldState[str]:
    return FieldState("", required_rules, name="username")


@pytest.fixture
def password(required_rules: ValidatorSet) -> FieldState[str]:
    return FieldState("", required_rules, name="password")


@pytest.fixture
def restore_root_logger() -> Generator[logging.Logger, None, None]:
    """Put root logger handlers and level back after setup_logging() calls."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove FIELDSTATE_* variables so settings tests see defaults."""
    for key in list(os.environ):
        if key.startswith("FIELDSTATE_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
