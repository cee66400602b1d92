"""
Shared pytest fixtures for dotstore tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import dotstore.store as store


@_pytest.fixture(autouse=True)
def clean_env(monkeypatch: _pytest.MonkeyPatch) -> None:
    """Remove DOTSTORE_* variables so tests never see the user's settings."""
    for key in list(_os.environ):
        if key.startswith("DOTSTORE_"):
            monkeypatch.delenv(key)
    monkeypatch.delenv("NO_COLOR", raising=False)


@_pytest.fixture
def prefs_path(tmp_path: _pathlib.Path) -> _pathlib.Path:
    """Path of a not-yet-existing ``prefs.yaml`` snapshot."""
    return tmp_path / "prefs.yaml"


@_pytest.fixture
def store_logger() -> _logging.Logger:
    """Logger to attach to stores under test (captured by caplog)."""
    logger = _logging.getLogger("dotstore.tests")
    logger.setLevel(_logging.DEBUG)
    return logger


@_pytest.fixture
def make_store(
    prefs_path: _pathlib.Path,
) -> _typing.Callable[..., store.PersistentStore]:
    """Factory for stores on ``prefs_path``; keyword arguments pass through."""

    def _make(**kwargs: _typing.Any) -> store.PersistentStore:
        path = kwargs.pop("path", prefs_path)
        return store.PersistentStore(path, **kwargs)

    return _make
