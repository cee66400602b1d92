"""
Exception hierarchy for persistent stores.

Every store failure derives from StoreError. Errors that describe a bad
argument or a bad artifact additionally derive from the matching builtin
(ValueError, RuntimeError) so callers can catch either.
"""

from __future__ import annotations

import pathlib as _pathlib


class StoreError(Exception):
    """Base exception for all store failures."""

    pass


class SnapshotLoadError(StoreError):
    """Error reading or parsing a snapshot file."""

    def __init__(self, path: _pathlib.Path | str | None, message: str) -> None:
        self.path = path
        if path is None:
            super().__init__(f"Error in snapshot: {message}")
        else:
            super().__init__(f"Error in snapshot {path}: {message}")


class SnapshotExportError(StoreError):
    """Raised when a snapshot cannot be serialized. Nothing is written."""

    pass


class StoreNameMismatchError(StoreError, ValueError):
    """Raised when a snapshot on disk belongs to a differently named store."""

    def __init__(self, expected: str, found: str, path: _pathlib.Path | str) -> None:
        self.expected = expected
        self.found = found
        self.path = path
        super().__init__(
            f"Store name '{expected}' does not match '{found}' in snapshot {path}."
        )


class CacheError(StoreError):
    """Raised when the compiled cache cannot be written."""

    pass


class CacheUnavailableError(StoreError, RuntimeError):
    """Raised when the compiled cache is off and no logger would report it."""

    pass
