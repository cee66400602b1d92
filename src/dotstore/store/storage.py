"""
File storage backend for snapshots.

The store only needs three operations from its backing artifact:
``exists``, ``read`` and ``write``. ``FileStorage`` provides them for a
local file; anything matching the ``Storage`` protocol can be injected
instead.
"""

from __future__ import annotations

import pathlib as _pathlib
import typing as _typing


@_typing.runtime_checkable
class Storage(_typing.Protocol):
    """Minimal interface a store needs from its backing artifact."""

    def exists(self) -> bool: ...

    def read(self) -> str: ...

    def write(self, text: str) -> None: ...


class FileStorage:
    """
    A snapshot file on the local filesystem.

    Writes rewrite the whole file in place. There is no write-then-rename
    step, so a crash in the middle of a write can leave a truncated file
    behind.
    """

    def __init__(self, path: _pathlib.Path | str) -> None:
        self._path = _pathlib.Path(path)

    @property
    def path(self) -> _pathlib.Path:
        """Location of the snapshot file."""
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def read(self) -> str:
        return self._path.read_text(encoding="utf-8")

    def write(self, text: str) -> None:
        """Write the full file, creating parent directories as needed."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(text, encoding="utf-8")

    def __repr__(self) -> str:
        return f"FileStorage({str(self._path)!r})"
