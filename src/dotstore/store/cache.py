"""
Compiled snapshot cache.

Parsing YAML is slow compared to unpickling. After every successful save
the store asks its cache to drop the stale compiled copy of the snapshot
(``invalidate``) and build a new one (``precompile``). On the next load,
``load`` hands back the compiled copy if it still matches the file on
disk, and the YAML parse is skipped.

The compiled copy is a pickle sidecar next to the snapshot
(``prefs.yaml`` → ``prefs.yaml.cache``). It is produced and consumed
only by this package and lives under the same directory, and so the
same trust boundary, as the snapshot itself.
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import pickle as _pickle
import typing as _typing

import pydantic as _pydantic

import dotstore.constants as constants
import dotstore.store.errors as errors
import dotstore.store.snapshot as _snapshot

_logger = _logging.getLogger(__name__)


@_typing.runtime_checkable
class SnapshotCache(_typing.Protocol):
    """Interface of the acceleration layer used by PersistentStore."""

    @property
    def enabled(self) -> bool: ...

    def invalidate(self, path: _pathlib.Path) -> None: ...

    def precompile(self, path: _pathlib.Path) -> None: ...

    def load(self, path: _pathlib.Path) -> _snapshot.Snapshot | None: ...


class CompiledSnapshotCache:
    """
    Pickle sidecar cache for snapshot files.

    The sidecar records the snapshot file's modification time and size.
    A sidecar whose stamp no longer matches the file is ignored.

    Args:
        enabled: If False, the store treats the cache as unavailable.
        suffix: Appended to the snapshot path to name the sidecar.
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        suffix: str = constants.DEFAULT_CACHE_SUFFIX,
    ) -> None:
        if not suffix:
            raise ValueError("Cache suffix cannot be empty.")
        self._enabled = enabled
        self._suffix = suffix

    @property
    def enabled(self) -> bool:
        """Whether the cache may be used."""
        return self._enabled

    @property
    def suffix(self) -> str:
        return self._suffix

    def cache_path(self, path: _pathlib.Path | str) -> _pathlib.Path:
        """Return the sidecar path for a snapshot file."""
        return _pathlib.Path(f"{path}{self._suffix}")

    def invalidate(self, path: _pathlib.Path | str) -> None:
        """Remove the compiled copy of a snapshot, if any."""
        self.cache_path(path).unlink(missing_ok=True)

    def precompile(self, path: _pathlib.Path | str) -> None:
        """
        Parse a snapshot file and store the compiled copy.

        Raises:
            OSError: If the snapshot cannot be read or the sidecar written.
            SnapshotLoadError: If the snapshot file does not parse.
            CacheError: If the parsed snapshot cannot be pickled.
        """
        source = _pathlib.Path(path)
        snapshot = _snapshot.parse(source.read_text(encoding="utf-8"), source)
        payload = {
            "stamp": _stamp(source),
            "snapshot": snapshot.model_dump(),
        }

        try:
            blob = _pickle.dumps(payload, protocol=_pickle.HIGHEST_PROTOCOL)
        except (_pickle.PicklingError, TypeError, AttributeError) as exc:
            raise errors.CacheError(f"Unable to compile snapshot {source}: {exc}") from exc

        self.cache_path(source).write_bytes(blob)
        _logger.debug("Compiled snapshot %s", source)

    def load(self, path: _pathlib.Path | str) -> _snapshot.Snapshot | None:
        """
        Return the compiled snapshot if it is still fresh.

        Returns:
            The cached Snapshot, or None if there is no sidecar, the sidecar
            is unreadable, or the snapshot file changed since it was built.
        """
        source = _pathlib.Path(path)
        sidecar = self.cache_path(source)
        if not sidecar.is_file() or not source.is_file():
            return None

        try:
            payload = _pickle.loads(sidecar.read_bytes())
        except (OSError, _pickle.UnpicklingError, EOFError, AttributeError, ImportError) as exc:
            _logger.debug("Ignoring unreadable compiled snapshot %s: %s", sidecar, exc)
            return None

        if not isinstance(payload, dict) or payload.get("stamp") != _stamp(source):
            _logger.debug("Ignoring stale compiled snapshot %s", sidecar)
            return None

        try:
            return _snapshot.Snapshot.model_validate(payload.get("snapshot"))
        except _pydantic.ValidationError as exc:
            _logger.debug("Ignoring invalid compiled snapshot %s: %s", sidecar, exc)
            return None

    def __repr__(self) -> str:
        return f"CompiledSnapshotCache(enabled={self._enabled!r}, suffix={self._suffix!r})"


def _stamp(path: _pathlib.Path) -> tuple[int, int]:
    """Return (mtime_ns, size) of a file."""
    stat = path.stat()
    return (stat.st_mtime_ns, stat.st_size)
