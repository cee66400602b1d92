"""
PersistentStore: a PathTree backed by a snapshot file.

The store reads its snapshot once, at construction, and writes it back
on ``save()`` only when the content hash changed. With autosave enabled,
leaving a ``with`` block (or calling ``close()``) saves a non-empty tree.

Example:
    >>> with PersistentStore("prefs.yaml") as store:
    ...     _ = store.set("theme", "dark")
    >>> PersistentStore("prefs.yaml").get("theme")
    'dark'

Thread safety: NOT thread-safe, and there is no locking between
processes. ``locked`` only guards against re-entering ``save()`` from the
same thread (e.g. from a logging handler).
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import time as _time
import types as _types
import typing as _typing

import dotstore.constants as constants
import dotstore.store.cache as _cache
import dotstore.store.errors as errors
import dotstore.store.snapshot as _snapshot
import dotstore.store.storage as _storage
import dotstore.tree as path_tree

Logger: _typing.TypeAlias = "_logging.Logger | _logging.LoggerAdapter[_typing.Any]"


class PersistentStore:
    """
    A named PathTree that persists itself as a YAML snapshot.

    Args:
        storage_path: Location of the snapshot file.
        name: Store identity, checked against the snapshot on load. If not
            given, the snapshot file name up to its first dot is used
            (``prefs.yaml`` → ``prefs``).
        readonly: Tracked and toggleable, but NOT enforced: mutations are
            never blocked.
        autosave: Save on ``close()`` / leaving a ``with`` block.
        logger: Optional diagnostics sink. Without one the store is silent,
            except that an unavailable cache becomes a hard error.
        cache: Compiled cache for the snapshot. Defaults to a
            ``CompiledSnapshotCache``; pass None to run without one.
        delimiter: Path delimiter of the owned tree.
        storage: Backend for the snapshot file. Defaults to
            ``FileStorage(storage_path)``. The compiled cache is keyed on
            ``storage_path`` and is only used with that default backend.

    Raises:
        StoreNameMismatchError: If the snapshot on disk has another name.
        SnapshotLoadError: If the snapshot on disk cannot be read.
    """

    def __init__(
        self,
        storage_path: _pathlib.Path | str,
        name: str | None = None,
        *,
        readonly: bool = False,
        autosave: bool = True,
        logger: Logger | None = None,
        cache: _cache.SnapshotCache | None | path_tree.UnsetType = path_tree.UNSET,
        delimiter: str = constants.DEFAULT_DELIMITER,
        storage: _storage.Storage | None = None,
    ) -> None:
        self._path = _pathlib.Path(storage_path)
        self._storage: _storage.Storage = (
            storage if storage is not None else _storage.FileStorage(self._path)
        )
        self._cache: _cache.SnapshotCache | None = (
            _cache.CompiledSnapshotCache() if cache is path_tree.UNSET else cache  # type: ignore[assignment]
        )
        self._readonly = readonly
        self._autosave = autosave
        self._logger = logger
        self._tree = path_tree.PathTree(delimiter=delimiter)
        self._closed = False

        self.locked = False
        self.stored_hash: str | None = None
        self.created_at: int = int(_time.time())

        self._name = self._resolve_name(name)
        self.load()

    # =========================================================================
    # Identity and flags
    # =========================================================================

    @property
    def name(self) -> str:
        """Store identity, written into and checked against the snapshot."""
        return self._name

    @property
    def path(self) -> _pathlib.Path:
        """Location of the snapshot file."""
        return self._path

    @property
    def tree(self) -> path_tree.PathTree:
        """The owned PathTree."""
        return self._tree

    @property
    def readonly(self) -> bool:
        return self._readonly

    @property
    def autosave(self) -> bool:
        return self._autosave

    def set_autosave(self, flag: bool = True) -> PersistentStore:
        """Enable or disable saving on close. Returns self."""
        self._autosave = flag
        return self

    def set_readonly(self, flag: bool = True) -> PersistentStore:
        """
        Set the readonly flag. Returns self.

        The flag is recorded only; no operation checks it yet.
        """
        self._readonly = flag
        return self

    def _resolve_name(self, name: str | None) -> str:
        """Return the explicit name, or one derived from the file name."""
        if name:
            return name
        return self._path.name.partition(".")[0] or self._path.stem

    # =========================================================================
    # Persistence
    # =========================================================================

    def load(self) -> PersistentStore:
        """
        Load the snapshot into the tree.

        Does nothing if the snapshot file does not exist, or if the tree
        already holds data (loading would discard it).

        Returns:
            self, for chaining.

        Raises:
            StoreNameMismatchError: If the snapshot belongs to another store.
            SnapshotLoadError: If the snapshot cannot be read or parsed.
        """
        if self._tree or not self._storage.exists():
            reason = "tree already set" if self._tree else "storage path not found"
            self._diagnose(_logging.INFO, "No data to load, %s.", reason)
            return self

        snapshot = self._read_snapshot()
        if snapshot.name != self._name:
            raise errors.StoreNameMismatchError(self._name, snapshot.name, self._path)

        self.stored_hash = snapshot.hash
        self.created_at = snapshot.timestamp
        self._tree.replace(snapshot.data)
        return self

    def _read_snapshot(self) -> _snapshot.Snapshot:
        """Read the snapshot, preferring a fresh compiled copy."""
        if self._cache is not None and self._cache.enabled and self._file_backed():
            try:
                cached = self._cache.load(self._path)
            except OSError as exc:
                self._diagnose(_logging.WARNING, "Compiled cache unreadable: %s", exc)
                cached = None
            if cached is not None:
                return cached

        try:
            text = self._storage.read()
        except OSError as exc:
            raise errors.SnapshotLoadError(self._path, f"cannot read: {exc}") from exc
        return _snapshot.parse(text, self._path)

    def save(self) -> bool:
        """
        Write the snapshot if the tree changed since it was last stored.

        Returns:
            True if the snapshot file was written, False if the content hash
            matched the stored one (or a save is already in progress).

        Raises:
            SnapshotExportError: If the tree cannot be serialized. Nothing
                is written in that case.
            CacheUnavailableError: If the snapshot was written but the
                compiled cache is unavailable and no logger is attached.
        """
        if self.locked:
            self._diagnose(_logging.WARNING, "Save of %s already in progress.", self._name)
            return False

        self.locked = True
        try:
            data = self._tree.to_dict()
            try:
                digest = _snapshot.content_hash(data)
            except (TypeError, ValueError) as exc:
                raise errors.SnapshotExportError(
                    f"Unable to hash the {self._name} snapshot: {exc}"
                ) from exc

            if digest == self.stored_hash:
                self._diagnose(_logging.INFO, "No need to save %s.", self._name)
                return False

            snapshot = _snapshot.Snapshot.create(
                self._name,
                data,
                path=self._path,
                hash=digest,
            )
            self._storage.write(_snapshot.render(snapshot))
            self.stored_hash = digest

            self._refresh_cache()
            return True
        finally:
            self.locked = False

    def _refresh_cache(self) -> None:
        """Invalidate and rebuild the compiled copy of the snapshot."""
        if self._cache is None or not self._cache.enabled:
            self._diagnose(
                _logging.CRITICAL,
                "Unable to use compiled cache for %s -> %s. Cache is disabled.",
                self._name,
                self._path,
            )
            if self._logger is None:
                raise errors.CacheUnavailableError(
                    f"Unable to use compiled cache for {self._name} -> {self._path}."
                )
            return

        if not self._file_backed():
            self._diagnose(
                _logging.DEBUG,
                "Compiled cache skipped for %s: storage is not the file at %s.",
                self._name,
                self._path,
            )
            return

        try:
            self._cache.invalidate(self._path)
            self._cache.precompile(self._path)
        except (OSError, errors.StoreError) as exc:
            self._diagnose(_logging.ERROR, "%s (file: %s)", exc, self._path)
            return

        self._diagnose(
            _logging.INFO,
            "Compiled cache rebuilt file '%s' successfully.",
            self._path,
        )

    def set_default(self, data: _typing.Any, override: bool = False) -> PersistentStore:
        """
        Seed the tree with defaults.

        Keys of ``data`` are parsed as paths and merged with ``set``. Only
        applies when the tree is empty, unless ``override`` is True.

        Returns:
            self, for chaining.
        """
        if self._tree and not override:
            return self
        self._tree.replace(data, parse=True)
        return self

    def close(self) -> bool:
        """
        Release the store, saving first if autosave is on.

        Only the first call has an effect.

        Returns:
            True if a snapshot was written.
        """
        if self._closed:
            return False
        self._closed = True

        if self._autosave and self._tree:
            return self.save()
        return False

    def _file_backed(self) -> bool:
        """True if the storage is the snapshot file the cache is keyed on."""
        return isinstance(self._storage, _storage.FileStorage) and self._storage.path == self._path

    def _diagnose(self, level: int, message: str, *args: _typing.Any) -> None:
        """Send a diagnostic to the attached logger, if any."""
        if self._logger is not None:
            self._logger.log(level, message, *args)

    # =========================================================================
    # Tree operations
    # =========================================================================

    def get(self, key: _typing.Any, default: _typing.Any = None) -> _typing.Any:
        return self._tree.get(key, default)

    def set(self, keys: _typing.Any, value: _typing.Any = None) -> PersistentStore:
        self._tree.set(keys, value)
        return self

    def add(self, keys: _typing.Any, value: _typing.Any = None) -> PersistentStore:
        self._tree.add(keys, value)
        return self

    def push(self, key: _typing.Any, value: _typing.Any = path_tree.UNSET) -> PersistentStore:
        self._tree.push(key, value)
        return self

    def has(self, keys: _typing.Any) -> bool:
        return self._tree.has(keys)

    def pull(self, key: _typing.Any = None, default: _typing.Any = None) -> _typing.Any:
        return self._tree.pull(key, default)

    def delete(self, keys: _typing.Any) -> PersistentStore:
        self._tree.delete(keys)
        return self

    def clear(self, keys: _typing.Any = None) -> PersistentStore:
        self._tree.clear(keys)
        return self

    def flatten(
        self,
        delimiter: str = constants.DEFAULT_DELIMITER,
        subtree: _typing.Any = None,
        prefix: str = "",
    ) -> dict[str, _typing.Any]:
        return self._tree.flatten(delimiter, subtree, prefix)

    def all(self) -> path_tree.TreeView:
        return self._tree.all()

    def to_dict(self, *, raw: bool = True) -> dict[str, _typing.Any]:
        return self._tree.to_dict(raw=raw)

    # =========================================================================
    # Python protocols
    # =========================================================================

    def __getitem__(self, key: _typing.Any) -> _typing.Any:
        return self._tree[key]

    def __setitem__(self, key: _typing.Any, value: _typing.Any) -> None:
        self._tree[key] = value

    def __delitem__(self, key: _typing.Any) -> None:
        del self._tree[key]

    def __contains__(self, key: object) -> bool:
        return key in self._tree

    def __iter__(self) -> _typing.Iterator[str]:
        return iter(self._tree)

    def __len__(self) -> int:
        return len(self._tree)

    def __enter__(self) -> PersistentStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: _types.TracebackType | None,
    ) -> None:
        if exc is None:
            self.close()
            return

        # Still save on the way out, but never mask the body's exception
        try:
            self.close()
        except Exception as close_exc:
            self._diagnose(_logging.ERROR, "Autosave of %s failed: %s", self._name, close_exc)
            exc.add_note(f"Autosave of {self._name} failed: {close_exc!r}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, path={str(self._path)!r})"
