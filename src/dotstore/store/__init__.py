"""
Persistent stores for dotstore.

Handles snapshot files, the compiled snapshot cache, and the
PersistentStore that ties them to a PathTree.
"""

from dotstore.store.cache import CompiledSnapshotCache, SnapshotCache
from dotstore.store.errors import (
    CacheError,
    CacheUnavailableError,
    SnapshotExportError,
    SnapshotLoadError,
    StoreError,
    StoreNameMismatchError,
)
from dotstore.store.snapshot import Snapshot, content_hash
from dotstore.store.storage import FileStorage, Storage
from dotstore.store.store import PersistentStore

__all__ = [
    "CacheError",
    "CacheUnavailableError",
    "CompiledSnapshotCache",
    "FileStorage",
    "PersistentStore",
    "Snapshot",
    "SnapshotCache",
    "SnapshotExportError",
    "SnapshotLoadError",
    "Storage",
    "StoreError",
    "StoreNameMismatchError",
    "content_hash",
]
