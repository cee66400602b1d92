"""
dotstore - hierarchical key/value stores persisted as YAML snapshots.

Values live in a PathTree addressed by dotted paths (``"ui.theme"``).
A PersistentStore binds a tree to a named snapshot file and writes it
back only when its content changed.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("dotstore")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from dotstore.config import Settings  # noqa: E402
from dotstore.store import PersistentStore  # noqa: E402
from dotstore.tree import PathTree  # noqa: E402

__all__ = ["__version__", "__version_info__", "PathTree", "PersistentStore", "Settings"]
