"""
Shared constants for dotstore.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Path handling
DEFAULT_DELIMITER = "."
"""Default separator between path segments."""

PRIMARY_VALUE_KEY = "[=]"
"""Key carrying a branch's primary value in the raw (plain dict) form.

When a scalar is stored at a path and children are later added beneath
it, the scalar is kept as the branch's primary value. Raw reads, snapshot
data and the content hash render it under this key.
"""

MODIFIER_RAW = ":"
"""Trailing key modifier: return the raw subtree including primary markers."""

MODIFIER_CLEAN = "."
"""Trailing key modifier: return the subtree with primary markers stripped."""

# Snapshot handling
SNAPSHOT_GENERATOR = "dotstore.store.PersistentStore"
"""Generator identity written into every snapshot."""

SNAPSHOT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
"""Human-readable format of the snapshot ``generated`` field."""

DEFAULT_CACHE_SUFFIX = ".cache"
"""Suffix appended to a snapshot path for its compiled cache sidecar."""
