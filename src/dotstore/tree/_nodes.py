"""
Node types for PathTree.

A node is either a leaf (any value that is not a ``Branch``) or a
``Branch``: an ordered mapping of child nodes plus an optional primary
value. The primary value is what was stored at the branch's own path
before children were added beneath it.

Plain data (dicts, YAML, snapshots) uses the raw form, where a primary
value is carried under ``constants.PRIMARY_VALUE_KEY`` as the first key
of the mapping. ``from_plain`` and ``to_plain`` convert between the two.
"""

from __future__ import annotations

import collections.abc as _abc
import copy as _copy
import typing as _typing

import dotstore.constants as constants


class _UnsetType:
    """Sentinel type for "no value", distinct from ``None``."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<UNSET>"

    def __reduce__(self) -> tuple[_typing.Callable[[], _UnsetType], tuple[()]]:
        """Pickle support: ensure singleton is preserved."""
        return (_get_unset_singleton, ())


def _get_unset_singleton() -> _UnsetType:
    """Return the UNSET singleton. Called by pickle to reconstruct."""
    return UNSET


UNSET = _UnsetType()
UnsetType = _UnsetType


class Branch:
    """
    Interior node: ordered children plus an optional primary value.

    Attributes:
        children: Child nodes keyed by path segment, in insertion order.
        primary: The primary value, or ``UNSET`` when there is none.
    """

    __slots__ = ("children", "primary")

    def __init__(
        self,
        children: dict[str, _typing.Any] | None = None,
        primary: _typing.Any = UNSET,
    ) -> None:
        self.children: dict[str, _typing.Any] = {} if children is None else children
        self.primary: _typing.Any = primary

    @property
    def has_primary(self) -> bool:
        """True if a primary value is stored at this branch."""
        return self.primary is not UNSET

    def is_empty(self) -> bool:
        """True if the branch has neither children nor a primary value."""
        return not self.children and not self.has_primary

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Branch):
            return self.primary == other.primary and self.children == other.children
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self.has_primary:
            return f"Branch({self.children!r}, primary={self.primary!r})"
        return f"Branch({self.children!r})"


def from_plain(value: _typing.Any) -> _typing.Any:
    """
    Convert raw plain data into nodes.

    Mappings become ``Branch`` nodes (recursively); a
    ``PRIMARY_VALUE_KEY`` entry becomes the branch's primary value.
    Everything else is deep-copied and stored as a leaf.
    """
    if isinstance(value, Branch):
        return copy_node(value)
    if not isinstance(value, _abc.Mapping):
        return _copy.deepcopy(value)

    branch = Branch()
    for key, item in value.items():
        if key == constants.PRIMARY_VALUE_KEY:
            branch.primary = _copy.deepcopy(item)
        else:
            branch.children[str(key)] = from_plain(item)
    return branch


def to_plain(node: _typing.Any, *, raw: bool = True) -> _typing.Any:
    """
    Convert nodes back into independent plain data.

    Args:
        node: A ``Branch`` or leaf value.
        raw: If True, primary values are kept under ``PRIMARY_VALUE_KEY``
            (as the first key). If False, they are dropped at every depth.

    Returns:
        A deep copy in plain dict/list form.
    """
    if not isinstance(node, Branch):
        return _copy.deepcopy(node)

    result: dict[str, _typing.Any] = {}
    if raw and node.has_primary:
        result[constants.PRIMARY_VALUE_KEY] = _copy.deepcopy(node.primary)
    for key, child in node.children.items():
        result[key] = to_plain(child, raw=raw)
    return result


def copy_node(node: _typing.Any) -> _typing.Any:
    """Return an independent deep copy of a node."""
    if not isinstance(node, Branch):
        return _copy.deepcopy(node)
    return Branch(
        {key: copy_node(child) for key, child in node.children.items()},
        _copy.deepcopy(node.primary),
    )
