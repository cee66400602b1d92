"""
Read-only views over a PathTree.

``TreeView`` is a live view of a branch: it reads the tree on every
access, renders branches in raw form (a primary value appears under
``PRIMARY_VALUE_KEY``) and refuses mutation. Lists are wrapped in
``FrozenSequence`` so nested containers are read-only too.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import dotstore.constants as constants
import dotstore.tree._nodes as _nodes


class TreeView(_abc.Mapping[str, _typing.Any]):
    """
    Live read-only mapping view of a ``Branch``.

    Example:
        >>> tree = PathTree({"a": {"b": 1}})
        >>> view = tree.all()
        >>> view["a"]["b"]
        1
        >>> _ = tree.set("a.c", 2)
        >>> dict(view["a"])
        {'b': 1, 'c': 2}
        >>> view["a"]["b"] = 99  # TypeError: immutable
    """

    __slots__ = ("_branch",)

    def __init__(self, branch: _nodes.Branch) -> None:
        self._branch = branch

    def __getitem__(self, key: str) -> _typing.Any:
        """Get a child, wrapping branches and lists in read-only views."""
        if key == constants.PRIMARY_VALUE_KEY and self._branch.has_primary:
            return freeze(self._branch.primary)
        return freeze(self._branch.children[key])

    def __iter__(self) -> _typing.Iterator[str]:
        """Iterate over keys, primary marker first."""
        if self._branch.has_primary:
            yield constants.PRIMARY_VALUE_KEY
        yield from self._branch.children

    def __len__(self) -> int:
        return len(self._branch.children) + (1 if self._branch.has_primary else 0)

    def __contains__(self, key: object) -> bool:
        if key == constants.PRIMARY_VALUE_KEY:
            return self._branch.has_primary
        return key in self._branch.children

    def __repr__(self) -> str:
        return f"TreeView({_nodes.to_plain(self._branch)!r})"

    def __eq__(self, other: object) -> bool:
        """Compare equal to any Mapping with the same raw content."""
        if isinstance(other, _abc.Mapping):
            return dict(self) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        """TreeView is not hashable (the tree behind it is mutable)."""
        raise TypeError(f"unhashable type: '{type(self).__name__}'")


class FrozenSequence(_abc.Sequence[_typing.Any]):
    """Read-only view of a list stored in the tree."""

    __slots__ = ("_data",)

    def __init__(self, data: _abc.Sequence[_typing.Any]) -> None:
        self._data = data

    @_typing.overload
    def __getitem__(self, index: int) -> _typing.Any: ...

    @_typing.overload
    def __getitem__(self, index: slice) -> FrozenSequence: ...

    def __getitem__(self, index: int | slice) -> _typing.Any:
        """Get an item or slice, freezing nested containers."""
        value = self._data[index]
        if isinstance(index, slice):
            return FrozenSequence(value)
        return freeze(value)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FrozenSequence({list(self._data)!r})"

    def __eq__(self, other: object) -> bool:
        """Compare equal to any Sequence with same content (except strings)."""
        if isinstance(other, (str, bytes)):
            return NotImplemented
        if isinstance(other, _abc.Sequence):
            return list(self) == list(other)
        return NotImplemented

    def __hash__(self) -> int:
        raise TypeError(f"unhashable type: '{type(self).__name__}'")


def freeze(value: _typing.Any) -> _typing.Any:
    """
    Wrap a node or mutable container in a read-only view.

    - Branch → TreeView (live)
    - Mapping leaf → TreeView over a converted copy
    - list → FrozenSequence
    - Everything else returned as-is
    """
    if isinstance(value, (TreeView, FrozenSequence)):
        return value
    if isinstance(value, _nodes.Branch):
        return TreeView(value)
    if isinstance(value, _abc.Mapping):
        return TreeView(_nodes.from_plain(value))
    if isinstance(value, list):
        return FrozenSequence(value)
    return value
