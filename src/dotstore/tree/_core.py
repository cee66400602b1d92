"""
PathTree: a nested mapping addressed by delimited path strings.

Paths are split on a delimiter (default ``.``)::

    >>> tree = PathTree()
    >>> _ = tree.set("user.name", "Ana")
    >>> tree.get("user.name")
    'Ana'

A path can hold a scalar and, later, children beneath it. Setting a
child under a scalar turns the scalar into the branch's primary value
instead of discarding it::

    >>> _ = tree.set("theme", "dark")
    >>> _ = tree.set("theme.accent", "teal")
    >>> tree.get("theme")          # primary value
    'dark'
    >>> tree.get("theme.")         # children only
    {'accent': 'teal'}
    >>> tree.get("theme:")         # raw form
    {'[=]': 'dark', 'accent': 'teal'}

Thread safety: NOT thread-safe. Use external synchronization if the
tree is shared between threads.
"""

from __future__ import annotations

import collections.abc as _abc
import copy as _copy
import typing as _typing

import dotstore.constants as constants
import dotstore.tree._frozen as _frozen
import dotstore.tree._keys as _keys
import dotstore.tree._nodes as _nodes


class PathTree:
    """
    In-memory nested mapping with dot-notation path operations.

    Values are copied on the way in and out: mutating a value returned
    by ``get`` never changes the tree, and mutating a dict after passing
    it to ``set`` never changes the tree either. Mappings are stored as
    branches; every other value is a leaf.

    Args:
        data: Initial content. A PathTree, a mapping, a list/tuple
            (enumerated into ``"0"``, ``"1"``, ... keys) or a scalar
            (stored under ``"0"``). See ``normalize``.
        parse: If True, keys of ``data`` are treated as paths and set one
            by one (``{"a.b": 1}`` becomes ``{"a": {"b": 1}}``). If False,
            the data replaces the root as-is and dotted keys stay literal.
        delimiter: Path segment separator. Must not be empty.

    Raises:
        ValueError: If ``delimiter`` is empty.
    """

    def __init__(
        self,
        data: _typing.Any = None,
        *,
        parse: bool = False,
        delimiter: str = constants.DEFAULT_DELIMITER,
    ) -> None:
        if not delimiter:
            raise ValueError(f"{type(self).__name__} delimiter cannot be empty.")

        self._delimiter = delimiter
        self._root = _nodes.Branch()
        self.replace(data, parse=parse)

    @property
    def delimiter(self) -> str:
        """The path segment separator."""
        return self._delimiter

    def replace(self, data: _typing.Any, *, parse: bool = False) -> PathTree:
        """
        Replace the tree's content with ``data``.

        Args:
            data: New content, normalized with ``normalize``.
            parse: If True, merge the pairs through ``set`` instead of
                replacing the root outright.

        Returns:
            self, for chaining.
        """
        items = self.normalize(data)
        if parse:
            return self.set(items)

        # Update the existing root in place so live views stay attached
        new_root = _root_from_plain(items)
        self._root.children = new_root.children
        self._root.primary = new_root.primary
        return self

    @staticmethod
    def normalize(items: _typing.Any) -> dict[str, _typing.Any]:
        """
        Return the given items as a plain mapping.

        - PathTree → its raw plain dict
        - Mapping → shallow dict copy
        - list/tuple → ``{"0": first, "1": second, ...}``
        - None → empty dict
        - any other value (strings included) → ``{"0": value}``
        """
        if isinstance(items, PathTree):
            return items.to_dict()
        if items is None:
            return {}
        if isinstance(items, _abc.Mapping):
            return dict(items)
        if isinstance(items, (list, tuple)):
            return {str(index): item for index, item in enumerate(items)}
        return {"0": items}

    # =========================================================================
    # Assign
    # =========================================================================

    def set(self, keys: _typing.Any, value: _typing.Any = None) -> PathTree:
        """
        Set a value at a path, or several key/value pairs at once.

        Missing segments are created as empty branches. A scalar found at
        an intermediate segment becomes that branch's primary value, so it
        survives being shadowed by children. The final segment is replaced
        outright (no merge).

        Args:
            keys: A path string, or a mapping of path → value.
            value: The value to store (ignored when ``keys`` is a mapping).

        Returns:
            self, for chaining.

        Raises:
            EmptyKeyError: If any key is empty. Nothing is set in that case.
        """
        if isinstance(keys, _abc.Mapping):
            pairs = list(keys.items())
            for key, _ in pairs:
                _keys.check_key(key)
            for key, item in pairs:
                self._set_one(key, item)
            return self

        self._set_one(keys, value)
        return self

    def add(self, keys: _typing.Any, value: _typing.Any = None) -> PathTree:
        """
        Set a value only where the path does not resolve to a value yet.

        A path counts as unset when ``get(key)`` returns ``None``. A branch
        holding only a primary value is therefore *not* unset.

        Args:
            keys: A path string, or a mapping of path → value.
            value: The value to store (ignored when ``keys`` is a mapping).

        Returns:
            self, for chaining.
        """
        if isinstance(keys, _abc.Mapping):
            pairs = list(keys.items())
            for key, _ in pairs:
                _keys.check_key(key)
            for key, item in pairs:
                self.add(key, item)
            return self

        if self.get(keys) is None:
            self._set_one(keys, value)
        return self

    def push(self, key: _typing.Any, value: _typing.Any = _nodes.UNSET) -> PathTree:
        """
        Append a value to the list stored at a path.

        With a single argument, ``key`` itself is appended to the root at
        the next sequential position (like ``tree[None] = key``).

        Args:
            key: Path of the list.
            value: Value to append. A missing or ``None`` value at the path
                starts a new list.

        Returns:
            self, for chaining.

        Raises:
            TypeError: If the path holds a value that is not a list.
        """
        if value is _nodes.UNSET:
            self._append(key)
            return self

        current = self.get(key)
        if current is None:
            items: list[_typing.Any] = []
        elif isinstance(current, (list, tuple)):
            items = list(current)
        else:
            raise TypeError(
                f"Cannot push onto {type(current).__name__} value at {key!r}; "
                "expected a list"
            )

        items.append(value)
        self._set_one(key, items)
        return self

    # =========================================================================
    # Access
    # =========================================================================

    def has(self, keys: _typing.Any) -> bool:
        """
        Check that every given key exists.

        A key exists if it is an exact top-level key, or if every segment
        of its path resolves through branches. Modifiers are not parsed.

        Args:
            keys: One key or a list of keys.

        Returns:
            True only if all keys exist. False for an empty key list or an
            empty tree.
        """
        key_list = _keys.check_keys(keys)
        if not self._root.children or not key_list:
            return False

        for key in key_list:
            if key in self._root.children:
                continue

            node: _typing.Any = self._root
            for segment in key.split(self._delimiter):
                if not isinstance(node, _nodes.Branch) or segment not in node.children:
                    return False
                node = node.children[segment]

        return True

    def get(self, key: _typing.Any, default: _typing.Any = None) -> _typing.Any:
        """
        Return the value at a path.

        A trailing modifier selects how a branch is returned:

        - ``"key:"`` the raw subtree, primary markers included
        - ``"key."`` the subtree with primary markers removed at every depth
        - ``"key"`` the branch's primary value if it has one, otherwise the
          same as ``"key."``

        Leaves are returned as-is in every mode.

        Args:
            key: Path, optionally ending with a modifier.
            default: Returned when any segment of the path is missing.

        Returns:
            An independent copy of the stored value, or ``default``.

        Raises:
            EmptyKeyError: If the key is empty.
        """
        path, mode = _keys.parse_key(key, self._delimiter)
        node = self._resolve(path)

        if node is _nodes.UNSET:
            return default
        if not isinstance(node, _nodes.Branch):
            return _copy.deepcopy(node)
        if mode is _keys.ReadMode.RAW:
            return _nodes.to_plain(node, raw=True)
        if mode is _keys.ReadMode.PRIMARY and node.has_primary:
            return _copy.deepcopy(node.primary)
        return _nodes.to_plain(node, raw=False)

    def pull(self, key: _typing.Any = None, default: _typing.Any = None) -> _typing.Any:
        """
        Return the value at a path and delete it.

        Args:
            key: Path, optionally with a modifier. If omitted, the whole
                tree is returned (raw form) and cleared.
            default: Returned when the path is missing.
        """
        if key is None:
            value = self.to_dict()
            self.clear()
            return value

        path, _ = _keys.parse_key(key, self._delimiter)
        value = self.get(key, default)
        if path:
            self.delete(path)
        return value

    def flatten(
        self,
        delimiter: str = constants.DEFAULT_DELIMITER,
        subtree: _typing.Any = None,
        prefix: str = "",
    ) -> dict[str, _typing.Any]:
        """
        Flatten the tree into a single-level dict with joined keys.

        Empty branches are kept as ``{}``. A primary value is emitted
        under its branch's own path, ahead of the branch's children.

        Args:
            delimiter: Separator used to join keys.
            subtree: Flatten this mapping or PathTree instead of the tree.
            prefix: Prepended to every key.

        Returns:
            Dict of joined path → value.

        Example:
            >>> PathTree({"a": {"[=]": 1, "b": 2}, "c": {}}).flatten()
            {'a': 1, 'a.b': 2, 'c': {}}
        """
        if subtree is None:
            branch = self._root
        elif isinstance(subtree, PathTree):
            branch = subtree._root
        else:
            branch = _root_from_plain(self.normalize(subtree))

        flat: dict[str, _typing.Any] = {}
        self._flatten_into(flat, branch, delimiter, prefix)
        return flat

    def _flatten_into(
        self,
        flat: dict[str, _typing.Any],
        branch: _nodes.Branch,
        delimiter: str,
        prefix: str,
    ) -> None:
        """Recursive worker for ``flatten``."""
        if branch.has_primary:
            flat[prefix.strip(delimiter)] = _copy.deepcopy(branch.primary)

        for key, child in branch.children.items():
            if isinstance(child, _nodes.Branch) and not child.is_empty():
                self._flatten_into(flat, child, delimiter, prefix + key + delimiter)
            else:
                flat[prefix + key] = _nodes.to_plain(child)

    def all(self) -> _frozen.TreeView:
        """
        Return a live read-only view of the whole tree.

        The view reflects later changes to the tree. Use ``to_dict`` for an
        independent copy.
        """
        return _frozen.TreeView(self._root)

    def to_dict(self, *, raw: bool = True) -> dict[str, _typing.Any]:
        """
        Return the whole tree as an independent plain dict.

        Args:
            raw: If True (default), primary values are kept under the
                ``"[=]"`` key. If False, they are dropped.
        """
        result: dict[str, _typing.Any] = _nodes.to_plain(self._root, raw=raw)
        return result

    def items(self) -> _typing.Iterator[tuple[str, _typing.Any]]:
        """Iterate over (top-level key, raw value) pairs in insertion order."""
        for key, child in list(self._root.children.items()):
            yield key, _nodes.to_plain(child)

    def copy(self) -> PathTree:
        """Return an independent copy with the same delimiter."""
        return PathTree(self.to_dict(), delimiter=self._delimiter)

    # =========================================================================
    # Destructive
    # =========================================================================

    def delete(self, keys: _typing.Any) -> PathTree:
        """
        Delete one key or a list of keys.

        Keys whose parent path does not exist (or is not a branch) are
        skipped silently. Modifiers are not parsed.

        Returns:
            self, for chaining.
        """
        for key in _keys.check_keys(keys):
            if key in self._root.children:
                del self._root.children[key]
                continue

            *parents, last = key.split(self._delimiter)
            node = self._root
            for segment in parents:
                child = node.children.get(segment)
                if not isinstance(child, _nodes.Branch):
                    break
                node = child
            else:
                node.children.pop(last, None)

        return self

    def clear(self, keys: _typing.Any = None) -> PathTree:
        """
        Clear the whole tree, or reset the given keys to empty branches.

        Unlike ``delete``, clearing a key keeps it in the tree, mapped to
        an empty mapping.

        Returns:
            self, for chaining.
        """
        if keys is None:
            self._root.children = {}
            self._root.primary = _nodes.UNSET
            return self

        for key in _keys.check_keys(keys):
            self._set_one(key, {})
        return self

    # =========================================================================
    # Internal
    # =========================================================================

    def _set_one(self, key: _typing.Any, value: _typing.Any) -> None:
        """Set a single path, converting intermediate scalars to primaries."""
        segments = _keys.split_key(key, self._delimiter)
        if isinstance(value, PathTree):
            value = value.to_dict()

        node = self._root
        for segment in segments[:-1]:
            child = node.children.get(segment)
            if child is None:
                child = _nodes.Branch()
                node.children[segment] = child
            elif not isinstance(child, _nodes.Branch):
                child = _nodes.Branch(primary=child)
                node.children[segment] = child
            node = child

        node.children[segments[-1]] = _nodes.from_plain(value)

    def _resolve(self, path: str) -> _typing.Any:
        """Return the node at a path, or UNSET if any segment is missing."""
        if path in self._root.children:
            return self._root.children[path]

        node: _typing.Any = self._root
        for segment in path.split(self._delimiter):
            if not isinstance(node, _nodes.Branch) or segment not in node.children:
                return _nodes.UNSET
            node = node.children[segment]
        return node

    def _append(self, value: _typing.Any) -> None:
        """Store a value at the root under the next sequential index."""
        indexes = [int(key) for key in self._root.children if key.isdecimal()]
        next_index = max(indexes) + 1 if indexes else 0
        self._root.children[str(next_index)] = _nodes.from_plain(value)

    # =========================================================================
    # Python protocols
    # =========================================================================

    def __getitem__(self, key: _typing.Any) -> _typing.Any:
        """``get(key)``, raising KeyError instead of returning a default."""
        value = self.get(key, _nodes.UNSET)
        if value is _nodes.UNSET:
            raise KeyError(key)
        return value

    def __setitem__(self, key: _typing.Any, value: _typing.Any) -> None:
        """``set(key, value)``; a falsy key appends at the next index."""
        if not key:
            self._append(value)
        else:
            self._set_one(key, value)

    def __delitem__(self, key: _typing.Any) -> None:
        self.delete(key)

    def __contains__(self, key: object) -> bool:
        return self.has(key)

    def __iter__(self) -> _typing.Iterator[str]:
        """Iterate over top-level keys in insertion order."""
        return iter(list(self._root.children))

    def __len__(self) -> int:
        return len(self._root.children)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PathTree):
            return self.to_dict() == other.to_dict()
        if isinstance(other, _abc.Mapping):
            return self.to_dict() == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"


def _root_from_plain(items: dict[str, _typing.Any]) -> _nodes.Branch:
    """
    Convert plain data into a root branch.

    The root has no path of its own to carry a primary value, so a
    top-level ``"[=]"`` entry stays an ordinary top-level key.
    """
    root: _nodes.Branch = _nodes.from_plain(items)
    if root.has_primary:
        root.children = {constants.PRIMARY_VALUE_KEY: root.primary, **root.children}
        root.primary = _nodes.UNSET
    return root
