"""
PathTree: nested mapping with dot-notation paths.

Example:
    >>> from dotstore.tree import PathTree
    >>> tree = PathTree()
    >>> _ = tree.set("user.name", "Ana").set("user.age", 30)
    >>> tree.get("user:")
    {'name': 'Ana', 'age': 30}
    >>> tree.has(["user.name", "user.age"])
    True
"""

from dotstore.tree._core import PathTree
from dotstore.tree._frozen import FrozenSequence, TreeView
from dotstore.tree._keys import EmptyKeyError, ReadMode
from dotstore.tree._nodes import UNSET, Branch, UnsetType

__all__ = [
    "UNSET",
    "Branch",
    "EmptyKeyError",
    "FrozenSequence",
    "PathTree",
    "ReadMode",
    "TreeView",
    "UnsetType",
]
