"""
Key parsing for PathTree.

A key string addresses a node by path. A trailing modifier on the key
selects how a branch is returned:

- ``"user:"`` raw subtree, primary markers included
- ``"user."`` subtree with primary markers stripped at every depth
- ``"user"``  primary value if the branch has one, else the stripped subtree

The modifier is read from the last character only, but the key is then
stripped of *all* leading and trailing delimiter and modifier characters.
``"..user:"`` therefore addresses ``"user"``.
"""

from __future__ import annotations

import enum as _enum
import typing as _typing

import dotstore.constants as constants


class EmptyKeyError(ValueError):
    """Raised when an empty string is used as a path key."""

    pass


class ReadMode(_enum.Enum):
    """How ``PathTree.get`` renders a branch."""

    RAW = "raw"
    """Full subtree, primary markers included."""

    PRIMARY = "primary"
    """Primary value if present, else the cleaned subtree."""

    CLEAN = "clean"
    """Subtree with primary markers stripped."""


def check_key(key: _typing.Any) -> str:
    """
    Validate a key and return it as a string.

    Non-string keys (e.g. integers) are converted with ``str()``.

    Raises:
        EmptyKeyError: If the key is an empty string.
    """
    text = key if isinstance(key, str) else str(key)
    if text == "":
        raise EmptyKeyError("Path key cannot be empty.")
    return text


def check_keys(keys: _typing.Any) -> list[str]:
    """
    Normalize one key or a collection of keys into a validated list.

    Every key is checked before the list is returned, so callers can
    apply mutations knowing no key will fail halfway through.
    """
    if isinstance(keys, (list, tuple, set, frozenset)):
        return [check_key(key) for key in keys]
    return [check_key(keys)]


def parse_key(key: _typing.Any, delimiter: str) -> tuple[str, ReadMode]:
    """
    Split a key into its path and read mode.

    Args:
        key: The key as passed by the caller, modifier included.
        delimiter: The tree's path delimiter.

    Returns:
        Tuple of (stripped path, read mode).

    Raises:
        EmptyKeyError: If the key is an empty string.
    """
    text = check_key(key)

    if text.endswith(constants.MODIFIER_RAW):
        mode = ReadMode.RAW
    elif text.endswith(constants.MODIFIER_CLEAN):
        mode = ReadMode.CLEAN
    else:
        mode = ReadMode.PRIMARY

    strip_chars = delimiter + constants.MODIFIER_RAW + constants.MODIFIER_CLEAN
    return text.strip(strip_chars), mode


def split_key(key: _typing.Any, delimiter: str) -> list[str]:
    """Validate a key and split it into path segments."""
    return check_key(key).split(delimiter)
