"""
Checks that the source tree follows the project's import conventions.

External modules are imported as ``import x as _x``, internal ones as
``import dotstore.x as x``. ``from`` imports are only allowed in package
``__init__.py`` files (for re-exports) and for ``__future__``.
"""

import ast as _ast
import pathlib as _pathlib

import pytest as _pytest

ROOT_DIR = _pathlib.Path(__file__).resolve().parent.parent
SRC_DIR = ROOT_DIR / "src" / "dotstore"
TESTS_DIR = ROOT_DIR / "tests"
INTERNAL_PACKAGE = "dotstore"


def _python_files(directory: _pathlib.Path) -> list[_pathlib.Path]:
    return sorted(p for p in directory.rglob("*.py") if "__pycache__" not in p.parts)


def _is_type_checking_block(node: _ast.AST) -> bool:
    """True for ``if TYPE_CHECKING:`` and ``if typing.TYPE_CHECKING:``."""
    if not isinstance(node, _ast.If):
        return False
    test = node.test
    if isinstance(test, _ast.Name):
        return test.id == "TYPE_CHECKING"
    if isinstance(test, _ast.Attribute):
        return test.attr == "TYPE_CHECKING"
    return False


def _walk_runtime(tree: _ast.AST) -> list[_ast.AST]:
    """All nodes, except those inside TYPE_CHECKING blocks."""
    nodes: list[_ast.AST] = []
    stack: list[_ast.AST] = [tree]
    while stack:
        node = stack.pop()
        if _is_type_checking_block(node):
            continue
        nodes.append(node)
        stack.extend(_ast.iter_child_nodes(node))
    return nodes


def _import_violations(source: str, *, is_init: bool = False) -> list[tuple[int, str]]:
    """Return ``(line, statement)`` for each import that breaks the conventions."""
    violations: list[tuple[int, str]] = []
    for node in _walk_runtime(_ast.parse(source)):
        if isinstance(node, _ast.ImportFrom):
            if node.module == "__future__" or is_init:
                continue
            violations.append((node.lineno, _ast.unparse(node)))
        elif isinstance(node, _ast.Import):
            for alias in node.names:
                if alias.name.split(".")[0] == INTERNAL_PACKAGE:
                    continue
                if alias.asname is None or not alias.asname.startswith("_"):
                    violations.append((node.lineno, _ast.unparse(node)))
                    break
    return sorted(violations)


def _bare_excepts(source: str) -> list[int]:
    return sorted(
        node.lineno
        for node in _ast.walk(_ast.parse(source))
        if isinstance(node, _ast.ExceptHandler) and node.type is None
    )


def _collect(directory: _pathlib.Path, *, skip: tuple[str, ...] = ()) -> list[str]:
    found: list[str] = []
    for path in _python_files(directory):
        if path.name in skip:
            continue
        source = path.read_text(encoding="utf-8")
        for line, statement in _import_violations(source, is_init=path.name == "__init__.py"):
            found.append(f"{path.relative_to(ROOT_DIR)}:{line}: {statement}")
    return found


class TestImportStyle:
    """The repository follows its own import conventions."""

    def test_src_follows_import_style(self) -> None:
        """Source modules use aliased imports only."""
        violations = _collect(SRC_DIR)
        assert not violations, "Import style violations:\n" + "\n".join(violations)

    def test_tests_follow_import_style(self) -> None:
        """Test modules use aliased imports only."""
        violations = _collect(TESTS_DIR, skip=("test_coding_standards.py",))
        assert not violations, "Import style violations:\n" + "\n".join(violations)

    def test_src_has_no_bare_except(self) -> None:
        """Source modules never use a bare ``except:``."""
        found = [
            f"{path.relative_to(ROOT_DIR)}:{line}"
            for path in _python_files(SRC_DIR)
            for line in _bare_excepts(path.read_text(encoding="utf-8"))
        ]
        assert not found, "Bare except clauses:\n" + "\n".join(found)


class TestViolationDetection:
    """The checker itself flags what it should."""

    def test_detects_from_import(self) -> None:
        """A from import outside __init__.py is flagged."""
        assert _import_violations("from pathlib import Path\n") == [(1, "from pathlib import Path")]

    def test_allows_future_import(self) -> None:
        """``from __future__`` is always allowed."""
        assert _import_violations("from __future__ import annotations\n") == []

    def test_allows_reexports_in_init(self) -> None:
        """Package __init__ files may re-export with from imports."""
        assert _import_violations("from dotstore.tree._core import PathTree\n", is_init=True) == []

    def test_ignores_type_checking_block(self) -> None:
        """Imports needed only for type checking are exempt."""
        source = "import typing as _typing\nif _typing.TYPE_CHECKING:\n    from logging import Logger\n"
        assert _import_violations(source) == []

    def test_detects_import_after_type_checking(self) -> None:
        """Code after a TYPE_CHECKING block is still checked."""
        source = "if TYPE_CHECKING:\n    from logging import Logger\nfrom os import path\n"
        assert _import_violations(source) == [(3, "from os import path")]

    @_pytest.mark.parametrize(
        ("source", "lines"),
        [
            ("import json\nimport yaml as yml\nimport dotstore.tree as tree\n", [1, 2]),
            ("import json as _json\nimport dotstore\n", []),
        ],
    )
    def test_requires_underscore_alias_for_external(self, source: str, lines: list[int]) -> None:
        """External modules need an underscore alias; internal ones do not."""
        assert [line for line, _ in _import_violations(source)] == lines

    def test_detects_bare_except(self) -> None:
        """A bare except clause is reported by line."""
        assert _bare_excepts("try:\n    pass\nexcept:\n    pass\n") == [3]
