"""Architectural tests for the tiddler server.

Static, file/AST-based checks: they read source files under the package and
never import or execute application code.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Iterable, Set

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[2]
PACKAGE = PROJECT_ROOT / "tiddly"


def _parse(path: Path) -> ast.Module:
    try:
        return ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    except (OSError, SyntaxError) as exc:
        pytest.fail(f"Failed to parse {path}: {exc}")


def _imported_modules(tree: ast.Module) -> Set[str]:
    names: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.add(node.module)
    return names


def _py_files(root: Path) -> Iterable[Path]:
    return sorted(p for p in root.rglob("*.py") if "__pycache__" not in p.parts)


def test_routes_do_not_touch_the_database_directly():
    for path in _py_files(PACKAGE / "routes"):
        offending = {m for m in _imported_modules(_parse(path)) if m.startswith(("sqlalchemy", "tiddly.db"))}
        assert not offending, f"{path.name} imports {sorted(offending)}"


def test_logic_does_not_depend_on_fastapi():
    for path in _py_files(PACKAGE / "logic"):
        offending = {m for m in _imported_modules(_parse(path)) if m.startswith("fastapi")}
        assert not offending, f"{path.name} imports {sorted(offending)}"


def test_meta_json_is_parsed_only_in_payload_module():
    """json.loads on tiddler data lives in logic/payload.py only."""
    allowed = {PACKAGE / "logic" / "payload.py", PACKAGE / "config.py"}
    for path in _py_files(PACKAGE):
        if path in allowed:
            continue
        for node in ast.walk(_parse(path)):
            if isinstance(node, ast.Attribute) and node.attr == "loads":
                if isinstance(node.value, ast.Name) and node.value.id == "json":
                    pytest.fail(f"json.loads used in {path.relative_to(PROJECT_ROOT)}")


def test_no_print_calls_in_package():
    for path in _py_files(PACKAGE):
        for node in ast.walk(_parse(path)):
            if isinstance(node, ast.Call) and isinstance(node.func, ast.Name) and node.func.id == "print":
                pytest.fail(f"print() in {path.relative_to(PROJECT_ROOT)}; use logging")


def test_no_bare_except_in_package():
    for path in _py_files(PACKAGE):
        for node in ast.walk(_parse(path)):
            if isinstance(node, ast.ExceptHandler) and node.type is None:
                pytest.fail(f"bare except in {path.relative_to(PROJECT_ROOT)}:{node.lineno}")


def test_bundled_assets_exist():
    assert (PACKAGE / "static" / "index.html").is_file()
    assert sorted(p.name for p in (PACKAGE / "db" / "migrations").glob("*.sql")) == ["001_entity.sql"]
