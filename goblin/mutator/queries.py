"""Read-only queries over a folder of generated modules.

The orchestrators use these to offer "existing" entities to the operator:
models with a ``uuid`` column, repositories exposing ``with_tx``, service
factories, and middleware functions.
"""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass
from pathlib import Path

from .source import SourceModule


@dataclass(frozen=True)
class DeclarationRef:
    """A named top-level declaration and the file it lives in."""

    name: str
    path: Path

    @property
    def module_name(self) -> str:
        return self.path.stem


def _modules_in(directory: Path) -> list[SourceModule]:
    if not directory.is_dir():
        return []
    return [
        SourceModule.load(p)
        for p in sorted(directory.glob("*.py"))
        if p.name != "__init__.py"
    ]


def find_classes_with_field(
    directory: str | Path,
    field_name: str,
    annotation: str | None = None,
) -> list[DeclarationRef]:
    """Return classes declaring an annotated attribute *field_name*.

    When *annotation* is given the attribute must be annotated with it,
    either bare (``uuid: str``) or wrapped (``uuid: Mapped[str]``).
    """
    found: list[DeclarationRef] = []
    for module in _modules_in(Path(directory)):
        for node in module.tree.body:
            if not isinstance(node, ast.ClassDef):
                continue
            for stmt in node.body:
                if (
                    isinstance(stmt, ast.AnnAssign)
                    and isinstance(stmt.target, ast.Name)
                    and stmt.target.id == field_name
                    and (annotation is None or _annotation_matches(stmt.annotation, annotation))
                ):
                    found.append(DeclarationRef(node.name, module.path))
                    break
    return found


def _annotation_matches(node: ast.expr, expected: str) -> bool:
    if ast.unparse(node) == expected:
        return True
    return isinstance(node, ast.Subscript) and ast.unparse(node.slice) == expected


def find_classes_with_method(directory: str | Path, method_name: str) -> list[DeclarationRef]:
    """Return concrete (non-``Protocol``) classes that define *method_name*."""
    found: list[DeclarationRef] = []
    for module in _modules_in(Path(directory)):
        for node in module.tree.body:
            if not isinstance(node, ast.ClassDef) or _is_protocol(node):
                continue
            if any(
                isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)) and stmt.name == method_name
                for stmt in node.body
            ):
                found.append(DeclarationRef(node.name, module.path))
    return found


def _is_protocol(node: ast.ClassDef) -> bool:
    return any(ast.unparse(base).split(".")[-1].startswith("Protocol") for base in node.bases)


def list_class_methods(
    path: str | Path,
    class_name: str,
    exclude: tuple[str, ...] = (),
) -> list[str]:
    """Return the public method names of *class_name* in source order."""
    cls = SourceModule.load(path).find_class(class_name)
    return [
        stmt.name for stmt in cls.body
        if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef))
        and not stmt.name.startswith("_")
        and stmt.name not in exclude
    ]


def find_functions(
    directory: str | Path,
    pattern: str,
    exclude: tuple[str, ...] = (),
) -> list[DeclarationRef]:
    """Return top-level functions whose name fully matches the regex *pattern*."""
    regex = re.compile(pattern)
    found: list[DeclarationRef] = []
    for module in _modules_in(Path(directory)):
        for node in module.tree.body:
            if (
                isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef))
                and regex.fullmatch(node.name)
                and node.name not in exclude
            ):
                found.append(DeclarationRef(node.name, module.path))
    return found
