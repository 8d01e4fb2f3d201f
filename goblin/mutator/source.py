"""Parsed source modules and the deterministic pretty-printer.

A :class:`SourceModule` is the unit every structural edit works on: the file
is parsed once, the syntax tree is edited in place, and the tree is written
back only after the edit succeeded.  A failed edit therefore never touches
the file on disk.

Writing back splices rather than reprints.  Statements the edit did not touch
are copied from the original text together with their comments and blank
lines; only new or changed statements go through ``ast.unparse``.  A changed
class or function keeps its original header when only its body changed, and
its untouched members are copied the same way.

:func:`serialize` prints a whole tree with fixed spacing rules.  It is used
for trees that have no original text, and its output is a fixed point:
re-serialising a parsed copy yields identical bytes.
"""

from __future__ import annotations

import ast
import copy
import re
import textwrap
from pathlib import Path

from .errors import DeclarationNotFoundError, MutationError, SourceParseError

_DEFINITIONS = (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)
_IMPORTS = (ast.Import, ast.ImportFrom)

# ast.unparse leaves an empty line between a class or def header and a
# nested definition that opens its body.
_HEADER_GAP = re.compile(r"^([ \t]*(?:async def|def|class) .*:)\n\n", re.MULTILINE)


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------


def serialize(tree: ast.Module) -> str:
    """Render *tree* as source text.

    Top-level definitions are surrounded by two blank lines, the module
    docstring and the import block are followed by one, and the text ends
    with a single newline.
    """
    parts: list[str] = []
    previous: ast.stmt | None = None
    for index, node in enumerate(tree.body):
        if previous is not None:
            parts.append("\n" * _blank_lines(previous, node, top_level=True))
        parts.append(_render_new(node, "", module_docstring=index == 0) + "\n")
        previous = node
    return "".join(parts)


def _blank_lines(previous: ast.stmt, node: ast.stmt, top_level: bool) -> int:
    if isinstance(previous, _DEFINITIONS) or isinstance(node, _DEFINITIONS):
        return 2 if top_level else 1
    if _is_docstring(previous):
        return 1
    if not top_level:
        return 0
    if _is_future_import(previous) and not _is_future_import(node):
        return 1
    if isinstance(previous, _IMPORTS) and not isinstance(node, _IMPORTS):
        return 1
    return 0


def _unparse(node: ast.AST) -> str:
    return _HEADER_GAP.sub(r"\1\n", ast.unparse(node))


def _render_new(node: ast.stmt, indent: str, module_docstring: bool = False) -> str:
    if module_docstring and _is_docstring(node):
        # Wrapped so the unparser emits it as a triple-quoted docstring.
        text = _unparse(ast.Module(body=[node], type_ignores=[]))
    else:
        text = _unparse(node)
    return textwrap.indent(text, indent) if indent else text


def _is_docstring(node: ast.stmt) -> bool:
    return (
        isinstance(node, ast.Expr)
        and isinstance(node.value, ast.Constant)
        and isinstance(node.value.value, str)
    )


def _is_future_import(node: ast.stmt) -> bool:
    return isinstance(node, ast.ImportFrom) and node.module == "__future__"


# ---------------------------------------------------------------------------
# Splicing
# ---------------------------------------------------------------------------


def _first_line(node: ast.stmt) -> int:
    decorators = getattr(node, "decorator_list", None) or []
    return min([node.lineno, *(d.lineno for d in decorators)])


def _header_dump(node: ast.stmt) -> str:
    header = copy.copy(node)
    header.body = []
    return ast.dump(header)


def _is_blank_or_comment(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


class _Splicer:
    """Writes an edited tree back into the text it was parsed from."""

    def __init__(self, lines: list[str], snapshot: dict[int, tuple]) -> None:
        self.lines = lines
        self.snapshot = snapshot

    def module(self, tree: ast.Module) -> str | None:
        original = self._original_body(tree)
        if self._shares_lines(original):
            return None
        if not original:
            head = [*self.lines, "\n"] if any(line.strip() for line in self.lines) else []
            return "".join([*head, serialize(tree)]) if tree.body else "".join(self.lines)
        parts = self._block(tree.body, original, indent="", top_level=True, start=0)

        tail = self.lines[original[-1].end_lineno:]
        if any(line.strip() for line in tail):
            if tree.body and tree.body[-1] is not original[-1]:
                tail = ["\n", *_strip_leading_blanks(tail)]
            parts.extend(tail)
        return "".join(parts)

    # -- Blocks ------------------------------------------------------------

    def _block(
        self,
        body: list[ast.stmt],
        original: list[ast.stmt],
        indent: str,
        top_level: bool,
        start: int,
    ) -> list[str]:
        parts: list[str] = []
        positions = {id(node): i for i, node in enumerate(original)}
        previous: ast.stmt | None = None
        for node in body:
            if id(node) in positions and self._is_original(node):
                index = positions[id(node)]
                before = original[index - 1].end_lineno if index else start
                gap = self.lines[before:_first_line(node) - 1]
                predecessor = original[index - 1] if index else None
                if previous is not predecessor:
                    gap = _strip_leading_blanks(gap)
                    if previous is not None:
                        parts.append("\n" * _blank_lines(previous, node, top_level))
                parts.extend(gap)
                parts.append(self._statement(node, indent))
            else:
                if previous is not None:
                    parts.append("\n" * _blank_lines(previous, node, top_level))
                parts.append(_render_new(node, indent, module_docstring=top_level and previous is None) + "\n")
            previous = node
        return parts

    def _statement(self, node: ast.stmt, indent: str) -> str:
        first, last = _first_line(node), node.end_lineno
        if ast.dump(node) == self.snapshot[id(node)][1]:
            return "".join(self.lines[first - 1:last])
        if isinstance(node, _DEFINITIONS):
            spliced = self._definition(node, indent)
            if spliced is not None:
                return spliced
        elif not hasattr(node, "body"):
            return _render_new(node, indent) + self._trailing_comment(node) + "\n"
        return _render_new(node, indent) + "\n"

    def _definition(self, node: ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef, indent: str) -> str | None:
        original = self.snapshot[id(node)][2]
        if not original or self._shares_lines(original) or not self._starts_own_line(original[0]):
            return None

        header_end = _first_line(original[0]) - 1
        while header_end > node.lineno and _is_blank_or_comment(self.lines[header_end - 1]):
            header_end -= 1

        if _header_dump(node) == self.snapshot[id(node)][3]:
            header = "".join(self.lines[_first_line(node) - 1:header_end])
        else:
            stub = copy.copy(node)
            stub.body = [ast.Pass()]
            header = "\n".join(_render_new(stub, indent).splitlines()[:-1]) + "\n"

        body_line = self.lines[original[0].lineno - 1]
        body_indent = body_line[: len(body_line) - len(body_line.lstrip())]
        parts = self._block(node.body, original, body_indent, top_level=False, start=header_end)
        return header + "".join(parts)

    # -- Helpers -----------------------------------------------------------

    def _is_original(self, node: ast.AST) -> bool:
        entry = self.snapshot.get(id(node))
        return entry is not None and entry[0] is node

    def _original_body(self, owner: ast.AST) -> list[ast.stmt]:
        return self.snapshot[id(owner)][2] if self._is_original(owner) else []

    def _shares_lines(self, body: list[ast.stmt]) -> bool:
        return any(
            _first_line(current) <= previous.end_lineno
            for previous, current in zip(body, body[1:])
        )

    def _starts_own_line(self, node: ast.stmt) -> bool:
        if getattr(node, "decorator_list", None):
            return True
        line = self.lines[node.lineno - 1].encode("utf-8")
        return not line[: node.col_offset].strip()

    def _trailing_comment(self, node: ast.stmt) -> str:
        line = self.lines[node.end_lineno - 1].encode("utf-8")
        rest = line[node.end_col_offset:].decode("utf-8").strip()
        return f"  {rest}" if rest.startswith("#") else ""


def _strip_leading_blanks(lines: list[str]) -> list[str]:
    index = 0
    while index < len(lines) and not lines[index].strip():
        index += 1
    return lines[index:]


# ---------------------------------------------------------------------------
# Snippet parsing
# ---------------------------------------------------------------------------


def parse_expression(source: str) -> ast.expr:
    """Parse a single expression such as ``new_user_repo(db)``."""
    try:
        return ast.parse(source.strip(), mode="eval").body
    except SyntaxError as exc:
        raise MutationError(f"invalid expression {source!r}: {exc.msg}") from exc


def parse_statements(source: str) -> list[ast.stmt]:
    """Parse one or more statements; indentation of the snippet is ignored."""
    try:
        return ast.parse(textwrap.dedent(source).strip("\n")).body
    except SyntaxError as exc:
        raise MutationError(f"invalid snippet {source!r}: {exc.msg}") from exc


def parse_function(source: str) -> ast.FunctionDef | ast.AsyncFunctionDef:
    """Parse a snippet holding exactly one function definition."""
    body = parse_statements(source)
    if len(body) != 1 or not isinstance(body[0], (ast.FunctionDef, ast.AsyncFunctionDef)):
        raise MutationError(f"expected a single function definition, got {source!r}")
    return body[0]


# ---------------------------------------------------------------------------
# SourceModule
# ---------------------------------------------------------------------------


class SourceModule:
    """A Python source file parsed into an editable syntax tree."""

    def __init__(self, tree: ast.Module, path: Path | None = None, original: str = "") -> None:
        self.path = path
        self._reset(tree, original)

    def _reset(self, tree: ast.Module, original: str) -> None:
        self.tree = tree
        self.original = original
        self._lines = original.splitlines(keepends=True)
        if self._lines and not self._lines[-1].endswith("\n"):
            self._lines[-1] += "\n"
        # id -> (node, dump, original body, header dump); holding the node keeps its id unique.
        self._snapshot: dict[int, tuple] = {}
        if original:
            for node in ast.walk(tree):
                if isinstance(node, (ast.Module, ast.stmt)):
                    body = list(getattr(node, "body", None) or [])
                    header = _header_dump(node) if isinstance(node, _DEFINITIONS) else ""
                    self._snapshot[id(node)] = (node, ast.dump(node), body, header)

    @classmethod
    def load(cls, path: str | Path) -> "SourceModule":
        """Read and parse *path*.

        Raises:
            FileNotFoundError: If the file does not exist.
            SourceParseError: If the file is not valid Python.
        """
        file_path = Path(path)
        text = file_path.read_text(encoding="utf-8")
        return cls.from_source(text, file_path)

    @classmethod
    def from_source(cls, text: str, path: str | Path | None = None) -> "SourceModule":
        try:
            tree = ast.parse(text)
        except SyntaxError as exc:
            raise SourceParseError(exc, path) from exc
        return cls(tree, Path(path) if path is not None else None, text)

    # -- Lookup ------------------------------------------------------------

    def find_class(self, name: str) -> ast.ClassDef:
        """Return the top-level class called *name*."""
        for node in self.tree.body:
            if isinstance(node, ast.ClassDef) and node.name == name:
                return node
        raise DeclarationNotFoundError("class", name, self.path)

    def find_function(self, name: str) -> ast.FunctionDef | ast.AsyncFunctionDef:
        """Return a top-level function, or a method when *name* is ``Class.method``."""
        scope: list[ast.stmt] = self.tree.body
        func_name = name
        if "." in name:
            class_name, func_name = name.split(".", 1)
            scope = self.find_class(class_name).body
        for node in scope:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) and node.name == func_name:
                return node
        raise DeclarationNotFoundError("function", name, self.path)

    def find_assignment(self, name: str) -> ast.Assign | ast.AnnAssign:
        """Return the top-level assignment binding *name*."""
        for node in self.tree.body:
            if isinstance(node, ast.Assign):
                if any(isinstance(t, ast.Name) and t.id == name for t in node.targets):
                    return node
            elif isinstance(node, ast.AnnAssign):
                if isinstance(node.target, ast.Name) and node.target.id == name:
                    return node
        raise DeclarationNotFoundError("variable", name, self.path)

    def top_level_imports(self) -> list[ast.Import | ast.ImportFrom]:
        return [n for n in self.tree.body if isinstance(n, _IMPORTS)]

    # -- Output ------------------------------------------------------------

    def render(self) -> str:
        """Return the source text for the current tree.

        Unedited statements keep their original text; a module whose
        top-level statements share lines is printed with :func:`serialize`.
        """
        if not self._snapshot:
            return serialize(self.tree)
        text = _Splicer(self._lines, self._snapshot).module(self.tree)
        return serialize(self.tree) if text is None else text

    def save(self, path: str | Path | None = None) -> Path:
        """Write the rendered text to *path* (defaults to the loaded file)."""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise MutationError("no destination path for in-memory source")
        text = self.render()
        target.write_text(text, encoding="utf-8")
        self._reset(ast.parse(text), text)
        return target
