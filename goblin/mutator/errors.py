"""Exceptions raised by structural edits."""

from __future__ import annotations

from pathlib import Path

from goblin.utils import GoblinError


class MutationError(GoblinError):
    """Raised when a structural edit cannot be applied to a source file."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(f"{path}: {message}" if path is not None else message)


class DeclarationNotFoundError(MutationError):
    """Raised when the class, function or variable to edit is not in the file."""

    def __init__(self, kind: str, name: str, path: str | Path | None = None) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} '{name}' not found", path)


class SourceParseError(MutationError):
    """Raised when an existing file is not valid Python."""

    def __init__(self, err: SyntaxError, path: str | Path | None = None) -> None:
        self.lineno = err.lineno
        super().__init__(f"cannot parse source (line {err.lineno}): {err.msg}", path)
