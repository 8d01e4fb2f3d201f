"""Prompt sequences shared by several commands."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from goblin.config import get_config
from goblin.prompts import ask_snake_case, confirm, confirm_overwrite
from goblin.utils import print_generated


def ask_entity_name(kind: str, default: str, path_for: Callable[[str], Path]) -> str:
    """Ask for the snake_case name of a new *kind* until the operator commits to one.

    Declining the confirmation, or declining to overwrite an existing file,
    goes back to the name prompt.
    """
    while True:
        name = ask_snake_case(f"Please type the {kind} file name (snake_case)", default)
        default = name
        path = path_for(name)
        if not confirm(
            f"You are about to create a {kind} file named {path.name}, do you want to continue?",
            default=True,
        ):
            continue
        if path.exists() and not confirm_overwrite(path, f"{path.name} {kind}"):
            continue
        return name


def may_write(path: Path, label: str) -> bool:
    """``True`` when *path* is free or the operator agreed to overwrite it."""
    return not path.exists() or confirm_overwrite(path, label)


def announce(*paths: Path) -> None:
    """Report each written file relative to the project root."""
    root = get_config().root_dir
    for path in paths:
        try:
            shown = path.relative_to(root)
        except ValueError:
            shown = path
        print_generated(shown.as_posix())
