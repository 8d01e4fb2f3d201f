"""Shared utility functions for goblin.

Provides the Rich console and its output helpers, the operator-facing error
type and its exit-code handling, ``.env`` merging, and project-name
detection.
"""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path
from typing import Any, NoReturn

from dotenv import dotenv_values, set_key
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()

EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class GoblinError(Exception):
    """Raised when a command cannot complete and the operator must be told why."""


def handle_error(err: BaseException, message: str | None = None) -> NoReturn:
    """Report *err* to the operator and terminate the process.

    An operator interrupt (Ctrl+C or EOF on a prompt) exits with code 130;
    anything else is printed as ``Error: <message>: <err>`` and exits with 1.
    """
    if isinstance(err, (KeyboardInterrupt, EOFError)):
        console.print()
        print_warning("Operation cancelled.")
        sys.exit(EXIT_INTERRUPTED)

    text = f"{message}: {err}" if message else str(err)
    console.print(f"[bold red]Error:[/bold red] {escape(text)}")
    sys.exit(EXIT_ERROR)


# ---------------------------------------------------------------------------
# Project detection
# ---------------------------------------------------------------------------


def get_project_name(root: str | Path | None = None) -> str:
    """Detect the generated project's name.

    Reads ``[project].name`` from ``pyproject.toml`` in *root* (defaults to the
    working directory) and falls back to the directory name.
    """
    base = Path(root) if root is not None else Path.cwd()
    pyproject = base / "pyproject.toml"
    if pyproject.is_file():
        with pyproject.open("rb") as fh:
            data = tomllib.load(fh)
        name = data.get("project", {}).get("name")
        if name:
            return str(name)
    return base.resolve().name


# ---------------------------------------------------------------------------
# Environment file
# ---------------------------------------------------------------------------


def write_env_file(values: dict[str, str], path: str | Path | None = None) -> list[str]:
    """Merge *values* into a ``.env`` file.

    Keys already present keep their current value; only missing keys are
    appended.  The file is created if needed.

    Args:
        values: Mapping of variable name to default value.
        path: Target file.  Defaults to ``.env`` in the working directory.

    Returns:
        The keys that were added.
    """
    env_path = Path(path) if path is not None else Path.cwd() / ".env"
    env_path.touch(exist_ok=True)
    existing = dotenv_values(env_path)

    added: list[str] = []
    for key, value in values.items():
        if key in existing:
            continue
        set_key(str(env_path), key, value, quote_mode="never")
        added.append(key)
    return added


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_section(title: str) -> None:
    """Print a full-width rule announcing a step of a multi-step command."""
    console.print()
    console.print(Rule(f"[bold bright_cyan] {title} [/bold bright_cyan]", style="bright_cyan"))
    console.print()


def print_summary_table(data: dict[str, Any], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Key", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_generated(file_name: str) -> None:
    """Announce a freshly written file."""
    print_success(f"✅ {file_name} generated successfully.")
