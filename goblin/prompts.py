"""Interactive prompts built on ``rich.prompt``.

All operator input goes through this module so commands read as plain
sequences of questions and tests can patch a single place.  Ctrl+C and EOF
propagate as ``KeyboardInterrupt``/``EOFError``; the CLI turns them into
exit code 130.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from rich.prompt import Confirm, IntPrompt, Prompt

from goblin.naming import is_snake_case
from goblin.utils import console, print_error


def ask_text(message: str, default: str = "") -> str:
    """Ask for a free-form value."""
    return Prompt.ask(message, default=default, console=console)


def ask_int(message: str, default: int) -> int:
    """Ask for an integer, re-prompting on invalid input."""
    return IntPrompt.ask(message, default=default, console=console)


def ask_snake_case(message: str, default: str) -> str:
    """Ask for a snake_case name, re-prompting until the answer is valid."""
    while True:
        value = Prompt.ask(message, default=default, console=console).strip()
        if is_snake_case(value):
            return value
        print_error(f"🛑 {value} is not in snake case")


def confirm(message: str, default: bool = False) -> bool:
    """Ask a yes/no question."""
    return Confirm.ask(message, default=default, console=console)


def confirm_overwrite(path: str | Path, label: str | None = None) -> bool:
    """Ask twice before an existing file is overwritten.

    Returns:
        ``True`` only when both questions were answered yes.
    """
    name = label or Path(path).name
    if not confirm(f"{name} already exists. Do you want to overwrite it?", default=False):
        return False
    return confirm(f"Are you sure you want to overwrite {name}?", default=False)


def select(message: str, options: Sequence[str], default: str | None = None) -> str:
    """Ask the operator to pick exactly one of *options*."""
    if not options:
        raise ValueError("select() needs at least one option")
    _print_options(options)
    choices = [str(i) for i in range(1, len(options) + 1)]
    default_index = str(options.index(default) + 1) if default in options else "1"
    answer = Prompt.ask(message, choices=choices, default=default_index, console=console)
    return options[int(answer) - 1]


def multi_select(
    message: str,
    options: Sequence[str],
    defaults: Sequence[str] = (),
) -> list[str]:
    """Ask the operator to pick any number of *options*.

    The answer is a comma-separated list of option numbers; an empty answer
    selects nothing.
    """
    if not options:
        return []
    _print_options(options)
    default = ",".join(str(options.index(d) + 1) for d in defaults if d in options)
    while True:
        answer = Prompt.ask(f"{message} (comma-separated numbers)", default=default, console=console)
        picked = _parse_indices(answer, len(options))
        if picked is not None:
            return [options[i] for i in picked]
        print_error(f"🛑 '{answer}' is not a valid selection")


def _print_options(options: Sequence[str]) -> None:
    for number, option in enumerate(options, start=1):
        console.print(f"  [cyan]{number}[/cyan]) {option}")


def _parse_indices(answer: str, count: int) -> list[int] | None:
    picked: list[int] = []
    for part in answer.replace(" ", "").split(","):
        if not part:
            continue
        if not part.isdigit() or not 1 <= int(part) <= count:
            return None
        index = int(part) - 1
        if index not in picked:
            picked.append(index)
    return picked
