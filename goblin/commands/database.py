"""``goblin database``: generate database connection modules."""

from __future__ import annotations

from collections.abc import Sequence

from goblin.prompts import ask_int, confirm_overwrite, multi_select
from goblin.scaffolder import DatabaseGenerator
from goblin.scaffolder.models import DatabaseData, DatabaseOption

from .common import announce


def run() -> list[DatabaseData]:
    databases = DatabaseGenerator()
    selected = ask_databases(databases)
    create_databases(databases, selected)
    return selected


def ask_databases(
    databases: DatabaseGenerator,
    options: Sequence[DatabaseOption] | None = None,
) -> list[DatabaseData]:
    """Ask which databases to write (unless *options* is given) and their ports.

    A database whose module already exists is skipped unless the operator
    agrees to overwrite it.
    """
    if options is None:
        picked = multi_select(
            "Which databases do you want to use?",
            [option.value for option in DatabaseOption],
            defaults=[option.value for option in databases.existing_databases()],
        )
        options = [DatabaseOption(value) for value in picked]

    selected: list[DatabaseData] = []
    for option in options:
        path = databases.instance_path(option)
        if path.exists() and not confirm_overwrite(path, f"{option.value} instance ({path.name})"):
            continue
        port = ask_int(f"Please type in the {option.value} port you want to use", option.default_port)
        selected.append(DatabaseData(option=option, port=port))
    return selected


def create_databases(databases: DatabaseGenerator, selected: list[DatabaseData]) -> None:
    announce(*databases.generate(selected))
