"""``goblin migration``: generate an up/down SQL migration pair."""

from __future__ import annotations

from goblin.prompts import ask_snake_case, confirm
from goblin.scaffolder import MigrationGenerator

from .common import announce


def run() -> None:
    migrations = MigrationGenerator()
    while True:
        name = ask_snake_case("Please type the migration name (snake_case)", "")
        if confirm(f"You are about to create a migration named {name}, do you want to continue?", default=True):
            break

    table_name = name if confirm(f"Create a table named {name} in this migration?", default=True) else None
    data = migrations.migration_data(name, table_name=table_name)
    announce(*migrations.generate(data))
