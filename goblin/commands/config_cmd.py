"""``goblin config``: show or edit the per-project configuration."""

from __future__ import annotations

from goblin.config import CliConfig, default_config_path, get_config, set_config
from goblin.prompts import ask_text, confirm, select
from goblin.utils import console, print_success, print_summary_table, print_warning


def run(edit: bool = False) -> None:
    config = get_config()
    if edit:
        run_edit(config)
        return
    print_summary_table(config.as_map(), title=str(default_config_path(config.project_name)))


def run_edit(config: CliConfig) -> CliConfig:
    """Change one setting after a preview and a confirmation.

    Returns:
        The configuration in effect afterwards (unchanged when declined).
    """
    values = config.as_map()
    key = select("Which goblin config value do you want to edit?", list(values))
    current = values[key]
    new_value = ask_text(f"Edit value for '{key}'", default=current)

    console.print(f"[cyan]{key}[/cyan]: {current} -> {new_value}")
    if not confirm("Are you sure you want to save this change?", default=True):
        print_warning("Aborted. No changes saved.")
        return config

    updated = config.update({key: new_value})
    path = updated.save(default_config_path(config.project_name))
    set_config(updated)
    print_success(f"✅ Config saved to {path}")
    return updated
