"""``goblin initialize``: lay down the skeleton of a new application.

All questions are asked first; files are written afterwards, bottom-up, so
each layer can reference the one below it.
"""

from __future__ import annotations

from goblin.prompts import ask_int, confirm, multi_select
from goblin.scaffolder import (
    AppGenerator,
    ControllerGenerator,
    DatabaseGenerator,
    MiddlewareGenerator,
    RepoGenerator,
    RouterGenerator,
    ServiceGenerator,
)
from goblin.scaffolder.app_gen import DEFAULT_PORT
from goblin.scaffolder.models import DatabaseData, DatabaseOption, MiddlewareOption, RouterData
from goblin.utils import print_error, print_section, print_success, print_summary_table, print_warning

from . import controller as controller_cmd
from . import database as database_cmd
from . import repo as repo_cmd
from . import service as service_cmd
from .common import announce
from .middleware import create_middlewares


def run() -> None:
    print_section("Project layout")
    central_service = confirm("Do you want to implement central service?", default=True)
    central_repo = confirm("Do you want to implement central repository?", default=True)
    central_controller = confirm("Do you want to implement central controller?", default=True)

    databases = DatabaseGenerator()
    options = _ask_database_options(databases, require_persistent=central_repo)
    selected = database_cmd.ask_databases(databases, options)

    picked = multi_select(
        "Which middlewares do you want to inject into your router?",
        [option.value for option in MiddlewareOption],
    )
    middlewares = [MiddlewareOption(value) for value in picked]
    port = ask_int("Please type in the server port you want to use", DEFAULT_PORT)

    config = databases.config
    renderer = databases.renderer

    if selected:
        print_section("Databases")
        database_cmd.create_databases(databases, selected)

    if middlewares:
        print_section("Middlewares")
        create_middlewares(MiddlewareGenerator(config, renderer), middlewares, ask=False)

    print_section("Central layers")
    if central_repo:
        repo_cmd.write_central_repo(RepoGenerator(config, renderer))
    if central_service:
        service_cmd.write_central_service(ServiceGenerator(config, renderer))
    if central_controller:
        controller_cmd.write_central_controller(ControllerGenerator(config, renderer))

    app = AppGenerator(config, renderer)
    app.write_server_env(port)
    if central_controller:
        print_section("Application")
        announce(*RouterGenerator(config, renderer).render_router(RouterData.from_middlewares(middlewares)))
        main = app.render_main(
            central_repo=central_repo,
            central_service=central_service,
            database=_session_database(selected, databases),
            port=port,
        )
        announce(main)
    else:
        print_warning("No central controller: router.py and main.py were not generated.")

    print_summary_table(
        {
            "Central repository": central_repo,
            "Central service": central_service,
            "Central controller": central_controller,
            "Databases": ", ".join(d.option.value for d in selected) or "-",
            "Middlewares": ", ".join(o.value for o in middlewares) or "-",
            "Server port": port,
        },
        title=f"{config.project_name} initialized",
    )
    print_success("✅ Project initialized successfully.")


def _ask_database_options(databases: DatabaseGenerator, require_persistent: bool) -> list[DatabaseOption]:
    """Ask which databases to write; a central repository needs a persistent one."""
    while True:
        picked = [
            DatabaseOption(value)
            for value in multi_select(
                "Which databases do you want to use?",
                [option.value for option in DatabaseOption],
                defaults=[option.value for option in databases.existing_databases()],
            )
        ]
        if not require_persistent or databases.has_persistent_database():
            return picked
        if any(option.is_persistent for option in picked):
            return picked
        print_error("🛑 A central repository needs PostgreSQL or MariaDB.")


def _session_database(selected: list[DatabaseData], databases: DatabaseGenerator) -> DatabaseOption | None:
    """The persistent database whose session factory backs the central repository."""
    for data in selected:
        if data.option.is_persistent:
            return data.option
    for option in databases.existing_databases():
        if option.is_persistent:
            return option
    return None
