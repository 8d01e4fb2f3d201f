"""goblin command-line interface.

Usage::

    goblin initialize
    goblin repo
    goblin service --central-service
    goblin config --edit
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence

from goblin.commands import (
    config_cmd,
    controller,
    database,
    initialize,
    logger,
    middleware,
    migration,
    model,
    repo,
    router,
    service,
    workerize,
)
from goblin.utils import EXIT_ERROR, GoblinError, handle_error

# (help text, flag, flag help) per subcommand
_FLAGGED: dict[str, tuple[str, str, str]] = {
    "config": ("Show the goblin configuration of this project", "edit", "Edit one configuration value"),
    "model": ("Generate a model", "user", "Generate the user model"),
    "repo": ("Generate a repository", "central-repo", "Generate the central repository"),
    "service": ("Generate a service", "central-service", "Generate the central service"),
    "controller": ("Generate a controller", "central-controller", "Generate the central controller"),
    "workerize": ("Generate background job infrastructure", "job", "Generate a custom job"),
}

_PLAIN: dict[str, str] = {
    "database": "Generate database connection modules",
    "logger": "Generate the application logger",
    "migration": "Generate an up/down SQL migration",
    "router": "Generate the HTTP router",
    "middleware": "Generate HTTP middlewares",
    "initialize": "Initialize a new application",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="goblin",
        description="goblin -- scaffolds and wires the layers of a Python web application",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  goblin initialize\n"
            "  goblin model --user\n"
            "  goblin repo -c\n"
            "  goblin workerize --job\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    for name, (help_text, flag, flag_help) in _FLAGGED.items():
        sub = subparsers.add_parser(name, help=help_text, description=help_text)
        sub.add_argument(f"-{flag[0]}", f"--{flag}", action="store_true", dest="flag", help=flag_help)

    for name, help_text in _PLAIN.items():
        subparsers.add_parser(name, help=help_text, description=help_text)

    return parser


def _handlers() -> dict[str, Callable[[bool], object]]:
    return {
        "config": lambda flag: config_cmd.run(edit=flag),
        "model": lambda flag: model.run(user=flag),
        "repo": lambda flag: repo.run(central_repo=flag),
        "service": lambda flag: service.run(central_service=flag),
        "controller": lambda flag: controller.run(central_controller=flag),
        "workerize": lambda flag: workerize.run(job=flag),
        "database": lambda _: database.run(),
        "logger": lambda _: logger.run(),
        "migration": lambda _: migration.run(),
        "router": lambda _: router.run(),
        "middleware": lambda _: middleware.run(),
        "initialize": lambda _: initialize.run(),
    }


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``goblin``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_ERROR)

    try:
        _handlers()[args.command](getattr(args, "flag", False))
    except (KeyboardInterrupt, EOFError) as exc:
        handle_error(exc)
    except GoblinError as exc:
        handle_error(exc)
    except OSError as exc:
        handle_error(exc, "File system error")
    except (ValueError, KeyError) as exc:
        handle_error(exc, "Invalid input")


if __name__ == "__main__":
    main()
