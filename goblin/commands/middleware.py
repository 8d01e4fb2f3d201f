"""``goblin middleware``: generate HTTP middlewares."""

from __future__ import annotations

from collections.abc import Sequence

from goblin.prompts import confirm_overwrite, multi_select
from goblin.scaffolder import MiddlewareGenerator
from goblin.scaffolder.models import MiddlewareOption

from .common import announce


def run() -> list[MiddlewareOption]:
    middlewares = MiddlewareGenerator()
    picked = multi_select(
        "Which middlewares do you want to implement?",
        [option.value for option in MiddlewareOption],
    )
    options = [MiddlewareOption(value) for value in picked]
    create_middlewares(middlewares, options)
    return options


def create_middlewares(
    middlewares: MiddlewareGenerator,
    options: Sequence[MiddlewareOption],
    ask: bool = True,
) -> None:
    """Write each middleware in *options*; existing modules are kept unless replaced."""
    for option in options:
        path = middlewares.middleware_path(option)
        if path is not None and path.exists() and (
            not ask or not confirm_overwrite(path, f"{option.value} middleware")
        ):
            continue
        announce(*middlewares.render_middleware(option))
