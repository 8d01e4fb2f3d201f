"""``goblin router``: generate the HTTP application factory."""

from __future__ import annotations

from goblin.prompts import confirm, confirm_overwrite, multi_select
from goblin.scaffolder import ControllerGenerator, MiddlewareGenerator, RouterGenerator
from goblin.scaffolder.models import MiddlewareOption, RouterData
from goblin.utils import print_warning

from . import controller as controller_cmd
from .common import announce
from .middleware import create_middlewares


def run() -> None:
    routers = RouterGenerator()
    if routers.router_exists() and not confirm_overwrite(routers.router_path, "Router"):
        return

    middlewares = MiddlewareGenerator(routers.config, routers.renderer)
    existing = middlewares.list_existing_middlewares()
    picked = multi_select(
        "Which middlewares do you want to inject into your router?",
        [option.value for option in MiddlewareOption],
        defaults=existing,
    )
    options = [MiddlewareOption(value) for value in picked]

    missing = [o for o in options if o.file_name is not None and o.value not in existing]
    if missing:
        names = ", ".join(o.value for o in missing)
        if confirm(f"{names} middleware not implemented yet. Do you wish to implement it now?", default=True):
            create_middlewares(middlewares, missing)
        else:
            print_warning(f"Skipping {names} middleware.")
            options = [o for o in options if o not in missing]

    controllers = ControllerGenerator(routers.config, routers.renderer)
    if not controllers.central_controller_exists():
        print_warning("The router registers the central controller, which does not exist yet.")
        if confirm("Do you wish to generate the central controller now?", default=True):
            controller_cmd.write_central_controller(controllers)

    announce(*routers.render_router(RouterData.from_middlewares(options)))
