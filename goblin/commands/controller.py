"""``goblin controller``: generate a controller and register it in the central controller."""

from __future__ import annotations

from goblin.prompts import confirm, multi_select, select
from goblin.scaffolder import ControllerGenerator, ServiceGenerator
from goblin.scaffolder.models import ControllerData, Strategy
from goblin.utils import print_success

from . import service as service_cmd
from .common import announce, ask_entity_name, may_write


def run(central_controller: bool = False) -> ControllerData | None:
    if central_controller:
        run_central()
        return None

    controllers = ControllerGenerator()
    name = ask_entity_name("controller", "", lambda n: controllers.controller_data(n).path)
    services = ServiceGenerator(controllers.config, controllers.renderer)

    existing = services.list_existing_services()
    options = [Strategy.NEW.value, Strategy.NONE.value]
    if existing:
        options.insert(1, Strategy.EXISTING.value)
    strategy = Strategy(select("Choose service strategy", options))

    data = controllers.controller_data(name)
    if strategy is Strategy.NEW:
        service = service_cmd.ask_service(services, default=name)
        service_cmd.create_service(services, service)
        data.services = [service]
    elif strategy is Strategy.EXISTING:
        by_name = {ref.name: ref for ref in existing}
        picked = multi_select("Select the services to use", list(by_name))
        data.services = [services.service_from_ref(by_name[choice]) for choice in picked]

    if not controllers.central_controller_exists():
        write_central_controller(controllers)

    announce(controllers.render_controller(data))
    controllers.add_controller_to_central_controller(data)
    for service in data.services:
        controllers.add_service_to_controller(data, service)

    print_success(f"✅ {data.class_name} controller generated successfully.")
    return data


# ---------------------------------------------------------------------------
# Central controller (``controller -c``)
# ---------------------------------------------------------------------------


def run_central() -> None:
    controllers = ControllerGenerator()
    services = ServiceGenerator(controllers.config, controllers.renderer)
    if not services.central_service_exists() and confirm(
        "Do you wish to inject a central service in your controller?", default=True
    ):
        service_cmd.write_central_service(services)
    write_central_controller(controllers, ask=True)


def write_central_controller(controllers: ControllerGenerator, ask: bool = False) -> None:
    if ask and not may_write(controllers.central_controller_path, "Central controller"):
        return
    services = ServiceGenerator(controllers.config, controllers.renderer)
    announce(controllers.render_central_controller(services.central_service_exists()))
