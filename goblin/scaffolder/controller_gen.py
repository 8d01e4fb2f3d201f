"""Controller generation and wiring."""

from __future__ import annotations

from pathlib import Path

from goblin.config import CliConfig, get_config
from goblin.mutator import (
    add_constructor_param,
    add_import,
    add_struct_field,
    wire_constructor_return,
)
from goblin.mutator.queries import DeclarationRef, find_functions

from .models import ControllerData, EntityName, ServiceData
from .service_gen import CENTRAL_SERVICE_CLASS, CENTRAL_SERVICE_MODULE
from .templates import TemplateRenderer

CENTRAL_CONTROLLER_MODULE = "central_controller"
CENTRAL_CONTROLLER_CLASS = "CentralController"
CENTRAL_CONTROLLER_FACTORY = "new_central_controller"


class ControllerGenerator:
    """Renders controller modules and wires them into the central controller."""

    def __init__(
        self,
        config: CliConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.renderer = renderer or TemplateRenderer()

    def controller_data(self, name: str, services: list[ServiceData] | None = None) -> ControllerData:
        module_name = f"{name}_controller"
        return ControllerData(
            name=EntityName(snake=name),
            path=self.config.controllers_dir / f"{module_name}.py",
            module=self.config.module_for("controllers_folder_path", module_name),
            services=services or [],
            central_controller_exists=self.central_controller_exists(),
        )

    # -- Central controller ------------------------------------------------

    @property
    def central_controller_path(self) -> Path:
        return self.config.controllers_dir / f"{CENTRAL_CONTROLLER_MODULE}.py"

    @property
    def central_controller_module(self) -> str:
        return self.config.module_for("controllers_folder_path", CENTRAL_CONTROLLER_MODULE)

    def central_controller_exists(self) -> bool:
        return self.central_controller_path.is_file()

    def render_central_controller(self, central_service_exists: bool) -> Path:
        context = {
            "central_service_exists": central_service_exists,
            "central_service_module": self.config.module_for("services_folder_path", CENTRAL_SERVICE_MODULE),
        }
        return self.renderer.render_to_file(
            "controller/central_controller.py.j2", self.central_controller_path, context
        )

    def add_controller_to_central_controller(self, data: ControllerData) -> bool:
        path = self.central_controller_path
        args = ", ".join(f"central_service.{service.field_name}" for service in data.services)

        changed = add_struct_field(path, CENTRAL_CONTROLLER_CLASS, data.field_name, data.class_name)
        if data.services:
            changed |= add_constructor_param(
                path, CENTRAL_CONTROLLER_FACTORY, "central_service", CENTRAL_SERVICE_CLASS
            )
            changed |= add_import(
                path,
                self.config.module_for("services_folder_path", CENTRAL_SERVICE_MODULE),
                [CENTRAL_SERVICE_CLASS],
            )
        changed |= wire_constructor_return(
            path, CENTRAL_CONTROLLER_FACTORY, data.field_name, f"{data.factory_name}({args})"
        )
        changed |= add_import(path, data.module, [data.class_name, data.factory_name])
        return changed

    # -- Controller --------------------------------------------------------

    def render_controller(self, data: ControllerData) -> Path:
        context = {
            "controller_class": data.class_name,
            "factory_name": data.factory_name,
            "route_prefix": f"/{data.name.plural_snake.replace('_', '-')}",
            "tag": data.name.plural_snake,
        }
        return self.renderer.render_to_file("controller/controller.py.j2", data.path, context)

    def add_service_to_controller(self, data: ControllerData, service: ServiceData) -> bool:
        """Inject *service* into the controller class and its factory.

        Raises:
            DeclarationNotFoundError: If the controller class or factory is missing.
        """
        path = data.path
        changed = add_struct_field(path, data.class_name, service.field_name, service.interface_name)
        changed |= add_constructor_param(path, data.factory_name, service.field_name, service.interface_name)
        changed |= wire_constructor_return(path, data.factory_name, service.field_name, service.field_name)
        changed |= add_import(path, service.module, [service.interface_name])
        return changed

    # -- Queries -----------------------------------------------------------

    def list_existing_controllers(self) -> list[DeclarationRef]:
        return find_functions(
            self.config.controllers_dir,
            r"new_\w+_controller",
            exclude=(CENTRAL_CONTROLLER_FACTORY,),
        )

    def controller_from_ref(self, ref: DeclarationRef) -> ControllerData:
        """Rebuild the record of an existing controller from its ``new_<name>_controller`` factory."""
        name = ref.name.removeprefix("new_").removesuffix("_controller")
        data = self.controller_data(name)
        data.path = ref.path
        data.module = self.config.module_for("controllers_folder_path", ref.module_name)
        return data
