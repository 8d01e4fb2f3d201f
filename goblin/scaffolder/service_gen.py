"""Service generation and wiring.

A service module declares a ``<Entity>ServiceInterface`` Protocol, a
``<Entity>Service`` dataclass holding its repository dependencies, and a
``new_<entity>_service(...)`` factory.  Services are registered in the
central service, which builds each one from the central repository.
"""

from __future__ import annotations

from pathlib import Path

from goblin.config import CliConfig, get_config
from goblin.mutator import (
    add_constructor_param,
    add_import,
    add_struct_field,
    copy_interface_methods,
    wire_constructor_return,
)
from goblin.mutator.queries import DeclarationRef, find_functions

from .models import EntityName, RepoData, ServiceData
from .repo_gen import CENTRAL_REPO_CLASS, CENTRAL_REPO_MODULE
from .templates import TemplateRenderer

CENTRAL_SERVICE_MODULE = "central_service"
CENTRAL_SERVICE_CLASS = "CentralService"
CENTRAL_SERVICE_FACTORY = "new_central_service"


class ServiceGenerator:
    """Renders service modules and wires them into the central service."""

    def __init__(
        self,
        config: CliConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.renderer = renderer or TemplateRenderer()

    # -- Records -----------------------------------------------------------

    def service_data(self, name: str, repos: list[RepoData] | None = None) -> ServiceData:
        module_name = f"{name}_service"
        return ServiceData(
            name=EntityName(snake=name),
            path=self.config.services_dir / f"{module_name}.py",
            module=self.config.module_for("services_folder_path", module_name),
            repos=repos or [],
            central_service_exists=self.central_service_exists(),
        )

    def service_from_ref(self, ref: DeclarationRef) -> ServiceData:
        """Rebuild the record of an existing service from its ``new_<name>_service`` factory."""
        name = ref.name.removeprefix("new_").removesuffix("_service")
        data = self.service_data(name)
        data.path = ref.path
        data.module = self.config.module_for("services_folder_path", ref.module_name)
        return data

    # -- Central service ---------------------------------------------------

    @property
    def central_service_path(self) -> Path:
        return self.config.services_dir / f"{CENTRAL_SERVICE_MODULE}.py"

    @property
    def central_service_module(self) -> str:
        return self.config.module_for("services_folder_path", CENTRAL_SERVICE_MODULE)

    def central_service_exists(self) -> bool:
        return self.central_service_path.is_file()

    def render_central_service(self, central_repo_exists: bool) -> Path:
        context = {
            "central_repo_exists": central_repo_exists,
            "central_repo_module": self.config.module_for("repositories_folder_path", CENTRAL_REPO_MODULE),
        }
        return self.renderer.render_to_file(
            "service/central_service.py.j2", self.central_service_path, context
        )

    def add_central_service_to_central_controller(self, central_controller_path: Path) -> bool:
        """Give ``new_central_controller`` a ``central_service: CentralService`` parameter."""
        changed = add_constructor_param(
            central_controller_path, "new_central_controller", "central_service", CENTRAL_SERVICE_CLASS
        )
        changed |= add_import(central_controller_path, self.central_service_module, [CENTRAL_SERVICE_CLASS])
        return changed

    def add_service_to_central_service(self, data: ServiceData) -> bool:
        """Register *data* as a field of ``CentralService``.

        The service is built from the central repository's fields for each of
        its repositories, e.g. ``new_user_service(central_repo.user_repo)``.
        """
        path = self.central_service_path
        args = ", ".join(f"central_repo.{repo.field_name}" for repo in data.repos)

        changed = add_struct_field(path, CENTRAL_SERVICE_CLASS, data.field_name, data.interface_name)
        if data.repos:
            changed |= add_constructor_param(path, CENTRAL_SERVICE_FACTORY, "central_repo", CENTRAL_REPO_CLASS)
            changed |= add_import(
                path,
                self.config.module_for("repositories_folder_path", CENTRAL_REPO_MODULE),
                [CENTRAL_REPO_CLASS],
            )
        changed |= wire_constructor_return(
            path, CENTRAL_SERVICE_FACTORY, data.field_name, f"{data.factory_name}({args})"
        )
        changed |= add_import(path, data.module, [data.interface_name, data.factory_name])
        return changed

    # -- Service -----------------------------------------------------------

    def render_service(self, data: ServiceData) -> Path:
        context = {
            "service_class": data.class_name,
            "interface_name": data.interface_name,
            "factory_name": data.factory_name,
        }
        return self.renderer.render_to_file("service/service.py.j2", data.path, context)

    def add_repo_to_service(self, data: ServiceData, repo: RepoData) -> bool:
        """Inject *repo* into the service class and its factory.

        Raises:
            DeclarationNotFoundError: If the service class or factory is missing.
        """
        path = data.path
        changed = add_struct_field(path, data.class_name, repo.field_name, repo.interface_name)
        changed |= add_constructor_param(path, data.factory_name, repo.field_name, repo.interface_name)
        changed |= wire_constructor_return(path, data.factory_name, repo.field_name, repo.field_name)
        changed |= add_import(path, repo.module, [repo.interface_name])
        return changed

    def copy_repo_methods_to_service(
        self,
        data: ServiceData,
        repo: RepoData,
        method_names: list[str],
    ) -> list[str]:
        """Expose *method_names* of *repo* on the service as forwarding methods."""
        return copy_interface_methods(
            repo.path,
            repo.interface_name,
            data.path,
            data.interface_name,
            method_names,
            receiver=data.class_name,
            dependency=repo.field_name,
        )

    # -- Queries -----------------------------------------------------------

    def list_existing_services(self) -> list[DeclarationRef]:
        """Services are ``new_<name>_service`` factories other than the central one."""
        return find_functions(
            self.config.services_dir,
            r"new_\w+_service",
            exclude=(CENTRAL_SERVICE_FACTORY,),
        )

