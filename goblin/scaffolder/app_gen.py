"""Application entry point (``main.py``) generation."""

from __future__ import annotations

from pathlib import Path

from goblin.config import CliConfig, get_config
from goblin.utils import write_env_file

from .controller_gen import CENTRAL_CONTROLLER_MODULE
from .models import DatabaseOption
from .repo_gen import CENTRAL_REPO_MODULE
from .router_gen import ROUTER_MODULE
from .service_gen import CENTRAL_SERVICE_MODULE
from .templates import TemplateRenderer

DEFAULT_PORT = 8080
DEFAULT_BIND_ADDRESS = "0.0.0.0"


class AppGenerator:
    def __init__(
        self,
        config: CliConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.renderer = renderer or TemplateRenderer()

    @property
    def main_path(self) -> Path:
        return self.config.root_dir / "main.py"

    def render_main(
        self,
        *,
        central_repo: bool,
        central_service: bool,
        database: DatabaseOption | None = None,
        port: int = DEFAULT_PORT,
    ) -> Path:
        """Write ``main.py``, building the central layers bottom-up.

        *database* supplies the session factory for the central repository and
        must be a persistent database when *central_repo* is set.
        """
        if central_repo and (database is None or not database.is_persistent):
            raise ValueError("the central repository needs a PostgreSQL or MariaDB instance")

        module_of = self.config.module_for
        context = {
            "project_name": self.config.project_name,
            "central_repo": central_repo,
            "central_service": central_service,
            "central_repo_module": module_of("repositories_folder_path", CENTRAL_REPO_MODULE),
            "central_service_module": module_of("services_folder_path", CENTRAL_SERVICE_MODULE),
            "central_controller_module": module_of("controllers_folder_path", CENTRAL_CONTROLLER_MODULE),
            "router_module": module_of("router_folder_path", ROUTER_MODULE),
            "session_factory": None,
            "port": port,
        }
        if central_repo and database is not None:
            stem = Path(database.instance_file).stem
            context["database_module"] = module_of("database_instances_folder_path", stem)
            context["session_factory"] = f"new_{stem}_session_factory"
        return self.renderer.render_to_file("app/main.py.j2", self.main_path, context, package=False)

    def write_server_env(self, port: int = DEFAULT_PORT) -> list[str]:
        return write_env_file(
            {"SERVER_BIND_PORT": str(port), "SERVER_BIND_ADDRESS": DEFAULT_BIND_ADDRESS},
            self.config.env_path,
        )
