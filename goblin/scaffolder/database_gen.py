"""Database instance generation.

Each selected database gets a connection module in the database-instances
folder (``postgres.py``, ``mariadb.py``, ``redis.py``) reading its settings
from the environment.  SQL databases also get ``pagination.py`` for the
repository ``list_*_with_pagination`` methods, and default connection
settings are merged into the project's ``.env``.
"""

from __future__ import annotations

from pathlib import Path

from goblin.config import CliConfig, get_config
from goblin.utils import write_env_file

from .models import DatabaseData, DatabaseOption
from .templates import TemplateRenderer

PAGINATION_MODULE = "pagination"

_SQL_DRIVERS: dict[DatabaseOption, str] = {
    DatabaseOption.POSTGRES: "postgresql+psycopg",
    DatabaseOption.MARIADB: "mysql+pymysql",
}


class DatabaseGenerator:
    """Renders database connection modules and their ``.env`` defaults."""

    def __init__(
        self,
        config: CliConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.renderer = renderer or TemplateRenderer()

    def instance_path(self, option: DatabaseOption) -> Path:
        return self.config.database_instances_dir / option.instance_file

    @property
    def pagination_path(self) -> Path:
        return self.config.database_instances_dir / f"{PAGINATION_MODULE}.py"

    def render_instance(self, data: DatabaseData) -> Path:
        path = self.instance_path(data.option)
        if data.option is DatabaseOption.REDIS:
            return self.renderer.render_to_file("database/redis.py.j2", path, {"port": data.port})

        context = {
            "name": path.stem,
            "display_name": data.option.value,
            "driver": _SQL_DRIVERS[data.option],
            "env_prefix": data.option.env_prefix,
            "port": data.port,
        }
        return self.renderer.render_to_file("database/sql.py.j2", path, context)

    def render_pagination(self) -> Path:
        return self.renderer.render_to_file("database/pagination.py.j2", self.pagination_path, {})

    def generate(self, databases: list[DatabaseData]) -> list[Path]:
        """Render every instance in *databases* and merge their ``.env`` defaults.

        Returns:
            The files written, in order.
        """
        written = [self.render_instance(data) for data in databases]
        if any(data.option.is_persistent for data in databases):
            written.append(self.render_pagination())
        for data in databases:
            write_env_file(data.env_defaults(self.config.project_name), self.config.env_path)
        return written

    # -- Queries -----------------------------------------------------------

    def existing_databases(self) -> list[DatabaseOption]:
        return [option for option in DatabaseOption if self.instance_path(option).is_file()]

    def has_redis(self) -> bool:
        return DatabaseOption.REDIS in self.existing_databases()

    def has_persistent_database(self) -> bool:
        return any(option.is_persistent for option in self.existing_databases())
