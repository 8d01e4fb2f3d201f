"""SQL migration file generation.

Migrations are pairs of ``<YYYYmmddHHMMSS>_<name>_up.sql`` and
``..._down.sql`` files.  The ``uuid-ossp`` extension migration is written
once, ahead of the first migration, because every generated table defaults
its ``uuid`` column to ``uuid_generate_v4()``.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

from goblin.config import CliConfig, get_config

from .models import MigrationColumn, MigrationData
from .templates import TemplateRenderer

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
UUID_OSSP_NAME = "uuid_ossp"

DEFAULT_TABLE_COLUMNS: tuple[MigrationColumn, ...] = (
    MigrationColumn(name="uuid", sql_type="UUID", primary_key=True, unique=True, default="uuid_generate_v4()"),
    MigrationColumn(name="created_at", sql_type="TIMESTAMP", default="now()"),
    MigrationColumn(name="updated_at", sql_type="TIMESTAMP", default="now()"),
)


class MigrationGenerator:
    """Writes migration file pairs into the configured migrations folder."""

    def __init__(
        self,
        config: CliConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.renderer = renderer or TemplateRenderer()

    def migration_data(
        self,
        name: str,
        *,
        table_name: str | None = None,
        columns: list[MigrationColumn] | None = None,
        now: datetime | None = None,
    ) -> MigrationData:
        """Build the record for a migration named *name*.

        When *table_name* is given without *columns*, the table gets the
        default ``uuid``/``created_at``/``updated_at`` columns.
        """
        if table_name and not columns:
            columns = [c.model_copy() for c in DEFAULT_TABLE_COLUMNS]
        return MigrationData(
            name=name,
            timestamp=(now or datetime.now()).strftime(TIMESTAMP_FORMAT),
            table_name=table_name,
            columns=columns or [],
        )

    def has_uuid_ossp(self) -> bool:
        directory = self.config.migrations_dir
        return directory.is_dir() and any(directory.glob(f"*_{UUID_OSSP_NAME}_up.sql"))

    def ensure_uuid_ossp(self, now: datetime | None = None) -> list[Path]:
        """Write the ``uuid-ossp`` extension migrations unless they already exist.

        The files are stamped one second before *now* so they sort ahead of
        the migration being created alongside them.
        """
        if self.has_uuid_ossp():
            return []
        when = (now or datetime.now()) - timedelta(seconds=1)
        data = MigrationData(name=UUID_OSSP_NAME, timestamp=when.strftime(TIMESTAMP_FORMAT))
        directory = self.config.migrations_dir
        return [
            self.renderer.render_to_file("migration/uuid_ossp_up.sql.j2", directory / data.up_file, {}),
            self.renderer.render_to_file("migration/uuid_ossp_down.sql.j2", directory / data.down_file, {}),
        ]

    def generate(self, data: MigrationData) -> list[Path]:
        """Write the up/down pair for *data*, preceded by ``uuid-ossp`` if needed.

        Returns:
            Every file written, in creation order.
        """
        now = datetime.strptime(data.timestamp, TIMESTAMP_FORMAT)
        written = self.ensure_uuid_ossp(now)
        context = {
            "name": data.name,
            "table_name": data.table_name,
            "columns": data.columns,
        }
        directory = self.config.migrations_dir
        written.append(self.renderer.render_to_file("migration/up.sql.j2", directory / data.up_file, context))
        written.append(self.renderer.render_to_file("migration/down.sql.j2", directory / data.down_file, context))
        return written
