"""Model module generation.

Renders SQLAlchemy declarative models into the configured models folder and
lists the models that already exist there.  The user model (``model --user``)
has a fixed set of attributes plus operator-selected optional ones; its
migration columns are derived from the same attribute table.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path

from goblin.config import CliConfig, get_config
from goblin.mutator import SourceModule
from goblin.mutator.queries import DeclarationRef, find_classes_with_field
from goblin.naming import pascal_to_snake

from .models import EntityName, MigrationColumn, ModelData
from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# User model attributes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserAttribute:
    name: str
    kind: str
    column_args: str = ""
    optional: bool = False

    @property
    def annotation(self) -> str:
        python_type = _PYTHON_TYPES[self.kind]
        return f"{python_type} | None" if self.optional else python_type


_PYTHON_TYPES: dict[str, str] = {
    "uuid": "str",
    "str": "str",
    "int": "int",
    "bool": "bool",
    "datetime": "datetime",
}

SQL_TYPES: dict[str, str] = {
    "uuid": "UUID",
    "str": "TEXT",
    "int": "BIGINT",
    "bool": "BOOLEAN",
    "datetime": "TIMESTAMP",
}

USER_REQUIRED_ATTRIBUTES: tuple[UserAttribute, ...] = (
    UserAttribute("uuid", "uuid", 'primary_key=True, server_default=text("uuid_generate_v4()")'),
    UserAttribute("email", "str", "unique=True"),
    UserAttribute("password", "str"),
    UserAttribute("created_at", "datetime", "server_default=func.now()"),
    UserAttribute("updated_at", "datetime", "server_default=func.now(), onupdate=func.now()"),
)

USER_OPTIONAL_ATTRIBUTES: tuple[UserAttribute, ...] = (
    UserAttribute("username", "str", optional=True),
    UserAttribute("first_name", "str", optional=True),
    UserAttribute("last_name", "str", optional=True),
    UserAttribute("verified", "bool", optional=True),
    UserAttribute("last_login", "datetime", optional=True),
)


def user_attributes(selected: list[str]) -> list[UserAttribute]:
    """Return the required attributes followed by the *selected* optional ones."""
    optional = [a for a in USER_OPTIONAL_ATTRIBUTES if a.name in selected]
    return [*USER_REQUIRED_ATTRIBUTES, *optional]


def migration_columns(attributes: list[UserAttribute]) -> list[MigrationColumn]:
    """Map model attributes to SQL columns."""
    columns: list[MigrationColumn] = []
    for attribute in attributes:
        column = MigrationColumn(
            name=attribute.name,
            sql_type=SQL_TYPES[attribute.kind],
            nullable=attribute.optional,
        )
        if attribute.name == "uuid":
            column.primary_key = True
            column.unique = True
            column.default = "uuid_generate_v4()"
        elif attribute.name == "email":
            column.unique = True
        elif attribute.name in ("created_at", "updated_at"):
            column.default = "now()"
        columns.append(column)
    return columns


# ---------------------------------------------------------------------------
# ModelGenerator
# ---------------------------------------------------------------------------


class ModelGenerator:
    """Renders model modules and queries the existing ones."""

    BASE_MODULE_NAME = "base"

    def __init__(
        self,
        config: CliConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.renderer = renderer or TemplateRenderer()

    def model_data(self, name: str) -> ModelData:
        entity = EntityName(snake=name)
        return ModelData(
            name=entity,
            path=self.config.models_dir / f"{name}.py",
            class_name=entity.pascal,
            module=self.config.module_for("models_folder_path", name),
        )

    @property
    def base_module(self) -> str:
        return self.config.module_for("models_folder_path", self.BASE_MODULE_NAME)

    def ensure_base(self) -> Path | None:
        """Render the shared declarative ``Base`` unless it already exists."""
        path = self.config.models_dir / f"{self.BASE_MODULE_NAME}.py"
        if path.exists():
            return None
        return self.renderer.render_to_file("model/base.py.j2", path, {})

    def render_model(self, data: ModelData) -> Path:
        self.ensure_base()
        context = {
            "model_class": data.class_name,
            "table_name": data.table_name,
            "base_module": self.base_module,
        }
        return self.renderer.render_to_file("model/model.py.j2", data.path, context)

    def render_user_model(self, data: ModelData, attributes: list[UserAttribute]) -> Path:
        self.ensure_base()
        context = {
            "model_class": data.class_name,
            "table_name": data.table_name,
            "base_module": self.base_module,
            "attributes": attributes,
            "uses_datetime": any(a.kind == "datetime" for a in attributes),
        }
        return self.renderer.render_to_file("model/user.py.j2", data.path, context)

    # -- Queries -------------------------------------------------------------

    def list_existing_models(self) -> list[DeclarationRef]:
        """Models are classes in the models folder with a ``uuid: str`` column."""
        return find_classes_with_field(self.config.models_dir, "uuid", "str")

    def model_from_ref(self, ref: DeclarationRef) -> ModelData:
        entity = EntityName(snake=pascal_to_snake(ref.name))
        return ModelData(
            name=entity,
            path=ref.path,
            class_name=ref.name,
            module=self.config.module_for("models_folder_path", ref.module_name),
        )

    def existing_user_attributes(self, data: ModelData) -> list[str]:
        """Optional attributes already declared by the user model in *data*."""
        if not data.path.is_file():
            return []
        cls = SourceModule.load(data.path).find_class(data.class_name)
        declared = {
            node.target.id for node in cls.body
            if isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name)
        }
        return [a.name for a in USER_OPTIONAL_ATTRIBUTES if a.name in declared]
