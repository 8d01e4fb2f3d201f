"""``goblin model``: generate a SQLAlchemy model and, optionally, its migration."""

from __future__ import annotations

from goblin.prompts import confirm, multi_select
from goblin.scaffolder import MigrationGenerator, ModelGenerator
from goblin.scaffolder.model_gen import USER_OPTIONAL_ATTRIBUTES, migration_columns, user_attributes
from goblin.scaffolder.models import ModelData

from .common import announce, ask_entity_name

USER_MODEL_NAME = "user"


def run(user: bool = False) -> ModelData:
    if user:
        return run_user()

    models = ModelGenerator()
    data = ask_model(models)
    create_model(models, data)
    return data


def ask_model(models: ModelGenerator, default: str = "") -> ModelData:
    """Ask for the name of a new model without writing anything."""
    name = ask_entity_name("model", default, lambda n: models.model_data(n).path)
    return models.model_data(name)


def create_model(models: ModelGenerator, data: ModelData) -> None:
    """Write the model in *data* and offer its migration."""
    announce(models.render_model(data))
    if confirm("Do you want to create a migration for your model?", default=True):
        migrations = MigrationGenerator(models.config, models.renderer)
        migration = migrations.migration_data(data.table_name, table_name=data.table_name)
        announce(*migrations.generate(migration))


def run_user() -> ModelData:
    """Write ``user.py`` with the fixed attributes plus the selected optional ones."""
    models = ModelGenerator()
    data = models.model_data(USER_MODEL_NAME)

    selected = multi_select(
        "Select fields to include in the User model",
        [a.name for a in USER_OPTIONAL_ATTRIBUTES],
        defaults=models.existing_user_attributes(data),
    )
    attributes = user_attributes(selected)
    announce(models.render_user_model(data, attributes))

    if confirm("Do you want to create a migration for your model?", default=True):
        migrations = MigrationGenerator(models.config, models.renderer)
        migration = migrations.migration_data(
            data.table_name,
            table_name=data.table_name,
            columns=migration_columns(attributes),
        )
        announce(*migrations.generate(migration))
    return data
