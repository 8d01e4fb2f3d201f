"""Pydantic models and static catalogues used by the generators.

Records in this module are transient: an orchestrator fills one in from the
operator's answers, hands it to a generator, and discards it when the
command completes.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from goblin.naming import pluralize, snake_to_camel, snake_to_pascal


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


class EntityName(BaseModel):
    """A snake_case entity name and the forms derived from it."""

    snake: str

    @property
    def pascal(self) -> str:
        return snake_to_pascal(self.snake)

    @property
    def camel(self) -> str:
        return snake_to_camel(self.snake)

    @property
    def plural_snake(self) -> str:
        return pluralize(self.snake)

    @property
    def plural_pascal(self) -> str:
        return snake_to_pascal(self.plural_snake)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class RepoMethod(str, Enum):
    """Closed catalogue of generated repository methods."""

    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"
    LIST_ALL = "ListAll"
    LIST_WITH_PAGINATION = "ListWithPagination"
    GET_BY_UUID = "GetByUuid"

    def method_name(self, model: EntityName) -> str:
        """Return the generated method name for *model*.

        Examples::

            RepoMethod.CREATE.method_name(EntityName(snake="user")) -> "create_user"
            RepoMethod.LIST_ALL.method_name(EntityName(snake="user")) -> "list_users"
        """
        if self is RepoMethod.LIST_ALL:
            return f"list_{model.plural_snake}"
        if self is RepoMethod.LIST_WITH_PAGINATION:
            return f"list_{model.plural_snake}_with_pagination"
        if self is RepoMethod.GET_BY_UUID:
            return f"get_{model.snake}_by_uuid"
        return f"{self.name.lower()}_{model.snake}"


class Strategy(str, Enum):
    """How a dependency of a new entity is obtained."""

    NEW = "Create a new one"
    EXISTING = "Use an existing one"
    NONE = "None"


class DatabaseOption(str, Enum):
    POSTGRES = "PostgreSQL"
    MARIADB = "MariaDB"
    REDIS = "Redis"

    @property
    def default_port(self) -> int:
        return DATABASE_DEFAULT_PORTS[self]

    @property
    def instance_file(self) -> str:
        return DATABASE_INSTANCE_FILES[self]

    @property
    def env_prefix(self) -> str:
        return self.name

    @property
    def is_persistent(self) -> bool:
        return self is not DatabaseOption.REDIS


class MiddlewareOption(str, Enum):
    RECOVER = "recover"
    JWT = "jwt"
    LOGGING = "logging"
    RATE_LIMITER = "rate_limiter"
    ALLOW_ORIGIN = "allow_origin"

    @property
    def function_name(self) -> str:
        return f"{self.value}_middleware"

    @property
    def file_name(self) -> str | None:
        """Module written for this middleware (``None`` when handled by the router)."""
        if self is MiddlewareOption.RECOVER:
            return None
        return f"{self.value}_middleware.py"


# ---------------------------------------------------------------------------
# Static option tables
# ---------------------------------------------------------------------------

DATABASE_DEFAULT_PORTS: dict[DatabaseOption, int] = {
    DatabaseOption.POSTGRES: 5432,
    DatabaseOption.MARIADB: 3306,
    DatabaseOption.REDIS: 6379,
}

DATABASE_INSTANCE_FILES: dict[DatabaseOption, str] = {
    DatabaseOption.POSTGRES: "postgres.py",
    DatabaseOption.MARIADB: "mariadb.py",
    DatabaseOption.REDIS: "redis.py",
}

DATABASE_DEFAULT_USERS: dict[DatabaseOption, str] = {
    DatabaseOption.POSTGRES: "postgres",
    DatabaseOption.MARIADB: "mariadb",
    DatabaseOption.REDIS: "default",
}


# ---------------------------------------------------------------------------
# Entity records
# ---------------------------------------------------------------------------


class ModelData(BaseModel):
    """A model module (``<models>/<name>.py``) and the class it declares."""

    name: EntityName
    path: Path
    class_name: str = ""
    module: str = ""

    @property
    def table_name(self) -> str:
        return self.name.plural_snake


class RepoData(BaseModel):
    name: EntityName
    path: Path
    module: str
    model: ModelData | None = None
    methods: list[RepoMethod] = Field(default_factory=list)
    central_repo_exists: bool = False

    @property
    def class_name(self) -> str:
        return f"{self.name.pascal}Repo"

    @property
    def interface_name(self) -> str:
        return f"{self.name.pascal}RepoInterface"

    @property
    def factory_name(self) -> str:
        return f"new_{self.name.snake}_repo"

    @property
    def field_name(self) -> str:
        return f"{self.name.snake}_repo"


class ServiceData(BaseModel):
    name: EntityName
    path: Path
    module: str
    repos: list[RepoData] = Field(default_factory=list)
    proxy_methods: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Repository field name -> method names forwarded by the service",
    )
    central_service_exists: bool = False

    @property
    def class_name(self) -> str:
        return f"{self.name.pascal}Service"

    @property
    def interface_name(self) -> str:
        return f"{self.name.pascal}ServiceInterface"

    @property
    def factory_name(self) -> str:
        return f"new_{self.name.snake}_service"

    @property
    def field_name(self) -> str:
        return f"{self.name.snake}_service"


class ControllerData(BaseModel):
    name: EntityName
    path: Path
    module: str
    services: list[ServiceData] = Field(default_factory=list)
    central_controller_exists: bool = False

    @property
    def class_name(self) -> str:
        return f"{self.name.pascal}Controller"

    @property
    def factory_name(self) -> str:
        return f"new_{self.name.snake}_controller"

    @property
    def field_name(self) -> str:
        return f"{self.name.snake}_controller"


class RouterData(BaseModel):
    logging: bool = False
    recover: bool = False
    rate_limiter: bool = False
    allow_origin: bool = False
    jwt: bool = False

    @property
    def implement_middlewares(self) -> bool:
        return self.logging or self.rate_limiter or self.allow_origin or self.jwt

    @classmethod
    def from_middlewares(cls, options: list[MiddlewareOption]) -> "RouterData":
        return cls(**{option.value: True for option in options})


class DatabaseData(BaseModel):
    option: DatabaseOption
    port: int

    def env_defaults(self, project_name: str) -> dict[str, str]:
        """Default ``.env`` entries for this database instance."""
        prefix = self.option.env_prefix
        user = DATABASE_DEFAULT_USERS[self.option]
        database = "0" if self.option is DatabaseOption.REDIS else project_name
        return {
            f"{prefix}_USER": user,
            f"{prefix}_PASSWORD": user if self.option is not DatabaseOption.REDIS else "",
            f"{prefix}_DB": database,
            f"{prefix}_HOST": "localhost",
            f"{prefix}_PORT": str(self.port),
        }


class MigrationColumn(BaseModel):
    name: str
    sql_type: str
    nullable: bool = False
    primary_key: bool = False
    unique: bool = False
    default: str | None = None


class MigrationData(BaseModel):
    name: str
    timestamp: str
    table_name: str | None = None
    columns: list[MigrationColumn] = Field(default_factory=list)

    @property
    def up_file(self) -> str:
        return f"{self.timestamp}_{self.name}_up.sql"

    @property
    def down_file(self) -> str:
        return f"{self.timestamp}_{self.name}_down.sql"


class CustomJobData(BaseModel):
    name: EntityName
    already_exists: bool = False
    create_worker_pool: bool = False
    worker_pool_name: EntityName | None = None
    worker_pool_size: int = 10
    worker_pool_retries: int = 3
    services: list[ServiceData] = Field(
        default_factory=list,
        description="Services the worker is built with, taken from the central service",
    )

    @property
    def job_type_member(self) -> str:
        return self.name.snake.upper()

    @property
    def metadata_class(self) -> str:
        return f"{self.name.pascal}JobMetadata"

    @property
    def metadata_module_name(self) -> str:
        return f"{self.name.snake}_job_metadata"

    @property
    def pool(self) -> EntityName:
        return self.worker_pool_name or EntityName(snake=f"{self.name.snake}_worker_pool")

    @property
    def worker_class(self) -> str:
        return f"{self.name.pascal}Worker"


class WorkerizeFile(BaseModel):
    """One of the base workerize files and whether to (re)write it."""

    template: str
    path: Path
    exists: bool = False
    overwrite: bool = False

    @property
    def should_write(self) -> bool:
        return not self.exists or self.overwrite
