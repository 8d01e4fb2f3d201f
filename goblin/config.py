"""goblin configuration.

Every command reads its destination folders from a single per-project YAML
file, ``~/.goblin/<project_name>/cli_config.yaml``.  The settings are held in
a Pydantic v2 model so that values are validated when the file is loaded and
can be dumped back without boiler-plate.

The configuration is loaded once per process and shared through
:func:`get_config`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from goblin.naming import folder_to_module
from goblin.utils import get_project_name

CONFIG_FILE_NAME = "cli_config.yaml"


class CliConfig(BaseModel):
    """Folder layout and project name of the generated application.

    Folder paths are relative to the project root (the working directory the
    CLI is run from).
    """

    project_name: str = Field(default="")
    models_folder_path: str = Field(default="app/models")
    controllers_folder_path: str = Field(default="app/controllers")
    services_folder_path: str = Field(default="app/services")
    repositories_folder_path: str = Field(default="app/repositories")
    database_instances_folder_path: str = Field(default="app/db")
    workers_folder_path: str = Field(default="app/workers")
    jobs_folder_path: str = Field(default="app/jobs")
    logger_folder_path: str = Field(default="app/logger")
    migrations_folder_path: str = Field(default="migrations")
    router_folder_path: str = Field(default="app/router")
    middlewares_folder_path: str = Field(default="app/middlewares")
    auth_folder_path: str = Field(default="app/auth")

    # Not persisted; the directory the folder paths are resolved against.
    root_dir: Path = Field(default_factory=Path.cwd, exclude=True)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def models_dir(self) -> Path:
        return self.root_dir / self.models_folder_path

    @property
    def controllers_dir(self) -> Path:
        return self.root_dir / self.controllers_folder_path

    @property
    def services_dir(self) -> Path:
        return self.root_dir / self.services_folder_path

    @property
    def repositories_dir(self) -> Path:
        return self.root_dir / self.repositories_folder_path

    @property
    def database_instances_dir(self) -> Path:
        return self.root_dir / self.database_instances_folder_path

    @property
    def workers_dir(self) -> Path:
        return self.root_dir / self.workers_folder_path

    @property
    def jobs_dir(self) -> Path:
        return self.root_dir / self.jobs_folder_path

    @property
    def logger_dir(self) -> Path:
        return self.root_dir / self.logger_folder_path

    @property
    def migrations_dir(self) -> Path:
        return self.root_dir / self.migrations_folder_path

    @property
    def router_dir(self) -> Path:
        return self.root_dir / self.router_folder_path

    @property
    def middlewares_dir(self) -> Path:
        return self.root_dir / self.middlewares_folder_path

    @property
    def auth_dir(self) -> Path:
        return self.root_dir / self.auth_folder_path

    @property
    def env_path(self) -> Path:
        """The generated project's ``.env`` file."""
        return self.root_dir / ".env"

    def module_for(self, folder_field: str, module_name: str) -> str:
        """Return the dotted import path of *module_name* inside a configured folder.

        Args:
            folder_field: Name of a ``*_folder_path`` field, e.g.
                ``"models_folder_path"``.
            module_name: Module file name without ``.py``.
        """
        package = folder_to_module(getattr(self, folder_field))
        return f"{package}.{module_name}" if package else module_name

    # ------------------------------------------------------------------
    # Map view (used by the ``config`` command)
    # ------------------------------------------------------------------

    def as_map(self) -> dict[str, str]:
        """Return the persisted settings as a plain ``{key: value}`` mapping."""
        return {key: str(value) for key, value in self.model_dump().items()}

    def update(self, values: dict[str, Any]) -> "CliConfig":
        """Return a validated copy with *values* applied.

        Raises:
            KeyError: If a key is not a known setting.
        """
        unknown = set(values) - set(self.as_map())
        if unknown:
            raise KeyError(f"Unknown config key(s): {', '.join(sorted(unknown))}")
        data = {**self.model_dump(), **values}
        updated = type(self).model_validate(data)
        updated.root_dir = self.root_dir
        return updated

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration as YAML.

        Args:
            path: Destination file. Defaults to :func:`default_config_path`.

        Returns:
            The path where the file was written.
        """
        target = path or default_config_path(self.project_name)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            yaml.safe_dump(self.model_dump(), sort_keys=False),
            encoding="utf-8",
        )
        return target

    @classmethod
    def load(cls, path: Path, root_dir: Path | None = None) -> "CliConfig":
        """Load a previously-saved configuration from YAML.

        Args:
            path: The YAML file to read.
            root_dir: Project root the folder paths are resolved against.

        Returns:
            A validated ``CliConfig`` instance.
        """
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        config = cls.model_validate(raw)
        if root_dir is not None:
            config.root_dir = root_dir
        return config

    @classmethod
    def from_env(cls, root_dir: Path | None = None) -> "CliConfig":
        """Load (or create) the configuration for the project in *root_dir*.

        Recognised variables (all optional):
            GOBLIN_HOME: directory holding per-project config folders
                (default ``~/.goblin``).
            GOBLIN_PROJECT_NAME: overrides project-name detection.
        """
        root = root_dir or Path.cwd()
        project_name = os.environ.get("GOBLIN_PROJECT_NAME") or get_project_name(root)
        path = default_config_path(project_name)

        if path.is_file():
            return cls.load(path, root_dir=root)

        config = cls(project_name=project_name, root_dir=root)
        config.save(path)
        return config


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


def goblin_home() -> Path:
    """Directory holding one config folder per project."""
    override = os.environ.get("GOBLIN_HOME")
    return Path(override) if override else Path.home() / ".goblin"


def default_config_path(project_name: str) -> Path:
    """Return ``<goblin_home>/<project_name>/cli_config.yaml``."""
    return goblin_home() / (project_name or "default") / CONFIG_FILE_NAME


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_config: CliConfig | None = None


def get_config() -> CliConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = CliConfig.from_env()
    return _config


def set_config(config: CliConfig | None) -> None:
    """Install *config* as the process-wide configuration (``None`` resets it)."""
    global _config
    _config = config
