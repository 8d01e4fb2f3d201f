"""Logger module generation."""

from __future__ import annotations

from pathlib import Path

from goblin.config import CliConfig, get_config

from .templates import TemplateRenderer

LOGGER_MODULE = "logger"


class LoggerGenerator:
    def __init__(
        self,
        config: CliConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.renderer = renderer or TemplateRenderer()

    @property
    def logger_path(self) -> Path:
        return self.config.logger_dir / f"{LOGGER_MODULE}.py"

    @property
    def logger_module(self) -> str:
        return self.config.module_for("logger_folder_path", LOGGER_MODULE)

    def logger_exists(self) -> bool:
        return self.logger_path.is_file()

    def render_logger(self) -> Path:
        return self.renderer.render_to_file("logger/logger.py.j2", self.logger_path, {})
