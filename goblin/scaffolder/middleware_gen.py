"""HTTP middleware generation.

``recover`` has no module of its own; the router template installs an
exception handler for it.  Every other option is written to
``<middlewares>/<option>_middleware.py`` together with its side files and
``.env`` entries.
"""

from __future__ import annotations

from pathlib import Path

from goblin.config import CliConfig, get_config
from goblin.mutator.queries import find_functions
from goblin.utils import write_env_file

from .logger_gen import LoggerGenerator
from .models import MiddlewareOption
from .templates import TemplateRenderer

AUTH_JWT_MODULE = "jwt"

MIDDLEWARE_ENV_DEFAULTS: dict[MiddlewareOption, dict[str, str]] = {
    MiddlewareOption.JWT: {"JWT_SECRET": "change-me"},
    MiddlewareOption.ALLOW_ORIGIN: {
        "ALLOW_ORIGINS": "http://localhost:3000",
        "ALLOW_ORIGINS_WILDCARDS": "",
    },
}


class MiddlewareGenerator:
    def __init__(
        self,
        config: CliConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.renderer = renderer or TemplateRenderer()
        self.logger = LoggerGenerator(self.config, self.renderer)

    def middleware_path(self, option: MiddlewareOption) -> Path | None:
        if option.file_name is None:
            return None
        return self.config.middlewares_dir / option.file_name

    def middleware_module(self, option: MiddlewareOption) -> str:
        return self.config.module_for("middlewares_folder_path", option.function_name)

    @property
    def auth_jwt_path(self) -> Path:
        return self.config.auth_dir / f"{AUTH_JWT_MODULE}.py"

    def render_middleware(self, option: MiddlewareOption) -> list[Path]:
        """Write the module for *option* plus whatever it depends on.

        Returns:
            Every file written; empty for ``recover``.
        """
        path = self.middleware_path(option)
        if path is None:
            return []

        written: list[Path] = []
        context: dict[str, str] = {}
        if option is MiddlewareOption.JWT:
            written.append(self.renderer.render_to_file("auth/jwt.py.j2", self.auth_jwt_path, {}))
            context["auth_module"] = self.config.module_for("auth_folder_path", AUTH_JWT_MODULE)
        elif option is MiddlewareOption.LOGGING:
            if not self.logger.logger_exists():
                written.append(self.logger.render_logger())
            context["logger_module"] = self.logger.logger_module

        written.append(
            self.renderer.render_to_file(f"middleware/{option.function_name}.py.j2", path, context)
        )
        if option in MIDDLEWARE_ENV_DEFAULTS:
            write_env_file(MIDDLEWARE_ENV_DEFAULTS[option], self.config.env_path)
        return written

    def list_existing_middlewares(self) -> list[str]:
        """Names (without the ``_middleware`` suffix) of the middlewares already written."""
        refs = find_functions(self.config.middlewares_dir, r"\w+_middleware")
        names: list[str] = []
        for ref in refs:
            name = ref.name.removesuffix("_middleware")
            if name not in names:
                names.append(name)
        return names
