"""Router generation."""

from __future__ import annotations

from pathlib import Path

from goblin.config import CliConfig, get_config

from .controller_gen import CENTRAL_CONTROLLER_MODULE
from .middleware_gen import MiddlewareGenerator
from .models import MiddlewareOption, RouterData
from .templates import TemplateRenderer

ROUTER_MODULE = "router"
REQUEST_BINDER_MODULE = "custom_request_binder"

# Outermost first: requests pass through the middlewares in this order.
MIDDLEWARE_ORDER: tuple[MiddlewareOption, ...] = (
    MiddlewareOption.LOGGING,
    MiddlewareOption.ALLOW_ORIGIN,
    MiddlewareOption.RATE_LIMITER,
    MiddlewareOption.JWT,
)


class RouterGenerator:
    def __init__(
        self,
        config: CliConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.renderer = renderer or TemplateRenderer()

    @property
    def router_path(self) -> Path:
        return self.config.router_dir / f"{ROUTER_MODULE}.py"

    @property
    def router_module(self) -> str:
        return self.config.module_for("router_folder_path", ROUTER_MODULE)

    @property
    def request_binder_path(self) -> Path:
        return self.config.router_dir / f"{REQUEST_BINDER_MODULE}.py"

    def router_exists(self) -> bool:
        return self.router_path.is_file()

    def render_router(self, data: RouterData) -> list[Path]:
        """Write ``router.py`` and ``custom_request_binder.py``."""
        middlewares = MiddlewareGenerator(self.config, self.renderer)
        enabled = [
            {"module": middlewares.middleware_module(option), "function": option.function_name}
            for option in MIDDLEWARE_ORDER
            if getattr(data, option.value)
        ]
        context = {
            "project_name": self.config.project_name,
            "central_controller_module": self.config.module_for(
                "controllers_folder_path", CENTRAL_CONTROLLER_MODULE
            ),
            "recover": data.recover,
            "implement_middlewares": data.implement_middlewares,
            "middlewares": enabled,
        }
        return [
            self.renderer.render_to_file("router/router.py.j2", self.router_path, context),
            self.renderer.render_to_file(
                "router/custom_request_binder.py.j2", self.request_binder_path, {}
            ),
        ]
