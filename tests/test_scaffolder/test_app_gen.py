"""Tests for main.py generation.

Covers:
- Central layers built bottom-up from the session factory
- Optional central repository and central service
- A central repository without a persistent database is refused
- Server settings merged into .env
"""

from __future__ import annotations

import ast

import pytest
from dotenv import dotenv_values

from goblin.config import CliConfig
from goblin.scaffolder.app_gen import AppGenerator
from goblin.scaffolder.models import DatabaseOption
from goblin.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


@pytest.fixture
def app(config: CliConfig, renderer: TemplateRenderer) -> AppGenerator:
    return AppGenerator(config, renderer)


class TestRenderMain:
    def test_full_stack(self, app: AppGenerator, config: CliConfig) -> None:
        path = app.render_main(
            central_repo=True,
            central_service=True,
            database=DatabaseOption.POSTGRES,
            port=9000,
        )

        assert path == config.root_dir / "main.py"
        assert not (config.root_dir / "__init__.py").exists()
        text = path.read_text(encoding="utf-8")
        ast.parse(text)
        assert "from app.db.postgres import new_postgres_session_factory" in text
        assert "central_repo = new_central_repo(session_factory())" in text
        assert "central_service = new_central_service(central_repo)" in text
        assert "central_controller = new_central_controller(central_service)" in text
        assert '"SERVER_BIND_PORT", "9000"' in text

    def test_controller_only(self, app: AppGenerator) -> None:
        text = app.render_main(central_repo=False, central_service=False).read_text(encoding="utf-8")
        ast.parse(text)
        assert "central_controller = new_central_controller()" in text
        assert "new_central_repo" not in text
        assert "session_factory" not in text

    def test_service_without_repo(self, app: AppGenerator) -> None:
        text = app.render_main(central_repo=False, central_service=True).read_text(encoding="utf-8")
        ast.parse(text)
        assert "central_service = new_central_service()" in text

    @pytest.mark.parametrize("database", [None, DatabaseOption.REDIS])
    def test_central_repo_needs_persistent_database(
        self, app: AppGenerator, database: DatabaseOption | None
    ) -> None:
        with pytest.raises(ValueError, match="PostgreSQL or MariaDB"):
            app.render_main(central_repo=True, central_service=True, database=database)
        assert not app.main_path.exists()


class TestServerEnv:
    def test_write_server_env(self, app: AppGenerator, config: CliConfig) -> None:
        assert app.write_server_env(8081) == ["SERVER_BIND_PORT", "SERVER_BIND_ADDRESS"]
        env = dotenv_values(config.env_path)
        assert env["SERVER_BIND_PORT"] == "8081"
        assert env["SERVER_BIND_ADDRESS"] == "0.0.0.0"
        assert app.write_server_env(9999) == []
