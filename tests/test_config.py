"""Tests for goblin.config.

Covers:
- CliConfig defaults and derived directories
- Dotted module paths for configured folders
- Map view and validated updates
- YAML save/load round trip
- from_env() creating and re-reading the per-project file
- The process-wide instance (get_config/set_config)
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from goblin.config import (
    CONFIG_FILE_NAME,
    CliConfig,
    default_config_path,
    get_config,
    goblin_home as home_dir,
    set_config,
)


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Defaults and derived paths
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_default_folders(self) -> None:
        cfg = CliConfig(project_name="demo")
        assert cfg.models_folder_path == "app/models"
        assert cfg.repositories_folder_path == "app/repositories"
        assert cfg.migrations_folder_path == "migrations"

    def test_directories_resolve_against_root(self, tmp_path: Path) -> None:
        cfg = CliConfig(project_name="demo", root_dir=tmp_path)
        assert cfg.models_dir == tmp_path / "app" / "models"
        assert cfg.jobs_dir == tmp_path / "app" / "jobs"
        assert cfg.env_path == tmp_path / ".env"

    def test_module_for(self) -> None:
        cfg = CliConfig(project_name="demo")
        assert cfg.module_for("models_folder_path", "user") == "app.models.user"

    def test_module_for_root_folder(self) -> None:
        cfg = CliConfig(project_name="demo", models_folder_path=".")
        assert cfg.module_for("models_folder_path", "user") == "user"


# ---------------------------------------------------------------------------
# Map view and updates
# ---------------------------------------------------------------------------


class TestMapAndUpdate:
    def test_as_map_excludes_root_dir(self, tmp_path: Path) -> None:
        values = CliConfig(project_name="demo", root_dir=tmp_path).as_map()
        assert "root_dir" not in values
        assert values["project_name"] == "demo"
        assert list(values)[0] == "project_name"

    def test_update_returns_copy(self, tmp_path: Path) -> None:
        cfg = CliConfig(project_name="demo", root_dir=tmp_path)
        updated = cfg.update({"models_folder_path": "src/models"})
        assert updated.models_folder_path == "src/models"
        assert updated.root_dir == tmp_path
        assert cfg.models_folder_path == "app/models"

    def test_update_rejects_unknown_key(self) -> None:
        with pytest.raises(KeyError, match="not_a_setting"):
            CliConfig(project_name="demo").update({"not_a_setting": "x"})


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class TestPersistence:
    def test_default_config_path(self, goblin_home: Path) -> None:
        assert home_dir() == goblin_home
        assert default_config_path("demo") == goblin_home / "demo" / CONFIG_FILE_NAME

    def test_save_and_load(self, tmp_path: Path) -> None:
        cfg = CliConfig(project_name="demo", workers_folder_path="src/workers")
        path = cfg.save(tmp_path / "cfg" / CONFIG_FILE_NAME)

        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert raw["workers_folder_path"] == "src/workers"
        assert "root_dir" not in raw

        loaded = CliConfig.load(path, root_dir=tmp_path)
        assert loaded.workers_folder_path == "src/workers"
        assert loaded.root_dir == tmp_path

    def test_load_rejects_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            CliConfig.load(path)

    def test_from_env_creates_file(
        self, goblin_home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GOBLIN_PROJECT_NAME", "shop")
        cfg = CliConfig.from_env(tmp_path)
        assert cfg.project_name == "shop"
        assert (goblin_home / "shop" / CONFIG_FILE_NAME).is_file()

    def test_from_env_reads_existing_file(
        self, goblin_home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GOBLIN_PROJECT_NAME", "shop")
        CliConfig(project_name="shop", models_folder_path="domain").save()
        cfg = CliConfig.from_env(tmp_path)
        assert cfg.models_folder_path == "domain"
        assert cfg.root_dir == tmp_path

    def test_project_name_from_pyproject(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "billing"\n', encoding="utf-8")
        assert CliConfig.from_env(tmp_path).project_name == "billing"


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------


class TestProcessConfig:
    def test_set_and_get(self, tmp_path: Path) -> None:
        cfg = CliConfig(project_name="demo", root_dir=tmp_path)
        set_config(cfg)
        assert get_config() is cfg

    def test_get_loads_once(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        first = get_config()
        assert get_config() is first
