"""Tests for repository generation and wiring.

Covers:
- Repository records and catalogue method names
- Rendering a repository and registering it in the central repository
- Registering the same repository twice keeps one entry
- Catalogue methods added to both the Protocol and the class
- Listing repositories and their methods
- Handing the central repository to an existing central service
"""

from __future__ import annotations

import ast

import pytest

from goblin.config import CliConfig
from goblin.mutator import SourceModule
from goblin.scaffolder.models import EntityName, RepoData, RepoMethod
from goblin.scaffolder.model_gen import ModelGenerator
from goblin.scaffolder.repo_gen import RepoGenerator
from goblin.scaffolder.service_gen import ServiceGenerator
from goblin.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


@pytest.fixture
def repos(config: CliConfig, renderer: TemplateRenderer) -> RepoGenerator:
    return RepoGenerator(config, renderer)


@pytest.fixture
def user_repo(repos: RepoGenerator, config: CliConfig, renderer: TemplateRenderer) -> RepoData:
    """A rendered ``user_repo.py`` with every catalogue method, registered centrally."""
    model = ModelGenerator(config, renderer).model_data("user")
    data = repos.repo_data("user", model, list(RepoMethod))
    repos.render_central_repo()
    repos.render_repo(data)
    repos.add_repo_to_central_repo(data)
    repos.add_methods_to_repo(data)
    return data


class TestRepoMethod:
    @pytest.mark.parametrize(
        ("method", "name"),
        [
            (RepoMethod.CREATE, "create_category"),
            (RepoMethod.UPDATE, "update_category"),
            (RepoMethod.DELETE, "delete_category"),
            (RepoMethod.LIST_ALL, "list_categories"),
            (RepoMethod.LIST_WITH_PAGINATION, "list_categories_with_pagination"),
            (RepoMethod.GET_BY_UUID, "get_category_by_uuid"),
        ],
    )
    def test_method_names(self, method: RepoMethod, name: str) -> None:
        assert method.method_name(EntityName(snake="category")) == name


class TestRepoData:
    def test_record(self, repos: RepoGenerator, config: CliConfig) -> None:
        data = repos.repo_data("user")
        assert data.path == config.repositories_dir / "user_repo.py"
        assert data.module == "app.repositories.user_repo"
        assert data.class_name == "UserRepo"
        assert data.interface_name == "UserRepoInterface"
        assert data.factory_name == "new_user_repo"
        assert data.field_name == "user_repo"
        assert not data.central_repo_exists

    def test_central_repo_exists_flag(self, repos: RepoGenerator) -> None:
        repos.render_central_repo()
        assert repos.repo_data("user").central_repo_exists


class TestCentralRepo:
    def test_render(self, repos: RepoGenerator) -> None:
        repos.render_central_repo()
        repos.render_unit_of_work()
        assert repos.central_repo_exists()
        text = repos.unit_of_work_path.read_text(encoding="utf-8")
        ast.parse(text)
        assert "from app.repositories.central_repo import CentralRepo, new_central_repo" in text

    def test_repo_is_registered(self, user_repo: RepoData, repos: RepoGenerator) -> None:
        text = repos.central_repo_path.read_text(encoding="utf-8")
        assert "user_repo: UserRepoInterface" in text
        assert "return CentralRepo(db=db, user_repo=new_user_repo(db))" in text
        assert "from app.repositories.user_repo import UserRepoInterface, new_user_repo" in text

    def test_registering_twice_keeps_one_entry(self, user_repo: RepoData, repos: RepoGenerator) -> None:
        before = repos.central_repo_path.read_bytes()
        assert not repos.add_repo_to_central_repo(user_repo)
        assert repos.central_repo_path.read_bytes() == before

        module = SourceModule.load(repos.central_repo_path)
        fields = [
            node.target.id for node in module.find_class("CentralRepo").body
            if isinstance(node, ast.AnnAssign)
        ]
        assert fields == ["db", "user_repo"]

    def test_central_service_gets_central_repo(self, repos: RepoGenerator, config: CliConfig, renderer: TemplateRenderer) -> None:
        services = ServiceGenerator(config, renderer)
        services.render_central_service(central_repo_exists=False)

        assert repos.add_central_repo_to_central_service(services.central_service_path)

        text = services.central_service_path.read_text(encoding="utf-8")
        assert "def new_central_service(central_repo: CentralRepo) -> CentralService:" in text
        assert "from app.repositories.central_repo import CentralRepo" in text
        assert not repos.add_central_repo_to_central_service(services.central_service_path)


class TestRepoMethods:
    def test_methods_on_protocol_and_class(self, user_repo: RepoData, repos: RepoGenerator) -> None:
        module = SourceModule.load(user_repo.path)
        expected = [
            "create_user",
            "update_user",
            "delete_user",
            "list_users",
            "list_users_with_pagination",
            "get_user_by_uuid",
        ]
        interface = [
            n.name for n in module.find_class("UserRepoInterface").body if isinstance(n, ast.FunctionDef)
        ]
        concrete = [n.name for n in module.find_class("UserRepo").body if isinstance(n, ast.FunctionDef)]
        assert interface == ["with_tx", *expected]
        assert concrete == ["with_tx", *expected]

    def test_imports(self, user_repo: RepoData) -> None:
        text = user_repo.path.read_text(encoding="utf-8")
        assert "from app.models.user import User" in text
        assert "from sqlalchemy import delete, select" in text
        assert "from app.db.pagination import Pagination" in text

    def test_adding_again_adds_nothing(self, user_repo: RepoData, repos: RepoGenerator) -> None:
        before = user_repo.path.read_bytes()
        assert repos.add_methods_to_repo(user_repo) == []
        assert user_repo.path.read_bytes() == before

    def test_no_model(self, repos: RepoGenerator) -> None:
        assert repos.add_methods_to_repo(repos.repo_data("audit", methods=[RepoMethod.CREATE])) == []


class TestQueries:
    def test_list_existing_repos(self, user_repo: RepoData, repos: RepoGenerator) -> None:
        refs = repos.list_existing_repos()
        assert [ref.name for ref in refs] == ["UserRepo"]
        assert repos.list_repo_methods(refs[0])[:2] == ["create_user", "update_user"]

    def test_repo_from_ref(self, user_repo: RepoData, repos: RepoGenerator) -> None:
        data = repos.repo_from_ref(repos.list_existing_repos()[0])
        assert data.name.snake == "user"
        assert data.module == "app.repositories.user_repo"
        assert data.model is None
