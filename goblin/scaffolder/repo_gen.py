"""Repository generation and wiring.

A repository module declares a ``<Entity>RepoInterface`` Protocol, a
``<Entity>Repo`` dataclass bound to a SQLAlchemy session, and a
``new_<entity>_repo(db)`` factory.  Every repository is registered in the
central repository (``central_repo.py``) so a single session can be shared
across repositories inside a unit of work.
"""

from __future__ import annotations

from pathlib import Path
from textwrap import indent

from goblin.config import CliConfig, get_config
from goblin.mutator import (
    add_constructor_param,
    add_import,
    add_interface_method,
    add_struct_field,
    wire_constructor_return,
)
from goblin.mutator.queries import DeclarationRef, find_classes_with_method, list_class_methods
from goblin.naming import pascal_to_snake

from .models import EntityName, ModelData, RepoData, RepoMethod
from .templates import TemplateRenderer

CENTRAL_REPO_MODULE = "central_repo"
CENTRAL_REPO_CLASS = "CentralRepo"
CENTRAL_REPO_FACTORY = "new_central_repo"
UNIT_OF_WORK_MODULE = "unit_of_work"
TX_METHOD = "with_tx"


class RepoGenerator:
    """Renders repository modules and wires them into the central repository."""

    def __init__(
        self,
        config: CliConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.renderer = renderer or TemplateRenderer()

    # -- Records -----------------------------------------------------------

    def repo_data(
        self,
        name: str,
        model: ModelData | None = None,
        methods: list[RepoMethod] | None = None,
    ) -> RepoData:
        module_name = f"{name}_repo"
        return RepoData(
            name=EntityName(snake=name),
            path=self.config.repositories_dir / f"{module_name}.py",
            module=self.config.module_for("repositories_folder_path", module_name),
            model=model,
            methods=methods or [],
            central_repo_exists=self.central_repo_exists(),
        )

    def repo_from_ref(self, ref: DeclarationRef) -> RepoData:
        """Rebuild the record of an existing repository class such as ``UserRepo``."""
        name = pascal_to_snake(ref.name.removesuffix("Repo"))
        data = self.repo_data(name)
        data.path = ref.path
        data.module = self.config.module_for("repositories_folder_path", ref.module_name)
        return data

    # -- Central repository ------------------------------------------------

    @property
    def central_repo_path(self) -> Path:
        return self.config.repositories_dir / f"{CENTRAL_REPO_MODULE}.py"

    @property
    def central_repo_module(self) -> str:
        return self.config.module_for("repositories_folder_path", CENTRAL_REPO_MODULE)

    @property
    def unit_of_work_path(self) -> Path:
        return self.config.repositories_dir / f"{UNIT_OF_WORK_MODULE}.py"

    def central_repo_exists(self) -> bool:
        return self.central_repo_path.is_file()

    def render_central_repo(self) -> Path:
        return self.renderer.render_to_file("repo/central_repo.py.j2", self.central_repo_path, {})

    def render_unit_of_work(self) -> Path:
        context = {"central_repo_module": self.central_repo_module}
        return self.renderer.render_to_file("repo/unit_of_work.py.j2", self.unit_of_work_path, context)

    def add_central_repo_to_central_service(self, central_service_path: Path) -> bool:
        """Give ``new_central_service`` a ``central_repo: CentralRepo`` parameter.

        Returns:
            ``True`` if the central service changed.
        """
        changed = add_constructor_param(
            central_service_path, "new_central_service", "central_repo", CENTRAL_REPO_CLASS
        )
        changed |= add_import(central_service_path, self.central_repo_module, [CENTRAL_REPO_CLASS])
        return changed

    # -- Repository --------------------------------------------------------

    def render_repo(self, data: RepoData) -> Path:
        context = {
            "repo_class": data.class_name,
            "interface_name": data.interface_name,
            "factory_name": data.factory_name,
        }
        return self.renderer.render_to_file("repo/repo.py.j2", data.path, context)

    def add_repo_to_central_repo(self, data: RepoData) -> bool:
        """Register *data* as a field of ``CentralRepo`` built from the shared session."""
        path = self.central_repo_path
        changed = add_struct_field(path, CENTRAL_REPO_CLASS, data.field_name, data.interface_name)
        changed |= add_constructor_param(path, CENTRAL_REPO_FACTORY, "db", "Session")
        changed |= wire_constructor_return(
            path, CENTRAL_REPO_FACTORY, data.field_name, f"{data.factory_name}(db)"
        )
        changed |= add_import(path, "sqlalchemy.orm", ["Session"])
        changed |= add_import(path, data.module, [data.interface_name, data.factory_name])
        return changed

    def add_methods_to_repo(self, data: RepoData) -> list[str]:
        """Add the selected catalogue methods to the repository's Protocol and class.

        Returns:
            Names of the methods that were added.
        """
        if data.model is None or not data.methods:
            return []

        imports: dict[str, list[str]] = {}
        sources: list[tuple[str, str, str]] = []
        for method in data.methods:
            name, signature, implementation, needed = self._method_sources(method, data.model)
            for module, names in needed:
                bucket = imports.setdefault(module, [])
                bucket.extend(n for n in names if n not in bucket)
            sources.append((name, signature, implementation))

        for module, names in imports.items():
            add_import(data.path, module, names)

        added: list[str] = []
        for name, signature, implementation in sources:
            if add_interface_method(data.path, data.interface_name, signature):
                added.append(name)
            add_interface_method(data.path, data.class_name, implementation)
        return added

    def _method_sources(
        self,
        method: RepoMethod,
        model: ModelData,
    ) -> tuple[str, str, str, list[tuple[str, list[str]]]]:
        """Return ``(name, signature, implementation, imports)`` for one catalogue method."""
        var = model.name.snake
        cls = model.class_name
        name = method.method_name(model.name)
        imports: list[tuple[str, list[str]]] = [(model.module, [cls])]

        if method is RepoMethod.CREATE:
            params, returns = f"{var}: {cls}", cls
            body = f"self.db.add({var})\nself.db.flush()\nreturn {var}"
        elif method is RepoMethod.UPDATE:
            params, returns = f"{var}: {cls}", cls
            body = f"merged = self.db.merge({var})\nself.db.flush()\nreturn merged"
        elif method is RepoMethod.DELETE:
            params, returns = "uuid: str", "None"
            body = f"self.db.execute(delete({cls}).where({cls}.uuid == uuid))"
            imports.append(("sqlalchemy", ["delete"]))
        elif method is RepoMethod.LIST_ALL:
            params, returns = "", f"list[{cls}]"
            body = f"return list(self.db.scalars(select({cls})))"
            imports.append(("sqlalchemy", ["select"]))
        elif method is RepoMethod.LIST_WITH_PAGINATION:
            params, returns = "pagination: Pagination", f"list[{cls}]"
            body = (
                f"stmt = select({cls}).offset(pagination.offset).limit(pagination.limit)\n"
                "return list(self.db.scalars(stmt))"
            )
            imports.append(("sqlalchemy", ["select"]))
            imports.append(
                (self.config.module_for("database_instances_folder_path", "pagination"), ["Pagination"])
            )
        else:
            params, returns = "uuid: str", f"{cls} | None"
            body = f"return self.db.get({cls}, uuid)"

        head = f"def {name}(self{', ' + params if params else ''}) -> {returns}:\n"
        signature = head + "    ..."
        implementation = head + indent(body, "    ")
        return name, signature, implementation, imports

    # -- Queries -----------------------------------------------------------

    def list_existing_repos(self) -> list[DeclarationRef]:
        """Repositories are concrete classes exposing ``with_tx``."""
        return find_classes_with_method(self.config.repositories_dir, TX_METHOD)

    def list_repo_methods(self, ref: DeclarationRef) -> list[str]:
        return list_class_methods(ref.path, ref.name, exclude=(TX_METHOD,))
