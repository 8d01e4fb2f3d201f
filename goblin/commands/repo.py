"""``goblin repo``: generate a repository and register it in the central repository."""

from __future__ import annotations

from goblin.prompts import confirm, multi_select, select
from goblin.scaffolder import ModelGenerator, RepoGenerator, ServiceGenerator
from goblin.scaffolder.models import ModelData, RepoData, RepoMethod, Strategy
from goblin.utils import print_success, print_warning

from . import model as model_cmd
from .common import announce, ask_entity_name, may_write


def run(central_repo: bool = False) -> RepoData | None:
    if central_repo:
        run_central()
        return None

    repos = RepoGenerator()
    data, new_model = ask_repo(repos)
    create_repo(repos, data, new_model)
    offer_service_injection(data)
    print_success(f"✅ {data.class_name} repository generated successfully.")
    return data


def ask_repo(repos: RepoGenerator, default: str = "") -> tuple[RepoData, bool]:
    """Collect everything a new repository needs without writing anything.

    Returns:
        The repository record and whether its model is new and still has to
        be written by :func:`create_repo`.
    """
    name = ask_entity_name("repository", default, lambda n: repos.repo_data(n).path)
    models = ModelGenerator(repos.config, repos.renderer)

    existing = models.list_existing_models()
    options = [Strategy.NEW.value]
    if existing:
        options.append(Strategy.EXISTING.value)
    strategy = Strategy(select("Choose model strategy", options))

    model: ModelData
    if strategy is Strategy.EXISTING:
        by_name = {ref.name: ref for ref in existing}
        model = models.model_from_ref(by_name[select("Select a model to use", list(by_name))])
    else:
        model = model_cmd.ask_model(models, default=name)

    methods: list[RepoMethod] = []
    if confirm(f"Do you want to implement {model.class_name} repository methods now?", default=True):
        labels = {method.method_name(model.name): method for method in RepoMethod}
        methods = [labels[m] for m in multi_select("Which methods do you want to implement?", list(labels))]

    return repos.repo_data(name, model, methods), strategy is Strategy.NEW


def create_repo(repos: RepoGenerator, data: RepoData, new_model: bool = False) -> None:
    """Write the model (if new), the central repository (if missing) and the repository."""
    if new_model and data.model is not None:
        model_cmd.create_model(ModelGenerator(repos.config, repos.renderer), data.model)

    if not repos.central_repo_exists():
        write_central_repo(repos)

    announce(repos.render_repo(data))
    repos.add_repo_to_central_repo(data)
    repos.add_methods_to_repo(data)


def offer_service_injection(data: RepoData) -> None:
    services = ServiceGenerator()
    existing = services.list_existing_services()
    if not existing or not confirm("Do you wish to inject this repo to a service?", default=True):
        return

    by_name = {ref.name: ref for ref in existing}
    service = services.service_from_ref(by_name[select("Select a service to inject the repo to", list(by_name))])
    services.add_repo_to_service(service, data)

    if data.methods:
        names = [method.method_name(data.model.name) for method in data.methods]
        picked = multi_select("Which methods do you want the service to expose?", names)
        if picked:
            services.copy_repo_methods_to_service(service, data, picked)

    if services.central_service_exists():
        print_warning(
            f"Pass central_repo.{data.field_name} to {service.factory_name}() "
            f"in {services.central_service_path.name}."
        )


# ---------------------------------------------------------------------------
# Central repository (``repo -c``)
# ---------------------------------------------------------------------------


def run_central() -> None:
    write_central_repo(RepoGenerator(), ask=True)


def write_central_repo(repos: RepoGenerator, ask: bool = False) -> None:
    """Write ``central_repo.py`` and ``unit_of_work.py``.

    With *ask*, existing files are only replaced after a double confirmation.
    A central service that already exists gets the central repository as a
    constructor parameter.
    """
    if not ask or may_write(repos.central_repo_path, "Central repository"):
        announce(repos.render_central_repo())
    if not ask or may_write(repos.unit_of_work_path, "Unit of work repository util"):
        announce(repos.render_unit_of_work())

    services = ServiceGenerator(repos.config, repos.renderer)
    if services.central_service_exists():
        repos.add_central_repo_to_central_service(services.central_service_path)
