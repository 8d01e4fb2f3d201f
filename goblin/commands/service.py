"""``goblin service``: generate a service and register it in the central service."""

from __future__ import annotations

from goblin.prompts import confirm, multi_select, select
from goblin.scaffolder import ControllerGenerator, RepoGenerator, ServiceGenerator
from goblin.scaffolder.models import RepoData, ServiceData, Strategy
from goblin.utils import print_success

from . import repo as repo_cmd
from .common import announce, ask_entity_name, may_write


def run(central_service: bool = False) -> ServiceData | None:
    if central_service:
        run_central()
        return None

    services = ServiceGenerator()
    data = ask_service(services)
    create_service(services, data)
    offer_controller_injection(data)
    print_success(f"✅ {data.class_name} service generated successfully.")
    return data


def ask_service(services: ServiceGenerator, default: str = "") -> ServiceData:
    """Ask for the service name and its repositories, writing any new repository."""
    name = ask_entity_name("service", default, lambda n: services.service_data(n).path)
    repos = RepoGenerator(services.config, services.renderer)

    existing = repos.list_existing_repos()
    options = [Strategy.NEW.value, Strategy.NONE.value]
    if existing:
        options.insert(1, Strategy.EXISTING.value)
    strategy = Strategy(select("Choose repo strategy", options))

    data = services.service_data(name)
    if strategy is Strategy.NEW:
        repo, new_model = repo_cmd.ask_repo(repos, default=name)
        methods = [m.method_name(repo.model.name) for m in repo.methods] if repo.model else []
        data.repos = [repo]
        data.proxy_methods[repo.field_name] = _ask_proxy_methods(repo, methods)
        repo_cmd.create_repo(repos, repo, new_model)
    elif strategy is Strategy.EXISTING:
        by_name = {ref.name: ref for ref in existing}
        for choice in multi_select("Select the repos to use", list(by_name)):
            ref = by_name[choice]
            repo = repos.repo_from_ref(ref)
            data.repos.append(repo)
            data.proxy_methods[repo.field_name] = _ask_proxy_methods(repo, repos.list_repo_methods(ref))
    return data


def _ask_proxy_methods(repo: RepoData, available: list[str]) -> list[str]:
    if not available:
        return []
    preview = ", ".join(available)
    if not confirm(f"{repo.class_name} implements {preview}. Expose some of them on the service now?", default=True):
        return []
    return multi_select("Which service proxy methods do you want to implement?", available)


def create_service(services: ServiceGenerator, data: ServiceData) -> None:
    if not services.central_service_exists():
        write_central_service(services)

    announce(services.render_service(data))
    services.add_service_to_central_service(data)
    for repo in data.repos:
        services.add_repo_to_service(data, repo)
        methods = data.proxy_methods.get(repo.field_name)
        if methods:
            services.copy_repo_methods_to_service(data, repo, methods)


def offer_controller_injection(data: ServiceData) -> None:
    controllers = ControllerGenerator()
    existing = controllers.list_existing_controllers()
    if not existing or not confirm("Do you wish to inject this service to a controller?", default=True):
        return

    by_name = {ref.name: ref for ref in existing}
    controller = controllers.controller_from_ref(
        by_name[select("Select a controller to inject the service to", list(by_name))]
    )
    controllers.add_service_to_controller(controller, data)


# ---------------------------------------------------------------------------
# Central service (``service -c``)
# ---------------------------------------------------------------------------


def run_central() -> None:
    services = ServiceGenerator()
    repos = RepoGenerator(services.config, services.renderer)
    if not repos.central_repo_exists() and confirm(
        "Do you wish to inject a central repo in your service?", default=True
    ):
        repo_cmd.write_central_repo(repos)
    write_central_service(services, ask=True)


def write_central_service(services: ServiceGenerator, ask: bool = False) -> None:
    """Write ``central_service.py``, taking the central repository when it exists.

    A central controller that already exists gets the central service as a
    constructor parameter.
    """
    if ask and not may_write(services.central_service_path, "Central service"):
        return
    repos = RepoGenerator(services.config, services.renderer)
    announce(services.render_central_service(repos.central_repo_exists()))

    controllers = ControllerGenerator(services.config, services.renderer)
    if controllers.central_controller_exists():
        services.add_central_service_to_central_controller(controllers.central_controller_path)
