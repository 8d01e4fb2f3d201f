"""``goblin workerize``: background job infrastructure and custom jobs."""

from __future__ import annotations

from goblin.prompts import ask_int, ask_snake_case, confirm, multi_select, select
from goblin.scaffolder import DatabaseGenerator, JobGenerator, LoggerGenerator, ServiceGenerator
from goblin.scaffolder.models import DatabaseOption, EntityName
from goblin.utils import print_success, print_warning

from . import database as database_cmd
from .common import announce, ask_entity_name

OVERWRITE = "Overwrite the existing worker pool"
RENAME = "Rename the custom worker pool"


def run(job: bool = False) -> None:
    if job:
        run_job()
    else:
        initialize()


def ensure_databases(databases: DatabaseGenerator) -> bool:
    """Make sure a Redis instance and a persistent database instance exist.

    Returns:
        ``False`` if one is missing and the operator declined to create it.
    """
    has_redis = databases.has_redis()
    has_persistent = databases.has_persistent_database()
    if has_redis and has_persistent:
        return True

    if not confirm(
        "For implementing background jobs and workers, one persistent database and Redis "
        "need to be implemented, do you wish to continue with database implementations?",
        default=False,
    ):
        return False

    options: list[DatabaseOption] = []
    if not has_persistent:
        persistent = [option.value for option in DatabaseOption if option.is_persistent]
        options.append(DatabaseOption(select("Which persistent database do you want to use?", persistent)))
    if not has_redis:
        options.append(DatabaseOption.REDIS)
    database_cmd.create_databases(databases, database_cmd.ask_databases(databases, options))
    return databases.has_redis() and databases.has_persistent_database()


def initialize() -> bool:
    """Write the workerize base files, asking before replacing existing ones.

    Returns:
        ``True`` if workerize is initialised afterwards.
    """
    jobs = JobGenerator()
    if not ensure_databases(DatabaseGenerator(jobs.config, jobs.renderer)):
        print_warning("Workerize needs Redis and a persistent database; nothing was generated.")
        return False

    for file in jobs.workerize_files():
        if file.exists:
            file.overwrite = confirm(f"{file.path.name} already exists, do you wish to overwrite?", default=False)
        if file.should_write:
            announce(jobs.render_workerize_file(file))

    loggers = LoggerGenerator(jobs.config, jobs.renderer)
    if not loggers.logger_exists() and confirm(
        "Logger is not implemented, do you wish to implement it to enrich workers and jobs logic with useful logs?",
        default=False,
    ):
        announce(loggers.render_logger())
    return jobs.is_initialized()


# ---------------------------------------------------------------------------
# Custom job (``workerize -j``)
# ---------------------------------------------------------------------------


def run_job() -> None:
    jobs = JobGenerator()
    if not jobs.is_initialized():
        if not confirm(
            "There are missing workerize files, to implement a custom job, workerize command "
            "needs to be initialized first, do you wish to continue?",
            default=False,
        ):
            return
        if not initialize():
            return

    name = ask_entity_name(
        "job", "my_custom", lambda n: jobs.metadata_path(jobs.custom_job_data(n))
    )
    data = jobs.custom_job_data(name)
    announce(jobs.render_metadata(data))
    if not data.already_exists:
        jobs.register_job(data)

    if confirm(
        f"Do you want to implement a worker pool ({data.pool.snake}.py) for {data.name.pascal}Job?",
        default=False,
    ):
        data.create_worker_pool = True
        while jobs.pool_path(data.pool).exists():
            choice = select(
                f"Worker pool file {data.pool.snake}.py already exists, please specify if you want "
                "to rename your custom worker pool or to overwrite the existing one",
                [OVERWRITE, RENAME],
            )
            if choice == OVERWRITE:
                break
            pool_name = ask_snake_case(
                "Please type in the custom worker pool name (snake_case), it will get a _worker_pool suffix",
                data.name.snake,
            )
            data.worker_pool_name = EntityName(snake=f"{pool_name}_worker_pool")

        data.worker_pool_size = ask_int("Please type in the worker pool size", data.worker_pool_size)
        data.worker_pool_retries = ask_int(
            "Please type in the worker pool number of retries upon failure", data.worker_pool_retries
        )

        services = ServiceGenerator(jobs.config, jobs.renderer)
        by_name = {ref.name: ref for ref in services.list_existing_services()}
        if by_name:
            picked = multi_select("Select the services the worker uses", list(by_name))
            data.services = [services.service_from_ref(by_name[choice]) for choice in picked]
        announce(jobs.render_worker_pool(data))

    print_success(f"✅ {data.name.pascal} job generated successfully.")
