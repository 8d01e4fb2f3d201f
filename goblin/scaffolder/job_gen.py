"""Background job infrastructure ("workerize") and custom job generation.

The base files are the job definitions (``job.py``), the Redis queue manager
(``jobs_manager.py``), the thread-pool worker (``worker_pool.py``) and the
orchestrator that runs every pool.  A custom job adds a metadata model,
registers itself in ``job.py`` through structural edits and optionally gets
a dedicated worker pool.
"""

from __future__ import annotations

from pathlib import Path

from goblin.config import CliConfig, get_config
from goblin.mutator import add_enum_member, add_import, merge_mapping_entries

from .models import CustomJobData, EntityName, WorkerizeFile
from .service_gen import CENTRAL_SERVICE_MODULE
from .templates import TemplateRenderer

JOB_MODULE = "job"
JOBS_MANAGER_MODULE = "jobs_manager"
WORKER_POOL_MODULE = "worker_pool"
ORCHESTRATOR_MODULE = "orchestrator"

JOB_TYPE_ENUM = "JobType"
JOB_TYPE_NAMES = "JOB_TYPE_NAMES"
JOB_TYPE_METADATA = "JOB_TYPE_METADATA"


class JobGenerator:
    """Renders the workerize base files and custom jobs."""

    def __init__(
        self,
        config: CliConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.renderer = renderer or TemplateRenderer()

    # -- Paths and modules -------------------------------------------------

    @property
    def job_path(self) -> Path:
        return self.config.jobs_dir / f"{JOB_MODULE}.py"

    @property
    def jobs_manager_path(self) -> Path:
        return self.config.jobs_dir / f"{JOBS_MANAGER_MODULE}.py"

    @property
    def worker_pool_path(self) -> Path:
        return self.config.workers_dir / f"{WORKER_POOL_MODULE}.py"

    @property
    def orchestrator_path(self) -> Path:
        return self.config.workers_dir / f"{ORCHESTRATOR_MODULE}.py"

    def _context(self) -> dict[str, str]:
        return {
            "project_name": self.config.project_name,
            "job_module": self.config.module_for("jobs_folder_path", JOB_MODULE),
            "jobs_manager_module": self.config.module_for("jobs_folder_path", JOBS_MANAGER_MODULE),
            "worker_pool_module": self.config.module_for("workers_folder_path", WORKER_POOL_MODULE),
        }

    # -- Workerize ---------------------------------------------------------

    def workerize_files(self) -> list[WorkerizeFile]:
        """The four base files, each marked with whether it already exists."""
        files = [
            ("workerize/job.py.j2", self.job_path),
            ("workerize/jobs_manager.py.j2", self.jobs_manager_path),
            ("workerize/worker_pool.py.j2", self.worker_pool_path),
            ("workerize/orchestrator.py.j2", self.orchestrator_path),
        ]
        return [WorkerizeFile(template=t, path=p, exists=p.is_file()) for t, p in files]

    def is_initialized(self) -> bool:
        return all(f.exists for f in self.workerize_files())

    def render_workerize_file(self, file: WorkerizeFile) -> Path:
        return self.renderer.render_to_file(file.template, file.path, self._context())

    # -- Custom jobs -------------------------------------------------------

    def custom_job_data(self, name: str) -> CustomJobData:
        data = CustomJobData(name=EntityName(snake=name))
        data.already_exists = self.metadata_path(data).is_file()
        return data

    def metadata_path(self, data: CustomJobData) -> Path:
        return self.config.jobs_dir / f"{data.metadata_module_name}.py"

    def metadata_module(self, data: CustomJobData) -> str:
        return self.config.module_for("jobs_folder_path", data.metadata_module_name)

    def render_metadata(self, data: CustomJobData) -> Path:
        context = {"job_name": data.name.snake, "metadata_class": data.metadata_class}
        return self.renderer.render_to_file(
            "workerize/job_metadata.py.j2", self.metadata_path(data), context
        )

    def register_job(self, data: CustomJobData) -> bool:
        """Add the job to ``JobType`` and both lookup tables in ``job.py``.

        Returns:
            ``True`` if ``job.py`` changed.
        """
        path = self.job_path
        member = f"{JOB_TYPE_ENUM}.{data.job_type_member}"
        changed = add_enum_member(path, JOB_TYPE_ENUM, data.job_type_member)
        changed |= add_import(path, self.metadata_module(data), [data.metadata_class])
        changed |= merge_mapping_entries(path, JOB_TYPE_NAMES, {member: repr(data.name.snake)})
        changed |= merge_mapping_entries(path, JOB_TYPE_METADATA, {member: data.metadata_class})
        return changed

    def pool_path(self, pool: EntityName) -> Path:
        return self.config.workers_dir / f"{pool.snake}.py"

    def render_worker_pool(self, data: CustomJobData) -> Path:
        context = {
            **self._context(),
            "job_name": data.name.snake,
            "job_type_member": data.job_type_member,
            "metadata_module": self.metadata_module(data),
            "metadata_class": data.metadata_class,
            "central_service_module": self.config.module_for("services_folder_path", CENTRAL_SERVICE_MODULE),
            "services": data.services,
            "worker_class": data.worker_class,
            "pool_name": data.pool.snake,
            "pool_size": data.worker_pool_size,
            "retries": data.worker_pool_retries,
        }
        return self.renderer.render_to_file(
            "workerize/custom_worker_pool.py.j2", self.pool_path(data.pool), context
        )
