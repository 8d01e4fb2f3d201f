"""Tests for workerize and custom job generation.

Covers:
- The four workerize base files and initialisation detection
- Custom job metadata and its registration in job.py
- Registering the same job twice keeps one entry per table
- Custom worker pools with and without services
"""

from __future__ import annotations

import ast

import pytest

from goblin.config import CliConfig
from goblin.mutator import SourceModule
from goblin.scaffolder.job_gen import JobGenerator
from goblin.scaffolder.models import EntityName
from goblin.scaffolder.service_gen import ServiceGenerator
from goblin.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


@pytest.fixture
def jobs(config: CliConfig, renderer: TemplateRenderer) -> JobGenerator:
    return JobGenerator(config, renderer)


@pytest.fixture
def initialized(jobs: JobGenerator) -> JobGenerator:
    for file in jobs.workerize_files():
        jobs.render_workerize_file(file)
    return jobs


class TestWorkerize:
    def test_base_files(self, jobs: JobGenerator, config: CliConfig) -> None:
        files = jobs.workerize_files()
        assert [f.path for f in files] == [
            config.jobs_dir / "job.py",
            config.jobs_dir / "jobs_manager.py",
            config.workers_dir / "worker_pool.py",
            config.workers_dir / "orchestrator.py",
        ]
        assert all(f.should_write for f in files)
        assert not jobs.is_initialized()

    def test_render_all(self, initialized: JobGenerator) -> None:
        assert initialized.is_initialized()
        for file in initialized.workerize_files():
            assert file.exists
            assert not file.should_write
            ast.parse(file.path.read_text(encoding="utf-8"))

    def test_queue_prefix_uses_project_name(self, initialized: JobGenerator) -> None:
        text = initialized.jobs_manager_path.read_text(encoding="utf-8")
        assert 'QUEUE_PREFIX = "demo:jobs"' in text
        assert "from app.jobs.job import JOB_TYPE_NAMES, Job, JobType" in text


class TestCustomJob:
    def test_record(self, jobs: JobGenerator) -> None:
        data = jobs.custom_job_data("send_email")
        assert data.job_type_member == "SEND_EMAIL"
        assert data.metadata_class == "SendEmailJobMetadata"
        assert data.pool.snake == "send_email_worker_pool"
        assert not data.already_exists

    def test_register(self, initialized: JobGenerator) -> None:
        data = initialized.custom_job_data("send_email")
        initialized.render_metadata(data)

        assert initialized.register_job(data)

        module = SourceModule.load(initialized.job_path)
        text = module.render()
        assert "SEND_EMAIL = 1" in text
        assert "JobType.SEND_EMAIL: 'send_email'" in text
        assert "JobType.SEND_EMAIL: SendEmailJobMetadata" in text
        assert "from app.jobs.send_email_job_metadata import SendEmailJobMetadata" in text
        assert initialized.custom_job_data("send_email").already_exists

    def test_register_twice(self, initialized: JobGenerator) -> None:
        data = initialized.custom_job_data("send_email")
        initialized.register_job(data)
        before = initialized.job_path.read_bytes()

        assert not initialized.register_job(data)

        assert initialized.job_path.read_bytes() == before
        text = initialized.job_path.read_text(encoding="utf-8")
        assert text.count("JobType.SEND_EMAIL: 'send_email'") == 1
        assert text.count("SEND_EMAIL = ") == 1

    def test_second_job_gets_next_value(self, initialized: JobGenerator) -> None:
        initialized.register_job(initialized.custom_job_data("send_email"))
        initialized.register_job(initialized.custom_job_data("resize_image"))
        assert "RESIZE_IMAGE = 2" in initialized.job_path.read_text(encoding="utf-8")


class TestWorkerPool:
    def test_pool_without_services(self, initialized: JobGenerator, config: CliConfig) -> None:
        data = initialized.custom_job_data("send_email")
        data.worker_pool_size = 4

        path = initialized.render_worker_pool(data)

        assert path == config.workers_dir / "send_email_worker_pool.py"
        text = path.read_text(encoding="utf-8")
        ast.parse(text)
        assert "POOL_SIZE = 4" in text
        assert "def new_send_email_worker_pool(jobs_manager: JobsManager) -> WorkerPool:" in text
        assert "handlers={JobType.SEND_EMAIL: worker.handle}" in text

    def test_renamed_pool_with_services(
        self, initialized: JobGenerator, config: CliConfig, renderer: TemplateRenderer
    ) -> None:
        services = ServiceGenerator(config, renderer)
        data = initialized.custom_job_data("send_email")
        data.worker_pool_name = EntityName(snake="mailer_worker_pool")
        data.services = [services.service_data("mailer")]

        path = initialized.render_worker_pool(data)

        assert path.name == "mailer_worker_pool.py"
        text = path.read_text(encoding="utf-8")
        ast.parse(text)
        assert "mailer_service: MailerServiceInterface" in text
        assert "central_service: CentralService" in text
        assert "SendEmailWorker(mailer_service=central_service.mailer_service)" in text
