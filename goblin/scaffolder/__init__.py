"""goblin scaffolder -- renders and wires the layers of a generated application.

Each ``*Generator`` owns one layer (models, repositories, services,
controllers, router, middlewares, databases, logger, background jobs and the
``main.py`` entry point).  Generators never prompt; the interactive commands
in :mod:`goblin.commands` collect answers and call them.

Quick usage::

    from goblin.scaffolder import RepoGenerator

    repos = RepoGenerator()
    data = repos.repo_data("user")
    repos.render_repo(data)
    repos.add_repo_to_central_repo(data)
"""

from goblin.scaffolder.app_gen import AppGenerator
from goblin.scaffolder.controller_gen import ControllerGenerator
from goblin.scaffolder.database_gen import DatabaseGenerator
from goblin.scaffolder.job_gen import JobGenerator
from goblin.scaffolder.logger_gen import LoggerGenerator
from goblin.scaffolder.middleware_gen import MiddlewareGenerator
from goblin.scaffolder.migration_gen import MigrationGenerator
from goblin.scaffolder.model_gen import ModelGenerator
from goblin.scaffolder.repo_gen import RepoGenerator
from goblin.scaffolder.router_gen import RouterGenerator
from goblin.scaffolder.service_gen import ServiceGenerator
from goblin.scaffolder.templates import TemplateRenderer

__all__ = [
    "AppGenerator",
    "ControllerGenerator",
    "DatabaseGenerator",
    "JobGenerator",
    "LoggerGenerator",
    "MiddlewareGenerator",
    "MigrationGenerator",
    "ModelGenerator",
    "RepoGenerator",
    "RouterGenerator",
    "ServiceGenerator",
    "TemplateRenderer",
]
