"""``goblin logger``: generate the application logger."""

from __future__ import annotations

from goblin.scaffolder import LoggerGenerator

from .common import announce, may_write


def run() -> None:
    loggers = LoggerGenerator()
    if may_write(loggers.logger_path, "Logger"):
        announce(loggers.render_logger())
