"""Shared pytest fixtures for the goblin test suite.

Provides reusable fixtures for:
- An isolated GOBLIN_HOME and a temporary project root
- A process-wide CliConfig pointing at that root
- A TemplateRenderer over the bundled templates
- Writing dedented Python sources into the project
- Scripted answers for the interactive prompts
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from rich.prompt import Confirm, IntPrompt, Prompt

from goblin.config import CliConfig, set_config
from goblin.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Paths & Configuration
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def goblin_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Keep per-project config files out of the real home directory."""
    home = tmp_path / "goblin_home"
    monkeypatch.setenv("GOBLIN_HOME", str(home))
    monkeypatch.delenv("GOBLIN_PROJECT_NAME", raising=False)
    yield home
    set_config(None)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Temporary directory standing in for the generated application."""
    root = tmp_path / "demo"
    root.mkdir()
    return root


@pytest.fixture
def config(project_root: Path) -> CliConfig:
    """Default folder layout rooted at ``project_root``, installed process-wide."""
    cfg = CliConfig(project_name="demo", root_dir=project_root)
    set_config(cfg)
    return cfg


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


# ---------------------------------------------------------------------------
# Source files
# ---------------------------------------------------------------------------


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a dedented Python snippet to ``tmp_path/<name>`` and return its path."""

    def _write(name: str, source: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source).lstrip("\n"), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


class PromptScript:
    """Answers ``rich.prompt`` questions by substring of the question text.

    A question with no scripted answer takes its default, as if the operator
    pressed Enter.  A list of answers is consumed in order and its last item
    repeats.  ``select`` and ``multi_select`` answers are 1-based option
    numbers, e.g. ``"2"`` or ``"1,3"``.
    """

    MAX_QUESTIONS = 200

    def __init__(self) -> None:
        self.answers: dict[str, list[Any]] = {}
        self.asked: list[str] = []

    def set(self, answers: dict[str, Any]) -> "PromptScript":
        for key, value in answers.items():
            self.answers[key] = list(value) if isinstance(value, list) else [value]
        return self

    def ask(self, prompt: Any, *args: Any, **kwargs: Any) -> Any:
        message = str(prompt)
        self.asked.append(message)
        if len(self.asked) > self.MAX_QUESTIONS:
            raise AssertionError(f"prompt loop detected, last question: {message}")
        for key, queue in self.answers.items():
            if key in message:
                return queue.pop(0) if len(queue) > 1 else queue[0]
        if "default" in kwargs:
            return kwargs["default"]
        raise AssertionError(f"unexpected prompt without default: {message}")

    def was_asked(self, fragment: str) -> bool:
        return any(fragment in message for message in self.asked)


@pytest.fixture
def prompts(monkeypatch: pytest.MonkeyPatch) -> PromptScript:
    """Route every Prompt, IntPrompt and Confirm question through a PromptScript."""
    script = PromptScript()
    monkeypatch.setattr(Prompt, "ask", script.ask)
    monkeypatch.setattr(IntPrompt, "ask", script.ask)
    monkeypatch.setattr(Confirm, "ask", script.ask)
    return script
