"""Jinja2 template rendering for generated source files.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``goblin/scaffolder/templates/`` directory and renders them with a small
context of package paths, entity names and feature flags.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from goblin.naming import (
    pascal_to_snake,
    pluralize,
    snake_to_camel,
    snake_to_pascal,
    to_upper_snake,
)


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates into the generated project.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  Templates are rendered with a context dictionary that
    holds package paths, entity names and feature flags.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Register custom filters
        self.env.filters["pascal_case"] = snake_to_pascal
        self.env.filters["camel_case"] = snake_to_camel
        self.env.filters["snake_case"] = pascal_to_snake
        self.env.filters["upper_snake"] = to_upper_snake
        self.env.filters["pluralize"] = pluralize

    # -- Rendering -----------------------------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"repo/repo.py.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
        *,
        package: bool = True,
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.  For Python output with
        *package* set, an empty ``__init__.py`` is added to the destination
        folder and to every folder this call created, so the generated module
        is importable.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        created = _missing_dirs(out.parent)
        _write_file(out, content)
        if package and out.suffix == ".py":
            for folder in {out.parent, *created}:
                init = folder / "__init__.py"
                if not init.exists():
                    init.touch()
        return out


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _missing_dirs(directory: Path) -> list[Path]:
    """Return *directory* and its ancestors that do not exist yet."""
    missing: list[Path] = []
    while not directory.exists():
        missing.append(directory)
        directory = directory.parent
    return missing
