"""Header/footer boilerplate rendered around the compiled body."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATES_PATH = Path(__file__).parent / "templates"


class TemplateRenderer(ABC):
    """Renders the fixed script boilerplate (shebang, helpers, traps)."""

    @abstractmethod
    def render(self, name: str, **context: Any) -> str:
        """Render the template ``name`` (e.g. "header.sh") with ``context``."""
        pass


class JinjaTemplateRenderer(TemplateRenderer):
    """Renders ``<name>.j2`` templates from a directory with Jinja2.

    Usage:
        renderer = JinjaTemplateRenderer()
        header = renderer.render("header.sh", finish="...", retry_attempts=3)
    """

    def __init__(self, templates_dir: Path | None = None):
        self.templates_dir = Path(templates_dir or TEMPLATES_PATH)
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            keep_trailing_newline=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
            autoescape=False,
        )

    def render(self, name: str, **context: Any) -> str:
        tmpl = self._env.get_template(f"{name}.j2")
        return tmpl.render(**context)
