"""Jinja2 rendering of the files dropletkit writes to the host."""

import os
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "..", "templates")


class TemplateRenderer:
    """Renders packaged templates from structured config objects."""

    def __init__(self, templates_dir: Optional[str] = None):
        self.jinja_env = Environment(
            loader=FileSystemLoader(templates_dir or TEMPLATES_DIR),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, template_name: str, **context: Any) -> str:
        """Render a template by file name."""
        template = self.jinja_env.get_template(template_name)
        return template.render(**context)
