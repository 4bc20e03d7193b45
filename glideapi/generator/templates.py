"""Jinja2 template rendering for generated source files.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``glideapi/generator/templates/`` directory and renders them with a context
built from a module's intermediate representation.  Templates decide file
layout (imports, exports, blank lines); the compilers decide what goes in.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from ..naming import to_camel_case, to_pascal_case, to_title_case

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for generated TypeScript files.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  ``StrictUndefined`` is used so a missing context key
    fails the render instead of silently emitting an empty identifier.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Register custom filters
        self.env.filters["camel_case"] = to_camel_case
        self.env.filters["pascal_case"] = to_pascal_case
        self.env.filters["title_case"] = to_title_case
        self.env.filters["js_string"] = _js_string_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"model.ts.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def _js_string_filter(value: str) -> str:
    """Quote a value as a double-quoted JavaScript string literal."""
    return json.dumps(str(value), ensure_ascii=False)
