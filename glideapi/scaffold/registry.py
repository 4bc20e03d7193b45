"""Registry of backend templates.

A template is a directory under ``glideapi/scaffold/templates/`` holding a
``project-files/`` tree, paired with a :class:`TemplateConfig` entry that
knows how to bootstrap a project from it and which module descriptor
``generate-module`` starts from.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, Field

from ..errors import ConfigurationMissing
from ..generator.descriptors import ModuleDescriptor, default_descriptor

TEMPLATES_ROOT = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# Plan models
# ---------------------------------------------------------------------------


class TemplateFile(BaseModel):
    """One file copied verbatim from the template into the new project."""

    source: Path
    target: Path


class InitPlan(BaseModel):
    """Everything ``init`` does for one template, in execution order."""

    name: str = Field(..., description="Human readable template name")
    template: str = Field(..., description="Registry key written to glideapi.json")
    cwd: Path = Field(..., description="Project directory every command runs in")
    command: str = Field(..., description="Bootstrap command (package init and installs)")
    post_install_commands: list[str] = Field(default_factory=list)
    template_files: list[TemplateFile] = Field(default_factory=list)
    finalization_commands: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TemplateConfig:
    """Registry entry: how to initialise a project and seed its modules."""

    key: str
    init: Callable[[Path], InitPlan]
    module_descriptor: Callable[[str, bool], ModuleDescriptor] = default_descriptor


def _express_mongodb_plan(target: Path) -> InitPlan:
    from .express_mongodb import build_plan

    return build_plan(target)


TEMPLATE_CONFIGS: dict[str, TemplateConfig] = {
    "express-mongodb": TemplateConfig(key="express-mongodb", init=_express_mongodb_plan),
}


def available_templates(root: Path | None = None) -> list[str]:
    """Template directories that have a registry entry, sorted by name."""
    base = root or TEMPLATES_ROOT
    if not base.is_dir():
        return []
    return sorted(
        entry.name for entry in base.iterdir() if entry.is_dir() and entry.name in TEMPLATE_CONFIGS
    )


def get_template(key: str) -> TemplateConfig:
    """Look up a registry entry.

    Raises:
        ConfigurationMissing: If *key* names no registered template.
    """
    try:
        return TEMPLATE_CONFIGS[key]
    except KeyError:
        known = ", ".join(sorted(TEMPLATE_CONFIGS)) or "none"
        raise ConfigurationMissing(
            f"Unknown template {key!r}. Available templates: {known}"
        ) from None
