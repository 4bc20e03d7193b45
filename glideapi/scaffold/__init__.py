"""Project scaffolding: template registry and the ``init`` pipeline."""

from glideapi.scaffold.initializer import InitReport, ScaffoldInitializer
from glideapi.scaffold.registry import (
    TEMPLATE_CONFIGS,
    InitPlan,
    TemplateConfig,
    TemplateFile,
    available_templates,
    get_template,
)

__all__ = [
    "InitPlan",
    "InitReport",
    "ScaffoldInitializer",
    "TEMPLATE_CONFIGS",
    "TemplateConfig",
    "TemplateFile",
    "available_templates",
    "get_template",
]
