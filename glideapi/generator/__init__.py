"""glideapi module generator -- emits CRUD modules and the routes aggregation file.

Quick usage::

    from glideapi.config import GlideConfig
    from glideapi.generator import ModuleGenerator, RouteAggregator, default_descriptor

    config = GlideConfig(project_root=Path("my-api"))
    await ModuleGenerator(config).generate(default_descriptor("blog-posts"))
    report = await RouteAggregator(config).discover_and_register()
"""

from glideapi.generator.descriptors import DTOField, ModelField, ModuleDescriptor, default_descriptor
from glideapi.generator.dto_compiler import compile_dto
from glideapi.generator.model_compiler import compile_model
from glideapi.generator.module_gen import GeneratedArtifact, ModuleGenerator, ModuleNames
from glideapi.generator.results import CompileFailure, CompileSuccess
from glideapi.generator.routes import RouteAggregator, RouteRegistryEntry, RouteSetupReport
from glideapi.generator.templates import TemplateRenderer

__all__ = [
    "CompileFailure",
    "CompileSuccess",
    "DTOField",
    "GeneratedArtifact",
    "ModelField",
    "ModuleDescriptor",
    "ModuleGenerator",
    "ModuleNames",
    "RouteAggregator",
    "RouteRegistryEntry",
    "RouteSetupReport",
    "TemplateRenderer",
    "compile_dto",
    "compile_model",
    "default_descriptor",
]
