"""Module generation orchestrator.

Takes a :class:`ModuleDescriptor` and writes the five coupled files of one
CRUD module into ``<modules_dir>/<module>/``:

- ``<module>.model.ts``            (always overwritten)
- ``dto/<module>.dto.ts``          (always overwritten)
- ``<module>.service.ts``          (always overwritten)
- ``<module>.controller.ts``       (always overwritten)
- ``routes/<module>.routes.ts``    (written only if absent)

Routes files collect hand-written middleware wiring, so regeneration never
touches an existing one.  Every artifact is rendered before the first write:
a failed compile leaves the module directory exactly as it was.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..config import GlideConfig
from ..errors import FileWriteFailure, GenerationFailure
from ..naming import normalize_module_name, to_camel_case, to_pascal_case
from ..utils import write_text
from .descriptors import ModuleDescriptor
from .dto_compiler import compile_dto
from .model_compiler import compile_model
from .results import CompileResult, guarded
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)

# (HTTP method, path, controller handler) for the routes stub.
CRUD_HANDLERS: tuple[tuple[str, str, str], ...] = (
    ("get", "/", "getAll"),
    ("post", "/", "insert"),
    ("get", "/:id", "getById"),
    ("put", "/:id", "update"),
    ("delete", "/:id", "delete"),
)


@dataclass(frozen=True)
class ModuleNames:
    """Every identifier derived from one normalized module name."""

    module: str
    pascal: str
    camel: str

    @property
    def type_name(self) -> str:
        return f"{self.pascal}Type"

    @property
    def model_name(self) -> str:
        return f"{self.pascal}Model"

    @property
    def router(self) -> str:
        return f"{self.camel}Router"

    @classmethod
    def derive(cls, raw_name: str) -> "ModuleNames":
        module = normalize_module_name(raw_name)
        return cls(module=module, pascal=to_pascal_case(module), camel=to_camel_case(module))


@dataclass
class GeneratedArtifact:
    """One generated file and whether it was written on this run."""

    kind: str
    path: Path
    content: str
    overwrite: bool = True
    written: bool = field(default=False)


def compile_routes_stub(
    names: ModuleNames, authenticated: bool, renderer: TemplateRenderer
) -> CompileResult:
    """Render the initial CRUD routes file for a module."""
    return guarded(
        "routes",
        names.module,
        lambda: renderer.render(
            "routes.ts.j2",
            {"names": names, "authenticated": authenticated, "handlers": CRUD_HANDLERS},
        ),
    )


class ModuleGenerator:
    """Generates one CRUD module inside an existing project."""

    def __init__(self, config: GlideConfig, renderer: TemplateRenderer | None = None) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()

    # -- Paths ---------------------------------------------------------------

    def module_dir(self, module: str) -> Path:
        return self.config.modules_dir / module

    def artifact_paths(self, module: str) -> dict[str, Path]:
        """Target path per artifact kind, following the file naming contract."""
        ext = self.config.extension
        base = self.module_dir(module)
        return {
            "model": base / f"{module}.model.{ext}",
            "dto": base / "dto" / f"{module}.dto.{ext}",
            "service": base / f"{module}.service.{ext}",
            "controller": base / f"{module}.controller.{ext}",
            "routes": base / "routes" / f"{module}.routes.{ext}",
        }

    # -- Public API ----------------------------------------------------------

    async def render(self, descriptor: ModuleDescriptor) -> list[GeneratedArtifact]:
        """Render every artifact without touching the filesystem.

        Raises:
            GenerationFailure: If the name is invalid or any compile step fails.
        """
        names = ModuleNames.derive(descriptor.name)

        model_result, dto_result, routes_result = await asyncio.gather(
            asyncio.to_thread(
                compile_model, names.module, descriptor.storage_fields, self.renderer
            ),
            asyncio.to_thread(
                compile_dto,
                names.module,
                descriptor.get_fields,
                descriptor.create_fields,
                descriptor.update_fields,
                self.renderer,
            ),
            asyncio.to_thread(
                compile_routes_stub, names, descriptor.authenticated, self.renderer
            ),
        )

        failures = [
            result for result in (model_result, dto_result, routes_result) if not result.ok
        ]
        if failures:
            details = "; ".join(f"{f.artifact}: {f.reason}" for f in failures)
            raise GenerationFailure(
                f"Failed to generate one or more files for module {names.module!r} ({details})"
            )

        context = {"names": names}
        service_text = self.renderer.render("service.ts.j2", context)
        controller_text = self.renderer.render("controller.ts.j2", context)

        paths = self.artifact_paths(names.module)
        return [
            GeneratedArtifact("model", paths["model"], model_result.text),
            GeneratedArtifact("dto", paths["dto"], dto_result.text),
            GeneratedArtifact("service", paths["service"], service_text),
            GeneratedArtifact("controller", paths["controller"], controller_text),
            GeneratedArtifact("routes", paths["routes"], routes_result.text, overwrite=False),
        ]

    async def generate(self, descriptor: ModuleDescriptor) -> list[GeneratedArtifact]:
        """Render all artifacts, then write them sequentially.

        Returns:
            The artifacts, with ``written`` set on the ones that hit disk.

        Raises:
            GenerationFailure: If rendering fails; nothing is written.
            FileWriteFailure: If a file cannot be written.
        """
        artifacts = await self.render(descriptor)
        for artifact in artifacts:
            if not artifact.overwrite and artifact.path.exists():
                logger.info("Keeping existing %s", artifact.path)
                continue
            try:
                await asyncio.to_thread(write_text, artifact.path, artifact.content)
            except OSError as exc:
                raise FileWriteFailure(artifact.path, str(exc)) from exc
            artifact.written = True
            logger.debug("Wrote %s", artifact.path)
        return artifacts

