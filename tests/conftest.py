"""Shared pytest fixtures for the glideapi test suite.

Provides reusable fixtures for:
- Temporary project directories with a modules tree
- A config pointing at the temporary project
- Sample module descriptors
- Logger isolation between tests
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from glideapi.config import MANIFEST_FILENAME, GlideConfig
from glideapi.generator.descriptors import DTOField, ModelField, ModuleDescriptor
from glideapi.generator.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_glideapi_logger():
    """Undo ``setup_logging`` so caplog sees every record."""
    yield
    logger = logging.getLogger("glideapi")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture(autouse=True)
def clean_glideapi_env(monkeypatch: pytest.MonkeyPatch):
    for name in ("GLIDEAPI_API_PREFIX", "GLIDEAPI_DEBUG", "GLIDEAPI_MODULES_DIR"):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary scaffolded project with an empty ``src/modules`` tree."""
    project_dir = tmp_path / "test-project"
    (project_dir / "src" / "modules").mkdir(parents=True)
    (project_dir / "src" / "plugins").mkdir(parents=True)
    return project_dir


@pytest.fixture
def manifest_project_dir(tmp_project_dir: Path) -> Path:
    """Project directory that already carries a ``glideapi.json``."""
    (tmp_project_dir / MANIFEST_FILENAME).write_text(
        json.dumps({"database": "express-mongodb"}), encoding="utf-8"
    )
    return tmp_project_dir


@pytest.fixture
def glide_config(tmp_project_dir: Path) -> GlideConfig:
    return GlideConfig(project_root=tmp_project_dir)


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@pytest.fixture
def blog_descriptor() -> ModuleDescriptor:
    """A module exercising nested objects, arrays, refs and enums."""
    return ModuleDescriptor(
        name="blog-posts",
        storage_fields={
            "title": ModelField(type="String", required=True, trim=True, maxlength=120),
            "status": ModelField(type="String", enum=["draft", "published"], default="draft"),
            "author": ModelField(type="ObjectId", ref="User", required=True),
            "tags": ModelField(type=["String"], lowercase=True),
            "meta": ModelField(
                type={"views": ModelField(type="Number", default=0)},
            ),
        },
        get_fields={
            "_id": DTOField(type="any"),
            "title": DTOField(type="string"),
            "status": DTOField(type="string"),
        },
        create_fields={
            "title": DTOField(type="string", min=3, max=120),
            "contact": DTOField(type="email"),
            "tags": DTOField(type="array", optional=True),
        },
        update_fields={
            "title": DTOField(type="string", min=3, max=120),
            "status": DTOField(type="string", nullable=True),
        },
    )


@pytest.fixture
def make_module():
    """Factory: create ``modules_dir/name`` with a routes file at *route_location*.

    *route_location* is ``"routes"``, ``""`` (module root) or ``None`` (no file).
    """

    def _make(modules_dir: Path, name: str, route_location: str | None) -> Path:
        module_dir = modules_dir / name
        module_dir.mkdir(parents=True, exist_ok=True)
        if route_location is not None:
            folder = module_dir / route_location if route_location else module_dir
            folder.mkdir(parents=True, exist_ok=True)
            (folder / f"{name}.routes.ts").write_text("export {};\n", encoding="utf-8")
        return module_dir

    return _make
