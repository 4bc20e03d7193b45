"""glideapi configuration.

Typed configuration for the generator and route aggregator.  All settings use
Pydantic v2 models so they are validated at construction time.  A single
``GlideConfig`` is resolved once by the CLI entry point (see
:meth:`GlideConfig.from_env`) and passed explicitly to every component that
needs it; nothing reads the environment after start-up.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationMissing

MANIFEST_FILENAME = "glideapi.json"


class GlideConfig(BaseModel):
    """Paths and flags shared by the module generator and route aggregator."""

    project_root: Path = Field(default_factory=Path.cwd)
    modules_subdir: str = Field(default="src/modules")
    plugins_subdir: str = Field(default="src/plugins")
    aggregation_filename: str = Field(default="setup-all-routes")
    monitoring_file: str = Field(default=".glideapi/monitoring.json")
    api_prefix: str = Field(default="/api/v1", description="Mount prefix shown in route reports")
    extension: str = Field(default="ts", description="Extension of generated source files")
    debug: bool = Field(default=False)

    @field_validator("api_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = "/" + value
        return value

    @field_validator("extension")
    @classmethod
    def _strip_dot(cls, value: str) -> str:
        value = value.strip().lstrip(".")
        if not value:
            raise ValueError("extension must not be empty")
        return value

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def modules_dir(self) -> Path:
        """Directory holding one subdirectory per module."""
        return self.project_root / self.modules_subdir

    @property
    def plugins_dir(self) -> Path:
        return self.project_root / self.plugins_subdir

    @property
    def aggregation_path(self) -> Path:
        """The generated file that mounts every discovered router."""
        return self.plugins_dir / f"{self.aggregation_filename}.{self.extension}"

    @property
    def manifest_path(self) -> Path:
        return self.project_root / MANIFEST_FILENAME

    @property
    def monitoring_path(self) -> Path:
        return self.project_root / self.monitoring_file

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, project_root: Path | None = None) -> "GlideConfig":
        """Build a ``GlideConfig`` from environment variables.

        Recognised variables (all optional):
            GLIDEAPI_API_PREFIX, GLIDEAPI_DEBUG, GLIDEAPI_MODULES_DIR.
        """
        kwargs: dict[str, object] = {}
        if project_root is not None:
            kwargs["project_root"] = Path(project_root)
        if os.environ.get("GLIDEAPI_API_PREFIX") is not None:
            kwargs["api_prefix"] = os.environ["GLIDEAPI_API_PREFIX"]
        if os.environ.get("GLIDEAPI_MODULES_DIR"):
            kwargs["modules_subdir"] = os.environ["GLIDEAPI_MODULES_DIR"]
        kwargs["debug"] = os.environ.get("GLIDEAPI_DEBUG", "").lower() in ("1", "true", "yes")
        return cls(**kwargs)


class ProjectManifest(BaseModel):
    """Contents of ``glideapi.json``, written by ``init`` and read by ``generate-module``."""

    database: str = Field(..., min_length=1, description="Template key, e.g. 'express-mongodb'")

    @classmethod
    def load(cls, path: Path) -> "ProjectManifest":
        """Load and validate a manifest.

        Raises:
            ConfigurationMissing: If the file is absent, unreadable, not
                UTF-8 JSON, or lacks a ``database`` key.
        """
        manifest_path = Path(path)
        if not manifest_path.is_file():
            raise ConfigurationMissing(
                f"{manifest_path.name} not found in {manifest_path.parent}. "
                "Run this command from the root of a glideapi project."
            )
        try:
            return cls.model_validate_json(manifest_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError, json.JSONDecodeError) as exc:
            raise ConfigurationMissing(f"Invalid {manifest_path.name}: {exc}") from exc
