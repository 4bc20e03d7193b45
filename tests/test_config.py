"""Tests for configuration models (glideapi.config)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from glideapi.config import MANIFEST_FILENAME, GlideConfig, ProjectManifest
from glideapi.errors import ConfigurationMissing

pytestmark = pytest.mark.unit


class TestGlideConfigDefaults:
    def test_defaults(self, tmp_path: Path):
        config = GlideConfig(project_root=tmp_path)
        assert config.api_prefix == "/api/v1"
        assert config.extension == "ts"
        assert config.debug is False

    def test_project_root_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        assert GlideConfig().project_root.resolve() == tmp_path.resolve()

    def test_derived_paths(self, tmp_path: Path):
        config = GlideConfig(project_root=tmp_path)
        assert config.modules_dir == tmp_path / "src" / "modules"
        assert config.plugins_dir == tmp_path / "src" / "plugins"
        assert config.aggregation_path == tmp_path / "src" / "plugins" / "setup-all-routes.ts"
        assert config.manifest_path == tmp_path / MANIFEST_FILENAME
        assert config.monitoring_path == tmp_path / ".glideapi" / "monitoring.json"


class TestGlideConfigValidation:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("/api/v1", "/api/v1"),
            ("api/v2/", "/api/v2"),
            ("/", ""),
            ("", ""),
        ],
    )
    def test_api_prefix_normalized(self, tmp_path: Path, raw: str, expected: str):
        assert GlideConfig(project_root=tmp_path, api_prefix=raw).api_prefix == expected

    def test_extension_dot_stripped(self, tmp_path: Path):
        config = GlideConfig(project_root=tmp_path, extension=".js")
        assert config.extension == "js"
        assert config.aggregation_path.name == "setup-all-routes.js"

    def test_empty_extension_rejected(self, tmp_path: Path):
        with pytest.raises(ValidationError):
            GlideConfig(project_root=tmp_path, extension=".")


class TestFromEnv:
    def test_without_variables(self, tmp_path: Path):
        config = GlideConfig.from_env(project_root=tmp_path)
        assert config.api_prefix == "/api/v1"
        assert config.debug is False

    def test_reads_variables(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GLIDEAPI_API_PREFIX", "/v2")
        monkeypatch.setenv("GLIDEAPI_DEBUG", "true")
        monkeypatch.setenv("GLIDEAPI_MODULES_DIR", "app/modules")
        config = GlideConfig.from_env(project_root=tmp_path)
        assert config.api_prefix == "/v2"
        assert config.debug is True
        assert config.modules_dir == tmp_path / "app" / "modules"

    def test_empty_prefix_is_kept(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GLIDEAPI_API_PREFIX", "")
        assert GlideConfig.from_env(project_root=tmp_path).api_prefix == ""


class TestProjectManifest:
    def test_load(self, tmp_path: Path):
        path = tmp_path / MANIFEST_FILENAME
        path.write_text(json.dumps({"database": "express-mongodb"}), encoding="utf-8")
        assert ProjectManifest.load(path).database == "express-mongodb"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationMissing, match="not found"):
            ProjectManifest.load(tmp_path / MANIFEST_FILENAME)

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / MANIFEST_FILENAME
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationMissing, match="Invalid"):
            ProjectManifest.load(path)

    def test_not_utf8(self, tmp_path: Path):
        path = tmp_path / MANIFEST_FILENAME
        path.write_bytes(b'{"database": "\xff\xfe"}')
        with pytest.raises(ConfigurationMissing, match="Invalid"):
            ProjectManifest.load(path)

    def test_missing_database_key(self, tmp_path: Path):
        path = tmp_path / MANIFEST_FILENAME
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(ConfigurationMissing):
            ProjectManifest.load(path)

    def test_empty_database_rejected(self):
        with pytest.raises(ValidationError):
            ProjectManifest(database="")
