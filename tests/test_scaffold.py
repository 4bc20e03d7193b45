"""Tests for the template registry and the init pipeline (glideapi.scaffold).

Covers:
- Registry lookup and available templates
- Express + MongoDB init plan (commands, file collection)
- ScaffoldInitializer step order, abort on command failure, best-effort copy
- The shipped project files line up with the generator's conventions
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, call, patch

import pytest

from glideapi.config import MANIFEST_FILENAME
from glideapi.errors import ConfigurationMissing, ExternalCommandFailure, FileWriteFailure
from glideapi.generator.descriptors import default_descriptor
from glideapi.scaffold import (
    InitPlan,
    ScaffoldInitializer,
    TemplateFile,
    available_templates,
    get_template,
)
from glideapi.scaffold.express_mongodb import (
    FINALIZATION_COMMANDS,
    PROJECT_FILES_DIR,
    build_plan,
    collect_template_files,
    script_commands,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    source = tmp_path / "project-files"
    (source / "src" / "config").mkdir(parents=True)
    (source / "src" / "index.ts").write_text("// entry\n", encoding="utf-8")
    (source / "src" / "config" / "index.ts").write_text("// config\n", encoding="utf-8")
    (source / ".gitignore").write_text("node_modules/\n", encoding="utf-8")
    return source


@pytest.fixture
def plan(tmp_path: Path, source_tree: Path) -> InitPlan:
    return build_plan(tmp_path / "my-api", source_dir=source_tree)


@pytest.fixture
def ok_runner():
    with patch(
        "glideapi.scaffold.initializer.run_command",
        new=AsyncMock(return_value=(0, "", "")),
    ) as runner:
        yield runner


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_available_templates(self):
        assert available_templates() == ["express-mongodb"]

    def test_unregistered_directories_are_ignored(self, tmp_path: Path):
        (tmp_path / "express-mongodb").mkdir()
        (tmp_path / "django").mkdir()
        assert available_templates(tmp_path) == ["express-mongodb"]

    def test_get_template(self):
        template = get_template("express-mongodb")
        assert template.key == "express-mongodb"
        assert template.module_descriptor is default_descriptor

    def test_unknown_template(self):
        with pytest.raises(ConfigurationMissing, match="express-mongodb"):
            get_template("rails-postgres")

    def test_module_descriptor_factory(self):
        descriptor = get_template("express-mongodb").module_descriptor("users", True)
        assert descriptor == default_descriptor("users", authenticated=True)

    def test_init_builds_plan(self, tmp_path: Path):
        plan = get_template("express-mongodb").init(tmp_path / "api")
        assert plan.template == "express-mongodb"
        assert plan.cwd == tmp_path / "api"


# ---------------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------------


class TestExpressMongodbPlan:
    def test_commands(self, plan: InitPlan):
        assert plan.name == "Express with MongoDB"
        assert plan.command.startswith("npm init -y && npm install ")
        assert "npm install -D " in plan.command
        assert "cd " not in plan.command
        assert plan.finalization_commands == list(FINALIZATION_COMMANDS)

    def test_script_commands_are_quoted(self):
        commands = script_commands()
        assert commands[0] == "npm pkg set 'scripts.dev=ts-node -r tsconfig-paths/register src/index.ts'"
        assert len(commands) == 4

    def test_collects_files_recursively(self, plan: InitPlan, tmp_path: Path):
        targets = sorted(f.target for f in plan.template_files)
        target = tmp_path / "my-api"
        assert targets == sorted(
            [target / ".gitignore", target / "src" / "index.ts", target / "src" / "config" / "index.ts"]
        )

    def test_collect_skips_directories(self, source_tree: Path, tmp_path: Path):
        files = collect_template_files(source_tree, tmp_path / "out")
        assert all(f.source.is_file() for f in files)

    def test_shipped_project_files(self, tmp_path: Path):
        files = collect_template_files(PROJECT_FILES_DIR, tmp_path)
        relative = {f.source.relative_to(PROJECT_FILES_DIR).as_posix() for f in files}
        assert {
            "src/index.ts",
            "src/plugins/setup-all-routes.ts",
            "src/modules/users/routes/users.routes.ts",
            "src/modules/auth/auth.middleware.ts",
            "core/factory/glide-controller.ts",
            "core/factory/glide-service.ts",
            "core/factory/glide-router.ts",
            "tsconfig.json",
            ".gitignore",
        } <= relative


# ---------------------------------------------------------------------------
# Initializer
# ---------------------------------------------------------------------------


class TestScaffoldInitializer:
    @pytest.mark.asyncio
    async def test_runs_steps_in_order(self, plan: InitPlan, ok_runner: AsyncMock):
        report = await ScaffoldInitializer(plan).run()

        commands = [c.args[0] for c in ok_runner.await_args_list]
        assert commands == [
            plan.command,
            *plan.post_install_commands,
            *plan.finalization_commands,
        ]
        assert ok_runner.await_args_list[0] == call(plan.command, cwd=plan.cwd, capture=False)
        assert ok_runner.await_args_list[-1].kwargs["capture"] is True
        assert report.success
        assert report.commands_run == commands

    @pytest.mark.asyncio
    async def test_copies_files_and_writes_manifest(self, plan: InitPlan, ok_runner: AsyncMock):
        report = await ScaffoldInitializer(plan).run()
        assert (plan.cwd / "src" / "config" / "index.ts").read_text(encoding="utf-8") == "// config\n"
        assert (plan.cwd / ".gitignore").is_file()
        assert len(report.copied) == 3
        manifest = json.loads((plan.cwd / MANIFEST_FILENAME).read_text(encoding="utf-8"))
        assert manifest == {"database": "express-mongodb"}
        assert report.manifest_path == plan.cwd / MANIFEST_FILENAME

    @pytest.mark.asyncio
    async def test_bootstrap_failure_aborts(self, plan: InitPlan):
        runner = AsyncMock(return_value=(1, "", "npm ERR!"))
        with patch("glideapi.scaffold.initializer.run_command", new=runner):
            with pytest.raises(ExternalCommandFailure) as excinfo:
                await ScaffoldInitializer(plan).run()
        assert excinfo.value.returncode == 1
        assert excinfo.value.command == plan.command
        assert runner.await_count == 1
        assert not (plan.cwd / "src").exists()
        assert not (plan.cwd / MANIFEST_FILENAME).exists()

    @pytest.mark.asyncio
    async def test_post_install_failure_skips_copy(self, plan: InitPlan):
        runner = AsyncMock(side_effect=[(0, "", ""), (0, "", ""), (2, "", "")])
        with patch("glideapi.scaffold.initializer.run_command", new=runner):
            with pytest.raises(ExternalCommandFailure):
                await ScaffoldInitializer(plan).run()
        assert runner.await_count == 3
        assert not (plan.cwd / MANIFEST_FILENAME).exists()

    @pytest.mark.asyncio
    async def test_empty_commands_are_skipped(self, plan: InitPlan, ok_runner: AsyncMock):
        plan = plan.model_copy(update={"post_install_commands": ["", "   "]})
        await ScaffoldInitializer(plan).run()
        commands = [c.args[0] for c in ok_runner.await_args_list]
        assert "" not in commands
        assert "   " not in commands

    @pytest.mark.asyncio
    async def test_copy_failure_is_reported_not_raised(
        self, plan: InitPlan, tmp_path: Path, ok_runner: AsyncMock
    ):
        missing = TemplateFile(source=tmp_path / "missing.ts", target=plan.cwd / "missing.ts")
        plan = plan.model_copy(update={"template_files": [missing, *plan.template_files]})

        report = await ScaffoldInitializer(plan).run()

        assert not report.success
        assert len(report.failures) == 1
        assert report.failures[0].target == plan.cwd / "missing.ts"
        assert len(report.copied) == 3
        assert (plan.cwd / MANIFEST_FILENAME).is_file()
        # Finalization still runs after a partial copy.
        assert ok_runner.await_args_list[-1].args[0] == plan.finalization_commands[-1]

    @pytest.mark.asyncio
    async def test_target_is_a_file(self, tmp_path: Path, source_tree: Path, ok_runner: AsyncMock):
        blocker = tmp_path / "taken"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(FileWriteFailure, match="Could not write"):
            await ScaffoldInitializer(build_plan(blocker, source_dir=source_tree)).run()
        assert ok_runner.await_count == 0

    @pytest.mark.asyncio
    async def test_manifest_write_failure_stops_before_git(
        self, plan: InitPlan, ok_runner: AsyncMock
    ):
        (plan.cwd / MANIFEST_FILENAME).mkdir(parents=True)
        with pytest.raises(FileWriteFailure, match=MANIFEST_FILENAME):
            await ScaffoldInitializer(plan).run()
        run_commands = [c.args[0] for c in ok_runner.await_args_list]
        assert not set(plan.finalization_commands) & set(run_commands)
