"""The ``init`` pipeline.

Runs an :class:`InitPlan` strictly in order: bootstrap command, post-install
commands, template file copy, manifest write, finalization commands.  A
command that exits non-zero aborts every later step.  File copies are best
effort: a file that cannot be copied is reported and the copy continues.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from ..config import MANIFEST_FILENAME, ProjectManifest
from ..errors import ExternalCommandFailure, FileSystemFailure, FileWriteFailure
from ..utils import ensure_dir, print_info, print_success, print_warning, run_command, save_json
from .registry import InitPlan, TemplateFile

logger = logging.getLogger(__name__)


@dataclass
class InitReport:
    """What one ``init`` run did."""

    target: Path
    commands_run: list[str] = field(default_factory=list)
    copied: list[Path] = field(default_factory=list)
    failures: list[FileSystemFailure] = field(default_factory=list)
    manifest_path: Path | None = None

    @property
    def success(self) -> bool:
        return not self.failures


def _copy_file(template_file: TemplateFile) -> None:
    template_file.target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(template_file.source, template_file.target)


class ScaffoldInitializer:
    """Executes an :class:`InitPlan` against the filesystem and the shell."""

    def __init__(self, plan: InitPlan) -> None:
        self.plan = plan

    # -- Steps ---------------------------------------------------------------

    async def run_step(self, command: str, report: InitReport, quiet: bool = False) -> None:
        """Run one shell command in the project directory.

        Raises:
            ExternalCommandFailure: If the command exits non-zero.
        """
        if not command.strip():
            return
        logger.debug("Running %s in %s", command, self.plan.cwd)
        returncode, _stdout, stderr = await run_command(
            command, cwd=self.plan.cwd, capture=quiet
        )
        if returncode != 0:
            raise ExternalCommandFailure(command, returncode, stderr)
        report.commands_run.append(command)

    async def copy_template_files(self, report: InitReport) -> list[FileSystemFailure]:
        """Copy every template file; failures are collected, not raised."""
        failures: list[FileSystemFailure] = []
        for template_file in self.plan.template_files:
            try:
                await asyncio.to_thread(_copy_file, template_file)
            except OSError as exc:
                failure = FileSystemFailure(template_file.source, template_file.target, str(exc))
                logger.error("%s", failure)
                failures.append(failure)
                continue
            report.copied.append(template_file.target)
        report.failures.extend(failures)
        return failures

    # -- Public API ----------------------------------------------------------

    async def run(self) -> InitReport:
        """Run the whole plan.

        Returns:
            An :class:`InitReport`; ``report.failures`` lists files that
            could not be copied.

        Raises:
            ExternalCommandFailure: On the first command that exits non-zero.
            FileWriteFailure: If the project directory or manifest cannot be written.
        """
        plan = self.plan
        report = InitReport(target=plan.cwd)
        try:
            ensure_dir(plan.cwd)
        except OSError as exc:
            raise FileWriteFailure(plan.cwd, str(exc)) from exc

        print_info(f"Creating a new {plan.name} project in {plan.cwd}")
        await self.run_step(plan.command, report)

        for command in plan.post_install_commands:
            await self.run_step(command, report)

        failures = await self.copy_template_files(report)
        for failure in failures:
            print_warning(str(failure))

        manifest_path = plan.cwd / MANIFEST_FILENAME
        try:
            await save_json(ProjectManifest(database=plan.template).model_dump(), manifest_path)
        except OSError as exc:
            raise FileWriteFailure(manifest_path, str(exc)) from exc
        report.manifest_path = manifest_path

        for command in plan.finalization_commands:
            await self.run_step(command, report, quiet=True)

        if report.success:
            print_success(f"Project initialized in {plan.cwd}")
        else:
            print_warning(
                f"Project initialized in {plan.cwd} with {len(failures)} file(s) not copied"
            )
        return report
