"""Exception taxonomy for the glideapi CLI.

Compilers never raise these: they report failures through
:class:`~glideapi.generator.results.CompileFailure`.  Orchestration code
(module generation, scaffolding, manifest handling) raises them and the CLI
turns them into a prefixed error message and an exit status.
"""

from __future__ import annotations

from pathlib import Path


class GlideApiError(Exception):
    """Base class for every error raised by glideapi."""

    exit_code: int = 1


class UserCancelled(GlideApiError):
    """The interactive prompt was aborted (Ctrl-C or EOF)."""

    exit_code = 130

    def __init__(self, message: str = "Project initialization cancelled!") -> None:
        super().__init__(message)


class ConfigurationMissing(GlideApiError):
    """The project manifest is absent, unreadable or names an unknown template."""


class GenerationFailure(GlideApiError):
    """A module could not be generated; nothing was written to disk."""


class FieldDescriptorError(GenerationFailure, ValueError):
    """A field descriptor combines a type and modifiers that are not valid together."""


class FileSystemFailure(GlideApiError):
    """A single template file could not be copied into the target project."""

    def __init__(self, source: Path, target: Path, reason: str) -> None:
        self.source = Path(source)
        self.target = Path(target)
        self.reason = reason
        super().__init__(f"Could not copy {source} to {target}: {reason}")


class ExternalCommandFailure(GlideApiError):
    """A bootstrap, post-install or finalization command exited non-zero."""

    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr}" if stderr else ""
        super().__init__(f"Command failed with exit code {returncode}: {command}{detail}")


class FileWriteFailure(GlideApiError):
    """A generated file, manifest or project directory could not be written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Could not write {path}: {reason}")
