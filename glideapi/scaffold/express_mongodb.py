"""Init plan for the Express + MongoDB template."""

from __future__ import annotations

import shlex
from pathlib import Path

from .registry import TEMPLATES_ROOT, InitPlan, TemplateFile

TEMPLATE_KEY = "express-mongodb"
PROJECT_FILES_DIR = TEMPLATES_ROOT / TEMPLATE_KEY / "project-files"

DEPENDENCIES: tuple[str, ...] = (
    "express",
    "mongoose",
    "cors",
    "dotenv",
    "bcrypt",
    "chalk@4",
    "fs-extra",
    "jsonwebtoken",
    "zod",
)

DEV_DEPENDENCIES: tuple[str, ...] = (
    "@types/bcrypt",
    "@types/cors",
    "@types/express",
    "@types/fs-extra",
    "@types/jsonwebtoken",
    "@types/node",
    "@typescript-eslint/eslint-plugin",
    "@typescript-eslint/parser",
    "eslint",
    "ts-node",
    "ts-node-dev",
    "tsc-alias",
    "tsconfig-paths",
    "typescript",
)

# package.json scripts, in the order they are added.
SCRIPTS: tuple[tuple[str, str], ...] = (
    ("dev", "ts-node -r tsconfig-paths/register src/index.ts"),
    ("error-check", "eslint . --ext .ts && tsc --noEmit && echo 'No errors found!'"),
    ("build", "tsc && tsc-alias"),
    ("start", "node dist/index.js"),
)

FINALIZATION_COMMANDS: tuple[str, ...] = (
    "git init",
    "git add .",
    "git branch -M main",
    'git commit -m "Initialized base project"',
)


def collect_template_files(source_dir: Path, target: Path) -> list[TemplateFile]:
    """Every file below *source_dir*, mapped to the same relative path under *target*."""
    files: list[TemplateFile] = []
    for path in sorted(source_dir.rglob("*")):
        if path.is_file():
            files.append(TemplateFile(source=path, target=target / path.relative_to(source_dir)))
    return files


def bootstrap_command() -> str:
    return " && ".join(
        [
            "npm init -y",
            "npm install " + " ".join(DEPENDENCIES),
            "npm install -D " + " ".join(DEV_DEPENDENCIES),
        ]
    )


def script_commands() -> list[str]:
    return [f"npm pkg set {shlex.quote(f'scripts.{name}={value}')}" for name, value in SCRIPTS]


def build_plan(target: Path, source_dir: Path | None = None) -> InitPlan:
    target = Path(target)
    return InitPlan(
        name="Express with MongoDB",
        template=TEMPLATE_KEY,
        cwd=target,
        command=bootstrap_command(),
        post_install_commands=script_commands(),
        template_files=collect_template_files(source_dir or PROJECT_FILES_DIR, target),
        finalization_commands=list(FINALIZATION_COMMANDS),
    )
