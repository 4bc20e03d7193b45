"""Command line entry point: ``glideapi``.

Commands::

    glideapi init [folder]
    glideapi generate-module <module> [--fields FILE] [--auth]
    glideapi sync-routes
    glideapi monitor [--endpoint PATH] [--record METHOD | --step NAME]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import get_args

from . import __version__
from .config import GlideConfig, ProjectManifest
from .errors import GlideApiError
from .generator import ModuleDescriptor, ModuleGenerator, RouteAggregator
from .monitoring import MonitoringLog, StepName
from .prompt import choose_template
from .scaffold import ScaffoldInitializer, available_templates, get_template
from .utils import (
    log_prefix,
    print_error,
    print_info,
    print_rows,
    print_success,
    print_summary_table,
    setup_logging,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _display_path(path: Path, root: Path) -> Path:
    try:
        return path.relative_to(root)
    except ValueError:
        return path


async def cmd_init(args: argparse.Namespace, config: GlideConfig) -> int:
    template_key = choose_template(available_templates())
    target = (config.project_root / args.folder).resolve()
    plan = get_template(template_key).init(target)
    report = await ScaffoldInitializer(plan).run()
    if report.success and args.folder != ".":
        print_info(f"Next: cd {args.folder} && npm run dev")
    return 0


async def cmd_generate_module(args: argparse.Namespace, config: GlideConfig) -> int:
    manifest = ProjectManifest.load(config.manifest_path)
    template = get_template(manifest.database)

    if args.fields:
        descriptor = ModuleDescriptor.from_file(Path(args.fields), name=args.module)
        if args.auth:
            descriptor = descriptor.model_copy(update={"authenticated": True})
    else:
        descriptor = template.module_descriptor(args.module, args.auth)

    artifacts = await ModuleGenerator(config).generate(descriptor)
    for artifact in artifacts:
        relative = _display_path(artifact.path, config.project_root)
        if artifact.written:
            print_success(f"Created {relative}")
        else:
            print_info(f"Skipped {relative} (already exists)")

    await RouteAggregator(config).discover_and_register()
    return 0


async def cmd_sync_routes(args: argparse.Namespace, config: GlideConfig) -> int:
    report = await RouteAggregator(config).discover_and_register()
    print_summary_table(report.as_dict(), title="Route setup")
    print_success(f"Wrote {_display_path(report.aggregation_path, config.project_root)}")
    return 0


async def cmd_monitor(args: argparse.Namespace, config: GlideConfig) -> int:
    log = MonitoringLog.load(config.monitoring_path)
    if args.record or args.step:
        if not args.endpoint:
            raise GlideApiError("--record and --step require --endpoint")
        if args.record:
            log.add_entry(args.endpoint, args.record)
        elif log.add_step(args.endpoint, args.step, info=args.info, error=args.error) is None:
            return 1

    entries = log.filter_by_endpoint(args.endpoint) if args.endpoint else log.entries
    if not entries:
        print_info("No monitoring data recorded.")
        return 0
    rows = [
        (
            entry.method,
            entry.end_point,
            entry.timestamp or "",
            " -> ".join(step.step_name for step in entry.steps),
        )
        for entry in entries
    ]
    print_rows(("Method", "Endpoint", "Timestamp", "Steps"), rows, title="Monitoring log")
    return 0


COMMANDS = {
    "init": cmd_init,
    "generate-module": cmd_generate_module,
    "sync-routes": cmd_sync_routes,
    "monitor": cmd_monitor,
}


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="glideapi",
        description="GlideAPI -- scaffold Express/MongoDB APIs and generate CRUD modules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  glideapi init my-api\n"
            "  glideapi generate-module blog-posts\n"
            "  glideapi generate-module products --fields products.json --auth\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create a new project from a template")
    init_parser.add_argument(
        "folder",
        nargs="?",
        default=".",
        help="Target folder (default: current directory)",
    )

    generate_parser = subparsers.add_parser(
        "generate-module", help="Generate a CRUD module in the current project"
    )
    generate_parser.add_argument("module", help="Module name, e.g. blog-posts")
    generate_parser.add_argument(
        "--fields",
        default=None,
        help="JSON file describing the model and DTO fields",
    )
    generate_parser.add_argument(
        "--auth",
        action="store_true",
        help="Protect every route with the auth middleware",
    )

    subparsers.add_parser("sync-routes", help="Regenerate src/plugins/setup-all-routes.ts")

    monitor_parser = subparsers.add_parser("monitor", help="Show the request monitoring log")
    monitor_parser.add_argument(
        "--endpoint",
        default=None,
        help="Only show entries for this endpoint",
    )
    record_group = monitor_parser.add_mutually_exclusive_group()
    record_group.add_argument(
        "--record",
        metavar="METHOD",
        default=None,
        help="Append a new entry for --endpoint with this HTTP method",
    )
    record_group.add_argument(
        "--step",
        choices=get_args(StepName),
        default=None,
        help="Append a step to the first entry for --endpoint",
    )
    monitor_parser.add_argument("--info", default=None, help="Info text for --step")
    monitor_parser.add_argument("--error", default=None, help="Error text for --step")
    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, run one command and return its exit status."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    config = GlideConfig.from_env()
    if config.debug:
        setup_logging(True)

    try:
        return asyncio.run(COMMANDS[args.command](args, config))
    except GlideApiError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print_error(f"{log_prefix()} {exc}")
        return exc.exit_code
    except OSError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print_error(f"{log_prefix()} {exc}")
        return 1


def main() -> None:
    """CLI entry point for ``glideapi``."""
    sys.exit(run())


if __name__ == "__main__":
    main()
