"""Route discovery and aggregation.

Scans the modules directory, checks that every module folder has a valid
module name and a conventionally named routes file, prints a validation
report and rewrites the aggregation file
(``src/plugins/setup-all-routes.ts``) from scratch.

The filesystem is the only source of truth: the aggregation file is a derived
cache that is replaced wholesale on every run and never merged.  A module
whose routes file disappears simply drops out on the next run.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..config import GlideConfig
from ..errors import FileWriteFailure
from ..naming import is_module_name, to_camel_case
from ..utils import console, print_rows, write_text
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)

# Where a module's routes file may live, relative to the module directory.
# The generated layout comes first; the flat layout covers hand-written modules.
ROUTE_FILE_LOCATIONS: tuple[str, ...] = ("routes", "")


@dataclass(frozen=True)
class RouteRegistryEntry:
    """One subdirectory of the modules directory."""

    module: str
    route_file: Path | None
    router_name: str
    import_path: str | None = None
    name_valid: bool = True

    @property
    def valid(self) -> bool:
        return self.name_valid and self.route_file is not None

    def status(self, extension: str) -> str:
        if self.valid:
            return "✓ Validated"
        if not self.name_valid:
            return (
                f"✗ Invalid module name. Rename the {self.module} folder to lowercase "
                "letters, digits and hyphens, starting with a letter."
            )
        return (
            f"✗ No route file found. Please create a route file named "
            f"{self.module}.routes.{extension} in the {self.module} module."
        )


@dataclass
class RouteSetupReport:
    """Outcome of one discovery run."""

    entries: list[RouteRegistryEntry] = field(default_factory=list)
    aggregation_path: Path | None = None

    @property
    def total_modules(self) -> int:
        return len(self.entries)

    @property
    def valid_routes_count(self) -> int:
        return sum(1 for entry in self.entries if entry.valid)

    @property
    def invalid_routes_count(self) -> int:
        return self.total_modules - self.valid_routes_count

    @property
    def valid_entries(self) -> list[RouteRegistryEntry]:
        return [entry for entry in self.entries if entry.valid]

    def as_dict(self) -> dict[str, int]:
        return {
            "totalModules": self.total_modules,
            "validRoutesCount": self.valid_routes_count,
            "invalidRoutesCount": self.invalid_routes_count,
        }


class RouteAggregator:
    """Discovers module routers and regenerates the aggregation file."""

    def __init__(self, config: GlideConfig, renderer: TemplateRenderer | None = None) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()

    # -- Discovery -----------------------------------------------------------

    def list_modules(self) -> list[str]:
        """Immediate subdirectories of the modules directory, sorted by name."""
        modules_dir = self.config.modules_dir
        if not modules_dir.is_dir():
            return []
        return sorted(entry.name for entry in modules_dir.iterdir() if entry.is_dir())

    def find_route_file(self, module: str) -> Path | None:
        """Return the module's ``<module>.routes.<ext>`` file, if any."""
        filename = f"{module}.routes.{self.config.extension}"
        module_dir = self.config.modules_dir / module
        for location in ROUTE_FILE_LOCATIONS:
            folder = module_dir / location if location else module_dir
            # Compare names exactly; is_file() alone is case-insensitive on some filesystems.
            if folder.is_dir() and any(
                child.name == filename and child.is_file() for child in folder.iterdir()
            ):
                return folder / filename
        return None

    def discover(self) -> list[RouteRegistryEntry]:
        entries: list[RouteRegistryEntry] = []
        for module in self.list_modules():
            name_valid = is_module_name(module)
            route_file = self.find_route_file(module)
            import_path = None
            if name_valid and route_file is not None:
                relative = route_file.relative_to(self.config.modules_dir).with_suffix("")
                import_path = f"@/modules/{relative.as_posix()}"
            entries.append(
                RouteRegistryEntry(
                    module=module,
                    route_file=route_file,
                    router_name=f"{to_camel_case(module)}Router",
                    import_path=import_path,
                    name_valid=name_valid,
                )
            )
        return entries

    # -- Rendering -----------------------------------------------------------

    def render_aggregation(self, report: RouteSetupReport) -> str:
        return self.renderer.render("setup-all-routes.ts.j2", {"routes": report.valid_entries})

    def print_report(self, report: RouteSetupReport) -> None:
        prefix = self.config.api_prefix
        rows = [
            (
                f"{prefix}/{entry.module}" if entry.valid else f"/{entry.module}",
                entry.status(self.config.extension),
            )
            for entry in report.entries
        ]
        print_rows(("Route", "Status"), rows, title="Module routes")
        console.print(
            f"{report.valid_routes_count}/{report.total_modules} modules registered",
            highlight=False,
        )

    # -- Public API ----------------------------------------------------------

    async def discover_and_register(self, show_report: bool = True) -> RouteSetupReport:
        """Scan modules, report, and rewrite the aggregation file.

        Returns:
            A :class:`RouteSetupReport` with the total, valid and invalid counts.

        Raises:
            FileWriteFailure: If the aggregation file cannot be written.
        """
        entries = await asyncio.to_thread(self.discover)
        report = RouteSetupReport(entries=entries, aggregation_path=self.config.aggregation_path)
        for entry in entries:
            if not entry.name_valid:
                logger.warning("Module folder %s is not a valid module name", entry.module)
            elif not entry.valid:
                logger.warning("Module %s has no routes file", entry.module)

        content = self.render_aggregation(report)
        if show_report:
            self.print_report(report)
        try:
            await asyncio.to_thread(write_text, self.config.aggregation_path, content)
        except OSError as exc:
            raise FileWriteFailure(self.config.aggregation_path, str(exc)) from exc
        logger.debug("Wrote %s", self.config.aggregation_path)
        return report
