"""Monitoring log written by generated applications in debug mode.

The generated app appends one entry per request to
``.glideapi/monitoring.json`` and records the steps the request went through.
This module reads and updates that file with the same schema, always
preserving every entry already on disk (read-modify-write), and backs the
``glideapi monitor`` command.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import FileWriteFailure
from .utils import load_json_list, write_text

logger = logging.getLogger(__name__)

StepName = Literal["start", "db-connected", "route-hit", "controller-hit", "service-hit", "end"]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class MonitoringStep(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    step_name: StepName = Field(..., alias="stepName")
    timestamp: str = Field(default_factory=_now_iso)
    info: Optional[str] = None
    error: Optional[str] = None


class MonitoringEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    end_point: str = Field(..., alias="endPoint")
    method: str
    timestamp: Optional[str] = None
    steps: list[MonitoringStep] = Field(default_factory=list)


_ENTRIES = TypeAdapter(list[MonitoringEntry])


class MonitoringLog:
    """In-memory view of a monitoring file with explicit load/save."""

    def __init__(self, path: Path, entries: list[MonitoringEntry] | None = None) -> None:
        self.path = Path(path)
        self.entries: list[MonitoringEntry] = entries or []

    @classmethod
    def load(cls, path: Path) -> "MonitoringLog":
        """Read the log; a missing or unreadable file yields an empty log."""
        log_path = Path(path)
        if not log_path.exists():
            return cls(log_path)
        try:
            entries = _ENTRIES.validate_python(load_json_list(log_path))
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            logger.error("Error reading monitoring data: %s", exc)
            return cls(log_path)
        return cls(log_path, list(entries))

    def save(self) -> Path:
        """Write every entry back, creating the ``.glideapi`` directory if needed.

        Raises:
            FileWriteFailure: If the log file cannot be written.
        """
        payload = [
            entry.model_dump(by_alias=True, exclude_none=True) for entry in self.entries
        ]
        try:
            write_text(self.path, json.dumps(payload, indent=2) + "\n")
        except OSError as exc:
            raise FileWriteFailure(self.path, str(exc)) from exc
        return self.path

    def add_entry(self, end_point: str, method: str) -> MonitoringEntry:
        entry = MonitoringEntry(end_point=end_point, method=method.upper(), timestamp=_now_iso())
        self.entries.append(entry)
        self.save()
        return entry

    def add_step(
        self,
        end_point: str,
        step_name: StepName,
        info: str | None = None,
        error: str | None = None,
    ) -> MonitoringStep | None:
        """Append a step to the first entry for *end_point*.

        Unknown endpoints are logged and ignored.
        """
        entry = next((e for e in self.entries if e.end_point == end_point), None)
        if entry is None:
            logger.error("Monitoring entry not found for endpoint: %s", end_point)
            return None
        step = MonitoringStep(step_name=step_name, info=info, error=error)
        entry.steps.append(step)
        self.save()
        return step

    def filter_by_endpoint(self, end_point: str) -> list[MonitoringEntry]:
        return [entry for entry in self.entries if entry.end_point == end_point]
