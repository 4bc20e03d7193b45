"""Compile results.

Compilers never raise: they return either a :class:`CompileSuccess` holding
the rendered text or a :class:`CompileFailure` holding the reason.  Keeping
the two apart means an empty field set (which legitimately renders an empty
schema body) is never confused with a failed render.
"""

from __future__ import annotations

import logging
from typing import Annotated, Callable, Literal, Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class CompileSuccess(BaseModel):
    """Rendered source text for one artifact."""

    status: Literal["success"] = "success"
    artifact: str = Field(..., description="Artifact kind, e.g. 'model' or 'dto'")
    text: str

    @property
    def ok(self) -> bool:
        return True


class CompileFailure(BaseModel):
    """Why an artifact could not be rendered."""

    status: Literal["failure"] = "failure"
    artifact: str
    reason: str

    @property
    def ok(self) -> bool:
        return False


CompileResult = Annotated[Union[CompileSuccess, CompileFailure], Field(discriminator="status")]


def guarded(artifact: str, subject: str, render: Callable[[], str]) -> CompileResult:
    """Run *render* and convert any exception into a logged ``CompileFailure``.

    Args:
        artifact: Artifact kind used in the result and in the log line.
        subject: Module name, for the log line.
        render: Zero-argument callable producing the source text.
    """
    try:
        return CompileSuccess(artifact=artifact, text=render())
    except Exception as exc:  # noqa: BLE001 - compilers report, callers decide
        reason = f"{type(exc).__name__}: {exc}"
        logger.error("Error generating %s %s: %s", artifact, subject, reason)
        return CompileFailure(artifact=artifact, reason=reason)
