"""
Build domain models.

Provides Pydantic models for toolchain steps, build results and the
verified executable artifact.
"""

from __future__ import annotations

import stat
from enum import Enum
from typing import Annotated

from pydantic import Field, computed_field

from .base import ImmutableModel


class BuildStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SUCCESS_WITH_WARNINGS = "success_with_warnings"


class StepOutcome(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    DEGRADED = "degraded"
    FAILED = "failed"


class CommandResult(ImmutableModel):
    """Captured result of one external toolchain command."""

    command: list[str]
    exit_code: int
    output: str
    duration: Annotated[float, Field(ge=0)]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class StepResult(ImmutableModel):
    """Outcome of one build stage."""

    name: str
    outcome: StepOutcome
    duration: Annotated[float, Field(ge=0)] = 0.0
    exit_code: int | None = None
    detail: str | None = None


class Artifact(ImmutableModel):
    """A verified executable."""

    path: str
    size: Annotated[int, Field(ge=0)]
    mode: int
    modified_at: float

    @computed_field  # type: ignore[prop-decorator]
    @property
    def permissions(self) -> str:
        """Permission string in ``ls -l`` form, e.g. ``-rwxr-xr-x``."""
        return stat.filemode(self.mode)

    @property
    def is_executable(self) -> bool:
        return bool(self.mode & stat.S_IXUSR)

    def age(self, now: float) -> float:
        return now - self.modified_at


class BuildResult(ImmutableModel):
    """Outcome of one Build Orchestrator invocation."""

    status: BuildStatus
    steps: list[StepResult] = Field(default_factory=list)
    log: str = ""
    duration: Annotated[float, Field(ge=0)] = 0.0
    warnings: list[str] = Field(default_factory=list)
    artifact: Artifact | None = None
    failed_step: str | None = None
    failure_reason: str | None = None
    failure_marker: str | None = None
    excerpt: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def succeeded(self) -> bool:
        return self.status != BuildStatus.FAILURE

    def step(self, name: str) -> StepResult | None:
        for s in self.steps:
            if s.name == name:
                return s
        return None


class SpecSourceKind(str, Enum):
    DEFAULT = "default"
    FILE = "file"
    URL = "url"


class SpecSource(ImmutableModel):
    """Where code generation reads the specification document from."""

    kind: SpecSourceKind
    location: str | None = None
    fingerprint: str

    @property
    def is_default(self) -> bool:
        return self.kind == SpecSourceKind.DEFAULT


class BuildSummary(ImmutableModel):
    """Everything a completed build invocation reports."""

    source_origin: str
    source_location: str
    source_lines: int
    source_digest: str
    rebuilt: bool
    rebuild_reason: str = ""
    source_warnings: list[str] = Field(default_factory=list)
    spec: SpecSource | None = None
    result: BuildResult
    artifact: Artifact
    duration: Annotated[float, Field(ge=0)] = 0.0


class RebuildDecision(ImmutableModel):
    rebuild: bool
    reason: str


class BuildStamp(ImmutableModel):
    """Record of the last verified build, written to the workspace state directory."""

    source_digest: str
    spec_fingerprint: str
    artifact_path: str
    built_at: float
