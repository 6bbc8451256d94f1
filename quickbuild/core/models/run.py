"""
Run domain models.

Provides Pydantic models for service availability, supervised runs and
output analysis.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import Field, computed_field

from .base import ImmutableModel


class RunOutcomeKind(str, Enum):
    NATURAL_EXIT = "natural_exit"
    TIMEOUT_REACHED = "timeout_reached"
    CRASHED = "crashed"


class ServiceStatus(ImmutableModel):
    """Reachability of one optional external dependency."""

    name: str
    address: str
    env_var: str
    available: bool


class ServiceAvailability(ImmutableModel):
    """Probe results computed immediately before a run."""

    services: list[ServiceStatus] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def unavailable(self) -> list[str]:
        return [s.name for s in self.services if not s.available]

    def is_available(self, name: str) -> bool:
        return any(s.name == name and s.available for s in self.services)


class OutputSummary(ImmutableModel):
    """Bounded evidence extracted from a run log."""

    counts: dict[str, int] = Field(default_factory=dict)
    error_lines: list[str] = Field(default_factory=list)
    level_counts: dict[str, int] = Field(default_factory=dict)
    total_lines: int = 0

    def count(self, category: str) -> int:
        return self.counts.get(category, 0)


class RunOutcome(ImmutableModel):
    """Result of one supervised run."""

    kind: RunOutcomeKind
    exit_code: int | None = None
    log: str = ""
    elapsed: Annotated[float, Field(ge=0)] = 0.0
    timeout: Annotated[float, Field(gt=0)]
    services: ServiceAvailability = Field(default_factory=ServiceAvailability)
    summary: OutputSummary | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def succeeded(self) -> bool:
        """Natural exit 0 and reaching the timeout both count as success."""
        return self.kind != RunOutcomeKind.CRASHED
