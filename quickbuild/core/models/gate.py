"""
Quality gate models.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import Field, computed_field

from .base import ImmutableModel
from .config import ConfigBaseModel


class Comparison(str, Enum):
    AT_MOST = "at_most"
    AT_LEAST = "at_least"
    EQUALS = "equals"


COMPARISON_SYMBOLS = {
    Comparison.AT_MOST: "<=",
    Comparison.AT_LEAST: ">=",
    Comparison.EQUALS: "==",
}


class MetricStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class GateDecision(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class QualityGateMetric(ConfigBaseModel):
    """A named measurement definition. Criticality belongs to the definition."""

    name: Annotated[str, Field(min_length=1)]
    threshold: float
    comparison: Comparison = Comparison.AT_LEAST
    critical: bool = True
    unit: str = ""
    description: str = ""


class MetricResult(ImmutableModel):
    name: str
    observed: float | None
    threshold: float
    comparison: Comparison
    critical: bool
    status: MetricStatus
    unit: str = ""

    @property
    def expectation(self) -> str:
        return f"{COMPARISON_SYMBOLS[Comparison(self.comparison)]} {self.threshold:g}{self.unit}"


class QualityGateReport(ImmutableModel):
    """Machine-readable quality gate outcome."""

    results: list[MetricResult] = Field(default_factory=list)
    decision: GateDecision
    strict: bool = False
    min_score: float = 85.0
    generated_at: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return len(self.results)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.results if r.status == MetricStatus.PASS)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def critical_failures(self) -> int:
        return sum(1 for r in self.results if r.critical and r.status == MetricStatus.FAIL)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def score(self) -> float:
        if not self.results:
            return 100.0
        return self.passed_count / self.total * 100
