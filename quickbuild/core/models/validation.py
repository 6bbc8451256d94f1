"""
Static validation models.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field, computed_field

from .base import ImmutableModel


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Verdict(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


VERDICT_EXIT_CODES = {
    Verdict.PASS: 0,
    Verdict.FAIL: 1,
    Verdict.WARN: 2,
}


class ValidationFinding(ImmutableModel):
    """One static-check result."""

    rule_id: str
    severity: Severity
    message: str
    tip: str | None = None
    line: int | None = None


class ValidationReport(ImmutableModel):
    """Ordered findings for one source text."""

    findings: list[ValidationFinding] = Field(default_factory=list)
    byte_count: int = 0
    line_count: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def error_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.ERROR)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def warning_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.WARNING)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def verdict(self) -> Verdict:
        if self.error_count:
            return Verdict.FAIL
        if self.warning_count:
            return Verdict.WARN
        return Verdict.PASS

    @property
    def exit_code(self) -> int:
        return VERDICT_EXIT_CODES[self.verdict]

    @property
    def errors(self) -> list[ValidationFinding]:
        return [f for f in self.findings if f.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationFinding]:
        return [f for f in self.findings if f.severity == Severity.WARNING]
