"""
Run output analysis.

Scans a run log for a small fixed vocabulary of behavioral evidence and
produces a bounded, counts-based summary. The analyzer never fails a run.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ...core.models.run import OutputSummary

ERROR_CATEGORY = "error"


@dataclass(frozen=True)
class EvidencePattern:
    """A named category of run evidence."""

    category: str
    pattern: re.Pattern[str]
    description: str

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None


EVIDENCE_PATTERNS: tuple[EvidencePattern, ...] = (
    EvidencePattern(
        "initialization",
        re.compile(r"Vehicle\s*App.*(start|initiali[sz])", re.IGNORECASE),
        "application initialization",
    ),
    EvidencePattern(
        "connection",
        re.compile(r"connected to.*(broker|databroker)|connection established", re.IGNORECASE),
        "connection to a dependency",
    ),
    EvidencePattern(
        "subscription",
        re.compile(r"subscribed to|subscription (confirmed|successful)", re.IGNORECASE),
        "signal subscription confirmed",
    ),
    EvidencePattern(
        "signal",
        re.compile(r"signal.*received|speed.*detected", re.IGNORECASE),
        "signal receipt",
    ),
    EvidencePattern(
        ERROR_CATEGORY,
        re.compile(r"error", re.IGNORECASE),
        "error marker",
    ),
)

LEVEL_TAG = re.compile(r"\[(INFO|SUCCESS|WARNING|WARN|ERROR)\]", re.IGNORECASE)


class OutputAnalyzer:
    """Counts evidence categories in captured run output."""

    def __init__(
        self,
        patterns: tuple[EvidencePattern, ...] = EVIDENCE_PATTERNS,
        error_sample: int = 5,
    ) -> None:
        self._patterns = patterns
        self._error_sample = error_sample

    def analyze(self, log: str) -> OutputSummary:
        counts = {p.category: 0 for p in self._patterns}
        level_counts = {"INFO": 0, "SUCCESS": 0, "WARNING": 0, "ERROR": 0}
        error_lines: list[str] = []
        total = 0

        for line in log.splitlines():
            total += 1
            for pattern in self._patterns:
                if pattern.matches(line):
                    counts[pattern.category] += 1
                    if (
                        pattern.category == ERROR_CATEGORY
                        and len(error_lines) < self._error_sample
                    ):
                        error_lines.append(line.strip())
            tag = LEVEL_TAG.search(line)
            if tag:
                level = tag.group(1).upper()
                level_counts["WARNING" if level == "WARN" else level] += 1

        return OutputSummary(
            counts=counts,
            error_lines=error_lines,
            level_counts=level_counts,
            total_lines=total,
        )
