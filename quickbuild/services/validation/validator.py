"""
Static validator.

Runs every registered rule over raw source text and collects the findings
into a ValidationReport. Compilation is never attempted.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...core.di import LazyService
from ...core.interfaces.logger import ILogger
from ...core.models.validation import ValidationReport
from ..logging import NullLogger
from .rules import Rule, get_rules


class StaticValidator:
    logger = LazyService(ILogger, NullLogger)

    def __init__(self, rules: Sequence[Rule] | None = None, logger: ILogger | None = None) -> None:
        self._rules = list(rules) if rules is not None else get_rules()
        self.logger = logger

    @property
    def rule_ids(self) -> list[str]:
        return [r.rule_id for r in self._rules]

    def validate(self, text: str) -> ValidationReport:
        findings = []
        for rule in self._rules:
            found = rule(text)
            if found:
                self.logger.debug("Rule %s: %d finding(s)", rule.rule_id, len(found))
            findings.extend(found)

        report = ValidationReport(
            findings=findings,
            byte_count=len(text.encode("utf-8")),
            line_count=len(text.splitlines()),
        )
        self.logger.info(
            "Validation: %s (%d errors, %d warnings)",
            report.verdict.value,
            report.error_count,
            report.warning_count,
        )
        return report
