"""
Validation and quality gate report presenters.
"""

from __future__ import annotations

import json

from ..core.interfaces.presenter import IPresenter
from ..core.models.gate import GateDecision, MetricStatus, QualityGateReport
from ..core.models.validation import ValidationReport, Verdict
from .formatting import format_size

BANNER = "=" * 60


class ValidationReportPresenter:
    def __init__(self, presenter: IPresenter) -> None:
        self._out = presenter

    def show(self, report: ValidationReport, location: str) -> None:
        self._out.print(BANNER)
        self._out.print("Static Validation")
        self._out.print(BANNER)
        self._out.print_key_value("Source", location)
        self._out.print_key_value("Size", f"{format_size(report.byte_count)}, {report.line_count} lines")

        for finding in report.errors:
            where = f" (line {finding.line})" if finding.line else ""
            self._out.print_error(f"[{finding.rule_id}] {finding.message}{where}")
            if finding.tip:
                self._out.print_error_detail(f"  Tip: {finding.tip}")
        for finding in report.warnings:
            where = f" (line {finding.line})" if finding.line else ""
            self._out.print_warning(f"[{finding.rule_id}] {finding.message}{where}")
            if finding.tip:
                self._out.print(f"  Tip: {finding.tip}")

        self._out.print("")
        self._out.print_key_value("Errors", report.error_count)
        self._out.print_key_value("Warnings", report.warning_count)
        if report.verdict == Verdict.PASS:
            self._out.print_success("Validation passed")
        elif report.verdict == Verdict.WARN:
            self._out.print_warning("Validation passed with warnings")
        else:
            self._out.print_error("Validation failed")


STATUS_LABELS = {
    MetricStatus.PASS: "PASS",
    MetricStatus.WARN: "WARN",
    MetricStatus.FAIL: "FAIL",
}


class GateReportPresenter:
    def __init__(self, presenter: IPresenter) -> None:
        self._out = presenter

    def show(self, report: QualityGateReport) -> None:
        rows = []
        for r in report.results:
            observed = "not observed" if r.observed is None else f"{r.observed:g}{r.unit}"
            rows.append(
                [
                    r.name,
                    observed,
                    r.expectation,
                    "yes" if r.critical else "no",
                    STATUS_LABELS[MetricStatus(r.status)],
                ]
            )
        self._out.print(BANNER)
        self._out.print("Quality Gates")
        self._out.print(BANNER)
        self._out.print_table(["Metric", "Observed", "Threshold", "Critical", "Status"], rows)
        self._out.print("")
        self._out.print_key_value("Score", f"{report.score:.1f}% ({report.passed_count}/{report.total})")
        self._out.print_key_value("Critical failures", report.critical_failures)
        if report.strict:
            self._out.print_key_value("Mode", "strict")

        decision = GateDecision(report.decision)
        if decision == GateDecision.PASS:
            self._out.print_success("QUALITY GATES PASSED")
        elif decision == GateDecision.WARN:
            self._out.print_warning(
                f"Quality score below minimum threshold ({report.min_score:g}%)"
            )
        else:
            self._out.print_error(
                f"QUALITY GATES FAILED: {report.critical_failures} critical failures"
            )


def render_gate_report(report: QualityGateReport) -> str:
    """Machine-readable JSON form of a gate report."""
    return json.dumps(report.model_dump(mode="json"), indent=2) + "\n"
