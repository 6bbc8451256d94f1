"""
Integration test report presenter.
"""

from __future__ import annotations

from ..core.interfaces.presenter import IPresenter
from ..core.models.scenario import ScenarioReport, ScenarioStage
from .formatting import format_duration, label, truncate_string

BANNER = "=" * 60


class ScenarioReportPresenter:
    def __init__(self, presenter: IPresenter) -> None:
        self._out = presenter

    def show_stage(self, stage: ScenarioStage) -> None:
        self._out.print(f"-> {label(stage)}")

    def show(self, report: ScenarioReport) -> None:
        self._out.print("")
        self._out.print(BANNER)
        self._out.print(f"Scenario: {report.scenario}")
        self._out.print(BANNER)

        if report.assertions:
            rows = [
                [
                    "PASS" if a.passed else "FAIL",
                    a.name,
                    truncate_string(a.matched_line or a.pattern, 60),
                ]
                for a in report.assertions
            ]
            self._out.print_table(["Result", "Assertion", "Match / pattern"], rows)
            self._out.print("")

        self._out.print_key_value("Assertions", f"{report.passed_count} of {report.total} passed")
        self._out.print_key_value("Duration", format_duration(report.duration))

        if report.error:
            stage = label(report.failed_stage) if report.failed_stage else "?"
            self._out.print_error(f"{report.error_kind} at {stage}: {report.error}")
        for error in report.teardown_errors:
            self._out.print_warning(f"Teardown: {error}")

        if report.interrupted:
            self._out.print_warning("Scenario interrupted; test resources were torn down")
        elif report.passed:
            self._out.print_success(f"Scenario {report.scenario} passed")
        else:
            for a in report.failed_assertions:
                self._out.print_error(f"Assertion failed: {a.name} (pattern {a.pattern!r})")
