"""
Build and run report presenters.

Follows SRP: only handles report presentation.
"""

from __future__ import annotations

from ..core.interfaces.presenter import IPresenter
from ..core.models.build import BuildSummary, SpecSource, SpecSourceKind
from ..core.models.run import RunOutcome, RunOutcomeKind
from ..core.models.source import SourceOrigin
from .formatting import format_duration, format_exit_code, format_size, label

BANNER = "=" * 60

EVIDENCE_LABELS = {
    "initialization": "Initialization markers",
    "connection": "Connections",
    "subscription": "Subscriptions",
    "signal": "Signal updates",
    "error": "Error lines",
}


def describe_spec(spec: SpecSource | None) -> str:
    if spec is None or spec.kind == SpecSourceKind.DEFAULT:
        return "default"
    return f"{spec.kind} {spec.location}"


class BuildReportPresenter:
    """Formats and displays the build summary."""

    def __init__(self, presenter: IPresenter) -> None:
        self._out = presenter

    def show_notices(self, summary: BuildSummary) -> None:
        """Print the input fallback, source warning and rebuild-skip notices."""
        if summary.source_origin == SourceOrigin.BUILT_IN_FALLBACK:
            self._out.print_warning("No input given, using built-in template")
        for warning in summary.source_warnings:
            self._out.print_warning(warning)
        if not summary.rebuilt:
            self._out.print(f"Skipping rebuild: {summary.rebuild_reason}")
        for warning in summary.result.warnings:
            self._out.print_warning(warning)

    def show(self, summary: BuildSummary) -> None:
        self.show_notices(summary)
        self._out.print("")
        self._out.print(BANNER)
        self._out.print("Build Complete" if summary.rebuilt else "Build Reused")
        self._out.print(BANNER)
        self._out.print_key_value(
            "Source", f"{label(summary.source_origin)} {summary.source_location} ({summary.source_lines} lines)"
        )
        self._out.print_key_value("Specification", describe_spec(summary.spec))
        rebuild = "performed" if summary.rebuilt else "skipped"
        self._out.print_key_value("Rebuild", f"{rebuild} ({summary.rebuild_reason})")

        rows = [
            [
                step.name,
                label(step.outcome),
                format_duration(step.duration) if summary.rebuilt else "-",
                step.detail or "",
            ]
            for step in summary.result.steps
        ]
        if rows:
            self._out.print("")
            self._out.print_table(["Stage", "Outcome", "Duration", "Detail"], rows)
            self._out.print("")

        self._out.print_key_value("Duration", format_duration(summary.duration))
        artifact = summary.artifact
        self._out.print_key_value("Artifact", artifact.path)
        self._out.print_key_value("Size", format_size(artifact.size))
        self._out.print_key_value("Permissions", artifact.permissions)
        self._out.print_success("Build succeeded")


class RunReportPresenter:
    """Formats and displays the outcome of a supervised run."""

    def __init__(self, presenter: IPresenter) -> None:
        self._out = presenter

    def show_services(self, outcome: RunOutcome) -> None:
        rows = [
            [s.name, s.address, "available" if s.available else "disabled"]
            for s in outcome.services.services
        ]
        self._out.print_section("Services")
        self._out.print_table(["Service", "Address", "Status"], rows)
        for name in outcome.services.unavailable:
            self._out.print_warning(f"{name} unreachable, running with it disabled")

    def show(self, outcome: RunOutcome) -> None:
        self.show_services(outcome)
        self._out.print("")
        self._out.print(BANNER)
        self._out.print("Run Complete" if outcome.succeeded else "Run Crashed")
        self._out.print(BANNER)
        self._out.print_key_value("Outcome", label(outcome.kind))
        self._out.print_key_value("Exit code", format_exit_code(outcome.exit_code))
        self._out.print_key_value(
            "Elapsed", f"{format_duration(outcome.elapsed)} (timeout {format_duration(outcome.timeout)})"
        )

        summary = outcome.summary
        if summary is not None:
            self._out.print_key_value("Log lines", summary.total_lines)
            self._out.print_section("Evidence")
            for category, title in EVIDENCE_LABELS.items():
                self._out.print_key_value(title, summary.count(category), indent=1)
            if summary.level_counts:
                levels = ", ".join(f"{k}={v}" for k, v in sorted(summary.level_counts.items()))
                self._out.print_key_value("Tagged lines", levels, indent=1)
            if summary.error_lines:
                self._out.print_section("First error lines")
                for line in summary.error_lines:
                    self._out.print(f"  {line}")

        if outcome.kind == RunOutcomeKind.TIMEOUT_REACHED:
            self._out.print_success("Application ran until the timeout")
        elif outcome.kind == RunOutcomeKind.NATURAL_EXIT:
            self._out.print_success("Application exited normally")
