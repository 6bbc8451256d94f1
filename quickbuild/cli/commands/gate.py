"""
Native Click implementation of the gate command.

Usage: quickbuild gate [options]
"""

from pathlib import Path

import click

from ...core.exceptions import QualityGateCriticalFailure
from ...core.models.gate import GateDecision
from ...presenters.quality_report import GateReportPresenter, render_gate_report
from ...services.quality import (
    DEFAULT_METRICS,
    MetricsStore,
    QualityGateEvaluator,
    load_metric_definitions,
    load_observed,
)
from ..context import QuickbuildContext
from ..decorators import handle_errors


def _optional_path(value: str | None) -> Path | None:
    return Path(value) if value else None


@click.command("gate")
@click.option(
    "--metrics",
    "metrics_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Metric definitions ([[metric]] tables); defaults to the built-in gates",
)
@click.option(
    "--observed",
    "observed_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Observed values (JSON or TOML); merged over recorded pipeline metrics",
)
@click.option("--strict", is_flag=True, default=None, help="Fail unless every metric passes")
@click.option(
    "--report",
    "report_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the machine-readable report to this file",
)
@click.pass_obj
@handle_errors
def gate(
    ctx: QuickbuildContext,
    metrics_file: Path | None,
    observed_file: Path | None,
    strict: bool | None,
    report_file: Path | None,
) -> None:
    """Evaluate quality gates against recorded and supplied metrics.

    Fails when a critical metric misses its threshold, or in strict mode
    when any metric misses. A score below the minimum only warns.
    """
    config = ctx.pipeline_config()
    gate_settings = ctx.settings.gate

    metrics_file = metrics_file or _optional_path(gate_settings.metrics_file)
    metrics = load_metric_definitions(metrics_file) if metrics_file else list(DEFAULT_METRICS)

    observed = MetricsStore(config.metrics_file).load()
    if observed_file is not None:
        observed.update(load_observed(observed_file))

    evaluator = QualityGateEvaluator(
        metrics,
        min_score=config.gate_min_score,
        strict=config.gate_strict if strict is None else strict,
        logger=ctx.logger,
    )
    report = evaluator.evaluate(observed)
    GateReportPresenter(ctx.presenter).show(report)

    report_file = report_file or _optional_path(gate_settings.report_file)
    if report_file is not None:
        report_file.parent.mkdir(parents=True, exist_ok=True)
        report_file.write_text(render_gate_report(report))
        ctx.presenter.print(f"Report written to {report_file}")

    if report.decision == GateDecision.FAIL:
        raise QualityGateCriticalFailure(
            "Quality gates failed",
            critical_failures=report.critical_failures,
            score=report.score,
        )
