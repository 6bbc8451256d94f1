"""
Native Click implementation of the validate command.

Usage: quickbuild validate [FILE]
"""

from pathlib import Path

import click

from ...core.exceptions import QuickbuildException
from ...core.models.source import SourceOrigin
from ...presenters.quality_report import ValidationReportPresenter
from ...services.input import InputResolver
from ...services.quality.metrics import MetricsStore
from ...services.validation import StaticValidator
from ..context import QuickbuildContext
from ..decorators import handle_errors


@click.command("validate")
@click.argument("file", required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
@handle_errors
def validate(ctx: QuickbuildContext, file: Path | None) -> None:
    """Check the application source without compiling it.

    Reads FILE, or the first available input channel.

    \b
    Exit codes:
        0  no findings
        1  at least one error
        2  warnings only
    """
    config = ctx.pipeline_config()
    presenter = ctx.presenter

    if file is not None:
        text = file.read_bytes().decode("utf-8", errors="replace")
        location = str(file)
    else:
        source = InputResolver(config, stdin=ctx.stdin, logger=ctx.logger).resolve()
        if source.origin == SourceOrigin.BUILT_IN_FALLBACK:
            presenter.print_warning("No input given, validating the built-in template")
        text = source.text
        location = source.location

    report = StaticValidator(logger=ctx.logger).validate(text)
    ValidationReportPresenter(presenter).show(report, location)

    try:
        MetricsStore(config.metrics_file).update(
            validation_errors=report.error_count,
            validation_warnings=report.warning_count,
        )
    except (OSError, QuickbuildException) as e:
        ctx.logger.warning("Could not record validation metrics: %s", e)

    if report.exit_code:
        raise SystemExit(report.exit_code)
