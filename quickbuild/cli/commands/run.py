"""
Native Click implementation of the run command.

Usage: quickbuild run [options] [TIMEOUT]
"""

import click

from ...core.exceptions import RunCrashed
from ...presenters.formatting import format_duration
from ...presenters.run_report import BuildReportPresenter, RunReportPresenter
from ...services.execution import RunSupervisor
from ..context import QuickbuildContext
from ..decorators import build_options, handle_errors


@click.command("run")
@click.argument("timeout", required=False, type=click.IntRange(min=1))
@build_options
@click.pass_obj
@handle_errors
def run(ctx: QuickbuildContext, timeout: int | None, **flags) -> None:
    """Build, then run the application for up to TIMEOUT seconds.

    Reaching the timeout counts as success; the application is stopped
    with SIGTERM, then SIGKILL after a grace period. Unreachable brokers
    are disabled for the run instead of failing it.

    \b
    Examples:
        quickbuild run
        quickbuild run 120
    """
    config = ctx.pipeline_config(timeout=timeout, **flags)
    summary = ctx.build_pipeline(config).build()
    BuildReportPresenter(ctx.presenter).show(summary)

    artifact = summary.artifact
    presenter = ctx.presenter
    presenter.print_section(f"Running {artifact.path} (timeout {format_duration(config.run_timeout)})")

    supervisor = RunSupervisor(
        config,
        on_output=lambda line: presenter.print(f"  {line}"),
        logger=ctx.logger,
    )
    outcome = supervisor.run(artifact.path)
    RunReportPresenter(presenter).show(outcome)

    if not outcome.succeeded:
        raise RunCrashed(
            f"Application crashed with exit code {outcome.exit_code}",
            exit_code=outcome.exit_code,
            excerpt=outcome.log,
        )
