"""
Native Click implementation of the build command.

Usage: quickbuild build [options]
"""

import click

from ...presenters.run_report import BuildReportPresenter
from ..context import QuickbuildContext
from ..decorators import build_options, handle_errors


@click.command("build")
@build_options
@click.pass_obj
@handle_errors
def build(ctx: QuickbuildContext, **flags) -> None:
    """Build the application from the first available input.

    Skips compilation when the input is byte-identical to the last
    verified build.

    \b
    Examples:
        cat MyApp.cpp | quickbuild build
        quickbuild build --skip-deps --skip-vss
        quickbuild build --spec-url https://example.com/vss.json
    """
    config = ctx.pipeline_config(**flags)
    summary = ctx.build_pipeline(config).build()
    BuildReportPresenter(ctx.presenter).show(summary)
