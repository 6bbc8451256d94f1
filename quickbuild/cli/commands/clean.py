"""
Native Click implementation of the clean command.

Usage: quickbuild clean
"""

import click

from ...services.workspace import WorkspacePreparer
from ..context import QuickbuildContext
from ..decorators import handle_errors


@click.command("clean")
@click.pass_obj
@handle_errors
def clean(ctx: QuickbuildContext) -> None:
    """Remove build output, executables, the build stamp and recorded metrics."""
    config = ctx.pipeline_config()
    removed = WorkspacePreparer(config, logger=ctx.logger).clean_all()
    presenter = ctx.presenter
    for path in removed:
        presenter.print(f"Removed {path}")
    if removed:
        presenter.print_success("Workspace cleaned")
    else:
        presenter.print_success("Nothing to clean")
