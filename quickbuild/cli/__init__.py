"""
Click-based CLI for quickbuild.

This module provides the main Click command group and serves as the
entry point for the quickbuild CLI.

Usage:
    from quickbuild.cli import cli
    cli()  # Invokes the CLI
"""

from __future__ import annotations

from pathlib import Path

import click

from .. import __version__
from ..core.exceptions import QuickbuildException
from .context import QuickbuildContext
from .decorators import report_error

# Commands that work without loading settings
NO_CONTEXT_COMMANDS = {"help"}


class QuickbuildGroup(click.Group):
    """Command group whose usage errors exit 1; exit code 2 is reserved for validator warnings."""

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = 1
            raise

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = 1
            raise


@click.group(cls=QuickbuildGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="quickbuild")
@click.option("-v", "--verbose", is_flag=True, help="Stream toolchain output and log at debug level")
@click.option("-q", "--quiet", is_flag=True, help="Only print errors, warnings and results")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file (default: .quickbuild/config.toml)",
)
@click.option(
    "--workspace",
    type=click.Path(file_okay=False, path_type=Path),
    help="Build workspace root (default: /quickbuild)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    config_path: Path | None,
    workspace: Path | None,
) -> None:
    """quickbuild - build, validate, run and test a vehicle application

    Takes a single C++ vehicle application source, builds it in a prepared
    workspace, verifies the executable and runs or tests it.

    \b
    Input (first match wins):
        /app.cpp, /input/VehicleApp.cpp, /input, piped stdin,
        built-in template

    \b
    Commands:
        quickbuild build              Build the application
        quickbuild run [TIMEOUT]      Build, then run with a timeout
        quickbuild validate [FILE]    Static checks without compiling
        quickbuild test [SCENARIO]    Integration test against a data broker
        quickbuild gate               Evaluate quality gates
        quickbuild clean              Remove build output

    \b
    Exit codes:
        0  success
        1  failure
        2  validation passed with warnings
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)
    elif ctx.invoked_subcommand not in NO_CONTEXT_COMMANDS:
        try:
            ctx.obj = QuickbuildContext.create(
                config_path=config_path,
                workspace=workspace,
                verbose=verbose,
                quiet=quiet,
            )
        except QuickbuildException as e:
            report_error(e)
            ctx.exit(e.exit_code)


def register_commands() -> None:
    """Register all CLI commands with the main group."""
    from .commands import COMMANDS

    for cmd in COMMANDS:
        cli.add_command(cmd)


# Register commands at module load time
register_commands()


__all__ = [
    "QuickbuildContext",
    "QuickbuildGroup",
    "cli",
    "register_commands",
]
