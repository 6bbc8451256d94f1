"""
Click decorators for quickbuild CLI commands.

- handle_errors: reports classified failures and maps them to exit codes
- build_options: the build-affecting flags shared by build, run and test
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from ..core.container import try_resolve
from ..core.exceptions import OperatorInterrupt, QuickbuildException
from ..core.interfaces.logger import ILogger
from ..core.interfaces.presenter import IPresenter

F = TypeVar("F", bound=Callable[..., Any])


def report_error(error: QuickbuildException) -> None:
    """Log and print a classified failure."""
    from ..presenters.console import ConsolePresenter
    from ..presenters.error_report import ErrorPresenter

    presenter = try_resolve(IPresenter) or ConsolePresenter()  # type: ignore[type-abstract]
    logger = try_resolve(ILogger)  # type: ignore[type-abstract]
    log_file = None
    if logger is not None:
        logger.error("%s: %s", error.kind, error)
        log_file = logger.log_file
    ErrorPresenter(presenter).show(error, log_file=log_file)


def handle_errors(f: F) -> F:
    """Decorator turning pipeline exceptions into reports and exit codes.

    Usage:
        @click.command()
        @click.pass_obj
        @handle_errors
        def build(ctx: QuickbuildContext):
            ...
    """

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except QuickbuildException as e:
            report_error(e)
            raise SystemExit(e.exit_code) from None
        except KeyboardInterrupt:
            interrupt = OperatorInterrupt("Interrupted by operator")
            report_error(interrupt)
            raise SystemExit(interrupt.exit_code) from None

    return wrapper  # type: ignore[return-value]


def build_options(f: F) -> F:
    """Add the build-affecting options; unset flags fall back to configuration."""
    options = [
        click.option("--clean", is_flag=True, default=None, help="Remove previous build output first"),
        click.option("--skip-deps", is_flag=True, default=None, help="Skip dependency installation"),
        click.option("--skip-vss", is_flag=True, default=None, help="Skip vehicle model generation"),
        click.option("--force", is_flag=True, default=None, help="Force a full rebuild"),
        click.option(
            "--spec-file",
            type=click.Path(dir_okay=False, path_type=Path),
            help="Local VSS specification file",
        ),
        click.option("--spec-url", help="Remote VSS specification URL"),
    ]
    for option in reversed(options):
        f = option(f)
    return f
