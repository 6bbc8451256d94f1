"""
Application bootstrap for quickbuild.

Initializes the DI container with the logger, presenter and settings.
This module should be called once at application startup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .container import ServiceContainer, get_container
from .interfaces.logger import ILogger
from .interfaces.presenter import IPresenter

if TYPE_CHECKING:
    from .settings import QuickbuildSettings

_initialized = False


def bootstrap(
    settings: QuickbuildSettings | None = None,
    *,
    verbose: bool = False,
    quiet: bool = False,
) -> ServiceContainer:
    """
    Bootstrap the quickbuild application.

    Args:
        settings: Loaded settings (defaults are used when omitted)
        verbose: Raise the log level to debug
        quiet: Suppress non-essential presenter output

    Returns:
        Initialized ServiceContainer
    """
    global _initialized

    container = get_container()

    if _initialized:
        return container

    _register_core_services(container, settings, verbose=verbose, quiet=quiet)

    _initialized = True
    return container


def _register_core_services(
    container: ServiceContainer,
    settings: QuickbuildSettings | None,
    *,
    verbose: bool,
    quiet: bool,
) -> None:
    """Register core application services."""
    from ..presenters.console import ConsolePresenter
    from ..services.logging import QuickbuildLogger
    from .models.config import LoggingConfig
    from .settings import QuickbuildSettings

    if settings is not None:
        container.register_singleton(QuickbuildSettings, implementation=settings)

    container.register_singleton(IPresenter, implementation=ConsolePresenter(quiet=quiet))  # type: ignore[type-abstract]

    log_config = settings.logging if settings is not None else LoggingConfig()

    def create_logger() -> ILogger:
        return QuickbuildLogger(
            level="debug" if verbose else log_config.level,
            console_enabled=log_config.console,
            file_enabled=log_config.file,
            file_path=log_config.file_path,
        )

    container.register_singleton(ILogger, factory=create_logger)  # type: ignore[type-abstract]


def reset() -> None:
    """
    Reset the application state.

    Useful for testing to ensure clean state between tests.
    """
    global _initialized
    ServiceContainer.reset()
    _initialized = False


def is_initialized() -> bool:
    """Check if the application has been bootstrapped."""
    return _initialized
