"""
Click context extension for quickbuild CLI.

Provides QuickbuildContext dataclass that holds quickbuild-specific data
passed through the Click command chain via ctx.obj.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any

from ..core.bootstrap import bootstrap
from ..core.container import get_container
from ..core.interfaces.logger import ILogger
from ..core.interfaces.presenter import IPresenter
from ..core.models.pipeline import PipelineConfig
from ..core.settings import QuickbuildSettings, load_settings


@dataclass
class QuickbuildContext:
    """Extended context passed through Click command chain.

    Created once per invocation. The process environment is captured here
    and nowhere else; stages only see it through PipelineConfig.

    Attributes:
        settings: Loaded settings
        cwd: Current working directory
        stdin: Standard input stream, read by the input resolver
        env: Snapshot of the process environment
        workspace: Workspace root override from the command line
        verbose: Stream toolchain output and log at debug level
        quiet: Suppress non-essential output
    """

    settings: QuickbuildSettings
    cwd: Path
    stdin: IO | None = None
    env: dict[str, str] = field(default_factory=dict)
    workspace: Path | None = None
    verbose: bool = False
    quiet: bool = False

    @classmethod
    def create(
        cls,
        cwd: Path | None = None,
        config_path: Path | None = None,
        workspace: Path | None = None,
        verbose: bool = False,
        quiet: bool = False,
    ) -> QuickbuildContext:
        """Load settings, bootstrap the service container and capture the environment.

        Raises:
            ConfigFileError: If the config file cannot be read or parsed
            ConfigValidationError: If a configured value is invalid
        """
        if cwd is None:
            cwd = Path.cwd()

        settings = load_settings(config_path=config_path, start_dir=str(cwd))
        verbose = verbose or settings.verbose
        quiet = quiet or settings.quiet
        bootstrap(settings, verbose=verbose, quiet=quiet)

        return cls(
            settings=settings,
            cwd=cwd,
            stdin=sys.stdin,
            env=dict(os.environ),
            workspace=workspace,
            verbose=verbose,
            quiet=quiet,
        )

    @property
    def presenter(self) -> IPresenter:
        return get_container().resolve(IPresenter)  # type: ignore[type-abstract]

    @property
    def logger(self) -> ILogger:
        return get_container().resolve(ILogger)  # type: ignore[type-abstract]

    @property
    def output_callback(self) -> Callable[[str], None] | None:
        """Live toolchain output sink; only set in verbose mode."""
        if not self.verbose:
            return None
        presenter = self.presenter
        return lambda line: presenter.print(f"  {line}")

    def pipeline_config(self, timeout: float | None = None, **flags: Any) -> PipelineConfig:
        """Build the immutable configuration for this invocation."""
        return PipelineConfig.from_settings(
            self.settings,
            self.env,
            workspace=self.workspace,
            timeout=timeout,
            verbose=self.verbose,
            quiet=self.quiet,
            **flags,
        )

    def build_pipeline(self, config: PipelineConfig):
        from ..services.pipeline import BuildPipeline

        return BuildPipeline(
            config,
            stdin=self.stdin,
            on_output=self.output_callback,
            logger=self.logger,
        )
