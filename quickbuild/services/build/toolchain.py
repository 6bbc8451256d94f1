"""
External toolchain invocation.

Runs one toolchain command in the workspace, capturing interleaved
stdout/stderr and writing a transcript to the log.
"""

from __future__ import annotations

import subprocess
import time
from collections.abc import Callable, Sequence

from ...core.di import LazyService
from ...core.exceptions import ToolchainUnavailable
from ...core.interfaces.logger import ILogger
from ...core.models.build import CommandResult
from ...core.models.pipeline import PipelineConfig
from ..logging import NullLogger


class ToolchainRunner:
    """Runs build tool commands with the captured pipeline environment."""

    logger = LazyService(ILogger, NullLogger)

    def __init__(
        self,
        config: PipelineConfig,
        on_output: Callable[[str], None] | None = None,
        logger: ILogger | None = None,
    ) -> None:
        """
        Args:
            config: Pipeline configuration
            on_output: Called with each output line as it arrives (verbose mode)
            logger: Logger for transcripts
        """
        self._config = config
        self._on_output = on_output
        self.logger = logger

    def run(self, command: Sequence[str], step: str) -> CommandResult:
        """Run ``command`` to completion.

        Raises:
            ToolchainUnavailable: If the executable cannot be started
        """
        argv = list(command)
        self.logger.info("[%s] $ %s", step, " ".join(argv))
        start = time.monotonic()
        lines: list[str] = []
        try:
            proc = subprocess.Popen(
                argv,
                cwd=self._config.workspace,
                env=self._config.toolchain_env(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ToolchainUnavailable(
                f"Cannot start {argv[0]}: {e.strerror or e}", command=argv, cause=e
            ) from e

        with proc:
            for line in proc.stdout or ():
                lines.append(line)
                if self._on_output is not None:
                    self._on_output(line.rstrip("\n"))
            exit_code = proc.wait()

        duration = time.monotonic() - start
        output = "".join(lines)
        self.logger.info(
            "[%s] exit code %d after %.1fs\n%s", step, exit_code, duration, output.rstrip("\n")
        )
        return CommandResult(command=argv, exit_code=exit_code, output=output, duration=duration)
