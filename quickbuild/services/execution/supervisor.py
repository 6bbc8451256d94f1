"""
Run supervision.

Launches the verified executable under a hard wall-clock timeout, streams
and captures its interleaved output, and classifies how it terminated.
The supervisor always returns within ``timeout + grace_period`` plus a
small overhead.
"""

from __future__ import annotations

import os
import signal
import subprocess
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import IO

from ...core.di import LazyService
from ...core.exceptions import RunCrashed
from ...core.interfaces.logger import ILogger
from ...core.models.pipeline import PipelineConfig
from ...core.models.run import RunOutcome, RunOutcomeKind
from ..logging import NullLogger
from .output_analyzer import OutputAnalyzer
from .probes import ServiceProber


def classify_exit(
    exit_code: int, timed_out: bool, timeout_exit_codes: tuple[int, ...] = (124,)
) -> RunOutcomeKind:
    """Three-way classification; reaching the timeout is a success category."""
    if timed_out or exit_code in timeout_exit_codes:
        return RunOutcomeKind.TIMEOUT_REACHED
    if exit_code == 0:
        return RunOutcomeKind.NATURAL_EXIT
    return RunOutcomeKind.CRASHED


class RunSupervisor:
    """Executes an artifact and produces a RunOutcome."""

    logger = LazyService(ILogger, NullLogger)

    def __init__(
        self,
        config: PipelineConfig,
        prober: ServiceProber | None = None,
        analyzer: OutputAnalyzer | None = None,
        on_output: Callable[[str], None] | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self._config = config
        self._prober = prober or ServiceProber(config, logger=logger)
        self._analyzer = analyzer or OutputAnalyzer(error_sample=config.error_sample)
        self._on_output = on_output
        self.logger = logger

    def run(self, artifact_path: str | Path) -> RunOutcome:
        """Probe services, run the artifact and analyze its output.

        Raises:
            RunCrashed: If the executable cannot be launched at all
        """
        availability, overrides = self._prober.probe()
        env = dict(self._config.base_env)
        env.update(overrides)

        timeout = self._config.run_timeout
        argv = [str(artifact_path)]
        self.logger.info("Launching %s (timeout %.0fs)", argv[0], timeout)

        start = time.monotonic()
        try:
            proc = subprocess.Popen(
                argv,
                cwd=self._config.workspace,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            raise RunCrashed(f"Cannot launch {argv[0]}: {e.strerror or e}", cause=e) from e

        lines: list[str] = []
        reader = threading.Thread(target=self._pump, args=(proc.stdout, lines), daemon=True)
        reader.start()

        timed_out = False
        try:
            try:
                exit_code = proc.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                timed_out = True
                self.logger.info("Timeout of %.0fs reached, stopping %s", timeout, argv[0])
                exit_code = self._terminate(proc)
        finally:
            if proc.poll() is None:
                self._terminate(proc)
            reader.join(timeout=self._config.grace_period + 1)
            if proc.stdout is not None:
                proc.stdout.close()

        elapsed = time.monotonic() - start
        log = "".join(lines)
        kind = classify_exit(exit_code, timed_out, self._config.timeout_exit_codes)
        self.logger.info(
            "Run finished: %s (exit code %s) after %.1fs\n%s",
            kind.value,
            exit_code,
            elapsed,
            log.rstrip("\n"),
        )

        return RunOutcome(
            kind=kind,
            exit_code=exit_code,
            log=log,
            elapsed=elapsed,
            timeout=timeout,
            services=availability,
            summary=self._analyzer.analyze(log),
        )

    def _pump(self, stream: IO[bytes] | None, lines: list[str]) -> None:
        if stream is None:
            return
        for raw in iter(stream.readline, b""):
            line = raw.decode("utf-8", errors="replace")
            lines.append(line)
            if self._on_output is not None:
                self._on_output(line.rstrip("\n"))

    def _terminate(self, proc: subprocess.Popen) -> int:
        """SIGTERM the process group, then SIGKILL after the grace period."""
        self._signal_group(proc, signal.SIGTERM)
        try:
            return proc.wait(timeout=self._config.grace_period)
        except subprocess.TimeoutExpired:
            self.logger.warning("Process %d ignored SIGTERM, killing", proc.pid)
            self._signal_group(proc, signal.SIGKILL)
            return proc.wait()

    def _signal_group(self, proc: subprocess.Popen, sig: int) -> None:
        try:
            os.killpg(proc.pid, sig)
        except ProcessLookupError:
            self.logger.debug("Process group %d already gone", proc.pid)
