"""
Build orchestration.

Sequences code generation, dependency installation and compilation,
classifying each toolchain step by exit code and, for compilation, by
known failure markers in the captured log.
"""

from __future__ import annotations

import time
from pathlib import Path

from ...core.di import LazyService
from ...core.exceptions import (
    BuildStepError,
    CodeGenerationFailed,
    CompileFailed,
    DependencyInstallFailed,
    ToolchainUnavailable,
    bounded_excerpt,
)
from ...core.interfaces.logger import ILogger
from ...core.models.build import BuildResult, BuildStatus, CommandResult, StepOutcome, StepResult
from ...core.models.pipeline import PipelineConfig
from ..logging import NullLogger
from .toolchain import ToolchainRunner

STEP_CODEGEN = "codegen"
STEP_DEPENDENCIES = "dependencies"
STEP_COMPILE = "compile"

# shell convention for "command not found"
MISSING_EXECUTABLE_EXIT = 127

STEP_EXCEPTIONS: dict[str, type[BuildStepError]] = {
    STEP_CODEGEN: CodeGenerationFailed,
    STEP_DEPENDENCIES: DependencyInstallFailed,
    STEP_COMPILE: CompileFailed,
}


def find_failure_marker(log: str, markers: tuple[str, ...] | list[str]) -> str | None:
    """Return the first marker found in ``log`` (case-insensitive)."""
    lowered = log.lower()
    for marker in markers:
        if marker.lower() in lowered:
            return marker
    return None


class _StepFailed(Exception):
    def __init__(self, step: StepResult, output: str, marker: str | None = None) -> None:
        self.step = step
        self.output = output
        self.marker = marker
        super().__init__(step.detail)


class BuildOrchestrator:
    """Produces a BuildResult from a prepared workspace."""

    logger = LazyService(ILogger, NullLogger)

    def __init__(
        self,
        config: PipelineConfig,
        runner: ToolchainRunner | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self._config = config
        self._runner = runner or ToolchainRunner(config, logger=logger)
        self.logger = logger

    def build(self) -> BuildResult:
        """Run the build stages in order; a failing stage ends the build."""
        start = time.monotonic()
        steps: list[StepResult] = []
        warnings: list[str] = []
        log_parts: list[str] = []

        try:
            steps.append(self._generate_model(log_parts))
            steps.append(self._install_dependencies(log_parts, warnings))
            steps.append(self._compile(log_parts))
        except _StepFailed as failure:
            steps.append(failure.step)
            self.logger.error("Build failed in %s: %s", failure.step.name, failure.step.detail)
            return BuildResult(
                status=BuildStatus.FAILURE,
                steps=steps,
                log="".join(log_parts),
                duration=time.monotonic() - start,
                warnings=warnings,
                failed_step=failure.step.name,
                failure_reason=failure.step.detail,
                failure_marker=failure.marker,
                excerpt=bounded_excerpt(failure.output, self._config.log_tail_lines),
            )

        status = BuildStatus.SUCCESS_WITH_WARNINGS if warnings else BuildStatus.SUCCESS
        return BuildResult(
            status=status,
            steps=steps,
            log="".join(log_parts),
            duration=time.monotonic() - start,
            warnings=warnings,
        )

    def _generate_model(self, log_parts: list[str]) -> StepResult:
        if self._config.skip_vss:
            return StepResult(name=STEP_CODEGEN, outcome=StepOutcome.SKIPPED, detail="--skip-vss")
        if self._config.model_dir.is_dir() and not self._config.force:
            return StepResult(
                name=STEP_CODEGEN,
                outcome=StepOutcome.SKIPPED,
                detail=f"vehicle model already generated in {self._config.model_dir}",
            )

        start = time.monotonic()
        for command in self._config.codegen_commands:
            result = self._runner.run(command, STEP_CODEGEN)
            log_parts.append(result.output)
            if not result.succeeded:
                raise _StepFailed(
                    StepResult(
                        name=STEP_CODEGEN,
                        outcome=StepOutcome.FAILED,
                        duration=time.monotonic() - start,
                        exit_code=result.exit_code,
                        detail=f"{' '.join(command)} exited with code {result.exit_code}",
                    ),
                    result.output,
                )
        return StepResult(
            name=STEP_CODEGEN,
            outcome=StepOutcome.COMPLETED,
            duration=time.monotonic() - start,
            exit_code=0,
        )

    def dependency_cache(self) -> Path | None:
        """First configured dependency cache directory that exists and is non-empty."""
        for cache in self._config.dependency_caches:
            if cache.is_dir() and any(cache.iterdir()):
                return cache
        return None

    def _install_dependencies(self, log_parts: list[str], warnings: list[str]) -> StepResult:
        if self._config.skip_deps:
            return StepResult(
                name=STEP_DEPENDENCIES, outcome=StepOutcome.SKIPPED, detail="--skip-deps"
            )

        try:
            result = self._runner.run(self._config.install_command, STEP_DEPENDENCIES)
        except ToolchainUnavailable as e:
            # handled like a non-zero exit so an existing cache still applies
            result = CommandResult(
                command=list(self._config.install_command),
                exit_code=MISSING_EXECUTABLE_EXIT,
                output=f"{e.message}\n",
                duration=0.0,
            )
        log_parts.append(result.output)
        if result.succeeded:
            return StepResult(
                name=STEP_DEPENDENCIES,
                outcome=StepOutcome.COMPLETED,
                duration=result.duration,
                exit_code=0,
            )

        cache = self.dependency_cache()
        if cache is None:
            raise _StepFailed(
                StepResult(
                    name=STEP_DEPENDENCIES,
                    outcome=StepOutcome.FAILED,
                    duration=result.duration,
                    exit_code=result.exit_code,
                    detail=f"dependency install exited with code {result.exit_code} "
                    "and no dependency cache exists",
                ),
                result.output,
            )

        message = (
            f"Dependency install failed (exit code {result.exit_code}); "
            f"continuing with cached dependencies in {cache}"
        )
        self.logger.warning(message)
        warnings.append(message)
        return StepResult(
            name=STEP_DEPENDENCIES,
            outcome=StepOutcome.DEGRADED,
            duration=result.duration,
            exit_code=result.exit_code,
            detail=f"using cache {cache}",
        )

    def _compile(self, log_parts: list[str]) -> StepResult:
        result = self._runner.run(self._config.compile_command, STEP_COMPILE)
        log_parts.append(result.output)

        if not result.succeeded:
            raise _StepFailed(
                StepResult(
                    name=STEP_COMPILE,
                    outcome=StepOutcome.FAILED,
                    duration=result.duration,
                    exit_code=result.exit_code,
                    detail=f"compilation exited with code {result.exit_code}",
                ),
                result.output,
            )

        if self._config.log_scan:
            marker = find_failure_marker(result.output, self._config.failure_markers)
            if marker is not None:
                raise _StepFailed(
                    StepResult(
                        name=STEP_COMPILE,
                        outcome=StepOutcome.FAILED,
                        duration=result.duration,
                        exit_code=0,
                        detail=f"build log contains failure marker {marker!r} despite exit code 0",
                    ),
                    result.output,
                    marker=marker,
                )

        return StepResult(
            name=STEP_COMPILE,
            outcome=StepOutcome.COMPLETED,
            duration=result.duration,
            exit_code=0,
        )

    def exception_for(self, result: BuildResult) -> BuildStepError:
        """The exception describing a failed BuildResult."""
        exc_cls = STEP_EXCEPTIONS.get(result.failed_step or STEP_COMPILE, CompileFailed)
        step = result.step(result.failed_step) if result.failed_step else None
        kwargs = {
            "exit_code": step.exit_code if step else None,
            "excerpt": result.excerpt,
        }
        if exc_cls is CompileFailed:
            return CompileFailed(
                result.failure_reason or "Compilation failed",
                marker=result.failure_marker,
                **kwargs,
            )
        return exc_cls(result.failure_reason or f"{result.failed_step} failed", **kwargs)
