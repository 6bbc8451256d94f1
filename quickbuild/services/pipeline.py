"""
Build pipeline.

Runs the strict stage sequence for one invocation:

    resolve input -> decide rebuild -> prepare workspace -> build -> verify

A failing stage raises and short-circuits every later stage. Build metrics
are recorded whether the build succeeds or fails.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import IO

from ..core.di import LazyService
from ..core.exceptions import QuickbuildException
from ..core.interfaces.logger import ILogger
from ..core.models.build import (
    Artifact,
    BuildResult,
    BuildStatus,
    BuildSummary,
    RebuildDecision,
    SpecSource,
    StepOutcome,
    StepResult,
)
from ..core.models.pipeline import PipelineConfig
from ..core.models.source import SourceInput
from .build import ArtifactVerifier, BuildOrchestrator, ToolchainRunner
from .build.orchestrator import STEP_CODEGEN, STEP_COMPILE, STEP_DEPENDENCIES
from .input import InputResolver
from .logging import NullLogger
from .quality.metrics import MetricsStore
from .workspace import ChangeDetector, WorkspacePreparer


class BuildPipeline:
    """Produces a verified artifact from whichever input channel is present."""

    logger = LazyService(ILogger, NullLogger)

    def __init__(
        self,
        config: PipelineConfig,
        stdin: IO | None = None,
        on_output: Callable[[str], None] | None = None,
        resolver: InputResolver | None = None,
        detector: ChangeDetector | None = None,
        preparer: WorkspacePreparer | None = None,
        orchestrator: BuildOrchestrator | None = None,
        verifier: ArtifactVerifier | None = None,
        metrics: MetricsStore | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self.config = config
        self.resolver = resolver or InputResolver(config, stdin=stdin, logger=logger)
        self.detector = detector or ChangeDetector(config, logger=logger)
        self.preparer = preparer or WorkspacePreparer(config, logger=logger)
        self.orchestrator = orchestrator or BuildOrchestrator(
            config, runner=ToolchainRunner(config, on_output=on_output, logger=logger), logger=logger
        )
        self.verifier = verifier or ArtifactVerifier(config, logger=logger)
        self.metrics = metrics or MetricsStore(config.metrics_file)
        self.logger = logger
        self._source: SourceInput | None = None

    def build(self) -> BuildSummary:
        """Run the build stages.

        Raises:
            QuickbuildException: The classified failure of the first failing stage
        """
        start = time.monotonic()
        try:
            summary = self._build(start)
        except QuickbuildException as e:
            self.logger.error("Build pipeline failed: %s", e)
            self._record(succeeded=False, duration=time.monotonic() - start)
            raise
        self._record(succeeded=True, duration=summary.duration)
        return summary

    def source(self) -> SourceInput:
        """The selected source, resolved once per pipeline.

        Standard input can only be read once, so every later build of the
        same invocation reuses the first resolution.
        """
        if self._source is None:
            self._source = self.resolver.resolve()
        return self._source

    def _build(self, start: float) -> BuildSummary:
        source = self.source()
        source_warnings = self.resolver.check_structure(source)
        spec = self.preparer.resolve_spec_source()
        decision = self.detector.decide(source, spec)

        if decision.rebuild:
            result, artifact = self._rebuild(source, spec)
        else:
            result, artifact = self._reuse(decision)

        return BuildSummary(
            source_origin=source.origin,
            source_location=source.location,
            source_lines=source.line_count,
            source_digest=source.digest,
            rebuilt=decision.rebuild,
            rebuild_reason=decision.reason,
            source_warnings=source_warnings,
            spec=spec,
            result=result,
            artifact=artifact,
            duration=time.monotonic() - start,
        )

    def _rebuild(self, source: SourceInput, spec: SpecSource) -> tuple[BuildResult, Artifact]:
        self.detector.invalidate()
        self.resolver.install(source)
        self.preparer.prepare(spec)

        result = self.orchestrator.build()
        if not result.succeeded:
            raise self.orchestrator.exception_for(result)

        artifact = self.verifier.verify()
        self.detector.record(source, spec, artifact)
        return result.model_copy(update={"artifact": artifact}), artifact

    def _reuse(self, decision: RebuildDecision) -> tuple[BuildResult, Artifact]:
        self.logger.info("Skipping rebuild: %s", decision.reason)
        artifact = self.verifier.verify(require_fresh=False)
        result = BuildResult(
            status=BuildStatus.SUCCESS,
            steps=[
                StepResult(name=name, outcome=StepOutcome.SKIPPED, detail=decision.reason)
                for name in (STEP_CODEGEN, STEP_DEPENDENCIES, STEP_COMPILE)
            ],
            artifact=artifact,
        )
        return result, artifact

    def _record(self, succeeded: bool, duration: float) -> None:
        try:
            self.metrics.update(
                build_success_rate=100.0 if succeeded else 0.0,
                build_time=round(duration, 3),
            )
        except (OSError, QuickbuildException) as e:
            self.logger.warning("Could not record build metrics: %s", e)
