"""
Change-aware rebuild cache.

Decides whether the expensive build stages must run by comparing the new
source byte-for-byte with the installed one. A build stamp written after
each verified build ties the installed source to the artifact it produced,
so an artifact left behind by an older build is never reused for a source
whose own build failed.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from ...core.di import LazyService
from ...core.interfaces.logger import ILogger
from ...core.models.build import Artifact, BuildStamp, RebuildDecision, SpecSource
from ...core.models.pipeline import PipelineConfig
from ...core.models.source import SourceInput
from ..logging import NullLogger


class ChangeDetector:
    """Rebuild decision and build stamp bookkeeping."""

    logger = LazyService(ILogger, NullLogger)

    def __init__(
        self,
        config: PipelineConfig,
        logger: ILogger | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._clock = clock
        self.logger = logger

    def find_artifact(self) -> Path | None:
        for candidate in self._config.artifact_candidates:
            if candidate.is_file():
                return candidate
        return None

    def load_stamp(self) -> BuildStamp | None:
        path = self._config.stamp_file
        if not path.is_file():
            return None
        try:
            return BuildStamp.model_validate_json(path.read_bytes())
        except (OSError, ValidationError) as e:
            self.logger.warning("Ignoring unreadable build stamp %s: %s", path, e)
            return None

    def decide(self, source: SourceInput, spec: SpecSource) -> RebuildDecision:
        """Decide whether ``source`` must be rebuilt."""
        decision = self._decide(source, spec)
        self.logger.info(
            "Rebuild decision: %s (%s)", "rebuild" if decision.rebuild else "skip", decision.reason
        )
        return decision

    def _decide(self, source: SourceInput, spec: SpecSource) -> RebuildDecision:
        if self._config.force:
            return RebuildDecision(rebuild=True, reason="full rebuild forced")
        if self._config.clean:
            return RebuildDecision(rebuild=True, reason="clean build requested")

        artifact = self.find_artifact()
        if artifact is None:
            return RebuildDecision(rebuild=True, reason="no artifact from a previous build")

        installed = self._config.source_file
        if not installed.is_file():
            return RebuildDecision(rebuild=True, reason="no installed source")
        if installed.read_bytes() != source.content:
            return RebuildDecision(rebuild=True, reason="input changed")

        stamp = self.load_stamp()
        if stamp is None or stamp.source_digest != source.digest:
            return RebuildDecision(
                rebuild=True, reason="no verified build recorded for the installed source"
            )
        if stamp.spec_fingerprint != spec.fingerprint:
            return RebuildDecision(rebuild=True, reason="specification source changed")
        if Path(stamp.artifact_path) != artifact:
            return RebuildDecision(rebuild=True, reason="artifact location changed")

        return RebuildDecision(rebuild=False, reason="input unchanged")

    def invalidate(self) -> None:
        """Forget the last verified build; called before installing a new source."""
        self._config.stamp_file.unlink(missing_ok=True)

    def record(self, source: SourceInput, spec: SpecSource, artifact: Artifact) -> BuildStamp:
        stamp = BuildStamp(
            source_digest=source.digest,
            spec_fingerprint=spec.fingerprint,
            artifact_path=artifact.path,
            built_at=self._clock(),
        )
        path = self._config.stamp_file
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(stamp.model_dump_json(indent=2))
        self.logger.debug("Wrote build stamp %s", path)
        return stamp
