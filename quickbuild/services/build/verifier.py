"""
Artifact verification.

Confirms a successful build left a usable, fresh executable at one of the
historically valid output locations.
"""

from __future__ import annotations

import os
import stat
import time
from collections.abc import Callable
from pathlib import Path

from ...core.di import LazyService
from ...core.exceptions import ArtifactMissingDespiteSuccess, StaleArtifact
from ...core.interfaces.logger import ILogger
from ...core.models.build import Artifact
from ...core.models.pipeline import PipelineConfig
from ..logging import NullLogger

EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class ArtifactVerifier:
    """Locates the executable and enforces the freshness window."""

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

    def locate(self) -> Path | None:
        """First existing candidate, in priority order."""
        for candidate in self._config.artifact_candidates:
            if candidate.is_file():
                self.logger.debug("Artifact found at %s", candidate)
                return candidate
            self.logger.debug("No artifact at %s", candidate)
        return None

    def verify(self, require_fresh: bool = True) -> Artifact:
        """Verify the build output.

        Args:
            require_fresh: Enforce the freshness window (disabled when an
                unchanged source reuses the previous build)

        Raises:
            ArtifactMissingDespiteSuccess: If no candidate exists
            StaleArtifact: If the executable is older than the freshness window
        """
        path = self.locate()
        if path is None:
            raise ArtifactMissingDespiteSuccess(
                "Build reported success but no executable was produced",
                candidates=[str(c) for c in self._config.artifact_candidates],
            )

        st = path.stat()
        age = self._clock() - st.st_mtime
        window = self._config.freshness_window
        if require_fresh and age > window:
            self.logger.error("Stale artifact %s: %.0fs old, window %.0fs", path, age, window)
            raise StaleArtifact(
                "Executable is older than the freshness window; the build reused an old binary",
                path=str(path),
                age_seconds=age,
                window_seconds=window,
            )

        os.chmod(path, stat.S_IMODE(st.st_mode) | EXECUTE_BITS)
        st = path.stat()
        artifact = Artifact(
            path=str(path.absolute()),
            size=st.st_size,
            mode=st.st_mode,
            modified_at=st.st_mtime,
        )
        self.logger.info(
            "Verified artifact %s (%d bytes, %s)", artifact.path, artifact.size, artifact.permissions
        )
        return artifact
