"""Build stages: toolchain invocation, orchestration and artifact verification."""

from .orchestrator import BuildOrchestrator, find_failure_marker
from .toolchain import ToolchainRunner
from .verifier import ArtifactVerifier

__all__ = ["ArtifactVerifier", "BuildOrchestrator", "ToolchainRunner", "find_failure_marker"]
