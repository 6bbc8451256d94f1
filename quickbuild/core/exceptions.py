"""
Exception hierarchy for quickbuild.

Every fatal pipeline condition has its own exception type carrying a stable
``kind`` name, a bounded log excerpt and a fixed set of remediation tips, so
the CLI can report any failure the same way.
"""

from __future__ import annotations

from typing import ClassVar

EXCERPT_MAX_LINES = 30


def bounded_excerpt(text: str | None, max_lines: int = EXCERPT_MAX_LINES) -> str:
    """Return the last ``max_lines`` lines of ``text``."""
    if not text:
        return ""
    lines = text.rstrip("\n").splitlines()
    return "\n".join(lines[-max_lines:])


class QuickbuildException(Exception):
    """
    Base exception for all quickbuild errors.

    Attributes:
        message: Human-readable error description
        context: Additional debugging context (paths, commands, counts)
        excerpt: Bounded captured log text relevant to the failure
        exit_code: Suggested exit code for CLI (default: 1)
        recoverable: Whether retry/recovery may be possible
        kind: Stable classification name shown to the user
        tips: Remediation tips keyed to this error kind
    """

    exit_code: int = 1
    recoverable: bool = False
    kind: ClassVar[str] = "QuickbuildError"
    tips: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        message: str,
        *,
        context: dict | None = None,
        excerpt: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        self.excerpt = bounded_excerpt(excerpt)
        if cause is not None:
            self.__cause__ = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class QuickbuildConfigError(QuickbuildException):
    """Base class for configuration-related errors."""

    kind = "ConfigError"


class ConfigFileError(QuickbuildConfigError):
    """
    Error reading or parsing a configuration, scenario or metrics file.

    Raised for TOML/JSON parsing errors, file not found, permission errors, etc.
    """

    kind = "ConfigFileError"

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if file_path:
            ctx["file_path"] = file_path
        super().__init__(message, context=ctx, cause=cause)


class ConfigValidationError(QuickbuildConfigError, ValueError):
    """Invalid or missing configuration value."""

    kind = "ConfigValidationError"

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        value: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        if value is not None:
            ctx["value"] = value
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Input Errors
# =============================================================================


class NoInputProvided(QuickbuildException):
    """No input channel yielded a usable source, including the built-in template."""

    kind = "NoInputProvided"
    tips = (
        "Mount your source file at /app.cpp",
        "Or mount a directory containing VehicleApp.cpp at /input",
        "Or pipe the source on standard input: cat VehicleApp.cpp | quickbuild build",
    )


class InvalidSource(QuickbuildException):
    """The selected source failed the minimal structural check."""

    kind = "InvalidSource"
    tips = (
        "Declare the application class: class VehicleApp : public velocitas::VehicleApp",
        "Make sure the whole file was provided, not an empty or truncated stream",
    )

    def __init__(
        self,
        message: str,
        *,
        origin: str | None = None,
        location: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if origin:
            ctx["origin"] = origin
        if location:
            ctx["location"] = location
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Workspace Errors
# =============================================================================


class WorkspaceMisconfigured(QuickbuildException):
    """
    A fixed configuration artifact required for compilation is missing.

    This is a deployment defect rather than a user error.
    """

    kind = "WorkspaceMisconfigured"
    tips = (
        "Rebuild or re-pull the build image; the workspace template is incomplete",
        "Check --workspace / QUICKBUILD_WORKSPACE__ROOT points at the prepared workspace",
    )

    def __init__(
        self,
        message: str,
        *,
        missing: list[str] | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if missing:
            ctx["missing"] = missing
        super().__init__(message, context=ctx, cause=cause)


class SpecificationOverrideError(QuickbuildException):
    """Base class for specification override failures."""

    kind = "SpecificationOverrideError"


class InvalidSpecificationURL(SpecificationOverrideError):
    """A remote specification URL does not start with an accepted scheme."""

    kind = "InvalidSpecificationURL"
    tips = (
        "Use an http:// or https:// URL for --spec-url / VSS_SPEC_URL",
        "Use --spec-file / VSS_SPEC_FILE for a local specification document",
    )

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if url is not None:
            ctx["url"] = url
        super().__init__(message, context=ctx, cause=cause)


class SpecificationFileMissing(SpecificationOverrideError):
    """A local specification path was supplied but does not exist."""

    kind = "SpecificationFileMissing"
    tips = (
        "Check the path passed with --spec-file / VSS_SPEC_FILE",
        "Mount the specification file into the container before building",
    )

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Build Errors
# =============================================================================


class BuildStepError(QuickbuildException):
    """Base class for failures of an external toolchain step."""

    kind = "BuildStepError"

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        exit_code: int | None = None,
        excerpt: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if command:
            ctx["command"] = " ".join(command)
        if exit_code is not None:
            ctx["exit_code"] = exit_code
        super().__init__(message, context=ctx, excerpt=excerpt, cause=cause)


class CodeGenerationFailed(BuildStepError):
    """The specification-driven code generation command failed."""

    kind = "CodeGenerationFailed"
    tips = (
        "Check the specification URL or file is reachable and valid JSON",
        "Use --skip-vss to reuse the previously generated vehicle model",
    )


class DependencyInstallFailed(BuildStepError):
    """Dependency installation failed and no dependency cache exists."""

    kind = "DependencyInstallFailed"
    tips = (
        "Check network access; set HTTP_PROXY/HTTPS_PROXY if behind a proxy",
        "Verify conanfile.txt lists resolvable packages",
    )


class CompileFailed(BuildStepError):
    """Compilation exited non-zero or its log contains a failure marker."""

    kind = "CompileFailed"
    tips = (
        "Check for syntax errors",
        "Ensure all #include directives are correct",
        "Verify vehicle signal names match the VSS specification",
    )

    def __init__(
        self,
        message: str,
        *,
        marker: str | None = None,
        command: list[str] | None = None,
        exit_code: int | None = None,
        excerpt: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if marker:
            ctx["marker"] = marker
        super().__init__(
            message,
            command=command,
            exit_code=exit_code,
            excerpt=excerpt,
            context=ctx,
            cause=cause,
        )


class ToolchainUnavailable(BuildStepError):
    """A toolchain executable could not be started at all."""

    kind = "ToolchainUnavailable"
    tips = (
        "Make sure the build tool is installed and on PATH",
        "Extra PATH entries can be set with QUICKBUILD_BUILD__EXTRA_PATH",
    )


# =============================================================================
# Artifact Errors
# =============================================================================


class ArtifactError(QuickbuildException):
    """Base class for artifact verification failures."""

    kind = "ArtifactError"


class ArtifactMissingDespiteSuccess(ArtifactError):
    """The build reported success but no executable exists at any candidate path."""

    kind = "ArtifactMissingDespiteSuccess"
    tips = (
        "The build tool reported success without producing an executable",
        "Run 'quickbuild clean' and rebuild with --verbose to inspect the toolchain output",
    )

    def __init__(
        self,
        message: str,
        *,
        candidates: list[str] | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if candidates:
            ctx["candidates"] = candidates
        super().__init__(message, context=ctx, cause=cause)


class StaleArtifact(ArtifactError):
    """The executable is older than the freshness window: the compiler reused an old binary."""

    kind = "StaleArtifact"
    tips = (
        "The compile step was a no-op and an old binary was left in place",
        "Run 'quickbuild clean' and rebuild; check the build log for swallowed errors",
    )

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        age_seconds: float | None = None,
        window_seconds: float | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if path:
            ctx["path"] = path
        if age_seconds is not None:
            ctx["age_seconds"] = round(age_seconds, 1)
        if window_seconds is not None:
            ctx["window_seconds"] = window_seconds
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Run Errors
# =============================================================================


class RunCrashed(QuickbuildException):
    """The application exited with a non-zero, non-timeout exit code."""

    kind = "RunCrashed"
    tips = (
        "Inspect the error lines above for the failing component",
        "Unreachable brokers are disabled automatically; a crash is an application fault",
    )

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        excerpt: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if exit_code is not None:
            ctx["exit_code"] = exit_code
        super().__init__(message, context=ctx, excerpt=excerpt, cause=cause)


class OperatorInterrupt(QuickbuildException):
    """The operator cancelled the invocation."""

    kind = "Interrupted"
    exit_code = 130


# =============================================================================
# Integration Test Errors
# =============================================================================


class ScenarioError(QuickbuildException):
    """Base class for integration test failures."""

    kind = "ScenarioError"


class UnknownScenario(ScenarioError):
    """The requested scenario name is not defined."""

    kind = "UnknownScenario"

    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        available: list[str] | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if name:
            ctx["name"] = name
        if available:
            ctx["available"] = available
        super().__init__(message, context=ctx, cause=cause)


class TestEnvironmentError(ScenarioError):
    """A container runtime command failed while provisioning the test environment."""

    __test__ = False
    kind = "TestEnvironmentError"
    tips = (
        "Check the docker daemon is running and reachable",
        "Check the broker and client images can be pulled",
    )

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        stderr: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if command:
            ctx["command"] = " ".join(command)
        super().__init__(message, context=ctx, excerpt=stderr, cause=cause)


class ServiceNotReady(TestEnvironmentError):
    """A dependent service did not become ready within the bounded retry count."""

    kind = "ServiceNotReady"
    tips = (
        "The data broker container started but never accepted connections",
        "Inspect it with 'docker logs' before the next run recreates it",
    )


class InjectionFailed(TestEnvironmentError):
    """A signal injection could not be applied through the client container."""

    kind = "InjectionFailed"
    tips = (
        "Check the signal path exists in the broker's VSS tree",
        "Check the client container has the kuksa client library installed",
    )


class ScenarioAssertionFailed(ScenarioError):
    """One or more log assertions of a scenario did not match."""

    kind = "ScenarioAssertionFailed"
    tips = (
        "Compare the failed assertion patterns with the application log above",
        "Make sure the application logs its reaction to each injected signal",
    )

    def __init__(
        self,
        message: str,
        *,
        failed: list[str] | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if failed:
            ctx["failed"] = failed
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Quality Gate Errors
# =============================================================================


class QualityGateCriticalFailure(QuickbuildException):
    """The quality gate decided Fail."""

    kind = "QualityGateCriticalFailure"
    tips = ("Fix the failing critical metrics listed in the report before releasing",)

    def __init__(
        self,
        message: str,
        *,
        critical_failures: int | None = None,
        score: float | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if critical_failures is not None:
            ctx["critical_failures"] = critical_failures
        if score is not None:
            ctx["score"] = round(score, 1)
        super().__init__(message, context=ctx, cause=cause)
