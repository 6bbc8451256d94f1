"""
Core infrastructure for quickbuild.

This module provides:
- ServiceContainer: DI container using dependency-injector
- Application bootstrap for initialization
- Interface definitions for logger and presenter
- Custom exception hierarchy
"""

from .bootstrap import bootstrap, is_initialized, reset
from .container import ServiceContainer, get_container, resolve, try_resolve
from .exceptions import (
    ArtifactMissingDespiteSuccess,
    CodeGenerationFailed,
    CompileFailed,
    ConfigFileError,
    ConfigValidationError,
    DependencyInstallFailed,
    InvalidSource,
    InvalidSpecificationURL,
    NoInputProvided,
    QualityGateCriticalFailure,
    QuickbuildException,
    RunCrashed,
    ScenarioAssertionFailed,
    StaleArtifact,
    WorkspaceMisconfigured,
)

__all__ = [
    "ArtifactMissingDespiteSuccess",
    "CodeGenerationFailed",
    "CompileFailed",
    "ConfigFileError",
    "ConfigValidationError",
    "DependencyInstallFailed",
    "InvalidSource",
    "InvalidSpecificationURL",
    "NoInputProvided",
    "QualityGateCriticalFailure",
    "QuickbuildException",
    "RunCrashed",
    "ScenarioAssertionFailed",
    "ServiceContainer",
    "StaleArtifact",
    "WorkspaceMisconfigured",
    "bootstrap",
    "get_container",
    "is_initialized",
    "reset",
    "resolve",
    "try_resolve",
]
