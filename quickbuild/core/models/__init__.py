"""
Pydantic models for quickbuild.

This package provides typed, validated models for all quickbuild data structures.
All models use Pydantic v2; configuration sections use relaxed validation.
"""

from .base import ImmutableModel, QuickbuildBaseModel
from .build import (
    Artifact,
    BuildResult,
    BuildStamp,
    BuildStatus,
    BuildSummary,
    CommandResult,
    RebuildDecision,
    SpecSource,
    SpecSourceKind,
    StepOutcome,
    StepResult,
)
from .config import (
    BuildConfig,
    ConfigBaseModel,
    GateConfig,
    InputsConfig,
    LoggingConfig,
    RunConfig,
    ServiceEndpointConfig,
    ServicesConfig,
    TestingConfig,
    WorkspaceConfig,
)
from .gate import (
    Comparison,
    GateDecision,
    MetricResult,
    MetricStatus,
    QualityGateMetric,
    QualityGateReport,
)
from .pipeline import HarnessSettings, InputChannels, PipelineConfig, ServiceEndpoint
from .run import OutputSummary, RunOutcome, RunOutcomeKind, ServiceAvailability, ServiceStatus
from .scenario import (
    AssertionResult,
    LogAssertion,
    ScenarioReport,
    ScenarioStage,
    SignalInjection,
    TestScenario,
)
from .source import SourceInput, SourceOrigin
from .validation import Severity, ValidationFinding, ValidationReport, Verdict

__all__ = [
    "Artifact",
    "AssertionResult",
    "BuildConfig",
    "BuildResult",
    "BuildStamp",
    "BuildStatus",
    "BuildSummary",
    "CommandResult",
    "Comparison",
    "ConfigBaseModel",
    "GateConfig",
    "GateDecision",
    "HarnessSettings",
    "ImmutableModel",
    "InputChannels",
    "InputsConfig",
    "LogAssertion",
    "LoggingConfig",
    "MetricResult",
    "MetricStatus",
    "OutputSummary",
    "PipelineConfig",
    "QualityGateMetric",
    "QualityGateReport",
    "QuickbuildBaseModel",
    "RebuildDecision",
    "RunConfig",
    "RunOutcome",
    "RunOutcomeKind",
    "ScenarioReport",
    "ScenarioStage",
    "ServiceAvailability",
    "ServiceEndpoint",
    "ServiceEndpointConfig",
    "ServiceStatus",
    "ServicesConfig",
    "Severity",
    "SignalInjection",
    "SourceInput",
    "SpecSource",
    "SpecSourceKind",
    "SourceOrigin",
    "StepOutcome",
    "StepResult",
    "TestScenario",
    "TestingConfig",
    "ValidationFinding",
    "ValidationReport",
    "Verdict",
    "WorkspaceConfig",
]
