"""Integration testing against an ephemeral container environment."""

from .docker import DockerCli
from .environment import EnvironmentNames, TestEnvironment
from .harness import IntegrationTestHarness, evaluate_assertions
from .scenarios import DEFAULT_SCENARIO, ScenarioCatalog, builtin_scenarios

__all__ = [
    "DEFAULT_SCENARIO",
    "DockerCli",
    "EnvironmentNames",
    "IntegrationTestHarness",
    "ScenarioCatalog",
    "TestEnvironment",
    "builtin_scenarios",
    "evaluate_assertions",
]
