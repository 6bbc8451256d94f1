"""Integration test fixtures: drive the real CLI group against a fake workspace."""

import sys
from collections.abc import Callable

import pytest
from click.testing import CliRunner, Result

from quickbuild.cli import cli
from quickbuild.core.bootstrap import reset


@pytest.fixture
def python_exe() -> str:
    """Return the absolute path to the Python executable."""
    return sys.executable


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def quickbuild(runner, workspace) -> Callable[..., Result]:
    """Invoke ``quickbuild --config <workspace config> ARGS``, one fresh process state per call."""

    def invoke(*args: str, input: str | bytes | None = None) -> Result:
        reset()
        return runner.invoke(cli, ["--config", str(workspace.config_file), *args], input=input)

    return invoke
