"""
Integration tests for the help, clean, gate and test commands.

Tests verify:
- Help output and usage errors (which exit 1, never 2)
- clean removes build output and recorded metrics
- gate exit codes for pass, warn and fail decisions, and the JSON report
- test lists scenarios and runs the build-only scenario without a container runtime
"""

import json

import pytest

from quickbuild import __version__
from quickbuild.cli import cli

ALL_GOOD = {
    "build_success_rate": 100,
    "build_time": 120,
    "integration_test_pass_rate": 100,
    "validation_errors": 0,
    "validation_warnings": 2,
    "unit_test_coverage": 97,
    "critical_vulnerabilities": 0,
    "documentation_coverage": 100,
}


class TestHelpAndUsage:
    """Tests for help output and argument errors."""

    def test_no_command_prints_help(self, runner):
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "Exit codes:" in result.output

    def test_help_command(self, runner):
        result = runner.invoke(cli, ["help"])

        assert result.exit_code == 0
        assert "quickbuild validate [FILE]" in result.output

    def test_help_for_command(self, runner):
        result = runner.invoke(cli, ["help", "build"])

        assert result.exit_code == 0
        assert "--skip-deps" in result.output

    def test_help_for_unknown_command(self, runner):
        result = runner.invoke(cli, ["help", "nope"])

        assert result.exit_code == 1
        assert "No such command 'nope'" in result.output

    def test_unknown_command_exits_1(self, runner):
        """Usage errors must not be confused with validator warnings (exit 2)."""
        result = runner.invoke(cli, ["deploy"])

        assert result.exit_code == 1

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_broken_config_exits_1(self, runner, workspace):
        workspace.config_file.write_text("[run\n")

        result = runner.invoke(cli, ["--config", str(workspace.config_file), "build"])

        assert result.exit_code == 1
        assert "[ConfigFileError]" in result.output


class TestCleanCommand:
    """Tests for 'quickbuild clean'."""

    def test_clean_after_build(self, quickbuild, workspace, valid_source):
        workspace.write_source(valid_source)
        quickbuild("build")
        assert workspace.artifact.exists()

        result = quickbuild("clean")

        assert result.exit_code == 0, f"Clean failed: {result.output}"
        assert "Workspace cleaned" in result.output
        assert not workspace.artifact.exists()
        assert not (workspace.root / ".quickbuild" / "build-stamp.json").exists()
        assert not (workspace.root / ".quickbuild" / "metrics.json").exists()

    def test_clean_forces_next_build(self, quickbuild, workspace, valid_source):
        workspace.write_source(valid_source)
        quickbuild("build")
        quickbuild("clean")

        result = quickbuild("build")

        assert result.exit_code == 0, f"Build failed: {result.output}"
        assert workspace.count("compile") == 2

    def test_nothing_to_clean(self, quickbuild):
        result = quickbuild("clean")

        assert result.exit_code == 0
        assert "Nothing to clean" in result.output


class TestGateCommand:
    """Tests for 'quickbuild gate'."""

    @pytest.fixture
    def observed(self, workspace):
        def write(values: dict) -> str:
            path = workspace.base / "observed.json"
            path.write_text(json.dumps(values))
            return str(path)

        return write

    def test_pass(self, quickbuild, observed):
        result = quickbuild("gate", "--observed", observed(ALL_GOOD))

        assert result.exit_code == 0, f"Gate failed: {result.output}"
        assert "QUALITY GATES PASSED" in result.output

    def test_low_score_only_warns(self, quickbuild, observed):
        values = {**ALL_GOOD, "validation_warnings": 9, "documentation_coverage": 50}

        result = quickbuild("gate", "--observed", observed(values))

        assert result.exit_code == 0, f"Gate failed: {result.output}"
        assert "Quality score below minimum threshold (85%)" in result.output

    def test_strict_fails_on_warning(self, quickbuild, observed):
        values = {**ALL_GOOD, "validation_warnings": 9}

        result = quickbuild("gate", "--strict", "--observed", observed(values))

        assert result.exit_code == 1
        assert "[QualityGateCriticalFailure]" in result.output

    def test_missing_metrics_fail(self, quickbuild):
        result = quickbuild("gate")

        assert result.exit_code == 1
        assert "QUALITY GATES FAILED" in result.output

    def test_recorded_metrics_are_used(self, quickbuild, workspace, observed, valid_source):
        """Values recorded by build and validate feed the gate."""
        workspace.write_source(valid_source)
        quickbuild("build")
        report = workspace.base / "gate.json"

        quickbuild(
            "gate",
            "--observed",
            observed({"unit_test_coverage": 97, "critical_vulnerabilities": 0}),
            "--report",
            str(report),
        )

        data = json.loads(report.read_text())
        results = {r["name"]: r for r in data["results"]}
        assert results["build_success_rate"]["observed"] == 100
        assert results["unit_test_coverage"]["observed"] == 97

    def test_report_file(self, quickbuild, workspace, observed):
        report = workspace.base / "reports" / "gate.json"

        result = quickbuild("gate", "--observed", observed(ALL_GOOD), "--report", str(report))

        assert result.exit_code == 0, f"Gate failed: {result.output}"
        assert f"Report written to {report}" in result.output
        assert json.loads(report.read_text())["decision"] == "pass"

    def test_custom_metric_definitions(self, quickbuild, workspace, observed):
        metrics = workspace.base / "gates.toml"
        metrics.write_text('[[metric]]\nname = "latency"\nthreshold = 50\ncomparison = "at_most"\n')

        result = quickbuild("gate", "--metrics", str(metrics), "--observed", observed({"latency": 80}))

        assert result.exit_code == 1
        assert "latency" in result.output


class TestTestCommand:
    """Tests for 'quickbuild test' paths that need no container runtime."""

    def test_list(self, quickbuild):
        result = quickbuild("test", "--list")

        assert result.exit_code == 0
        for name in ("build-validation", "full-suite", "signal-validation"):
            assert name in result.output

    def test_unknown_scenario(self, quickbuild):
        result = quickbuild("test", "nope")

        assert result.exit_code == 1
        assert "[UnknownScenario]" in result.output

    def test_build_validation(self, quickbuild, workspace, valid_source):
        workspace.write_source(valid_source)

        result = quickbuild("test", "build-validation")

        assert result.exit_code == 0, f"Scenario failed: {result.output}"
        assert "Scenario build-validation passed" in result.output
        assert "1 scenario(s) passed" in result.output
        metrics = json.loads((workspace.root / ".quickbuild" / "metrics.json").read_text())
        assert metrics["integration_test_pass_rate"] == 100

    def test_build_validation_failure(self, quickbuild, workspace, valid_source):
        workspace.write_source(valid_source)
        workspace.set_step("compile", "error: boom\n", exit_code=1)

        result = quickbuild("test", "build-validation")

        assert result.exit_code == 1
        assert "[ScenarioError]" in result.output

    def test_suite_with_piped_source(self, quickbuild, workspace, valid_source):
        """Every scenario of a suite builds from the same piped source."""
        scenarios = workspace.base / "scenarios.toml"
        scenarios.write_text(
            '[[scenario]]\nname = "first-build"\nrequires_environment = false\n\n'
            '[[scenario]]\nname = "second-build"\nrequires_environment = false\n\n'
            '[[scenario]]\nname = "builds"\nincludes = ["first-build", "second-build"]\n'
        )
        workspace.write_config(read_stdin=True)

        result = quickbuild("test", "--scenario-file", str(scenarios), "builds", input=valid_source)

        assert result.exit_code == 0, f"Suite failed: {result.output}"
        assert "2 scenario(s) passed" in result.output
        assert "NoInputProvided" not in result.output
        assert workspace.count("compile") == 1
