"""
Unit tests for the build pipeline, running the fake toolchain end to end.

Tests verify:
- A first build runs every stage and records a build stamp
- Rebuilding identical input skips the toolchain
- Any input change rebuilds
- Failing stages short-circuit and are recorded in the metrics store
- A stale artifact after a "successful" compile fails the build
"""

import io
import json

import pytest

from quickbuild.core.exceptions import (
    CompileFailed,
    InvalidSource,
    StaleArtifact,
)
from quickbuild.core.models.build import StepOutcome
from quickbuild.core.models.source import SourceOrigin
from quickbuild.services.pipeline import BuildPipeline


class TestBuildPipeline:
    """Tests for BuildPipeline.build."""

    def test_first_build(self, workspace, make_config, valid_source):
        workspace.write_source(valid_source)

        summary = BuildPipeline(make_config()).build()

        assert summary.rebuilt
        assert summary.source_origin == SourceOrigin.MOUNTED_FILE
        assert summary.artifact.is_executable
        assert workspace.installed_source.read_text() == valid_source
        assert workspace.count("compile") == 1
        assert make_config().stamp_file.is_file()

    def test_second_build_is_skipped(self, workspace, make_config, valid_source):
        """Identical input reuses the verified artifact without compiling."""
        workspace.write_source(valid_source)
        BuildPipeline(make_config()).build()

        summary = BuildPipeline(make_config()).build()

        assert not summary.rebuilt
        assert summary.rebuild_reason == "input unchanged"
        assert workspace.count("compile") == 1
        assert workspace.count("install") == 1
        assert all(s.outcome == StepOutcome.SKIPPED for s in summary.result.steps)

    def test_reuse_ignores_freshness_window(self, workspace, make_config, valid_source):
        workspace.write_source(valid_source)
        BuildPipeline(make_config()).build()
        workspace.age_artifact(3600)

        summary = BuildPipeline(make_config()).build()

        assert not summary.rebuilt

    def test_changed_input_rebuilds(self, workspace, make_config, valid_source):
        workspace.write_source(valid_source)
        BuildPipeline(make_config()).build()
        workspace.write_source(valid_source + "// v2\n")

        summary = BuildPipeline(make_config()).build()

        assert summary.rebuilt
        assert summary.rebuild_reason == "input changed"
        assert workspace.count("compile") == 2

    def test_invalid_source_stops_before_toolchain(self, workspace, make_config):
        workspace.write_source("int main() { return 0; }\n")

        with pytest.raises(InvalidSource):
            BuildPipeline(make_config()).build()

        assert workspace.count("install") == 0
        assert not workspace.installed_source.exists()

    def test_compile_failure_recorded(self, workspace, make_config, valid_source):
        workspace.write_source(valid_source)
        workspace.set_step("compile", output="main.cpp:3: error: expected ';'\n", exit_code=2)
        config = make_config()

        with pytest.raises(CompileFailed) as exc_info:
            BuildPipeline(config).build()

        assert "expected ';'" in exc_info.value.excerpt
        metrics = json.loads(config.metrics_file.read_text())
        assert metrics["build_success_rate"] == 0.0

    def test_failed_build_is_not_reused(self, workspace, make_config, valid_source):
        """After a failed rebuild the old artifact is never reused for the same input."""
        workspace.write_source(valid_source)
        BuildPipeline(make_config()).build()
        workspace.write_source(valid_source + "// broken\n")
        workspace.set_step("compile", output="fatal error: x.h\n", exit_code=0)

        with pytest.raises(CompileFailed):
            BuildPipeline(make_config()).build()

        workspace.set_step("compile", output="ok\n", exit_code=0)
        summary = BuildPipeline(make_config()).build()

        assert summary.rebuilt
        assert workspace.count("compile") == 3

    def test_piped_source_read_once(self, workspace, make_config, valid_source):
        """Later builds of the same pipeline reuse the source already read from stdin."""
        workspace.write_config(read_stdin=True)
        pipeline = BuildPipeline(make_config(), stdin=io.BytesIO(valid_source.encode()))

        first = pipeline.build()
        second = pipeline.build()

        assert first.source_origin == SourceOrigin.PIPED_STREAM
        assert second.source_origin == SourceOrigin.PIPED_STREAM
        assert not second.rebuilt
        assert workspace.count("compile") == 1

    def test_stale_artifact_fails(self, workspace, make_config, valid_source):
        """Compilation that succeeds without refreshing the executable is caught."""
        workspace.write_source(valid_source)
        workspace.age_artifact(3600)
        workspace.stop_producing_artifact()

        with pytest.raises(StaleArtifact):
            BuildPipeline(make_config()).build()

    def test_success_metrics_recorded(self, workspace, make_config, valid_source):
        workspace.write_source(valid_source)
        config = make_config()

        BuildPipeline(config).build()

        metrics = json.loads(config.metrics_file.read_text())
        assert metrics["build_success_rate"] == 100.0
        assert metrics["build_time"] >= 0
