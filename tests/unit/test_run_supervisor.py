"""
Unit tests for run supervision.

Tests verify:
- Exit classification: natural exit, timeout reached, crash
- The hard timeout stops a long-running process within the grace bound
- Output is captured, streamed and analyzed
- Unreachable services are disabled through the child environment
"""

import os
import stat
import time
from unittest.mock import MagicMock

import pytest

from quickbuild.core.exceptions import RunCrashed
from quickbuild.core.models.run import RunOutcomeKind, ServiceAvailability
from quickbuild.services.execution import RunSupervisor, ServiceProber, classify_exit


def _script(path, body: str):
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


class TestClassifyExit:
    """Tests for the three-way exit classification."""

    def test_zero_is_natural_exit(self):
        assert classify_exit(0, timed_out=False) == RunOutcomeKind.NATURAL_EXIT

    def test_timed_out_wins(self):
        assert classify_exit(-15, timed_out=True) == RunOutcomeKind.TIMEOUT_REACHED

    def test_timeout_utility_exit_code(self):
        """Exit code 124 from a timeout wrapper counts as reaching the timeout."""
        assert classify_exit(124, timed_out=False) == RunOutcomeKind.TIMEOUT_REACHED

    def test_other_codes_crash(self):
        assert classify_exit(1, timed_out=False) == RunOutcomeKind.CRASHED
        assert classify_exit(-11, timed_out=False) == RunOutcomeKind.CRASHED


class TestRunSupervisor:
    """Tests for RunSupervisor.run with real processes."""

    @pytest.fixture
    def prober(self):
        prober = MagicMock(spec=ServiceProber)
        prober.probe.return_value = (ServiceAvailability(), {})
        return prober

    def test_natural_exit(self, tmp_path, make_config, prober):
        app = _script(tmp_path / "app", 'echo "[INFO] VehicleApp started"\necho "Subscribed to Vehicle.Speed"\n')
        streamed = []

        outcome = RunSupervisor(make_config(), prober=prober, on_output=streamed.append).run(app)

        assert outcome.kind == RunOutcomeKind.NATURAL_EXIT
        assert outcome.succeeded
        assert outcome.exit_code == 0
        assert "VehicleApp started" in outcome.log
        assert streamed == ["[INFO] VehicleApp started", "Subscribed to Vehicle.Speed"]
        assert outcome.summary.count("initialization") == 1
        assert outcome.summary.count("subscription") == 1

    def test_crash_is_not_success(self, tmp_path, make_config, prober):
        app = _script(tmp_path / "app", 'echo "ERROR: cannot connect"\nexit 3\n')

        outcome = RunSupervisor(make_config(), prober=prober).run(app)

        assert outcome.kind == RunOutcomeKind.CRASHED
        assert not outcome.succeeded
        assert outcome.exit_code == 3
        assert outcome.summary.error_lines == ["ERROR: cannot connect"]

    def test_timeout_stops_process(self, tmp_path, make_config, prober):
        """A process outliving the timeout is stopped and counted as success."""
        app = _script(tmp_path / "app", 'echo "running"\nsleep 30\n')
        config = make_config(timeout=1)

        start = time.monotonic()
        outcome = RunSupervisor(config, prober=prober).run(app)
        elapsed = time.monotonic() - start

        assert outcome.kind == RunOutcomeKind.TIMEOUT_REACHED
        assert outcome.succeeded
        assert elapsed < config.run_timeout + config.grace_period + 2
        assert "running" in outcome.log

    def test_sigterm_ignored_then_killed(self, tmp_path, make_config, prober):
        app = _script(tmp_path / "app", "trap '' TERM\nsleep 30\n")
        config = make_config(timeout=1)

        start = time.monotonic()
        outcome = RunSupervisor(config, prober=prober).run(app)

        assert outcome.kind == RunOutcomeKind.TIMEOUT_REACHED
        assert time.monotonic() - start < config.run_timeout + config.grace_period + 2

    def test_unavailable_services_disabled_in_env(self, tmp_path, make_config, prober):
        app = _script(tmp_path / "app", 'echo "mqtt=$SDV_MQTT_ADDRESS"\n')
        prober.probe.return_value = (ServiceAvailability(), {"SDV_MQTT_ADDRESS": "disabled"})

        outcome = RunSupervisor(make_config(), prober=prober).run(app)

        assert "mqtt=disabled" in outcome.log

    def test_unlaunchable_artifact(self, tmp_path, make_config, prober):
        app = tmp_path / "not-executable"
        app.write_text("")
        os.chmod(app, 0o644)

        with pytest.raises(RunCrashed):
            RunSupervisor(make_config(), prober=prober).run(app)
