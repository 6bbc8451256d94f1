"""
Unit tests for presenters and formatting helpers.

Tests verify:
- Quiet mode suppresses informational output but keeps errors and results
- Error reports show the kind, the log excerpt and the remediation tips
- Gate reports render a machine-readable JSON document
"""

import io
import json
from contextlib import redirect_stderr, redirect_stdout

from quickbuild.core.exceptions import CompileFailed
from quickbuild.core.models.run import RunOutcomeKind
from quickbuild.presenters import ConsolePresenter, ErrorPresenter
from quickbuild.presenters.formatting import (
    format_duration,
    format_exit_code,
    format_size,
    label,
    truncate_string,
)
from quickbuild.presenters.quality_report import GateReportPresenter, render_gate_report
from quickbuild.services.quality import QualityGateEvaluator


class TestConsolePresenter:
    """Tests for ConsolePresenter output routing."""

    def test_quiet_suppresses_informational_output(self, capsys):
        out = io.StringIO()
        presenter = ConsolePresenter(file=out, quiet=True)

        presenter.print("info")
        presenter.print_section("Section")
        presenter.print_key_value("Key", "value")
        presenter.print_table(["a"], [["1"]])
        presenter.print_success("done")
        presenter.print_warning("careful")

        assert out.getvalue() == "done\n"
        assert "Warning: careful" in capsys.readouterr().err

    def test_errors_go_to_stderr(self, capsys):
        presenter = ConsolePresenter(file=io.StringIO())

        presenter.print_error("broken")
        presenter.print_error_detail("  detail")

        err = capsys.readouterr().err
        assert "Error: broken" in err
        assert "  detail" in err

    def test_table_layout(self):
        out = io.StringIO()

        ConsolePresenter(file=out).print_table(["Stage", "Outcome"], [["compile", "completed"]])

        lines = out.getvalue().splitlines()
        assert lines[0].startswith("Stage")
        assert set(lines[1]) == {"-"}
        assert lines[2].split() == ["compile", "completed"]

    def test_follows_replaced_streams(self):
        """Output goes to whatever sys.stdout and sys.stderr are at print time."""
        presenter = ConsolePresenter()
        out, err = io.StringIO(), io.StringIO()

        with redirect_stdout(out), redirect_stderr(err):
            presenter.print("second invocation")
            presenter.print_warning("careful")

        assert out.getvalue() == "second invocation\n"
        assert err.getvalue() == "Warning: careful\n"


class TestErrorPresenter:
    """Tests for classified failure output."""

    def test_kind_excerpt_and_tips(self, capsys):
        error = CompileFailed(
            "compilation exited with code 2",
            exit_code=2,
            excerpt="main.cpp:3: error: expected ';'\n",
        )

        ErrorPresenter(ConsolePresenter(file=io.StringIO(), quiet=True)).show(
            error, log_file="/tmp/quickbuild.log"
        )

        err = capsys.readouterr().err
        assert "[CompileFailed] compilation exited with code 2 (exit_code=2)" in err
        assert "  main.cpp:3: error: expected ';'" in err
        assert "  - Check for syntax errors" in err
        assert "Full log: /tmp/quickbuild.log" in err


class TestGateReport:
    """Tests for gate report rendering."""

    def test_render_json(self):
        report = QualityGateEvaluator().evaluate({"build_time": 10})

        data = json.loads(render_gate_report(report))

        assert data["decision"] == "fail"
        assert data["total"] == 8
        assert data["critical_failures"] == 5
        assert {r["name"] for r in data["results"]} >= {"build_time", "unit_test_coverage"}

    def test_failed_gate_message(self):
        out = io.StringIO()
        report = QualityGateEvaluator().evaluate({})

        GateReportPresenter(ConsolePresenter(file=out)).show(report)

        assert "unit_test_coverage" in out.getvalue()


class TestFormatting:
    def test_label_of_enum_member(self):
        assert label(RunOutcomeKind.TIMEOUT_REACHED) == "timeout reached"

    def test_label_of_stored_value(self):
        assert label("built-in-fallback") == "built in fallback"

    def test_exit_codes(self):
        assert format_exit_code(None) == "?"
        assert format_exit_code(3) == "3 (failure)"
        assert format_exit_code(-15) == "-15 (killed by signal 15)"

    def test_truncate(self):
        assert truncate_string("abcdef", max_len=5) == "ab..."
        assert truncate_string("abc", max_len=5) == "abc"

    def test_duration(self):
        assert format_duration(None) == "?"
        assert format_duration(4.5) == "4.5s"
        assert format_duration(125) == "2m 5s"
        assert format_duration(3725) == "1h 2m"

    def test_size(self):
        assert format_size(500) == "500B"
        assert format_size(2048) == "2.0KB"
        assert format_size(1536 * 1024) == "1.5MB"
