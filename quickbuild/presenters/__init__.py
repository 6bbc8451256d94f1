"""
Output presenters for quickbuild CLI.
"""

from .console import ConsolePresenter
from .error_report import ErrorPresenter
from .quality_report import GateReportPresenter, ValidationReportPresenter, render_gate_report
from .run_report import BuildReportPresenter, RunReportPresenter
from .scenario_report import ScenarioReportPresenter

__all__ = [
    "BuildReportPresenter",
    "ConsolePresenter",
    "ErrorPresenter",
    "GateReportPresenter",
    "RunReportPresenter",
    "ScenarioReportPresenter",
    "ValidationReportPresenter",
    "render_gate_report",
]
