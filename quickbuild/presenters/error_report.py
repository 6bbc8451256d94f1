"""
Presenter for classified pipeline failures.
"""

from __future__ import annotations

from ..core.exceptions import QuickbuildException
from ..core.interfaces.presenter import IPresenter


class ErrorPresenter:
    """Prints the error kind, a bounded log excerpt and the remediation tips."""

    def __init__(self, presenter: IPresenter) -> None:
        self._out = presenter

    def show(self, error: QuickbuildException, log_file: str | None = None) -> None:
        self._out.print_error(f"[{error.kind}] {error}")
        if error.excerpt:
            self._out.print_error_detail("")
            self._out.print_error_detail("Log excerpt:")
            for line in error.excerpt.splitlines():
                self._out.print_error_detail(f"  {line}")
        if error.tips:
            self._out.print_error_detail("")
            self._out.print_error_detail("Tips:")
            for tip in error.tips:
                self._out.print_error_detail(f"  - {tip}")
        if log_file:
            self._out.print_error_detail("")
            self._out.print_error_detail(f"Full log: {log_file}")
