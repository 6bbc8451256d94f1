"""
Console presenter for terminal output.

Implements human-readable output formatting for the CLI.
"""

import sys
from typing import Any

from ..core.interfaces.presenter import IPresenter


class ConsolePresenter(IPresenter):
    """
    Console output presenter.

    Formats output for human-readable terminal display. In quiet mode only
    errors, warnings and success lines are shown.
    """

    def __init__(self, use_color: bool = True, file=None, quiet: bool = False) -> None:
        """
        Initialize console presenter.

        Args:
            use_color: Whether to use ANSI color codes
            file: Output file (defaults to the current sys.stdout)
            quiet: Suppress non-essential output
        """
        self._file = file
        self._color = use_color
        self._quiet = quiet

    @property
    def quiet(self) -> bool:
        return self._quiet

    # looked up on every print so a replaced sys.stdout is honoured
    @property
    def _out(self):
        return self._file or sys.stdout

    @property
    def _err(self):
        return sys.stderr

    @property
    def _use_color(self) -> bool:
        return self._color and self._out.isatty()

    def print(self, message: str) -> None:
        """Print a message to output."""
        if self._quiet:
            return
        print(message, file=self._out)

    def print_error(self, message: str) -> None:
        """Print an error message to stderr."""
        if self._use_color:
            print(f"\033[91mError: {message}\033[0m", file=self._err)
        else:
            print(f"Error: {message}", file=self._err)

    def print_error_detail(self, message: str) -> None:
        """Print supplementary error output to stderr; shown even in quiet mode."""
        print(message, file=self._err)

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        if self._use_color:
            print(f"\033[93mWarning: {message}\033[0m", file=self._err)
        else:
            print(f"Warning: {message}", file=self._err)

    def print_success(self, message: str) -> None:
        """Print a success message."""
        if self._use_color:
            print(f"\033[92m{message}\033[0m", file=self._out)
        else:
            print(message, file=self._out)

    def print_table(self, headers: list[str], rows: list[list[str]]) -> None:
        """
        Print a formatted table.

        Args:
            headers: Column headers
            rows: Table rows
        """
        if not rows or self._quiet:
            return

        # Calculate column widths
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                if i < len(widths):
                    widths[i] = max(widths[i], len(str(cell)))

        header_line = "  ".join(str(h).ljust(widths[i]) for i, h in enumerate(headers))
        if self._use_color:
            print(f"\033[1m{header_line}\033[0m", file=self._out)
        else:
            print(header_line, file=self._out)

        print("-" * len(header_line), file=self._out)

        for row in rows:
            row_line = "  ".join(
                str(cell).ljust(widths[i]) if i < len(widths) else str(cell)
                for i, cell in enumerate(row)
            )
            print(row_line, file=self._out)

    def print_key_value(self, key: str, value: Any, indent: int = 0) -> None:
        """Print a key-value pair."""
        if self._quiet:
            return
        prefix = "  " * indent
        if self._use_color:
            print(f"{prefix}\033[1m{key}:\033[0m {value}", file=self._out)
        else:
            print(f"{prefix}{key}: {value}", file=self._out)

    def print_section(self, title: str) -> None:
        """Print a section header."""
        if self._quiet:
            return
        if self._use_color:
            print(f"\n\033[1m{title}\033[0m", file=self._out)
        else:
            print(f"\n{title}", file=self._out)
        print("-" * len(title), file=self._out)
