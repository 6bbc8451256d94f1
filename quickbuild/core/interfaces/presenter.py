"""
Presenter interface definitions for user-facing output.
"""

from abc import ABC, abstractmethod
from typing import Any


class IPresenter(ABC):
    """
    Interface for output presentation.

    Implementations handle formatting and displaying output
    to the user.
    """

    @abstractmethod
    def print(self, message: str) -> None:
        """Print a message to output."""

    @abstractmethod
    def print_error(self, message: str) -> None:
        """Print an error message."""

    @abstractmethod
    def print_error_detail(self, message: str) -> None:
        """Print supplementary error output (log excerpts, tips)."""

    @abstractmethod
    def print_warning(self, message: str) -> None:
        """Print a warning message."""

    @abstractmethod
    def print_success(self, message: str) -> None:
        """Print a success message."""

    @abstractmethod
    def print_table(self, headers: list[str], rows: list[list[str]]) -> None:
        """
        Print a table.

        Args:
            headers: Column headers
            rows: Table rows (list of row values)
        """

    @abstractmethod
    def print_key_value(self, key: str, value: Any, indent: int = 0) -> None:
        """Print a key-value pair."""

    @abstractmethod
    def print_section(self, title: str) -> None:
        """Print a section header."""
