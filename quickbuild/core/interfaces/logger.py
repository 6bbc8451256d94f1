"""
Logger interface for internal diagnostic output.

Separate from IPresenter which handles user-facing output.
Use ILogger for debug/diagnostic messages and toolchain transcripts that
belong in the log file.
"""

from abc import ABC, abstractmethod
from typing import Any


class ILogger(ABC):
    """
    Interface for internal logging.

    Used for diagnostic output - NOT for user-facing messages.
    User-facing output should use IPresenter.
    """

    @abstractmethod
    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log a debug-level message."""

    @abstractmethod
    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log an info-level message."""

    @abstractmethod
    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log a warning-level message."""

    @abstractmethod
    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log an error-level message."""

    @property
    def log_file(self) -> str | None:
        """Path of the log file, if file logging is enabled."""
        return None
