"""
Logger implementation for quickbuild diagnostics and toolchain transcripts.

Wraps stdlib logging with configurable handlers for console (stderr) and a
rotating log file at a fixed temporary location.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, ClassVar

from ..core.interfaces.logger import ILogger

DEFAULT_LOG_FILE = "/tmp/quickbuild.log"

class QuickbuildLogger(ILogger):
    """
    Logger implementation using stdlib logging.

    Supports dual output to stderr and the build log file.
    """

    MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
    BACKUP_COUNT = 3

    LEVEL_MAP: ClassVar[dict[str, int]] = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    def __init__(
        self,
        name: str = "quickbuild",
        level: str = "info",
        console_enabled: bool = False,
        file_enabled: bool = True,
        file_path: str | Path = DEFAULT_LOG_FILE,
    ) -> None:
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Initial log level (debug, info, warning, error)
            console_enabled: Enable stderr output
            file_enabled: Enable file output
            file_path: Log file location
        """
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)  # Let handlers filter
        self._logger.handlers.clear()
        self._logger.propagate = False

        self._file_handler: logging.Handler | None = None
        self._file_path = Path(file_path)

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        log_level = self.LEVEL_MAP.get(level.lower(), logging.INFO)

        if console_enabled:
            console = logging.StreamHandler(sys.stderr)
            console.setLevel(log_level)
            console.setFormatter(formatter)
            self._logger.addHandler(console)

        if file_enabled:
            self._setup_file_handler(formatter, log_level)

    def _setup_file_handler(self, formatter: logging.Formatter, level: int) -> None:
        """Set up rotating file handler."""
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                self._file_path,
                maxBytes=self.MAX_FILE_SIZE,
                backupCount=self.BACKUP_COUNT,
            )
        except OSError as e:
            print(f"Warning: cannot write log file {self._file_path}: {e}", file=sys.stderr)
            return
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        self._logger.addHandler(file_handler)
        self._file_handler = file_handler

    @property
    def log_file(self) -> str | None:
        return str(self._file_path) if self._file_handler else None

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log a debug-level message."""
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log an info-level message."""
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log a warning-level message."""
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log an error-level message."""
        self._logger.error(message, *args, **kwargs)


class NullLogger(ILogger):
    """No-op logger for testing or when logging is disabled."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        """No-op."""

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        """No-op."""

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        """No-op."""

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        """No-op."""

