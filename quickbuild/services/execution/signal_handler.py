"""
Signal handling for interruptible scenario runs.

The first SIGINT or SIGTERM raises OperatorInterrupt in the main thread so
that context-managed test environments tear down. Further signals during
teardown are counted and logged but never abort it.
"""

from __future__ import annotations

import signal
from collections.abc import Callable

from ...core.di import LazyService
from ...core.exceptions import OperatorInterrupt
from ...core.interfaces.logger import ILogger
from ..logging import NullLogger

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ProcessSignalHandler:
    """
    Manages SIGINT/SIGTERM while a scenario owns external resources.

    Usable as a context manager; the original handlers are restored on exit.
    """

    logger = LazyService(ILogger, NullLogger)

    def __init__(
        self,
        on_first_interrupt: Callable[[], None] | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self._interrupted = False
        self._interrupt_count = 0
        self._on_first_interrupt = on_first_interrupt
        self._original_handlers: dict[int, object] = {}
        self.logger = logger

    def install(self) -> None:
        """Install signal handlers."""
        for sig in HANDLED_SIGNALS:
            self._original_handlers[sig] = signal.signal(sig, self._handle_signal)
        self.logger.debug("Installed handlers for SIGINT and SIGTERM")

    def restore(self) -> None:
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)  # type: ignore[arg-type]
        if self._original_handlers:
            self.logger.debug("Restored original signal handlers")
        self._original_handlers = {}

    def is_interrupted(self) -> bool:
        return self._interrupted

    def get_interrupt_count(self) -> int:
        return self._interrupt_count

    def __enter__(self) -> ProcessSignalHandler:
        self.install()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()

    def _handle_signal(self, signum: int, frame) -> None:
        self._interrupt_count += 1
        self._interrupted = True
        name = signal.Signals(signum).name
        self.logger.debug("%s received: interrupt_count=%d", name, self._interrupt_count)

        if self._interrupt_count == 1:
            if self._on_first_interrupt:
                self._on_first_interrupt()
            raise OperatorInterrupt(f"Received {name}, cleaning up test resources")

        self.logger.warning("%s received again, teardown still in progress", name)
