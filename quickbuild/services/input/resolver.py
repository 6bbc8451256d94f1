"""
Input resolution.

Selects exactly one application source from the configured input channels
by fixed priority, checks its minimal structure and installs it into the
workspace.
"""

from __future__ import annotations

import io
import os
import re
import stat
from importlib import resources
from pathlib import Path
from typing import IO

from ...core.di import LazyService
from ...core.exceptions import InvalidSource, NoInputProvided
from ...core.interfaces.logger import ILogger
from ...core.models.pipeline import PipelineConfig
from ...core.models.source import SourceInput, SourceOrigin
from ..logging import NullLogger

TEMPLATE_PACKAGE = "quickbuild.templates"
TEMPLATE_NAME = "VehicleApp.cpp"

APP_CLASS_PATTERN = re.compile(r"class\s+\w+[^{;]*?:\s*(?:public\s+)?(?:[\w]+::)*VehicleApp\b")
APP_HEADER_PATTERN = re.compile(r"#include\s*[<\"][^>\"]*VehicleApp\.h[>\"]")


def is_piped(stream: IO | None) -> bool:
    """True when ``stream`` is a pipe or redirected file rather than a terminal."""
    if stream is None:
        return False
    try:
        mode = os.fstat(stream.fileno()).st_mode
    except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
        isatty = getattr(stream, "isatty", None)
        return not (isatty() if isatty else True)
    return stat.S_ISFIFO(mode) or stat.S_ISREG(mode)


def read_stream(stream: IO) -> bytes:
    data = getattr(stream, "buffer", stream).read()
    if isinstance(data, str):
        return data.encode("utf-8")
    return data


def load_template() -> bytes:
    """Read the built-in fallback application source."""
    return resources.files(TEMPLATE_PACKAGE).joinpath(TEMPLATE_NAME).read_bytes()


class InputResolver:
    """
    Chooses one source among the input channels.

    Priority (first present channel wins, no fallback afterwards):
    1. primary single-file mount
    2. well-known file inside the mounted input directory
    3. secondary single-file mount
    4. piped standard input
    5. built-in template
    """

    logger = LazyService(ILogger, NullLogger)

    def __init__(
        self,
        config: PipelineConfig,
        stdin: IO | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self._config = config
        self._stdin = stdin
        self.logger = logger

    def resolve(self) -> SourceInput:
        """Return the selected source.

        Raises:
            NoInputProvided: If standard input is piped but empty, or the
                built-in template cannot be loaded
        """
        channels = self._config.inputs

        if channels.primary_file.is_file():
            return self._from_file(channels.primary_file, SourceOrigin.MOUNTED_FILE)

        dir_file = channels.input_dir / channels.input_dir_file
        if channels.input_dir.is_dir() and dir_file.is_file():
            return self._from_file(dir_file, SourceOrigin.MOUNTED_DIRECTORY)

        if channels.secondary_file.is_file():
            return self._from_file(channels.secondary_file, SourceOrigin.MOUNTED_FILE)

        if channels.read_stdin and is_piped(self._stdin):
            content = read_stream(self._stdin)  # type: ignore[arg-type]
            if not content:
                raise NoInputProvided("No input received from stdin")
            self.logger.info("Using source from standard input (%d bytes)", len(content))
            return SourceInput(content=content, origin=SourceOrigin.PIPED_STREAM, location="<stdin>")

        try:
            content = load_template()
        except (FileNotFoundError, ModuleNotFoundError) as e:
            raise NoInputProvided("No input given and the built-in template is missing", cause=e) from e
        self.logger.info("No input given, using built-in template")
        return SourceInput(
            content=content,
            origin=SourceOrigin.BUILT_IN_FALLBACK,
            location=f"<built-in {TEMPLATE_NAME}>",
        )

    def _from_file(self, path: Path, origin: SourceOrigin) -> SourceInput:
        self.logger.info("Using source from %s (%s)", path, origin.value)
        return SourceInput(content=path.read_bytes(), origin=origin, location=str(path))

    def check_structure(self, source: SourceInput) -> list[str]:
        """Minimal structural validation run before any expensive step.

        Returns:
            Warnings for missing recommended constructs

        Raises:
            InvalidSource: If the source is empty or has no application class
        """
        text = source.text
        if not text.strip():
            raise InvalidSource(
                "Source is empty", origin=source.origin, location=source.location
            )
        if not APP_CLASS_PATTERN.search(text):
            raise InvalidSource(
                "No VehicleApp class declaration found",
                origin=source.origin,
                location=source.location,
            )

        warnings = []
        if not APP_HEADER_PATTERN.search(text):
            warnings.append("VehicleApp.h include not found")
        for warning in warnings:
            self.logger.warning("%s: %s", source.location, warning)
        return warnings

    def installed_content(self) -> bytes | None:
        """Bytes of the source currently installed in the workspace."""
        path = self._config.source_file
        if not path.is_file():
            return None
        return path.read_bytes()

    def install(self, source: SourceInput) -> Path:
        """Write ``source`` verbatim to the workspace source location."""
        path = self._config.source_file
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(source.content)
        self.logger.info("Installed %s source to %s", source.origin, path)
        return path
