"""
Source input domain model.
"""

from __future__ import annotations

from enum import Enum

from blake3 import blake3
from pydantic import computed_field

from .base import ImmutableModel


class SourceOrigin(str, Enum):
    """Input channel a source was read from."""

    PIPED_STREAM = "piped-stream"
    MOUNTED_FILE = "mounted-file"
    MOUNTED_DIRECTORY = "mounted-directory"
    BUILT_IN_FALLBACK = "built-in-fallback"


class SourceInput(ImmutableModel):
    """The user's application source, materialized once per invocation."""

    content: bytes
    origin: SourceOrigin
    location: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def byte_count(self) -> int:
        return len(self.content)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def line_count(self) -> int:
        if not self.content:
            return 0
        count = self.content.count(b"\n")
        return count if self.content.endswith(b"\n") else count + 1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def digest(self) -> str:
        """BLAKE3 fingerprint of the content."""
        return blake3(self.content).hexdigest()

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def is_fallback(self) -> bool:
        return self.origin == SourceOrigin.BUILT_IN_FALLBACK
