"""Pipeline services."""

from .logging import NullLogger, QuickbuildLogger
from .pipeline import BuildPipeline

__all__ = ["BuildPipeline", "NullLogger", "QuickbuildLogger"]
