"""Workspace state: rebuild decisions and preparation."""

from .change_detector import ChangeDetector
from .preparer import WorkspacePreparer

__all__ = ["ChangeDetector", "WorkspacePreparer"]
