"""
Interface definitions for quickbuild's pluggable services.
"""

from .logger import ILogger
from .presenter import IPresenter

__all__ = [
    "ILogger",
    "IPresenter",
]
