"""
Click command implementations for quickbuild CLI.

Each module corresponds to a quickbuild command (e.g., run.py implements
'quickbuild run'). Commands are registered with the main CLI group via the
register_commands() function in quickbuild.cli.
"""

from .build import build
from .clean import clean
from .gate import gate
from .help import help_command
from .integration import test_command
from .run import run
from .validate import validate

COMMANDS = [
    build,
    run,
    validate,
    test_command,
    clean,
    gate,
    help_command,
]

__all__ = [
    "COMMANDS",
    "build",
    "clean",
    "gate",
    "help_command",
    "run",
    "test_command",
    "validate",
]
