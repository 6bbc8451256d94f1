"""
Entry point for the `quickbuild` command-line interface.

quickbuild takes a single C++ vehicle application source, builds it,
verifies the executable, and runs, validates or integration-tests it.

This module provides the main() entry point that delegates to the Click CLI.
"""


def main():
    """Main entry point for the quickbuild CLI."""
    from .cli import cli

    cli()


if __name__ == "__main__":
    main()
