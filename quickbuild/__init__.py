"""
quickbuild - build, validate, run and test a single-file vehicle application.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("quickbuild-cli")
except PackageNotFoundError:
    __version__ = "0.1.0"
