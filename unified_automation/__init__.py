"""Unified Automation - write a browser journey once, run it on any backend."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("unified-automation")
except PackageNotFoundError:
    # Package not installed, fallback to pyproject.toml version
    __version__ = "0.1.0"
