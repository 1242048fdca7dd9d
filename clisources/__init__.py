"""Ordered value sources for command-line flags: environment variables, files and maps."""

__version__ = "0.1.0"

__all__ = ["value_source"]