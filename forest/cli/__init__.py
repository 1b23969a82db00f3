"""Command-line interface for Forest."""

from .main import cli

__all__ = ["cli"]
