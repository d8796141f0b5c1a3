"""Command line entry point."""

from .run import main

__all__ = ["main"]
