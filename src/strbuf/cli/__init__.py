"""Command-line demos exercising the buffer layer."""

from .runner import Demo, hr, run_cli

__all__ = ["Demo", "hr", "run_cli"]
