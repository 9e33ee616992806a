"""CLI module for the telemetry agent.

Commands read PERCONA_TELEMETRY_* environment variables for configuration.
"""

from .main import cli, main, run_iteration

__all__ = [
    "cli",
    "main",
    "run_iteration",
]
