"""CLI command modules."""

from clocktick.cli.commands import config, jobs, serve

__all__ = [
    "config",
    "jobs",
    "serve",
]
