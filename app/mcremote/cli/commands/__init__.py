"""CLI commands for mcremote.

This package contains all subcommand implementations.
"""

from mcremote.cli.commands import config, serve

__all__ = ["config", "serve"]
