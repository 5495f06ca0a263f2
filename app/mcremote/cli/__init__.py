"""CLI package for mcremote.

This package contains the Typer application and all subcommands.
"""

from mcremote.cli.main import app

__all__ = ["app"]
