"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from mcremote import __version__
from mcremote.cli.commands import config, serve

# Create main Typer app
app = typer.Typer(
    name="mcremote",
    help="Remote file access agent for game-server configuration.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"mcremote version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """mcremote - Remote file access agent for game servers.

    Exposes the configuration files of a server installation to a
    remote editor over HTTP, protected by a shared API key.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# Register commands
app.add_typer(serve.app, name="serve")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
