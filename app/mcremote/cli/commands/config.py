"""Configuration inspection commands.

Provides commands to show the effective agent configuration and the
location of the config file.
"""

from pathlib import Path
from typing import Annotated

import typer

from mcremote.core.config import ConfigError, ConfigNotFoundError, load_config, resolve_root
from mcremote.core.paths import get_config_path
from mcremote.utils.formatting import (
    console,
    create_settings_table,
    mask_secret,
    print_error,
    print_warning,
)

app = typer.Typer(
    help="Inspect the agent configuration.",
    no_args_is_help=True,
)


@app.command()
def show(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to the agent config file.",
        ),
    ] = None,
    reveal: Annotated[
        bool,
        typer.Option("--reveal", help="Show the API key in clear text."),
    ] = False,
) -> None:
    """Show the agent configuration."""
    try:
        config = load_config(config_path)
    except ConfigNotFoundError as e:
        print_error(str(e))
        console.print("[muted]Run 'mcremote serve' once to create a default config.[/muted]")
        raise typer.Exit(code=1) from e
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    api_key = config.api_key if reveal else mask_secret(config.api_key)

    table = create_settings_table()
    table.add_row("Server name", config.server_name)
    table.add_row("Host", config.host)
    table.add_row("Port", str(config.port))
    table.add_row("API key", f"[secret]{api_key}[/secret]")
    table.add_row("Root path", config.root_path)
    table.add_row("Allowed extensions", ", ".join(sorted(config.allowed_extensions)))
    table.add_row("Max file size", f"{config.max_file_size_bytes} bytes")
    table.add_row("Workers", str(config.workers))
    console.print(table)

    try:
        resolve_root(config)
    except ConfigError as e:
        print_warning(str(e))


@app.command()
def path() -> None:
    """Print the default config file location."""
    console.print(str(get_config_path()))
