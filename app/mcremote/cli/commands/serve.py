"""Serve command implementation.

Loads (or creates on first run) the agent configuration and runs the
HTTP server until interrupted.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
import uvicorn
from pydantic import ValidationError
from rich.logging import RichHandler
from rich.panel import Panel

from mcremote import __version__
from mcremote.api.app import create_app
from mcremote.core.config import AgentConfig, ConfigError, load_or_create_config, resolve_root
from mcremote.core.paths import get_config_path
from mcremote.utils.formatting import console, err_console, print_error, print_info

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Run the remote file access server.",
    invoke_without_command=True,
)


def _configure_logging(verbose: bool) -> None:
    """Route all log records through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _apply_overrides(config: AgentConfig, host: str | None, port: int | None) -> AgentConfig:
    """Return a validated copy of the config with CLI overrides applied."""
    overrides: dict[str, object] = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if not overrides:
        return config
    return AgentConfig.model_validate({**config.model_dump(), **overrides})


def _print_banner(config: AgentConfig, root: Path, config_path: Path, created: bool) -> None:
    """Print the startup banner with connection details."""
    lines = [
        f"[header]Root path:[/]  {root}",
        f"[header]Port:[/]       {config.port}",
        f"[header]API key:[/]    [secret]{config.api_key}[/]",
        "",
        "[muted]Connect from the desktop editor with:[/]",
        "[muted]  Host:    <your-server-ip>[/]",
        f"[muted]  Port:    {config.port}[/]",
        "[muted]  API key: as shown above[/]",
    ]
    console.print(
        Panel(
            "\n".join(lines),
            title=f"mcremote v{__version__}",
            subtitle=config.server_name,
            border_style="border",
        )
    )
    if created:
        print_info(f"Created default config at {config_path} with a new API key.")


@app.callback(invoke_without_command=True)
def serve(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to the agent config file.",
        ),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", help="Interface address to bind (overrides config)."),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port to listen on (overrides config)."),
    ] = None,
) -> None:
    """Start the HTTP server for remote file access."""
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    _configure_logging(verbose)

    effective_path = config_path or get_config_path()

    try:
        config, created = load_or_create_config(effective_path)
        config = _apply_overrides(config, host, port)
        root = resolve_root(config)
        application = create_app(config)
    except (ConfigError, ValidationError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    _print_banner(config, root, effective_path, created)

    logger.info("Listening on %s:%d", config.host, config.port)
    uvicorn.run(application, host=config.host, port=config.port, log_config=None)
    logger.info("Shutting down")
