"""Opsgenie MCP server commands."""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from opsgenie_mcp import __version__
from opsgenie_mcp.auth import API_KEY_ENV_VAR, resolve_credential
from opsgenie_mcp.config import ServerConfig
from opsgenie_mcp.server import MCP_PATH, OpsgenieMCPServer
from opsgenie_mcp.tools import ALERT_TOOLS

app = typer.Typer(help="Opsgenie MCP Server with multiple transport options")
# stdout carries the MCP stream in stdio mode, so everything human-facing goes to stderr
console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Route all logging through rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


def _print_missing_key_help() -> None:
    console.print("[red]Error:[/red] Opsgenie API key is required for stdio transport.")
    console.print("Provide it via:")
    console.print("  --api-key <key>              CLI argument")
    console.print(f"  {API_KEY_ENV_VAR}=<key>       Environment variable")


TransportOption = Annotated[
    Optional[str],
    typer.Option("--transport", "-t", help="Transport type: stdio or http (overrides config)"),
]
PortOption = Annotated[
    Optional[int],
    typer.Option("--port", "-p", help="Port number for HTTP transport (overrides config)"),
]
HostOption = Annotated[
    Optional[str],
    typer.Option("--host", help="Bind address for HTTP transport (overrides config)"),
]
ApiKeyOption = Annotated[
    Optional[str],
    typer.Option("--api-key", "-a", help=f"Opsgenie API key (can also use {API_KEY_ENV_VAR} env var)"),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Config file (default: ./opsgenie-mcp.yaml if present)"),
]
JsonResponseOption = Annotated[
    Optional[bool],
    typer.Option("--json-response/--sse-response", help="HTTP POST response format (overrides config)"),
]
LogLevelOption = Annotated[
    Optional[str],
    typer.Option("--log-level", help="Log level (overrides config)"),
]


@app.callback(invoke_without_command=True)
def default_command(
    ctx: typer.Context,
    transport: TransportOption = None,
    port: PortOption = None,
    host: HostOption = None,
    api_key: ApiKeyOption = None,
    config_file: ConfigOption = None,
    json_response: JsonResponseOption = None,
    log_level: LogLevelOption = None,
):
    """
    Opsgenie MCP Server with multiple transport options.

    Without a command, the options are handed to `serve`, so
    `opsgenie-mcp-server -t http -p 3000` starts the HTTP server.
    """
    if ctx.invoked_subcommand is None:
        serve(
            transport=transport,
            port=port,
            host=host,
            api_key=api_key,
            config_file=config_file,
            json_response=json_response,
            log_level=log_level,
        )


@app.command()
def serve(
    transport: TransportOption = None,
    port: PortOption = None,
    host: HostOption = None,
    api_key: ApiKeyOption = None,
    config_file: ConfigOption = None,
    json_response: JsonResponseOption = None,
    log_level: LogLevelOption = None,
):
    """
    Start the Opsgenie MCP server.

    Configuration is loaded from opsgenie-mcp.yaml if it exists.
    Environment variables override the config file and command-line
    options override both.

    Examples:
        # stdio transport, key from the environment
        OPSGENIE_API_KEY=... opsgenie-mcp-server serve

        # HTTP transport; clients send their key per request
        opsgenie-mcp-server serve --transport http --port 3000
    """
    overrides = {
        "transport": transport.lower() if transport else None,
        "port": port,
        "host": host,
        "api_key": api_key,
        "json_response": json_response,
        "log_level": log_level,
    }

    try:
        config = ServerConfig.load(config_file)
        config = replace(config, **{k: v for k, v in overrides.items() if v is not None})
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        console.print("Supported transports: stdio, http")
        raise typer.Exit(1)

    configure_logging(config.log_level)

    if config.transport == "stdio" and not resolve_credential(config.api_key):
        _print_missing_key_help()
        raise typer.Exit(1)

    server = OpsgenieMCPServer(
        host=config.host,
        port=config.port,
        transport=config.transport,
        api_key=resolve_credential(config.api_key),
        api_url=config.api_url,
        timeout=config.timeout,
        json_response=config.json_response,
    )

    console.print("[green]Starting Opsgenie MCP server...[/green]")
    console.print(f"Transport: {config.transport}")
    if config.transport == "http":
        console.print(f"Listening on http://{config.host}:{config.port}{MCP_PATH}")
        if not config.api_key:
            console.print("[yellow]No default API key; clients must send one per request[/yellow]")

    try:
        server.start()
    except RuntimeError as e:
        console.print(f"[red]Error starting server:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")
        raise typer.Exit(0)


@app.command()
def tools():
    """
    List the MCP tools this server exposes.

    Examples:
        opsgenie-mcp-server tools
    """
    table = Table(title="Opsgenie MCP Tools")
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Description")
    for name, description in ALERT_TOOLS.items():
        table.add_row(name, description)
    console.print(table)


@app.command()
def version():
    """Print the server version."""
    console.print(f"opsgenie-mcp-server {__version__}")


def main() -> None:
    app()
