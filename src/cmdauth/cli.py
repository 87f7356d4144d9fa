"""Command-line interface for inspecting a refresh command.

    cmdauth header --command ./get-token
    cmdauth token --command ./get-token --scheme bearer
    cmdauth configure --command ./get-token --timeout 10
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .errors import CredentialError
from .provider import CredentialProvider
from .settings import ProviderSettings, load_settings, save_settings

app = typer.Typer(help="Produce Authorization headers from an external refresh command.")
console = Console()
err_console = Console(stderr=True)

cli_options: dict = {}


def configure_logging(debug: bool) -> None:
    """Route loguru output to stderr at DEBUG or WARNING level."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "WARNING")


def build_provider(
    command: Optional[str],
    scheme: Optional[str],
    timeout: Optional[float],
) -> CredentialProvider:
    """Merge command-line overrides onto the saved settings."""
    settings = load_settings(cli_options.get("settings_path"))
    overrides = {
        k: v
        for k, v in {"refresh_command": command, "scheme": scheme, "timeout": timeout}.items()
        if v is not None
    }
    merged = ProviderSettings(**{**settings.model_dump(), **overrides})
    return CredentialProvider.from_settings(merged)


@app.callback()
def main(
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Path to settings JSON file"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    cli_options["settings_path"] = settings_path
    configure_logging(debug)


@app.command()
def header(
    command: Optional[str] = typer.Option(None, "--command", "-c", help="Refresh command to run"),
    scheme: Optional[str] = typer.Option(None, "--scheme", "-s", help="Authorization scheme"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Refresh timeout in seconds"),
):
    """Print the Authorization header line."""
    try:
        provider = build_provider(command, scheme, timeout)
        result = provider.access_header()
    except (CredentialError, ValueError) as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)
    if result is None:
        err_console.print("[yellow]No refresh command configured; no header produced.[/yellow]")
        raise typer.Exit(code=2)
    name, value = result
    typer.echo(f"{name}: {value}")


@app.command()
def token(
    command: Optional[str] = typer.Option(None, "--command", "-c", help="Refresh command to run"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Refresh timeout in seconds"),
    show_lifespan: bool = typer.Option(False, "--lifespan", "-l", help="Also show the token lifespan"),
):
    """Print the raw token produced by the refresh command."""
    try:
        provider = build_provider(command, None, timeout)
        if not provider.is_enabled:
            err_console.print("[yellow]No refresh command configured.[/yellow]")
            raise typer.Exit(code=2)
        value = provider.get_token()
    except (CredentialError, ValueError) as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)
    typer.echo(value)
    if show_lifespan:
        cached = provider.cached_token
        table = Table("Lifespan", "Kind")
        table.add_row(str(cached.lifespan), cached.lifespan.kind.value)
        console.print(table)


@app.command()
def configure(
    command: str = typer.Option(..., "--command", "-c", help="Refresh command to run"),
    scheme: str = typer.Option("Bearer", "--scheme", "-s", help="Authorization scheme"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Refresh timeout in seconds"),
):
    """Save the refresh command and scheme to the settings file."""
    try:
        settings = ProviderSettings(refresh_command=command, scheme=scheme, timeout=timeout)
    except ValueError as exc:
        err_console.print(f"[red]Invalid settings:[/red] {exc}")
        raise typer.Exit(code=1)
    save_settings(settings, cli_options.get("settings_path"))
    console.print(f"[green]Saved[/green] refresh command {command!r}")


if __name__ == "__main__":
    app()
