"""CLI subcommands.

Each module defines a Typer sub-application. The helpers below resolve the
configuration for the current invocation and map client errors to exit codes.
"""

import typer
from rich.console import Console

from pveclient.client.base import ProxmoxClient
from pveclient.client.exceptions import (
    Cancelled,
    ConfigurationError,
    ProxmoxError,
    UnexpectedStatus,
)
from pveclient.config import ProxmoxConfig, load_config

console = Console()

AUTH_REJECTED = (401, 403)


def get_config(ctx: typer.Context) -> ProxmoxConfig:
    """Load configuration for the current invocation.

    Raises:
        typer.Exit: With code 3 if configuration is missing or invalid
    """
    try:
        return load_config(env_file=ctx.obj.env_file)
    except ConfigurationError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(3)


def get_client(ctx: typer.Context) -> ProxmoxClient:
    """Get configured Proxmox client from context.

    Args:
        ctx: Typer context with CLIContext object

    Returns:
        Configured ProxmoxClient

    Raises:
        typer.Exit: With code 3 if configuration is missing or invalid
    """
    config = get_config(ctx)

    try:
        return ProxmoxClient.from_config(config)
    except ConfigurationError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(3)


def exit_code_for(error: ProxmoxError) -> int:
    """Exit code for a client error."""
    if isinstance(error, ConfigurationError):
        return 3
    if isinstance(error, UnexpectedStatus) and error.status_code in AUTH_REJECTED:
        return 2
    if isinstance(error, Cancelled):
        return 130
    return 1


def fail(error: ProxmoxError) -> None:
    """Print a client error and exit with the matching code.

    Raises:
        typer.Exit: Always
    """
    code = exit_code_for(error)
    if code == 2:
        console.print(f"[red]Authentication Error:[/red] {error}")
        console.print("[yellow]Tip:[/yellow] Check PROXMOX_USERNAME, PROXMOX_REALM and your token or password")
    else:
        console.print(f"[red]Error:[/red] {error}")
        if error.__cause__:
            console.print(f"[dim]Caused by: {error.__cause__}[/dim]")
    raise typer.Exit(code)
