"""Main CLI application entry point.

This module defines the main Typer application with global options
and registers all subcommands.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

from pveclient import __version__
from pveclient.client.context import CallContext
from pveclient.client.exceptions import ProxmoxError
from pveclient.commands import access as access_commands
from pveclient.commands import exit_code_for
from pveclient.commands import node as node_commands
from pveclient.commands import system as system_commands

# Install rich traceback handler for better error display
install_rich_traceback(show_locals=False)

console = Console()

app = typer.Typer(
    name="pveclient",
    help="Command-line client for the Proxmox VE management API",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.add_typer(
    system_commands.app,
    name="system",
    help="System information",
)
app.add_typer(
    node_commands.app,
    name="node",
    help="Cluster node information",
)
app.add_typer(
    access_commands.app,
    name="access",
    help="Access and authentication",
)


class CLIContext:
    """Shared context for CLI commands."""

    def __init__(
        self,
        env_file: Optional[Path] = None,
        output_format: str = "table",
        verbose: int = 0,
        quiet: bool = False,
        deadline: Optional[float] = None,
    ):
        self.env_file = env_file
        self.output_format = output_format
        self.verbose = verbose
        self.quiet = quiet
        self.deadline = deadline

    def call_context(self) -> CallContext:
        """Fresh call context honouring --deadline."""
        return CallContext(timeout=self.deadline)


def version_callback(value: bool) -> None:
    """Print the version and stop before any subcommand is required."""
    if value:
        console.print(f"pveclient version {__version__}")
        raise typer.Exit(0)


@app.callback()
def main_callback(
    ctx: typer.Context,
    env_file: Optional[Path] = typer.Option(
        None,
        "--env-file",
        "-e",
        help="Path to a .env file (default: search upwards from the current directory)",
        envvar="PVECLIENT_ENV_FILE",
    ),
    output_format: str = typer.Option(
        "table",
        "--output-format",
        "-o",
        help="Output format: table, json, yaml, plain",
        envvar="PVECLIENT_OUTPUT_FORMAT",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv for more detail)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-essential output",
    ),
    deadline: Optional[float] = typer.Option(
        None,
        "--deadline",
        help="Abort the API call after this many seconds",
        min=0.1,
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Write logs to file",
        exists=False,
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """pveclient - query a Proxmox VE cluster from the command line.

    Connection settings come from PROXMOX_* environment variables or a .env file.

    Examples:
        pveclient system version
        pveclient --output-format json node list
        pveclient -vv node disks pve1
        pveclient --env-file lab.env --deadline 5 system version
    """
    if verbose == 0 and not quiet:
        log_level = logging.WARNING
    elif verbose == 1:
        log_level = logging.INFO
    elif verbose >= 2:
        log_level = logging.DEBUG
    else:
        log_level = logging.ERROR

    handlers = []

    if not quiet:
        console_handler = RichHandler(
            console=console,
            show_time=verbose >= 2,
            show_path=verbose >= 2,
            rich_tracebacks=True,
        )
        console_handler.setLevel(log_level)
        handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger(__name__)
    logger.debug(f"pveclient v{__version__}")
    logger.debug(f"Verbosity level: {verbose}")
    logger.debug(f"Output format: {output_format}")

    ctx.obj = CLIContext(
        env_file=env_file,
        output_format=output_format,
        verbose=verbose,
        quiet=quiet,
        deadline=deadline,
    )


def main() -> None:
    """Main entry point with error handling.

    This function wraps the Typer app to provide consistent error handling
    and proper exit codes for different error types.
    """
    try:
        app()
    except ProxmoxError as e:
        console.print(f"[bold red]Proxmox Error:[/bold red] {e}")
        if e.__cause__:
            console.print(f"[dim]Caused by: {e.__cause__}[/dim]")
        sys.exit(exit_code_for(e))
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)  # Standard exit code for SIGINT
    except Exception as e:
        console.print(f"[bold red]Unexpected Error:[/bold red] {e}")
        console.print("\n[dim]This is a bug. Please report it with the --verbose flag output.[/dim]")
        sys.exit(1)


if __name__ == "__main__":
    main()
