"""System information commands.

This module provides commands for querying API-level information about the
Proxmox VE installation.
"""

import typer

from pveclient.client.exceptions import ProxmoxError
from pveclient.commands import fail, get_client
from pveclient.utils.formatters import output_data

app = typer.Typer(
    help="System information",
    no_args_is_help=True,
)


@app.command("version")
def system_version(ctx: typer.Context) -> None:
    """Get Proxmox VE version information.

    Shows the version, release, and repository id of the API server.

    Examples:
        pveclient system version
        pveclient --output-format json system version
    """
    cli_ctx = ctx.obj

    with get_client(ctx) as client:
        try:
            info = client.version(cli_ctx.call_context())
        except ProxmoxError as e:
            fail(e)

        output_data(
            info.model_dump(mode="json"),
            output_format=cli_ctx.output_format,
            title="Proxmox VE Version",
        )
