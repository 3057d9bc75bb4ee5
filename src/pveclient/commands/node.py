"""Node and disk commands.

This module provides commands for listing cluster nodes and the physical
disks attached to them.
"""

import typer
from rich.console import Console

from pveclient.client.exceptions import ProxmoxError
from pveclient.commands import fail, get_client
from pveclient.utils.formatters import output_data

app = typer.Typer(
    help="Cluster node information",
    no_args_is_help=True,
)
console = Console()


@app.command("list")
def list_nodes(ctx: typer.Context) -> None:
    """List all cluster nodes.

    Shows every node with its status, CPU load, memory, and uptime.

    Examples:
        pveclient node list
        pveclient --output-format plain node list
    """
    cli_ctx = ctx.obj

    with get_client(ctx) as client:
        try:
            nodes = client.list_nodes(cli_ctx.call_context())
        except ProxmoxError as e:
            fail(e)

    if not nodes:
        console.print("[yellow]No nodes found[/yellow]")
        return

    table_columns = [
        {"key": "node", "header": "Node", "style": "cyan bold"},
        {"key": "status", "header": "Status", "style": "", "format": "status"},
        {"key": "cpu", "header": "CPU", "style": "", "format": "ratio"},
        {"key": "maxcpu", "header": "CPUs", "style": ""},
        {"key": "mem", "header": "Memory Used", "style": "", "format": "bytes"},
        {"key": "maxmem", "header": "Memory Total", "style": "", "format": "bytes"},
        {"key": "uptime", "header": "Uptime", "style": "", "format": "uptime"},
    ]

    plain_columns = ["node", "status", "cpu", "maxcpu", "mem", "maxmem", "uptime"]

    output_data(
        [node.model_dump(mode="json") for node in nodes],
        output_format=cli_ctx.output_format,
        table_columns=table_columns,
        plain_columns=plain_columns,
        title="Nodes",
    )


@app.command("disks")
def list_disks(
    ctx: typer.Context,
    node: str = typer.Argument(..., help="Node name"),
) -> None:
    """List physical disks of a node.

    Shows device path, model, size, SMART health, and SSD wear-out.

    Examples:
        pveclient node disks pve1
        pveclient --output-format json node disks pve1
    """
    cli_ctx = ctx.obj

    with get_client(ctx) as client:
        try:
            disks = client.list_disks(node, cli_ctx.call_context())
        except ProxmoxError as e:
            fail(e)

    if not disks:
        console.print(f"[yellow]No disks found on {node}[/yellow]")
        return

    table_columns = [
        {"key": "devpath", "header": "Device", "style": "cyan bold"},
        {"key": "type", "header": "Type", "style": ""},
        {"key": "model", "header": "Model", "style": ""},
        {"key": "size", "header": "Size", "style": "", "format": "bytes"},
        {"key": "health", "header": "Health", "style": "", "format": "status"},
        {"key": "wearout", "header": "Wearout", "style": "", "format": "wearout"},
        {"key": "gpt", "header": "GPT", "style": "", "format": "boolean"},
        {"key": "osdid", "header": "OSD", "style": ""},
    ]

    plain_columns = ["devpath", "type", "model", "serial", "size", "health", "osdid"]

    output_data(
        [disk.model_dump(mode="json") for disk in disks],
        output_format=cli_ctx.output_format,
        table_columns=table_columns,
        plain_columns=plain_columns,
        title=f"Disks on {node}",
    )
