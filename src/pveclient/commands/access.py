"""Access commands.

This module provides a command for requesting a raw session ticket with the
configured username and password.
"""

import typer

from pveclient.client.auth import LoginAuth
from pveclient.client.base import ProxmoxClient
from pveclient.client.exceptions import ProxmoxError
from pveclient.commands import fail, get_config
from pveclient.utils.formatters import output_data

app = typer.Typer(
    help="Access and authentication",
    no_args_is_help=True,
)


@app.command("ticket")
def issue_ticket(
    ctx: typer.Context,
    show_ticket: bool = typer.Option(
        False,
        "--show-ticket",
        help="Print the ticket and CSRF token instead of masking them",
    ),
) -> None:
    """Request a session ticket.

    Uses PROXMOX_USERNAME, PROXMOX_REALM and PROXMOX_PASSWORD regardless of
    the configured auth method.

    Examples:
        pveclient access ticket
        pveclient --output-format json access ticket --show-ticket
    """
    cli_ctx = ctx.obj
    config = get_config(ctx)

    try:
        auth = LoginAuth(config.realm, config.username or "", config.password or "")
        with ProxmoxClient(
            config.url,
            auth,
            insecure_skip_tls=config.insecure_skip_tls,
            timeout=config.timeout,
        ) as client:
            ticket = client.issue_ticket(
                config.realm,
                config.username,
                config.password,
                cli_ctx.call_context(),
            )
    except ProxmoxError as e:
        fail(e)

    data = ticket.model_dump(mode="json")
    if not show_ticket:
        data["ticket"] = "********"
        data["csrf_prevention_token"] = "********"

    output_data(data, output_format=cli_ctx.output_format, title="Ticket")
