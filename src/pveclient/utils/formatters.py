"""Output formatting utilities for the pveclient CLI.

This module provides consistent formatting functions for displaying data
in table, JSON, YAML, and plain text formats across all commands.
"""

import json
from typing import Any, Optional

import yaml
from rich.console import Console
from rich.json import JSON
from rich.table import Table

console = Console()


def format_bytes(bytes_value: int | None) -> str:
    """Format bytes into human-readable format.

    Args:
        bytes_value: Size in bytes

    Returns:
        Human-readable string (e.g., "1.50 GB")
    """
    if bytes_value is None:
        return "N/A"

    if bytes_value == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    unit_index = 0
    size = float(bytes_value)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    else:
        return f"{size:.2f} {units[unit_index]}"


def format_percentage(numerator: float | None, denominator: float | None) -> str:
    """Format a percentage from numerator and denominator.

    Args:
        numerator: Numerator value
        denominator: Denominator value

    Returns:
        Percentage string (e.g., "75.5%")
    """
    if numerator is None or denominator is None or denominator == 0:
        return "N/A"

    percentage = (numerator / denominator) * 100
    return f"{percentage:.1f}%"


def format_uptime(seconds: Optional[float]) -> str:
    """Format uptime in seconds to human-readable format.

    Examples:
        >>> format_uptime(918)
        '15m 18s'

        >>> format_uptime(90061)
        '1d 1h 1m'

        >>> format_uptime(None)
        'N/A'
    """
    if seconds is None:
        return "N/A"

    try:
        seconds = int(seconds)
    except (ValueError, TypeError):
        return "N/A"

    if seconds < 0:
        return "N/A"

    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def get_status_color(status: str) -> str:
    """Get Rich color for a status string.

    Args:
        status: Status string (e.g., "online", "PASSED", "offline")

    Returns:
        Rich color name
    """
    status_upper = status.upper()

    # Health/success states
    if status_upper in ["ONLINE", "PASSED", "OK", "HEALTHY", "RUNNING"]:
        return "green"

    # Warning states
    if status_upper in ["UNKNOWN", "DEGRADED", "WARNING"]:
        return "yellow"

    # Error/critical states
    if status_upper in ["OFFLINE", "FAILED", "ERROR", "CRITICAL"]:
        return "red"

    return "blue"


def format_table_output(
    data: list[dict[str, Any]],
    columns: list[dict[str, str]],
    title: str | None = None,
) -> None:
    """Format and display data as a Rich table.

    Args:
        data: List of dictionaries to display
        columns: Column definitions with 'key', 'header', and optional 'style'/'format'
        title: Optional table title
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")

    for col in columns:
        table.add_column(
            col["header"],
            style=col.get("style", ""),
            no_wrap=col.get("no_wrap", False),
        )

    for item in data:
        row = []
        for col in columns:
            key = col["key"]
            value = item.get(key)

            if col.get("format") == "bytes":
                value = format_bytes(value)
            elif col.get("format") == "status" and value is not None:
                color = get_status_color(str(value))
                value = f"[{color}]{value}[/{color}]"
            elif col.get("format") == "boolean" and value is not None:
                value = "[green]Yes[/green]" if value else "[red]No[/red]"
            elif col.get("format") == "uptime":
                value = format_uptime(value)
            elif col.get("format") == "ratio":
                value = format_percentage(value, 1) if value is not None else "N/A"
            elif col.get("format") == "wearout":
                # WearIndicator dumped as {"present": ..., "value": ...}
                if isinstance(value, dict) and value.get("present"):
                    value = f"{value.get('value')}%"
                else:
                    value = "N/A"

            if value is None:
                value = "[dim]N/A[/dim]"

            row.append(str(value))

        table.add_row(*row)

    console.print(table)


def format_key_value_output(
    data: dict[str, Any],
    title: str | None = None,
) -> None:
    """Format and display data as a key-value table.

    Args:
        data: Dictionary to display
        title: Optional table title
    """
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column("Property", style="cyan bold")
    table.add_column("Value", style="green")

    for key, value in data.items():
        display_key = key.replace("_", " ").title()

        if isinstance(value, bool):
            display_value = "[green]Yes[/green]" if value else "[red]No[/red]"
        elif key.lower() == "uptime":
            display_value = format_uptime(value)
        elif isinstance(value, (dict, list)):
            display_value = json.dumps(value, indent=2)
        elif value is None:
            display_value = "[dim]N/A[/dim]"
        else:
            display_value = str(value)

        table.add_row(display_key, display_value)

    console.print(table)


def format_json_output(data: Any) -> None:
    """Format and display data as JSON.

    Args:
        data: Data to display as JSON
    """
    console.print(JSON(json.dumps(data, indent=2, default=str)))


def format_yaml_output(data: Any) -> None:
    """Format and display data as YAML.

    Args:
        data: Data to display as YAML
    """
    console.print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))


def format_plain_output(
    data: list[dict[str, Any]],
    columns: list[str],
    delimiter: str = "\t",
) -> None:
    """Format and display data as plain text (TSV by default).

    Args:
        data: List of dictionaries to display
        columns: Column keys to include
        delimiter: Field delimiter (default: tab)
    """
    print(delimiter.join(columns))

    for item in data:
        values = []
        for col in columns:
            value = item.get(col, "")

            if isinstance(value, (dict, list)):
                value = json.dumps(value)
            elif value is None:
                value = ""

            values.append(str(value))

        print(delimiter.join(values))


def output_data(
    data: Any,
    output_format: str = "table",
    table_columns: list[dict[str, str]] | None = None,
    plain_columns: list[str] | None = None,
    title: str | None = None,
) -> None:
    """Universal output function that handles all formats.

    Args:
        data: Data to output (dict, list of dicts, or other)
        output_format: Output format (table, json, yaml, plain)
        table_columns: Column definitions for table format
        plain_columns: Column keys for plain format
        title: Optional title for table output
    """
    if output_format == "json":
        format_json_output(data)
    elif output_format == "yaml":
        format_yaml_output(data)
    elif output_format == "plain":
        if isinstance(data, list) and plain_columns:
            format_plain_output(data, plain_columns)
        elif isinstance(data, dict):
            for key, value in data.items():
                print(f"{key}={value}")
        else:
            print(str(data))
    else:  # table (default)
        if isinstance(data, list) and table_columns:
            format_table_output(data, table_columns, title)
        elif isinstance(data, dict):
            format_key_value_output(data, title)
        else:
            console.print(data)
