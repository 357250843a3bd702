"""Output formatting for hfsupload.

Provides consistent console output using Rich, plus the byte/speed/time
formatters used by the transfer progress display.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

# =============================================================================
# Console Instances
# =============================================================================

console = Console()
err_console = Console(stderr=True)

BYTE_UNITS = ("", "K", "M", "G", "T")
TIME_UNITS = (("s", 60, 2), ("m", 60, 2), ("h", 24, 0), ("d", 365, 0), ("y", 1, 0))


# =============================================================================
# Output Format
# =============================================================================


class OutputFormat(Enum):
    """Output format options."""

    JSON = "json"
    TABLE = "table"

    @classmethod
    def from_string(cls, value: str) -> OutputFormat:
        """Create from string value."""
        return cls(value.lower())


# =============================================================================
# Formatters
# =============================================================================


def format_bytes(n: float, *, post: str = "B", k: int = 1024) -> str:
    """Format a byte count with a binary unit prefix.

    One decimal is kept below 100 units, none above: ``1536 -> "1.5 KB"``.
    Negative values give an empty string.
    """
    if n < 0:
        return ""
    n = float(n)
    i = 0
    while n >= k and i < len(BYTE_UNITS) - 1:
        n /= k
        i += 1
    rounded = round(n) if n >= 100 else round(n, 1)
    text = f"{rounded:g}" if isinstance(rounded, float) else str(rounded)
    return f"{text} {BYTE_UNITS[i]}{post}"


def format_speed(bytes_per_second: float) -> str:
    """Format a transfer speed, e.g. ``"2.3 MB/s"``."""
    return format_bytes(bytes_per_second, post="B/s")


def format_percent(fraction: float) -> str:
    """Format a 0..1 fraction as a percentage with at most one decimal."""
    return f"{round(fraction * 100, 1):g}%"


def format_duration(seconds: float, decimals: int = 0, length: int | None = None) -> str:
    """Format seconds as compact units, most significant first.

    Args:
        seconds: Duration in seconds.
        decimals: Decimals kept for the sub-second part.
        length: Keep only the N most significant units (``125, length=2 -> "02m05s"``).
    """
    parts = [f"{seconds % 1:.{decimals}f}"[1:]]
    value = seconds
    for unit, mod, pad in TIME_UNITS:
        parts.append(str(int(value % mod) if mod > 1 else int(value)).zfill(pad) + unit)
        value /= mod
        if value < 1:
            break
    if length is not None:
        parts = parts[-length:]
    return "".join(reversed(parts))


# =============================================================================
# Key/Value Output
# =============================================================================


def print_key_value(
    data: dict[str, Any],
    *,
    title: str | None = None,
    key_labels: dict[str, str] | None = None,
) -> None:
    """Print key-value pairs in a formatted way.

    Args:
        data: Dictionary of key-value pairs.
        title: Optional title.
        key_labels: Optional mapping of keys to display labels.
    """
    if title:
        console.print(f"[bold]{title}[/bold]")

    labels = key_labels or {}
    max_key_len = max(len(labels.get(k, k)) for k in data.keys()) if data else 0

    for key, value in data.items():
        label = labels.get(key, key.replace("_", " ").title())
        if value is None:
            value = "[dim]-[/dim]"
        elif isinstance(value, bool):
            value = "[green]Yes[/green]" if value else "[red]No[/red]"
        elif isinstance(value, (list, dict)):
            value = json.dumps(value, indent=2)

        console.print(f"  {label:<{max_key_len}}  {value}")


def print_json(data: Any, *, indent: int = 2) -> None:
    """Print data as JSON."""
    print(json.dumps(data, indent=indent, default=str))


def print_output(
    data: Any,
    *,
    format: OutputFormat = OutputFormat.TABLE,
    title: str | None = None,
    labels: dict[str, str] | None = None,
) -> None:
    """Print a dict either as JSON or as aligned key/value lines."""
    if format == OutputFormat.JSON or not isinstance(data, dict):
        print_json(data)
        return
    print_key_value(data, title=title, key_labels=labels)


# =============================================================================
# Status Messages
# =============================================================================


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    """Print warning message to stderr."""
    err_console.print(f"[yellow]Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    """Print success message."""
    console.print(f"[green]✓[/green] {message}")


def print_info(message: str) -> None:
    """Print info message."""
    console.print(f"[blue]Info:[/blue] {message}")


# =============================================================================
# Progress
# =============================================================================


def create_progress() -> Progress:
    """Create a Rich progress bar for the upload queue."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("{task.fields[status]}"),
        console=console,
    )
