from __future__ import annotations

from typing import Any, Dict, Optional

from rich import box
from rich.console import Console
from rich.table import Table


def _format_bytes(value: Optional[int]) -> str:
    if not value:
        return "N/A"
    return f"{value / (1024 * 1024):.2f}"


def print_summary(summary: Dict[str, Any], console: Optional[Console] = None) -> None:
    """
    Render a pipeline run summary as a rich table.

    Prints to stderr by default so it never mixes with CSV written to stdout.
    """
    console = console or Console(stderr=True)

    if not summary:
        console.print("[yellow]No summary to display.[/yellow]")
        return

    table = Table(
        title=f"De-identification Summary ({summary.get('pipeline', 'unknown')})",
        box=box.ROUNDED,
        caption=summary.get("notes") or None,
    )
    table.add_column("Tables", justify="right", style="cyan")
    table.add_column("Rows Read", justify="right", style="magenta")
    table.add_column("Rows Written", justify="right", style="bold green")
    table.add_column("Rows Skipped", justify="right", style="red")
    table.add_column("Duration (s)", justify="right", style="green")
    table.add_column("Throughput (rows/s)", justify="right", style="green")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")

    table.add_row(
        str(summary.get("tables", 0)),
        f"{summary.get('rows_read', 0):,}",
        f"{summary.get('rows_written', 0):,}",
        f"{summary.get('rows_skipped', 0):,}",
        f"{summary.get('duration_seconds', 0.0):.2f}",
        f"{summary.get('throughput_rows_per_sec', 0.0):,.2f}",
        _format_bytes(summary.get("peak_rss_bytes")),
    )

    console.print(table)


__all__ = ["print_summary"]
