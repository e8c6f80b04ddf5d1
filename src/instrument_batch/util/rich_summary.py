from __future__ import annotations

from typing import Dict, Optional

from rich.console import Console
from rich.table import Table


def render_report_summary_table(
    *,
    enabled: bool,
    status: str,
    summary: Dict[str, int],
    outdir: str,
    console: Optional[Console] = None,
) -> None:
    if not enabled:
        return
    table = Table(title="Report Summary", show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Status", status)
    table.add_row("Added", str(summary.get("added", 0)))
    table.add_row("Updated", str(summary.get("updated", 0)))
    table.add_row("Stale", str(summary.get("stale", 0)))
    table.add_row("Total", str(summary.get("total", 0)))
    table.add_row("Output dir", outdir)
    (console or Console()).print(table)
