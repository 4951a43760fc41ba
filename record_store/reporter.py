from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table


def _format_memory(mem_bytes: Optional[int]) -> str:
    if not mem_bytes:
        return "N/A"
    return f"{mem_bytes / (1024 * 1024):.2f}"


def build_table(results: List[Dict[str, Any]], title: str = "Record Store Workload") -> Table:
    """
    Build a rich table with one row per workload phase, in execution order.
    """
    requested = results[0].get("requested") if results else None
    caption = f"{requested:,} records per phase" if requested else None

    table = Table(title=title, box=box.ROUNDED, caption=caption)
    table.add_column("Phase", style="cyan", no_wrap=True)
    table.add_column("Operations", justify="right", style="magenta")
    table.add_column("Duration (s)", justify="right", style="green")
    table.add_column("Throughput (ops/s)", justify="right", style="bold green")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")
    table.add_column("CPU %", justify="right", style="red")

    for res in results:
        cpu = res.get("cpu_percent")
        table.add_row(
            res.get("phase", "Unknown"),
            f"{res.get('operations', 0):,}",
            f"{res.get('duration_seconds', 0.0):.4f}",
            f"{res.get('throughput_ops_per_sec', 0.0):,.2f}",
            _format_memory(res.get("peak_rss_bytes")),
            f"{cpu:.1f}" if cpu is not None else "N/A",
        )
    return table


def print_results(results: List[Dict[str, Any]], console: Optional[Console] = None) -> None:
    """
    Render workload results as a rich table.
    """
    console = console or Console()

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    console.print(build_table(results))


__all__ = ["build_table", "print_results"]
