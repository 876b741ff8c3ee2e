"""
Rich-formatted display for traces and assertion results.
"""

import json
from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .assertions import AssertionResult, ErrorCollector
from .containers import WindowBand
from .entry import TraceEntry
from .trace import Trace

BAND_STYLES = {
    WindowBand.ABOVE_APP: "cyan",
    WindowBand.APP: "green",
    WindowBand.BELOW_APP: "dim",
}


def entry_summary(entry: TraceEntry) -> Dict[str, Any]:
    top = entry.top_visible_app_window
    return {
        "timestamp": entry.timestamp,
        "windows": len(entry.window_states),
        "visible": len(entry.visible_windows),
        "app": len(entry.app_windows),
        "above_app": len(entry.above_app_windows),
        "below_app": len(entry.below_app_windows),
        "top_app_window": top.title if top is not None else None,
        "focused_app": entry.focused_app,
    }


def display_trace_summary(trace: Trace, console: Optional[Console] = None) -> None:
    """
    Display one row per trace entry.

    Args:
        trace: Parsed trace
        console: Rich console (optional, creates new if not provided)
    """
    if console is None:
        console = Console()

    title = f"Trace: {escape(trace.source)}" if trace.source else "Trace"
    table = Table(title=title)
    table.add_column("Timestamp", justify="right")
    table.add_column("Windows", justify="right")
    table.add_column("Visible", justify="right")
    table.add_column("App", justify="right")
    table.add_column("Above", justify="right")
    table.add_column("Below", justify="right")
    table.add_column("Top app window")

    for entry in trace:
        summary = entry_summary(entry)
        top = summary["top_app_window"]
        table.add_row(
            str(summary["timestamp"]),
            str(summary["windows"]),
            str(summary["visible"]),
            str(summary["app"]),
            str(summary["above_app"]),
            str(summary["below_app"]),
            f"[green]{escape(top)}[/green]" if top else "[dim](none)[/dim]",
        )

    console.print(table)
    if trace.checksum:
        console.print(f"[dim]xxh64 {trace.checksum}[/dim]")


def display_entry_windows(entry: TraceEntry, console: Optional[Console] = None) -> None:
    """Display the visible z-stack of one entry."""
    if console is None:
        console = Console()

    table = Table(title=f"Visible windows at {entry.timestamp}")
    table.add_column("Title")
    table.add_column("Band")
    table.add_column("Bounds")
    table.add_column("Layer", justify="right")

    for window in entry.visible_z_stack:
        style = BAND_STYLES[window.band]
        table.add_row(
            escape(window.title or window.token or str(window.container_id)),
            f"[{style}]{window.band.value}[/{style}]",
            str(window.bounds),
            str(window.layer_id) if window.layer_id is not None else "",
        )

    console.print(table)


def display_results(
    results: Iterable[AssertionResult],
    console: Optional[Console] = None,
    title: str = "Assertions",
) -> None:
    """Display assertion results, failed rows with their reason."""
    if console is None:
        console = Console()

    table = Table(title=title)
    table.add_column("Status")
    table.add_column("Assertion", style="cyan")
    table.add_column("Message")

    for result in results:
        if result.passed:
            status = "[green]✓ PASS[/green]"
        else:
            reason = result.reason.value if result.reason else "failed"
            status = f"[red]✗ FAIL[/red] [dim]({reason})[/dim]"
        table.add_row(status, result.assertion_name, escape(result.message))

    console.print(table)


def format_collector_json(collector: ErrorCollector) -> str:
    return json.dumps(collector.to_dict(), indent=2)


def format_trace_json(trace: Trace) -> str:
    return json.dumps(
        {
            "source": trace.source,
            "checksum": trace.checksum,
            "entries": [entry_summary(entry) for entry in trace],
        },
        indent=2,
    )
