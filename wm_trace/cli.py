"""
wm-trace command line

Usage:
    wm-trace summary TRACE [--dump] [--json]
    wm-trace check TRACE --timestamp T [--above-app NAME]... [--non-app NAME]...
        [--app-visible NAME]... [--app-on-top NAME]
        [--covers-at-least NAME L T R B]... [--covers-at-most NAME L T R B]...
        [--config PATH] [--json]

Exit codes:
    0 - Success, every assertion passed
    1 - At least one assertion failed
    2 - The trace could not be parsed or the timestamp is unknown
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape

from . import displays
from .assertions import ErrorCollector
from .config import load_config
from .errors import EntryNotFoundError, ParseError
from .logging_config import log_timing, setup_logging
from .parser import WindowManagerTraceParser
from .region import Region
from .trace import Trace

logger = logging.getLogger(__name__)

RegionOption = Tuple[str, int, int, int, int]


def _load_trace(path: Path, dump: bool) -> Trace:
    parser = WindowManagerTraceParser()
    data = path.read_bytes()
    with log_timing(f"Parse {path.name}", logger):
        if dump:
            return parser.parse_from_dump(data, source=str(path))
        return parser.parse_from_trace(data, source=str(path))


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def cli(verbose: bool, debug: bool):
    """Inspect window manager traces and check assertions against them."""
    setup_logging(verbose=verbose, debug=debug)


@cli.command()
@click.argument('trace_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--dump', is_flag=True, help='Parse a single-snapshot dump instead of a trace')
@click.option('--json', 'output_json', is_flag=True, help='Output JSON instead of formatted tables')
def summary(trace_file: Path, dump: bool, output_json: bool):
    """
    Show one row per trace entry.

    Columns: timestamp, window counts per band and the top visible app window.
    """
    console = Console()

    try:
        trace = _load_trace(trace_file, dump)
    except ParseError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(2)

    if output_json:
        click.echo(displays.format_trace_json(trace))
    else:
        displays.display_trace_summary(trace, console)


@cli.command()
@click.argument('trace_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--timestamp', '-t', type=int, required=True, help='Timestamp of the entry to check')
@click.option('--dump', is_flag=True, help='Parse a single-snapshot dump instead of a trace')
@click.option('--above-app', multiple=True, help='Window expected visible above the app windows')
@click.option('--non-app', multiple=True, help='Non-app window expected visible')
@click.option('--app-visible', multiple=True, help='App window expected visible')
@click.option('--app-on-top', default=None, help='App window expected on top of the app windows')
@click.option('--activity-visible', multiple=True, help='Activity expected visible')
@click.option('--resumed', multiple=True, help='Activity expected in the RESUMED state')
@click.option(
    '--covers-at-least',
    type=(str, int, int, int, int),
    multiple=True,
    metavar='NAME L T R B',
    help='Window bounds must contain the rect',
)
@click.option(
    '--covers-at-most',
    type=(str, int, int, int, int),
    multiple=True,
    metavar='NAME L T R B',
    help='Window bounds must lie inside the rect',
)
@click.option('--config', 'config_file', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help='Checker config (default: $WM_TRACE_CONFIG or ~/.config/wm-trace/config.json)')
@click.option('--windows', 'show_windows', is_flag=True, help='Also show the visible window stack')
@click.option('--json', 'output_json', is_flag=True, help='Output JSON instead of formatted tables')
def check(
    trace_file: Path,
    timestamp: int,
    dump: bool,
    above_app: Tuple[str, ...],
    non_app: Tuple[str, ...],
    app_visible: Tuple[str, ...],
    app_on_top: Optional[str],
    activity_visible: Tuple[str, ...],
    resumed: Tuple[str, ...],
    covers_at_least: Tuple[RegionOption, ...],
    covers_at_most: Tuple[RegionOption, ...],
    config_file: Optional[Path],
    show_windows: bool,
    output_json: bool,
):
    """
    Run assertions against the entry at TIMESTAMP.

    Every assertion runs; all failures are reported together.
    """
    console = Console()

    try:
        config = load_config(config_file)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(2)

    try:
        trace = _load_trace(trace_file, dump)
        entry = trace.get_entry(timestamp)
    except (ParseError, EntryNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(2)

    collector = ErrorCollector()
    for name in above_app:
        collector.add(entry.is_above_app_window(name, config))
    for name in non_app:
        collector.add(entry.has_non_app_window(name, config))
    for name in app_visible:
        collector.add(entry.is_app_window_visible(name, config))
    if app_on_top:
        collector.add(entry.is_visible_app_window_on_top(app_on_top, config))
    for name in activity_visible:
        collector.add(entry.is_activity_visible(name, config))
    for name in resumed:
        collector.add(entry.has_resumed_activity(name, config))
    for name, left, top, right, bottom in covers_at_least:
        region = Region.from_bounds(left, top, right, bottom)
        collector.add(entry.covers_at_least_region(name, region, config))
    for name, left, top, right, bottom in covers_at_most:
        region = Region.from_bounds(left, top, right, bottom)
        collector.add(entry.covers_at_most_region(name, region, config))

    if output_json:
        click.echo(displays.format_collector_json(collector))
    else:
        if show_windows:
            displays.display_entry_windows(entry, console)
        if collector.results:
            displays.display_results(collector.results, console, title=f"Assertions at {timestamp}")
        console.print(str(collector))

    sys.exit(1 if collector.failed_count else 0)


if __name__ == '__main__':
    cli()
