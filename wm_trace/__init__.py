"""Window Manager Trace Checker

Rebuilds window manager container trees from recorded snapshots and checks
assertions against them.

Key components:
- WindowManagerTraceParser: snapshot bytes -> Trace of TraceEntry objects
- TraceEntry: one snapshot with resolved visibility and window bands
- Region: exact rectilinear area algebra for bounds checks
- assertions / ErrorCollector: pure predicates returning AssertionResult values
"""

from .assertions import AssertionResult, ErrorCollector, FailureReason
from .config import CheckerConfig, MatchStrategy, load_config
from .containers import (
    Activity,
    ActivityTask,
    ContainerKind,
    Display,
    GenericContainer,
    WindowBand,
    WindowContainer,
    WindowState,
)
from .entry import TraceEntry
from .errors import (
    ContainerContractError,
    EntryNotFoundError,
    ErrorRecord,
    ParseError,
    ParseErrorCode,
)
from .parser import WindowManagerTraceParser, parse_from_dump, parse_from_trace
from .region import Rect, Region
from .trace import Trace

__version__ = "1.0.0"

__all__ = [
    'Activity',
    'ActivityTask',
    'AssertionResult',
    'CheckerConfig',
    'ContainerContractError',
    'ContainerKind',
    'Display',
    'EntryNotFoundError',
    'ErrorCollector',
    'ErrorRecord',
    'FailureReason',
    'GenericContainer',
    'MatchStrategy',
    'ParseError',
    'ParseErrorCode',
    'Rect',
    'Region',
    'Trace',
    'TraceEntry',
    'WindowBand',
    'WindowContainer',
    'WindowManagerTraceParser',
    'WindowState',
    'load_config',
    'parse_from_dump',
    'parse_from_trace',
]
