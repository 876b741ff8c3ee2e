"""Window manager trace parser.

Turns serialized snapshots into a Trace. Each snapshot's flat container list
is assembled into trees in two passes:

1. instantiate every container with its attributes, keyed by id
2. link every container to its parent in record order, which is the z-order

Linking validates the parent-kind contract (an Activity must sit directly
under a task), unresolved parent ids and cycles. Any violation aborts the
whole trace with a ParseError naming the offending record: a partially built
tree is unsafe to query.
"""

import logging
from typing import Callable, Dict, List, Optional

import xxhash

from .containers import (
    Activity,
    ActivityTask,
    ContainerKind,
    Display,
    GenericContainer,
    WindowContainer,
    WindowState,
    check_root_kind,
)
from .entry import TraceEntry
from .errors import ContainerContractError, ParseError, ParseErrorCode
from .records import JsonSnapshotDecoder, RawContainer, RawSnapshot, SnapshotDecoder
from .region import Region
from .trace import Trace

logger = logging.getLogger(__name__)


def _build_display(record: RawContainer) -> WindowContainer:
    return Display(
        container_id=record.id,
        title=record.title,
        token=record.token,
        visible=record.visible,
        display_id=record.display_id,
        bounds=Region.from_lists(record.bounds),
    )


def _build_task(record: RawContainer) -> WindowContainer:
    return ActivityTask(
        container_id=record.id,
        title=record.title,
        token=record.token,
        visible=record.visible,
        task_id=record.task_id,
    )


def _build_activity(record: RawContainer) -> WindowContainer:
    return Activity(
        container_id=record.id,
        title=record.title,
        token=record.token,
        visible=record.visible,
        state=record.state,
        front_of_task=record.front_of_task,
        proc_id=record.proc_id,
        is_translucent=record.translucent,
    )


def _build_window(record: RawContainer) -> WindowContainer:
    return WindowState(
        container_id=record.id,
        title=record.title,
        token=record.token,
        visible=record.visible,
        bounds=Region.from_lists(record.bounds),
        layer_id=record.layer_id,
    )


def _build_container(record: RawContainer) -> WindowContainer:
    return GenericContainer(
        container_id=record.id,
        title=record.title,
        token=record.token,
        visible=record.visible,
    )


_BUILDERS: Dict[ContainerKind, Callable[[RawContainer], WindowContainer]] = {
    ContainerKind.DISPLAY: _build_display,
    ContainerKind.TASK: _build_task,
    ContainerKind.ACTIVITY: _build_activity,
    ContainerKind.WINDOW: _build_window,
    ContainerKind.CONTAINER: _build_container,
}


class WindowManagerTraceParser:
    """Builds Trace objects from serialized traces and dumps."""

    def __init__(self, decoder: Optional[SnapshotDecoder] = None):
        """
        Initialize parser.

        Args:
            decoder: Snapshot decoder (default: JsonSnapshotDecoder)
        """
        self.decoder = decoder or JsonSnapshotDecoder()

    def parse_from_trace(self, data: bytes, source: Optional[str] = None) -> Trace:
        """Parse a trace holding a sequence of snapshots.

        Args:
            data: Serialized trace
            source: Name of the trace file, kept on the Trace for reporting

        Returns:
            Trace with one entry per snapshot, in source order

        Raises:
            ParseError: If the data is malformed, a container tree is invalid
                or timestamps are not strictly increasing
        """
        snapshots = self.decoder.decode(data)
        checksum = xxhash.xxh64(data).hexdigest()

        entries: List[TraceEntry] = []
        for index, snapshot in enumerate(snapshots):
            if entries and snapshot.timestamp <= entries[-1].timestamp:
                raise ParseError(
                    ParseErrorCode.TIMESTAMP_ORDER,
                    f"Entry {index} has timestamp {snapshot.timestamp}, "
                    f"not after previous entry timestamp {entries[-1].timestamp}",
                    context={"entry": index, "timestamp": snapshot.timestamp},
                )
            entries.append(self.build_entry(snapshot, index))

        logger.info(f"Parsed {len(entries)} trace entries from {source or 'buffer'}")
        return Trace(entries, source=source, checksum=checksum)

    def parse_from_dump(self, data: bytes, source: Optional[str] = None) -> Trace:
        """Parse a point-in-time dump holding exactly one snapshot.

        Returns:
            Trace with exactly one entry

        Raises:
            ParseError: SNAPSHOT_COUNT if the dump holds zero or several
                snapshots, or any error of parse_from_trace
        """
        snapshots = self.decoder.decode(data)
        if len(snapshots) != 1:
            raise ParseError(
                ParseErrorCode.SNAPSHOT_COUNT,
                f"A dump must hold exactly one snapshot, found {len(snapshots)}",
                context={"snapshots": len(snapshots)},
            )

        entry = self.build_entry(snapshots[0], 0)
        logger.info(f"Parsed dump from {source or 'buffer'}")
        return Trace([entry], source=source, checksum=xxhash.xxh64(data).hexdigest())

    def build_entry(self, snapshot: RawSnapshot, index: int = 0) -> TraceEntry:
        """Assemble the container trees of one snapshot into a TraceEntry."""

        def context(record: RawContainer) -> Dict[str, Optional[int]]:
            return {
                "entry": index,
                "timestamp": snapshot.timestamp,
                "container_id": record.id,
                "parent_id": record.parent_id,
            }

        # Pass 1: instantiate
        nodes: Dict[int, WindowContainer] = {}
        for record in snapshot.containers:
            if record.id in nodes:
                raise ParseError(
                    ParseErrorCode.DUPLICATE_ID,
                    f"Entry {index}: container id {record.id} is used more than once",
                    context=context(record),
                )
            nodes[record.id] = _BUILDERS[record.kind](record)

        # Pass 2: link in record order
        roots: List[WindowContainer] = []
        for record in snapshot.containers:
            node = nodes[record.id]
            if record.parent_id is None:
                try:
                    check_root_kind(node)
                except ContainerContractError as e:
                    raise ParseError(
                        ParseErrorCode.WRONG_PARENT_KIND,
                        f"Entry {index}: {e}",
                        context=context(record),
                    ) from e
                roots.append(node)
                continue
            if record.parent_id == record.id:
                raise ParseError(
                    ParseErrorCode.CYCLE,
                    f"Entry {index}: container {record.id} is its own parent",
                    context=context(record),
                )
            parent = nodes.get(record.parent_id)
            if parent is None:
                raise ParseError(
                    ParseErrorCode.MISSING_PARENT,
                    f"Entry {index}: container {record.id} references missing parent {record.parent_id}",
                    context=context(record),
                )
            try:
                parent.add_child(node)
            except ContainerContractError as e:
                raise ParseError(
                    ParseErrorCode.WRONG_PARENT_KIND,
                    f"Entry {index}: {e}",
                    context=context(record),
                ) from e

        # Every container has one parent, so anything unreachable from a root sits on a cycle
        reachable = {node.container_id for root in roots for node in root.iter_tree()}
        for record in snapshot.containers:
            if record.id not in reachable:
                raise ParseError(
                    ParseErrorCode.CYCLE,
                    f"Entry {index}: container {record.id} is its own ancestor",
                    context=context(record),
                )

        entry = TraceEntry(
            timestamp=snapshot.timestamp,
            roots=roots,
            focused_app=snapshot.focused_app,
            focused_window=snapshot.focused_window,
        )
        logger.debug(
            f"Built entry {snapshot.timestamp}: {len(nodes)} containers, "
            f"{len(entry.window_states)} windows, {len(entry.visible_windows)} visible"
        )
        return entry


def parse_from_trace(
    data: bytes,
    source: Optional[str] = None,
    decoder: Optional[SnapshotDecoder] = None,
) -> Trace:
    """Parse a trace with the default (or given) decoder."""
    return WindowManagerTraceParser(decoder).parse_from_trace(data, source)


def parse_from_dump(
    data: bytes,
    source: Optional[str] = None,
    decoder: Optional[SnapshotDecoder] = None,
) -> Trace:
    """Parse a single-snapshot dump with the default (or given) decoder."""
    return WindowManagerTraceParser(decoder).parse_from_dump(data, source)
