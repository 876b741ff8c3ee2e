"""Raw snapshot records and the decoder seam.

The parser never reads bytes itself. A SnapshotDecoder turns the serialized
trace into RawSnapshot records; JsonSnapshotDecoder is the implementation
shipped with the package. It accepts:

- a trace: ``{"entries": [snapshot, ...]}`` or a bare list of snapshots
- a dump: a single snapshot object

A snapshot holds a flat list of container records linked by ``parent_id``:

    {
        "timestamp": 9213763541297,
        "focused_app": "com.google.android.apps.nexuslauncher/.NexusLauncherActivity",
        "containers": [
            {"id": 1, "kind": "display", "title": "Built-in Screen", "visible": true,
             "display_id": 0, "bounds": [[0, 0, 1440, 2960]]},
            {"id": 2, "parent_id": 1, "kind": "window", "title": "StatusBar",
             "token": "5b2f1a", "visible": true, "bounds": [[0, 0, 1440, 171]]}
        ]
    }
"""

import json
import logging
from typing import Any, List, Optional, Protocol, Tuple

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from .containers import ContainerKind
from .errors import ParseError, ParseErrorCode

logger = logging.getLogger(__name__)


class RawContainer(BaseModel):
    """One container record of a snapshot"""
    id: int
    parent_id: Optional[int] = None
    kind: ContainerKind
    title: str = ""
    token: str = ""
    visible: bool = False
    bounds: List[Tuple[int, int, int, int]] = Field(default_factory=list)

    # Kind-specific fields, ignored for the other kinds
    display_id: int = 0
    task_id: int = -1
    state: str = ""
    front_of_task: bool = False
    proc_id: int = 0
    translucent: bool = False
    layer_id: Optional[int] = None

    @field_validator('bounds')
    @classmethod
    def bounds_must_be_ordered(cls, v: List[Tuple[int, int, int, int]]) -> List[Tuple[int, int, int, int]]:
        """Ensure every rect is [left, top, right, bottom] with left <= right and top <= bottom"""
        for left, top, right, bottom in v:
            if right < left or bottom < top:
                raise ValueError(f"Invalid rect [{left}, {top}, {right}, {bottom}]")
        return v


class RawSnapshot(BaseModel):
    """One window manager snapshot"""
    timestamp: int = Field(default=0, ge=0)
    focused_app: Optional[str] = None
    focused_window: Optional[str] = None
    containers: List[RawContainer]


_SNAPSHOT_LIST = TypeAdapter(List[RawSnapshot])


class SnapshotDecoder(Protocol):
    """Turns serialized trace bytes into raw snapshot records."""

    def decode(self, data: bytes) -> List[RawSnapshot]:
        ...


class JsonSnapshotDecoder:
    """Decoder for JSON encoded traces and dumps."""

    def decode(self, data: bytes) -> List[RawSnapshot]:
        """Decode JSON bytes into snapshot records.

        Raises:
            ParseError: MALFORMED if the bytes are not a valid trace or dump
        """
        try:
            payload = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ParseError(ParseErrorCode.MALFORMED, f"Trace is not valid JSON: {e}") from e

        snapshots = self._snapshot_items(payload)

        try:
            records = _SNAPSHOT_LIST.validate_python(snapshots)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise ParseError(
                ParseErrorCode.MALFORMED,
                f"Invalid snapshot record at {location}: {first['msg']}",
                context={"errors": e.error_count(), "location": location},
            ) from e

        logger.debug(f"Decoded {len(records)} snapshot record(s)")
        return records

    @staticmethod
    def _snapshot_items(payload: Any) -> List[Any]:
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict):
            if "entries" in payload:
                entries = payload["entries"]
                if not isinstance(entries, list):
                    raise ParseError(ParseErrorCode.MALFORMED, "'entries' must be a list of snapshots")
                return entries
            return [payload]
        raise ParseError(
            ParseErrorCode.MALFORMED,
            f"Expected a snapshot object or a list of snapshots, got {type(payload).__name__}",
        )
