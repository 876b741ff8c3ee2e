"""
Error types for the window manager trace checker.

Two failure classes are kept apart:

- Structural failures (malformed input, broken container hierarchy) raise
  ParseError with a ParseErrorCode. They abort parsing of the whole trace.
- Assertion failures are never raised. They are described by ErrorRecord
  values attached to failed assertion results and accumulated by callers.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ParseErrorCode(Enum):
    """
    Reason codes for parse failures.

    - MALFORMED: bytes could not be decoded into snapshot records
    - MISSING_PARENT: a record references a parent id that does not exist
    - CYCLE: a record is its own ancestor
    - WRONG_PARENT_KIND: a typed container is linked under a forbidden parent
    - SNAPSHOT_COUNT: a dump does not hold exactly one snapshot
    - DUPLICATE_ID: two records of one snapshot share a container id
    - TIMESTAMP_ORDER: trace timestamps are not strictly increasing
    """

    MALFORMED = "malformed"
    MISSING_PARENT = "missing_parent"
    CYCLE = "cycle"
    WRONG_PARENT_KIND = "wrong_parent_kind"
    SNAPSHOT_COUNT = "snapshot_count"
    DUPLICATE_ID = "duplicate_id"
    TIMESTAMP_ORDER = "timestamp_order"


class ParseError(Exception):
    """Raised when a trace or dump cannot be turned into a container tree."""

    def __init__(
        self,
        code: ParseErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize parse error.

        Args:
            code: Reason code from ParseErrorCode
            message: Human-readable description naming the offending record
            context: Entry index, timestamp, container id and similar details
        """
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        result: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.context:
            result["context"] = self.context
        return result

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class ContainerContractError(ValueError):
    """Raised when a container is linked under a parent its kind forbids."""


class EntryNotFoundError(LookupError):
    """Raised when a trace holds no entry for the requested timestamp."""

    def __init__(self, timestamp: int, entry_count: int):
        self.timestamp = timestamp
        self.entry_count = entry_count
        super().__init__(
            f"No trace entry with timestamp {timestamp} ({entry_count} entries available)"
        )


@dataclass(frozen=True)
class ErrorRecord:
    """
    Error identified in a window manager trace.

    Attributes:
        stacktrace: Call stack or context identifying where the error was found
        message: Short explanation of the error
        layer_id: Layer the error is associated with
        window_token: Window the error is associated with
        task_id: Task the error is associated with
        assertion_name: Name of the assertion that produced the error
    """
    stacktrace: str
    message: str
    layer_id: Optional[int] = None
    window_token: Optional[str] = None
    task_id: Optional[int] = None
    assertion_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)
