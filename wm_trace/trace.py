"""Ordered sequence of trace entries."""

from typing import Dict, Iterable, Iterator, Optional, Tuple

from .entry import TraceEntry
from .errors import EntryNotFoundError


class Trace:
    """
    Window manager trace: entries ordered by strictly increasing timestamp.

    Built once by the parser and read-only afterwards.

    Attributes:
        source: Name of the file or buffer the trace was parsed from
        checksum: xxh64 hex digest of the parsed bytes
    """

    def __init__(
        self,
        entries: Iterable[TraceEntry],
        source: Optional[str] = None,
        checksum: Optional[str] = None,
    ):
        self._entries: Tuple[TraceEntry, ...] = tuple(entries)
        self.source = source
        self.checksum = checksum

        for previous, current in zip(self._entries, self._entries[1:]):
            if current.timestamp <= previous.timestamp:
                raise ValueError(
                    f"Trace timestamps must be strictly increasing: "
                    f"{previous.timestamp} followed by {current.timestamp}"
                )
        self._by_timestamp: Dict[int, TraceEntry] = {e.timestamp: e for e in self._entries}

    @property
    def entries(self) -> Tuple[TraceEntry, ...]:
        return self._entries

    @property
    def timestamps(self) -> Tuple[int, ...]:
        return tuple(e.timestamp for e in self._entries)

    def get_entry(self, timestamp: int) -> TraceEntry:
        """Entry recorded at exactly ``timestamp``.

        Raises:
            EntryNotFoundError: If no entry has that timestamp
        """
        try:
            return self._by_timestamp[timestamp]
        except KeyError:
            raise EntryNotFoundError(timestamp, len(self._entries)) from None

    def first(self) -> TraceEntry:
        if not self._entries:
            raise IndexError("Trace is empty")
        return self._entries[0]

    def last(self) -> TraceEntry:
        if not self._entries:
            raise IndexError("Trace is empty")
        return self._entries[-1]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(self._entries)

    def __str__(self) -> str:
        source = f" from {self.source}" if self.source else ""
        return f"Trace({len(self._entries)} entries{source})"
