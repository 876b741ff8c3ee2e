"""Axis-aligned region algebra over screen coordinates.

A Region is a set of half-open rectangles kept in canonical y-x banded form:
rectangles are grouped into horizontal bands, each band holds sorted,
disjoint, non-touching x-intervals, and vertically adjacent bands with the
same intervals are coalesced. Two regions covering the same area therefore
have the same representation, which makes equality and the string form
stable enough to use in assertion messages.

Boolean operations are computed with a sweep over the y-edges of both
operands, combining the x-intervals of every band.

Examples:
    >>> status_bar = Region.from_bounds(0, 0, 1440, 171)
    >>> str(Region.from_bounds(0, 0, 1441, 171) - status_bar)
    'Region((1440,0,1441,171))'
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Sequence, Tuple

Interval = Tuple[int, int]
IntervalOp = Callable[[List[Interval], List[Interval]], List[Interval]]


@dataclass(frozen=True)
class Rect:
    """Half-open rectangle [left, right) x [top, bottom)."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def area(self) -> int:
        return 0 if self.is_empty else self.width * self.height

    @classmethod
    def from_list(cls, values: Sequence[int]) -> "Rect":
        """Build a rect from a [left, top, right, bottom] sequence."""
        if len(values) != 4:
            raise ValueError(f"Rect needs 4 coordinates, got {len(values)}")
        left, top, right, bottom = values
        return cls(int(left), int(top), int(right), int(bottom))

    def to_list(self) -> List[int]:
        return [self.left, self.top, self.right, self.bottom]

    def __str__(self) -> str:
        return f"({self.left},{self.top},{self.right},{self.bottom})"


def _merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Sort intervals and merge the overlapping or touching ones."""
    merged: List[Interval] = []
    for left, right in sorted(intervals):
        if merged and left <= merged[-1][1]:
            if right > merged[-1][1]:
                merged[-1] = (merged[-1][0], right)
        else:
            merged.append((left, right))
    return merged


def _union_intervals(a: List[Interval], b: List[Interval]) -> List[Interval]:
    return _merge_intervals(a + b)


def _subtract_intervals(a: List[Interval], b: List[Interval]) -> List[Interval]:
    result: List[Interval] = []
    for left, right in a:
        cursor = left
        for cut_left, cut_right in b:
            if cut_right <= cursor:
                continue
            if cut_left >= right:
                break
            if cut_left > cursor:
                result.append((cursor, cut_left))
            cursor = cut_right
            if cursor >= right:
                break
        if cursor < right:
            result.append((cursor, right))
    return result


def _intersect_intervals(a: List[Interval], b: List[Interval]) -> List[Interval]:
    result: List[Interval] = []
    i = j = 0
    while i < len(a) and j < len(b):
        low = max(a[i][0], b[j][0])
        high = min(a[i][1], b[j][1])
        if low < high:
            result.append((low, high))
        if a[i][1] < b[j][1]:
            i += 1
        else:
            j += 1
    return result


def _sweep(a: Sequence[Rect], b: Sequence[Rect], op: IntervalOp) -> List[Rect]:
    """Combine two rect sets band by band and return canonical rects."""
    edges = sorted({r.top for r in (*a, *b)} | {r.bottom for r in (*a, *b)})

    bands: List[Tuple[int, int, List[Interval]]] = []
    for y0, y1 in zip(edges, edges[1:]):
        a_spans = _merge_intervals(
            (r.left, r.right) for r in a if r.top <= y0 and r.bottom >= y1
        )
        b_spans = _merge_intervals(
            (r.left, r.right) for r in b if r.top <= y0 and r.bottom >= y1
        )
        spans = op(a_spans, b_spans)
        if not spans:
            continue
        if bands and bands[-1][1] == y0 and bands[-1][2] == spans:
            bands[-1] = (bands[-1][0], y1, spans)
        else:
            bands.append((y0, y1, spans))

    return [
        Rect(left, top, right, bottom)
        for top, bottom, spans in bands
        for left, right in spans
    ]


class Region:
    """Union of axis-aligned rectangles, possibly non-convex."""

    __slots__ = ("_rects",)

    def __init__(self, rects: Iterable[Rect] = ()):
        non_empty = [r for r in rects if not r.is_empty]
        self._rects: Tuple[Rect, ...] = tuple(
            _sweep(non_empty, (), _union_intervals)
        )

    @classmethod
    def from_bounds(cls, left: int, top: int, right: int, bottom: int) -> "Region":
        """Region made of a single rectangle."""
        return cls([Rect(left, top, right, bottom)])

    @classmethod
    def from_lists(cls, rects: Iterable[Sequence[int]]) -> "Region":
        """Region from [left, top, right, bottom] lists, as found in raw records."""
        return cls(Rect.from_list(values) for values in rects)

    @classmethod
    def _from_canonical(cls, rects: List[Rect]) -> "Region":
        region = cls.__new__(cls)
        region._rects = tuple(rects)
        return region

    @property
    def rects(self) -> Tuple[Rect, ...]:
        return self._rects

    @property
    def is_empty(self) -> bool:
        return not self._rects

    @property
    def area(self) -> int:
        return sum(r.area for r in self._rects)

    @property
    def bounds(self) -> Rect:
        """Smallest rect enclosing the region (empty rect for an empty region)."""
        if not self._rects:
            return Rect(0, 0, 0, 0)
        return Rect(
            min(r.left for r in self._rects),
            min(r.top for r in self._rects),
            max(r.right for r in self._rects),
            max(r.bottom for r in self._rects),
        )

    def union(self, other: "Region") -> "Region":
        return Region._from_canonical(_sweep(self._rects, other._rects, _union_intervals))

    def subtract(self, other: "Region") -> "Region":
        """Area of this region not covered by ``other``."""
        return Region._from_canonical(_sweep(self._rects, other._rects, _subtract_intervals))

    def intersect(self, other: "Region") -> "Region":
        return Region._from_canonical(_sweep(self._rects, other._rects, _intersect_intervals))

    def contains(self, other: "Region") -> bool:
        """True if every point of ``other`` lies inside this region."""
        return other.subtract(self).is_empty

    __or__ = union
    __sub__ = subtract
    __and__ = intersect

    def __iter__(self) -> Iterator[Rect]:
        return iter(self._rects)

    def __len__(self) -> int:
        return len(self._rects)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Region):
            return NotImplemented
        return self._rects == other._rects

    def __hash__(self) -> int:
        return hash(self._rects)

    def __str__(self) -> str:
        return "Region(" + "".join(str(r) for r in self._rects) + ")"

    __repr__ = __str__
