"""Unit tests for the region algebra."""

import pytest

from wm_trace.region import Rect, Region


class TestRect:
    """Tests for Rect."""

    def test_dimensions(self):
        rect = Rect(0, 0, 1440, 171)
        assert rect.width == 1440
        assert rect.height == 171
        assert rect.area == 1440 * 171
        assert not rect.is_empty

    def test_degenerate_rect_is_empty(self):
        assert Rect(10, 10, 10, 20).is_empty
        assert Rect(10, 10, 20, 10).is_empty
        assert Rect(10, 10, 10, 20).area == 0

    def test_from_list_requires_four_values(self):
        assert Rect.from_list([1, 2, 3, 4]) == Rect(1, 2, 3, 4)
        with pytest.raises(ValueError):
            Rect.from_list([1, 2, 3])

    def test_str(self):
        assert str(Rect(1440, 0, 1441, 171)) == "(1440,0,1441,171)"


class TestRegion:
    """Tests for Region construction and set operations."""

    def test_empty_region(self):
        region = Region()
        assert region.is_empty
        assert region.area == 0
        assert len(region) == 0
        assert str(region) == "Region()"

    def test_empty_rects_are_dropped(self):
        assert Region([Rect(0, 0, 0, 10)]).is_empty

    def test_subtract_reports_exact_difference(self):
        wanted = Region.from_bounds(0, 0, 1441, 171)
        status_bar = Region.from_bounds(0, 0, 1440, 171)

        uncovered = wanted - status_bar

        assert uncovered == Region.from_bounds(1440, 0, 1441, 171)
        assert str(uncovered) == "Region((1440,0,1441,171))"

    def test_subtract_covered_region_is_empty(self):
        screen = Region.from_bounds(0, 0, 1440, 2960)
        assert (Region.from_bounds(0, 0, 1440, 171) - screen).is_empty

    def test_subtract_hole_splits_into_bands(self):
        outer = Region.from_bounds(0, 0, 30, 30)
        hole = Region.from_bounds(10, 10, 20, 20)

        ring = outer - hole

        assert ring.rects == (
            Rect(0, 0, 30, 10),
            Rect(0, 10, 10, 20),
            Rect(20, 10, 30, 20),
            Rect(0, 20, 30, 30),
        )
        assert ring.area == 900 - 100

    def test_union_merges_adjacent_rects(self):
        top = Region.from_bounds(0, 0, 100, 50)
        bottom = Region.from_bounds(0, 50, 100, 100)

        assert (top | bottom) == Region.from_bounds(0, 0, 100, 100)

    def test_union_of_overlapping_rects_counts_area_once(self):
        a = Region.from_bounds(0, 0, 100, 100)
        b = Region.from_bounds(50, 50, 150, 150)

        assert (a | b).area == 100 * 100 * 2 - 50 * 50

    def test_intersect(self):
        a = Region.from_bounds(0, 0, 100, 100)
        b = Region.from_bounds(50, 50, 150, 150)

        assert (a & b) == Region.from_bounds(50, 50, 100, 100)
        assert (a & Region.from_bounds(200, 200, 300, 300)).is_empty

    def test_equal_regions_built_differently(self):
        split = Region([Rect(0, 0, 50, 100), Rect(50, 0, 100, 100)])
        whole = Region.from_bounds(0, 0, 100, 100)

        assert split == whole
        assert hash(split) == hash(whole)

    def test_contains(self):
        screen = Region.from_bounds(0, 0, 1440, 2960)
        assert screen.contains(Region.from_bounds(0, 0, 1440, 171))
        assert not screen.contains(Region.from_bounds(0, 0, 1441, 171))
        assert screen.contains(Region())

    def test_bounds(self):
        region = Region([Rect(0, 0, 10, 10), Rect(20, 30, 40, 50)])
        assert region.bounds == Rect(0, 0, 40, 50)
        assert Region().bounds == Rect(0, 0, 0, 0)

    def test_from_lists(self):
        region = Region.from_lists([[0, 0, 10, 10], [10, 0, 20, 10]])
        assert region == Region.from_bounds(0, 0, 20, 10)
