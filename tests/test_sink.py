"""Tests for the openpyxl-backed sheet sink."""

from __future__ import annotations

import pytest
from openpyxl import Workbook

from markup2xlsx.errors import SinkFailure
from markup2xlsx.sink import Region, WorksheetSink


@pytest.fixture
def sink():
    return WorksheetSink(Workbook().active)


class TestRegion:
    """Test merged-rectangle geometry."""

    def test_extent(self):
        region = Region(1, 2, 3, 2)
        assert (region.width, region.height) == (3, 1)

    @pytest.mark.parametrize(
        "other, expected",
        [
            (Region(2, 0, 2, 0), True),
            (Region(3, 0, 4, 0), False),
            (Region(0, 1, 2, 1), False),
            (Region(1, 0, 1, 5), True),
        ],
    )
    def test_overlaps(self, other, expected):
        assert Region(0, 0, 2, 0).overlaps(other) is expected
        assert other.overlaps(Region(0, 0, 2, 0)) is expected


class TestWorksheetSink:
    """Test coordinate mapping and merge bookkeeping."""

    def test_zero_based_coordinates(self, sink):
        sink.write(1, 2, "x")
        assert sink.worksheet["B3"].value == "x"

    def test_merge_and_lookup(self, sink):
        sink.merge(Region(1, 0, 3, 1))
        assert sink.merged_regions() == [Region(1, 0, 3, 1)]
        assert sink.region_at(3, 1) == Region(1, 0, 3, 1)
        assert sink.region_at(0, 0) is None

    def test_adjacent_merges_are_allowed(self, sink):
        sink.merge(Region(0, 0, 1, 0))
        sink.merge(Region(2, 0, 4, 0))
        assert len(sink.merged_regions()) == 2

    def test_repeated_merge_is_a_no_op(self, sink):
        sink.merge(Region(0, 0, 1, 0))
        sink.merge(Region(0, 0, 1, 0))
        assert sink.merged_regions() == [Region(0, 0, 1, 0)]

    def test_overlapping_merge_is_rejected(self, sink):
        sink.merge(Region(0, 0, 1, 0))
        with pytest.raises(SinkFailure, match="over merged region"):
            sink.merge(Region(0, 0, 2, 0))
        assert [str(r) for r in sink.worksheet.merged_cells.ranges] == ["A1:B1"]
