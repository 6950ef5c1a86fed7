"""Tests for the sheet renderer (layout engine)."""

from __future__ import annotations

import pytest
from openpyxl import Workbook

from markup2xlsx.errors import InvalidElementName, SinkFailure, UnsupportedAlignment
from markup2xlsx.markup import Element
from markup2xlsx.renderer import DEFAULT_BULLET, iter_list_items, render
from markup2xlsx.sink import Region, WorksheetSink
from markup2xlsx.style_manager import StyleManager


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def sink() -> WorksheetSink:
    return WorksheetSink(Workbook().active)


class UntouchableSink:
    """Sink double that fails on any access."""

    def __getattr__(self, name: str):
        raise AssertionError(f"sink.{name} should not be used")


def value(sink: WorksheetSink, x: int, y: int):
    return sink.cell(x, y).value


def right_border(sink: WorksheetSink, x: int, y: int):
    return sink.cell(x, y).border.right.style


def td(content, **attrs):
    return ["td", attrs, content]


# ---------------------------------------------------------------------------
# Literals, empties and sequences
# ---------------------------------------------------------------------------

class TestLiterals:
    """Test literal and empty expressions."""

    def test_multiline_literal(self, sink: WorksheetSink):
        result = render(sink, 2, 3, "hello\nworld")
        assert tuple(result) == (1, 2, "hello\nworld")
        assert value(sink, 2, 3) == "hello"
        assert value(sink, 2, 4) == "world"

    def test_trailing_newline_is_not_a_row(self, sink: WorksheetSink):
        assert render(sink, 0, 0, "a\n").height == 1

    def test_none_renders_nothing(self):
        assert tuple(render(UntouchableSink(), 5, 5, None)) == (1, 1, "")

    def test_scalars_are_written_as_text(self, sink: WorksheetSink):
        result = render(sink, 0, 0, 42)
        assert result.tree == "42"
        assert value(sink, 0, 0) == "42"


class TestSequences:
    """Test vertical stacking of bare sequences."""

    def test_children_stack_vertically(self, sink: WorksheetSink):
        result = render(sink, 1, 0, ("a", "b\nc", "d"))
        assert result.height == 4
        assert result.tree == ["a", "b\nc", "d"]
        assert [value(sink, 1, y) for y in range(4)] == ["a", "b", "c", "d"]

    def test_sequence_reports_last_child_width(self, sink: WorksheetSink):
        wide = ["tr", td("a", size=3)]
        assert render(sink, 0, 0, (wide, "b")).width == 1
        assert render(sink, 0, 5, ("b", wide)).width == 3

    def test_empty_sequence_is_one_absent_child(self, sink: WorksheetSink):
        assert tuple(render(sink, 0, 0, ())) == (1, 1, [""])

    def test_generator_content(self, sink: WorksheetSink):
        result = render(sink, 0, 0, ["div", (str(i) for i in range(3))])
        assert result.height == 3
        assert value(sink, 0, 2) == "2"


# ---------------------------------------------------------------------------
# Generic containers and margins
# ---------------------------------------------------------------------------

class TestGeneric:
    """Test tags without a dedicated handler."""

    def test_unknown_tag_stacks_vertically(self, sink: WorksheetSink):
        result = render(sink, 0, 0, ["section#s.wide", "a", "b"])
        assert (result.width, result.height) == (1, 2)
        assert result.tree == Element("section", {"id": "s", "class": "wide"}, ["a", "b"])

    def test_vertical_margins(self, sink: WorksheetSink):
        result = render(sink, 0, 0, ["div", {"margin-left": 1, "margin-top": 2, "margin-bottom": 1}, "a"])
        assert value(sink, 1, 2) == "a"
        assert result.height == 4
        assert result.width == 1

    def test_row_margin_counts_in_width(self, sink: WorksheetSink):
        result = render(sink, 0, 0, ["tr", {"margin-left": 2}, td("a", size=2)])
        assert result.width == 4
        assert value(sink, 2, 0) == "a"
        assert right_border(sink, 3, 0) == "thin"

    def test_row_margin_none_is_zero(self, sink: WorksheetSink):
        result = render(sink, 0, 0, ["tr", {"margin-left": None, "margin-top": None}, td("a", size=1)])
        assert (result.width, result.height) == (1, 1)
        assert value(sink, 0, 0) == "a"
        assert right_border(sink, 0, 0) == "thin"

    def test_widest_child_wins(self, sink: WorksheetSink):
        result = render(sink, 0, 0, ["div", ["tr", td("a", size=4)], "b"])
        assert (result.width, result.height) == (4, 2)

    def test_invalid_element_aborts(self, sink: WorksheetSink):
        with pytest.raises(InvalidElementName):
            render(sink, 0, 0, ["div", [["td"], "x"]])

    def test_empty_element_is_invalid(self, sink: WorksheetSink):
        with pytest.raises(InvalidElementName):
            render(sink, 0, 0, [])


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

class TestTables:
    """Test table, row and cell layout and painting."""

    def test_explicit_sizes_define_extent(self, sink: WorksheetSink):
        table = [
            "table",
            ["tr", td("a", size=2), td("b", size=3)],
            ["tr", td("c", size=4), td("d\ne", size=2)],
        ]
        result = render(sink, 0, 0, table)
        assert (result.width, result.height) == (6, 3)

    def test_row_paints_one_box_per_cell(self, sink: WorksheetSink):
        render(sink, 0, 0, ["tr", td("a", size=2), td("b", size=3)])
        assert value(sink, 0, 0) == "a"
        assert value(sink, 2, 0) == "b"
        assert right_border(sink, 0, 0) is None
        assert right_border(sink, 1, 0) == "thin"
        assert sink.cell(2, 0).border.left.style == "thin"
        assert right_border(sink, 4, 0) == "thin"

    def test_row_boxes_span_row_height(self, sink: WorksheetSink):
        render(sink, 0, 0, ["tr", td("a", size=1), td("x\ny\nz", size=1)])
        assert sink.cell(0, 2).border.bottom.style == "thin"
        assert sink.cell(0, 1).border.bottom.style is None

    def test_cell_annotated_with_resolved_size(self, sink: WorksheetSink):
        result = render(sink, 0, 0, ["tr", ["td.num", {"size": "2"}, "1"]])
        cell = result.tree.content[0]
        assert cell == Element("td", {"class": "num", "size": 2}, ["1"])

    def test_width_inferred_from_row_above(self, sink: WorksheetSink):
        table = [
            "table",
            ["tr", td("a", size=2), td("b", size=3)],
            ["tr", ["td", "c"], ["td", "d"]],
        ]
        result = render(sink, 0, 0, table)
        second_row = result.tree.content[1]
        assert [c.attrs["size"] for c in second_row.content] == [2, 3]
        assert result.width == 5

    def test_colspan_covers_blocks_above(self, sink: WorksheetSink):
        table = [
            "table",
            ["tr", td("a", size=2), td("b", size=3), td("c", size=1)],
            ["tr", td("wide", colspan=2), ["td", "end"]],
        ]
        result = render(sink, 0, 0, table)
        sizes = [c.attrs["size"] for c in result.tree.content[1].content]
        assert sizes == [5, 1]

    def test_centered_cell_is_merged(self, sink: WorksheetSink):
        table = [
            "table",
            ["tr", td("title", size=3, **{"text-align": "center"})],
            ["tr", ["td", "below"]],
        ]
        result = render(sink, 0, 0, table)
        assert sink.merged_regions() == [Region(0, 0, 2, 0)]
        assert sink.cell(0, 0).alignment.horizontal == "center"
        assert result.tree.content[1].content[0].attrs["size"] == 3

    def test_nested_centered_blocks_cannot_overlap(self, sink: WorksheetSink):
        inner = ["table", ["tr", td("a", size=2, **{"text-align": "center"})]]
        outer = ["tr", td(inner, size=3, **{"text-align": "center"})]
        with pytest.raises(SinkFailure):
            render(sink, 0, 0, outer)
        assert sink.merged_regions() == [Region(0, 0, 1, 0)]

    def test_first_row_without_sizes(self, sink: WorksheetSink):
        result = render(sink, 0, 0, ["tr", ["td", "a"], ["td", "b"]])
        assert result.width == 2
        assert value(sink, 1, 0) == "b"

    def test_unsupported_alignment_aborts(self, sink: WorksheetSink):
        with pytest.raises(UnsupportedAlignment):
            render(sink, 0, 0, ["tr", td("a", size=2, **{"text-align": "justify"})])

    def test_custom_style_class(self, sink: WorksheetSink):
        styles = StyleManager()
        styles.register_style_class("total", border_type="double")
        render(sink, 0, 0, ["tr", ["td.total", {"size": 1}, "9"]], styles=styles)
        assert right_border(sink, 0, 0) == "double"

    def test_renders_do_not_leak_styled_cells(self, sink: WorksheetSink):
        row = ["tr", td("a", size=1)]
        render(sink, 0, 0, row)
        render(sink, 0, 0, row, styles=StyleManager("thick"))
        assert right_border(sink, 0, 0) == "medium"


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

class TestLists:
    """Test list bullets and list item placement."""

    def test_ordered_list_numbers_items(self, sink: WorksheetSink):
        result = render(sink, 0, 0, ["ol", ["li", "a"], ["li", "b"], ["li", "c"]])
        assert [value(sink, 0, y) for y in range(3)] == ["1", "2", "3"]
        assert [value(sink, 1, y) for y in range(3)] == ["a", "b", "c"]
        assert (result.width, result.height) == (2, 3)

    def test_unordered_list_default_bullet(self, sink: WorksheetSink):
        render(sink, 0, 0, ["ul", ["li", "a"], ["li", "b"]])
        assert value(sink, 0, 0) == DEFAULT_BULLET
        assert value(sink, 0, 1) == DEFAULT_BULLET

    def test_list_item_width_includes_bullet_column(self, sink: WorksheetSink):
        # the item reports content width + 1 rather than the bare content width
        result = render(sink, 0, 0, ["li", ["tr", td("a", size=3)]])
        assert (result.width, result.height) == (4, 1)
        assert value(sink, 1, 0) == "a"
        assert right_border(sink, 3, 0) == "thin"

    def test_list_style_type(self, sink: WorksheetSink):
        render(sink, 3, 1, ["ul", {"list-style-type": "-"}, ["li", "a"]])
        assert value(sink, 3, 1) == "-"
        assert value(sink, 4, 1) == "a"

    def test_multiline_item_advances_next_bullet(self, sink: WorksheetSink):
        render(sink, 0, 0, ["ol", ["li", "a\nb"], ["li", "c"]])
        assert value(sink, 0, 2) == "2"
        assert value(sink, 0, 1) is None

    def test_list_item_records_origin(self, sink: WorksheetSink):
        result = render(sink, 2, 4, ["li.x", "a"])
        assert result.tree == Element("li", {"class": "x", "x": 2, "y": 4}, ["a"])

    def test_items_inside_wrappers_are_found(self, sink: WorksheetSink):
        render(sink, 0, 0, ["ol", ["div", ["li", "a"], ["li", "b"]]])
        assert value(sink, 0, 1) == "2"

    def test_nested_list_keeps_its_own_numbering(self, sink: WorksheetSink):
        tree = ["ul", ["li", "a", ["ol", ["li", "x"], ["li", "y"]]], ["li", "b"]]
        render(sink, 0, 0, tree)
        assert value(sink, 0, 0) == DEFAULT_BULLET
        assert value(sink, 0, 1) is None
        assert value(sink, 1, 1) == "1"
        assert value(sink, 1, 2) == "2"
        assert value(sink, 2, 2) == "y"
        assert value(sink, 0, 3) == DEFAULT_BULLET

    def test_iter_list_items_skips_nested_lists(self):
        inner = Element("li", {"x": 1, "y": 1}, ["x"])
        outer = Element("li", {"x": 0, "y": 0}, ["a"])
        tree = [outer, Element("ol", {}, [inner]), "text"]
        assert list(iter_list_items(tree)) == [outer]
