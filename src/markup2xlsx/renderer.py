"""Sheet renderer - lays a markup tree out on a worksheet grid.

Every expression is rendered at an origin ``(x, y)`` and reports the
``(width, height)`` it occupies, so parents can place the next sibling
beside or below it.  Elements are dispatched on their :class:`Kind`;
tables go through :class:`TableHandler`, lists place their bullets after
their items have been laid out, and any other tag stacks its children
vertically.

Usage::

    from openpyxl import Workbook

    wb = Workbook()
    result = render(WorksheetSink(wb.active), 0, 0,
                    ["table", ["tr", ["td", {"size": 2}, "a"], ["td", {"size": 3}, "b"]]])
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Optional

from markup2xlsx.markup import (
    Element, Kind, RenderResult, classify, element_strategy, margin, normalize,
)
from markup2xlsx.session import RenderSession
from markup2xlsx.sink import SheetSink
from markup2xlsx.style_manager import StyleManager
from markup2xlsx.table_handler import TableHandler

logger = logging.getLogger(__name__)

DEFAULT_BULLET = "・"

_LIST_TAGS = ("ul", "ol")


def iter_list_items(tree: Any) -> Iterator[Element]:
    """Yield rendered ``li`` nodes of *tree* in document order.

    The walk does not descend into list items or nested lists: their
    bullets belong to the nested list.
    """
    if isinstance(tree, Element):
        if tree.tag == "li":
            yield tree
            return
        if tree.tag in _LIST_TAGS:
            return
        tree = tree.content
    if isinstance(tree, list):
        for child in tree:
            yield from iter_list_items(child)


class SheetRenderer:
    """Renders markup expressions into the sink of a :class:`RenderSession`."""

    def __init__(self, session: RenderSession) -> None:
        self.session = session
        self.sink = session.sink
        self.tables = TableHandler(self)

    # -- public API ---------------------------------------------------------

    def render(self, x: int, y: int, expr: Any) -> RenderResult:
        """Render *expr* with its top-left corner at *(x, y)*."""
        kind = classify(expr)
        if kind is Kind.EMPTY:
            return RenderResult(1, 1, "")
        if kind is Kind.LITERAL:
            return self.render_literal(x, y, expr if isinstance(expr, str) else str(expr))
        if kind is Kind.SEQUENCE:
            return self.render_sequence(x, y, expr)

        element = normalize(expr)
        logger.debug(
            "Rendering <%s> (%s, %s) at (%d, %d)",
            element.tag, kind.value, element_strategy(expr).value, x, y,
        )
        handler = getattr(self, f"_render_{kind.value}")
        return handler(x, y, element)

    def render_literal(self, x: int, y: int, literal: str) -> RenderResult:
        """Write *literal* downwards from *(x, y)*, one line per row."""
        lines = literal.split("\n")
        while len(lines) > 1 and not lines[-1]:
            lines.pop()
        for offset, line in enumerate(lines):
            self.sink.write(x, y + offset, line)
        return RenderResult(1, len(lines), literal)

    def render_sequence(self, x: int, y: int, exprs: Any) -> RenderResult:
        """Stack *exprs* vertically without margins.

        The reported width is that of the **last** child, not the widest.
        """
        items = list(exprs) or [None]
        cy = y
        width = 1
        children = []
        for item in items:
            width, height, child = self.render(x, cy, item)
            cy += height
            children.append(child)
        return RenderResult(width, cy - y, children)

    def layout_row(self, x: int, y: int, attrs: dict[str, Any], content: Any) -> RenderResult:
        """Lay *content* out left to right; height is the tallest child."""
        items = list(content) or [None]
        cx = x + margin(attrs, "margin-left")
        cy = y + margin(attrs, "margin-top")
        max_height = 0
        children = []
        for item in items:
            width, height, child = self.render(cx, cy, item)
            cx += width
            max_height = max(max_height, height)
            children.append(child)
        return RenderResult(cx - x, max_height, children)

    def layout_column(self, x: int, y: int, attrs: dict[str, Any], content: Any) -> RenderResult:
        """Lay *content* out top to bottom; width is the widest child."""
        items = list(content) or [None]
        cx = x + margin(attrs, "margin-left")
        cy = y + margin(attrs, "margin-top")
        max_width = 0
        children = []
        for item in items:
            width, height, child = self.render(cx, cy, item)
            cy += height
            max_width = max(max_width, width)
            children.append(child)
        return RenderResult(max_width, cy - y + margin(attrs, "margin-bottom"), children)

    # -- tag handlers -------------------------------------------------------

    def _render_table(self, x: int, y: int, element: Element) -> RenderResult:
        return self.tables.render_table(x, y, element)

    def _render_row(self, x: int, y: int, element: Element) -> RenderResult:
        return self.tables.render_row(x, y, element)

    def _render_cell(self, x: int, y: int, element: Element) -> RenderResult:
        return self.tables.render_cell(x, y, element)

    def _render_unordered_list(self, x: int, y: int, element: Element) -> RenderResult:
        bullet = str(element.attrs.get("list-style-type", DEFAULT_BULLET))
        return self._render_list(x, y, element, lambda _index: bullet)

    def _render_ordered_list(self, x: int, y: int, element: Element) -> RenderResult:
        return self._render_list(x, y, element, str)

    def _render_list(
        self, x: int, y: int, element: Element, bullet_for: Callable[[int], str]
    ) -> RenderResult:
        width, height, children = self.layout_column(x, y, element.attrs, element.content)
        for index, item in enumerate(iter_list_items(children), start=1):
            self.render_literal(item.attrs["x"], item.attrs["y"], bullet_for(index))
        return RenderResult(width, height, Element(element.tag, element.attrs, children))

    def _render_list_item(self, x: int, y: int, element: Element) -> RenderResult:
        # column x is left free for the bullet
        width, height, children = self.render(x + 1, y, element.content)
        attrs = {**element.attrs, "x": x, "y": y}
        return RenderResult(width + 1, height, Element(element.tag, attrs, children))

    def _render_generic(self, x: int, y: int, element: Element) -> RenderResult:
        width, height, children = self.layout_column(x, y, element.attrs, element.content)
        return RenderResult(width, height, Element(element.tag, element.attrs, children))


def render(
    sink: SheetSink,
    x: int,
    y: int,
    tree: Any,
    *,
    styles: Optional[StyleManager] = None,
) -> RenderResult:
    """Render *tree* into *sink* with its top-left corner at *(x, y)*.

    Each call runs in a fresh :class:`RenderSession`; pass *styles* to use
    custom style classes.

    Returns:
        ``(width, height, tree)`` where *tree* is the input annotated with
        resolved cell sizes and list item origins.
    """
    session = RenderSession(sink, styles if styles is not None else StyleManager())
    return SheetRenderer(session).render(x, y, tree)
