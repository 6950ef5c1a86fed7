"""Layout of ``table``, ``tr`` and ``td`` elements.

Tables stack their rows vertically.  A row lays its cells out left to
right, then paints every cell as a bordered block spanning the full row
height.  A cell takes its width from ``colspan`` (inferred from the row
above), an explicit ``size``, or a single inferred block.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from markup2xlsx.markup import Element, RenderResult, margin
from markup2xlsx.size_inference import infer_width
from markup2xlsx.style_manager import apply_style

if TYPE_CHECKING:
    from markup2xlsx.renderer import SheetRenderer

logger = logging.getLogger(__name__)


class TableHandler:
    """Renders table elements on behalf of a :class:`SheetRenderer`."""

    # Painted width of a row child that is not a ``td``.
    default_cell_size = 3

    def __init__(self, renderer: SheetRenderer) -> None:
        self.renderer = renderer
        self.session = renderer.session

    def render_table(self, x: int, y: int, element: Element) -> RenderResult:
        """Stack the rows of a ``table`` element."""
        width, height, rows = self.renderer.layout_column(x, y, element.attrs, element.content)
        return RenderResult(width, height, Element(element.tag, element.attrs, rows))

    def render_row(self, x: int, y: int, element: Element) -> RenderResult:
        """Lay out a ``tr`` element and paint each of its cells.

        Every cell is styled over the whole row height, so a short cell
        next to a multi-line one still forms a full-height block.
        """
        width, height, cells = self.renderer.layout_row(x, y, element.attrs, element.content)

        cx = x + margin(element.attrs, "margin-left")
        cy = y + margin(element.attrs, "margin-top")
        for cell in cells:
            if isinstance(cell, Element) and "size" in cell.attrs:
                size, cell_attrs = cell.attrs["size"], cell.attrs
            else:
                size, cell_attrs = self.default_cell_size, {}
            apply_style(self.session, cx, cy, size, height, cell_attrs)
            cx += size

        return RenderResult(width, height, Element(element.tag, element.attrs, cells))

    def render_cell(self, x: int, y: int, element: Element) -> RenderResult:
        """Render a ``td`` element and resolve its column span.

        The content is rendered first so the row learns its height; the
        width is resolved afterwards and recorded as the ``size`` attribute
        of the returned element.
        """
        _, height, child = self.renderer.render(x, y, element.content)

        attrs = element.attrs
        sink = self.session.sink
        if attrs.get("colspan"):
            size = infer_width(sink, x, y, colspan=int(attrs["colspan"]))
        elif attrs.get("size"):
            size = max(1, int(attrs["size"]))
        else:
            size = infer_width(sink, x, y)

        logger.debug("Cell at (%d, %d) spans %d columns", x, y, size)
        return RenderResult(size, height, Element(element.tag, {**attrs, "size": size}, child))
