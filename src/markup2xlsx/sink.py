"""Sheet sink: the spreadsheet surface the renderer writes to.

The layout engine only talks to a :class:`SheetSink`.  :class:`WorksheetSink`
implements it on top of an openpyxl worksheet, translating the renderer's
zero-based ``(x, y)`` coordinates into openpyxl's one-based rows and columns.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, NamedTuple, Optional, Protocol

from openpyxl.styles import Alignment, Border, PatternFill, Side
from openpyxl.utils.exceptions import IllegalCharacterError
from openpyxl.worksheet.worksheet import Worksheet

from markup2xlsx.errors import SinkFailure

if TYPE_CHECKING:
    from openpyxl.cell.cell import Cell
    from markup2xlsx.style_manager import CellStyle


class Region(NamedTuple):
    """Inclusive rectangle ``(x0, y0)``-``(x1, y1)`` of merged cells."""

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0 + 1

    @property
    def height(self) -> int:
        return self.y1 - self.y0 + 1

    def contains(self, x: int, y: int) -> bool:
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1

    def overlaps(self, other: Region) -> bool:
        return (
            self.x0 <= other.x1 and other.x0 <= self.x1
            and self.y0 <= other.y1 and other.y0 <= self.y1
        )


class SheetSink(Protocol):
    """Minimal worksheet capability required by the renderer."""

    def write(self, x: int, y: int, value: str) -> None: ...

    def set_style(self, x: int, y: int, style: CellStyle) -> None: ...

    def has_right_border(self, x: int, y: int) -> bool: ...

    def merge(self, region: Region) -> None: ...

    def merged_regions(self) -> list[Region]: ...

    def region_at(self, x: int, y: int) -> Optional[Region]: ...


@contextmanager
def _sink_errors(action: str, x: int, y: int) -> Iterator[None]:
    try:
        yield
    except (ValueError, TypeError, AttributeError, IllegalCharacterError) as exc:
        raise SinkFailure(f"Cannot {action} at ({x}, {y}): {exc}") from exc


class WorksheetSink:
    """:class:`SheetSink` backed by an openpyxl :class:`Worksheet`."""

    def __init__(self, worksheet: Worksheet) -> None:
        self.worksheet = worksheet

    # -- cells --------------------------------------------------------------

    def cell(self, x: int, y: int) -> Cell:
        """Return the cell at zero-based *(x, y)*, creating it if needed."""
        with _sink_errors("access cell", x, y):
            return self.worksheet.cell(row=y + 1, column=x + 1)

    def write(self, x: int, y: int, value: str) -> None:
        cell = self.cell(x, y)
        with _sink_errors("write", x, y):
            cell.value = value

    def set_style(self, x: int, y: int, style: CellStyle) -> None:
        cell = self.cell(x, y)
        with _sink_errors("style", x, y):
            cell.border = Border(
                top=Side(style=style.top),
                right=Side(style=style.right),
                bottom=Side(style=style.bottom),
                left=Side(style=style.left),
            )
            if style.fill:
                cell.fill = PatternFill(
                    fill_type="solid", start_color=style.fill, end_color=style.fill
                )
            else:
                cell.fill = PatternFill(fill_type=None)
            if style.horizontal:
                cell.alignment = Alignment(horizontal=style.horizontal)

    def has_right_border(self, x: int, y: int) -> bool:
        return self.cell(x, y).border.right.style is not None

    # -- merged regions -----------------------------------------------------

    def merge(self, region: Region) -> None:
        """Merge *region*; merging an already merged region is a no-op.

        Raises:
            SinkFailure: If *region* overlaps a different merged region.
        """
        for existing in self.merged_regions():
            if existing == region:
                return
            if existing.overlaps(region):
                raise SinkFailure(
                    f"Cannot merge {tuple(region)} over merged region {tuple(existing)}"
                )
        with _sink_errors("merge", region.x0, region.y0):
            self.worksheet.merge_cells(
                start_row=region.y0 + 1,
                start_column=region.x0 + 1,
                end_row=region.y1 + 1,
                end_column=region.x1 + 1,
            )

    def merged_regions(self) -> list[Region]:
        return [
            Region(r.min_col - 1, r.min_row - 1, r.max_col - 1, r.max_row - 1)
            for r in self.worksheet.merged_cells.ranges
        ]

    def region_at(self, x: int, y: int) -> Optional[Region]:
        """Return the merged region covering *(x, y)*, if any."""
        for region in self.merged_regions():
            if region.contains(x, y):
                return region
        return None
