"""Column-span inference for cells without an explicit ``size``.

A cell whose width is not given mirrors the column boundaries of the row
directly above it: a merged region above counts as one block, otherwise a
block runs rightward up to (and including) the first cell carrying a right
border.
"""

from __future__ import annotations

import logging

from markup2xlsx.sink import SheetSink

logger = logging.getLogger(__name__)

# Highest zero-based column the scan may reach (XLS column limit).
COLUMN_CAP = 255


def infer_width(sink: SheetSink, x: int, y: int, colspan: int = 1) -> int:
    """Return how many columns starting at *x* cover *colspan* blocks above.

    The scan never passes :data:`COLUMN_CAP`; reaching it ends the scan
    silently.  On the first row there is nothing to mirror and every block
    is one column wide.
    """
    colspan = max(1, colspan)
    if y <= 0:
        return colspan

    above = y - 1
    cx = x
    units = 0
    while True:
        region = sink.region_at(cx, above)
        if region is not None:
            end = min(region.x1, max(cx, COLUMN_CAP))
        elif sink.has_right_border(cx, above) or cx >= COLUMN_CAP:
            end = cx
        else:
            cx += 1
            continue

        units += 1
        if units >= colspan or end >= COLUMN_CAP:
            width = end - x + 1
            logger.debug("Inferred width %d at (%d, %d), colspan %d", width, x, y, colspan)
            return width
        cx = end + 1
