"""markup2xlsx - lay markup trees out on spreadsheet grids."""

from __future__ import annotations

__version__ = "0.1.0"

from markup2xlsx.errors import (  # noqa: E402
    InvalidElementName,
    Markup2XlsxError,
    SinkFailure,
    UnsupportedAlignment,
)
from markup2xlsx.markup import Element, RenderResult, normalize  # noqa: E402
from markup2xlsx.renderer import render  # noqa: E402
from markup2xlsx.sink import WorksheetSink  # noqa: E402
from markup2xlsx.style_manager import StyleManager, apply_style  # noqa: E402

__all__ = [
    "Element",
    "InvalidElementName",
    "Markup2XlsxError",
    "RenderResult",
    "SinkFailure",
    "StyleManager",
    "UnsupportedAlignment",
    "WorksheetSink",
    "__version__",
    "apply_style",
    "normalize",
    "render",
]
