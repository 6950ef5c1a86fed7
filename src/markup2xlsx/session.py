"""Per-render state shared by the layout engine and the cell painter."""

from __future__ import annotations

from dataclasses import dataclass, field

from markup2xlsx.sink import SheetSink
from markup2xlsx.style_manager import StyleManager


@dataclass
class RenderSession:
    """Sink, style classes and already-painted coordinates of one render.

    A session is created per render so that style classes and the styled
    coordinate set never leak between independent renders.
    """

    sink: SheetSink
    styles: StyleManager = field(default_factory=StyleManager)
    styled: set[tuple[int, int]] = field(default_factory=set)
