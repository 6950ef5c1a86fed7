"""Style classes and the cell painter.

A style class is precomputed as 16 :class:`CellStyle` variants, one per
edge bitmask (bit0 top, bit1 right, bit2 bottom, bit3 left).  Painting a
rectangle picks, for every cell, the variant whose bits match the sides of
the rectangle that cell lies on, so a block of cells reads as one bordered
box.  Presets (default, thick, minimal) decide which classes a fresh
:class:`StyleManager` starts with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Optional

from openpyxl.styles import Side

from markup2xlsx.errors import UnsupportedAlignment
from markup2xlsx.sink import Region

if TYPE_CHECKING:
    from markup2xlsx.session import RenderSession

logger = logging.getLogger(__name__)

BORDER_TOP = 1
BORDER_RIGHT = 2
BORDER_BOTTOM = 4
BORDER_LEFT = 8
FULL_BORDER = BORDER_TOP | BORDER_RIGHT | BORDER_BOTTOM | BORDER_LEFT

DEFAULT_CLASS = "default"

ALIGNMENTS = ("left", "center", "right")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CellStyle:
    """Border, fill and alignment of a single cell.

    Border values are openpyxl side styles (``"thin"``, ``"medium"``, ...)
    or ``None`` for no border on that side.
    """

    top: Optional[str] = None
    right: Optional[str] = None
    bottom: Optional[str] = None
    left: Optional[str] = None
    fill: Optional[str] = None
    horizontal: Optional[str] = None

    def derive(self, **overrides: Any) -> CellStyle:
        """Return a copy with selected fields overridden."""
        return replace(self, **overrides)

    @property
    def border_mask(self) -> int:
        return (
            (BORDER_TOP if self.top else 0)
            | (BORDER_RIGHT if self.right else 0)
            | (BORDER_BOTTOM if self.bottom else 0)
            | (BORDER_LEFT if self.left else 0)
        )


@dataclass(frozen=True)
class StyleClass:
    """A named set of 16 edge variants."""

    name: str
    variants: tuple[CellStyle, ...]

    def variant(self, mask: int) -> CellStyle:
        return self.variants[mask]

    @property
    def full_border(self) -> CellStyle:
        """Variant used for the top-left cell of a merged block."""
        return self.variants[FULL_BORDER]


def build_style_class(
    name: str,
    border_type: str = "thin",
    background_color: Optional[str] = None,
) -> StyleClass:
    """Precompute the 16 edge variants of a style class.

    Raises:
        ValueError: If *border_type* is not an openpyxl side style.
    """
    Side(style=border_type)
    variants = tuple(
        CellStyle(
            top=border_type if mask & BORDER_TOP else None,
            right=border_type if mask & BORDER_RIGHT else None,
            bottom=border_type if mask & BORDER_BOTTOM else None,
            left=border_type if mask & BORDER_LEFT else None,
            fill=background_color,
        )
        for mask in range(16)
    )
    return StyleClass(name=name, variants=variants)


# ---------------------------------------------------------------------------
# Preset definitions
# ---------------------------------------------------------------------------

def _build_default_styles() -> dict[str, StyleClass]:
    """Build the **default** preset -- thin grid, grey header."""
    return {
        DEFAULT_CLASS: build_style_class(DEFAULT_CLASS, "thin"),
        "header": build_style_class("header", "thin", "D9D9D9"),
    }


def _build_thick_styles() -> dict[str, StyleClass]:
    """Build the **thick** preset -- medium borders, darker header."""
    return {
        DEFAULT_CLASS: build_style_class(DEFAULT_CLASS, "medium"),
        "header": build_style_class("header", "medium", "BFBFBF"),
    }


def _build_minimal_styles() -> dict[str, StyleClass]:
    """Build the **minimal** preset -- hairline borders."""
    return {
        DEFAULT_CLASS: build_style_class(DEFAULT_CLASS, "hair"),
        "header": build_style_class("header", "hair", "F2F2F2"),
    }


_PRESET_BUILDERS = {
    "default": _build_default_styles,
    "thick": _build_thick_styles,
    "minimal": _build_minimal_styles,
}


# ---------------------------------------------------------------------------
# StyleManager
# ---------------------------------------------------------------------------

class StyleManager:
    """Registry of style classes for one render session.

    Usage::

        sm = StyleManager("thick")
        sm.register_style_class("total", border_type="double")
        cls = sm.get_style_class("num total")
    """

    PRESETS = list(_PRESET_BUILDERS.keys())

    def __init__(self, preset: str = "default") -> None:
        if preset not in _PRESET_BUILDERS:
            raise ValueError(
                f"Unknown preset {preset!r}. Choose from: {', '.join(_PRESET_BUILDERS)}"
            )
        self.preset = preset
        self._classes: dict[str, StyleClass] = _PRESET_BUILDERS[preset]()

    def register_style_class(
        self,
        name: str,
        border_type: str = "thin",
        background_color: Optional[str] = None,
    ) -> StyleClass:
        """Create (or replace) the style class *name*."""
        style_class = build_style_class(name, border_type, background_color)
        self._classes[name] = style_class
        return style_class

    def get_style_class(self, class_attr: Optional[str] = None) -> StyleClass:
        """Resolve a ``class`` attribute to a registered style class.

        The whole attribute is tried first, then each space-separated name
        in order; falls back to ``default``.
        """
        if class_attr:
            if class_attr in self._classes:
                return self._classes[class_attr]
            for name in class_attr.split():
                if name in self._classes:
                    return self._classes[name]
        return self._classes[DEFAULT_CLASS]

    def list_style_names(self) -> list[str]:
        return sorted(self._classes.keys())


# ---------------------------------------------------------------------------
# Painting
# ---------------------------------------------------------------------------

def edge_mask(cx: int, cy: int, x: int, y: int, w: int, h: int) -> int:
    """Bitmask of the rectangle sides that cell *(cx, cy)* lies on."""
    return (
        (BORDER_TOP if cy == y else 0)
        | (BORDER_RIGHT if cx == x + w - 1 else 0)
        | (BORDER_BOTTOM if cy == y + h - 1 else 0)
        | (BORDER_LEFT if cx == x else 0)
    )


def _paint_cells(
    session: RenderSession, x: int, y: int, w: int, h: int, style_class: StyleClass
) -> None:
    for cx in range(x, x + w):
        for cy in range(y, y + h):
            if (cx, cy) in session.styled:
                continue
            mask = edge_mask(cx, cy, x, y, w, h)
            session.sink.set_style(cx, cy, style_class.variant(mask))
            session.styled.add((cx, cy))


def apply_style(
    session: RenderSession,
    x: int,
    y: int,
    w: int,
    h: int,
    attrs: dict[str, Any],
) -> None:
    """Paint the ``w`` x ``h`` block at *(x, y)* with the block's class.

    Left-aligned (or unaligned) blocks are painted cell by cell.  Centred
    and right-aligned blocks are painted the same way, then merged, and the
    merged cell gets the full-border variant with the requested alignment.

    Raises:
        UnsupportedAlignment: If ``text-align`` is not left, center or right.
    """
    align = attrs.get("text-align") or "left"
    if align not in ALIGNMENTS:
        raise UnsupportedAlignment(align)

    style_class = session.styles.get_style_class(attrs.get("class"))
    logger.debug(
        "Styling %dx%d block at (%d, %d) with class %r, align %s",
        w, h, x, y, style_class.name, align,
    )
    _paint_cells(session, x, y, w, h, style_class)
    if align == "left":
        return

    # openpyxl copies the top-left borders onto the block edges when merging
    session.sink.set_style(x, y, style_class.full_border.derive(horizontal=align))
    session.sink.merge(Region(x, y, x + w - 1, y + h - 1))
