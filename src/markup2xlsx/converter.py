"""High-level markup-to-xlsx conversion orchestrator.

Ties together the tree loader, style manager and renderer into a single
public API for turning markup trees (Python data or JSON) into ``.xlsx``
workbooks.
"""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import Any, Optional

from openpyxl import Workbook

from markup2xlsx.markup import RenderResult
from markup2xlsx.renderer import render
from markup2xlsx.sink import WorksheetSink
from markup2xlsx.style_manager import StyleManager

logger = logging.getLogger(__name__)


def load_tree(obj: Any) -> Any:
    """Convert decoded JSON into a markup tree.

    An array whose first item is a string is an element and stays a
    ``list``; any other array becomes a sequence (``tuple``).
    """
    if isinstance(obj, list):
        items = [load_tree(item) for item in obj]
        if items and isinstance(items[0], str):
            return items
        return tuple(items)
    return obj


def _register_specs(styles: StyleManager, specs: dict[str, dict[str, Any]]) -> None:
    for name, spec in specs.items():
        styles.register_style_class(
            name,
            border_type=spec.get("border-type", "thin"),
            background_color=spec.get("background-color"),
        )


class Converter:
    """Convert markup trees to xlsx workbooks.

    Usage::

        converter = Converter(style_preset="thick")
        converter.register_style_class("total", border_type="double")
        xlsx_bytes = converter.convert_tree(["table", ["tr", ["td.total", "1"]]])

        # or from a JSON file
        converter.convert_file("input.json", "output.xlsx")

    A JSON document is either the tree itself or an object with a
    ``tree`` key and an optional ``styles`` mapping of class name to
    ``{"border-type": ..., "background-color": ...}``.
    """

    STYLE_PRESETS = StyleManager.PRESETS

    def __init__(self, style_preset: str = "default", sheet_title: Optional[str] = None) -> None:
        self.style_manager = StyleManager(style_preset)
        self.sheet_title = sheet_title
        self._style_classes: dict[str, tuple[str, Optional[str]]] = {}

    def register_style_class(
        self,
        name: str,
        border_type: str = "thin",
        background_color: Optional[str] = None,
    ) -> None:
        """Add a style class to every subsequent render."""
        self.style_manager.register_style_class(name, border_type, background_color)
        self._style_classes[name] = (border_type, background_color)

    def register_style_classes(self, specs: dict[str, dict[str, Any]]) -> None:
        """Register classes given as ``{"border-type": ..., "background-color": ...}``."""
        for name, spec in specs.items():
            self.register_style_class(
                name,
                border_type=spec.get("border-type", "thin"),
                background_color=spec.get("background-color"),
            )

    def new_style_manager(self) -> StyleManager:
        """Return a fresh registry holding the preset and registered classes."""
        styles = StyleManager(self.style_manager.preset)
        for name, (border_type, background_color) in self._style_classes.items():
            styles.register_style_class(name, border_type, background_color)
        return styles

    def render_workbook(
        self,
        tree: Any,
        *,
        x: int = 0,
        y: int = 0,
        styles: Optional[StyleManager] = None,
    ) -> tuple[Workbook, RenderResult]:
        """Render *tree* into the active sheet of a new workbook.

        *styles* defaults to :meth:`new_style_manager`.
        """
        workbook = Workbook()
        sheet = workbook.active
        if self.sheet_title:
            sheet.title = self.sheet_title
        if styles is None:
            styles = self.new_style_manager()
        result = render(WorksheetSink(sheet), x, y, tree, styles=styles)
        logger.info("Rendered %dx%d block at (%d, %d)", result.width, result.height, x, y)
        return workbook, result

    def load_document(self, json_text: str) -> tuple[Any, StyleManager]:
        """Decode a JSON document into a markup tree and its style registry.

        Classes declared under the document's ``styles`` key are registered
        on the returned registry only, never on the converter.

        Raises:
            ValueError: If *json_text* is not valid JSON.
        """
        document = json.loads(json_text)
        styles = self.new_style_manager()
        if isinstance(document, dict):
            _register_specs(styles, document.get("styles") or {})
            document = document.get("tree")
        return load_tree(document), styles

    def convert_tree(self, tree: Any, *, styles: Optional[StyleManager] = None) -> bytes:
        """Convert a markup tree to xlsx bytes."""
        workbook, _ = self.render_workbook(tree, styles=styles)
        buf = io.BytesIO()
        workbook.save(buf)
        return buf.getvalue()

    def convert_text(self, json_text: str) -> bytes:
        """Convert a JSON document to xlsx bytes.

        Raises:
            ValueError: If *json_text* is not valid JSON.
        """
        tree, styles = self.load_document(json_text)
        return self.convert_tree(tree, styles=styles)

    def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        *,
        encoding: str = "utf-8",
        x: int = 0,
        y: int = 0,
    ) -> RenderResult:
        """Read a JSON markup file and write the xlsx output.

        Args:
            input_path: Path to the input ``.json`` file.
            output_path: Path for the output ``.xlsx`` file.
            encoding: Text encoding of the source file.
            x: Zero-based column of the rendered block's top-left cell.
            y: Zero-based row of the rendered block's top-left cell.

        Returns:
            The extent and annotated tree of the rendered block.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        tree, styles = self.load_document(input_path.read_text(encoding=encoding))
        workbook, result = self.render_workbook(tree, x=x, y=y, styles=styles)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(output_path)
        return result
