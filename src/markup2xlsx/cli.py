"""``markup2xlsx`` command: render a JSON markup file into a workbook.

The input file holds either the bare tree or ``{"tree": ..., "styles": {...}}``.
The rendered block starts at the zero-based cell given by ``--x``/``--y``
(``A1`` by default) and the range it covers is printed on success::

    $ markup2xlsx report.json --x 1 --y 2
    report.xlsx: 5x7 cells at B3:F9
"""

from __future__ import annotations

import argparse
import codecs
import json
import logging
import sys
from pathlib import Path

from openpyxl.utils import get_column_letter

from markup2xlsx import __version__
from markup2xlsx.converter import Converter
from markup2xlsx.errors import Markup2XlsxError
from markup2xlsx.markup import RenderResult
from markup2xlsx.style_manager import StyleManager

logger = logging.getLogger(__name__)


def _cell_index(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"cell index must be >= 0, got {value}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="markup2xlsx",
        description="Lay out a JSON markup tree on an Excel (xlsx) grid.",
    )
    parser.add_argument("input", nargs="?", help="JSON markup file.")
    parser.add_argument("-o", "--output", help="Workbook to write (default: <input>.xlsx).")

    layout = parser.add_argument_group("layout")
    layout.add_argument(
        "-s", "--style",
        default="default",
        choices=StyleManager.PRESETS,
        help="Style preset for the default and header classes (default: %(default)s).",
    )
    layout.add_argument("--x", type=_cell_index, default=0, help="Zero-based start column.")
    layout.add_argument("--y", type=_cell_index, default=0, help="Zero-based start row.")
    layout.add_argument("--sheet-title", help="Title of the generated worksheet.")

    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Input file encoding (default: %(default)s).",
    )
    parser.add_argument(
        "--list-styles",
        action="store_true",
        help="Print the style presets and their classes, then exit.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log layout decisions.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _cell_range(x: int, y: int, result: RenderResult) -> str:
    start = f"{get_column_letter(x + 1)}{y + 1}"
    end = f"{get_column_letter(x + result.width)}{y + result.height}"
    return start if start == end else f"{start}:{end}"


def _list_styles() -> None:
    for preset in StyleManager.PRESETS:
        classes = ", ".join(StyleManager(preset).list_style_names())
        print(f"{preset}: {classes}")


def _fail(message: str) -> int:
    print(f"markup2xlsx: error: {message}", file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    """Run the command and return its exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.list_styles:
        _list_styles()
        return 0
    if not args.input:
        parser.error("an input file is required unless --list-styles is given")

    try:
        codecs.lookup(args.encoding)
    except LookupError:
        parser.error(f"unknown encoding: {args.encoding}")

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else input_path.with_suffix(".xlsx")
    converter = Converter(style_preset=args.style, sheet_title=args.sheet_title)

    try:
        result = converter.convert_file(
            input_path, output_path, encoding=args.encoding, x=args.x, y=args.y
        )
    except FileNotFoundError:
        return _fail(f"input not found: {input_path}")
    except json.JSONDecodeError as exc:
        return _fail(f"{input_path}:{exc.lineno}:{exc.colno}: invalid JSON: {exc.msg}")
    except UnicodeDecodeError as exc:
        return _fail(f"{input_path} is not {args.encoding} text: {exc.reason}")
    except Markup2XlsxError as exc:
        return _fail(f"cannot render {input_path}: {exc}")
    except (TypeError, ValueError) as exc:
        return _fail(f"{input_path}: {exc}")
    except OSError as exc:
        return _fail(f"{exc.filename or output_path}: {exc.strerror or exc}")

    logger.debug("Annotated tree: %r", result.tree)
    print(f"{output_path}: {result.width}x{result.height} cells at "
          f"{_cell_range(args.x, args.y, result)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
