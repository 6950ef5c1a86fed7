"""FastAPI web service for markup-to-xlsx conversion.

Endpoints::

    POST /render        Upload a .json markup file and receive .xlsx back.
    POST /render/json   Send {"tree": ..., "style": ...}, receive .xlsx bytes.
    GET  /health        Health check.
    GET  /styles        List available style presets.

Run::

    uvicorn markup2xlsx.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

from fastapi import Body, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from markup2xlsx import __version__
from markup2xlsx.converter import Converter, load_tree
from markup2xlsx.errors import Markup2XlsxError
from markup2xlsx.style_manager import StyleManager

logger = logging.getLogger(__name__)

app = FastAPI(
    title="markup2xlsx",
    description="Markup tree to xlsx layout service",
    version=__version__,
)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _content_disposition(filename: str) -> str:
    """Build Content-Disposition header, RFC 5987 for non-ASCII names."""
    try:
        filename.encode("ascii")
        return f'attachment; filename="{filename}"'
    except UnicodeEncodeError:
        encoded = quote(filename)
        return f"attachment; filename*=UTF-8''{encoded}"


def _xlsx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(filename)},
    )


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/styles")
async def list_styles() -> dict[str, list[str]]:
    """List available style presets."""
    return {"presets": StyleManager.PRESETS}


@app.post("/render")
async def render_file(
    file: UploadFile = File(...),
    style: str = Form("default"),
    encoding: str = Form("utf-8"),
) -> Response:
    """Upload a JSON markup file and receive xlsx back.

    - **file**: JSON markup document (.json)
    - **style**: Style preset name (default, thick, minimal)
    - **encoding**: Source file encoding
    """
    raw = await file.read()
    try:
        converter = Converter(style_preset=style)
        xlsx_bytes = converter.convert_text(raw.decode(encoding))
    except (Markup2XlsxError, ValueError) as exc:
        logger.info("Rejected upload %r: %s", file.filename, exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    filename = (file.filename or "document.json").rsplit(".", 1)[0] + ".xlsx"
    return _xlsx_response(xlsx_bytes, filename)


@app.post("/render/json")
async def render_json(
    tree: Any = Body(...),
    style: str = Body("default"),
    styles: Optional[dict[str, dict[str, str]]] = Body(None),
) -> Response:
    """Send a markup tree as JSON and receive xlsx bytes.

    - **tree**: Markup tree (arrays headed by a tag string are elements)
    - **style**: Style preset name
    - **styles**: Extra style classes, name to ``{"border-type", "background-color"}``
    """
    try:
        converter = Converter(style_preset=style)
        converter.register_style_classes(styles or {})
        xlsx_bytes = converter.convert_tree(load_tree(tree))
    except (Markup2XlsxError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return _xlsx_response(xlsx_bytes, "document.xlsx")
