"""Direct serving of precompiled host build artefacts.

Build files are shipped pre-compressed (``*.gz``). They are sent as-is with
``Content-Encoding: gzip`` and the content type of the uncompressed asset,
so the browser inflates them transparently.
"""
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, PlainTextResponse, Response

router = APIRouter()
logger = logging.getLogger(__name__)

BUILD_DIR_NAME = "Build"

_GZIP_SUFFIX = ".gz"
_GZIP_CONTENT_TYPES = (
    (".framework.js.gz", "application/javascript"),
    (".loader.js.gz", "application/javascript"),
    (".wasm.gz", "application/wasm"),
    (".data.gz", "application/octet-stream"),
)


def gzip_content_type(filename: str) -> str | None:
    """Content type for a pre-compressed build file, or None to guess from the name."""

    for suffix, content_type in _GZIP_CONTENT_TYPES:
        if filename.endswith(suffix):
            return content_type
    return None


def _resolve_build_file(build_dir: Path, filename: str) -> Path | None:
    candidate = (build_dir / filename).resolve()
    if candidate.parent != build_dir.resolve() or not candidate.is_file():
        return None
    return candidate


@router.get("/Build/{filename}")
async def build_file(filename: str, request: Request) -> Response:
    build_dir = Path(request.app.state.static_root) / BUILD_DIR_NAME
    path = _resolve_build_file(build_dir, filename)
    if path is None:
        logger.info("Build file not found: %s", filename)
        return PlainTextResponse("Not found", status_code=404)

    if not filename.endswith(_GZIP_SUFFIX):
        return FileResponse(path)
    return FileResponse(
        path,
        media_type=gzip_content_type(filename),
        headers={"Content-Encoding": "gzip"},
    )
