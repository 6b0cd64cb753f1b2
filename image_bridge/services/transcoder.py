"""Resize and re-encode validated images into base64 JPEG text."""
from __future__ import annotations

import base64
import io
import logging
import math

from PIL import Image

from image_bridge.errors import EncodeFailedError
from image_bridge.models import Dimensions, TranscodeResult

from .validator import ValidatedImage

logger = logging.getLogger(__name__)

JPEG_MIME_TYPE = "image/jpeg"
_DATA_URL_MARKER = "base64,"


def compute_target_size(source: Dimensions, *, max_width: int, max_height: int) -> Dimensions:
    """Return the bounded output size for ``source``, keeping its aspect ratio.

    Width is capped first, then height. When both caps bind, the second
    step recomputes width from the original aspect ratio.
    """

    aspect = source.width / source.height
    width, height = source.width, source.height
    if width > max_width:
        width = max_width
        height = _round_half_up(width / aspect)
    if height > max_height:
        height = max_height
        width = _round_half_up(height * aspect)
    return Dimensions(width=max(width, 1), height=max(height, 1))


def transcode(
    validated: ValidatedImage,
    *,
    max_width: int,
    max_height: int,
    quality: float = 0.85,
) -> TranscodeResult:
    """Resize ``validated`` within the caps and encode it as JPEG.

    ``quality`` is on a 0-1 scale. Raises :class:`EncodeFailedError` if the
    encoder fails or produces no bytes.
    """

    if not 0.0 <= quality <= 1.0:
        raise ValueError(f"quality must be between 0 and 1, got {quality}")

    target = compute_target_size(validated.dimensions, max_width=max_width, max_height=max_height)
    surface = _rasterize(validated.image, target)

    buffer = io.BytesIO()
    try:
        surface.save(buffer, format="JPEG", quality=int(round(quality * 100)), optimize=True)
    except (OSError, ValueError) as exc:
        raise EncodeFailedError(str(exc)) from exc
    payload = buffer.getvalue()
    if not payload:
        raise EncodeFailedError("encoder returned no data")

    text = base64.b64encode(payload).decode("ascii")
    logger.debug(
        "Transcoded %s -> %s (%d bytes, %d base64 chars)",
        validated.dimensions.resolution,
        target.resolution,
        len(payload),
        len(text),
    )
    return TranscodeResult(payload=payload, text=text, dimensions=target, mime_type=JPEG_MIME_TYPE)


def strip_data_url_prefix(text: str) -> str:
    """Return the base64 part of a ``data:`` URL, or ``text`` unchanged."""

    idx = text.find(_DATA_URL_MARKER)
    return text[idx + len(_DATA_URL_MARKER):] if idx >= 0 else text


def _rasterize(image: Image.Image, target: Dimensions) -> Image.Image:
    if image.mode == "I" or image.mode.startswith("I;16"):
        image = _to_8bit(image)

    # JPEG has no alpha channel; transparent pixels end up black.
    if image.has_transparency_data:
        rgba = image.convert("RGBA")
        flattened = Image.new("RGB", rgba.size, (0, 0, 0))
        flattened.paste(rgba, mask=rgba.getchannel("A"))
        image = flattened
    elif image.mode != "RGB":
        image = image.convert("RGB")

    size = (target.width, target.height)
    if image.size == size:
        return image
    return image.resize(size, Image.Resampling.LANCZOS)


def _to_8bit(image: Image.Image) -> Image.Image:
    """Scale 16-bit greyscale (PNG ``I;16``/``I``) down to ``L``."""

    # convert("L") alone clips everything above 255 to white.
    return image.convert("I").point(lambda v: v * (1 / 256)).convert("L")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
