"""Intake validation for user-selected images.

Checks are ordered cheapest first: byte length and declared MIME type are
looked at before the image is decoded, so an oversized or unsupported file
never reaches Pillow.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Iterable

from PIL import Image, ImageOps

from image_bridge.errors import DecodeFailedError, OversizeError, TooSmallError, UnsupportedTypeError
from image_bridge.models import Dimensions, ImageCandidate

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/png"})


@dataclass(frozen=True)
class ValidatedImage:
    """Decoded image that passed every intake check.

    The transcoder reuses ``image`` so the file is only decoded once.
    """

    image: Image.Image
    dimensions: Dimensions


def validate_candidate(
    candidate: ImageCandidate,
    *,
    max_bytes: int,
    allowed_mime_types: Iterable[str] = DEFAULT_ALLOWED_MIME_TYPES,
    min_dimension: int = 200,
) -> ValidatedImage:
    """Validate ``candidate`` and return the decoded image.

    Raises
    ------
    OversizeError
        ``candidate.byte_length`` is above ``max_bytes``.
    UnsupportedTypeError
        The declared MIME type is not in ``allowed_mime_types``.
    DecodeFailedError
        Pillow could not decode the bytes.
    TooSmallError
        Width or height is below ``min_dimension``.
    """

    if candidate.byte_length > max_bytes:
        raise OversizeError(candidate.byte_length, max_bytes)

    allowed = {m.lower() for m in allowed_mime_types}
    if _normalise_mime(candidate.mime_type) not in allowed:
        raise UnsupportedTypeError(candidate.mime_type, allowed)

    image = _decode(candidate.data)
    width, height = image.size
    if width < min_dimension or height < min_dimension:
        raise TooSmallError(width, height, min_dimension)

    logger.debug("Validated %s image %dx%d (%d bytes)", candidate.mime_type, width, height, candidate.byte_length)
    return ValidatedImage(image=image, dimensions=Dimensions(width=width, height=height))


def _normalise_mime(mime_type: str) -> str:
    return mime_type.split(";", 1)[0].strip().lower()


def _decode(data: bytes) -> Image.Image:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            # Report sizes as displayed, with EXIF rotation applied.
            return ImageOps.exif_transpose(img)
    except (Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeFailedError(str(exc) or exc.__class__.__name__) from exc
