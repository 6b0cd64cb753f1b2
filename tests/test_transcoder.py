from __future__ import annotations

import base64
import io

import pytest
from PIL import Image

from image_bridge.errors import EncodeFailedError, ErrorKind
from image_bridge.models import Dimensions, ImageCandidate
from image_bridge.services import transcoder
from image_bridge.services.transcoder import compute_target_size, strip_data_url_prefix, transcode
from image_bridge.services.validator import ValidatedImage, validate_candidate

CAPS = {"max_width": 1280, "max_height": 1280}


def _validated(width: int, height: int, mode: str = "RGB", color=(120, 130, 140)) -> ValidatedImage:
    return ValidatedImage(
        image=Image.new(mode, (width, height), color),
        dimensions=Dimensions(width=width, height=height),
    )


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ((2000, 1000), (1280, 640)),
        ((1000, 2000), (640, 1280)),
        ((3000, 1500), (1280, 640)),
        ((800, 600), (800, 600)),
        ((1280, 1280), (1280, 1280)),
        ((4000, 3000), (1280, 960)),
        ((1000, 1500), (853, 1280)),
    ],
)
def test_compute_target_size(source: tuple[int, int], expected: tuple[int, int]) -> None:
    target = compute_target_size(Dimensions(width=source[0], height=source[1]), **CAPS)

    assert (target.width, target.height) == expected


def test_width_is_capped_before_height() -> None:
    # Width cap gives 1000x1250; the height cap then sets 800 and recomputes
    # width as round(800 * 0.8).
    target = compute_target_size(Dimensions(width=2000, height=2500), max_width=1000, max_height=800)

    assert (target.width, target.height) == (640, 800)


def test_rounding_is_half_up() -> None:
    # 10 / 4.0 == 2.5 exactly; banker's rounding would give 2.
    target = compute_target_size(Dimensions(width=400, height=100), max_width=10, max_height=1280)

    assert (target.width, target.height) == (10, 3)


def test_transcode_resizes_and_encodes_jpeg() -> None:
    result = transcode(_validated(2000, 1000), quality=0.85, **CAPS)

    assert (result.dimensions.width, result.dimensions.height) == (1280, 640)
    assert result.mime_type == "image/jpeg"
    assert result.payload[:2] == b"\xff\xd8"
    with Image.open(io.BytesIO(result.payload)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.size == (1280, 640)


def test_text_is_base64_of_payload() -> None:
    result = transcode(_validated(500, 400), **CAPS)

    assert base64.b64decode(result.text) == result.payload
    assert len(result.text) == 4 * -(-len(result.payload) // 3)
    assert result.data_url == f"data:image/jpeg;base64,{result.text}"


def test_small_image_is_not_upscaled() -> None:
    result = transcode(_validated(640, 480), **CAPS)

    assert result.dimensions.resolution == "640x480"


def test_transparent_png_is_flattened_onto_black() -> None:
    result = transcode(_validated(300, 300, mode="RGBA", color=(255, 255, 255, 0)), **CAPS)

    with Image.open(io.BytesIO(result.payload)) as decoded:
        assert decoded.mode == "RGB"
        r, g, b = decoded.getpixel((150, 150))
        assert max(r, g, b) < 16


def _palette_with_transparent_index() -> Image.Image:
    image = Image.new("P", (300, 300), 0)
    image.putpalette([255, 255, 255] * 256)
    image.info["transparency"] = 0
    return image


def _rgb_with_transparent_key() -> Image.Image:
    image = Image.new("RGB", (300, 300), (255, 255, 255))
    image.info["transparency"] = (255, 255, 255)
    return image


@pytest.mark.parametrize("build", [_palette_with_transparent_index, _rgb_with_transparent_key])
def test_keyed_transparency_is_flattened_onto_black(build) -> None:
    validated = ValidatedImage(image=build(), dimensions=Dimensions(width=300, height=300))

    result = transcode(validated, **CAPS)

    with Image.open(io.BytesIO(result.payload)) as decoded:
        r, g, b = decoded.getpixel((150, 150))
        assert max(r, g, b) < 16


def test_sixteen_bit_greyscale_png_keeps_its_tones() -> None:
    buffer = io.BytesIO()
    Image.new("I;16", (300, 300), 32768).save(buffer, format="PNG")
    validated = validate_candidate(
        ImageCandidate(data=buffer.getvalue(), mime_type="image/png"),
        max_bytes=5 * 1024 * 1024,
    )

    result = transcode(validated, **CAPS)

    with Image.open(io.BytesIO(result.payload)) as decoded:
        r, g, b = decoded.getpixel((150, 150))
        assert all(118 <= channel <= 138 for channel in (r, g, b))


def test_quality_out_of_range_raises() -> None:
    with pytest.raises(ValueError):
        transcode(_validated(300, 300), quality=1.5, **CAPS)


def test_lower_quality_gives_smaller_payload() -> None:
    noisy = Image.effect_noise((600, 600), 64).convert("RGB")
    validated = ValidatedImage(image=noisy, dimensions=Dimensions(width=600, height=600))

    high = transcode(validated, quality=0.95, **CAPS)
    low = transcode(validated, quality=0.3, **CAPS)

    assert len(low.payload) < len(high.payload)


def test_empty_encoder_output_is_encode_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(transcoder.Image.Image, "save", lambda self, fp, **kwargs: None)

    with pytest.raises(EncodeFailedError) as excinfo:
        transcode(_validated(300, 300), **CAPS)

    assert excinfo.value.kind is ErrorKind.ENCODE_FAILED


def test_encoder_error_is_encode_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(self, fp, **kwargs):
        raise OSError("encoder exploded")

    monkeypatch.setattr(transcoder.Image.Image, "save", _boom)

    with pytest.raises(EncodeFailedError):
        transcode(_validated(300, 300), **CAPS)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("data:image/jpeg;base64,AAAA", "AAAA"),
        ("AAAA", "AAAA"),
        ("", ""),
    ],
)
def test_strip_data_url_prefix(text: str, expected: str) -> None:
    assert strip_data_url_prefix(text) == expected
