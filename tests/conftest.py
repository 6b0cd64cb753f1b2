"""Shared test fixtures and factories."""

from __future__ import annotations

import io
from collections.abc import Callable

import pytest
from PIL import Image

from image_bridge.config import Settings
from image_bridge.models import HostMessage, ImageCandidate
from image_bridge.services.host import CallbackHostChannel


def make_image_bytes(
    width: int,
    height: int,
    *,
    fmt: str = "JPEG",
    mode: str = "RGB",
    color: tuple[int, ...] = (200, 80, 40),
) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_candidate(
    width: int,
    height: int,
    *,
    fmt: str = "JPEG",
    mime_type: str | None = None,
    pad_to: int | None = None,
) -> ImageCandidate:
    data = make_image_bytes(width, height, fmt=fmt)
    if pad_to is not None and pad_to > len(data):
        # Decoders stop at the end-of-image marker, so trailing bytes only
        # grow the file.
        data += b"\0" * (pad_to - len(data))
    return ImageCandidate(data=data, mime_type=mime_type or f"image/{fmt.lower()}")


class RecordingHost:
    """Host-side receiver that records every message it is sent."""

    def __init__(self, fail_on_chunk: int | None = None) -> None:
        self.messages: list[HostMessage] = []
        self.fail_on_chunk = fail_on_chunk

    async def __call__(self, object_name: str, method: str, payload: str) -> None:
        if method == "OnImageChunk" and self.fail_on_chunk is not None:
            if len(self.chunks) == self.fail_on_chunk:
                raise RuntimeError("host rejected chunk")
        self.messages.append(HostMessage(object_name=object_name, method=method, payload=payload))

    @property
    def chunks(self) -> list[str]:
        return [m.payload for m in self.messages if m.method == "OnImageChunk"]

    @property
    def completions(self) -> int:
        return sum(1 for m in self.messages if m.method == "OnImageTransferComplete")

    def methods(self) -> list[str]:
        return [m.method for m in self.messages]


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def channel(host: RecordingHost) -> CallbackHostChannel:
    return CallbackHostChannel(host)


@pytest.fixture
def alerts() -> list[str]:
    return []


@pytest.fixture
def alert(alerts: list[str]) -> Callable[[str], None]:
    return alerts.append
