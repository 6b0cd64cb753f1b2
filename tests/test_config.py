from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from image_bridge.config import Settings


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.max_upload_bytes == 5 * 1024 * 1024
    assert settings.allowed_mime_types == {"image/jpeg", "image/png"}
    assert settings.min_dimension == 200
    assert (settings.max_width, settings.max_height) == (1280, 1280)
    assert settings.jpeg_quality == 0.85
    assert settings.chunk_size == 32768
    assert settings.receiver_object == "ImageReceiver"
    assert settings.server_port == 8080
    assert settings.static_root == Path("public")


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IMAGE_BRIDGE_CHUNK_SIZE", "1024")
    monkeypatch.setenv("IMAGE_BRIDGE_ALLOWED_MIME_TYPES", '["image/webp"]')
    monkeypatch.setenv("IMAGE_BRIDGE_HOST_URL", "http://localhost:9000")

    settings = Settings(_env_file=None)

    assert settings.chunk_size == 1024
    assert settings.allowed_mime_types == {"image/webp"}
    assert settings.host_url == "http://localhost:9000"


@pytest.mark.parametrize(
    "overrides",
    [{"jpeg_quality": 1.2}, {"chunk_size": 0}, {"host_channel": "carrier-pigeon"}],
)
def test_invalid_values_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
