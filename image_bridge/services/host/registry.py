from __future__ import annotations

from image_bridge.config import Settings, get_settings

from .base import HostChannel
from .callback_channel import CallbackHostChannel
from .http_channel import HttpHostChannel


def get_channel(settings: Settings | None = None) -> HostChannel:
    """Build the host channel selected by ``settings.host_channel``."""

    settings = settings or get_settings()
    names = {
        "object_name": settings.receiver_object,
        "chunk_method": settings.chunk_method,
        "complete_method": settings.complete_method,
        "permission_denied_method": settings.permission_denied_method,
    }
    channel_key = settings.host_channel.lower()
    if channel_key == "http":
        return HttpHostChannel(settings.host_url, timeout=settings.host_timeout, **names)
    if channel_key == "callback":
        return CallbackHostChannel(**names)
    raise ValueError(f"Unsupported host channel: {channel_key}")
