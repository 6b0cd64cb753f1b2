"""Host channel that posts each message to an HTTP bridge endpoint.

Every call becomes one ``POST {base_url}/send-message`` with a JSON body::

    {"object_name": "ImageReceiver", "method": "OnImageChunk", "payload": "..."}

Messages are sent one at a time and awaited, so the endpoint sees them in
emission order.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from image_bridge.errors import HostBridgeError
from image_bridge.models import HostMessage

from .base import HostChannel

logger = logging.getLogger(__name__)


class HttpHostChannel(HostChannel):  # pylint: disable=too-few-public-methods
    """Minimal async client for a host bridge endpoint."""

    name = "http"
    _SEND_PATH = "/send-message"

    def __init__(
        self,
        base_url: str | None,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._base_url = (base_url or "").rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def ready(self) -> bool:
        return bool(self._base_url)

    async def send_message(self, object_name: str, method: str, payload: str) -> None:
        if not self._base_url:
            raise RuntimeError("No host URL configured")
        url = f"{self._base_url}{self._SEND_PATH}"
        message = HostMessage(object_name=object_name, method=method, payload=payload)
        logger.debug("POST %s -> %s.%s (%d chars)", url, object_name, method, len(payload))
        resp = await self._client.post(url, json=message.model_dump())
        if resp.status_code >= 400:
            raise HostBridgeError(resp.status_code, resp.text)

    async def close(self) -> None:
        await self._client.aclose()
