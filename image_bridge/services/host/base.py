from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

RECEIVER_OBJECT = "ImageReceiver"
CHUNK_METHOD = "OnImageChunk"
COMPLETE_METHOD = "OnImageTransferComplete"
PERMISSION_DENIED_METHOD = "OnCameraPermissionDenied"


class HostChannel(ABC):
    """Message-passing channel into the host runtime.

    The pipeline receives a channel explicitly; whether the host is
    initialised is exposed through :attr:`ready` and checked by the caller
    before a transfer starts.
    """

    name: str = "abstract"

    def __init__(
        self,
        *,
        object_name: str = RECEIVER_OBJECT,
        chunk_method: str = CHUNK_METHOD,
        complete_method: str = COMPLETE_METHOD,
        permission_denied_method: str = PERMISSION_DENIED_METHOD,
    ) -> None:
        self.object_name = object_name
        self.chunk_method = chunk_method
        self.complete_method = complete_method
        self.permission_denied_method = permission_denied_method

    @property
    @abstractmethod
    def ready(self) -> bool:
        """True once the host runtime can receive messages."""

    @abstractmethod
    async def send_message(self, object_name: str, method: str, payload: str) -> None:
        """Invoke ``method`` on ``object_name`` in the host with ``payload``."""

    async def deliver_chunk(self, payload: str) -> None:
        await self.send_message(self.object_name, self.chunk_method, payload)

    async def notify_complete(self) -> None:
        await self.send_message(self.object_name, self.complete_method, "")

    async def notify_permission_denied(self) -> None:
        if not self.ready:
            logger.warning("Host channel %s not ready; permission-denied notice not sent.", self.name)
            return
        await self.send_message(self.object_name, self.permission_denied_method, "")

    async def close(self) -> None:  # noqa: B027
        """Release transport resources, if any."""
