"""In-process host channel backed by a plain callable."""
from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from .base import HostChannel

logger = logging.getLogger(__name__)

SendMessage = Callable[[str, str, str], Union[None, Awaitable[Any]]]


class CallbackHostChannel(HostChannel):
    """Forward messages to a ``send_message(object_name, method, payload)`` callable.

    The callable may be synchronous or a coroutine function. Until one is
    attached the channel reports itself as not ready, which is how an
    embedding application signals that its host runtime has not loaded yet.
    """

    name = "callback"

    def __init__(self, send_message: SendMessage | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._send_message = send_message

    @property
    def ready(self) -> bool:
        return self._send_message is not None

    def attach(self, send_message: SendMessage) -> None:
        self._send_message = send_message
        logger.debug("Host callback attached")

    def detach(self) -> None:
        self._send_message = None

    async def send_message(self, object_name: str, method: str, payload: str) -> None:
        if self._send_message is None:
            raise RuntimeError("No host callback attached")
        result = self._send_message(object_name, method, payload)
        if inspect.isawaitable(result):
            await result
