"""Ordered, fixed-size chunk emission of base64 text.

The wire format carries no sequence numbers or total count: the receiver
rebuilds the payload by concatenating chunks in arrival order and stops at
the completion marker. The transport passed in as ``sink`` must therefore
be ordered and lossless.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Awaitable, Callable, Iterator

from image_bridge.errors import HostNotReady, SinkFailedError, TransferSuperseded

from .host import HostChannel

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 32 * 1024

ChunkSink = Callable[[str], Awaitable[Any]]
CompletionCallback = Callable[[], Awaitable[Any]]


class CancelToken:
    """Flag shared between a transfer and whoever may supersede it."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self, chunks_sent: int = 0) -> None:
        if self._cancelled:
            raise TransferSuperseded(chunks_sent)


def chunk_count(length: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    _check_chunk_size(chunk_size)
    return math.ceil(length / chunk_size)


def iter_chunks(payload: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[str]:
    """Yield consecutive ``chunk_size`` slices of ``payload``; the last may be shorter."""

    _check_chunk_size(chunk_size)
    for offset in range(0, len(payload), chunk_size):
        yield payload[offset:offset + chunk_size]


async def emit_chunks(
    payload: str,
    sink: ChunkSink,
    on_complete: CompletionCallback,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    token: CancelToken | None = None,
) -> int:
    """Send ``payload`` through ``sink`` in order, then call ``on_complete`` once.

    Returns the number of chunks sent. An empty payload sends no chunks but
    still completes.

    Raises
    ------
    SinkFailedError
        ``sink`` or ``on_complete`` raised. Nothing further is sent and the
        completion signal is not delivered.
    TransferSuperseded
        ``token`` was cancelled before the transfer finished.
    """

    sent = 0
    for index, chunk in enumerate(iter_chunks(payload, chunk_size)):
        if token is not None:
            token.raise_if_cancelled(sent)
        try:
            await sink(chunk)
        except Exception as exc:
            logger.error("Chunk %d send failed: %s", index, exc)
            raise SinkFailedError(sent, index) from exc
        sent += 1
        logger.debug("Sent chunk %d (%d chars)", index, len(chunk))

    if token is not None:
        token.raise_if_cancelled(sent)
    try:
        await on_complete()
    except Exception as exc:
        logger.error("Completion notify failed: %s", exc)
        raise SinkFailedError(sent) from exc
    return sent


async def send_to_host(
    payload: str,
    channel: HostChannel,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    token: CancelToken | None = None,
) -> int:
    """Stream ``payload`` to the host as chunk messages followed by the completion message.

    Raises :class:`HostNotReady` without sending anything if the channel is
    not ready.
    """

    if not channel.ready:
        logger.warning(
            "Host channel %s not ready; dropping %d chunk(s) and completion notify.",
            channel.name,
            chunk_count(len(payload), chunk_size),
        )
        raise HostNotReady(channel.name)
    return await emit_chunks(
        payload,
        channel.deliver_chunk,
        channel.notify_complete,
        chunk_size=chunk_size,
        token=token,
    )


def _check_chunk_size(chunk_size: int) -> None:
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
