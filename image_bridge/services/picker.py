"""Pick → validate → transcode → emit orchestration.

:class:`ImagePicker` is the single entry point of the pipeline. Every
pipeline error is caught here, logged, shown to the user through the
``alert`` callable where appropriate, and returned as a
:class:`~image_bridge.models.TransferReport`.

Only one cycle is live at a time: starting a new one cancels the token of
the previous cycle, which then stops before its next chunk. Chunk emission
runs under a lock, so two streams never interleave on the host channel.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable

from image_bridge.config import Settings, get_settings
from image_bridge.errors import (
    GENERIC_MESSAGE,
    ErrorKind,
    HostNotReady,
    PipelineError,
    SinkFailedError,
    TooSmallError,
    TransferSuperseded,
)
from image_bridge.models import Dimensions, ImageCandidate, TransferReport

from .emitter import CancelToken, chunk_count, send_to_host
from .host import HostChannel
from .sources import ImageSource
from .transcoder import strip_data_url_prefix, transcode
from .validator import validate_candidate

logger = logging.getLogger(__name__)

_REJECTIONS = {
    ErrorKind.OVERSIZE,
    ErrorKind.UNSUPPORTED_TYPE,
    ErrorKind.TOO_SMALL,
    ErrorKind.PERMISSION_DENIED,
}

Alert = Callable[[str], None]


def _log_alert(message: str) -> None:
    logger.warning("User alert: %s", message)


class ImagePicker:
    """Runs pick-transcode-emit cycles against one host channel."""

    def __init__(
        self,
        channel: HostChannel,
        settings: Settings | None = None,
        *,
        alert: Alert | None = None,
    ) -> None:
        self._channel = channel
        self._settings = settings or get_settings()
        self._alert = alert or _log_alert
        self._camera_permission_granted = False
        self._current: CancelToken | None = None
        self._emit_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def open_camera(self, source: ImageSource) -> TransferReport:
        """Capture a photo with the rear camera and send it to the host."""

        if not await self._ensure_camera_permission(source):
            logger.warning("Camera permission denied")
            try:
                await self._channel.notify_permission_denied()
            except Exception as exc:
                logger.error("Permission-denied notify failed: %s", exc)
            return TransferReport(status="rejected", error=ErrorKind.PERMISSION_DENIED)
        return await self._pick_and_send(source, capture=True)

    async def open_gallery(self, source: ImageSource) -> TransferReport:
        """Pick an existing photo and send it to the host."""

        # Requested on the gallery path too; a refusal is ignored here.
        await self._ensure_camera_permission(source)
        return await self._pick_and_send(source, capture=False)

    async def send_file(self, candidate: ImageCandidate) -> TransferReport:
        """Validate, resize, encode and stream ``candidate`` to the host."""

        token = self._begin()
        settings = self._settings
        source_dims: Dimensions | None = None
        target_dims: Dimensions | None = None
        try:
            validated = validate_candidate(
                candidate,
                max_bytes=settings.max_upload_bytes,
                allowed_mime_types=settings.allowed_mime_types,
                min_dimension=settings.min_dimension,
            )
            source_dims = validated.dimensions
            result = transcode(
                validated,
                max_width=settings.max_width,
                max_height=settings.max_height,
                quality=settings.jpeg_quality,
            )
            target_dims = result.dimensions
            return await self._emit(result.text, token, source_dims, target_dims)
        except PipelineError as exc:
            return self._report_error(exc, source_dims, target_dims)
        except Exception as exc:  # pragma: no cover
            logger.exception("send_file failed: %s", exc)
            self._alert(GENERIC_MESSAGE)
            return TransferReport(status="failed", message=GENERIC_MESSAGE, source_dimensions=source_dims)
        finally:
            self._end(token)

    async def send_base64(self, text: str) -> TransferReport:
        """Stream already-encoded base64 text (or a ``data:`` URL) to the host."""

        token = self._begin()
        try:
            return await self._emit(strip_data_url_prefix(text), token, None, None)
        finally:
            self._end(token)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _pick_and_send(self, source: ImageSource, *, capture: bool) -> TransferReport:
        try:
            candidate = await source.pick(capture=capture)
        except OSError as exc:
            logger.error("Could not read the selected file: %s", exc)
            self._alert(GENERIC_MESSAGE)
            return TransferReport(status="failed", message=GENERIC_MESSAGE)
        if candidate is None:
            logger.info("Picker dismissed without a file")
            return TransferReport(status="cancelled")
        return await self.send_file(candidate)

    async def _ensure_camera_permission(self, source: ImageSource) -> bool:
        if self._camera_permission_granted:
            return True
        granted = await source.ensure_camera_permission()
        self._camera_permission_granted = granted
        return granted

    async def _emit(
        self,
        text: str,
        token: CancelToken,
        source_dims: Dimensions | None,
        target_dims: Dimensions | None,
    ) -> TransferReport:
        chunk_size = self._settings.chunk_size
        total = chunk_count(len(text), chunk_size)
        report = TransferReport(
            status="completed",
            source_dimensions=source_dims,
            target_dimensions=target_dims,
            chunk_count=total,
        )
        try:
            async with self._emit_lock:
                token.raise_if_cancelled()
                sent = await send_to_host(text, self._channel, chunk_size=chunk_size, token=token)
        except TransferSuperseded as exc:
            logger.info("Transfer superseded by a newer pick after %d/%d chunk(s)", exc.chunks_sent, total)
            return report.model_copy(update={"status": "superseded", "chunks_sent": exc.chunks_sent})
        except HostNotReady:
            return report.model_copy(update={"status": "dropped"})
        except SinkFailedError as exc:
            return self._report_error(exc, source_dims, target_dims, total=total)
        logger.info("Sent image to host in %d chunk(s) (%d chars)", sent, len(text))
        return report.model_copy(update={"chunks_sent": sent})

    def _report_error(
        self,
        exc: PipelineError,
        source_dims: Dimensions | None,
        target_dims: Dimensions | None,
        *,
        total: int = 0,
    ) -> TransferReport:
        logger.warning("Image transfer aborted (%s): %s", exc.kind.value, exc)
        if isinstance(exc, TooSmallError):
            source_dims = Dimensions(width=exc.width, height=exc.height)
        if exc.user_message:
            self._alert(exc.user_message)
        return TransferReport(
            status="rejected" if exc.kind in _REJECTIONS else "failed",
            error=exc.kind,
            message=exc.user_message or None,
            source_dimensions=source_dims,
            target_dimensions=target_dims,
            chunk_count=total,
            chunks_sent=exc.chunks_sent if isinstance(exc, SinkFailedError) else 0,
        )

    def _begin(self) -> CancelToken:
        if self._current is not None:
            logger.info("New pick supersedes the transfer in flight")
            self._current.cancel()
        token = CancelToken()
        self._current = token
        return token

    def _end(self, token: CancelToken) -> None:
        if self._current is token:
            self._current = None
