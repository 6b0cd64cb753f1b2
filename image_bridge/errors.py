"""Error taxonomy for the intake and transfer pipeline.

Every failure of a pick-transcode-emit cycle is a :class:`PipelineError`
carrying an :class:`ErrorKind`. The orchestrator catches them at the top of
the pipeline and turns them into a user-facing message; none of them are
retried.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional


class ErrorKind(str, Enum):
    OVERSIZE = "OVERSIZE"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    TOO_SMALL = "TOO_SMALL"
    DECODE_FAILED = "DECODE_FAILED"
    ENCODE_FAILED = "ENCODE_FAILED"
    SINK_FAILED = "SINK_FAILED"
    PERMISSION_DENIED = "PERMISSION_DENIED"


GENERIC_MESSAGE = "Cannot process the image."


class PipelineError(Exception):
    """Base class for terminal pipeline failures."""

    kind: ErrorKind

    def __init__(self, message: str, *, user_message: str = GENERIC_MESSAGE) -> None:
        super().__init__(message)
        self.user_message = user_message


class OversizeError(PipelineError):
    kind = ErrorKind.OVERSIZE

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"File is {size} bytes, limit is {limit} bytes",
            user_message=(
                f"Image is too large ({_mb(size)} MB). "
                f"Maximum allowed size is {_mb(limit)} MB."
            ),
        )
        self.size = size
        self.limit = limit


class UnsupportedTypeError(PipelineError):
    kind = ErrorKind.UNSUPPORTED_TYPE

    def __init__(self, mime_type: str, accepted: Iterable[str]) -> None:
        self.mime_type = mime_type
        self.accepted = sorted(accepted)
        names = ", ".join(self.accepted)
        super().__init__(
            f"Unsupported MIME type {mime_type!r}",
            user_message=f"Unsupported image type '{mime_type}'. Accepted types: {names}.",
        )


class TooSmallError(PipelineError):
    kind = ErrorKind.TOO_SMALL

    def __init__(self, width: int, height: int, minimum: int) -> None:
        super().__init__(
            f"Image is {width}x{height}px, minimum is {minimum}px per side",
            user_message=(
                f"Image is too small: actual size {width}x{height}px. Please choose an image "
                f"at least {minimum}px wide and {minimum}px tall."
            ),
        )
        self.width = width
        self.height = height
        self.minimum = minimum


class DecodeFailedError(PipelineError):
    kind = ErrorKind.DECODE_FAILED

    def __init__(self, reason: str) -> None:
        super().__init__(f"Image decode failed: {reason}")


class EncodeFailedError(PipelineError):
    kind = ErrorKind.ENCODE_FAILED

    def __init__(self, reason: str) -> None:
        super().__init__(f"Image encode failed: {reason}")


class SinkFailedError(PipelineError):
    """The host transport rejected a chunk (or the completion signal)."""

    kind = ErrorKind.SINK_FAILED

    def __init__(self, chunks_sent: int, chunk_index: Optional[int] = None) -> None:
        where = f"chunk {chunk_index}" if chunk_index is not None else "completion signal"
        super().__init__(
            f"Host transport failed on {where} after {chunks_sent} chunk(s)",
            user_message="Image processing failed; the transfer was not completed.",
        )
        self.chunks_sent = chunks_sent
        self.chunk_index = chunk_index


class PermissionDeniedError(PipelineError):
    kind = ErrorKind.PERMISSION_DENIED

    def __init__(self) -> None:
        super().__init__("Camera permission denied", user_message="")


class TransferSuperseded(Exception):
    """A newer pick took over while this transfer was in flight."""

    def __init__(self, chunks_sent: int = 0) -> None:
        super().__init__(f"Transfer superseded after {chunks_sent} chunk(s)")
        self.chunks_sent = chunks_sent


class HostNotReady(Exception):
    """The host channel is not initialised; the transfer was dropped."""


class HostBridgeError(Exception):
    """Raised when the host bridge endpoint returns an error status."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"Host bridge error {status}: {message}")
        self.status = status


def _mb(size: int) -> str:
    return f"{size / (1024 * 1024):.1f}"
