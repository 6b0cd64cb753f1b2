from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from image_bridge.errors import ErrorKind

from .dimensions import Dimensions

TransferStatus = Literal["completed", "rejected", "failed", "dropped", "superseded", "cancelled"]


class TranscodeResult(BaseModel):
    """JPEG payload produced by the transcoder and its base64 text."""

    payload: bytes
    text: str
    dimensions: Dimensions
    mime_type: str = "image/jpeg"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.text}"


class TransferReport(BaseModel):
    """Outcome of one pick-transcode-emit cycle."""

    status: TransferStatus
    error: ErrorKind | None = None
    message: str | None = None
    source_dimensions: Dimensions | None = None
    target_dimensions: Dimensions | None = None
    chunk_count: int = 0
    chunks_sent: int = 0

    @property
    def ok(self) -> bool:
        return self.status == "completed"
