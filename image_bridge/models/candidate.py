from __future__ import annotations

from pydantic import BaseModel


class ImageCandidate(BaseModel):
    """A single user-selected file, before any validation."""

    data: bytes
    mime_type: str
    filename: str | None = None

    @property
    def byte_length(self) -> int:
        return len(self.data)
