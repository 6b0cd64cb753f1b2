"""Where picked images come from.

A source stands in for the platform's file-selection dialog: it can be
asked for a single file, optionally hinting that the rear camera should be
used, and it answers camera-permission requests.
"""
from __future__ import annotations

import logging
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path

from image_bridge.models import ImageCandidate

logger = logging.getLogger(__name__)

_DEFAULT_MIME_TYPE = "application/octet-stream"


class ImageSource(ABC):
    """Abstract interface for a single-file image picker."""

    @abstractmethod
    async def ensure_camera_permission(self) -> bool:
        """Ask the platform for camera access. Returns False if refused."""

    @abstractmethod
    async def pick(self, *, capture: bool = False) -> ImageCandidate | None:
        """Return the selected file, or None if the user dismissed the dialog."""


class LocalFileSource(ImageSource):
    """Serve one file from disk as if the user had selected it."""

    def __init__(self, path: str | Path, *, mime_type: str | None = None) -> None:
        self._path = Path(path)
        self._mime_type = mime_type

    async def ensure_camera_permission(self) -> bool:
        return True

    async def pick(self, *, capture: bool = False) -> ImageCandidate | None:
        if capture:
            logger.debug("Capture requested; local source reads %s", self._path)
        data = self._path.read_bytes()
        return ImageCandidate(data=data, mime_type=self._guess_mime_type(), filename=self._path.name)

    def _guess_mime_type(self) -> str:
        if self._mime_type:
            return self._mime_type
        guessed, _ = mimetypes.guess_type(self._path.name)
        return guessed or _DEFAULT_MIME_TYPE
