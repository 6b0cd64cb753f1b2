from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_BRIDGE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Intake limits
    max_upload_bytes: int = Field(5 * 1024 * 1024, gt=0, description="Largest accepted file, in bytes.")
    allowed_mime_types: set[str] = Field(default_factory=lambda: {"image/jpeg", "image/png"})
    min_dimension: int = Field(200, ge=1, description="Both width and height must be at least this many pixels.")

    # Resize / encode
    max_width: int = Field(1280, ge=1)
    max_height: int = Field(1280, ge=1)
    jpeg_quality: float = Field(0.85, ge=0.0, le=1.0, description="Encoder quality on a 0-1 scale.")

    # Transfer
    chunk_size: int = Field(32 * 1024, gt=0, description="Characters of base64 text per chunk.")

    # Host receiver
    receiver_object: str = "ImageReceiver"
    chunk_method: str = "OnImageChunk"
    complete_method: str = "OnImageTransferComplete"
    permission_denied_method: str = "OnCameraPermissionDenied"

    # Host channel selection
    host_channel: Literal["http", "callback"] = "http"
    host_url: Optional[str] = Field(default=None, description="Base URL of the host bridge endpoint.")
    host_timeout: float = Field(10.0, gt=0)

    # Asset server
    static_root: Path = Path("public")
    server_host: str = "0.0.0.0"
    server_port: int = 8080

    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
