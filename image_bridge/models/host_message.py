from __future__ import annotations

from pydantic import BaseModel


class HostMessage(BaseModel):
    """One message-passing call into the host runtime."""

    object_name: str
    method: str
    payload: str = ""
