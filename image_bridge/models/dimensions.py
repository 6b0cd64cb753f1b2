from __future__ import annotations

from pydantic import BaseModel, Field


class Dimensions(BaseModel):
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"
