from __future__ import annotations

from pydantic import BaseModel, Field


class UserSettingsSchema(BaseModel):
    radius: int = Field(500, gt=0, le=50_000)
    time_window: int = Field(20, gt=0, le=24 * 60)
