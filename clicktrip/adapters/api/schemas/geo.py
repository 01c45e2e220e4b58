from __future__ import annotations

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class GeocodeSchema(BaseModel):
    location: GeoPointSchema
    formatted_address: str
    city: str | None = None
    country: str | None = None


class WalkingTimeSchema(BaseModel):
    walking_time_minutes: int
