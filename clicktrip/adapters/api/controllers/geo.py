from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from clicktrip.adapters.api.dependencies import get_geocoder, get_walking_time_service
from clicktrip.adapters.api.schemas.geo import (
    GeocodeSchema,
    GeoPointSchema,
    WalkingTimeSchema,
)
from clicktrip.app.ports.output import IGeocoder
from clicktrip.app.services.walking_time_service import WalkingTimeService
from clicktrip.domain.models import GeoPoint

router = APIRouter(tags=["geo"])


@router.get("/geocode", response_model=GeocodeSchema)
async def geocode(
    address: str = Query(..., min_length=1),
    geocoder: IGeocoder = Depends(get_geocoder),
) -> GeocodeSchema:
    result = await geocoder.geocode(address=address)
    return GeocodeSchema(
        location=GeoPointSchema(lat=result.location.lat, lon=result.location.lon),
        formatted_address=result.formatted_address,
        city=result.city,
        country=result.country,
    )


@router.get("/walking-time", response_model=WalkingTimeSchema)
async def walking_time(
    from_lat: float = Query(..., ge=-90.0, le=90.0),
    from_lon: float = Query(..., ge=-180.0, le=180.0),
    to_lat: float = Query(..., ge=-90.0, le=90.0),
    to_lon: float = Query(..., ge=-180.0, le=180.0),
    service: WalkingTimeService = Depends(get_walking_time_service),
) -> WalkingTimeSchema:
    minutes = await service.walking_minutes(
        origin=GeoPoint(lat=from_lat, lon=from_lon),
        destination=GeoPoint(lat=to_lat, lon=to_lon),
    )
    return WalkingTimeSchema(walking_time_minutes=minutes)
