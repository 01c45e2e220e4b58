from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .geo import GeoPoint
from .station import Station

DEFAULT_ROUTE_COLOR = "#0760A3"
DEFAULT_ROUTE_TEXT_COLOR = "#FFFFFF"


class TransitMode(str, Enum):
    BUS = "bus"
    TRAIN = "train"
    FERRY = "ferry"


@dataclass(frozen=True, slots=True)
class RouteInfo:
    """Route metadata as shown on a departure card."""

    id: str
    short_name: str
    long_name: str
    mode: TransitMode = TransitMode.BUS
    color: str | None = DEFAULT_ROUTE_COLOR
    text_color: str | None = DEFAULT_ROUTE_TEXT_COLOR

    @staticmethod
    def fallback(route_id: str) -> "RouteInfo":
        return RouteInfo(
            id=route_id,
            short_name=route_id,
            long_name=f"Route {route_id}",
            mode=TransitMode.BUS,
            color=None,
            text_color=None,
        )


@dataclass(frozen=True, slots=True)
class Departure:
    route_id: str
    route: RouteInfo
    trip_id: str
    stop_id: str
    scheduled_time: datetime
    headsign: str
    realtime_time: datetime | None = None
    delay_minutes: int = 0
    station: Station | None = None
    walking_minutes: int | None = None

    @property
    def effective_time(self) -> datetime:
        return self.realtime_time or self.scheduled_time


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    location: GeoPoint
    formatted_address: str
    city: str | None = None
    country: str | None = None
