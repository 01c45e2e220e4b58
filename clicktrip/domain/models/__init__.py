from .geo import GeoPoint
from .realtime import (
    Alert,
    DecodedFeed,
    FeedEntity,
    FeedEnvelope,
    FeedHeader,
    StopTimeEvent,
    StopTimeUpdate,
    TripUpdate,
    VehiclePosition,
    VehicleStationAssignment,
)
from .settings import UserSettings
from .station import Station
from .transit import Departure, GeocodeResult, RouteInfo, TransitMode

__all__ = [
    "Alert",
    "DecodedFeed",
    "Departure",
    "FeedEntity",
    "FeedEnvelope",
    "FeedHeader",
    "GeoPoint",
    "GeocodeResult",
    "RouteInfo",
    "Station",
    "StopTimeEvent",
    "StopTimeUpdate",
    "TransitMode",
    "TripUpdate",
    "UserSettings",
    "VehiclePosition",
    "VehicleStationAssignment",
]
