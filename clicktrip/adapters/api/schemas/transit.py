from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from clicktrip.adapters.api.schemas.geo import GeoPointSchema


class StationSchema(BaseModel):
    id: str
    name: str
    location: GeoPointSchema
    distance_m: int | None = None
    address: str | None = None
    types: list[str] = []


class VehicleSchema(BaseModel):
    vehicle_id: str
    trip_id: str | None = None
    route_id: str | None = None
    lat: float
    lon: float
    bearing: float | None = None
    speed_mps: float | None = None
    timestamp: int
    current_stop_sequence: int | None = None
    current_status: str | None = None
    stop_id: str | None = None


class NearbyVehicleSchema(VehicleSchema):
    distance_to_station_m: int
    nearest_station_id: str
    nearest_station_name: str


class NearbyTransitSummarySchema(BaseModel):
    station_count: int
    vehicle_count: int
    route_ids: list[str]


class NearbyTransitSchema(BaseModel):
    stations: list[StationSchema]
    vehicles: list[NearbyVehicleSchema]
    summary: NearbyTransitSummarySchema


class VehiclesResponseSchema(BaseModel):
    fetched_at: datetime
    vehicle_count: int
    vehicles: list[VehicleSchema]


class StopUpdateSchema(BaseModel):
    stop_id: str | None = None
    stop_sequence: int | None = None
    arrival_time: int | None = None
    departure_time: int | None = None
    arrival_delay: int | None = None
    departure_delay: int | None = None
    schedule_relationship: str | None = None


class TripDepartureSchema(BaseModel):
    trip_id: str
    route_id: str | None = None
    direction_id: int | None = None
    stop_updates: list[StopUpdateSchema]


class TripDeparturesResponseSchema(BaseModel):
    requested_routes: list[str]
    found_routes: list[str]
    departure_count: int
    total_trip_updates: int
    departures: list[TripDepartureSchema]
    fetched_at: datetime


class RouteInfoSchema(BaseModel):
    id: str
    short_name: str
    long_name: str
    mode: Literal["bus", "train", "ferry"]
    color: str | None = None
    text_color: str | None = None


class DepartureSchema(BaseModel):
    route_id: str
    route: RouteInfoSchema
    trip_id: str
    stop_id: str
    station: StationSchema | None = None
    scheduled_time: datetime
    realtime_time: datetime | None = None
    delay_minutes: int
    headsign: str
    walking_minutes: int | None = None


class DepartureBoardSchema(BaseModel):
    stations: list[StationSchema]
    vehicles: list[NearbyVehicleSchema]
    departures: list[DepartureSchema]
    radius_m: int
    fetched_at: datetime


class TranslationSchema(BaseModel):
    text: str
    language: str | None = None


class TimeRangeSchema(BaseModel):
    start: int | None = None
    end: int | None = None


class InformedEntitySchema(BaseModel):
    agency_id: str | None = None
    route_id: str | None = None
    route_type: int | None = None
    trip_id: str | None = None
    stop_id: str | None = None


class AlertSchema(BaseModel):
    active_periods: list[TimeRangeSchema]
    informed_entities: list[InformedEntitySchema]
    cause: str | None = None
    effect: str | None = None
    url: list[TranslationSchema] | None = None
    header_text: list[TranslationSchema] | None = None
    description_text: list[TranslationSchema] | None = None
