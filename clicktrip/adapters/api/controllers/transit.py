from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Cookie, Depends, Query

from clicktrip.adapters.api.dependencies import (
    get_departures_service,
    get_nearby_transit_service,
    get_route_info_provider,
    get_settings_service,
)
from clicktrip.adapters.api.schemas.geo import GeoPointSchema
from clicktrip.adapters.api.schemas.transit import (
    AlertSchema,
    DepartureBoardSchema,
    DepartureSchema,
    InformedEntitySchema,
    NearbyTransitSchema,
    NearbyTransitSummarySchema,
    NearbyVehicleSchema,
    RouteInfoSchema,
    StationSchema,
    StopUpdateSchema,
    TimeRangeSchema,
    TranslationSchema,
    TripDepartureSchema,
    TripDeparturesResponseSchema,
    VehicleSchema,
    VehiclesResponseSchema,
)
from clicktrip.app.ports.output import IRouteInfoProvider
from clicktrip.app.services.departures_service import DeparturesService
from clicktrip.app.services.nearby_transit_service import NearbyTransitService
from clicktrip.app.services.settings_service import (
    SETTINGS_COOKIE_NAME,
    SettingsService,
)
from clicktrip.domain.models import (
    Alert,
    Departure,
    GeoPoint,
    RouteInfo,
    Station,
    TripUpdate,
    VehiclePosition,
    VehicleStationAssignment,
)
from clicktrip.domain.models.realtime import TranslatedString

router = APIRouter(tags=["transit"])


def _station_to_schema(s: Station) -> StationSchema:
    return StationSchema(
        id=s.id,
        name=s.name,
        location=GeoPointSchema(lat=s.location.lat, lon=s.location.lon),
        distance_m=s.distance_m,
        address=s.address,
        types=list(s.types),
    )


def _vehicle_fields(v: VehiclePosition) -> dict:
    return {
        "vehicle_id": v.vehicle_id,
        "trip_id": v.trip_id,
        "route_id": v.route_id,
        "lat": v.latitude,
        "lon": v.longitude,
        "bearing": v.bearing,
        "speed_mps": v.speed,
        "timestamp": v.timestamp,
        "current_stop_sequence": v.current_stop_sequence,
        "current_status": v.current_status,
        "stop_id": v.stop_id,
    }


def _assignment_to_schema(a: VehicleStationAssignment) -> NearbyVehicleSchema:
    return NearbyVehicleSchema(
        **_vehicle_fields(a.vehicle),
        distance_to_station_m=a.distance_to_station_m,
        nearest_station_id=a.station_id,
        nearest_station_name=a.station_name,
    )


def _route_to_schema(r: RouteInfo) -> RouteInfoSchema:
    return RouteInfoSchema(
        id=r.id,
        short_name=r.short_name,
        long_name=r.long_name,
        mode=r.mode.value,
        color=r.color,
        text_color=r.text_color,
    )


def _departure_to_schema(d: Departure) -> DepartureSchema:
    return DepartureSchema(
        route_id=d.route_id,
        route=_route_to_schema(d.route),
        trip_id=d.trip_id,
        stop_id=d.stop_id,
        station=_station_to_schema(d.station) if d.station is not None else None,
        scheduled_time=d.scheduled_time,
        realtime_time=d.realtime_time,
        delay_minutes=d.delay_minutes,
        headsign=d.headsign,
        walking_minutes=d.walking_minutes,
    )


def _trip_to_schema(t: TripUpdate) -> TripDepartureSchema:
    return TripDepartureSchema(
        trip_id=t.trip_id,
        route_id=t.route_id,
        direction_id=t.direction_id,
        stop_updates=[
            StopUpdateSchema(
                stop_id=stu.stop_id,
                stop_sequence=stu.stop_sequence,
                arrival_time=stu.arrival.time if stu.arrival else None,
                departure_time=stu.departure.time if stu.departure else None,
                arrival_delay=stu.arrival.delay if stu.arrival else None,
                departure_delay=stu.departure.delay if stu.departure else None,
                schedule_relationship=stu.schedule_relationship,
            )
            for stu in t.stop_time_updates
        ],
    )


def _translations(ts: TranslatedString | None) -> list[TranslationSchema] | None:
    if ts is None:
        return None
    return [TranslationSchema(text=t.text, language=t.language) for t in ts.translations]


def _alert_to_schema(a: Alert) -> AlertSchema:
    return AlertSchema(
        active_periods=[TimeRangeSchema(start=p.start, end=p.end) for p in a.active_periods],
        informed_entities=[
            InformedEntitySchema(
                agency_id=ie.agency_id,
                route_id=ie.route_id or (ie.trip.route_id if ie.trip else None),
                route_type=ie.route_type,
                trip_id=ie.trip.trip_id if ie.trip else None,
                stop_id=ie.stop_id,
            )
            for ie in a.informed_entities
        ],
        cause=a.cause,
        effect=a.effect,
        url=_translations(a.url),
        header_text=_translations(a.header_text),
        description_text=_translations(a.description_text),
    )


def _split_ids(raw: str | None) -> list[str]:
    return [p.strip() for p in (raw or "").split(",") if p.strip()]


@router.get("/stops", response_model=list[StationSchema])
async def list_stops(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    radius: int = Query(..., gt=0, le=50_000),
    service: NearbyTransitService = Depends(get_nearby_transit_service),
) -> list[StationSchema]:
    stations = await service.list_stations(
        location=GeoPoint(lat=lat, lon=lon), radius_m=radius
    )
    return [_station_to_schema(s) for s in stations]


@router.get("/nearby-transit", response_model=NearbyTransitSchema)
async def nearby_transit(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    radius: int = Query(500, gt=0, le=50_000),
    vehicle_radius: float = Query(200.0, ge=0.0),
    service: NearbyTransitService = Depends(get_nearby_transit_service),
) -> NearbyTransitSchema:
    result = await service.nearby_transit(
        location=GeoPoint(lat=lat, lon=lon),
        radius_m=radius,
        vehicle_radius_m=vehicle_radius,
    )
    return NearbyTransitSchema(
        stations=[_station_to_schema(s) for s in result.stations],
        vehicles=[_assignment_to_schema(a) for a in result.vehicles],
        summary=NearbyTransitSummarySchema(
            station_count=len(result.stations),
            vehicle_count=len(result.vehicles),
            route_ids=list(result.route_ids),
        ),
    )


@router.get("/vehicle-positions", response_model=VehiclesResponseSchema)
async def vehicle_positions(
    route_id: list[str] | None = Query(default=None),
    service: NearbyTransitService = Depends(get_nearby_transit_service),
) -> VehiclesResponseSchema:
    vehicles = await service.list_vehicles()
    if route_id:
        wanted = set(route_id)
        vehicles = tuple(v for v in vehicles if v.route_id in wanted)

    return VehiclesResponseSchema(
        fetched_at=datetime.now(timezone.utc),
        vehicle_count=len(vehicles),
        vehicles=[VehicleSchema(**_vehicle_fields(v)) for v in vehicles],
    )


@router.get("/departures", response_model=TripDeparturesResponseSchema)
async def trip_departures(
    route_ids: str | None = Query(default=None, description="Comma separated"),
    max_departures: int = Query(10, ge=1, le=200),
    service: DeparturesService = Depends(get_departures_service),
) -> TripDeparturesResponseSchema:
    result = await service.trip_departures(
        route_ids=_split_ids(route_ids), max_trips=max_departures
    )
    return TripDeparturesResponseSchema(
        requested_routes=list(result.requested_routes),
        found_routes=list(result.found_routes),
        departure_count=len(result.trips),
        total_trip_updates=result.total_trip_updates,
        departures=[_trip_to_schema(t) for t in result.trips],
        fetched_at=datetime.now(timezone.utc),
    )


@router.get("/departures/nearby", response_model=DepartureBoardSchema)
async def departure_board(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    radius: int | None = Query(default=None, gt=0, le=50_000),
    vehicle_radius: float = Query(200.0, ge=0.0),
    max_departures: int = Query(10, ge=1, le=100),
    settings_cookie: str | None = Cookie(default=None, alias=SETTINGS_COOKIE_NAME),
    service: DeparturesService = Depends(get_departures_service),
    settings_service: SettingsService = Depends(get_settings_service),
) -> DepartureBoardSchema:
    radius_m = radius or settings_service.parse(settings_cookie).radius
    board = await service.departure_board(
        location=GeoPoint(lat=lat, lon=lon),
        radius_m=radius_m,
        vehicle_radius_m=vehicle_radius,
        max_departures=max_departures,
    )
    return DepartureBoardSchema(
        stations=[_station_to_schema(s) for s in board.stations],
        vehicles=[_assignment_to_schema(a) for a in board.vehicles],
        departures=[_departure_to_schema(d) for d in board.departures],
        radius_m=radius_m,
        fetched_at=datetime.now(timezone.utc),
    )


@router.get("/routes/{route_id}", response_model=RouteInfoSchema)
async def get_route(
    route_id: str,
    provider: IRouteInfoProvider = Depends(get_route_info_provider),
) -> RouteInfoSchema:
    return _route_to_schema(await provider.get_route(route_id))


@router.get("/alerts", response_model=list[AlertSchema])
async def list_alerts(
    route_id: list[str] | None = Query(default=None),
    service: NearbyTransitService = Depends(get_nearby_transit_service),
) -> list[AlertSchema]:
    alerts = await service.list_alerts(route_ids=set(route_id) if route_id else None)
    return [_alert_to_schema(a) for a in alerts]
