from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Iterable

from clicktrip.app.ports.output import (
    IPlacesProvider,
    IRouteInfoProvider,
    ITransitFeedProvider,
)
from clicktrip.app.realtime.gtfs_feed_decoder import decode_feed
from clicktrip.app.services.nearby_transit_service import (
    DEFAULT_VEHICLE_RADIUS_M,
    sort_stations,
    unique_route_ids,
)
from clicktrip.app.services.walking_time_service import WalkingTimeService
from clicktrip.domain.algorithms.correlation import correlate, usable_vehicles
from clicktrip.domain.algorithms.departures import DEPARTURE_HORIZON, build_departures
from clicktrip.domain.models import (
    Departure,
    GeoPoint,
    RouteInfo,
    Station,
    TripUpdate,
    VehicleStationAssignment,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TripDepartures:
    requested_routes: tuple[str, ...]
    trips: tuple[TripUpdate, ...]
    total_trip_updates: int

    @property
    def found_routes(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for t in self.trips:
            if t.route_id:
                seen.setdefault(t.route_id, None)
        return tuple(seen)


@dataclass(frozen=True, slots=True)
class DepartureBoard:
    stations: tuple[Station, ...] = ()
    vehicles: tuple[VehicleStationAssignment, ...] = ()
    departures: tuple[Departure, ...] = ()


def _filter_by_routes(
    trips: Iterable[TripUpdate], route_ids: Iterable[str]
) -> list[TripUpdate]:
    wanted = {r for r in route_ids if r}
    if not wanted:
        return list(trips)
    return [t for t in trips if t.route_id and t.route_id in wanted]


@dataclass(slots=True)
class DeparturesService:
    """Builds departure lists from trip updates, live vehicles and stations.

    - Trip updates and vehicle positions come from the GTFS-Realtime feeds.
    - Route metadata is looked up per route once the feed is decoded.
    - Walking time is computed per station, not per departure.
    """

    feed_provider: ITransitFeedProvider
    route_info_provider: IRouteInfoProvider
    places_provider: IPlacesProvider | None = None
    walking_time: WalkingTimeService = field(default_factory=WalkingTimeService)
    horizon: timedelta = DEPARTURE_HORIZON

    async def trip_departures(
        self, *, route_ids: Iterable[str] = (), max_trips: int = 10
    ) -> TripDepartures:
        requested = tuple(r for r in route_ids if r)
        content = await self.feed_provider.fetch_trip_updates()
        trips = decode_feed(content).trip_updates
        logger.info("Parsed %d trip updates", len(trips))

        filtered = _filter_by_routes(trips, requested)
        if requested:
            logger.info(
                "Filtered to %d updates for routes: %s",
                len(filtered),
                ", ".join(requested),
            )
        return TripDepartures(
            requested_routes=requested,
            trips=tuple(filtered[: max(0, max_trips)]),
            total_trip_updates=len(trips),
        )

    async def route_infos(self, route_ids: Iterable[str]) -> dict[str, RouteInfo]:
        ids = list(dict.fromkeys(r for r in route_ids if r))
        infos = await asyncio.gather(
            *(self.route_info_provider.get_route(r) for r in ids)
        )
        return dict(zip(ids, infos))

    async def upcoming_departures(
        self,
        *,
        route_ids: Iterable[str] = (),
        max_departures: int = 20,
        now: datetime | None = None,
        trips: Iterable[TripUpdate] | None = None,
        stations_by_route: dict[str, Station] | None = None,
    ) -> tuple[Departure, ...]:
        """Departures in the next two hours for the given routes.

        `trips` may be passed when the trip-update feed was already decoded.
        """

        now = now or datetime.now(timezone.utc)
        if trips is None:
            content = await self.feed_provider.fetch_trip_updates()
            trips = decode_feed(content).trip_updates

        selected = _filter_by_routes(trips, route_ids)
        routes = await self.route_infos(t.route_id for t in selected if t.route_id)
        departures = build_departures(
            selected,
            routes=routes,
            now=now,
            stations_by_route=stations_by_route,
            horizon=self.horizon,
        )
        return tuple(departures[: max(0, max_departures)])

    async def departure_board(
        self,
        *,
        location: GeoPoint,
        radius_m: int,
        vehicle_radius_m: float = DEFAULT_VEHICLE_RADIUS_M,
        max_departures: int = 10,
        now: datetime | None = None,
    ) -> DepartureBoard:
        if self.places_provider is None:
            raise RuntimeError("Places provider not configured")

        stations = sort_stations(
            await self.places_provider.nearby_stations(
                location=location, radius_m=radius_m
            )
        )
        if not stations:
            logger.info("No stations within %dm of %s", radius_m, location.as_query())
            return DepartureBoard()

        vehicle_bytes, trip_bytes = await asyncio.gather(
            self.feed_provider.fetch_vehicle_positions(),
            self.feed_provider.fetch_trip_updates(),
        )
        vehicles = usable_vehicles(decode_feed(vehicle_bytes).vehicles)
        trips = decode_feed(trip_bytes).trip_updates

        assignments = correlate(vehicles, stations, vehicle_radius_m)
        route_ids = unique_route_ids(assignments)
        logger.info(
            "%d vehicles near %d stations, routes: %s",
            len(assignments),
            len(stations),
            ", ".join(route_ids) or "-",
        )
        if not route_ids:
            return DepartureBoard(stations=stations, vehicles=tuple(assignments))

        stations_by_id = {s.id: s for s in stations}
        stations_by_route: dict[str, Station] = {}
        for a in assignments:
            if a.vehicle.route_id and a.vehicle.route_id not in stations_by_route:
                stations_by_route[a.vehicle.route_id] = stations_by_id[a.station_id]

        departures = await self.upcoming_departures(
            route_ids=route_ids,
            max_departures=max_departures,
            now=now,
            trips=trips,
            stations_by_route=stations_by_route,
        )
        departures = await self._with_walking_times(location, departures)
        return DepartureBoard(
            stations=stations,
            vehicles=tuple(assignments),
            departures=departures,
        )

    async def _with_walking_times(
        self, origin: GeoPoint, departures: tuple[Departure, ...]
    ) -> tuple[Departure, ...]:
        targets: dict[str, Station] = {}
        for d in departures:
            if d.station is not None:
                targets.setdefault(d.station.id, d.station)

        minutes = await asyncio.gather(
            *(
                self.walking_time.walking_minutes(
                    origin=origin, destination=s.location
                )
                for s in targets.values()
            )
        )
        by_station = dict(zip(targets, minutes))
        return tuple(
            replace(d, walking_minutes=by_station[d.station.id])
            if d.station is not None
            else d
            for d in departures
        )
