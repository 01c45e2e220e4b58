from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from clicktrip.app.realtime.gtfs_feed_decoder import decode_feed
from clicktrip.app.ports.output import IPlacesProvider, ITransitFeedProvider
from clicktrip.domain.algorithms.correlation import correlate, usable_vehicles
from clicktrip.domain.models import (
    Alert,
    GeoPoint,
    Station,
    VehiclePosition,
    VehicleStationAssignment,
)

logger = logging.getLogger(__name__)

DEFAULT_VEHICLE_RADIUS_M = 200.0


def sort_stations(stations: Iterable[Station]) -> tuple[Station, ...]:
    # Stable, so equally distant stations keep the provider's order.
    return tuple(
        sorted(
            stations,
            key=lambda s: s.distance_m if s.distance_m is not None else float("inf"),
        )
    )


def unique_route_ids(assignments: Iterable[VehicleStationAssignment]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for a in assignments:
        if a.vehicle.route_id:
            seen.setdefault(a.vehicle.route_id, None)
    return tuple(seen)


@dataclass(frozen=True, slots=True)
class NearbyTransit:
    stations: tuple[Station, ...]
    vehicles: tuple[VehicleStationAssignment, ...]

    @property
    def route_ids(self) -> tuple[str, ...]:
        return unique_route_ids(self.vehicles)


@dataclass(slots=True)
class NearbyTransitService:
    """Stations around a point and the live vehicles closest to them."""

    places_provider: IPlacesProvider
    feed_provider: ITransitFeedProvider

    async def list_stations(
        self, *, location: GeoPoint, radius_m: int
    ) -> tuple[Station, ...]:
        stations = await self.places_provider.nearby_stations(
            location=location, radius_m=radius_m
        )
        return sort_stations(stations)

    async def list_vehicles(self) -> tuple[VehiclePosition, ...]:
        """All vehicles that can be placed on a map: coordinates plus route."""

        content = await self.feed_provider.fetch_vehicle_positions()
        vehicles = decode_feed(content).vehicles
        usable = usable_vehicles(vehicles)
        logger.info("Returning %d of %d vehicles", len(usable), len(vehicles))
        return tuple(usable)

    async def list_alerts(
        self, *, route_ids: set[str] | None = None
    ) -> tuple[Alert, ...]:
        content = await self.feed_provider.fetch_alerts()
        alerts = decode_feed(content).alerts
        if not route_ids:
            return alerts
        return tuple(
            a
            for a in alerts
            if any(
                ie.route_id in route_ids
                or (ie.trip is not None and ie.trip.route_id in route_ids)
                for ie in a.informed_entities
            )
        )

    async def nearby_transit(
        self,
        *,
        location: GeoPoint,
        radius_m: int,
        vehicle_radius_m: float = DEFAULT_VEHICLE_RADIUS_M,
    ) -> NearbyTransit:
        stations = await self.list_stations(location=location, radius_m=radius_m)
        logger.info(
            "Finding transit near %s within %dm: %d stations",
            location.as_query(),
            radius_m,
            len(stations),
        )
        if not stations:
            return NearbyTransit(stations=(), vehicles=())

        vehicles = await self.list_vehicles()
        assignments = correlate(vehicles, stations, vehicle_radius_m)
        logger.info("Found %d vehicles near transit stations", len(assignments))
        return NearbyTransit(stations=stations, vehicles=tuple(assignments))
