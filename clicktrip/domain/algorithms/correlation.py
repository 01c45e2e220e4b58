from __future__ import annotations

import math
from typing import Iterable, Sequence

from clicktrip.domain.algorithms.geo_utils import haversine_m, round_half_up
from clicktrip.domain.models import Station, VehiclePosition, VehicleStationAssignment


def _has_coordinate(value: float | None) -> bool:
    # A zero coordinate is how an unset protobuf position shows up.
    return value is not None and math.isfinite(value) and value != 0.0


def is_usable_for_correlation(vehicle: VehiclePosition) -> bool:
    """A vehicle needs coordinates and a route to be matched to a station."""

    return (
        _has_coordinate(vehicle.latitude)
        and _has_coordinate(vehicle.longitude)
        and bool(vehicle.route_id)
    )


def usable_vehicles(vehicles: Iterable[VehiclePosition]) -> list[VehiclePosition]:
    return [v for v in vehicles if is_usable_for_correlation(v)]


def nearest_station(
    lat: float, lon: float, stations: Sequence[Station]
) -> tuple[Station, float] | None:
    """Return the closest station and its distance in meters.

    The first station in input order wins a tie. Returns None when there are
    no stations or no finite distance could be computed.
    """

    best: Station | None = None
    best_d = math.inf
    for station in stations:
        d = haversine_m(lat, lon, station.location.lat, station.location.lon)
        if d < best_d:
            best_d = d
            best = station

    if best is None:
        return None
    return best, best_d


def correlate(
    vehicles: Sequence[VehiclePosition],
    stations: Sequence[Station],
    max_distance_m: float,
) -> list[VehicleStationAssignment]:
    """Assign each vehicle to its nearest station within `max_distance_m`.

    O(vehicles x stations). The threshold is inclusive and compared against
    the unrounded distance; the rounded value is only for display. Output
    keeps the vehicle input order.
    """

    out: list[VehicleStationAssignment] = []
    if not stations:
        return out

    for vehicle in vehicles:
        if not (math.isfinite(vehicle.latitude) and math.isfinite(vehicle.longitude)):
            continue

        match = nearest_station(vehicle.latitude, vehicle.longitude, stations)
        if match is None:
            continue

        station, distance_m = match
        if distance_m <= max_distance_m:
            out.append(
                VehicleStationAssignment(
                    vehicle=vehicle,
                    station_id=station.id,
                    station_name=station.name,
                    distance_to_station_m=round_half_up(distance_m),
                    distance_exact_m=distance_m,
                )
            )

    return out
