from __future__ import annotations

import math

from clicktrip.domain.algorithms.correlation import (
    correlate,
    is_usable_for_correlation,
    nearest_station,
    usable_vehicles,
)
from clicktrip.domain.algorithms.geo_utils import haversine_m
from clicktrip.domain.models import GeoPoint, Station, VehiclePosition


def _vehicle(vid: str, lat: float, lon: float, route_id: str | None = "99"):
    return VehiclePosition(
        vehicle_id=vid,
        latitude=lat,
        longitude=lon,
        timestamp=1700000000,
        route_id=route_id,
    )


def _station(sid: str, lat: float, lon: float) -> Station:
    return Station(id=sid, name=f"Station {sid}", location=GeoPoint(lat=lat, lon=lon))


STATION_A = _station("A", 49.2820, -123.1200)
STATION_B = _station("B", 49.3000, -123.1500)


def test_vehicle_is_assigned_to_nearest_station_within_radius() -> None:
    v = _vehicle("8123", 49.2827, -123.1207)

    (a,) = correlate([v], [STATION_A, STATION_B], 200)

    assert a.vehicle is v
    assert a.station_id == "A"
    assert a.station_name == "Station A"
    assert abs(a.distance_to_station_m - 95) <= 5
    assert a.distance_to_station_m == round(a.distance_exact_m)


def test_vehicle_beyond_radius_is_excluded() -> None:
    v = _vehicle("8123", 49.2827, -123.1207)

    assert correlate([v], [STATION_A, STATION_B], 50) == []


def test_vehicle_on_station_has_zero_distance() -> None:
    v = _vehicle("v", STATION_B.location.lat, STATION_B.location.lon)

    (a,) = correlate([v], [STATION_A, STATION_B], 1)

    assert a.station_id == "B"
    assert a.distance_to_station_m == 0
    assert correlate([v], [STATION_A, STATION_B], 0)[0].station_id == "B"


def test_threshold_is_inclusive_on_unrounded_distance() -> None:
    v = _vehicle("v", 49.2827, -123.1207)
    d = haversine_m(49.2827, -123.1207, STATION_A.location.lat, STATION_A.location.lon)

    assert len(correlate([v], [STATION_A], d)) == 1
    assert correlate([v], [STATION_A], math.nextafter(d, 0.0)) == []


def test_first_station_wins_a_tie() -> None:
    twin_1 = _station("T1", 49.2820, -123.1200)
    twin_2 = _station("T2", 49.2820, -123.1200)
    v = _vehicle("v", 49.2827, -123.1207)

    assert correlate([v], [twin_1, twin_2], 200)[0].station_id == "T1"
    assert correlate([v], [twin_2, twin_1], 200)[0].station_id == "T2"


def test_empty_inputs_give_empty_result() -> None:
    v = _vehicle("v", 49.2827, -123.1207)

    assert correlate([v], [], 200) == []
    assert correlate([], [STATION_A], 200) == []
    assert nearest_station(49.0, -123.0, []) is None


def test_non_finite_coordinates_are_not_assigned() -> None:
    vehicles = [
        _vehicle("nan", float("nan"), -123.1207),
        _vehicle("inf", 49.2827, float("inf")),
        _vehicle("ok", 49.2827, -123.1207),
    ]

    out = correlate(vehicles, [STATION_A], 200)

    assert [a.vehicle.vehicle_id for a in out] == ["ok"]


def test_output_keeps_vehicle_order_and_is_deterministic() -> None:
    vehicles = [
        _vehicle("3", 49.2999, -123.1499),
        _vehicle("1", 49.2821, -123.1201),
        _vehicle("2", 49.2822, -123.1202),
    ]
    stations = [STATION_A, STATION_B]

    first = correlate(vehicles, stations, 500)
    second = correlate(vehicles, stations, 500)

    assert [a.vehicle.vehicle_id for a in first] == ["3", "1", "2"]
    assert [a.station_id for a in first] == ["B", "A", "A"]
    assert first == second


def test_inputs_are_not_mutated() -> None:
    vehicles = [_vehicle("1", 49.2821, -123.1201)]
    stations = [STATION_B, STATION_A]

    correlate(vehicles, stations, 500)

    assert [v.vehicle_id for v in vehicles] == ["1"]
    assert [s.id for s in stations] == ["B", "A"]


def test_usable_vehicles_need_coordinates_and_route() -> None:
    vehicles = [
        _vehicle("ok", 49.28, -123.12),
        _vehicle("no-route", 49.28, -123.12, route_id=None),
        _vehicle("empty-route", 49.28, -123.12, route_id=""),
        _vehicle("zero-lat", 0.0, -123.12),
        _vehicle("nan", float("nan"), -123.12),
    ]

    assert [v.vehicle_id for v in usable_vehicles(vehicles)] == ["ok"]
    assert is_usable_for_correlation(vehicles[0])
    assert not is_usable_for_correlation(vehicles[3])
