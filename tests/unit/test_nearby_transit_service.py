from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from google.transit import gtfs_realtime_pb2

from clicktrip.app.services.nearby_transit_service import (
    NearbyTransitService,
    sort_stations,
)
from clicktrip.domain.models import GeoPoint, Station

ORIGIN = GeoPoint(lat=49.2830, lon=-123.1210)


def _station(sid: str, lat: float, lon: float, distance_m: int | None) -> Station:
    return Station(
        id=sid, name=sid, location=GeoPoint(lat=lat, lon=lon), distance_m=distance_m
    )


def _vehicle_feed(*vehicles: tuple[str, float, float, str | None]) -> bytes:
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "2.0"
    for vid, lat, lon, route_id in vehicles:
        ent = feed.entity.add()
        ent.id = vid
        ent.vehicle.position.latitude = lat
        ent.vehicle.position.longitude = lon
        if route_id is not None:
            ent.vehicle.trip.route_id = route_id
    return feed.SerializeToString()


def _alert_feed() -> bytes:
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "2.0"

    by_route = feed.entity.add()
    by_route.id = "a-route"
    by_route.alert.informed_entity.add().route_id = "99"

    by_trip = feed.entity.add()
    by_trip.id = "a-trip"
    by_trip.alert.informed_entity.add().trip.route_id = "14"

    other = feed.entity.add()
    other.id = "a-other"
    other.alert.informed_entity.add().route_id = "7"
    return feed.SerializeToString()


@dataclass(slots=True)
class FakePlacesProvider:
    stations: tuple[Station, ...]
    calls: list[tuple[GeoPoint, int]] = field(default_factory=list)

    async def nearby_stations(self, *, location: GeoPoint, radius_m: int):
        self.calls.append((location, radius_m))
        return self.stations


@dataclass(slots=True)
class FakeFeedProvider:
    vehicles: bytes = b""
    alerts: bytes = b""
    calls: int = 0

    async def fetch_vehicle_positions(self) -> bytes:
        self.calls += 1
        return self.vehicles

    async def fetch_trip_updates(self) -> bytes:
        return b""

    async def fetch_alerts(self) -> bytes:
        return self.alerts


def test_sort_stations_by_distance_keeps_ties_in_order() -> None:
    stations = [
        _station("far", 0.0, 0.0, 300),
        _station("unknown", 0.0, 0.0, None),
        _station("tie-1", 0.0, 0.0, 100),
        _station("tie-2", 0.0, 0.0, 100),
    ]

    assert [s.id for s in sort_stations(stations)] == [
        "tie-1",
        "tie-2",
        "far",
        "unknown",
    ]


def test_list_vehicles_drops_unplaceable_ones() -> None:
    feeds = FakeFeedProvider(
        vehicles=_vehicle_feed(
            ("ok", 49.28, -123.12, "99"),
            ("no-route", 49.28, -123.12, None),
            ("zero", 0.0, 0.0, "14"),
        )
    )
    svc = NearbyTransitService(places_provider=FakePlacesProvider(()), feed_provider=feeds)

    vehicles = asyncio.run(svc.list_vehicles())

    assert [v.vehicle_id for v in vehicles] == ["ok"]


def test_nearby_transit_assigns_vehicles_to_stations() -> None:
    places = FakePlacesProvider(
        (
            _station("B", 49.3000, -123.1500, 2500),
            _station("A", 49.2820, -123.1200, 130),
        )
    )
    feeds = FakeFeedProvider(
        vehicles=_vehicle_feed(
            ("near", 49.2827, -123.1207, "99"),
            ("far", 49.2000, -123.0000, "14"),
            ("near-too", 49.2821, -123.1201, "99"),
        )
    )
    svc = NearbyTransitService(places_provider=places, feed_provider=feeds)

    result = asyncio.run(svc.nearby_transit(location=ORIGIN, radius_m=3000))

    assert places.calls == [(ORIGIN, 3000)]
    assert [s.id for s in result.stations] == ["A", "B"]
    assert [a.vehicle.vehicle_id for a in result.vehicles] == ["near", "near-too"]
    assert {a.station_id for a in result.vehicles} == {"A"}
    assert result.route_ids == ("99",)


def test_nearby_transit_without_stations_skips_vehicle_feed() -> None:
    feeds = FakeFeedProvider(vehicles=_vehicle_feed(("v", 49.28, -123.12, "99")))
    svc = NearbyTransitService(places_provider=FakePlacesProvider(()), feed_provider=feeds)

    result = asyncio.run(svc.nearby_transit(location=ORIGIN, radius_m=500))

    assert result.stations == ()
    assert result.vehicles == ()
    assert feeds.calls == 0


def test_list_alerts_filters_on_route_or_trip_route() -> None:
    feeds = FakeFeedProvider(alerts=_alert_feed())
    svc = NearbyTransitService(places_provider=FakePlacesProvider(()), feed_provider=feeds)

    everything = asyncio.run(svc.list_alerts())
    filtered = asyncio.run(svc.list_alerts(route_ids={"99", "14"}))

    assert len(everything) == 3
    assert len(filtered) == 2
