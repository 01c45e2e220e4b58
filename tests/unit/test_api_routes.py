from __future__ import annotations

import time
from dataclasses import dataclass

import httpx
import pytest
from google.transit import gtfs_realtime_pb2

from clicktrip.adapters.api.dependencies import (
    get_departures_service,
    get_geocoder,
    get_nearby_transit_service,
    get_route_info_provider,
    get_walking_time_service,
)
from clicktrip.app.services.departures_service import DeparturesService
from clicktrip.app.services.nearby_transit_service import NearbyTransitService
from clicktrip.app.services.walking_time_service import WalkingTimeService
from clicktrip.domain.exceptions import (
    DecodeError,
    NoResultsFound,
    UpstreamUnavailable,
)
from clicktrip.domain.models import GeoPoint, GeocodeResult, RouteInfo, Station
from clicktrip.main import app

STATION_A = Station(
    id="A", name="Alpha", location=GeoPoint(lat=49.2820, lon=-123.1200), distance_m=130
)


def _feed_bytes(*, departure_in_s: int = 600) -> tuple[bytes, bytes]:
    now_s = int(time.time())

    vehicles = gtfs_realtime_pb2.FeedMessage()
    vehicles.header.gtfs_realtime_version = "2.0"
    ent = vehicles.entity.add()
    ent.id = "bus-1"
    ent.vehicle.position.latitude = 49.2827
    ent.vehicle.position.longitude = -123.1207
    ent.vehicle.trip.route_id = "99"
    ent.vehicle.timestamp = now_s

    trips = gtfs_realtime_pb2.FeedMessage()
    trips.header.gtfs_realtime_version = "2.0"
    ent = trips.entity.add()
    ent.id = "T1"
    ent.trip_update.trip.trip_id = "T1"
    ent.trip_update.trip.route_id = "99"
    stu = ent.trip_update.stop_time_update.add()
    stu.stop_id = "50001"
    stu.departure.time = now_s + departure_in_s
    stu.departure.delay = 120
    return vehicles.SerializeToString(), trips.SerializeToString()


@dataclass(slots=True)
class FakeFeedProvider:
    vehicles: bytes = b""
    trips: bytes = b""
    alerts: bytes = b""
    error: Exception | None = None

    async def fetch_vehicle_positions(self) -> bytes:
        if self.error is not None:
            raise self.error
        return self.vehicles

    async def fetch_trip_updates(self) -> bytes:
        if self.error is not None:
            raise self.error
        return self.trips

    async def fetch_alerts(self) -> bytes:
        return self.alerts


@dataclass(slots=True)
class FakePlacesProvider:
    stations: tuple[Station, ...] = (STATION_A,)
    seen_radius: int | None = None

    async def nearby_stations(self, *, location: GeoPoint, radius_m: int):
        self.seen_radius = radius_m
        return self.stations


class FakeRouteInfoProvider:
    async def get_route(self, route_id: str) -> RouteInfo:
        return RouteInfo(id=route_id, short_name=route_id, long_name="UBC B-Line")


class FakeGeocoder:
    async def geocode(self, *, address: str) -> GeocodeResult:
        if address == "nowhere":
            raise NoResultsFound(f'No results found for address: "{address}".')
        return GeocodeResult(
            location=GeoPoint(lat=49.2827, lon=-123.1207),
            formatted_address="Vancouver, BC, Canada",
            city="Vancouver",
            country="Canada",
        )


@pytest.fixture(autouse=True)
def _clear_overrides():
    yield
    app.dependency_overrides.clear()


def _client(*, raise_app_exceptions: bool = True) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.mark.unit
@pytest.mark.anyio
async def test_health() -> None:
    async with _client() as client:
        resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_nearby_transit_returns_stations_and_vehicles() -> None:
    vehicles, _ = _feed_bytes()
    app.dependency_overrides[get_nearby_transit_service] = lambda: NearbyTransitService(
        places_provider=FakePlacesProvider(),
        feed_provider=FakeFeedProvider(vehicles=vehicles),
    )

    async with _client() as client:
        resp = await client.get(
            "/nearby-transit", params={"lat": 49.283, "lon": -123.121}
        )

    assert resp.status_code == 200
    payload = resp.json()
    assert [s["id"] for s in payload["stations"]] == ["A"]
    (vehicle,) = payload["vehicles"]
    assert vehicle["nearest_station_id"] == "A"
    assert abs(vehicle["distance_to_station_m"] - 95) <= 5
    assert payload["summary"] == {
        "station_count": 1,
        "vehicle_count": 1,
        "route_ids": ["99"],
    }


@pytest.mark.unit
@pytest.mark.anyio
async def test_vehicle_positions_filters_by_route() -> None:
    vehicles, _ = _feed_bytes()
    app.dependency_overrides[get_nearby_transit_service] = lambda: NearbyTransitService(
        places_provider=FakePlacesProvider(),
        feed_provider=FakeFeedProvider(vehicles=vehicles),
    )

    async with _client() as client:
        hit = await client.get("/vehicle-positions", params={"route_id": "99"})
        miss = await client.get("/vehicle-positions", params={"route_id": "14"})

    assert hit.json()["vehicle_count"] == 1
    assert hit.json()["vehicles"][0]["route_id"] == "99"
    assert miss.json()["vehicle_count"] == 0


@pytest.mark.unit
@pytest.mark.anyio
async def test_trip_departures_by_route_ids() -> None:
    _, trips = _feed_bytes()
    app.dependency_overrides[get_departures_service] = lambda: DeparturesService(
        feed_provider=FakeFeedProvider(trips=trips),
        route_info_provider=FakeRouteInfoProvider(),
    )

    async with _client() as client:
        resp = await client.get("/departures", params={"route_ids": "99, 14"})

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["requested_routes"] == ["99", "14"]
    assert payload["found_routes"] == ["99"]
    assert payload["departure_count"] == 1
    assert payload["departures"][0]["stop_updates"][0]["departure_delay"] == 120


@pytest.mark.unit
@pytest.mark.anyio
async def test_departure_board_uses_radius_from_settings_cookie() -> None:
    vehicles, trips = _feed_bytes()
    places = FakePlacesProvider()
    app.dependency_overrides[get_departures_service] = lambda: DeparturesService(
        feed_provider=FakeFeedProvider(vehicles=vehicles, trips=trips),
        route_info_provider=FakeRouteInfoProvider(),
        places_provider=places,
        walking_time=WalkingTimeService(),
    )

    async with _client() as client:
        resp = await client.get(
            "/departures/nearby",
            params={"lat": 49.283, "lon": -123.121},
            headers={"cookie": 'clicktrip-settings={"radius":800,"timeWindow":20}'},
        )

    assert resp.status_code == 200
    payload = resp.json()
    assert places.seen_radius == 800
    assert payload["radius_m"] == 800
    (dep,) = payload["departures"]
    assert dep["route_id"] == "99"
    assert dep["delay_minutes"] == 2
    assert dep["headsign"] == "UBC B-Line"
    assert dep["station"]["id"] == "A"
    assert dep["walking_minutes"] == 2


@pytest.mark.unit
@pytest.mark.anyio
async def test_route_info_endpoint() -> None:
    app.dependency_overrides[get_route_info_provider] = FakeRouteInfoProvider

    async with _client() as client:
        resp = await client.get("/routes/99")

    assert resp.status_code == 200
    assert resp.json()["mode"] == "bus"
    assert resp.json()["long_name"] == "UBC B-Line"


@pytest.mark.unit
@pytest.mark.anyio
async def test_geocode_and_missing_address() -> None:
    app.dependency_overrides[get_geocoder] = FakeGeocoder

    async with _client() as client:
        ok = await client.get("/geocode", params={"address": "Vancouver"})
        missing = await client.get("/geocode", params={"address": "nowhere"})

    assert ok.status_code == 200
    assert ok.json()["city"] == "Vancouver"
    assert missing.status_code == 404
    assert missing.json()["error"] == "NoResultsFound"


@pytest.mark.unit
@pytest.mark.anyio
async def test_walking_time_falls_back_to_estimate() -> None:
    app.dependency_overrides[get_walking_time_service] = lambda: WalkingTimeService()

    async with _client() as client:
        resp = await client.get(
            "/walking-time",
            params={
                "from_lat": 49.0,
                "from_lon": -123.0,
                "to_lat": 49.001,
                "to_lon": -123.0,
            },
        )

    assert resp.status_code == 200
    assert resp.json() == {"walking_time_minutes": 2}


@pytest.mark.unit
@pytest.mark.anyio
async def test_settings_round_trip_through_cookie() -> None:
    async with _client() as client:
        default = await client.get("/settings")
        saved = await client.put("/settings", json={"radius": 750, "time_window": 15})

    assert default.json() == {"radius": 500, "time_window": 20}
    assert saved.status_code == 200
    set_cookie = saved.headers["set-cookie"]
    assert set_cookie.startswith("clicktrip-settings=")
    assert "Max-Age=31536000" in set_cookie
    assert "SameSite=strict" in set_cookie


@pytest.mark.unit
@pytest.mark.anyio
async def test_settings_rejects_non_positive_radius() -> None:
    async with _client() as client:
        resp = await client.put("/settings", json={"radius": 0, "time_window": 15})

    assert resp.status_code == 422


@pytest.mark.unit
@pytest.mark.anyio
async def test_upstream_failure_maps_to_502() -> None:
    app.dependency_overrides[get_nearby_transit_service] = lambda: NearbyTransitService(
        places_provider=FakePlacesProvider(),
        feed_provider=FakeFeedProvider(error=UpstreamUnavailable("feed error: 503")),
    )

    async with _client() as client:
        resp = await client.get("/vehicle-positions")

    assert resp.status_code == 502
    assert resp.json() == {"detail": "feed error: 503", "error": "UpstreamUnavailable"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_undecodable_feed_maps_to_502() -> None:
    app.dependency_overrides[get_nearby_transit_service] = lambda: NearbyTransitService(
        places_provider=FakePlacesProvider(),
        feed_provider=FakeFeedProvider(vehicles=b"\x0a\x05ab"),
    )

    async with _client() as client:
        resp = await client.get("/vehicle-positions")

    assert resp.status_code == 502
    assert resp.json()["error"] == DecodeError.__name__


@pytest.mark.unit
@pytest.mark.anyio
async def test_unexpected_error_is_json_500() -> None:
    class _Broken:
        async def get_route(self, route_id: str) -> RouteInfo:
            raise RuntimeError("boom")

    app.dependency_overrides[get_route_info_provider] = _Broken

    async with _client(raise_app_exceptions=False) as client:
        resp = await client.get("/routes/99")

    assert resp.status_code == 500
    assert resp.json() == {"detail": "boom", "error": "RuntimeError"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_stops_lists_stations_and_validates_radius() -> None:
    app.dependency_overrides[get_nearby_transit_service] = lambda: NearbyTransitService(
        places_provider=FakePlacesProvider(),
        feed_provider=FakeFeedProvider(),
    )

    async with _client() as client:
        ok = await client.get(
            "/stops", params={"lat": 49.283, "lon": -123.121, "radius": 500}
        )
        bad = await client.get(
            "/stops", params={"lat": 49.283, "lon": -123.121, "radius": 0}
        )

    assert ok.status_code == 200
    assert ok.json()[0]["id"] == "A"
    assert ok.json()[0]["location"] == {"lat": 49.282, "lon": -123.12}
    assert bad.status_code == 422


@pytest.mark.unit
@pytest.mark.anyio
async def test_alerts_filters_by_route() -> None:
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "2.0"
    for alert_id, route_id in (("a1", "99"), ("a2", "14")):
        ent = feed.entity.add()
        ent.id = alert_id
        ent.alert.informed_entity.add().route_id = route_id
        ent.alert.header_text.translation.add().text = f"Detour on {route_id}"

    app.dependency_overrides[get_nearby_transit_service] = lambda: NearbyTransitService(
        places_provider=FakePlacesProvider(),
        feed_provider=FakeFeedProvider(alerts=feed.SerializeToString()),
    )

    async with _client() as client:
        resp = await client.get("/alerts", params={"route_id": "99"})

    assert resp.status_code == 200
    (alert,) = resp.json()
    assert alert["informed_entities"][0]["route_id"] == "99"
    assert alert["header_text"][0]["text"] == "Detour on 99"
