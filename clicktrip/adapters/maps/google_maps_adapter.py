from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from clicktrip.adapters.runtime import RuntimeConfig, async_client, fetch
from clicktrip.app.ports.output import IGeocoder, IPlacesProvider, IWalkingTimeProvider
from clicktrip.domain.algorithms.geo_utils import haversine_distance_m, round_half_up
from clicktrip.domain.exceptions import (
    ConfigurationError,
    NoResultsFound,
    UpstreamRejected,
)
from clicktrip.domain.models import GeoPoint, GeocodeResult, Station

logger = logging.getLogger(__name__)


def _place_to_station(place: dict[str, Any], origin: GeoPoint) -> Station | None:
    try:
        loc = place["geometry"]["location"]
        location = GeoPoint(lat=float(loc["lat"]), lon=float(loc["lng"]))
        place_id = str(place["place_id"])
    except (KeyError, TypeError, ValueError):
        logger.debug("Skipping malformed place: %r", place.get("place_id"))
        return None

    return Station(
        id=place_id,
        name=str(place.get("name") or place_id),
        location=location,
        distance_m=round_half_up(haversine_distance_m(origin, location)),
        address=place.get("vicinity"),
        types=tuple(place.get("types") or ()),
    )


def _component(components: list[dict[str, Any]], *types: str) -> str | None:
    for c in components:
        if any(t in (c.get("types") or ()) for t in types):
            return c.get("long_name")
    return None


@dataclass(slots=True)
class GoogleMapsAdapter(IPlacesProvider, IGeocoder, IWalkingTimeProvider):
    """Google Maps web services: Places nearby search, Geocoding, Directions.

    Env vars (via RuntimeConfig):
      - GOOGLE_MAPS_API_KEY (required)
      - GOOGLE_MAPS_BASE_URL: default https://maps.googleapis.com/maps/api
      - HTTP_TIMEOUT_S
    """

    api_key: str | None = None
    base_url: str | None = None
    timeout_s: float | None = None
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.api_key is None or self.base_url is None or self.timeout_s is None:
            cfg = RuntimeConfig.from_env()
            if self.api_key is None:
                self.api_key = cfg.google_maps_api_key
            if self.base_url is None:
                self.base_url = cfg.google_maps_base_url
            if self.timeout_s is None:
                self.timeout_s = cfg.timeout_s

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _get_json(
        self, path: str, params: dict[str, str], *, upstream: str
    ) -> dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError("GOOGLE_MAPS_API_KEY is not configured")

        url = f"{(self.base_url or '').rstrip('/')}/{path}"
        async with async_client(
            timeout_s=float(self.timeout_s or 10.0), transport=self.transport
        ) as client:
            resp = await fetch(
                client, url, upstream=upstream, params={**params, "key": self.api_key}
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamRejected(f"{upstream} returned invalid JSON") from exc
        logger.debug("%s status: %s", upstream, data.get("status"))
        return data

    async def nearby_stations(
        self, *, location: GeoPoint, radius_m: int
    ) -> tuple[Station, ...]:
        data = await self._get_json(
            "place/nearbysearch/json",
            {
                "location": location.as_query(),
                "radius": str(int(radius_m)),
                "type": "transit_station",
            },
            upstream="Google Places",
        )

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return ()
        if status != "OK":
            raise UpstreamRejected(
                f"Google Places API error: {status} - "
                f"{data.get('error_message') or 'Unknown error'}"
            )

        stations = [
            s
            for s in (_place_to_station(p, location) for p in data.get("results") or [])
            if s is not None
        ]
        logger.info("Found %d transit stations within %dm", len(stations), radius_m)
        return tuple(stations)

    async def geocode(self, *, address: str) -> GeocodeResult:
        data = await self._get_json(
            "geocode/json", {"address": address}, upstream="Google Geocoding"
        )

        status = data.get("status")
        if status == "ZERO_RESULTS" or (status == "OK" and not data.get("results")):
            raise NoResultsFound(
                f'No results found for address: "{address}". '
                "Please try a more specific address."
            )
        if status != "OK":
            raise UpstreamRejected(
                f"Google Geocoding API error: {status} - "
                f"{data.get('error_message') or 'Unknown error'}"
            )

        result = data["results"][0]
        try:
            loc = result["geometry"]["location"]
            location = GeoPoint(lat=float(loc["lat"]), lon=float(loc["lng"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamRejected(
                "Google Geocoding returned a result without a location"
            ) from exc
        components = result.get("address_components") or []
        geocoded = GeocodeResult(
            location=location,
            formatted_address=result.get("formatted_address") or address,
            city=_component(components, "locality", "administrative_area_level_1"),
            country=_component(components, "country"),
        )
        logger.info(
            "Geocoded %r to %s (%s)",
            address,
            geocoded.location.as_query(),
            geocoded.formatted_address,
        )
        return geocoded

    async def walking_seconds(self, *, origin: GeoPoint, destination: GeoPoint) -> int:
        data = await self._get_json(
            "directions/json",
            {
                "origin": origin.as_query(),
                "destination": destination.as_query(),
                "mode": "walking",
            },
            upstream="Google Directions",
        )

        routes = data.get("routes") or []
        if data.get("status") != "OK" or not routes:
            raise UpstreamRejected("No walking route found")
        try:
            return int(routes[0]["legs"][0]["duration"]["value"])
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise UpstreamRejected("Google Directions returned no leg duration") from exc
