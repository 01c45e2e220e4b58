from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from clicktrip.adapters.runtime import RuntimeConfig, async_client, fetch
from clicktrip.app.ports.output import IRouteInfoProvider
from clicktrip.domain.algorithms.departures import classify_mode
from clicktrip.domain.exceptions import UpstreamError
from clicktrip.domain.models import RouteInfo

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TranslinkRouteInfoAdapter(IRouteInfoProvider):
    """Route metadata from the TransLink RTTI API.

    Any upstream failure degrades to a generic bus route so a departure list
    never fails because of missing metadata.
    """

    api_key: str | None = None
    base_url: str | None = None
    timeout_s: float | None = None
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.api_key is None or self.base_url is None or self.timeout_s is None:
            cfg = RuntimeConfig.from_env()
            if self.api_key is None:
                self.api_key = cfg.translink_api_key
            if self.base_url is None:
                self.base_url = cfg.rtti_base_url
            if self.timeout_s is None:
                self.timeout_s = cfg.timeout_s

    async def get_route(self, route_id: str) -> RouteInfo:
        if not self.api_key:
            logger.warning(
                "TRANSLINK_API_KEY is not configured, no route info for %s", route_id
            )
            return RouteInfo.fallback(route_id)

        url = f"{(self.base_url or '').rstrip('/')}/routes/{quote(route_id, safe='')}"
        try:
            async with async_client(
                timeout_s=float(self.timeout_s or 10.0), transport=self.transport
            ) as client:
                resp = await fetch(
                    client,
                    url,
                    upstream="TransLink RTTI",
                    params={"apikey": self.api_key},
                    headers={"Accept": "application/json"},
                )
            data = resp.json()
        except (UpstreamError, ValueError) as exc:
            logger.warning("Route info for %s unavailable: %s", route_id, exc)
            return RouteInfo.fallback(route_id)
        if not isinstance(data, dict):
            logger.warning("Unexpected route info payload for %s", route_id)
            return RouteInfo.fallback(route_id)

        route_no = str(data.get("RouteNo") or route_id)
        route_name = str(data.get("RouteName") or f"Route {route_id}")
        return RouteInfo(
            id=route_id,
            short_name=route_no,
            long_name=route_name,
            mode=classify_mode(route_no, route_name),
        )
