from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from clicktrip.adapters.runtime import RuntimeConfig, async_client, fetch
from clicktrip.app.ports.output import ITransitFeedProvider
from clicktrip.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PROTOBUF_HEADERS = {"Accept": "application/x-protobuf"}


@dataclass(slots=True)
class HttpGtfsRealtimeFeedProvider(ITransitFeedProvider):
    """Fetches TransLink GTFS-Realtime feeds over HTTP.

    Env vars (via RuntimeConfig):
      - TRANSLINK_API_KEY: sent as the `apikey` query parameter
      - TRANSLINK_GTFS_BASE_URL: default https://gtfsapi.translink.ca/v3
      - HTTP_TIMEOUT_S: request timeout (default 10)
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
                self.base_url = cfg.gtfs_base_url
            if self.timeout_s is None:
                self.timeout_s = cfg.timeout_s

    async def _get_feed(self, path: str) -> bytes:
        if not self.api_key:
            raise ConfigurationError("TRANSLINK_API_KEY is not configured")

        url = f"{(self.base_url or '').rstrip('/')}/{path}"
        async with async_client(
            timeout_s=float(self.timeout_s or 10.0), transport=self.transport
        ) as client:
            resp = await fetch(
                client,
                url,
                upstream="TransLink GTFS-Realtime",
                params={"apikey": self.api_key},
                headers=PROTOBUF_HEADERS,
            )
        content = resp.content
        logger.info("Received %s feed, %d bytes", path, len(content))
        return content

    async def fetch_vehicle_positions(self) -> bytes:
        return await self._get_feed("gtfsposition")

    async def fetch_trip_updates(self) -> bytes:
        return await self._get_feed("gtfsrealtime")

    async def fetch_alerts(self) -> bytes:
        return await self._get_feed("gtfsalerts")
