from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass

import httpx

from clicktrip.domain.exceptions import UpstreamUnavailable

logger = logging.getLogger(__name__)

DEFAULT_GTFS_BASE_URL = "https://gtfsapi.translink.ca/v3"
DEFAULT_RTTI_BASE_URL = "https://api.translink.ca/rttiapi/v1"
DEFAULT_GOOGLE_MAPS_BASE_URL = "https://maps.googleapis.com/maps/api"

_SECRET_PARAMS = re.compile(r"((?:apikey|key)=)[^&]+", re.IGNORECASE)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is not None:
        value = value.strip() or None
    return value


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    google_maps_api_key: str | None
    translink_api_key: str | None
    gtfs_base_url: str
    rtti_base_url: str
    google_maps_base_url: str
    timeout_s: float
    reveal_errors: bool

    @staticmethod
    def from_env() -> "RuntimeConfig":
        """Read configuration from the environment.

        Env vars:
          - GOOGLE_MAPS_API_KEY: Places, Geocoding and Directions
          - TRANSLINK_API_KEY: GTFS-Realtime and RTTI
          - TRANSLINK_GTFS_BASE_URL / TRANSLINK_RTTI_BASE_URL: override endpoints
          - GOOGLE_MAPS_BASE_URL: override the Google web services root
          - HTTP_TIMEOUT_S: outbound request timeout (default 10)
          - CLICKTRIP_REVEAL_ERRORS: expose unexpected error messages in 500s
        """

        timeout_raw = _env_str("HTTP_TIMEOUT_S")
        return RuntimeConfig(
            google_maps_api_key=_env_str("GOOGLE_MAPS_API_KEY"),
            translink_api_key=_env_str("TRANSLINK_API_KEY"),
            gtfs_base_url=_env_str("TRANSLINK_GTFS_BASE_URL") or DEFAULT_GTFS_BASE_URL,
            rtti_base_url=_env_str("TRANSLINK_RTTI_BASE_URL") or DEFAULT_RTTI_BASE_URL,
            google_maps_base_url=(
                _env_str("GOOGLE_MAPS_BASE_URL") or DEFAULT_GOOGLE_MAPS_BASE_URL
            ),
            timeout_s=float(timeout_raw) if timeout_raw else 10.0,
            reveal_errors=_env_bool("CLICKTRIP_REVEAL_ERRORS", False),
        )


def redact(url: str | httpx.URL) -> str:
    """Hide API keys before a URL ends up in a log line or error message."""

    return _SECRET_PARAMS.sub(r"\1REDACTED", str(url))


def async_client(
    *, timeout_s: float, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout_s, transport=transport)


async def fetch(
    client: httpx.AsyncClient,
    url: str,
    *,
    upstream: str,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """GET `url`, turning timeouts, transport errors and non-2xx into
    UpstreamUnavailable."""

    try:
        resp = await client.get(url, params=params, headers=headers)
    except httpx.TimeoutException as exc:
        raise UpstreamUnavailable(f"{upstream} timed out") from exc
    except httpx.HTTPError as exc:
        raise UpstreamUnavailable(f"{upstream} unreachable: {redact(str(exc))}") from exc

    logger.debug(
        "%s responded %s for %s (%s bytes)",
        upstream,
        resp.status_code,
        redact(resp.request.url),
        resp.headers.get("content-length", "?"),
    )

    if resp.is_error:
        raise UpstreamUnavailable(
            f"{upstream} error: {resp.status_code} {resp.reason_phrase}"
        )
    return resp
