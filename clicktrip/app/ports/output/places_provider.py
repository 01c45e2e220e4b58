from __future__ import annotations

from abc import ABC, abstractmethod

from clicktrip.domain.models import GeoPoint, GeocodeResult, Station


class IPlacesProvider(ABC):
    """Port for discovering transit stations around a point."""

    @abstractmethod
    async def nearby_stations(
        self, *, location: GeoPoint, radius_m: int
    ) -> tuple[Station, ...]:
        raise NotImplementedError


class IGeocoder(ABC):
    """Port for turning a free-form address into coordinates."""

    @abstractmethod
    async def geocode(self, *, address: str) -> GeocodeResult:
        raise NotImplementedError
