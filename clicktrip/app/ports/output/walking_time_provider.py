from __future__ import annotations

from abc import ABC, abstractmethod

from clicktrip.domain.models import GeoPoint


class IWalkingTimeProvider(ABC):
    @abstractmethod
    async def walking_seconds(self, *, origin: GeoPoint, destination: GeoPoint) -> int:
        """Walking duration in seconds along the street network."""
