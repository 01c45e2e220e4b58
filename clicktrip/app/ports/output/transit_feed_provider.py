from __future__ import annotations

from abc import ABC, abstractmethod


class ITransitFeedProvider(ABC):
    """Port for fetching raw GTFS-Realtime feeds.

    Implementations return the bytes untouched; decoding happens in-process.
    """

    @abstractmethod
    async def fetch_vehicle_positions(self) -> bytes:
        raise NotImplementedError

    @abstractmethod
    async def fetch_trip_updates(self) -> bytes:
        raise NotImplementedError

    @abstractmethod
    async def fetch_alerts(self) -> bytes:
        raise NotImplementedError
