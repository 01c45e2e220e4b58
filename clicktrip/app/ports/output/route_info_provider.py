from __future__ import annotations

from abc import ABC, abstractmethod

from clicktrip.domain.models import RouteInfo


class IRouteInfoProvider(ABC):
    """Port for route metadata (name, mode, colours) keyed by route id."""

    @abstractmethod
    async def get_route(self, route_id: str) -> RouteInfo:
        raise NotImplementedError
