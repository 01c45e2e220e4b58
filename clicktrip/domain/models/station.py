from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class Station:
    id: str
    name: str
    location: GeoPoint
    distance_m: int | None = None  # from the search origin, rounded
    address: str | None = None
    types: tuple[str, ...] = ()
