from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

UNKNOWN_ID = "unknown"


@dataclass(frozen=True, slots=True)
class VehiclePosition:
    vehicle_id: str
    latitude: float
    longitude: float
    timestamp: int  # epoch seconds; decode time when the feed omits it
    trip_id: str | None = None
    route_id: str | None = None
    bearing: float | None = None  # degrees, 0-360
    speed: float | None = None  # m/s
    current_stop_sequence: int | None = None
    current_status: str | None = None  # VehicleStopStatus name, e.g. IN_TRANSIT_TO
    stop_id: str | None = None


@dataclass(frozen=True, slots=True)
class StopTimeEvent:
    delay: int | None = None  # seconds, negative when early
    time: int | None = None  # epoch seconds
    uncertainty: int | None = None


@dataclass(frozen=True, slots=True)
class StopTimeUpdate:
    stop_sequence: int | None = None
    stop_id: str | None = None
    arrival: StopTimeEvent | None = None
    departure: StopTimeEvent | None = None
    schedule_relationship: str | None = None

    @property
    def effective_event(self) -> StopTimeEvent | None:
        """The departure event if it carries a time, otherwise the arrival."""

        if self.departure is not None and self.departure.time is not None:
            return self.departure
        if self.arrival is not None and self.arrival.time is not None:
            return self.arrival
        return None

    @property
    def effective_time(self) -> int | None:
        event = self.effective_event
        return event.time if event is not None else None

    @property
    def effective_delay(self) -> int:
        # Taken from the same event as effective_time.
        event = self.effective_event
        if event is None or event.delay is None:
            return 0
        return event.delay


@dataclass(frozen=True, slots=True)
class TripUpdate:
    trip_id: str = UNKNOWN_ID
    route_id: str | None = None
    direction_id: int | None = None
    schedule_relationship: str | None = None
    stop_time_updates: tuple[StopTimeUpdate, ...] = ()
    vehicle_id: str | None = None
    timestamp: int | None = None


@dataclass(frozen=True, slots=True)
class TimeRange:
    start: int | None = None
    end: int | None = None


@dataclass(frozen=True, slots=True)
class TripReference:
    trip_id: str | None = None
    route_id: str | None = None
    direction_id: int | None = None


@dataclass(frozen=True, slots=True)
class EntitySelector:
    agency_id: str | None = None
    route_id: str | None = None
    route_type: int | None = None
    trip: TripReference | None = None
    stop_id: str | None = None


@dataclass(frozen=True, slots=True)
class Translation:
    text: str
    language: str | None = None


@dataclass(frozen=True, slots=True)
class TranslatedString:
    translations: tuple[Translation, ...] = ()

    def text(self, language: str | None = None) -> str | None:
        """Pick the translation for `language`, else the first one."""

        for t in self.translations:
            if language is not None and t.language == language:
                return t.text
        return self.translations[0].text if self.translations else None


@dataclass(frozen=True, slots=True)
class Alert:
    active_periods: tuple[TimeRange, ...] = ()
    informed_entities: tuple[EntitySelector, ...] = ()
    cause: str | None = None
    effect: str | None = None
    url: TranslatedString | None = None
    header_text: TranslatedString | None = None
    description_text: TranslatedString | None = None


EntityPayload = Union[VehiclePosition, TripUpdate, Alert, None]


@dataclass(frozen=True, slots=True)
class FeedEntity:
    """One update unit of a feed.

    `payload` is None when the entity carries nothing usable, including a
    vehicle record that has no position.
    """

    id: str
    payload: EntityPayload = None
    is_deleted: bool = False


@dataclass(frozen=True, slots=True)
class FeedHeader:
    gtfs_realtime_version: str
    incrementality: str | None = None
    timestamp: int | None = None


@dataclass(frozen=True, slots=True)
class FeedEnvelope:
    header: FeedHeader
    entities: tuple[FeedEntity, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class DecodedFeed:
    vehicles: tuple[VehiclePosition, ...] = ()
    trip_updates: tuple[TripUpdate, ...] = ()
    alerts: tuple[Alert, ...] = ()


@dataclass(frozen=True, slots=True)
class VehicleStationAssignment:
    """A vehicle matched to its nearest station."""

    vehicle: VehiclePosition
    station_id: str
    station_name: str
    distance_to_station_m: int  # rounded, for display
    distance_exact_m: float
