from __future__ import annotations

import logging
import time
from typing import Any, assert_never

from google.protobuf import message as pb_message

from clicktrip.app.realtime.gtfs_schema import FEED_MESSAGE_TYPE, get_feed_schema
from clicktrip.domain.exceptions import DecodeError
from clicktrip.domain.models import (
    Alert,
    DecodedFeed,
    FeedEntity,
    FeedEnvelope,
    FeedHeader,
    StopTimeEvent,
    StopTimeUpdate,
    TripUpdate,
    VehiclePosition,
)
from clicktrip.domain.models.realtime import (
    UNKNOWN_ID,
    EntitySelector,
    TimeRange,
    TranslatedString,
    Translation,
    TripReference,
)

logger = logging.getLogger(__name__)


def _opt(msg: Any, name: str) -> Any:
    return getattr(msg, name) if msg.HasField(name) else None


def _opt_str(msg: Any, name: str) -> str | None:
    return (getattr(msg, name) or None) if msg.HasField(name) else None


def _enum_name(msg: Any, name: str) -> str | None:
    if not msg.HasField(name):
        return None
    enum_type = msg.DESCRIPTOR.fields_by_name[name].enum_type
    value = enum_type.values_by_number.get(getattr(msg, name))
    return value.name if value is not None else None


def _stop_time_event(msg: Any) -> StopTimeEvent:
    return StopTimeEvent(
        delay=_opt(msg, "delay"),
        time=_opt(msg, "time"),
        uncertainty=_opt(msg, "uncertainty"),
    )


def _stop_time_update(msg: Any) -> StopTimeUpdate:
    return StopTimeUpdate(
        stop_sequence=_opt(msg, "stop_sequence"),
        stop_id=_opt_str(msg, "stop_id"),
        arrival=_stop_time_event(msg.arrival) if msg.HasField("arrival") else None,
        departure=(
            _stop_time_event(msg.departure) if msg.HasField("departure") else None
        ),
        schedule_relationship=_enum_name(msg, "schedule_relationship"),
    )


def _vehicle_position(entity: Any, now_s: int) -> VehiclePosition | None:
    v = entity.vehicle
    if not v.HasField("position"):
        return None

    pos = v.position
    trip_id = route_id = None
    if v.HasField("trip"):
        trip_id = _opt_str(v.trip, "trip_id")
        route_id = _opt_str(v.trip, "route_id")

    vehicle_id = None
    if v.HasField("vehicle"):
        vehicle_id = _opt_str(v.vehicle, "id")

    timestamp = int(v.timestamp) if v.HasField("timestamp") else now_s

    return VehiclePosition(
        vehicle_id=vehicle_id or entity.id or UNKNOWN_ID,
        trip_id=trip_id,
        route_id=route_id,
        latitude=float(pos.latitude),
        longitude=float(pos.longitude),
        bearing=float(pos.bearing) if pos.HasField("bearing") else None,
        speed=float(pos.speed) if pos.HasField("speed") else None,
        timestamp=timestamp,
        current_stop_sequence=_opt(v, "current_stop_sequence"),
        current_status=_enum_name(v, "current_status"),
        stop_id=_opt_str(v, "stop_id"),
    )


def _trip_update(entity: Any) -> TripUpdate:
    tu = entity.trip_update
    trip = tu.trip
    return TripUpdate(
        trip_id=_opt_str(trip, "trip_id") or UNKNOWN_ID,
        route_id=_opt_str(trip, "route_id"),
        direction_id=_opt(trip, "direction_id"),
        schedule_relationship=_enum_name(trip, "schedule_relationship"),
        stop_time_updates=tuple(_stop_time_update(s) for s in tu.stop_time_update),
        vehicle_id=_opt_str(tu.vehicle, "id") if tu.HasField("vehicle") else None,
        timestamp=_opt(tu, "timestamp"),
    )


def _translated(msg: Any, name: str) -> TranslatedString | None:
    if not msg.HasField(name):
        return None
    return TranslatedString(
        translations=tuple(
            Translation(text=t.text, language=_opt_str(t, "language"))
            for t in getattr(msg, name).translation
        )
    )


def _entity_selector(msg: Any) -> EntitySelector:
    trip = None
    if msg.HasField("trip"):
        trip = TripReference(
            trip_id=_opt_str(msg.trip, "trip_id"),
            route_id=_opt_str(msg.trip, "route_id"),
            direction_id=_opt(msg.trip, "direction_id"),
        )
    return EntitySelector(
        agency_id=_opt_str(msg, "agency_id"),
        route_id=_opt_str(msg, "route_id"),
        route_type=_opt(msg, "route_type"),
        trip=trip,
        stop_id=_opt_str(msg, "stop_id"),
    )


def _alert(entity: Any) -> Alert:
    a = entity.alert
    return Alert(
        active_periods=tuple(
            TimeRange(start=_opt(p, "start"), end=_opt(p, "end"))
            for p in a.active_period
        ),
        informed_entities=tuple(_entity_selector(ie) for ie in a.informed_entity),
        cause=_enum_name(a, "cause"),
        effect=_enum_name(a, "effect"),
        url=_translated(a, "url"),
        header_text=_translated(a, "header_text"),
        description_text=_translated(a, "description_text"),
    )


def _entities(msg: Any, now_s: int) -> list[FeedEntity]:
    """One FeedEntity per payload present on the message.

    vehicle, trip_update and alert are independent optional fields, so a
    message may carry several. A message with nothing usable still yields a
    single entity with no payload.
    """

    payloads: list[VehiclePosition | TripUpdate | Alert | None] = []
    if msg.HasField("vehicle"):
        payloads.append(_vehicle_position(msg, now_s))
    if msg.HasField("trip_update"):
        payloads.append(_trip_update(msg))
    if msg.HasField("alert"):
        payloads.append(_alert(msg))

    is_deleted = bool(msg.is_deleted) if msg.HasField("is_deleted") else False
    present = [p for p in payloads if p is not None] or [None]
    return [FeedEntity(id=msg.id, payload=p, is_deleted=is_deleted) for p in present]


def decode_envelope(content: bytes, *, now: float | None = None) -> FeedEnvelope:
    """Decode raw GTFS-Realtime bytes into typed records.

    Vehicles without a `timestamp` get `now` (defaults to the current time).
    Raises DecodeError for malformed or truncated input.
    """

    schema = get_feed_schema()
    feed_message_cls = schema.message_class(FEED_MESSAGE_TYPE)

    feed = feed_message_cls()
    try:
        feed.ParseFromString(content)
    except (pb_message.Error, TypeError) as exc:
        raise DecodeError(f"Failed to decode GTFS-Realtime feed: {exc}") from exc

    now_s = int(now if now is not None else time.time())
    header = FeedHeader(
        gtfs_realtime_version=feed.header.gtfs_realtime_version,
        incrementality=_enum_name(feed.header, "incrementality"),
        timestamp=_opt(feed.header, "timestamp"),
    )
    entities = tuple(ent for e in feed.entity for ent in _entities(e, now_s))
    return FeedEnvelope(header=header, entities=entities)


def bucket_entities(entities: tuple[FeedEntity, ...]) -> DecodedFeed:
    """Split entities by payload kind in a single pass."""

    vehicles: list[VehiclePosition] = []
    trip_updates: list[TripUpdate] = []
    alerts: list[Alert] = []

    for entity in entities:
        payload = entity.payload
        if payload is None:
            continue
        elif isinstance(payload, VehiclePosition):
            vehicles.append(payload)
        elif isinstance(payload, TripUpdate):
            trip_updates.append(payload)
        elif isinstance(payload, Alert):
            alerts.append(payload)
        else:
            assert_never(payload)

    return DecodedFeed(
        vehicles=tuple(vehicles),
        trip_updates=tuple(trip_updates),
        alerts=tuple(alerts),
    )


def decode_feed(content: bytes, *, now: float | None = None) -> DecodedFeed:
    envelope = decode_envelope(content, now=now)
    decoded = bucket_entities(envelope.entities)
    logger.debug(
        "Decoded %d bytes: %d vehicles, %d trip updates, %d alerts",
        len(content),
        len(decoded.vehicles),
        len(decoded.trip_updates),
        len(decoded.alerts),
    )
    return decoded


def parse_vehicle_positions(
    content: bytes, *, now: float | None = None
) -> tuple[VehiclePosition, ...]:
    return decode_feed(content, now=now).vehicles


def parse_trip_updates(content: bytes) -> tuple[TripUpdate, ...]:
    return decode_feed(content).trip_updates


def parse_alerts(content: bytes) -> tuple[Alert, ...]:
    return decode_feed(content).alerts
