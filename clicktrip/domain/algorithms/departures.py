from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Mapping

from clicktrip.domain.models import (
    Departure,
    RouteInfo,
    Station,
    StopTimeUpdate,
    TransitMode,
    TripUpdate,
)

DEPARTURE_HORIZON = timedelta(minutes=120)

_TRAIN_NAME_HINTS = ("line", "skytrain")
_TRAIN_NUMBER_HINTS = ("expo", "millennium", "canada")
_FERRY_NAME_HINTS = ("seabus", "ferry")


def delay_minutes(delay_s: int) -> int:
    """Convert a delay in seconds to whole minutes, truncating toward zero.

    A bus 30 s early shows as 0 rather than -1.
    """

    if delay_s < 0:
        return -((-delay_s) // 60)
    return delay_s // 60


def classify_mode(route_no: str, route_name: str) -> TransitMode:
    name = route_name.lower()
    number = route_no.lower()

    if any(h in name for h in _TRAIN_NAME_HINTS) or any(
        h in number for h in _TRAIN_NUMBER_HINTS
    ):
        return TransitMode.TRAIN
    if any(h in name for h in _FERRY_NAME_HINTS):
        return TransitMode.FERRY
    return TransitMode.BUS


def in_display_window(
    when: datetime, now: datetime, horizon: timedelta = DEPARTURE_HORIZON
) -> bool:
    return now <= when <= now + horizon


def departure_from_stop_update(
    trip: TripUpdate,
    stu: StopTimeUpdate,
    *,
    route: RouteInfo,
    now: datetime,
    station: Station | None = None,
    horizon: timedelta = DEPARTURE_HORIZON,
) -> Departure | None:
    """Build a departure for one stop update, or None if it is not showable."""

    ts = stu.effective_time
    if ts is None or trip.route_id is None:
        return None

    when = datetime.fromtimestamp(int(ts), tz=timezone.utc)
    if not in_display_window(when, now, horizon):
        return None

    delay_s = stu.effective_delay
    is_realtime = delay_s != 0
    return Departure(
        route_id=trip.route_id,
        route=route,
        trip_id=trip.trip_id,
        stop_id=stu.stop_id or "unknown",
        scheduled_time=when - timedelta(seconds=delay_s),
        realtime_time=when if is_realtime else None,
        delay_minutes=delay_minutes(delay_s),
        headsign=route.long_name,
        station=station,
    )


def build_departures(
    trip_updates: Iterable[TripUpdate],
    *,
    routes: Mapping[str, RouteInfo],
    now: datetime,
    stations_by_route: Mapping[str, Station] | None = None,
    horizon: timedelta = DEPARTURE_HORIZON,
) -> list[Departure]:
    """Flatten trip updates into departures inside the display window.

    Sorted by realtime-else-scheduled time. The sort is stable, so equal
    times keep their feed order.
    """

    stations_by_route = stations_by_route or {}
    out: list[Departure] = []
    for trip in trip_updates:
        if not trip.route_id:
            continue
        route = routes.get(trip.route_id) or RouteInfo.fallback(trip.route_id)
        station = stations_by_route.get(trip.route_id)
        for stu in trip.stop_time_updates:
            dep = departure_from_stop_update(
                trip, stu, route=route, now=now, station=station, horizon=horizon
            )
            if dep is not None:
                out.append(dep)

    out.sort(key=lambda d: d.effective_time)
    return out
