from __future__ import annotations

from dataclasses import dataclass

DEFAULT_RADIUS_M = 500
DEFAULT_TIME_WINDOW_MIN = 20


@dataclass(frozen=True, slots=True)
class UserSettings:
    radius: int = DEFAULT_RADIUS_M  # meters
    time_window: int = DEFAULT_TIME_WINDOW_MIN  # minutes
