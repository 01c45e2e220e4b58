from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass

from clicktrip.domain.models import UserSettings
from clicktrip.domain.models.settings import DEFAULT_RADIUS_M, DEFAULT_TIME_WINDOW_MIN

logger = logging.getLogger(__name__)

SETTINGS_COOKIE_NAME = "clicktrip-settings"
SETTINGS_COOKIE_MAX_AGE_S = 365 * 24 * 3600


def _positive_int(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value) or value <= 0:
        return default
    return int(value)


@dataclass(slots=True)
class SettingsService:
    """Reads and writes the settings cookie.

    The cookie holds JSON like {"radius": 500, "timeWindow": 20}. Missing or
    invalid keys fall back to their defaults; an unreadable cookie yields the
    defaults.
    """

    cookie_name: str = SETTINGS_COOKIE_NAME
    max_age_s: int = SETTINGS_COOKIE_MAX_AGE_S

    def parse(self, raw: str | None) -> UserSettings:
        if not raw:
            return UserSettings()
        try:
            data = json.loads(raw)
        except ValueError as exc:
            logger.warning("Failed to parse settings cookie: %s", exc)
            return UserSettings()
        if not isinstance(data, dict):
            logger.warning("Ignoring settings cookie that is not an object")
            return UserSettings()

        return UserSettings(
            radius=_positive_int(data.get("radius"), DEFAULT_RADIUS_M),
            time_window=_positive_int(data.get("timeWindow"), DEFAULT_TIME_WINDOW_MIN),
        )

    def serialize(self, settings: UserSettings) -> str:
        return json.dumps(
            {"radius": settings.radius, "timeWindow": settings.time_window},
            separators=(",", ":"),
        )
