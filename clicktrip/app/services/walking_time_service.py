from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from clicktrip.app.ports.output import IWalkingTimeProvider
from clicktrip.domain.algorithms.geo_utils import estimate_walking_minutes
from clicktrip.domain.exceptions import ConfigurationError, UpstreamError
from clicktrip.domain.models import GeoPoint

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalkingTimeService:
    """Walking minutes between two points.

    Uses the street-network provider when there is one and falls back to a
    straight-line estimate at walking pace when it is missing or fails.
    """

    provider: IWalkingTimeProvider | None = None

    async def walking_minutes(self, *, origin: GeoPoint, destination: GeoPoint) -> int:
        if self.provider is not None:
            try:
                seconds = await self.provider.walking_seconds(
                    origin=origin, destination=destination
                )
                return int(math.ceil(seconds / 60.0))
            except (UpstreamError, ConfigurationError) as exc:
                logger.warning("Walking time lookup failed, using estimate: %s", exc)

        return estimate_walking_minutes(origin, destination)
