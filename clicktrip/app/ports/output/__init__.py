from .places_provider import IGeocoder, IPlacesProvider
from .route_info_provider import IRouteInfoProvider
from .transit_feed_provider import ITransitFeedProvider
from .walking_time_provider import IWalkingTimeProvider

__all__ = [
    "IGeocoder",
    "IPlacesProvider",
    "IRouteInfoProvider",
    "ITransitFeedProvider",
    "IWalkingTimeProvider",
]
