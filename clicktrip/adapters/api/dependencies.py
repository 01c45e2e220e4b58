from __future__ import annotations

from clicktrip.adapters.maps.google_maps_adapter import GoogleMapsAdapter
from clicktrip.adapters.realtime.http_gtfs_realtime_feed_provider import (
    HttpGtfsRealtimeFeedProvider,
)
from clicktrip.adapters.transit.translink_route_info_adapter import (
    TranslinkRouteInfoAdapter,
)
from clicktrip.app.ports.output import IGeocoder, IRouteInfoProvider
from clicktrip.app.services.departures_service import DeparturesService
from clicktrip.app.services.nearby_transit_service import NearbyTransitService
from clicktrip.app.services.settings_service import SettingsService
from clicktrip.app.services.walking_time_service import WalkingTimeService


def get_walking_time_service() -> WalkingTimeService:
    maps = GoogleMapsAdapter()
    # Without a key the service still answers with a straight-line estimate.
    return WalkingTimeService(provider=maps if maps.configured else None)


def get_nearby_transit_service() -> NearbyTransitService:
    return NearbyTransitService(
        places_provider=GoogleMapsAdapter(),
        feed_provider=HttpGtfsRealtimeFeedProvider(),
    )


def get_departures_service() -> DeparturesService:
    return DeparturesService(
        feed_provider=HttpGtfsRealtimeFeedProvider(),
        route_info_provider=TranslinkRouteInfoAdapter(),
        places_provider=GoogleMapsAdapter(),
        walking_time=get_walking_time_service(),
    )


def get_route_info_provider() -> IRouteInfoProvider:
    return TranslinkRouteInfoAdapter()


def get_geocoder() -> IGeocoder:
    return GoogleMapsAdapter()


def get_settings_service() -> SettingsService:
    return SettingsService()
