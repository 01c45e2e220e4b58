from .feed import DecodeError, FeedError, SchemaLoadError
from .upstream import (
    ConfigurationError,
    NoResultsFound,
    UpstreamError,
    UpstreamRejected,
    UpstreamUnavailable,
)

__all__ = [
    "ConfigurationError",
    "DecodeError",
    "FeedError",
    "NoResultsFound",
    "SchemaLoadError",
    "UpstreamError",
    "UpstreamRejected",
    "UpstreamUnavailable",
]
