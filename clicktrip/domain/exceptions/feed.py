class FeedError(Exception):
    """Base exception for realtime feed handling."""


class DecodeError(FeedError):
    """Raised when feed bytes cannot be decoded into an envelope.

    Covers malformed or truncated payloads and envelope types missing from the
    loaded schema. The underlying exception is kept as ``__cause__``.
    """


class SchemaLoadError(FeedError):
    """Raised when the GTFS-Realtime schema could not be loaded."""
