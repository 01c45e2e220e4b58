class UpstreamError(Exception):
    """Base exception for failures talking to a third-party API."""


class UpstreamUnavailable(UpstreamError):
    """The upstream could not be reached, timed out or answered non-2xx."""


class UpstreamRejected(UpstreamError):
    """The upstream answered but reported a non-OK status (e.g. REQUEST_DENIED)."""


class NoResultsFound(UpstreamError):
    """The upstream answered successfully with nothing to return."""


class ConfigurationError(RuntimeError):
    """A required setting (usually an API key) is missing."""
