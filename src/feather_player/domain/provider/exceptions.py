"""Provider exceptions for error handling."""

from feather_player.core.exceptions import FeatherError


class ProviderError(FeatherError):
    """Base exception for provider operations."""

    pass


class NotFoundError(ProviderError):
    """Raised when a query, video or playlist yields nothing."""

    pass


class NetworkError(ProviderError):
    """Raised when the provider cannot be reached or returns garbage."""

    pass


class RateLimitedError(ProviderError):
    """Raised when the provider throttles requests (HTTP 429)."""

    pass


class RestrictedError(ProviderError):
    """Raised when a track cannot be played (age gate, region, private, copyright)."""

    pass
