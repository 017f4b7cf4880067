"""Content provider access (YouTube via yt-dlp)."""

from .base import ProviderClient
from .exceptions import (
    NetworkError,
    NotFoundError,
    ProviderError,
    RateLimitedError,
    RestrictedError,
)
from .youtube import YouTubeProvider

__all__ = [
    "ProviderClient",
    "ProviderError",
    "NotFoundError",
    "NetworkError",
    "RateLimitedError",
    "RestrictedError",
    "YouTubeProvider",
]
