"""YouTube provider built on yt-dlp.

Search and playlist expansion use flat extraction (metadata only). Stream
resolution extracts the best audio format and caches the result for a short
time since stream URLs expire.
"""

import threading
from pathlib import Path
from time import time
from typing import Any, Optional
from urllib.parse import quote_plus

import yt_dlp
from loguru import logger

from feather_player.core.config import ProviderConfig
from feather_player.domain.library.models import PlaylistRef, Track

from .exceptions import (
    NetworkError,
    NotFoundError,
    ProviderError,
    RateLimitedError,
    RestrictedError,
)

# YouTube search filter selecting playlists only
PLAYLIST_FILTER = "EgIQAw%3D%3D"

RESTRICTED_MARKERS = (
    "sign in",
    "confirm your age",
    "age-restricted",
    "age restricted",
    "private video",
    "copyright",
    "blocked",
    "not available in your country",
    "members-only",
)
NOT_FOUND_MARKERS = ("unavailable", "deleted", "does not exist", "404")
RATE_LIMIT_MARKERS = ("429", "too many requests", "rate limit")


def classify_download_error(error: Exception) -> ProviderError:
    """Map a yt-dlp error message onto the provider error taxonomy."""
    message = str(error)
    lowered = message.lower()
    if any(marker in lowered for marker in RATE_LIMIT_MARKERS):
        return RateLimitedError("YouTube is rate limiting requests, try again shortly")
    if any(marker in lowered for marker in RESTRICTED_MARKERS):
        return RestrictedError(f"Restricted: {message}")
    if any(marker in lowered for marker in NOT_FOUND_MARKERS):
        return NotFoundError(f"Not found: {message}")
    return NetworkError(f"Request failed: {message}")


def _entry_artists(entry: dict[str, Any]) -> tuple[str, ...]:
    artists = entry.get("artists")
    if artists:
        return tuple(str(a) for a in artists)
    for key in ("artist", "channel", "uploader"):
        if entry.get(key):
            return (str(entry[key]),)
    return ()


def entry_to_track(entry: dict[str, Any], position: Optional[int] = None) -> Optional[Track]:
    """Convert a yt-dlp (flat) entry into a Track, or None if it has no id."""
    video_id = entry.get("id")
    if not video_id:
        return None
    duration = entry.get("duration")
    return Track(
        id=str(video_id),
        title=entry.get("title") or "Unknown",
        artists=_entry_artists(entry),
        duration=float(duration) if duration else None,
        position=position,
    )


def entry_to_playlist_ref(entry: dict[str, Any]) -> Optional[PlaylistRef]:
    playlist_id = entry.get("id")
    if not playlist_id:
        return None
    url = entry.get("url") or f"https://www.youtube.com/playlist?list={playlist_id}"
    if "list=" not in url:
        # Channels and videos occasionally leak into filtered results
        return None
    count = entry.get("playlist_count")
    return PlaylistRef(
        id=str(playlist_id),
        title=entry.get("title") or "Unknown Playlist",
        url=url,
        author=entry.get("channel") or entry.get("uploader"),
        track_count=int(count) if count else None,
    )


def pick_stream_url(info: dict[str, Any]) -> Optional[str]:
    """Get the stream URL from an extract_info result."""
    stream_url = info.get("url")
    if stream_url:
        return stream_url

    # Some extractors put URL in 'formats' list
    formats = info.get("formats") or []
    audio_formats = [
        f for f in formats if f.get("acodec") not in (None, "none") and f.get("url")
    ]
    if audio_formats:
        return audio_formats[-1]["url"]
    if formats and formats[-1].get("url"):
        return formats[-1]["url"]
    return None


class YouTubeProvider:
    """ProviderClient implementation for YouTube."""

    def __init__(self, config: ProviderConfig):
        self.config = config
        # video id -> (stream_url, expires_at)
        self._stream_cache: dict[str, tuple[str, float]] = {}
        self._cache_lock = threading.Lock()

    def _base_opts(self) -> dict[str, Any]:
        opts: dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
        }
        cookies = self.config.cookies_file
        if cookies:
            cookies_path = Path(cookies).expanduser()
            if cookies_path.is_file():
                opts["cookiefile"] = str(cookies_path)
            else:
                logger.warning(f"Cookies file not found, continuing without: {cookies_path}")
        return opts

    def _extract(self, url: str, extra_opts: dict[str, Any]) -> dict[str, Any]:
        opts = {**self._base_opts(), **extra_opts}
        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                info = ydl.extract_info(url, download=False)
        except yt_dlp.utils.DownloadError as e:
            logger.warning(f"yt-dlp error for {url}: {e}")
            raise classify_download_error(e) from e
        except Exception as e:
            logger.exception(f"Unexpected yt-dlp failure for {url}")
            raise NetworkError(f"Unexpected error: {e}") from e

        if not info:
            raise NotFoundError(f"No information returned for {url}")
        return info

    def search(self, query: str) -> list[Track]:
        query = query.strip()
        if not query:
            raise NotFoundError("Empty search query")

        logger.info(f"Searching songs: {query!r}")
        info = self._extract(
            f"ytsearch{self.config.search_limit}:{query}",
            {"extract_flat": "in_playlist"},
        )
        tracks = [
            track
            for track in (entry_to_track(e) for e in info.get("entries") or [] if e)
            if track is not None
        ]
        if not tracks:
            raise NotFoundError(f"No songs found for '{query}'")
        logger.debug(f"Search {query!r} returned {len(tracks)} tracks")
        return tracks

    def search_playlists(self, query: str) -> list[PlaylistRef]:
        query = query.strip()
        if not query:
            raise NotFoundError("Empty search query")

        logger.info(f"Searching playlists: {query!r}")
        url = (
            f"https://www.youtube.com/results?search_query={quote_plus(query)}"
            f"&sp={PLAYLIST_FILTER}"
        )
        info = self._extract(
            url,
            {"extract_flat": True, "playlistend": self.config.playlist_search_limit},
        )
        playlists = [
            ref
            for ref in (entry_to_playlist_ref(e) for e in info.get("entries") or [] if e)
            if ref is not None
        ]
        if not playlists:
            raise NotFoundError(f"No playlists found for '{query}'")
        return playlists

    def resolve_playable_source(self, track: Track) -> str:
        now = time()
        with self._cache_lock:
            cached = self._stream_cache.get(track.id)
            if cached and now < cached[1]:
                logger.debug(f"Stream URL cache hit for {track.id}")
                return cached[0]
            self._stream_cache.pop(track.id, None)

        info = self._extract(
            track.url,
            {"format": "bestaudio/best", "extract_flat": False, "noplaylist": True},
        )
        stream_url = pick_stream_url(info)
        if not stream_url:
            raise RestrictedError(f"No playable stream for '{track.title}'")

        now = time()
        with self._cache_lock:
            expired = [
                key for key, (_, expires_at) in self._stream_cache.items() if expires_at <= now
            ]
            for key in expired:
                del self._stream_cache[key]
            self._stream_cache[track.id] = (stream_url, now + self.config.stream_cache_ttl)
        logger.debug(f"Resolved stream URL for {track.id}")
        return stream_url

    def expand_playlist_reference(self, locator: str) -> list[Track]:
        if not locator.startswith(("http://", "https://")):
            locator = f"https://www.youtube.com/playlist?list={locator}"

        logger.info(f"Expanding playlist: {locator}")
        info = self._extract(locator, {"extract_flat": True})

        tracks = []
        for entry in info.get("entries") or []:
            if not entry:
                continue  # Skip unavailable videos
            track = entry_to_track(entry, position=len(tracks) + 1)
            if track is not None:
                tracks.append(track)
        if not tracks:
            raise NotFoundError("Playlist is empty or unavailable")
        return tracks
