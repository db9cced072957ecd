"""YouTube search client backed by yt-dlp"""

import asyncio
import logging
from typing import List, Dict, Any, Optional

import yt_dlp

from .base import SearchProvider
from ..core.settings import get_settings
from ..core.exceptions import SearchProviderError
from ..core.logging import log_performance
from ..models.video_models import VideoSummary

# Setup logging
logger = logging.getLogger(__name__)

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


def format_duration(seconds: Optional[float]) -> Optional[str]:
    """Render a duration as M:SS or H:MM:SS; None for live or unknown lengths"""
    if seconds is None:
        return None

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class YouTubeSearchClient(SearchProvider):
    """
    Searches YouTube through yt-dlp's `ytsearchN:` pseudo-URL.

    Uses flat extraction, so one search is a single round trip and no
    per-video pages are fetched.
    """

    def __init__(self, socket_timeout: Optional[float] = None):
        """
        Initialize the search client.

        Args:
            socket_timeout: yt-dlp socket timeout (if None, loads from settings)
        """
        self.settings = get_settings()
        self.socket_timeout = (
            socket_timeout if socket_timeout is not None else self.settings.ytdlp_socket_timeout
        )

    def _build_options(self) -> Dict[str, Any]:
        ydl_opts = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "extract_flat": "in_playlist",
        }
        if self.socket_timeout is not None:
            ydl_opts["socket_timeout"] = self.socket_timeout
        return ydl_opts

    def _extract(self, search_url: str) -> Dict[str, Any]:
        with yt_dlp.YoutubeDL(self._build_options()) as ydl:
            return ydl.extract_info(search_url, download=False)

    @log_performance("youtube_search")
    async def search(self, query: str, limit: int = 10) -> List[VideoSummary]:
        """
        Search YouTube for videos matching `query`.

        Args:
            query: Free-text search query
            limit: Number of results to request

        Returns:
            Video summaries in YouTube's ranking order

        Raises:
            SearchProviderError: On any yt-dlp or parsing failure
        """
        logger.info(f"Searching videos: '{query}' (limit {limit})")

        try:
            result = await asyncio.to_thread(self._extract, f"ytsearch{limit}:{query}")
        except yt_dlp.utils.YoutubeDLError as e:
            raise SearchProviderError(f"yt-dlp search failed for '{query}': {e}") from e

        if not isinstance(result, dict):
            raise SearchProviderError(f"Malformed search response for '{query}'")

        videos = []
        for entry in result.get("entries") or []:
            if not entry or entry.get("ie_key", "Youtube") != "Youtube":
                # Channels and playlists can show up in search results
                continue
            try:
                videos.append(self._parse_entry(entry))
            except (KeyError, TypeError, ValueError) as e:
                raise SearchProviderError(f"Malformed search entry {entry.get('id', 'unknown')}: {e}") from e

        logger.debug(f"Search '{query}' returned {len(videos)} videos")
        return videos

    def _parse_entry(self, entry: Dict[str, Any]) -> VideoSummary:
        """Parse a flat yt-dlp search entry into a VideoSummary"""
        video_id = entry["id"]

        thumbnail = entry.get("thumbnail")
        if not thumbnail:
            thumbnails = entry.get("thumbnails") or []
            # yt-dlp lists thumbnails from lowest to highest preference
            thumbnail = thumbnails[-1]["url"] if thumbnails else None

        view_count = entry.get("view_count")

        return VideoSummary(
            title=entry.get("title") or "",
            video_id=video_id,
            url=(
                entry.get("webpage_url") or
                entry.get("url") or
                YOUTUBE_WATCH_URL.format(video_id=video_id)
            ),
            duration=format_duration(entry.get("duration")),
            views=int(view_count) if view_count is not None else None,
            author=entry.get("channel") or entry.get("uploader"),
            thumbnail=thumbnail
        )
