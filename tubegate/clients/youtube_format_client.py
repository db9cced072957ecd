"""YouTube format client backed by yt-dlp"""

import asyncio
import logging
import re
from typing import Dict, Any, Optional

import yt_dlp
from yt_dlp.utils import determine_protocol

from .base import FormatProvider
from ..core.settings import get_settings
from ..core.exceptions import FormatProviderError
from ..core.logging import log_performance
from ..models.video_models import MediaFormat, VideoDetails, VideoInfo

# Setup logging
logger = logging.getLogger(__name__)

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

# YouTube's nominal audio bitrates per itag. yt-dlp reports the measured
# average instead (e.g. 129.5 for itag 140), which would never match "128kbps".
# Multi-language and DRC tracks carry a suffix ("140-1", "251-drc").
NOMINAL_AUDIO_BITRATES: Dict[str, int] = {
    "17": 24,
    "18": 96,
    "22": 192,
    "139": 48,
    "140": 128,
    "141": 256,
    "171": 128,
    "172": 192,
    "249": 48,
    "250": 64,
    "251": 160,
}

QUALITY_LABEL_PATTERN = re.compile(r"^(\d+p\d*)")


class YouTubeFormatClient(FormatProvider):
    """
    Resolves a video's metadata and formats through yt-dlp.

    Nothing is downloaded; only the info extraction runs, in a worker
    thread since yt-dlp is blocking.
    """

    def __init__(self, socket_timeout: Optional[float] = None):
        """
        Initialize the format client.

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
            "noplaylist": True,
        }
        if self.socket_timeout is not None:
            ydl_opts["socket_timeout"] = self.socket_timeout
        return ydl_opts

    def _extract(self, video_url: str) -> Dict[str, Any]:
        with yt_dlp.YoutubeDL(self._build_options()) as ydl:
            return ydl.extract_info(video_url, download=False)

    @staticmethod
    def build_video_url(video_id: str) -> str:
        """Accept either a bare video ID or a full URL"""
        if "://" in video_id:
            return video_id
        return YOUTUBE_WATCH_URL.format(video_id=video_id)

    @log_performance("youtube_get_info")
    async def get_info(self, video_id: str) -> VideoInfo:
        """
        Fetch metadata and all formats for a video.

        Args:
            video_id: YouTube video ID or watch URL

        Returns:
            VideoInfo with formats in yt-dlp's order

        Raises:
            FormatProviderError: On any yt-dlp or parsing failure
        """
        video_url = self.build_video_url(video_id)
        logger.info(f"Fetching formats for {video_url}")

        try:
            info = await asyncio.to_thread(self._extract, video_url)
        except yt_dlp.utils.YoutubeDLError as e:
            raise FormatProviderError(f"yt-dlp extraction failed for {video_id}: {e}") from e

        if not isinstance(info, dict):
            raise FormatProviderError(f"Malformed video info for {video_id}")

        try:
            video_info = self._parse_info(info)
        except (KeyError, TypeError, ValueError) as e:
            raise FormatProviderError(f"Malformed video info for {video_id}: {e}") from e

        logger.debug(f"Video {video_id} offers {len(video_info.formats)} formats")
        return video_info

    def _parse_info(self, info: Dict[str, Any]) -> VideoInfo:
        """Parse a yt-dlp info dict into a VideoInfo"""
        duration = info.get("duration")

        details = VideoDetails(
            title=info["title"],
            length_seconds=str(int(duration)) if duration is not None else None,
            author=info.get("uploader") or info.get("channel"),
            thumbnails=[
                thumb["url"] for thumb in info.get("thumbnails") or []
                if thumb.get("url")
            ]
        )

        formats = [self._parse_format(fmt) for fmt in info.get("formats") or []]
        return VideoInfo(details=details, formats=formats)

    def _parse_format(self, fmt: Dict[str, Any]) -> MediaFormat:
        """Parse one yt-dlp format dict into a MediaFormat"""
        format_id = str(fmt["format_id"])
        video_codec = fmt.get("vcodec")
        audio_codec = fmt.get("acodec")
        has_video = video_codec not in (None, "none")
        has_audio = audio_codec not in (None, "none")

        protocol = fmt.get("protocol")
        if not protocol and fmt.get("url"):
            protocol = determine_protocol(fmt)

        quality_label = None
        if has_video:
            match = QUALITY_LABEL_PATTERN.match(fmt.get("format_note") or "")
            if match:
                quality_label = match.group(1)
            elif fmt.get("height"):
                quality_label = f"{fmt['height']}p"

        audio_bitrate = None
        if has_audio:
            audio_bitrate = NOMINAL_AUDIO_BITRATES.get(format_id.split("-")[0])
            if audio_bitrate is None and fmt.get("abr"):
                audio_bitrate = int(round(fmt["abr"]))

        return MediaFormat(
            format_id=format_id,
            url=fmt.get("url"),
            protocol=protocol or "https",
            quality_label=quality_label,
            audio_bitrate=audio_bitrate,
            container=fmt.get("ext"),
            video_codec=video_codec if has_video else None,
            audio_codec=audio_codec if has_audio else None,
            has_video=has_video,
            has_audio=has_audio
        )
