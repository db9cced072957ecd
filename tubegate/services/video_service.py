"""Search and download resolution on top of the upstream providers"""

import logging
from typing import Optional

from ..clients.base import SearchProvider, FormatProvider
from ..core.exceptions import (
    RequestValidationError, FormatNotFoundError,
    SearchProviderError, FormatProviderError
)
from ..models.video_models import (
    MediaType, SearchResponse, DownloadResponse, VideoInfo
)
from .format_selector import filter_formats, select_format

logger = logging.getLogger(__name__)


def parse_media_type(value: Optional[str]) -> MediaType:
    """Parse the `type` query parameter; absent or empty means mp4"""
    if not value:
        return MediaType.MP4
    try:
        return MediaType(value.lower())
    except ValueError:
        raise RequestValidationError("Invalid 'type' parameter, must be 'mp3' or 'mp4'")


class VideoGatewayService:
    """
    Validates a request, makes exactly one provider call, and projects the
    result into the public response shape.

    Provider failures of any kind, malformed results included, surface as
    SearchProviderError or FormatProviderError; the original exception is
    chained as the cause.
    """

    def __init__(
        self,
        search_provider: SearchProvider,
        format_provider: FormatProvider,
        search_result_limit: int = 10
    ):
        self.search_provider = search_provider
        self.format_provider = format_provider
        self.search_result_limit = search_result_limit

    async def search_videos(self, query: Optional[str]) -> SearchResponse:
        """
        Search videos and keep the top results in provider order.

        Raises:
            RequestValidationError: When `query` is missing or empty
            SearchProviderError: When the search provider fails
        """
        if not query:
            raise RequestValidationError("Query parameter 'q' is required")

        try:
            videos = await self.search_provider.search(query, limit=self.search_result_limit)
            return SearchResponse(videos=list(videos)[:self.search_result_limit])
        except SearchProviderError:
            raise
        except Exception as e:
            raise SearchProviderError(f"Search provider raised {type(e).__name__}: {e}") from e

    async def resolve_download(
        self,
        video_id: Optional[str],
        media_type: Optional[str] = None,
        quality: Optional[str] = None
    ) -> DownloadResponse:
        """
        Resolve a video to a single direct media link.

        Args:
            video_id: Video ID (required)
            media_type: 'mp3' or 'mp4', case-insensitive; defaults to mp4
            quality: Preferred quality label, e.g. '720p' or '128kbps'

        Raises:
            RequestValidationError: Missing ID or unsupported media type
            FormatProviderError: When the format provider fails
            FormatNotFoundError: When no format fits the media type
        """
        if not video_id:
            raise RequestValidationError("Query parameter 'id' is required")
        parsed_type = parse_media_type(media_type)

        try:
            info = await self.format_provider.get_info(video_id)
            return self._build_download(video_id, info, parsed_type, quality)
        except (FormatProviderError, FormatNotFoundError):
            raise
        except Exception as e:
            raise FormatProviderError(f"Format provider raised {type(e).__name__}: {e}") from e

    def _build_download(
        self,
        video_id: str,
        info: VideoInfo,
        parsed_type: MediaType,
        quality: Optional[str]
    ) -> DownloadResponse:
        """Filter and select a format, then project it with the video metadata"""
        candidates = filter_formats(info.formats, parsed_type)
        selected = select_format(candidates, parsed_type, quality)
        if selected is None:
            logger.info(
                f"No {parsed_type.value} format for {video_id} "
                f"({len(info.formats)} formats offered)"
            )
            raise FormatNotFoundError()

        logger.debug(
            f"Selected format {selected.format_id} ({selected.display_quality}) "
            f"for {video_id} from {len(candidates)} candidates"
        )

        details = info.details
        return DownloadResponse(
            title=details.title,
            video_id=video_id,
            quality=selected.display_quality,
            download_link=selected.url,
            thumbnail=details.thumbnails[0] if details.thumbnails else None,
            length_seconds=details.length_seconds,
            author=details.author
        )
