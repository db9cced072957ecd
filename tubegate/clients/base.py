"""Provider interfaces the gateway depends on.

The handlers only ever talk to these two narrow seams, so any search or
format backend (or a test double) can be plugged in.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models.video_models import VideoSummary, VideoInfo


class SearchProvider(ABC):
    """Turns a free-text query into a ranked list of video summaries"""

    @abstractmethod
    async def search(self, query: str, limit: int = 10) -> List[VideoSummary]:
        """
        Search for videos.

        Args:
            query: Free-text search query
            limit: Number of results to ask the backend for

        Returns:
            Video summaries in the backend's ranking order

        Raises:
            SearchProviderError: When the backend call fails
        """
        ...


class FormatProvider(ABC):
    """Looks up a video's metadata and every format it is available in"""

    @abstractmethod
    async def get_info(self, video_id: str) -> VideoInfo:
        """
        Fetch metadata and formats for one video.

        Args:
            video_id: Video ID or full watch URL

        Returns:
            VideoInfo with formats in the backend's order

        Raises:
            FormatProviderError: When the backend call fails
        """
        ...
