"""Tests for the video gateway service"""

import pytest
from unittest.mock import AsyncMock

from tubegate.core.exceptions import (
    RequestValidationError, FormatNotFoundError,
    SearchProviderError, FormatProviderError
)
from tubegate.models.video_models import MediaType, VideoInfo, VideoDetails
from tubegate.services.video_service import VideoGatewayService, parse_media_type

from conftest import video_format


class TestParseMediaType:
    """Test the type parameter parsing"""

    def test_default_is_mp4(self):
        assert parse_media_type(None) == MediaType.MP4
        assert parse_media_type("") == MediaType.MP4

    def test_case_insensitive(self):
        assert parse_media_type("MP3") == MediaType.MP3
        assert parse_media_type("Mp4") == MediaType.MP4

    @pytest.mark.parametrize("value", ["avi", "webm", "mp", " mp3"])
    def test_rejects_other_values(self, value):
        with pytest.raises(RequestValidationError, match="must be 'mp3' or 'mp4'"):
            parse_media_type(value)


class TestSearchVideos:
    """Test search delegation and projection"""

    @pytest.fixture
    def service(self, mock_search_provider, mock_format_provider):
        return VideoGatewayService(mock_search_provider, mock_format_provider)

    @pytest.mark.asyncio
    async def test_truncates_to_ten_in_order(self, service, sample_videos):
        """Fifteen upstream results become the first ten, order unchanged"""
        response = await service.search_videos("lofi")

        assert len(response.videos) == 10
        assert response.videos == sample_videos[:10]

    @pytest.mark.asyncio
    async def test_fewer_results_than_limit(self, service, mock_search_provider, sample_videos):
        """Short upstream lists are returned whole"""
        mock_search_provider.search.return_value = sample_videos[:3]
        response = await service.search_videos("lofi")
        assert response.videos == sample_videos[:3]

    @pytest.mark.asyncio
    async def test_passes_query_and_limit(self, service, mock_search_provider):
        """The provider is asked once, with the configured limit"""
        await service.search_videos("lofi beats")
        mock_search_provider.search.assert_awaited_once_with("lofi beats", limit=10)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", [None, ""])
    async def test_missing_query(self, service, mock_search_provider, query):
        """Missing query is rejected before the provider is called"""
        with pytest.raises(RequestValidationError, match="Query parameter 'q' is required"):
            await service.search_videos(query)
        mock_search_provider.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_error_is_wrapped(self, service, mock_search_provider):
        """Arbitrary provider exceptions become SearchProviderError"""
        mock_search_provider.search.side_effect = ConnectionError("network down")

        with pytest.raises(SearchProviderError) as exc_info:
            await service.search_videos("lofi")

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert exc_info.value.public_message == "Failed to fetch search results"
        assert "network down" not in exc_info.value.public_message

    @pytest.mark.asyncio
    async def test_provider_error_passthrough(self, service, mock_search_provider):
        """A SearchProviderError from the provider is re-raised as is"""
        original = SearchProviderError("yt-dlp search failed")
        mock_search_provider.search.side_effect = original

        with pytest.raises(SearchProviderError) as exc_info:
            await service.search_videos("lofi")
        assert exc_info.value is original

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [None, 42, [{"title": "no id"}]])
    async def test_malformed_provider_result(self, service, mock_search_provider, result):
        """Results that are not a list of summaries are an upstream failure"""
        mock_search_provider.search.return_value = result

        with pytest.raises(SearchProviderError) as exc_info:
            await service.search_videos("lofi")

        assert exc_info.value.__cause__ is not None
        assert exc_info.value.public_message == "Failed to fetch search results"

    @pytest.mark.asyncio
    async def test_no_caching(self, service, mock_search_provider):
        """Identical queries hit the provider every time"""
        await service.search_videos("lofi")
        await service.search_videos("lofi")
        assert mock_search_provider.search.await_count == 2


class TestResolveDownload:
    """Test download resolution"""

    @pytest.fixture
    def service(self, mock_search_provider, mock_format_provider):
        return VideoGatewayService(mock_search_provider, mock_format_provider)

    @pytest.mark.asyncio
    async def test_default_mp4_prefers_360p(self, service):
        """Default request resolves to the 360p muxed format"""
        response = await service.resolve_download("abc123")

        assert response.quality == "360p"
        assert response.download_link == "https://media.example.com/18"
        assert response.video_id == "abc123"
        assert response.title == "Lofi Hip Hop Radio"
        assert response.thumbnail == "https://i.ytimg.com/vi/abc123/default.jpg"
        assert response.length_seconds == "213"
        assert response.author == "Lofi Girl"

    @pytest.mark.asyncio
    async def test_mp3_with_bitrate(self, service):
        """mp3 with 128kbps selects the 128 kbps audio-only format"""
        response = await service.resolve_download("abc123", media_type="mp3", quality="128kbps")

        assert response.quality == "128kbps"
        assert response.download_link == "https://media.example.com/140"

    @pytest.mark.asyncio
    async def test_mp3_without_quality_takes_first_audio(self, service):
        """Audio formats have no 360p label, so the first one wins"""
        response = await service.resolve_download("abc123", media_type="mp3")
        assert response.quality == "48kbps"
        assert response.download_link == "https://media.example.com/249"

    @pytest.mark.asyncio
    async def test_mp4_without_360p_takes_first(self, service, mock_format_provider, sample_video_info):
        """No 360p available: first muxed format in upstream order"""
        sample_video_info.formats = [
            video_format("22", quality_label="720p", has_video=True, has_audio=True),
            video_format("17", quality_label="144p", has_video=True, has_audio=True),
        ]
        response = await service.resolve_download("abc123", media_type="mp4")
        assert response.quality == "720p"
        assert response.download_link == "https://media.example.com/22"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quality", [None, "720p", "128kbps"])
    async def test_no_candidates(self, service, mock_format_provider, quality):
        """No matching format is a not-found regardless of quality"""
        mock_format_provider.get_info.return_value = VideoInfo(
            details=VideoDetails(title="Video only"),
            formats=[video_format("137", quality_label="1080p", has_video=True)]
        )
        with pytest.raises(FormatNotFoundError):
            await service.resolve_download("abc123", quality=quality)

    @pytest.mark.asyncio
    async def test_missing_thumbnail(self, service, mock_format_provider, sample_video_info):
        """No thumbnails gives a null thumbnail"""
        sample_video_info.details.thumbnails = []
        response = await service.resolve_download("abc123")
        assert response.thumbnail is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("video_id", [None, ""])
    async def test_missing_id(self, service, mock_format_provider, video_id):
        """Missing ID is rejected before the provider is called"""
        with pytest.raises(RequestValidationError, match="Query parameter 'id' is required"):
            await service.resolve_download(video_id)
        mock_format_provider.get_info.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_type(self, service, mock_format_provider):
        """Unsupported type is rejected before the provider is called"""
        with pytest.raises(RequestValidationError):
            await service.resolve_download("abc123", media_type="flac")
        mock_format_provider.get_info.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_error_is_wrapped(self, service, mock_format_provider):
        """Provider failures become FormatProviderError with the cause chained"""
        mock_format_provider.get_info = AsyncMock(side_effect=KeyError("videoDetails"))

        with pytest.raises(FormatProviderError) as exc_info:
            await service.resolve_download("abc123")

        assert isinstance(exc_info.value.__cause__, KeyError)
        assert exc_info.value.status_code == 500
        assert exc_info.value.public_message == "Failed to fetch download info"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [None, {"formats": []}, "not an info object"])
    async def test_malformed_provider_result(self, service, mock_format_provider, result):
        """A provider result that cannot be projected is an upstream failure"""
        mock_format_provider.get_info.return_value = result

        with pytest.raises(FormatProviderError) as exc_info:
            await service.resolve_download("abc123")

        assert isinstance(exc_info.value.__cause__, AttributeError)
        assert exc_info.value.public_message == "Failed to fetch download info"
