"""Pytest configuration and shared fixtures"""

import pytest
from unittest.mock import Mock, AsyncMock

from fastapi.testclient import TestClient

from tubegate.api.main import create_app
from tubegate.clients.base import SearchProvider, FormatProvider
from tubegate.core.error_handler import ErrorHandler
from tubegate.core.logging import reset_performance_metrics
from tubegate.core.rate_limiter import FixedWindowRateLimiter
from tubegate.core.settings import Settings
from tubegate.models.video_models import (
    VideoSummary, MediaFormat, VideoDetails, VideoInfo
)

TEST_API_KEY = "test-secret-key"


class FakeClock:
    """Manually advanced clock for rate limiter tests"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def create_test_video(index: int) -> VideoSummary:
    """Create a test search result with predictable field values"""
    return VideoSummary(
        title=f"Lofi Beats Mix {index}",
        video_id=f"vid{index:03d}",
        url=f"https://www.youtube.com/watch?v=vid{index:03d}",
        duration=f"{index}:30",
        views=1000 * index,
        author=f"Channel {index}",
        thumbnail=f"https://i.ytimg.com/vi/vid{index:03d}/hqdefault.jpg"
    )


def video_format(format_id: str, **kwargs) -> MediaFormat:
    """Create a format with a URL derived from its ID"""
    kwargs.setdefault("url", f"https://media.example.com/{format_id}")
    return MediaFormat(format_id=format_id, **kwargs)


@pytest.fixture
def fake_clock():
    """Clock starting at a fixed instant"""
    return FakeClock()


@pytest.fixture
def test_settings():
    """Settings with a known API key and the default limits"""
    return Settings(
        api_key=TEST_API_KEY,
        environment="development",
        rate_limit_max_requests=60,
        rate_limit_window_seconds=60
    )


@pytest.fixture
def sample_videos():
    """Fifteen search results in upstream ranking order"""
    return [create_test_video(i) for i in range(1, 16)]


@pytest.fixture
def sample_formats():
    """Formats in the order a provider might list them"""
    return [
        video_format("160", quality_label="144p", has_video=True, container="mp4", video_codec="avc1"),
        video_format("18", quality_label="360p", audio_bitrate=96, has_video=True, has_audio=True,
                     container="mp4", video_codec="avc1", audio_codec="mp4a"),
        video_format("22", quality_label="720p", audio_bitrate=192, has_video=True, has_audio=True,
                     container="mp4", video_codec="avc1", audio_codec="mp4a"),
        video_format("249", audio_bitrate=48, has_audio=True, container="webm", audio_codec="opus"),
        video_format("140", audio_bitrate=128, has_audio=True, container="m4a", audio_codec="mp4a"),
        video_format("251", audio_bitrate=160, has_audio=True, container="webm", audio_codec="opus"),
    ]


@pytest.fixture
def sample_video_info(sample_formats):
    """Video metadata with the sample formats"""
    return VideoInfo(
        details=VideoDetails(
            title="Lofi Hip Hop Radio",
            length_seconds="213",
            author="Lofi Girl",
            thumbnails=[
                "https://i.ytimg.com/vi/abc123/default.jpg",
                "https://i.ytimg.com/vi/abc123/hqdefault.jpg"
            ]
        ),
        formats=sample_formats
    )


@pytest.fixture
def mock_search_provider(sample_videos):
    """Mock search provider returning fifteen videos"""
    provider = Mock(spec=SearchProvider)
    provider.search = AsyncMock(return_value=sample_videos)
    return provider


@pytest.fixture
def mock_format_provider(sample_video_info):
    """Mock format provider returning the sample video info"""
    provider = Mock(spec=FormatProvider)
    provider.get_info = AsyncMock(return_value=sample_video_info)
    return provider


@pytest.fixture
def rate_limiter(test_settings, fake_clock):
    """Rate limiter on a fake clock"""
    return FixedWindowRateLimiter(
        max_requests=test_settings.rate_limit_max_requests,
        window_seconds=test_settings.rate_limit_window_seconds,
        clock=fake_clock
    )


@pytest.fixture
def error_handler():
    """Fresh error handler so error counts do not leak between tests"""
    return ErrorHandler()


@pytest.fixture
def app(test_settings, mock_search_provider, mock_format_provider, rate_limiter, error_handler):
    """Gateway application wired to mock providers"""
    return create_app(
        settings=test_settings,
        search_provider=mock_search_provider,
        format_provider=mock_format_provider,
        rate_limiter=rate_limiter,
        error_handler=error_handler
    )


@pytest.fixture
def client(app):
    """Test client without credentials"""
    return TestClient(app)


@pytest.fixture
def auth_headers():
    """Headers carrying the valid API key"""
    return {"x-api-key": TEST_API_KEY}


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Setup test environment variables"""
    monkeypatch.setenv("API_KEY", TEST_API_KEY)
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.delenv("LOG_FILE", raising=False)
    reset_performance_metrics()
