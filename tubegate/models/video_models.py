"""Video data models for upstream provider results and gateway responses"""

from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum


class MediaType(str, Enum):
    """Media types a caller can resolve a video to"""
    MP3 = "mp3"
    MP4 = "mp4"


class VideoSummary(BaseModel):
    """One search result, as returned by the search provider"""
    title: str = Field(..., description="Video title")
    video_id: str = Field(..., alias="videoId", description="YouTube video ID")
    url: str = Field(..., description="Canonical watch URL")
    duration: Optional[str] = Field(None, description="Duration label, e.g. 3:45")
    views: Optional[int] = Field(None, description="Number of views")
    author: Optional[str] = Field(None, description="Channel name")
    thumbnail: Optional[str] = Field(None, description="Thumbnail URL")

    class Config:
        populate_by_name = True


class SearchResponse(BaseModel):
    """Response body of GET /search"""
    videos: List[VideoSummary] = Field(default=[], description="Top results in provider order")


class MediaFormat(BaseModel):
    """
    One available rendition of a video.

    Only what is needed to filter and pick a format is modelled; the URL is
    handed to the caller untouched.
    """
    format_id: str = Field(..., description="Provider format identifier")
    url: Optional[str] = Field(None, description="Direct media URL")
    protocol: str = Field("https", description="Transfer protocol of the URL, e.g. https or m3u8_native")
    quality_label: Optional[str] = Field(None, description="Video quality label, e.g. 360p")
    audio_bitrate: Optional[int] = Field(None, description="Audio bitrate in kbps")
    container: Optional[str] = Field(None, description="Container extension, e.g. mp4")
    video_codec: Optional[str] = Field(None, description="Video codec, if any")
    audio_codec: Optional[str] = Field(None, description="Audio codec, if any")
    has_video: bool = Field(False, description="Format carries a video stream")
    has_audio: bool = Field(False, description="Format carries an audio stream")

    @property
    def is_direct(self) -> bool:
        """URL points at the media file itself, not a streaming manifest"""
        return bool(self.url) and self.protocol in ("http", "https")

    @property
    def display_quality(self) -> Optional[str]:
        """Quality label for video formats, '<bitrate>kbps' for audio formats"""
        if self.quality_label:
            return self.quality_label
        if self.audio_bitrate is not None:
            return f"{self.audio_bitrate}kbps"
        return None


class VideoDetails(BaseModel):
    """Video metadata from the format provider"""
    title: str = Field(..., description="Video title")
    length_seconds: Optional[str] = Field(None, description="Duration in seconds")
    author: Optional[str] = Field(None, description="Channel name")
    thumbnails: List[str] = Field(default=[], description="Thumbnail URLs in provider order")


class VideoInfo(BaseModel):
    """Metadata plus every format the provider offers, in provider order"""
    details: VideoDetails
    formats: List[MediaFormat] = Field(default=[])


class DownloadResponse(BaseModel):
    """Response body of GET /download"""
    title: str = Field(..., description="Video title")
    video_id: str = Field(..., alias="videoId", description="Requested video ID")
    quality: Optional[str] = Field(None, description="Quality of the selected format")
    download_link: Optional[str] = Field(None, alias="downloadLink", description="Direct media URL")
    thumbnail: Optional[str] = Field(None, description="First thumbnail URL")
    length_seconds: Optional[str] = Field(None, alias="lengthSeconds", description="Duration in seconds")
    author: Optional[str] = Field(None, description="Channel name")

    class Config:
        populate_by_name = True


class ErrorResponse(BaseModel):
    """Body of every error response"""
    error: str


class HealthResponse(BaseModel):
    """Health check response model"""
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    operations: dict = Field(default={}, description="Timing metrics per provider operation")
