"""Format filtering and quality selection.

Selection never re-sorts: every fallback is "first in the filtered list",
so the outcome depends on the order the provider returned the formats in.
"""

from typing import List, Optional

from ..models.video_models import MediaFormat, MediaType

DEFAULT_VIDEO_QUALITY = "360p"


def filter_formats(formats: List[MediaFormat], media_type: MediaType) -> List[MediaFormat]:
    """
    Keep the formats that can serve `media_type`, preserving their order.

    mp4 needs video and audio muxed together; mp3 needs audio without video.
    Formats without a direct URL (missing, or an HLS/DASH manifest) are
    useless to the caller and are dropped.
    """
    if media_type == MediaType.MP4:
        return [f for f in formats if f.is_direct and f.has_video and f.has_audio]
    return [f for f in formats if f.is_direct and f.has_audio and not f.has_video]


def _matches_quality(fmt: MediaFormat, media_type: MediaType, quality: str) -> bool:
    if media_type == MediaType.MP4:
        return fmt.quality_label == quality
    return bool(fmt.audio_bitrate) and f"{fmt.audio_bitrate}kbps" == quality


def select_format(
    formats: List[MediaFormat],
    media_type: MediaType,
    quality: Optional[str] = None
) -> Optional[MediaFormat]:
    """
    Pick one format from an already filtered list.

    Args:
        formats: Candidates, as returned by filter_formats
        media_type: Requested media type
        quality: Requested quality label ("720p" or "128kbps"), if any

    Returns:
        The exact match when there is one, otherwise the first candidate;
        None only when there are no candidates at all.
    """
    if not formats:
        return None

    if quality:
        wanted = next((f for f in formats if _matches_quality(f, media_type, quality)), None)
    else:
        wanted = next((f for f in formats if f.quality_label == DEFAULT_VIDEO_QUALITY), None)

    return wanted or formats[0]
