"""Video search and download endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ..models.video_models import SearchResponse, DownloadResponse, ErrorResponse
from ..services.video_service import VideoGatewayService
from ..core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["videos"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid query parameter"},
    401: {"model": ErrorResponse, "description": "Invalid or missing API key"},
    429: {"model": ErrorResponse, "description": "Too many requests"},
    500: {"model": ErrorResponse, "description": "Upstream provider failure"},
}


def get_video_service(request: Request) -> VideoGatewayService:
    """Dependency to get the service the application was built with"""
    return request.app.state.video_service


# Parameters are optional at the FastAPI level so that a missing value gets
# the gateway's 400 body instead of FastAPI's 422.

@router.get("/search", response_model=SearchResponse, responses=ERROR_RESPONSES)
async def search_videos(
    q: Optional[str] = Query(None, description="Search query"),
    service: VideoGatewayService = Depends(get_video_service)
):
    """
    Search videos.

    Returns at most the top 10 results, in the provider's ranking order.
    """
    logger.info(f"Search request: q={q!r}")
    return await service.search_videos(q)


@router.get(
    "/download",
    response_model=DownloadResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse, "description": "No suitable format"}}
)
async def resolve_download(
    video_id: Optional[str] = Query(None, alias="id", description="Video ID"),
    media_type: Optional[str] = Query(None, alias="type", description="Media type: mp3 or mp4 (default mp4)"),
    quality: Optional[str] = Query(None, description="Preferred quality, e.g. 720p or 128kbps"),
    service: VideoGatewayService = Depends(get_video_service)
):
    """
    Resolve a video to a direct media link.

    Args:
        video_id: Video ID
        media_type: mp3 for audio-only formats, mp4 for muxed video+audio
        quality: Exact quality to prefer; falls back to the first format
        service: Video service dependency

    Returns:
        Download descriptor for the selected format
    """
    logger.info(f"Download request: id={video_id!r} type={media_type!r} quality={quality!r}")
    return await service.resolve_download(video_id, media_type=media_type, quality=quality)
