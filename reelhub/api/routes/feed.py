"""
Feed endpoint.

Everything a player card needs, with ImageKit URLs already built: the
playback URL carries the portrait transformation so clients don't need
to know ImageKit's URL syntax.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from ...infrastructure.imagekit.urls import build_url, build_video_url
from ..dependencies import ImageKitSignerDep, SettingsDep, VideoRepositoryDep

logger = logging.getLogger(__name__)

router = APIRouter()


class FeedItem(BaseModel):
    id: str = Field(description="Record identifier")
    title: str
    description: str
    playbackUrl: str = Field(description="ImageKit URL with the portrait transformation")
    thumbnailUrl: Optional[str] = Field(None, description="Poster image URL")
    controls: bool = Field(description="Show native playback controls")
    aspectRatio: str = Field(description="width:height of the rendition")


class FeedResponse(BaseModel):
    videos: list[FeedItem]
    total: int


@router.get(
    "",
    response_model=FeedResponse,
    status_code=status.HTTP_200_OK,
    summary="Video feed",
    description="Newest videos with ready-to-play URLs",
)
async def get_feed(
    repository: VideoRepositoryDep,
    signer: ImageKitSignerDep,
    settings: SettingsDep,
    limit: Optional[int] = Query(None, ge=1, le=200),
) -> FeedResponse:
    try:
        videos = repository.list_recent(limit=limit or settings.feed_limit)
    except Exception as e:
        logger.error("Failed to fetch feed", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch videos",
        )

    imagekit = signer.imagekit
    items = [
        FeedItem(
            id=video.id,
            title=video.title,
            description=video.description,
            playbackUrl=build_video_url(imagekit, video.video_url, video.transformation),
            thumbnailUrl=build_url(imagekit, video.poster_url),
            controls=video.controls,
            aspectRatio=video.transformation.aspect_ratio,
        )
        for video in videos
    ]

    return FeedResponse(videos=items, total=len(items))
