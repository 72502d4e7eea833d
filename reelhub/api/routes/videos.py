"""
Video record endpoints.

Listing is public and feeds the home page. Creating a record is the last
step of the upload flow: the file is already on ImageKit, and the body
carries its path plus the form fields.

JSON uses the same camelCase names as the stored documents
(videoUrl, thumbnailUrl, createdAt) and `_id` for the record ID.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from imagekitio import ImageKit
from pydantic import BaseModel, ConfigDict, Field

from ...core.videos.models import VIDEO_DIMENSIONS, Video, VideoTransformation
from ...core.videos.validation import validate_video_form
from ...infrastructure.imagekit.urls import build_video_url
from ...infrastructure.mongo.repositories.videos import VideoNotFoundError
from ..dependencies import AuthenticatedUser, ImageKitSignerDep, VideoRepositoryDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class TransformationModel(BaseModel):
    height: int = Field(VIDEO_DIMENSIONS[1], description="Rendered height in pixels")
    width: int = Field(VIDEO_DIMENSIONS[0], description="Rendered width in pixels")
    quality: int = Field(100, ge=1, le=100, description="Delivery quality (1-100)")


class TransformationInput(BaseModel):
    """Only quality is caller-controlled; dimensions are fixed portrait."""
    quality: Optional[int] = Field(None, ge=1, le=100)


class CreateVideoRequest(BaseModel):
    """
    Body for publishing a video.

    Fields are optional at the schema level so a missing field gets the
    same 400 the web frontend expects rather than a schema error.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    video_url: Optional[str] = Field(None, alias="videoUrl")
    thumbnail_url: Optional[str] = Field(None, alias="thumbnailUrl")
    controls: Optional[bool] = None
    transformation: Optional[TransformationInput] = None


class VideoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id", description="Record identifier")
    title: str
    description: str
    video_url: str = Field(alias="videoUrl", description="ImageKit file path or URL")
    thumbnail_url: Optional[str] = Field(None, alias="thumbnailUrl")
    controls: bool = Field(True, description="Show native playback controls")
    transformation: TransformationModel
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    playback_url: Optional[str] = Field(
        None, alias="playbackUrl", description="ImageKit URL with the portrait transformation"
    )

    @classmethod
    def from_video(cls, video: Video, imagekit: Optional[ImageKit] = None) -> "VideoResponse":
        playback_url = None
        if imagekit is not None:
            playback_url = build_video_url(imagekit, video.video_url, video.transformation)

        return cls(
            id=video.id,
            title=video.title,
            description=video.description,
            video_url=video.video_url,
            thumbnail_url=video.thumbnail_url,
            controls=video.controls,
            transformation=TransformationModel(
                height=video.transformation.height,
                width=video.transformation.width,
                quality=video.transformation.quality,
            ),
            created_at=video.created_at,
            updated_at=video.updated_at,
            playback_url=playback_url,
        )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[VideoResponse],
    status_code=status.HTTP_200_OK,
    summary="List videos",
    description="All published videos, newest first",
)
async def list_videos(
    repository: VideoRepositoryDep,
    signer: ImageKitSignerDep,
) -> list[VideoResponse]:
    try:
        videos = repository.list_recent()
    except Exception as e:
        logger.error("Failed to fetch videos", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch videos",
        )

    return [VideoResponse.from_video(video, signer.imagekit) for video in videos]


@router.post(
    "",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish a video",
    description="Store metadata for a video already uploaded to ImageKit",
)
async def create_video(
    request: CreateVideoRequest,
    api_key: AuthenticatedUser,
    repository: VideoRepositoryDep,
    signer: ImageKitSignerDep,
) -> VideoResponse:
    """
    Persist a video record.

    - 400 if title, description or videoUrl is missing
    - 422 if title/description break the length rules
    - 500 if the insert fails
    """
    if not request.title or not request.description or not request.video_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields",
        )

    errors = validate_video_form(request.title, request.description)
    if errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="; ".join(errors.values()),
        )

    quality = 100
    if request.transformation and request.transformation.quality is not None:
        quality = request.transformation.quality

    try:
        video = Video(
            title=request.title,
            description=request.description,
            video_url=request.video_url,
            thumbnail_url=request.thumbnail_url,
            controls=True if request.controls is None else request.controls,
            transformation=VideoTransformation(
                height=VIDEO_DIMENSIONS[1],
                width=VIDEO_DIMENSIONS[0],
                quality=quality,
            ),
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    try:
        video = repository.create(video)
    except Exception as e:
        logger.error("Failed to create video", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create video",
        )

    return VideoResponse.from_video(video, signer.imagekit)


@router.get(
    "/{video_id}",
    response_model=VideoResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a video",
)
async def get_video(
    video_id: str,
    repository: VideoRepositoryDep,
    signer: ImageKitSignerDep,
) -> VideoResponse:
    try:
        video = repository.get(video_id)
    except VideoNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Video not found",
        )

    return VideoResponse.from_video(video, signer.imagekit)
