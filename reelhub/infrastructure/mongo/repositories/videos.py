"""
MongoDB repository for video records.

This module implements the repository pattern for video data access.
The repository:
1. Translates between Video domain objects and MongoDB documents
2. Encapsulates all queries
3. Provides a clean interface for the API layer

Documents keep the field names the web frontend's schema uses
(videoUrl, thumbnailUrl, createdAt, ...), so both can share a database.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING

from ....core.videos.models import Video, VideoTransformation

logger = logging.getLogger(__name__)


class VideoCollection(Protocol):
    """
    Protocol for the collection the repository writes to.

    Satisfied by pymongo's Collection and by MockVideoCollection.
    """

    def insert_one(self, document: dict): ...
    def find(self, filter: Optional[dict[str, Any]] = None): ...
    def find_one(self, filter: Optional[dict[str, Any]] = None) -> Optional[dict]: ...


class VideoNotFoundError(Exception):
    """Raised when a requested video doesn't exist."""
    pass


def _as_utc(value: Optional[datetime]) -> datetime:
    # pymongo returns naive datetimes unless the client is tz_aware
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class VideoRepository:
    """
    Repository for video record persistence.

    Each method corresponds to a use case the application needs:
    - create: Persist a newly published video
    - list_recent: Videos for the feed, newest first
    - get: Load a single video by ID
    """

    def __init__(self, collection: VideoCollection) -> None:
        self._collection = collection

    def create(self, video: Video) -> Video:
        """
        Insert a video record and return it with its assigned ID.

        Records are written once; there is no upsert.
        """
        document = self._to_document(video)

        try:
            result = self._collection.insert_one(document)
        except Exception as e:
            logger.error(
                "Failed to insert video",
                extra={"title": video.title, "error": str(e)},
            )
            raise

        video.id = str(result.inserted_id)

        logger.info(
            "Created video",
            extra={"video_id": video.id, "video_url": video.video_url},
        )

        return video

    def list_recent(self, limit: Optional[int] = None) -> list[Video]:
        """
        Videos sorted by creation time, newest first. Empty list when none.

        Documents that don't map to a valid Video are logged and left out,
        so one bad record can't break the feed.
        """
        cursor = self._collection.find({}).sort("createdAt", DESCENDING)
        if limit:
            cursor = cursor.limit(limit)

        videos = []
        for doc in cursor:
            try:
                videos.append(self._from_document(doc))
            except (KeyError, TypeError, ValueError) as e:
                # written by another client or before the current rules
                logger.warning(
                    "Skipping unreadable video document",
                    extra={"video_id": str(doc.get("_id")), "error": str(e)},
                )

        return videos

    def get(self, video_id: str) -> Video:
        """Load one video. Malformed IDs are reported as not found."""
        try:
            object_id = ObjectId(video_id)
        except (InvalidId, TypeError):
            raise VideoNotFoundError(f"Video {video_id} not found")

        document = self._collection.find_one({"_id": object_id})
        if document is None:
            raise VideoNotFoundError(f"Video {video_id} not found")

        try:
            return self._from_document(document)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(
                "Unreadable video document",
                extra={"video_id": video_id, "error": str(e)},
            )
            raise VideoNotFoundError(f"Video {video_id} not found")

    def ping(self) -> bool:
        """True if the database answers. Used by the readiness check."""
        try:
            self._collection.database.command("ping")
            return True
        except Exception as e:
            logger.error("Database ping failed", extra={"error": str(e)})
            return False

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    @staticmethod
    def _to_document(video: Video) -> dict[str, Any]:
        return {
            "title": video.title,
            "description": video.description,
            "videoUrl": video.video_url,
            "thumbnailUrl": video.thumbnail_url,
            "controls": video.controls,
            "transformation": {
                "height": video.transformation.height,
                "width": video.transformation.width,
                "quality": video.transformation.quality,
            },
            "createdAt": video.created_at,
            "updatedAt": video.updated_at,
        }

    @staticmethod
    def _from_document(document: dict[str, Any]) -> Video:
        transformation = document.get("transformation") or {}

        return Video(
            id=str(document["_id"]),
            title=document["title"],
            description=document["description"],
            video_url=document["videoUrl"],
            thumbnail_url=document.get("thumbnailUrl"),
            controls=document.get("controls", True),
            transformation=VideoTransformation(
                height=transformation.get("height", VideoTransformation.height),
                width=transformation.get("width", VideoTransformation.width),
                quality=transformation.get("quality", VideoTransformation.quality),
            ),
            created_at=_as_utc(document.get("createdAt")),
            updated_at=_as_utc(document.get("updatedAt")),
        )
