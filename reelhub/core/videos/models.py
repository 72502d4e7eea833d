"""
Domain models for published videos.

A video record is metadata only. The file itself lives with the media
vendor; the record keeps a reference to it plus what the uploader typed
into the form.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 500

# width, height - portrait 9:16 like every short-video feed
VIDEO_DIMENSIONS = (1080, 1920)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class VideoTransformation:
    """
    How the vendor should render the video on delivery.

    Frozen because a transformation is a value: two with the same
    dimensions and quality are interchangeable.
    """
    height: int = VIDEO_DIMENSIONS[1]
    width: int = VIDEO_DIMENSIONS[0]
    quality: int = 100

    def __post_init__(self) -> None:
        if self.height <= 0 or self.width <= 0:
            raise ValueError("Transformation dimensions must be positive")
        if not 1 <= self.quality <= 100:
            raise ValueError("Transformation quality must be between 1 and 100")

    @property
    def aspect_ratio(self) -> str:
        return f"{self.width}:{self.height}"


@dataclass
class Video:
    """
    A published video.

    Created once when the uploader publishes, then read many times by
    the feed. There is no update or delete path.
    """
    title: str
    description: str
    video_url: str
    thumbnail_url: Optional[str] = None
    controls: bool = True
    transformation: VideoTransformation = field(default_factory=VideoTransformation)
    id: Optional[str] = None  # assigned by the store on insert
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        self.title = (self.title or "").strip()
        self.description = (self.description or "").strip()
        self.video_url = (self.video_url or "").strip()

        if not TITLE_MIN_LENGTH <= len(self.title) <= TITLE_MAX_LENGTH:
            raise ValueError(
                f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters"
            )
        if not DESCRIPTION_MIN_LENGTH <= len(self.description) <= DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"Description must be between {DESCRIPTION_MIN_LENGTH} and "
                f"{DESCRIPTION_MAX_LENGTH} characters"
            )
        if not self.video_url:
            raise ValueError("Video URL cannot be empty")
        if self.thumbnail_url is not None and not self.thumbnail_url.strip():
            self.thumbnail_url = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    @property
    def poster_url(self) -> str:
        """Image shown before playback. Falls back to the video itself."""
        return self.thumbnail_url or self.video_url
