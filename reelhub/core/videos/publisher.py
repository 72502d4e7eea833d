"""
The upload-and-publish flow.

This is what the upload form does, expressed without a browser:

1. Check the file locally (type and size)
2. Ask our API for a short-lived signed upload credential
3. Hand the file and credential to the media vendor
4. Submit the vendor's file reference plus the form fields to our API

Every step runs once. There are no retries: a failure is classified
into a user-facing message, progress is reset, and the caller decides
whether to try again.

The publisher only knows the protocols below. The ImageKit uploader and
the HTTP client for our API live in infrastructure and are injected.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

from .models import VideoTransformation
from .validation import (
    MAX_UPLOAD_SIZE_BYTES,
    FileType,
    FormValidationError,
    guess_content_type,
    validate_upload_file,
    validate_video_form,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

UPLOAD_SUCCESS_MESSAGE = "Video uploaded successfully!"
PUBLISH_SUCCESS_MESSAGE = "Video published successfully!"
MISSING_UPLOAD_MESSAGE = "Please upload a video first"
PUBLISH_FAILED_MESSAGE = "Failed to publish video"
AUTH_FAILED_MESSAGE = "Failed to get authentication parameters"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class UploadError(Exception):
    """Base class for failures reported by a media uploader."""
    pass


class InvalidUploadRequestError(UploadError):
    """The vendor rejected the request (bad credential, bad file, expired token)."""
    pass


class UploadServerError(UploadError):
    """The vendor failed on its side."""
    pass


class UploadNetworkError(UploadError):
    """The vendor could not be reached or the connection dropped."""
    pass


class UploadCancelledError(UploadError):
    """The uploader aborted the upload."""
    pass


class ServiceError(Exception):
    """
    Raised by the API client when our own service answers with an error.

    The message is whatever the service said and is safe to show.
    """
    pass


class PublishError(Exception):
    """A step of the flow failed. The message is user-facing."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ordered: subclasses are checked before their bases
UPLOAD_ERROR_MESSAGES: list[tuple[type[Exception], str]] = [
    (InvalidUploadRequestError, "Invalid upload request. Please try again."),
    (UploadServerError, "Server error. Please try again later."),
    (UploadNetworkError, "Network error. Please check your connection."),
    (UploadCancelledError, "Upload was cancelled."),
]
GENERIC_UPLOAD_ERROR_MESSAGE = "Upload failed. Please try again."


def classify_upload_error(error: BaseException) -> str:
    """Map an upload failure to the message shown to the uploader."""
    for error_type, message in UPLOAD_ERROR_MESSAGES:
        if isinstance(error, error_type):
            return message
    return GENERIC_UPLOAD_ERROR_MESSAGE


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UploadCredential:
    """Signed, short-lived permission to upload one file to the vendor."""
    token: str
    expire: int
    signature: str
    public_key: str = ""


@dataclass(frozen=True)
class UploadedFile:
    """What the vendor tells us about a file it accepted."""
    file_id: str
    name: str
    url: str
    file_path: str
    thumbnail_url: Optional[str] = None
    size: int = 0
    file_type: str = ""
    height: Optional[int] = None
    width: Optional[int] = None


@dataclass
class VideoDraft:
    """
    The form state: what the uploader typed plus what the vendor returned.

    video_url stays empty until an upload succeeds.
    """
    title: str = ""
    description: str = ""
    video_url: str = ""
    thumbnail_url: str = ""
    controls: bool = True
    transformation: VideoTransformation = field(default_factory=VideoTransformation)

    def apply_upload(self, uploaded: UploadedFile) -> None:
        self.video_url = uploaded.file_path
        self.thumbnail_url = uploaded.thumbnail_url or uploaded.file_path

    def reset(self) -> None:
        self.title = ""
        self.description = ""
        self.video_url = ""
        self.thumbnail_url = ""

    def to_payload(self) -> dict[str, Any]:
        """Request body for the create-video endpoint."""
        return {
            "title": self.title.strip(),
            "description": self.description.strip(),
            "videoUrl": self.video_url,
            "thumbnailUrl": self.thumbnail_url or None,
            "controls": self.controls,
            "transformation": {"quality": self.transformation.quality},
        }


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class VideoService(Protocol):
    """Our own API, as seen by the uploader."""

    def get_upload_auth(self) -> UploadCredential:
        """Fetch a fresh signed upload credential."""
        ...

    def create_video(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Persist video metadata and return the stored record."""
        ...


class MediaUploader(Protocol):
    """Direct-to-vendor file upload."""

    def upload(
        self,
        file_data: bytes,
        file_name: str,
        credential: UploadCredential,
        on_progress: Optional[ProgressCallback] = None,
        abort_event: Optional[threading.Event] = None,
    ) -> UploadedFile:
        """Upload the file. Raises UploadError subclasses on failure."""
        ...


# ---------------------------------------------------------------------------
# Publisher
# ---------------------------------------------------------------------------

class VideoPublisher:
    """
    Runs the upload form flow for one form instance.

    State is the draft and the last progress value. One upload and one
    submission at a time; nothing here is shared between publishers.
    """

    def __init__(
        self,
        service: VideoService,
        uploader: MediaUploader,
        max_upload_size_bytes: int = MAX_UPLOAD_SIZE_BYTES,
        notify: Optional[Callable[[str, str], None]] = None,
    ) -> None:
        self._service = service
        self._uploader = uploader
        self._max_upload_size_bytes = max_upload_size_bytes
        self._notify = notify or (lambda message, level: None)
        self.draft = VideoDraft()
        self.progress = 0

    @property
    def can_submit(self) -> bool:
        """Mirrors the publish button: enabled once an upload has progressed."""
        return self.progress > 0

    def upload_file(
        self,
        file_data: bytes,
        file_name: str,
        content_type: Optional[str] = None,
        file_type: FileType = "video",
        on_progress: Optional[ProgressCallback] = None,
        abort_event: Optional[threading.Event] = None,
    ) -> UploadedFile:
        """
        Validate, authorize and upload a file.

        Raises FileValidationError before any network call if the file is
        rejected locally, PublishError with a classified message if the
        credential request or the vendor upload fails.
        """
        content_type = content_type or guess_content_type(file_name)
        validate_upload_file(
            filename=file_name,
            content_type=content_type,
            size_bytes=len(file_data),
            file_type=file_type,
            max_size_bytes=self._max_upload_size_bytes,
        )

        def report(percent: int) -> None:
            self.progress = percent
            if on_progress:
                on_progress(percent)

        try:
            try:
                credential = self._service.get_upload_auth()
            except Exception as e:
                raise RuntimeError(AUTH_FAILED_MESSAGE) from e

            uploaded = self._uploader.upload(
                file_data=file_data,
                file_name=file_name,
                credential=credential,
                on_progress=report,
                abort_event=abort_event,
            )
        except Exception as e:
            logger.error(
                "Upload failed",
                extra={"file_name": file_name, "error": str(e)},
            )
            report(0)
            raise PublishError(classify_upload_error(e)) from e

        self.draft.apply_upload(uploaded)
        self._notify(UPLOAD_SUCCESS_MESSAGE, "success")

        logger.info(
            "Upload complete",
            extra={"file_name": file_name, "file_path": uploaded.file_path},
        )

        return uploaded

    def submit(self, title: str, description: str) -> dict[str, Any]:
        """
        Publish the uploaded video with the given form fields.

        On success the draft is reset, like the form after publishing.
        """
        self.draft.title = title
        self.draft.description = description

        errors = validate_video_form(title, description)
        if errors:
            raise FormValidationError(errors)

        if not self.draft.video_url:
            self._notify(MISSING_UPLOAD_MESSAGE, "error")
            raise PublishError(MISSING_UPLOAD_MESSAGE)

        try:
            record = self._service.create_video(self.draft.to_payload())
        except ServiceError as e:
            message = str(e) or PUBLISH_FAILED_MESSAGE
            self._notify(message, "error")
            raise PublishError(message) from e
        except Exception as e:
            logger.error("Publish failed", extra={"error": str(e)})
            self._notify(PUBLISH_FAILED_MESSAGE, "error")
            raise PublishError(PUBLISH_FAILED_MESSAGE) from e

        self._notify(PUBLISH_SUCCESS_MESSAGE, "success")
        self.cancel()

        return record

    def cancel(self) -> None:
        """Clear the form and progress."""
        self.draft.reset()
        self.progress = 0

    def upload_and_publish(
        self,
        file_data: bytes,
        file_name: str,
        title: str,
        description: str,
        content_type: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        abort_event: Optional[threading.Event] = None,
    ) -> dict[str, Any]:
        """The whole flow in one call. Form fields are checked before uploading."""
        errors = validate_video_form(title, description)
        if errors:
            raise FormValidationError(errors)

        self.upload_file(
            file_data=file_data,
            file_name=file_name,
            content_type=content_type,
            on_progress=on_progress,
            abort_event=abort_event,
        )
        return self.submit(title, description)
