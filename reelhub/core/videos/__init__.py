"""
Video records, upload form rules and the publish flow.
"""

from .models import VIDEO_DIMENSIONS, Video, VideoTransformation
from .publisher import (
    PublishError,
    ServiceError,
    UploadCredential,
    UploadedFile,
    UploadError,
    VideoDraft,
    VideoPublisher,
    classify_upload_error,
)
from .validation import (
    FileValidationError,
    FormValidationError,
    validate_upload_file,
    validate_video_form,
)

__all__ = [
    "VIDEO_DIMENSIONS",
    "Video",
    "VideoTransformation",
    "PublishError",
    "ServiceError",
    "UploadCredential",
    "UploadedFile",
    "UploadError",
    "VideoDraft",
    "VideoPublisher",
    "classify_upload_error",
    "FileValidationError",
    "FormValidationError",
    "validate_upload_file",
    "validate_video_form",
]
