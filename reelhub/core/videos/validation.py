"""
Upload form rules.

These are the checks the upload form runs before anything leaves the
uploader's machine. The messages are user-facing and shown verbatim,
so they live here next to the rules rather than in the UI layer.
"""

import mimetypes
from typing import Literal, Optional

from .models import (
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)

MAX_UPLOAD_SIZE_BYTES = 100 * 1024 * 1024

FileType = Literal["image", "video"]

# mimetypes doesn't know all of these on every platform
_VIDEO_CONTENT_TYPES = {
    "mp4": "video/mp4",
    "webm": "video/webm",
    "avi": "video/x-msvideo",
    "mov": "video/quicktime",
    "mkv": "video/x-matroska",
}


class FileValidationError(ValueError):
    """Raised when a selected file can't be uploaded."""
    pass


class FormValidationError(ValueError):
    """
    Raised when the metadata form has errors.

    Carries every failing field so the caller can show them all at once.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        super().__init__("; ".join(errors.values()))


def guess_content_type(filename: str) -> str:
    """Best-effort MIME type from the file extension."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext in _VIDEO_CONTENT_TYPES:
        return _VIDEO_CONTENT_TYPES[ext]

    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


def validate_upload_file(
    filename: str,
    content_type: Optional[str],
    size_bytes: int,
    file_type: FileType = "video",
    max_size_bytes: int = MAX_UPLOAD_SIZE_BYTES,
) -> None:
    """
    Check a file before requesting an upload credential for it.

    Only video uploads are type-checked. The size limit is inclusive.
    """
    if file_type == "video":
        if not (content_type or "").startswith("video/"):
            raise FileValidationError("Please upload a valid video file")

    if size_bytes > max_size_bytes:
        limit_mb = max_size_bytes // (1024 * 1024)
        raise FileValidationError(f"File size must be less than {limit_mb} MB")


def _check_length(
    value: Optional[str],
    label: str,
    min_length: int,
    max_length: int,
) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return f"{label} is required"
    if len(value) < min_length:
        return f"{label} must be at least {min_length} characters"
    if len(value) > max_length:
        return f"{label} must be less than {max_length} characters"
    return None


def validate_video_form(
    title: Optional[str],
    description: Optional[str],
) -> dict[str, str]:
    """
    Run the title/description rules.

    Returns field name -> first failing message. Empty dict means valid.
    """
    errors: dict[str, str] = {}

    title_error = _check_length(title, "Title", TITLE_MIN_LENGTH, TITLE_MAX_LENGTH)
    if title_error:
        errors["title"] = title_error

    description_error = _check_length(
        description, "Description", DESCRIPTION_MIN_LENGTH, DESCRIPTION_MAX_LENGTH
    )
    if description_error:
        errors["description"] = description_error

    return errors
